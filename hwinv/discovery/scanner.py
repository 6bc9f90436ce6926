"""Line scanner over captured command output."""
import io
from typing import Iterator, Optional, Union


class TextScanner:
    """Iterate over whitespace-trimmed lines of a command's output.

    Example:
        for line in TextScanner(completed.stdout):
            if line.startswith("Slot Number:"):
                ...
    """

    def __init__(self, output: Union[bytes, str], encoding: str = "utf-8"):
        if isinstance(output, bytes):
            output = output.decode(encoding, errors="replace")
        self._stream = io.StringIO(output)

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        line = self._stream.readline()
        if not line:
            raise StopIteration
        return line.strip()

    @staticmethod
    def value_after(line: str, label: str) -> Optional[str]:
        """Return the text after *label* if *line* starts with it."""
        if not line.startswith(label):
            return None
        return line[len(label):]
