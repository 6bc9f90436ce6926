"""Physical drive enumeration through the MegaRAID MegaCli tool."""
import subprocess
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from hwinv.core.errors import ProcessLaunchFailure
from hwinv.core.logger import get_logger
from hwinv.discovery.fields import parse_inquiry_data, parse_raw_size
from hwinv.discovery.scanner import TextScanner
from hwinv.models.disk import DiskRecord

logger = get_logger(__name__)

DEFAULT_MEGACLI = Path("/opt/MegaRAID/MegaCli/MegaCli64")
PDLIST_ARGS = ("-PDList", "-aALL")

SLOT_LABEL = "Slot Number:"
RAW_SIZE_LABEL = "Raw Size:"
INQUIRY_LABEL = "Inquiry Data:"

RunCommand = Callable[[Sequence[str]], Union[bytes, str]]


class ParserState(Enum):
    """Whether a drive record is being built."""
    IDLE = "idle"
    RECORD_OPEN = "record_open"


class PDListParser:
    """Rebuild drive records from ``MegaCli -PDList`` output.

    Each ``Slot Number:`` line opens a record; the previous record is
    emitted at that point if its slot is non-empty, and the last one at end
    of input. Other recognized lines update the open record.
    """

    def __init__(self):
        self.state = ParserState.IDLE
        self.disks: List[DiskRecord] = []
        self._disk: Optional[DiskRecord] = None

    def feed(self, line: str) -> None:
        slot = TextScanner.value_after(line, SLOT_LABEL)
        if slot is not None:
            self._flush()
            self._disk = DiskRecord(slot=slot.strip())
            self.state = ParserState.RECORD_OPEN
            return

        if self.state is ParserState.IDLE:
            return

        raw_size = TextScanner.value_after(line, RAW_SIZE_LABEL)
        if raw_size is not None:
            self._disk.size = parse_raw_size(raw_size)
            return

        inquiry = TextScanner.value_after(line, INQUIRY_LABEL)
        if inquiry is not None:
            identity = parse_inquiry_data(inquiry)
            if identity:
                self._disk.manufacturer, self._disk.model, self._disk.serial_number = identity

    def close(self) -> List[DiskRecord]:
        """Emit the last record and return everything parsed."""
        self._flush()
        return self.disks

    def _flush(self) -> None:
        if self.state is ParserState.RECORD_OPEN and self._disk.slot:
            self.disks.append(self._disk)
        self._disk = None
        self.state = ParserState.IDLE


def parse_pdlist(output: Union[bytes, str]) -> List[DiskRecord]:
    """Parse captured ``MegaCli -PDList -aALL`` output."""
    parser = PDListParser()
    for line in TextScanner(output):
        parser.feed(line)
    return parser.close()


class RAIDDiskEnumerator:
    """Enumerate physical drives behind a MegaRAID controller."""

    def __init__(
        self,
        megacli: Path = DEFAULT_MEGACLI,
        run_cmd: Optional[RunCommand] = None,
        timeout: Optional[float] = None,
    ):
        self.megacli = Path(megacli)
        self.timeout = timeout
        self.run_cmd = run_cmd or self._run

    def enumerate(self) -> List[DiskRecord]:
        """Return one record per populated slot.

        Raises:
            ProcessLaunchFailure: If MegaCli cannot run or exits non-zero
        """
        output = self.run_cmd([str(self.megacli), *PDLIST_ARGS])
        disks = parse_pdlist(output)
        logger.debug(f"MegaCli reported {len(disks)} physical drives")
        return disks

    def _run(self, cmd: Sequence[str]) -> bytes:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd, capture_output=True, check=True, timeout=self.timeout
            )
        except subprocess.CalledProcessError as e:
            raise ProcessLaunchFailure(
                f"error running MegaCli: exit status {e.returncode}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ProcessLaunchFailure(
                f"error running MegaCli: timed out after {e.timeout}s"
            ) from e
        except OSError as e:
            raise ProcessLaunchFailure(f"error running MegaCli: {e}") from e
        return result.stdout
