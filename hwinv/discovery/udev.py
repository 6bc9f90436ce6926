"""Serial number lookup in the udev persistent device database.

Two on-disk layouts exist:

- current: ``/run/udev/data/b<major>:<minor>``
- legacy:  ``/dev/.udev/db/block:<name>``

Both hold ``KEY=VALUE`` lines. Each layout is a lookup strategy returning
the serial, or None when its record cannot be opened; the first strategy
that opens a record decides the result.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional, TextIO

from hwinv.core.logger import get_logger
from hwinv.discovery.fields import read_attribute

logger = get_logger(__name__)

SERIAL_KEY = "E:ID_SERIAL_SHORT"

DEFAULT_DATA_DIR = Path("/run/udev/data")
DEFAULT_LEGACY_DIR = Path("/dev/.udev/db")

LookupStrategy = Callable[[str, Path], Optional[str]]


@contextmanager
def _closing(handle: TextIO, path: Path) -> Iterator[TextIO]:
    try:
        yield handle
    finally:
        try:
            handle.close()
        except OSError as e:
            logger.warning(f"Failed to close {path}: {e}")


def open_record(path: Path):
    """Open a database record for use in a with block.

    Opening errors raise immediately; a failed close is logged, not raised.
    """
    return _closing(path.open(encoding="utf-8", errors="replace"), path)


def scan_record(lines, key: str = SERIAL_KEY) -> str:
    """Return the value of *key* from ``KEY=VALUE`` lines, or ``""``.

    Lines that do not split into exactly two parts on ``=`` are skipped.
    """
    for line in lines:
        parts = line.rstrip("\r\n").split("=")
        if len(parts) == 2 and parts[0] == key:
            return parts[1]
    return ""


def _read_serial(path: Path) -> Optional[str]:
    """Serial from the record at *path*; None only if it cannot be opened."""
    try:
        record = open_record(path)
    except OSError as e:
        logger.debug(f"udev record {path} unavailable: {e}")
        return None

    with record as handle:
        try:
            return scan_record(handle)
        except OSError as e:
            logger.warning(f"Failed to read {path}: {e}")
            return ""


class UdevDatabase:
    """Read device serials from the udev database."""

    def __init__(
        self,
        data_dir: Path = DEFAULT_DATA_DIR,
        legacy_dir: Path = DEFAULT_LEGACY_DIR,
        strategies: Optional[List[LookupStrategy]] = None,
    ):
        self.data_dir = Path(data_dir)
        self.legacy_dir = Path(legacy_dir)
        if strategies is None:
            strategies = [self.lookup_current, self.lookup_legacy]
        self.strategies = strategies

    def lookup_current(self, name: str, sys_path: Path) -> Optional[str]:
        """Current layout, keyed by the ``major:minor`` in ``<sys_path>/dev``."""
        dev = read_attribute(Path(sys_path) / "dev")
        if not dev:
            return None
        return _read_serial(self.data_dir / f"b{dev}")

    def lookup_legacy(self, name: str, sys_path: Path) -> Optional[str]:
        """Legacy layout, keyed by the kernel device name."""
        return _read_serial(self.legacy_dir / f"block:{name}")

    def lookup_serial(self, name: str, sys_path: Path) -> str:
        """Return the short serial of block device *name*, or ``""``."""
        for strategy in self.strategies:
            serial = strategy(name, sys_path)
            if serial is not None:
                return serial
        logger.debug(f"No udev record for {name}")
        return ""
