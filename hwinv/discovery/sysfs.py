"""Disk enumeration from the kernel's /sys/block directory."""
import os
from pathlib import Path
from typing import List, Optional

from hwinv.core.errors import DirectoryReadFailure
from hwinv.core.logger import get_logger
from hwinv.discovery.fields import (
    normalize_manufacturer,
    read_attribute,
    sectors_to_size,
    split_model,
    vendor_overrides,
)
from hwinv.discovery.udev import UdevDatabase
from hwinv.models.disk import DiskRecord

logger = get_logger(__name__)

DEFAULT_SYS_BLOCK = Path("/sys/block")

VIRTUAL_PREFIX = "../devices/virtual/"
FLOPPY_PREFIX = "../devices/platform/floppy"
# SCSI peripheral type for CD/DVD drives
OPTICAL_TYPE = "5"


class SimpleDiskEnumerator:
    """Build DiskRecords for the physical disks listed in /sys/block."""

    def __init__(
        self,
        sys_block: Path = DEFAULT_SYS_BLOCK,
        udev: Optional[UdevDatabase] = None,
    ):
        self.sys_block = Path(sys_block)
        self.udev = udev or UdevDatabase()

    def enumerate(self) -> List[DiskRecord]:
        """Return one record per non-virtual, non-removable-media disk.

        Raises:
            DirectoryReadFailure: If the block directory cannot be listed
        """
        try:
            names = sorted(os.listdir(self.sys_block))
        except OSError as e:
            raise DirectoryReadFailure(f"error reading {self.sys_block}: {e}") from e

        disks = []
        for name in names:
            fullpath = self.sys_block / name
            try:
                target = os.readlink(fullpath)
            except OSError:
                continue

            reason = self._skip_reason(fullpath, target)
            if reason:
                logger.debug(f"Skipping {name}: {reason}")
                continue

            disks.append(self._build_record(name, fullpath))
        return disks

    def _skip_reason(self, fullpath: Path, target: str) -> Optional[str]:
        if target.startswith(VIRTUAL_PREFIX):
            return "virtual device"
        if target.startswith(FLOPPY_PREFIX):
            return "floppy device"
        if read_attribute(fullpath / "device" / "type") == OPTICAL_TYPE:
            return "optical device"
        return None

    def _build_record(self, name: str, fullpath: Path) -> DiskRecord:
        manufacturer, model = split_model(read_attribute(fullpath / "device" / "model"))

        vendor = read_attribute(fullpath / "device" / "vendor")
        if vendor_overrides(vendor):
            manufacturer = vendor

        return DiskRecord(
            name=name,
            model=model,
            manufacturer=normalize_manufacturer(manufacturer),
            serial_number=self.udev.lookup_serial(name, fullpath),
            size=sectors_to_size(read_attribute(fullpath / "size")),
        )
