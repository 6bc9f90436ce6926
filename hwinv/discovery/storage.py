"""Storage inventory: choose between RAID and plain sysfs enumeration."""
from pathlib import Path
from typing import List, Optional

from hwinv.core.config import HwinvConfig
from hwinv.core.logger import get_logger
from hwinv.discovery.megaraid import DEFAULT_MEGACLI, RAIDDiskEnumerator
from hwinv.discovery.sysfs import SimpleDiskEnumerator
from hwinv.discovery.udev import UdevDatabase
from hwinv.models.disk import DiskRecord

logger = get_logger(__name__)


class StorageInventory:
    """Report the host's disks from exactly one source.

    When the MegaCli executable exists the host is treated as hardware
    RAID and only the controller's view is reported.
    """

    def __init__(
        self,
        simple: Optional[SimpleDiskEnumerator] = None,
        raid: Optional[RAIDDiskEnumerator] = None,
        megacli: Path = DEFAULT_MEGACLI,
    ):
        self.megacli = Path(megacli)
        self.simple = simple or SimpleDiskEnumerator()
        self.raid = raid or RAIDDiskEnumerator(self.megacli)

    @classmethod
    def from_config(cls, config: HwinvConfig) -> "StorageInventory":
        """Build enumerators from configured paths and timeout."""
        udev = UdevDatabase(Path(config.udev_data_dir), Path(config.udev_legacy_dir))
        return cls(
            simple=SimpleDiskEnumerator(Path(config.sys_block), udev),
            raid=RAIDDiskEnumerator(Path(config.megacli_path), timeout=config.command_timeout),
            megacli=Path(config.megacli_path),
        )

    def has_raid(self) -> bool:
        """True if the MegaCli executable is installed."""
        return self.megacli.exists()

    def get_storage_info(self) -> List[DiskRecord]:
        """Return the host's disks.

        Raises:
            DirectoryReadFailure: If /sys/block cannot be read
            ProcessLaunchFailure: If MegaCli fails on a RAID host
        """
        if self.has_raid():
            logger.debug(f"Found {self.megacli}, using RAID enumeration")
            return self.raid.enumerate()
        return self.simple.enumerate()


def get_storage_info(config: Optional[HwinvConfig] = None) -> List[DiskRecord]:
    """Enumerate storage with the given (or default) configuration."""
    return StorageInventory.from_config(config or HwinvConfig()).get_storage_info()
