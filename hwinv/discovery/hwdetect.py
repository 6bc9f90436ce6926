import json
from pathlib import Path
from typing import Optional

from hwinv.core.config import HwinvConfig
from hwinv.core.logger import get_logger
from hwinv.discovery.dmidecode import DmiDecoder
from hwinv.discovery.ipmi import BmcReader
from hwinv.discovery.storage import StorageInventory
from hwinv.models.system import FullSystemInfo

logger = get_logger(__name__)


class SystemDetector:
    """
    Collects the hardware inventory record for this host.
    Used by the inventory and storage CLI commands.
    """

    def __init__(
        self,
        config: Optional[HwinvConfig] = None,
        dmi: Optional[DmiDecoder] = None,
        bmc: Optional[BmcReader] = None,
        storage: Optional[StorageInventory] = None,
    ):
        self.config = config or HwinvConfig()
        self.dmi = dmi or DmiDecoder(
            self.config.dmidecode_path, timeout=self.config.command_timeout
        )
        self.bmc = bmc or BmcReader(
            self.config.ipmitool_path,
            channel=self.config.ipmi_channel,
            timeout=self.config.command_timeout,
        )
        self.storage = storage or StorageInventory.from_config(self.config)

    # -----------------------------
    #  Core detection entry point
    # -----------------------------
    def detect_all(self) -> FullSystemInfo:
        """Probe every component.

        Raises:
            DmiReadFailure: If dmidecode cannot run
            StorageError: If storage enumeration fails
        """
        info = FullSystemInfo(
            memory=self.dmi.memory_devices(),
            cpu=self.dmi.cpus(),
            ipmi=self.bmc.get_bmc_info(),
            chassis=self.dmi.chassis(),
            system=self.dmi.systems(),
            storage=self.storage.get_storage_info(),
        )
        logger.debug(
            f"Detected {len(info.memory)} DIMMs, {len(info.cpu)} CPUs, "
            f"{len(info.storage)} disks"
        )
        return info

    # -----------------------------
    #  Persistence helpers
    # -----------------------------
    def save_state(self, dest: Path, info: Optional[FullSystemInfo] = None) -> Path:
        """Write the inventory record as JSON to *dest*."""
        info = info or self.detect_all()
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("w") as f:
            json.dump(info.to_dict(), f, indent=2)
        return dest
