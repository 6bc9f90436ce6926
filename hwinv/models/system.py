"""Host hardware models built from DMI tables and the BMC."""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from hwinv.models.disk import DiskRecord


@dataclass
class MemoryDevice:
    """A populated memory slot (DMI type 17)."""
    size: int = 0             # MB
    form_factor: str = ""
    speed: int = 0            # MT/s
    type: str = ""
    manufacturer: str = ""
    serial_number: str = ""
    asset_tag: str = ""
    part_number: str = ""
    device_locator: str = ""


@dataclass
class CPUInfo:
    """A processor socket (DMI type 4)."""
    manufacturer: str = ""
    socket_designation: str = ""
    version: str = ""
    core_count: int = 0
    thread_count: int = 0


@dataclass
class ChassisInfo:
    """Chassis enclosure (DMI type 3)."""
    version: str = ""
    serial_number: str = ""
    height: str = ""
    manufacturer: str = ""


@dataclass
class SystemInfo:
    """System identity (DMI type 1) with its baseboard location (type 2)."""
    manufacturer: str = ""
    product_name: str = ""
    version: str = ""
    serial_number: str = ""
    location_in_chassis: str = ""


# JSON keys used by inventory consumers for BMC fields
_BMC_KEYS = {
    "device_id": "deviceID",
    "device_revision": "deviceRevision",
    "firmware_revision": "firmwareRevision",
    "ipmi_version": "ipmiVersion",
    "manufacturer_id": "manufacturerID",
    "product_id": "productID",
    "ip_address": "ipAddress",
    "subnet_mask": "subnetMask",
    "mac_address": "macAddress",
}


@dataclass
class BmcInfo:
    """Baseboard management controller identity and LAN settings."""
    device_id: str = ""
    device_revision: str = ""
    firmware_revision: str = ""
    ipmi_version: str = ""
    manufacturer_id: str = ""
    product_id: str = ""
    ip_address: str = ""
    subnet_mask: str = ""
    mac_address: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {_BMC_KEYS[key]: value for key, value in asdict(self).items()}


@dataclass
class FullSystemInfo:
    """Complete inventory record for one host."""
    memory: List[MemoryDevice] = field(default_factory=list)
    cpu: List[CPUInfo] = field(default_factory=list)
    ipmi: BmcInfo = field(default_factory=BmcInfo)
    chassis: List[ChassisInfo] = field(default_factory=list)
    system: List[SystemInfo] = field(default_factory=list)
    storage: List[DiskRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form of the whole record."""
        return {
            "memory": [asdict(item) for item in self.memory],
            "cpu": [asdict(item) for item in self.cpu],
            "ipmi": self.ipmi.to_dict(),
            "chassis": [asdict(item) for item in self.chassis],
            "system": [asdict(item) for item in self.system],
            "storage": [disk.to_dict() for disk in self.storage],
        }
