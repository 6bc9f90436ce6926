"""Storage device models."""
from dataclasses import asdict, dataclass
from typing import Dict


@dataclass
class DiskRecord:
    """A storage device found by sysfs or RAID enumeration.

    Simple enumeration fills ``name``; RAID enumeration fills ``slot``.
    """
    name: str = ""            # sda, nvme0n1
    model: str = ""           # Model without manufacturer prefix
    manufacturer: str = ""    # Normalized casing (Seagate)
    serial_number: str = ""
    size: str = ""            # Display string ("4000.787 GB", "1.090 TB")
    slot: str = ""            # RAID bay identifier

    @property
    def is_raid_member(self) -> bool:
        """True if the record came from the RAID controller."""
        return bool(self.slot)

    def to_dict(self) -> Dict[str, str]:
        """JSON-ready form, empty fields omitted."""
        return {key: value for key, value in asdict(self).items() if value}
