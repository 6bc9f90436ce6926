"""Shared test fixtures for hwinv tests."""
import os
from pathlib import Path
from typing import Optional

import pytest

from hwinv.core.config import set_config
from hwinv.discovery.udev import UdevDatabase

PCI_TARGET = "../devices/pci0000:00/0000:00:17.0/ata{index}/host0/target0:0:0/0:0:0:0/block/{name}"


class FakeHost:
    """Builds /sys/block and udev database trees under a temp directory."""

    def __init__(self, root: Path):
        self.root = root
        self.sys_block = root / "sys" / "block"
        self.udev_data = root / "run" / "udev" / "data"
        self.udev_legacy = root / "dev" / ".udev" / "db"
        for path in (self.sys_block, self.udev_data, self.udev_legacy):
            path.mkdir(parents=True)
        self._count = 0

    def add_disk(
        self,
        name: str,
        *,
        target: Optional[str] = None,
        model: Optional[str] = None,
        vendor: Optional[str] = None,
        dev_type: Optional[str] = None,
        size: Optional[str] = None,
        dev: Optional[str] = None,
    ) -> Path:
        """Create a block device symlink and its attribute files."""
        self._count += 1
        target = target or PCI_TARGET.format(index=self._count, name=name)
        real = Path(os.path.normpath(self.sys_block / target))
        (real / "device").mkdir(parents=True)

        attributes = {
            "device/model": model,
            "device/vendor": vendor,
            "device/type": dev_type,
            "size": size,
            "dev": dev,
        }
        for relative, value in attributes.items():
            if value is not None:
                (real / relative).write_text(value + "\n")

        link = self.sys_block / name
        link.symlink_to(target)
        return link

    def add_udev_record(self, dev: str, *lines: str) -> Path:
        record = self.udev_data / f"b{dev}"
        record.write_text("".join(line + "\n" for line in lines))
        return record

    def add_legacy_udev_record(self, name: str, *lines: str) -> Path:
        record = self.udev_legacy / f"block:{name}"
        record.write_text("".join(line + "\n" for line in lines))
        return record

    def udev(self) -> UdevDatabase:
        return UdevDatabase(self.udev_data, self.udev_legacy)


@pytest.fixture
def fake_host(tmp_path):
    """Empty fake host with sysfs and udev directories."""
    return FakeHost(tmp_path)


@pytest.fixture(autouse=True)
def _reset_config():
    """Drop any global configuration a test installed."""
    yield
    set_config(None)


# Common test data
MEGACLI_PDLIST = """
Adapter #0

Enclosure Device ID: 32
Slot Number: 0
Drive's position: DiskGroup: 0, Span: 0, Arm: 0
Enclosure position: 1
Device Id: 0
WWN: 5000C500A1B2C3D4
Sequence Number: 2
Media Error Count: 0
Other Error Count: 0
Predictive Failure Count: 0
Last Predictive Failure Event Seq Number: 0
PD Type: SAS

Raw Size: 1.090 TB [0x8bba0cb0 Sectors]
Non Coerced Size: 1.090 TB [0x8baa0cb0 Sectors]
Coerced Size: 1.089 TB [0x8b94f800 Sectors]
Firmware state: Online, Spun Up
Inquiry Data: SEAGATE ST1200MM0088     N004W3D0ABCD
Device Speed: 12.0Gb/s

Enclosure Device ID: 32
Slot Number: 1
Drive's position: DiskGroup: 0, Span: 0, Arm: 1
Device Id: 1
PD Type: SATA

Raw Size: 3.638 TB [0x1d1c0beb0 Sectors]
Non Coerced Size: 3.637 TB [0x1d1b0beb0 Sectors]
Firmware state: Online, Spun Up
Inquiry Data:      WD-WCC7K1234567WDC WD40EFRX-68WT0N0          80.00A80
Device Speed: 6.0Gb/s


Exit Code: 0x00
"""


@pytest.fixture
def megacli_output():
    """Two-drive MegaCli -PDList -aALL capture."""
    return MEGACLI_PDLIST


DMIDECODE_OUTPUT = """# dmidecode 3.3
Getting SMBIOS data from sysfs.
SMBIOS 3.2.0 present.

Handle 0x0001, DMI type 1, 27 bytes
System Information
\tManufacturer: Dell Inc.
\tProduct Name: PowerEdge R640
\tVersion: Not Specified
\tSerial Number: 4X7KLM2
\tUUID: 4c4c4544-0058-3710-804b-b4c04f4c4d32
\tWake-up Type: Power Switch

Handle 0x0002, DMI type 2, 8 bytes
Base Board Information
\tManufacturer: Dell Inc.
\tProduct Name: 0H28RR
\tLocation In Chassis: Slot 03
\tFeatures:
\t\tBoard is a hosting board
\t\tBoard is replaceable

Handle 0x0300, DMI type 3, 22 bytes
Chassis Information
\tManufacturer: Dell Inc.
\tType: Rack Mount Chassis
\tVersion: PowerEdge MX7000
\tSerial Number: 9ZZ1AB2
\tHeight: 1 U

Handle 0x0400, DMI type 4, 48 bytes
Processor Information
\tSocket Designation: CPU1
\tType: Central Processor
\tManufacturer: Intel
\tVersion: Intel(R) Xeon(R) Gold 6230 CPU @ 2.10GHz
\tCore Count: 20
\tCore Enabled: 20
\tThread Count: 40
\tFlags:
\t\tFPU (Floating-point unit on-chip)
\t\tVME (Virtual mode extension)

Handle 0x1100, DMI type 17, 84 bytes
Memory Device
\tSize: 32 GB
\tForm Factor: DIMM
\tLocator: A1
\tType: DDR4
\tSpeed: 2933 MT/s
\tManufacturer: 00AD063200AD
\tSerial Number: 32A1B2C3
\tAsset Tag: 011931A1
\tPart Number: HMA84GR7CJR4N-WM

Handle 0x1101, DMI type 17, 84 bytes
Memory Device
\tSize: No Module Installed
\tForm Factor: DIMM
\tLocator: A2
\tType: Unknown
\tSpeed: Unknown

Handle 0x1102, DMI type 17, 84 bytes
Memory Device
\tSize: 16384 MB
\tForm Factor: DIMM
\tLocator: B1
\tType: DDR4
\tSpeed: Unknown
\tManufacturer: Samsung
\tSerial Number: 0F1E2D3C
\tAsset Tag:
\tPart Number: M393A2K43CB2-CVF

Handle 0x0D00, DMI type 13, 22 bytes
BIOS Language Information
\tLanguage Description Format: Long
"""


@pytest.fixture
def dmidecode_output():
    """dmidecode capture from a two-socket rack server (trimmed)."""
    return DMIDECODE_OUTPUT


# Get Device ID body from a Dell iDRAC (completion code stripped by ipmitool)
IPMI_DEVICE_ID = " 20 81 04 40 02 df a2 02 00 00 01 00 3b 00 00\n"

IPMI_LAN_RESPONSES = {
    "0x03": " 11 0a 14 1e 28\n",
    "0x05": " 11 d0 94 66 1a 2b 3c\n",
    "0x06": " 11 ff ff ff 00\n",
}


def _fake_ipmitool(cmd):
    if cmd[2:4] == ["0x06", "0x01"]:
        return IPMI_DEVICE_ID
    if cmd[2:4] == ["0x0c", "0x02"]:
        return IPMI_LAN_RESPONSES[cmd[5]]
    raise AssertionError(f"unexpected command {cmd}")


@pytest.fixture
def ipmitool():
    """Command runner answering ipmitool raw requests for a healthy BMC."""
    return _fake_ipmitool
