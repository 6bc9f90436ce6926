"""DMI/SMBIOS tables read through dmidecode."""
import collections
import re
import subprocess
from typing import Any, Callable, Dict, List, Optional, Sequence

from hwinv.core.errors import DmiReadFailure
from hwinv.core.logger import get_logger
from hwinv.models.system import ChassisInfo, CPUInfo, MemoryDevice, SystemInfo

logger = get_logger(__name__)

_HANDLE_RE = re.compile(r"^Handle\s+(.+),\s+DMI\s+type\s+(\d+),\s+(\d+)\s+bytes$")
_RECORD_KV_RE = re.compile(r"^\t([^\t].*?):\s+(.*)$")
_RECORD_LIST_RE = re.compile(r"^\t([^\t].*):$")
_LIST_ELEMENT_RE = re.compile(r"^\t\t(.+)$")
_NUMBER_RE = re.compile(r"^(\d+)\s*(\S*)")

DMI_TYPES = {
    1: "System",
    2: "Baseboard",
    3: "Chassis",
    4: "Processor",
    17: "Memory Device",
}

# Memory sizes are reported in MB
_SIZE_UNITS_MB = {"kB": 1 / 1024, "KB": 1 / 1024, "MB": 1, "GB": 1024, "TB": 1024 * 1024}

DmiTables = Dict[str, List[Dict[str, Any]]]


def parse_dmidecode(output: str) -> DmiTables:
    """Group dmidecode handle records by DMI type name.

    Types hwinv does not use are dropped.
    """
    tables: DmiTables = collections.OrderedDict()
    for record in output.split("\n\n"):
        lines = record.strip("\n").splitlines()
        if len(lines) < 2:
            continue
        match = _HANDLE_RE.match(lines[0])
        if not match:
            continue
        dmi_type = int(match.group(2))
        if dmi_type not in DMI_TYPES:
            continue
        tables.setdefault(DMI_TYPES[dmi_type], []).append(_parse_handle_record(lines))
    return tables


def _parse_handle_record(lines: List[str]) -> Dict[str, Any]:
    data: Dict[str, Any] = collections.OrderedDict()
    data["_title"] = lines[1]
    list_name = None
    for line in lines[2:]:
        element = _LIST_ELEMENT_RE.match(line)
        if list_name and element:
            data[list_name].append(element.group(1).strip())
            continue
        list_name = None

        kv = _RECORD_KV_RE.match(line)
        if kv:
            data[kv.group(1)] = kv.group(2).strip()
            continue
        header = _RECORD_LIST_RE.match(line)
        if header:
            list_name = header.group(1).strip()
            data[list_name] = []

    # A header with no elements is an empty value ("Asset Tag:")
    for key, value in data.items():
        if value == []:
            data[key] = ""
    return data


def _first_word(value: str) -> str:
    return value.split(" ")[0]


def _to_int(value: Optional[str]) -> int:
    match = _NUMBER_RE.match(value or "")
    return int(match.group(1)) if match else 0


def parse_memory_size(value: Optional[str]) -> int:
    """Return a DMI memory size in MB, 0 for empty or unknown slots."""
    match = _NUMBER_RE.match(value or "")
    if not match:
        return 0
    factor = _SIZE_UNITS_MB.get(match.group(2), 0)
    return int(int(match.group(1)) * factor)


def memory_devices(tables: DmiTables) -> List[MemoryDevice]:
    devices = []
    for record in tables.get("Memory Device", []):
        size = parse_memory_size(record.get("Size"))
        if size == 0:
            continue
        devices.append(MemoryDevice(
            size=size,
            form_factor=record.get("Form Factor", ""),
            speed=_to_int(record.get("Speed")),
            type=record.get("Type", ""),
            manufacturer=record.get("Manufacturer", ""),
            serial_number=record.get("Serial Number", ""),
            asset_tag=record.get("Asset Tag", ""),
            part_number=record.get("Part Number", "").strip(),
            device_locator=record.get("Locator", ""),
        ))
    return devices


def cpus(tables: DmiTables) -> List[CPUInfo]:
    return [
        CPUInfo(
            manufacturer=record.get("Manufacturer", "").strip(" "),
            socket_designation=record.get("Socket Designation", ""),
            version=record.get("Version", ""),
            core_count=_to_int(record.get("Core Count")),
            thread_count=_to_int(record.get("Thread Count")),
        )
        for record in tables.get("Processor", [])
    ]


def chassis(tables: DmiTables) -> List[ChassisInfo]:
    return [
        ChassisInfo(
            version=record.get("Version", ""),
            serial_number=record.get("Serial Number", ""),
            height=record.get("Height", "Unspecified"),
            manufacturer=_first_word(record.get("Manufacturer", "")),
        )
        for record in tables.get("Chassis", [])
    ]


def systems(tables: DmiTables) -> List[SystemInfo]:
    """System records, each paired with the baseboard at the same index."""
    baseboards = tables.get("Baseboard", [])
    result = []
    for i, record in enumerate(tables.get("System", [])):
        location = baseboards[i].get("Location In Chassis", "") if i < len(baseboards) else ""
        result.append(SystemInfo(
            manufacturer=_first_word(record.get("Manufacturer", "")),
            product_name=record.get("Product Name", ""),
            version=record.get("Version", ""),
            serial_number=record.get("Serial Number", ""),
            location_in_chassis=location,
        ))
    return result


class DmiDecoder:
    """Run dmidecode once and expose its tables as hwinv models."""

    def __init__(
        self,
        dmidecode: str = "dmidecode",
        run_cmd: Optional[Callable[[Sequence[str]], str]] = None,
        timeout: Optional[float] = None,
    ):
        self.dmidecode = dmidecode
        self.timeout = timeout
        self.run_cmd = run_cmd or self._run
        self._tables: Optional[DmiTables] = None

    @property
    def tables(self) -> DmiTables:
        if self._tables is None:
            self._tables = parse_dmidecode(self.run_cmd([self.dmidecode]))
        return self._tables

    def memory_devices(self) -> List[MemoryDevice]:
        return memory_devices(self.tables)

    def cpus(self) -> List[CPUInfo]:
        return cpus(self.tables)

    def chassis(self) -> List[ChassisInfo]:
        return chassis(self.tables)

    def systems(self) -> List[SystemInfo]:
        return systems(self.tables)

    def _run(self, cmd: Sequence[str]) -> str:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, errors="replace",
                check=True, timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            raise DmiReadFailure(
                f"error running dmidecode: exit status {e.returncode}: {e.stderr.strip()}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise DmiReadFailure(f"error running dmidecode: timed out after {e.timeout}s") from e
        except OSError as e:
            raise DmiReadFailure(f"error running dmidecode: {e}") from e
        return result.stdout
