"""Baseboard management controller facts over IPMI.

Requests go through ``ipmitool raw`` and the hex byte responses are
decoded here. The completion code is not part of ipmitool's output.
"""
import subprocess
from typing import Callable, List, Optional, Sequence

from hwinv.core.logger import get_logger
from hwinv.models.system import BmcInfo

logger = get_logger(__name__)

NETFN_APP = "0x06"
CMD_GET_DEVICE_ID = "0x01"
NETFN_TRANSPORT = "0x0c"
CMD_GET_LAN_CONFIG = "0x02"

# LAN configuration parameter selectors
LAN_IP_ADDRESS = 3
LAN_MAC_ADDRESS = 5
LAN_SUBNET_MASK = 6

UNKNOWN = "Unknown"


class IpmiError(Exception):
    """Raised when a raw IPMI request fails."""
    pass


def parse_raw_response(output: str) -> List[int]:
    """Decode ipmitool's whitespace separated hex bytes."""
    try:
        return [int(token, 16) for token in output.split()]
    except ValueError as e:
        raise IpmiError(f"unexpected ipmitool output: {output.strip()!r}") from e


def decode_device_id(data: Sequence[int]) -> dict:
    """Decode a Get Device ID response body.

    Returns:
        Mapping of BmcInfo field names to display strings
    """
    if len(data) < 11:
        raise IpmiError(f"short Get Device ID response ({len(data)} bytes)")

    ipmi_version = data[4]
    manufacturer_id = data[6] | (data[7] << 8) | (data[8] << 16)
    product_id = data[9] | (data[10] << 8)

    return {
        "device_id": str(data[0]),
        "device_revision": str(data[1] & 0x0F),
        "firmware_revision": f"{data[2] & 0x3F}.{data[3]:02x}",
        "ipmi_version": f"{ipmi_version & 0x0F:x}.{(ipmi_version & 0xF0) >> 4:x}",
        "manufacturer_id": f"{manufacturer_id} (0x{manufacturer_id:04X})",
        "product_id": f"{product_id} (0x{product_id:04X})",
    }


def decode_ipv4(data: Sequence[int]) -> str:
    """Dotted quad from a LAN parameter response (revision byte first)."""
    value = data[1:]
    if len(value) != 4:
        return UNKNOWN
    return ".".join(str(octet) for octet in value)


def decode_mac(data: Sequence[int]) -> str:
    value = data[1:]
    if len(value) != 6:
        return UNKNOWN
    return ":".join(f"{octet:02x}" for octet in value)


class BmcReader:
    """Query the local BMC through ipmitool."""

    def __init__(
        self,
        ipmitool: str = "ipmitool",
        channel: int = 1,
        run_cmd: Optional[Callable[[Sequence[str]], str]] = None,
        timeout: Optional[float] = None,
    ):
        self.ipmitool = ipmitool
        self.channel = channel
        self.timeout = timeout
        self.run_cmd = run_cmd or self._run

    def raw(self, *args: str) -> List[int]:
        return parse_raw_response(self.run_cmd([self.ipmitool, "raw", *args]))

    def device_info(self) -> dict:
        return decode_device_id(self.raw(NETFN_APP, CMD_GET_DEVICE_ID))

    def lan_parameter(self, selector: int) -> List[int]:
        return self.raw(
            NETFN_TRANSPORT, CMD_GET_LAN_CONFIG,
            f"0x{self.channel:02x}", f"0x{selector:02x}", "0x00", "0x00",
        )

    def lan_config(self) -> dict:
        return {
            "ip_address": decode_ipv4(self.lan_parameter(LAN_IP_ADDRESS)),
            "mac_address": decode_mac(self.lan_parameter(LAN_MAC_ADDRESS)),
            "subnet_mask": decode_ipv4(self.lan_parameter(LAN_SUBNET_MASK)),
        }

    def get_bmc_info(self) -> BmcInfo:
        """Collect BMC facts; an unreachable BMC leaves fields empty."""
        values = {}
        for name, query in (("LAN configuration", self.lan_config),
                            ("device ID", self.device_info)):
            try:
                values.update(query())
            except IpmiError as e:
                logger.warning(f"Failed to get BMC {name}: {e}")
        return BmcInfo(**values)

    def _run(self, cmd: Sequence[str]) -> str:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, check=True, timeout=self.timeout
            )
        except subprocess.CalledProcessError as e:
            raise IpmiError(f"{' '.join(cmd)} exited with status {e.returncode}") from e
        except subprocess.TimeoutExpired as e:
            raise IpmiError(f"{' '.join(cmd)} timed out after {e.timeout}s") from e
        except OSError as e:
            raise IpmiError(str(e)) from e
        return result.stdout
