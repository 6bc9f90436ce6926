"""hwinv runtime configuration and settings."""
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml

from hwinv.core.errors import ConfigError

# Default config search paths (ordered by proximity to current run)
CONFIG_PATHS = [
    "./hwinv.yml",
    "/etc/hwinv/hwinv.yml",
]

ENV_PREFIX = "HWINV_"


@dataclass
class HwinvConfig:
    """Runtime configuration for hwinv probes.

    Attributes:
        sys_block: Kernel block device directory (default: /sys/block)
        udev_data_dir: Current udev database directory (default: /run/udev/data)
        udev_legacy_dir: Legacy udev database directory (default: /dev/.udev/db)
        megacli_path: MegaCli executable; its presence selects the RAID path
        dmidecode_path: dmidecode executable
        ipmitool_path: ipmitool executable
        ipmi_channel: LAN channel queried on the BMC (default: 1)
        command_timeout: Timeout in seconds for external commands (default: 60)
        log_file: Optional log file path
        log_level: Level name for console and file logging (default: info)
    """

    sys_block: str = "/sys/block"
    udev_data_dir: str = "/run/udev/data"
    udev_legacy_dir: str = "/dev/.udev/db"
    megacli_path: str = "/opt/MegaRAID/MegaCli/MegaCli64"
    dmidecode_path: str = "dmidecode"
    ipmitool_path: str = "ipmitool"
    ipmi_channel: int = 1
    command_timeout: float = 60.0
    log_file: Optional[str] = None
    log_level: str = "info"

    @classmethod
    def from_env(cls, base: Optional["HwinvConfig"] = None) -> "HwinvConfig":
        """Create config from ``HWINV_*`` environment variables.

        Environment variables:
            HWINV_SYS_BLOCK, HWINV_UDEV_DATA_DIR, HWINV_UDEV_LEGACY_DIR,
            HWINV_MEGACLI_PATH, HWINV_DMIDECODE_PATH, HWINV_IPMITOOL_PATH,
            HWINV_IPMI_CHANNEL, HWINV_COMMAND_TIMEOUT, HWINV_LOG_FILE,
            HWINV_LOG_LEVEL

        Args:
            base: Values to start from (defaults when omitted)
        """
        config = base or cls()
        overrides = {}
        for field in fields(cls):
            raw = os.getenv(ENV_PREFIX + field.name.upper())
            if raw is None:
                continue
            overrides[field.name] = _coerce(field.name, raw)
        return replace(config, **overrides)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "HwinvConfig":
        """Load config from a YAML file, then apply environment overrides.

        Args:
            path: YAML file whose top-level keys are field names. When
                omitted only defaults and the environment are used.

        Raises:
            ConfigError: If the file is unreadable, malformed, or has
                unknown keys
        """
        if path is None:
            return cls.from_env()

        try:
            data = yaml.safe_load(Path(path).read_text())
        except OSError as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping")

        known = {field.name for field in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")

        values = {key: _coerce(key, value) for key, value in data.items()}
        return cls.from_env(cls(**values))


def _coerce(name: str, value):
    """Convert a raw config value to the type of field *name*."""
    if value is None:
        return None
    try:
        if name == "ipmi_channel":
            return int(value)
        if name == "command_timeout":
            return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for {name}: {value!r}") from None
    return str(value)


def find_config(config_path: Optional[str] = None) -> Optional[str]:
    """Locate the active hwinv configuration file, if any."""
    if config_path:
        return config_path

    if env_config := os.environ.get("HWINV_CONFIG"):
        return env_config

    for path in CONFIG_PATHS:
        if Path(path).exists():
            return path

    return None


# Global config instance (can be overridden)
_config: Optional[HwinvConfig] = None


def get_config() -> HwinvConfig:
    """Get the global hwinv configuration.

    Returns:
        HwinvConfig instance (loads file and environment if not set)
    """
    global _config
    if _config is None:
        _config = HwinvConfig.load(find_config())
    return _config


def set_config(config: Optional[HwinvConfig]):
    """Set the global hwinv configuration.

    Args:
        config: HwinvConfig instance to use globally, or None to reset
    """
    global _config
    _config = config
