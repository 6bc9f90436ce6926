"""Exception types raised by hwinv probes."""


class InventoryError(Exception):
    """Base class for failures reported to the CLI user."""
    pass


class ConfigError(InventoryError):
    """Raised when configuration cannot be loaded or a value is invalid."""
    pass


class StorageError(InventoryError):
    """Base class for fatal storage enumeration failures."""
    pass


class DirectoryReadFailure(StorageError):
    """Raised when the sysfs block directory cannot be listed."""
    pass


class ProcessLaunchFailure(StorageError):
    """Raised when the RAID diagnostic command cannot run or exits non-zero."""
    pass


class DmiReadFailure(InventoryError):
    """Raised when dmidecode cannot be run."""
    pass
