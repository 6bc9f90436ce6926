"""Hardware discovery: DMI tables, BMC, and storage devices."""
from hwinv.discovery.hwdetect import SystemDetector
from hwinv.discovery.storage import StorageInventory, get_storage_info

__all__ = ['SystemDetector', 'StorageInventory', 'get_storage_info']
