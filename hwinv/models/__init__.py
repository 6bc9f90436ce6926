"""Data models for hwinv."""
from hwinv.models.disk import DiskRecord
from hwinv.models.system import (
    BmcInfo,
    ChassisInfo,
    CPUInfo,
    FullSystemInfo,
    MemoryDevice,
    SystemInfo,
)

__all__ = [
    'DiskRecord',
    'BmcInfo',
    'ChassisInfo',
    'CPUInfo',
    'FullSystemInfo',
    'MemoryDevice',
    'SystemInfo',
]
