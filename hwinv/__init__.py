"""hwinv - hardware inventory for physical hosts."""

__version__ = "0.1.0"
