"""Field extraction helpers shared by the sysfs and RAID enumerators."""
import re
from pathlib import Path
from typing import Optional, Tuple

# 512-byte sectors per decimal gigabyte
SECTORS_PER_GB = 1953125

UNKNOWN_MODEL = "Unknown"
GENERIC_VENDORS = {"ATA"}

_SECTOR_COUNT_RE = re.compile(r"[0-9]+")


def read_attribute(path: Path) -> str:
    """Read a one-line sysfs attribute, stripped.

    Missing or unreadable attributes read as an empty string.
    """
    try:
        return path.read_text(errors="replace").strip()
    except OSError:
        return ""


def normalize_manufacturer(manufacturer: str) -> str:
    """Uppercase the first character and lowercase the rest."""
    if not manufacturer:
        return manufacturer
    return manufacturer[:1].upper() + manufacturer[1:].lower()


def split_model(model_full: str) -> Tuple[str, str]:
    """Split a sysfs model string into (manufacturer guess, model).

    ``"WDC WD40EFRX-68WT0N0"`` gives ``("WDC", "WD40EFRX-68WT0N0")``.
    Remaining tokens are joined without a separator; a single token is
    taken as the manufacturer with an unknown model.
    """
    parts = model_full.split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], UNKNOWN_MODEL
    return parts[0], "".join(parts[1:])


def vendor_overrides(vendor: str) -> bool:
    """True if a sysfs vendor value should replace the model-derived guess.

    PCI-style IDs (``0x1af4``) and the generic ``ATA`` placeholder never do.
    """
    return bool(vendor) and not vendor.startswith("0x") and vendor not in GENERIC_VENDORS


def sectors_to_size(raw: str) -> str:
    """Format a sysfs sector count as a GB display string."""
    raw = raw.strip()
    sectors = int(raw) if _SECTOR_COUNT_RE.fullmatch(raw) else 0
    if sectors > 0:
        return f"{sectors / SECTORS_PER_GB:.3f} GB"
    return "0 GB"


def parse_raw_size(value: str) -> str:
    """Take a MegaCli size value up to the first bracket.

    ``" 1.090 TB [0x1ba0f3a0 Sectors]"`` gives ``"1.090 TB"``.
    """
    return value.split("[", 1)[0].strip()


def parse_inquiry_data(value: str) -> Optional[Tuple[str, str, str]]:
    """Split MegaCli inquiry data into (manufacturer, model, serial).

    Tokens are whitespace separated with the vendor first, so models that
    contain spaces shift the serial. Returns None with fewer than three
    tokens.
    """
    parts = value.split()
    if len(parts) < 3:
        return None
    return normalize_manufacturer(parts[0]), parts[1], parts[2]
