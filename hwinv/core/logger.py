"""Unified logging for hwinv with console and file output."""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from hwinv.core.errors import ConfigError

# Logs go to stderr so inventory JSON on stdout stays parseable
console = Console(stderr=True)

LOG_DIR = Path("/var/log/hwinv")
LOG_FILE = LOG_DIR / "hwinv.log"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Track if file logging has been set up
_file_logging_configured = False


def parse_log_level(level: str) -> int:
    """Translate a level name (debug, info, warn, error) to a logging level.

    Raises:
        ConfigError: If the name is not a known level
    """
    try:
        return LOG_LEVELS[level.strip().lower()]
    except KeyError:
        raise ConfigError(f"Invalid log level: {level}") from None


def set_log_level(level: str) -> None:
    """Apply a level name to the root hwinv logger and its children."""
    logging.getLogger("hwinv").setLevel(parse_log_level(level))


def setup_file_logging(log_file: Optional[str] = None, level: str = "info"):
    """Set up file logging for hwinv runs.

    Args:
        log_file: Path to log file (defaults to /var/log/hwinv/hwinv.log)
        level: Level name for the file handler

    Note:
        Falls back to /tmp if /var/log/hwinv is not writable.
    """
    global _file_logging_configured

    if _file_logging_configured:
        return

    target_log_file = Path(log_file) if log_file else LOG_FILE

    try:
        target_log_file.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target_log_file = Path("/tmp/hwinv.log")

    root_logger = logging.getLogger("hwinv")
    file_handler = logging.FileHandler(target_log_file)
    file_handler.setLevel(parse_log_level(level))

    file_formatter = logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)

    _file_logging_configured = True

    root_logger.info(f"hwinv logging initialized: {target_log_file}")


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance with console output.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger with a Rich console handler; records propagate to the
        ``hwinv`` logger so file logging and level changes apply.
    """
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    root_logger = logging.getLogger("hwinv")
    if root_logger.level == logging.NOTSET:
        root_logger.setLevel(logging.INFO)

    return logger
