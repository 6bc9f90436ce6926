#!/usr/bin/env python3
"""hwinv CLI - Hardware inventory for physical hosts."""
from typing import Optional

import typer
from rich.console import Console

from hwinv.cli_inventory_commands import register_inventory_commands
from hwinv.cli_support import handle_cli_error
from hwinv.core.config import HwinvConfig, find_config, set_config
from hwinv.core.errors import ConfigError
from hwinv.core.logger import get_logger, set_log_level, setup_file_logging

app = typer.Typer(
    name="hwinv",
    help="""hwinv - Hardware inventory for physical hosts

Memory, CPU, chassis, system board, BMC and disks in one record.

Quick start:
  hwinv storage                  # List local disks
  hwinv inventory --pretty       # Full record as JSON
  hwinv inventory -f yaml        # Full record as YAML
""",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@app.callback()
def main(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to hwinv.yml"),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Log level: debug, info, warn, error"
    ),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also log to this file"),
):
    """Load configuration and logging before any command runs."""
    path = find_config(config_path)
    try:
        config = HwinvConfig.load(path)
        if log_level:
            config.log_level = log_level
        if log_file:
            config.log_file = log_file
        set_log_level(config.log_level)
        if config.log_file:
            setup_file_logging(config.log_file, config.log_level)
    except ConfigError as e:
        handle_cli_error(e, console)

    logger.debug(f"Configuration loaded from {path or 'defaults and environment'}")
    set_config(config)


register_inventory_commands(app, console)

if __name__ == "__main__":
    app()
