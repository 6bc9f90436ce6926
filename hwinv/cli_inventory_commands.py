"""Inventory CLI commands - storage, inventory, version."""
import json
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from hwinv import __version__
from hwinv.cli_support import handle_cli_error, print_success, print_warning
from hwinv.core.config import get_config
from hwinv.core.errors import InventoryError
from hwinv.models.disk import DiskRecord

# Module-level console instance (will be set by register function)
console: Console = Console()


class OutputFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"


def render(data: Any, fmt: OutputFormat, pretty: bool = False) -> str:
    """Serialize an inventory payload as JSON or YAML."""
    if fmt is OutputFormat.YAML:
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    return json.dumps(data, indent=2 if pretty else None)


def storage_table(disks: List[DiskRecord]) -> Table:
    table = Table(title="💾 Storage Devices", show_header=True)
    table.add_column("Device", style="cyan")
    table.add_column("Manufacturer", style="blue")
    table.add_column("Model")
    table.add_column("Serial", style="dim")
    table.add_column("Size", style="green", justify="right")

    for disk in disks:
        device = f"slot {disk.slot}" if disk.is_raid_member else disk.name
        table.add_row(device, disk.manufacturer, disk.model, disk.serial_number, disk.size)
    return table


def storage(
    as_json: bool = typer.Option(False, "--json", help="Print records as JSON"),
):
    """Show local disks (from MegaCli on RAID hosts, sysfs otherwise)."""
    from hwinv.discovery.storage import StorageInventory

    try:
        disks = StorageInventory.from_config(get_config()).get_storage_info()
    except InventoryError as e:
        handle_cli_error(e, console)

    if as_json:
        typer.echo(json.dumps([disk.to_dict() for disk in disks], indent=2))
        return

    if not disks:
        print_warning(console, "No storage devices found")
        return
    console.print(storage_table(disks))


def inventory(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the record to a file"),
    fmt: OutputFormat = typer.Option(OutputFormat.JSON, "--format", "-f", help="Output format"),
    pretty: bool = typer.Option(False, "--pretty", help="Indent JSON output"),
):
    """Probe memory, CPU, chassis, system, BMC and storage.

    Examples:
        hwinv inventory --pretty
        hwinv inventory -f yaml -o /tmp/host.yml
    """
    from hwinv.discovery.hwdetect import SystemDetector

    try:
        info = SystemDetector(get_config()).detect_all()
    except InventoryError as e:
        handle_cli_error(e, console)

    text = render(info.to_dict(), fmt, pretty)
    if output is None:
        typer.echo(text)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text if text.endswith("\n") else text + "\n")
    print_success(console, f"Inventory written to: {output}")


def version():
    """Show hwinv version."""
    console.print(f"hwinv v{__version__}")


def register_inventory_commands(app: typer.Typer, shared_console: Console):
    """Register inventory commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(storage)
    app.command()(inventory)
    app.command()(version)
