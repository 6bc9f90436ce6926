"""Shared utilities for hwinv CLI modules."""
from __future__ import annotations

import typer
from rich.console import Console


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {e}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    """Print warning message with consistent formatting."""
    console.print(f"[yellow]{prefix}[/yellow] {message}")
