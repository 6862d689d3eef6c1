"""
Rendering functions for transferrer output.

This module handles all pretty-printing and table formatting.
Core functions return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Dict, Optional

console = Console()


def render_transfer_table(changes: Dict[str, Dict[str, Optional[str]]], dry_run: bool = False) -> None:
    """
    Render transferred packages as a pretty table.

    Args:
        changes: Package name -> {'old': url, 'new': url}
        dry_run: Title the table as a preview
    """
    if not changes:
        console.print("[yellow]No packages transferred.[/yellow]")
        return

    table = Table(
        title="Planned Transfers" if dry_run else "Transfers",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("Package", style="cyan")
    table.add_column("Old Location", style="dim")
    table.add_column("New Location", style="green")

    for name, change in changes.items():
        table.add_row(name, change.get('old') or "", change.get('new') or "")

    console.print(table)
    console.print(f"\n[bold]{len(changes)}[/bold] package(s)")
