from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table


def _format_cell(value: Any) -> str:
    if value is None:
        return "[dim]NULL[/dim]"
    return str(value)


def print_rows(
    rows: List[Dict[str, Any]],
    title: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render fetched rows as a rich table, one column per key of the first row.
    """
    console = console or Console()

    if not rows:
        console.print("[yellow]No rows matched.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        caption=f"{len(rows)} row(s)",
    )

    columns = list(rows[0].keys())
    for column in columns:
        style = "cyan" if column == "id" else None
        justify = "right" if column == "id" else "left"
        table.add_column(column, style=style, justify=justify, no_wrap=column == "id")

    for row in rows:
        table.add_row(*(_format_cell(row.get(column)) for column in columns))

    console.print(table)


__all__ = ["print_rows"]
