from __future__ import annotations

import json
import re
import sys
from typing import Any, Dict, List, Optional, Type

import typer

from simple_record.config import get_settings
from simple_record.infrastructure.db_factory import bind_connection, get_sync_connection
from simple_record.infrastructure.query_builder import check_identifier
from simple_record.record import Record
from simple_record.reporter import print_rows
from simple_record.utils.logging import configure_logging

app = typer.Typer(help="SimpleRecord CLI.")


def _coerce(value: str) -> Any:
    """Turn digit-only strings into ints so they compare against integer columns."""
    stripped = value.strip()
    if re.fullmatch(r"-?\d+", stripped):
        return int(stripped)
    return stripped


def _parse_where(clauses: List[str]) -> Dict[str, Any]:
    criteria: Dict[str, Any] = {}
    for clause in clauses:
        column, sep, raw = clause.partition("=")
        if not sep or not column.strip():
            raise typer.BadParameter(f"Expected column=value, got '{clause}'", param_hint="--where")
        if "," in raw:
            criteria[column.strip()] = [_coerce(part) for part in raw.split(",")]
        else:
            criteria[column.strip()] = _coerce(raw)
    return criteria


def _parse_order_by(clauses: List[str]) -> Dict[str, str]:
    order_by: Dict[str, str] = {}
    for clause in clauses:
        column, _, direction = clause.partition(":")
        order_by[column.strip()] = (direction or "ASC").strip().upper()
    return order_by


def _record_type_for(table: str) -> Type[Record]:
    """Build a Record type bound to an arbitrary table; columns arrive as extras."""
    check_identifier(table)
    return type("AdHocRecord", (Record,), {"TABLE_NAME": table, "__module__": __name__})


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}:***@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"env={settings.app_env} log_level={settings.log_level} json_logs={settings.log_json}"
    )


@app.command()
def ping() -> None:
    """
    Check that the configured database is reachable.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    with get_sync_connection(settings) as conn:
        conn.execute("SELECT 1").fetchone()
    typer.echo(f"OK {settings.db_host}:{settings.db_port}/{settings.db_name}")


@app.command()
def find(
    table: str = typer.Argument(..., help="Table to query."),
    where: List[str] = typer.Option(
        [],
        "--where",
        "-w",
        help="Criterion column=value; comma separated values match any of them.",
    ),
    order_by: List[str] = typer.Option(
        [],
        "--order-by",
        "-o",
        help="Sort column, optionally column:DESC. Repeat for several.",
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum rows."),
    offset: Optional[int] = typer.Option(None, "--offset", help="Rows to skip."),
    as_json: bool = typer.Option(False, "--json", help="Print rows as JSON."),
) -> None:
    """
    Find rows in TABLE matching every --where criterion.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    criteria = _parse_where(where)
    ordering = _parse_order_by(order_by)
    record_type = _record_type_for(table)

    conn = bind_connection(record_type=record_type)
    try:
        records = record_type.find_by(criteria, ordering, limit=limit, offset=offset)
    finally:
        close = getattr(conn, "close", None)
        if callable(close):
            close()

    rows = [record.model_dump() for record in records]
    if as_json:
        typer.echo(json.dumps(rows, indent=2, default=str))
    else:
        print_rows(rows, title=table)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
