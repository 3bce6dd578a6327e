"""
Database connection factory and psycopg adapter for SimpleRecord.

Provides the concrete `Connection` capability the Record core consumes:
`PsycopgConnection` wraps one dedicated psycopg 3 connection in autocommit
mode. A single session (not a pool) is required because `last_insert_id()`
reads PostgreSQL's session-scoped `lastval()`.

`bind_connection()` is the one startup wiring step: it opens a connection
from settings (with retry for transient failures, using tenacity) and binds
it to a Record type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Type

import psycopg
from psycopg.rows import dict_row
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from simple_record.config import Settings, get_settings
from simple_record.infrastructure.query_builder import QueryBuilder, RowSet, check_identifier
from simple_record.utils.logging import get_logger

if TYPE_CHECKING:
    from simple_record.record import Record

log = get_logger(__name__)


class PsycopgConnection:
    """
    `Connection` implementation backed by a psycopg connection.

    Statements are built from validated identifiers and pyformat
    placeholders; values always travel as bound parameters.
    """

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn

    @property
    def raw(self) -> psycopg.Connection:
        """The underlying psycopg connection."""
        return self._conn

    def _execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> int:
        log.debug(sql, extra={"params": dict(params or {})})
        with self._conn.cursor() as cur:
            cur.execute(sql, params)
            return cur.rowcount

    def insert(self, table: str, values: Mapping[str, Any]) -> int:
        check_identifier(table)
        if not values:
            return self._execute(f"INSERT INTO {table} DEFAULT VALUES")

        columns = [check_identifier(column) for column in values]
        placeholders = ", ".join(f"%({column})s" for column in columns)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        return self._execute(sql, values)

    def update(self, table: str, values: Mapping[str, Any], keys: Mapping[str, Any]) -> int:
        check_identifier(table)
        if not values:
            log.debug("Nothing to update", extra={"table": table})
            return 0

        assignments = ", ".join(f"{check_identifier(c)} = %(set_{c})s" for c in values)
        conditions = " AND ".join(f"{check_identifier(c)} = %(key_{c})s" for c in keys)
        params = {f"set_{c}": v for c, v in values.items()}
        params.update({f"key_{c}": v for c, v in keys.items()})

        sql = f"UPDATE {table} SET {assignments}"
        if conditions:
            sql += f" WHERE {conditions}"
        return self._execute(sql, params)

    def delete(self, table: str, keys: Mapping[str, Any]) -> int:
        check_identifier(table)
        if not keys:
            raise ValueError("Empty criteria was used, expected non-empty criteria")

        conditions = " AND ".join(f"{check_identifier(c)} = %({c})s" for c in keys)
        return self._execute(f"DELETE FROM {table} WHERE {conditions}", keys)

    def last_insert_id(self) -> Any:
        with self._conn.cursor() as cur:
            cur.execute("SELECT lastval()")
            row = cur.fetchone()
        return row[0] if row else None

    def create_query_builder(self) -> QueryBuilder:
        return QueryBuilder(self)

    def fetch(self, builder: QueryBuilder) -> RowSet:
        sql = builder.get_sql()
        params = builder.get_parameters()
        log.debug(sql, extra={"params": params})
        with self._conn.cursor(row_factory=dict_row) as cur:
            cur.execute(sql, params or None)
            return RowSet(cur.fetchall())

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "PsycopgConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        self.close()


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(settings: Optional[Settings] = None) -> psycopg.Connection:
    """
    Acquire a dedicated autocommit connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Returns
    -------
    Connection
        A new psycopg connection instance.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    settings = settings or get_settings()
    return psycopg.connect(
        settings.dsn,
        autocommit=True,
        connect_timeout=settings.db_connect_timeout,
    )


def open_connection(settings: Optional[Settings] = None) -> PsycopgConnection:
    """Open a `PsycopgConnection` from settings."""
    return PsycopgConnection(get_sync_connection(settings))


def bind_connection(
    connection: Optional[Any] = None,
    record_type: Optional[Type["Record"]] = None,
    settings: Optional[Settings] = None,
) -> Any:
    """
    Wire a connection to a Record type (the base `Record` by default).

    Opens a `PsycopgConnection` from settings when none is given. Every
    subclass of `record_type` that has not bound its own connection uses
    this one.

    Returns
    -------
    Connection
        The bound connection.
    """
    if record_type is None:
        from simple_record.record import Record

        record_type = Record

    if connection is None:
        connection = open_connection(settings)
    record_type.connection(connection)
    log.info(
        f"Connection bound to {record_type.__name__}",
        extra={"record_type": record_type.__name__},
    )
    return connection


__all__ = [
    "PsycopgConnection",
    "bind_connection",
    "get_sync_connection",
    "open_connection",
]
