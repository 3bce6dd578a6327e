"""
Pytest configuration for SimpleRecord.

Provides fixtures for:
- An in-memory Connection that interprets built queries (unit tests)
- Settings and a live PostgreSQL connection (integration tests)
"""

from __future__ import annotations

import logging
import os
from collections import defaultdict
from typing import Any, Dict, Generator, List, Mapping, Optional, Tuple

import psycopg
import pytest

from simple_record.config import Settings, get_settings
from simple_record.infrastructure.query_builder import Comparison, QueryBuilder, RowSet
from simple_record.record import Record


class InMemoryConnection:
    """
    Connection fake holding tables as lists of dicts.

    Ids auto-increment per table starting at 1. Queries are evaluated from the
    builder's structured parts, so only `Comparison` predicates are supported.
    Every call is appended to `calls` for assertions.
    """

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.calls: List[Tuple[Any, ...]] = []
        self._sequences: Dict[str, int] = defaultdict(int)
        self._last_id: Optional[int] = None

    def seed(self, table: str, *rows: Mapping[str, Any]) -> None:
        for row in rows:
            self._sequences[table] += 1
            self.tables[table].append({"id": self._sequences[table], **row})

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]

    def insert(self, table: str, values: Mapping[str, Any]) -> int:
        self.calls.append(("insert", table, dict(values)))
        self._sequences[table] += 1
        self._last_id = self._sequences[table]
        self.tables[table].append({"id": self._last_id, **values})
        return 1

    def update(self, table: str, values: Mapping[str, Any], keys: Mapping[str, Any]) -> int:
        self.calls.append(("update", table, dict(values), dict(keys)))
        affected = 0
        for row in self.tables[table]:
            if all(row.get(column) == value for column, value in keys.items()):
                row.update(values)
                affected += 1
        return affected

    def delete(self, table: str, keys: Mapping[str, Any]) -> int:
        self.calls.append(("delete", table, dict(keys)))
        kept = [
            row
            for row in self.tables[table]
            if not all(row.get(column) == value for column, value in keys.items())
        ]
        affected = len(self.tables[table]) - len(kept)
        self.tables[table] = kept
        return affected

    def last_insert_id(self) -> Optional[int]:
        self.calls.append(("last_insert_id",))
        return self._last_id

    def create_query_builder(self) -> QueryBuilder:
        return QueryBuilder(self)

    def fetch(self, builder: QueryBuilder) -> RowSet:
        self.calls.append(("fetch", builder.get_sql(), builder.get_parameters()))
        rows = [dict(row) for row in self.tables[builder.table]]

        for predicate in builder.wheres:
            assert isinstance(predicate, Comparison), "raw SQL predicates are not supported"
            value = builder.get_parameter(predicate.parameter)
            if predicate.operator == "IN":
                rows = [row for row in rows if row.get(predicate.column) in value]
            else:
                rows = [row for row in rows if row.get(predicate.column) == value]

        for column, direction in reversed(builder.order_by):
            rows.sort(key=lambda row: row[column], reverse=direction == "DESC")

        if builder.first_result:
            rows = rows[builder.first_result :]
        if builder.max_results is not None:
            rows = rows[: builder.max_results]

        if builder.columns == ["COUNT(*)"]:
            return RowSet([{"count": len(rows)}])
        return RowSet(rows)


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """
    Drop stream handlers a test installed through configure_logging().
    """
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def memory_db() -> Generator[InMemoryConnection, None, None]:
    """
    Bind a fresh in-memory connection to every Record type for one test.
    """
    conn = InMemoryConnection()
    Record.connection(conn)
    try:
        yield conn
    finally:
        Record.connection(None)


@pytest.fixture
def fresh_settings() -> Generator[None, None, None]:
    """
    Clear the cached Settings before and after a test that changes the environment.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "simple_record"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def db_connection_available(test_settings: Settings) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_settings.dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_settings: Settings, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_settings.dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()
