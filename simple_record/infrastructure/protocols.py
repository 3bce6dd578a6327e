"""
Capability contracts the Record core consumes.

The core never talks to a driver directly. Anything that satisfies
`Connection` (the psycopg adapter in `db_factory`, or an in-memory fake in
tests) can back a Record type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from simple_record.infrastructure.query_builder import QueryBuilder, RowSet


@runtime_checkable
class QueryExecutor(Protocol):
    """Runs a built SELECT and returns its rows."""

    def fetch(self, builder: "QueryBuilder") -> "RowSet":
        ...


@runtime_checkable
class Connection(QueryExecutor, Protocol):
    """
    Write and read capability for one database session.

    Write methods return the number of affected rows. `last_insert_id`
    must report the identifier generated by the most recent `insert` issued
    through the same connection.
    """

    def insert(self, table: str, values: Mapping[str, Any]) -> int:
        ...

    def update(self, table: str, values: Mapping[str, Any], keys: Mapping[str, Any]) -> int:
        ...

    def delete(self, table: str, keys: Mapping[str, Any]) -> int:
        ...

    def last_insert_id(self) -> Any:
        ...

    def create_query_builder(self) -> "QueryBuilder":
        ...


__all__ = ["Connection", "QueryExecutor"]
