"""
Infrastructure package for SimpleRecord.

Holds the capability contracts the Record core depends on, the
driver-agnostic query builder, and the psycopg-backed implementation plus
its startup wiring. Keep this layer focused on I/O; mapping rules live in
`simple_record.record`.
"""

from simple_record.infrastructure.db_factory import (
    PsycopgConnection,
    bind_connection,
    get_sync_connection,
    open_connection,
)
from simple_record.infrastructure.protocols import Connection, QueryExecutor
from simple_record.infrastructure.query_builder import (
    Comparison,
    ParameterType,
    QueryBuilder,
    RowSet,
)

__all__ = [
    "Comparison",
    "Connection",
    "ParameterType",
    "PsycopgConnection",
    "QueryBuilder",
    "QueryExecutor",
    "RowSet",
    "bind_connection",
    "get_sync_connection",
    "open_connection",
]
