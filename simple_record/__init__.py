"""
SimpleRecord - a minimal Active Record layer over a relational table.

Extend `Record`, declare the columns as typed fields, wire a connection once
at startup, and each instance can insert, update and delete itself while the
class finds rows by criteria:

- Table names derived from class names (or a TABLE_NAME override)
- Insert-or-update `save()` wrapped by lifecycle hooks
- `find`, `find_by`, `find_one_by`, `find_all`, `count_by`
- Parameterized query building, never string-interpolated values

No relations, transactions or caching: this is not a full ORM.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from simple_record.config import Settings, get_settings
from simple_record.errors import (
    AmbiguousResultError,
    ConnectionNotConfiguredError,
    ErrorKind,
    HookAbortedError,
    IllegalDeleteError,
    InvalidIdentifierError,
    RecordError,
    RecordNotFoundError,
)
from simple_record.hooks import LifecycleHooks, RecordHooks
from simple_record.infrastructure import (
    Comparison,
    Connection,
    ParameterType,
    PsycopgConnection,
    QueryBuilder,
    RowSet,
    bind_connection,
)
from simple_record.record import Record
from simple_record.results import Outcome
from simple_record.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Core
    "Record",
    "LifecycleHooks",
    "RecordHooks",
    "Outcome",
    # Errors
    "ErrorKind",
    "RecordError",
    "AmbiguousResultError",
    "ConnectionNotConfiguredError",
    "HookAbortedError",
    "IllegalDeleteError",
    "InvalidIdentifierError",
    "RecordNotFoundError",
    # Infrastructure
    "Connection",
    "Comparison",
    "ParameterType",
    "PsycopgConnection",
    "QueryBuilder",
    "RowSet",
    "bind_connection",
    # Logging
    "configure_logging",
    "get_logger",
]
