"""
Exception hierarchy for SimpleRecord.

Only programmer-error conditions are raised (deleting an unsaved record, a
single-row lookup matching several rows, using a Record type before any
connection was wired). Expected failures travel as `Outcome` values; see
`simple_record.results`. Both channels share the `ErrorKind` tags defined
here.

Storage-layer errors raised by the driver are never wrapped.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Tags shared by failed outcomes and raised `RecordError`s."""

    HOOK_ABORT = "hook_abort"
    PRECONDITION_VIOLATION = "precondition_violation"
    AMBIGUOUS_RESULT = "ambiguous_result"
    NOT_FOUND = "not_found"


class RecordError(Exception):
    """Base structured error for SimpleRecord."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "kind": self.kind.value,
            "details": self.details,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(kind={self.kind.value!r}, message={self.message!r})"


class HookAbortedError(RecordError):
    def __init__(self, hook: Optional[str] = None) -> None:
        message = f"operation aborted by {hook}" if hook else "operation aborted by hook"
        super().__init__(message, kind=ErrorKind.HOOK_ABORT, details={"hook": hook})


class IllegalDeleteError(RecordError):
    def __init__(self, table: Optional[str] = None) -> None:
        super().__init__(
            "cannot delete without id",
            kind=ErrorKind.PRECONDITION_VIOLATION,
            details={"table": table},
        )


class ConnectionNotConfiguredError(RecordError):
    def __init__(self, record_type: str) -> None:
        super().__init__(
            f"no connection configured for {record_type}; call connection() at startup",
            kind=ErrorKind.PRECONDITION_VIOLATION,
            details={"record_type": record_type},
        )


class AmbiguousResultError(RecordError):
    def __init__(self, table: str, criteria: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            f"found more than one row in {table}",
            kind=ErrorKind.AMBIGUOUS_RESULT,
            details={"table": table, "criteria": criteria or {}},
        )


class RecordNotFoundError(RecordError):
    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(detail or "record not found", kind=ErrorKind.NOT_FOUND)


class InvalidIdentifierError(RecordError, ValueError):
    """Raised for table/column names that cannot be embedded in SQL safely."""

    def __init__(self, identifier: str) -> None:
        super().__init__(
            f"invalid SQL identifier: {identifier!r}",
            kind=ErrorKind.PRECONDITION_VIOLATION,
            details={"identifier": identifier},
        )


def error_for_kind(kind: ErrorKind, detail: Optional[str] = None) -> RecordError:
    """Build the exception a failed `Outcome` turns into on `unwrap()`."""
    if kind is ErrorKind.HOOK_ABORT:
        return HookAbortedError(detail)
    if kind is ErrorKind.NOT_FOUND:
        return RecordNotFoundError(detail)
    return RecordError(detail or kind.value, kind=kind)


__all__ = [
    "ErrorKind",
    "RecordError",
    "HookAbortedError",
    "IllegalDeleteError",
    "ConnectionNotConfiguredError",
    "AmbiguousResultError",
    "RecordNotFoundError",
    "InvalidIdentifierError",
    "error_for_kind",
]
