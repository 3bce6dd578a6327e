"""
Result types for Record operations.

Expected failure modes (a lifecycle hook refusing to continue, nothing
matching a lookup) are reported as values rather than raised. `Outcome`
wraps such a value together with an `ErrorKind` tag so callers can either
test it for truthiness, like the plain booleans the API used to return, or
inspect the tag:

    outcome = post.save()
    if not outcome:
        if outcome.error is ErrorKind.HOOK_ABORT:
            log.info("save vetoed by %s", outcome.detail)

    post.save().unwrap()  # raise instead of checking
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from simple_record.errors import ErrorKind, error_for_kind

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Value of a mutation or lookup, or the tag of why there is none.

    Truthiness follows the old boolean contract: an outcome is truthy only
    when no error is tagged and the carried value is itself truthy (for
    writes, "at least one row affected").

    :param value: Result of the underlying call (affected-rows flag for writes).
    :param error: Failure tag, ``None`` on success.
    :param detail: Free-form context, e.g. the name of the hook that aborted.
    """

    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, detail: Optional[str] = None) -> "Outcome[T]":
        return cls(error=kind, detail=detail)

    @property
    def ok(self) -> bool:
        """True when no error is tagged, regardless of the value."""
        return self.error is None

    def __bool__(self) -> bool:
        return self.error is None and bool(self.value)

    def unwrap(self) -> Optional[T]:
        """
        Return the value, or raise the exception matching the error tag.

        Raises
        ------
        HookAbortedError
            When a lifecycle hook aborted the operation.
        RecordNotFoundError
            When the lookup matched nothing.
        """
        if self.error is None:
            return self.value

        raise error_for_kind(self.error, self.detail)


__all__ = ["ErrorKind", "Outcome"]
