"""
Lifecycle hook contract for Record types.

`RecordHooks` names the nine extension points a Record calls around its
operations. `LifecycleHooks` supplies no-op defaults so a concrete type only
implements the hooks it needs:

    class Post(Record):
        slug: Optional[str] = None

        def before_save(self) -> bool:
            return bool(self.slug)

Any ``before_*`` hook returning False aborts the operation before anything
is written. An ``after_*`` hook returning False makes the operation report
failure, but the write it follows has already happened.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

HOOK_NAMES = (
    "before_save",
    "before_insert",
    "before_update",
    "before_delete",
    "after_fetch",
    "after_save",
    "after_insert",
    "after_update",
    "after_delete",
)


@runtime_checkable
class RecordHooks(Protocol):
    def before_save(self) -> bool: ...

    def before_insert(self) -> bool: ...

    def before_update(self) -> bool: ...

    def before_delete(self) -> bool: ...

    def after_fetch(self) -> bool: ...

    def after_save(self) -> bool: ...

    def after_insert(self) -> bool: ...

    def after_update(self) -> bool: ...

    def after_delete(self) -> bool: ...


class LifecycleHooks:
    """Default implementations: every hook succeeds and does nothing."""

    def before_save(self) -> bool:
        return True

    def before_insert(self) -> bool:
        return True

    def before_update(self) -> bool:
        return True

    def before_delete(self) -> bool:
        return True

    def after_fetch(self) -> bool:
        return True

    def after_save(self) -> bool:
        return True

    def after_insert(self) -> bool:
        return True

    def after_update(self) -> bool:
        return True

    def after_delete(self) -> bool:
        return True


__all__ = ["HOOK_NAMES", "LifecycleHooks", "RecordHooks"]
