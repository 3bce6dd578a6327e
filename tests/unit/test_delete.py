from __future__ import annotations

import pytest

from simple_record.errors import ErrorKind, IllegalDeleteError
from tests.conftest import InMemoryConnection
from tests.stubs import HookProbe, Post

FIRST_ID = 1


def test_delete_saved_record(memory_db: InMemoryConnection) -> None:
    post = Post(slug="slug", title="title")
    post.save()

    result = post.delete()

    assert result
    assert memory_db.tables["post"] == []
    assert memory_db.calls[-1] == ("delete", "post", {"id": FIRST_ID})


def test_delete_without_id_raises(memory_db: InMemoryConnection) -> None:
    with pytest.raises(IllegalDeleteError, match="cannot delete without id") as exc_info:
        Post().delete()

    assert exc_info.value.kind is ErrorKind.PRECONDITION_VIOLATION
    assert memory_db.calls == []


def test_delete_with_zero_id_reaches_the_connection(memory_db: InMemoryConnection) -> None:
    post = Post(id=0, slug="zero")

    assert post.is_new()
    result = post.delete()

    assert result.ok
    assert memory_db.calls == [("delete", "post", {"id": 0})]


def test_delete_missing_row_is_falsy(memory_db: InMemoryConnection) -> None:
    result = Post(id=99).delete()

    assert not result
    assert result.ok


def test_before_delete_false_aborts_before_id_check(memory_db: InMemoryConnection) -> None:
    probe = HookProbe().refuse("before_delete")

    result = probe.delete()

    assert not result
    assert result.error is ErrorKind.HOOK_ABORT
    assert result.detail == "before_delete"
    assert memory_db.calls == []


def test_after_delete_false_triggers_compensating_save(memory_db: InMemoryConnection) -> None:
    memory_db.seed("probe", {"name": "keep me"})
    probe = HookProbe(id=FIRST_ID, name="keep me").refuse("after_delete")

    result = probe.delete()

    assert not result
    assert result.detail == "after_delete"
    assert probe.calls == [
        "before_delete",
        "after_delete",
        "before_save",
        "before_update",
        "after_update",
        "after_save",
    ]
    assert memory_db.operations() == ["delete", "update"]


def test_compensating_save_does_not_restore_the_row(memory_db: InMemoryConnection) -> None:
    # The record still carries its id, so the re-save is an UPDATE of a row
    # that no longer exists. Kept as the documented behaviour, not a restore.
    memory_db.seed("probe", {"name": "gone"})
    probe = HookProbe(id=FIRST_ID, name="gone").refuse("after_delete")

    probe.delete()

    assert memory_db.tables["probe"] == []
