from __future__ import annotations

import json
import logging

import pytest

from simple_record.utils.logging import JsonFormatter, _json_formatter, configure_logging
from tests.conftest import InMemoryConnection
from tests.stubs import HookProbe, Post

EXPECTED_ID = 1


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.table = "post"
    record.operation = "insert"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["table"] == "post"
    assert payload["operation"] == "insert"
    assert "pathname" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"id": EXPECTED_ID}

    payload = json.loads(_json_formatter(record))

    assert payload["id"] == EXPECTED_ID


def test_configure_logging_json_uses_json_formatter() -> None:
    configure_logging(level="DEBUG", json_logs=True)
    try:
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging(level="WARNING")


def test_save_logs_insert_at_debug(
    memory_db: InMemoryConnection, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.DEBUG, logger="simple_record.record"):
        Post(slug="s").save()

    record = next(r for r in caplog.records if r.getMessage() == "[INSERT] post")
    assert record.table == "post"
    assert record.operation == "insert"
    assert record.id == EXPECTED_ID


def test_compensating_save_logs_warning(
    memory_db: InMemoryConnection, caplog: pytest.LogCaptureFixture
) -> None:
    memory_db.seed("probe", {"name": "x"})

    with caplog.at_level(logging.WARNING, logger="simple_record.record"):
        HookProbe(id=EXPECTED_ID, name="x").refuse("after_delete").delete()

    assert any("saving record again" in r.getMessage() for r in caplog.records)
