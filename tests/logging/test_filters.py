import json
import logging

from ddlflow.logging import (
    ContextFilter,
    CustomJsonFormatter,
    clear_run_context,
    set_run_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="sample",
        args=(),
        exc_info=None,
    )


def test_context_filter_uses_run_context():
    set_run_context(run_id="run-1", migration_version=3)
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert record.run_id == "run-1"
        assert record.migration_version == 3
        assert record.sdk_name == "ddlflow"
    finally:
        clear_run_context()


def test_set_run_context_keeps_unset_values():
    set_run_context(run_id="run-2")
    set_run_context(migration_version=5)
    try:
        record = _record()
        ContextFilter().filter(record)
        assert record.run_id == "run-2"
        assert record.migration_version == 5
    finally:
        clear_run_context()


def test_context_filter_no_context_is_graceful():
    clear_run_context()
    record = _record()
    assert ContextFilter().filter(record)
    assert record.run_id is None
    assert not hasattr(record, "otelTraceID")


def test_json_formatter_includes_extra_fields():
    record = _record()
    record.version = 2
    record.run_id = None
    payload = json.loads(CustomJsonFormatter().format(record))

    assert payload["message"] == "sample"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["version"] == 2
    assert "run_id" not in payload
