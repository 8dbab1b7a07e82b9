import json
import logging

import pytest

from ddlflow.logging import get_logger, setup_logging


@pytest.fixture
def restore_loggers():
    names = ("ddlflow", "sqlalchemy.engine")
    saved = {
        name: (logging.getLogger(name).level, logging.getLogger(name).propagate, list(logging.getLogger(name).handlers))
        for name in names
    }
    yield
    for name, (level, propagate, handlers) in saved.items():
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = propagate
        logger.handlers = handlers


def test_setup_logging_writes_json_lines(restore_loggers, capsys):
    setup_logging("debug", sql_level="warning")

    get_logger("ddlflow.tests").info("Migration applied", extra={"version": 4})

    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "Migration applied"
    assert payload["version"] == 4
    assert payload["sdk_name"] == "ddlflow"
    assert logging.getLogger("ddlflow").level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_uses_settings(restore_loggers, monkeypatch):
    monkeypatch.setenv("DDLFLOW_LOG_LEVEL", "warning")
    monkeypatch.setenv("DDLFLOW_ECHO_SQL", "true")
    from ddlflow.settings import _reload_settings
    _reload_settings()

    setup_logging()

    assert logging.getLogger("ddlflow").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
