"""Core logging setup and configuration.

This module wires structured JSON logging with context propagation and
OpenTelemetry correlation while keeping configuration declarative via
``logging.config.dictConfig``.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set


def _build_reserved_keys() -> Set[str]:
    """Collect standard ``LogRecord`` attributes to avoid duplicating them."""
    probe = logging.LogRecord(
        name="ddlflow.probe",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="",
        args=(),
        exc_info=None,
    )
    reserved = set(probe.__dict__.keys())
    reserved.update({"asctime", "message", "otelTraceID", "otelSpanID"})
    return reserved


_RESERVED_LOG_RECORD_KEYS = _build_reserved_keys()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CustomJsonFormatter(logging.Formatter):
    """JSON formatter that enriches log entries with context and trace data."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {}

        for key, value in record.__dict__.items():
            if key not in _RESERVED_LOG_RECORD_KEYS and value is not None:
                log_record[key] = value

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()

        if hasattr(record, "otelTraceID"):
            log_record["trace_id"] = record.otelTraceID

        if hasattr(record, "otelSpanID"):
            log_record["span_id"] = record.otelSpanID

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def setup_logging(level: Optional[str] = None, sql_level: Optional[str] = None) -> None:
    """Configure structured logging backed by ``logging.config.dictConfig``.

    Both the ``ddlflow`` logger and SQLAlchemy's engine logger write JSON
    lines to stdout through the same handler.

    Args:
        level: Base log level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            ``settings.log_level`` when omitted.
        sql_level: Level of ``sqlalchemy.engine``; INFO when
            ``settings.echo_sql`` is set, WARNING otherwise.
    """
    if level is None or sql_level is None:
        from ddlflow.settings import get_settings
        settings = get_settings()
        level = level or settings.log_level
        sql_level = sql_level or ("INFO" if settings.echo_sql else "WARNING")

    config_dict: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "ddlflow_json": {
                "()": "ddlflow.logging.logger.CustomJsonFormatter",
            }
        },
        "filters": {
            "ddlflow_context": {
                "()": "ddlflow.logging.filters.ContextFilter",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "ddlflow_json",
                "filters": ["ddlflow_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "ddlflow": {
                "level": level.upper(),
                "handlers": ["console"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": sql_level.upper(),
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(config_dict)
