"""Logging filters for context injection.

This module provides filters that inject context variables into log records,
enabling correlation of logs across a migration run and its units.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Optional

from ddlflow.__version__ import __version__
from ddlflow.telemetry import current_trace_ids

run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)
migration_version_var: ContextVar[Optional[int]] = ContextVar("migration_version", default=None)


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records.

    This filter extracts values from context variables and the active
    OpenTelemetry span and adds them to log records.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        setattr(record, "run_id", run_id_var.get())
        setattr(record, "migration_version", migration_version_var.get())
        setattr(record, "sdk_name", "ddlflow")
        setattr(record, "sdk_version", __version__)

        ids = current_trace_ids()
        if ids is not None:
            setattr(record, "otelTraceID", ids[0])
            setattr(record, "otelSpanID", ids[1])

        return True


def set_run_context(
    run_id: Optional[str] = None,
    migration_version: Optional[int] = None,
) -> None:
    """Set run context variables."""
    if run_id is not None:
        run_id_var.set(run_id)
    if migration_version is not None:
        migration_version_var.set(migration_version)


def clear_run_context() -> None:
    """Clear all run context variables."""
    run_id_var.set(None)
    migration_version_var.set(None)
