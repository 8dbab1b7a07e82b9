"""Logging infrastructure for ddlflow.

This module provides structured logging with JSON output, run context
tracking and OpenTelemetry trace correlation.
"""

from ddlflow.logging.filters import ContextFilter, clear_run_context, set_run_context
from ddlflow.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
    "set_run_context",
    "clear_run_context",
]
