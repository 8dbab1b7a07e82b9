"""OpenTelemetry helpers for instrumentation.

Only the OpenTelemetry API is required. Without an SDK configured by the
host application every tracer and meter is a no-op.
"""

from typing import Optional, Tuple

from opentelemetry import metrics, trace

from ddlflow.__version__ import __version__

__all__ = [
    "get_tracer",
    "get_meter",
    "current_trace_ids",
]

INSTRUMENTATION_NAME = "ddlflow"


def get_tracer(name: str = INSTRUMENTATION_NAME, version: Optional[str] = None):
    """Return a tracer from the active provider, versioned with ddlflow."""
    return trace.get_tracer(name, version or __version__)


def get_meter(name: str = INSTRUMENTATION_NAME, version: Optional[str] = None):
    return metrics.get_meter(name, version or __version__)


def current_trace_ids() -> Optional[Tuple[str, str]]:
    """Hex trace and span ids of the active span, or None outside a span."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x"), format(span_context.span_id, "016x")
