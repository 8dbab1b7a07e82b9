import functools
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar

from opentelemetry.trace import SpanKind, Status, StatusCode

from ddlflow.telemetry import get_tracer


F = TypeVar('F', bound=Callable[..., Any])

logger = None


def _get_logger():
    """Get logger instance lazily."""
    global logger
    if logger is None:
        from ddlflow.logging import get_logger
        logger = get_logger(__name__)
    return logger


def _attribute_value(value: Any) -> Any:
    """Coerce a value into something a span attribute accepts."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (list, tuple)):
        return [_attribute_value(v) for v in value]
    return str(value)


def traced(
    span_name: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    attribute_getter: Optional[Callable[..., Optional[Dict[str, Any]]]] = None,
) -> Callable[[F], F]:
    """Run a function inside a span of the ``ddlflow`` tracer.

    Args:
        span_name: Span name; the module-qualified function name by default.
        kind: Span kind, defaults to INTERNAL.
        attributes: Static span attributes.
        attribute_getter: Called with the function's arguments to build
            per-call attributes. Enum values are recorded by value.

    A failing call records the exception, marks the span as an error and,
    for ``DDLFlowError``, adds ``ddlflow.error_code``.
    """

    def decorator(func: F) -> F:
        name = span_name or f"{func.__module__}.{func.__qualname__}"

        def _collect_attributes(args: tuple, kwargs: dict) -> Dict[str, Any]:
            collected: Dict[str, Any] = dict(attributes or {})

            if attribute_getter:
                try:
                    collected.update(attribute_getter(*args, **kwargs) or {})
                except Exception as exc:  # pragma: no cover
                    _get_logger().warning(
                        "Trace attribute getter failed",
                        extra={"span": name, "error": str(exc)},
                    )

            return {k: _attribute_value(v) for k, v in collected.items() if v is not None}

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with get_tracer().start_as_current_span(name, kind=kind) as span:
                span.set_attributes(_collect_attributes(args, kwargs))

                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    error_code = getattr(exc, "error_code", None)
                    if error_code is not None:
                        span.set_attribute("ddlflow.error_code", _attribute_value(error_code))
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise

        return wrapper  # type: ignore[return-value]

    return decorator
