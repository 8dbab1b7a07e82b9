"""Metrics collection for migration runs.

This module provides classes for collecting and exporting metrics about
applied, failed and cancelled migration units.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from opentelemetry.metrics import CallbackOptions, Observation

from ddlflow.logging import get_logger
from ddlflow.telemetry import get_meter


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MigrationMetrics:
    """Container for the metrics of a single migration unit.

    Attributes:
        version: Version of the unit
        migration: Class name of the unit
        direction: Direction it was applied in (up/down)
        command_count: Number of SQL commands executed
        duration_seconds: Wall time spent on the unit
        success: Whether the unit committed
        error_message: Error message if the unit failed
        timestamp: When the unit finished
    """

    version: int
    migration: str
    direction: str
    command_count: int
    duration_seconds: float
    success: bool
    error_message: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data


class MetricsCollector:
    """Collector for migration metrics.

    This class keeps an in-memory record of finished units and exports
    counters and histograms to OpenTelemetry.

    Attributes:
        logger: Logger instance
        meter: OpenTelemetry meter
        _metrics: List of collected unit metrics
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._metrics: List[MigrationMetrics] = []
        self._cancelled = 0

        self.meter = get_meter()
        self._setup_instruments()

    def _setup_instruments(self) -> None:
        """Setup OpenTelemetry instruments."""
        # Counters
        self.applied_counter = self.meter.create_counter(
            "ddlflow_migrations_applied_total",
            description="Total number of migration units committed",
            unit="migrations"
        )

        self.failed_counter = self.meter.create_counter(
            "ddlflow_migrations_failed_total",
            description="Total number of migration units rolled back",
            unit="migrations"
        )

        self.cancelled_counter = self.meter.create_counter(
            "ddlflow_migrations_cancelled_total",
            description="Total number of runs cancelled by a before-migration hook",
            unit="runs"
        )

        self.commands_counter = self.meter.create_counter(
            "ddlflow_commands_executed_total",
            description="Total number of SQL commands executed",
            unit="commands"
        )

        # Histograms
        self.duration_histogram = self.meter.create_histogram(
            "ddlflow_migration_duration_seconds",
            description="Duration of migration units",
            unit="seconds"
        )

        # Gauges (via callbacks)
        self.meter.create_observable_gauge(
            "ddlflow_migration_success_rate",
            callbacks=[self._success_rate_callback],
            description="Migration unit success rate",
            unit="ratio"
        )

    def record_migration(self, metrics: MigrationMetrics) -> None:
        """Record a finished migration unit.

        Args:
            metrics: Unit metrics to record
        """
        self._metrics.append(metrics)

        attributes = {
            "direction": metrics.direction,
            "success": str(metrics.success).lower(),
        }

        if metrics.success:
            self.applied_counter.add(1, attributes)
        else:
            self.failed_counter.add(1, attributes)
        self.commands_counter.add(metrics.command_count, attributes)
        self.duration_histogram.record(metrics.duration_seconds, attributes)

        self.logger.info(
            "Migration recorded",
            extra=metrics.to_dict()
        )

    def record_cancelled(self, version: int, direction: str) -> None:
        self._cancelled += 1
        self.cancelled_counter.add(1, {"direction": direction})
        self.logger.info(
            "Migration run cancelled",
            extra={"version": version, "direction": direction},
        )

    def _success_rate_callback(self, options: CallbackOptions) -> Iterable[Observation]:
        """Callback for success rate gauge."""
        if self._metrics:
            success_count = sum(1 for m in self._metrics if m.success)
            success_rate = success_count / len(self._metrics)
        else:
            success_rate = 1.0

        yield Observation(success_rate, {})

    def get_metrics_summary(self, time_window: timedelta = timedelta(hours=1)) -> Dict[str, Any]:
        """Get summary of metrics for a time window.

        Args:
            time_window: Time window to summarize

        Returns:
            Dictionary with metrics summary
        """
        cutoff = _utcnow() - time_window
        recent = [m for m in self._metrics if m.timestamp > cutoff]

        successful = [m for m in recent if m.success]
        failed = [m for m in recent if not m.success]
        total_duration = sum(m.duration_seconds for m in recent)

        return {
            "total_migrations": len(recent),
            "successful_migrations": len(successful),
            "failed_migrations": len(failed),
            "cancelled_runs": self._cancelled,
            "success_rate": len(successful) / len(recent) if recent else 0.0,
            "total_commands": sum(m.command_count for m in recent),
            "total_duration_seconds": total_duration,
            "average_duration_seconds": total_duration / len(recent) if recent else 0.0,
            "failed_versions": [m.version for m in failed],
        }

    def clear(self) -> None:
        self._metrics = []
        self._cancelled = 0
