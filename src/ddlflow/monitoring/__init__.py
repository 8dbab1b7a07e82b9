"""Monitoring infrastructure for metrics and telemetry.

This module provides metrics collection for migration runs, exported
through OpenTelemetry.
"""

from ddlflow.monitoring.metrics import MetricsCollector, MigrationMetrics

__all__ = [
    "MigrationMetrics",
    "MetricsCollector",
]
