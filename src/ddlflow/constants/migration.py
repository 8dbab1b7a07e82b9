"""Migration engine constants and enumerations.

This module defines type-safe enumerations used by the migration engine
for run direction, lifecycle state and run outcome.
"""

from enum import Enum


class MigrationDirection(str, Enum):
    """Direction in which migration units are applied.

    Values:
        UP: Apply units in ascending version order (upgrade).
        DOWN: Revert units in descending version order (downgrade).
    """

    UP = "up"
    DOWN = "down"


class EngineState(str, Enum):
    """Lifecycle state of a migration engine run.

    A run moves IDLE -> RESOLVING -> RUNNING and back to IDLE once every
    candidate unit has committed. Cancellation by a before-migration hook
    leaves the engine ABORTED; an execution failure leaves it FAILED.
    """

    IDLE = "idle"
    RESOLVING = "resolving"
    RUNNING = "running"
    ABORTED = "aborted"
    FAILED = "failed"


class RunOutcome(str, Enum):
    """Final outcome reported for a completed run."""

    COMPLETED = "completed"
    UP_TO_DATE = "up_to_date"
    CANCELLED = "cancelled"


class StepStatus(str, Enum):
    """Result tag for a single compiled operation."""

    COMPILED = "compiled"
    UNSUPPORTED = "unsupported"
