"""Constants module for ddlflow.

This module contains all constant values and enumerations used throughout
ddlflow. As Layer 0 in the architecture, this module has no dependencies
on other ddlflow modules.

Organization:
    - sql: Operation kinds, modifiers and semantic column types
    - migration: Migration direction, engine state and run outcome
"""

# SQL constants
from ddlflow.constants.sql import (
    Modifier,
    OperationKind,
    SqlType,
)

# Migration constants
from ddlflow.constants.migration import (
    EngineState,
    MigrationDirection,
    RunOutcome,
    StepStatus,
)

__all__ = [
    # SQL
    "Modifier",
    "OperationKind",
    "SqlType",
    # Migration
    "EngineState",
    "MigrationDirection",
    "RunOutcome",
    "StepStatus",
]
