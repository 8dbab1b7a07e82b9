"""Migration execution.

This module applies versioned migration units against a live database:

- base.py: ``Migration`` units with ``up``/``down`` population logic
- registry.py: Version-ordered discovery and the ``@migration`` decorator
- driver.py: Transaction and execution primitives over SQLAlchemy
- ledger.py: Persisted record of applied versions
- events.py: Before/after lifecycle events for hooks
- engine.py: ``MigrationEngine`` tying the pieces together
"""

from ddlflow.migrations.base import Migration
from ddlflow.migrations.driver import DatabaseDriver, SQLAlchemyDriver, build_odbc_url
from ddlflow.migrations.engine import MigrationEngine, MigrationRunResult
from ddlflow.migrations.events import (
    AfterMigrationEvent,
    BeforeMigrationEvent,
    MigrationEvent,
)
from ddlflow.migrations.ledger import SqlVersionLedger, VersionLedger
from ddlflow.migrations.registry import MigrationRegistry, get_registry, migration

__all__ = [
    "Migration",
    "MigrationRegistry",
    "get_registry",
    "migration",
    "DatabaseDriver",
    "SQLAlchemyDriver",
    "build_odbc_url",
    "VersionLedger",
    "SqlVersionLedger",
    "MigrationEvent",
    "BeforeMigrationEvent",
    "AfterMigrationEvent",
    "MigrationEngine",
    "MigrationRunResult",
]
