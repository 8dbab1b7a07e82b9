
from ddlflow.__version__ import __version__

from ddlflow.operations import (
    Column,
    Database,
    Index,
    Table,
)
from ddlflow.query_builder import (
    SqlCompiler,
    SqlServerDialect,
    build_script,
    get_compiler,
    get_dialect,
    register_dialect,
)
from ddlflow.migrations import (
    AfterMigrationEvent,
    BeforeMigrationEvent,
    Migration,
    MigrationEngine,
    MigrationRegistry,
    MigrationRunResult,
    SQLAlchemyDriver,
    SqlVersionLedger,
    get_registry,
    migration,
)

from ddlflow.common.exceptions import DDLFlowError, ErrorCode, MigrationError

from ddlflow.constants import MigrationDirection, RunOutcome, SqlType


__all__ = [
    "__version__",

    # Schema-change unit
    "Database",
    "Table",
    "Column",
    "Index",
    "SqlType",

    # Compilation
    "SqlCompiler",
    "SqlServerDialect",
    "get_compiler",
    "get_dialect",
    "register_dialect",
    "build_script",

    # Migrations
    "Migration",
    "MigrationRegistry",
    "get_registry",
    "migration",
    "MigrationEngine",
    "MigrationRunResult",
    "MigrationDirection",
    "RunOutcome",
    "BeforeMigrationEvent",
    "AfterMigrationEvent",
    "SQLAlchemyDriver",
    "SqlVersionLedger",

    # Exceptions (public API)
    "DDLFlowError",
    "ErrorCode",
    "MigrationError",
]
