"""Schema-change operations module.

This module provides data structures that describe schema changes
independent of the SQL dialect that renders them. Operations are pure data
that can be:
- Queued on a ``Database`` (one per migration unit) through its builder methods
- Lowered into dialect-specific SQL by a compiler
- Serialized for auditing via ``to_dict()``

The operations module is in Layer 1, making it available to the compiler
and migration engine without creating circular dependencies.
"""

# Base operation
from ddlflow.operations.base import BaseOperation

# Constraint operations
from ddlflow.operations.constraints import (
    BaseConstraint,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
)

# DML operations
from ddlflow.operations.dml import Insert

# Raw SQL
from ddlflow.operations.raw import SqlStatement

# DDL operations
from ddlflow.operations.ddl import (
    Column,
    Index,
    Table,
)

# Queue and schema-change unit
from ddlflow.operations.queue import OperationQueue
from ddlflow.operations.database import Database

__all__ = [
    # Base
    "BaseOperation",
    # Constraints
    "BaseConstraint",
    "PrimaryKeyConstraint",
    "ForeignKeyConstraint",
    "UniqueConstraint",
    # DML
    "Insert",
    # Raw
    "SqlStatement",
    # DDL
    "Column",
    "Index",
    "Table",
    # Queue
    "OperationQueue",
    "Database",
]
