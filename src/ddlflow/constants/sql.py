"""SQL and schema-change constants.

This module contains the fundamental enums describing schema-change
operations and the semantic column types they carry.

These constants are in Layer 0 as they represent core SQL concepts
that can be used by any layer without creating circular dependencies.
"""

from enum import Enum


class Modifier(str, Enum):
    """Intended effect of an operation on its target object."""

    ADD = "ADD"
    ALTER = "ALTER"
    DROP = "DROP"


class OperationKind(str, Enum):
    """Closed set of operation variants.

    Every operation model declares exactly one kind as a frozen
    discriminator. The compiler refuses to build if a kind has no handler.

    Categories:
    - Structure: TABLE, INDEX
    - Constraints: PRIMARY_KEY, FOREIGN_KEY, UNIQUE
    - Data: INSERT
    - Escape hatch: SQL_STATEMENT
    """

    TABLE = "TABLE"
    INDEX = "INDEX"
    PRIMARY_KEY = "PRIMARY_KEY"
    FOREIGN_KEY = "FOREIGN_KEY"
    UNIQUE = "UNIQUE"
    INSERT = "INSERT"
    SQL_STATEMENT = "SQL_STATEMENT"


class SqlType(str, Enum):
    """Semantic (dialect independent) column data type.

    Dialects translate these into concrete type names, optionally using
    the column's length, scale and precision.
    """

    GUID = "GUID"

    # Integers
    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INT = "INT"
    BIGINT = "BIGINT"

    # Approximate and exact numerics
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    DECIMAL = "DECIMAL"
    CURRENCY = "CURRENCY"

    BOOLEAN = "BOOLEAN"

    # Character data
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    VARCHAR_MAX = "VARCHAR_MAX"
    NCHAR = "NCHAR"
    NVARCHAR = "NVARCHAR"
    NVARCHAR_MAX = "NVARCHAR_MAX"
    TEXT = "TEXT"
    NTEXT = "NTEXT"
    XML = "XML"

    # Temporal
    DATE = "DATE"
    TIME = "TIME"
    DATETIME = "DATETIME"
    TIMESTAMP = "TIMESTAMP"
    TIMESPAN = "TIMESPAN"
