"""Microsoft SQL Server dialect implementation."""

from typing import Dict, Optional

from ddlflow.constants.sql import SqlType
from ddlflow.query_builder.dialects.base import BaseDialect


class SqlServerDialect(BaseDialect):
    """Dialect for Microsoft SQL Server (T-SQL).

    Key Features:
        - Square bracket identifier quoting
        - ``IDENTITY(seed, step)`` auto-increment columns
        - ``GO`` batch separator in scripts
        - ``DROP INDEX <index> ON <table>`` syntax
    """

    name = "mssql"
    open_quote = "["
    close_quote = "]"

    # Types rendered without length, scale or precision
    _FIXED_TYPES: Dict[SqlType, str] = {
        SqlType.GUID: "UNIQUEIDENTIFIER",
        SqlType.TINYINT: "TINYINT",
        SqlType.SMALLINT: "SMALLINT",
        SqlType.INT: "INT",
        SqlType.BIGINT: "BIGINT",
        SqlType.SINGLE: "FLOAT",
        SqlType.DOUBLE: "REAL",
        SqlType.BOOLEAN: "BIT",
        SqlType.VARCHAR_MAX: "VARCHAR(MAX)",
        SqlType.NVARCHAR_MAX: "NVARCHAR(MAX)",
        SqlType.TEXT: "TEXT",
        SqlType.NTEXT: "NTEXT",
        SqlType.XML: "XML",
        SqlType.DATE: "DATE",
        SqlType.TIME: "TIME",
        SqlType.DATETIME: "DATETIME",
        SqlType.TIMESTAMP: "TIMESTAMP",
        SqlType.TIMESPAN: "DATETIMEOFFSET",
    }

    # Types taking an optional length
    _SIZED_TYPES: Dict[SqlType, str] = {
        SqlType.CHAR: "CHAR",
        SqlType.VARCHAR: "VARCHAR",
        SqlType.NCHAR: "NCHAR",
        SqlType.NVARCHAR: "NVARCHAR",
    }

    # Types taking an optional (scale, precision) pair
    _NUMERIC_TYPES: Dict[SqlType, str] = {
        SqlType.DECIMAL: "DECIMAL",
        SqlType.CURRENCY: "MONEY",
    }

    def render_type(
        self,
        data_type: SqlType,
        length: Optional[int] = None,
        scale: Optional[int] = None,
        precision: Optional[int] = None,
    ) -> Optional[str]:
        """Render a semantic type as a T-SQL type name.

        Args:
            data_type: Semantic column type
            length: Length for character types
            scale: First argument of DECIMAL/MONEY
            precision: Second argument of DECIMAL/MONEY

        Returns:
            T-SQL type name, or None for an unmapped type
        """
        if data_type in self._FIXED_TYPES:
            return self._FIXED_TYPES[data_type]

        if data_type in self._SIZED_TYPES:
            base = self._SIZED_TYPES[data_type]
            return f"{base}({length})" if length is not None else base

        if data_type in self._NUMERIC_TYPES:
            base = self._NUMERIC_TYPES[data_type]
            if scale is not None and precision is not None:
                return f"{base}({scale}, {precision})"
            return base

        return None

    def auto_increment(self, seed: Optional[int] = None, step: Optional[int] = None) -> str:
        return f"IDENTITY({seed if seed is not None else 1}, {step if step is not None else 1})"

    @property
    def statement_separator(self) -> str:
        return "GO"

    def drop_index(self, index_name: str, table_name: str) -> str:
        return f"DROP INDEX {index_name} ON {table_name};"
