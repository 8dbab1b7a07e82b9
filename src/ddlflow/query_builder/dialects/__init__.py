"""SQL dialect implementations.

Available Dialects:
    - SqlServerDialect: Microsoft SQL Server (T-SQL)
"""

from ddlflow.query_builder.dialects.base import BaseDialect
from ddlflow.query_builder.dialects.sqlserver import SqlServerDialect

__all__ = [
    "BaseDialect",
    "SqlServerDialect",
]
