"""SQL dialect protocol definitions.

This module defines the capability interface a target database product
must provide so the compiler can lower operations into its SQL. Dialects
are composed into the compiler, not subclassed from it: the compiler owns
statement structure, the dialect owns every product-specific token.
"""

from typing import Optional, Protocol, runtime_checkable

from ddlflow.constants.sql import SqlType


@runtime_checkable
class SqlDialect(Protocol):
    """Protocol defining the interface for SQL dialects.

    The protocol is marked as runtime_checkable to allow isinstance()
    checks when dialects are registered with the factory.
    """

    name: str

    def render_type(
        self,
        data_type: SqlType,
        length: Optional[int] = None,
        scale: Optional[int] = None,
        precision: Optional[int] = None,
    ) -> Optional[str]:
        """Render a semantic type as a concrete type name.

        Returns:
            The type name, or None when the dialect has no mapping
        """
        ...

    def escape_table_name(self, name: str) -> str:
        ...

    def escape_column_name(self, name: str) -> str:
        ...

    def escape_constraint_name(self, name: str) -> str:
        """Escape a constraint or index name."""
        ...

    def unescape_identifier(self, escaped: str) -> str:
        """Reverse any of the three escape functions."""
        ...

    def auto_increment(self, seed: Optional[int] = None, step: Optional[int] = None) -> str:
        """SQL fragment that makes a column auto-incrementing."""
        ...

    @property
    def statement_separator(self) -> str:
        """Line that separates commands in a multi-statement script."""
        ...

    def quote_string(self, value: str) -> str:
        """String literal for ``value`` with embedded quotes escaped."""
        ...

    def drop_index(self, index_name: str, table_name: str) -> str:
        """Full DROP INDEX command for already escaped names."""
        ...

    def rename_column(self, old_name: str, new_name: str) -> str:
        """ALTER TABLE fragment renaming a column, for already escaped names."""
        ...
