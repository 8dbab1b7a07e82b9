"""Shared dialect behaviour.

``BaseDialect`` implements the parts of the dialect protocol that only vary
by a delimiter or keyword. Concrete dialects supply the type table and the
auto-increment fragment.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ddlflow.constants.sql import SqlType


class BaseDialect(ABC):
    """Base class for SQL dialects using delimiter-based identifier quoting.

    Identifiers are wrapped in ``open_quote``/``close_quote`` and an
    embedded closing delimiter is doubled, so ``unescape_identifier`` can
    always recover the original name.

    Attributes:
        name: Dialect name used in logs and errors
        open_quote: Opening identifier delimiter
        close_quote: Closing identifier delimiter
    """

    name: str = "generic"
    open_quote: str = '"'
    close_quote: str = '"'

    @abstractmethod
    def render_type(
        self,
        data_type: SqlType,
        length: Optional[int] = None,
        scale: Optional[int] = None,
        precision: Optional[int] = None,
    ) -> Optional[str]:
        """Render a semantic type, or return None when it has no mapping."""
        pass

    @abstractmethod
    def auto_increment(self, seed: Optional[int] = None, step: Optional[int] = None) -> str:
        pass

    # Identifier escaping

    def quote_identifier(self, identifier: str) -> str:
        """Wrap an identifier in the dialect's delimiters.

        Args:
            identifier: Raw identifier

        Returns:
            Quoted identifier
        """
        escaped = identifier.replace(self.close_quote, self.close_quote * 2)
        return f"{self.open_quote}{escaped}{self.close_quote}"

    def escape_table_name(self, name: str) -> str:
        return self.quote_identifier(name)

    def escape_column_name(self, name: str) -> str:
        return self.quote_identifier(name)

    def escape_constraint_name(self, name: str) -> str:
        return self.quote_identifier(name)

    def unescape_identifier(self, escaped: str) -> str:
        """Reverse ``quote_identifier``; unquoted input is returned as is."""
        if (
            len(escaped) >= 2
            and escaped.startswith(self.open_quote)
            and escaped.endswith(self.close_quote)
        ):
            inner = escaped[len(self.open_quote):-len(self.close_quote)]
            return inner.replace(self.close_quote * 2, self.close_quote)
        return escaped

    # Strings

    @property
    def string_quote(self) -> str:
        return "'"

    def quote_string(self, value: str) -> str:
        """Quote a string value for SQL.

        Args:
            value: String value to quote

        Returns:
            Properly quoted and escaped string
        """
        quote = self.string_quote
        # Escape quotes by doubling them
        escaped = value.replace(quote, quote * 2)
        return f"{quote}{escaped}{quote}"

    def unquote_string(self, literal: str) -> str:
        """Reverse ``quote_string``."""
        quote = self.string_quote
        inner = literal[len(quote):-len(quote)] if len(literal) >= 2 else literal
        return inner.replace(quote * 2, quote)

    # Statements

    @property
    def statement_separator(self) -> str:
        """Script separator line; empty means a blank line between commands."""
        return ""

    def drop_index(self, index_name: str, table_name: str) -> str:
        return f"DROP INDEX {index_name};"

    def rename_column(self, old_name: str, new_name: str) -> str:
        return f"ALTER {old_name} {new_name}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
