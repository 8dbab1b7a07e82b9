"""Compiler factory.

This module provides a factory for creating dialect-bound compilers with
automatic configuration from environment settings.

Dialects are registered by name. The names match SQLAlchemy's dialect
names where one exists, so a compiler can be resolved straight from an
engine (``engine.dialect.name``).
"""

from typing import Callable, Dict, List, Optional

from ddlflow.common.exceptions import platform_not_supported_error
from ddlflow.logging import get_logger
from ddlflow.protocols.dialect import SqlDialect
from ddlflow.query_builder.base import SqlCompiler
from ddlflow.query_builder.dialects.sqlserver import SqlServerDialect

logger = get_logger(__name__)

DialectFactory = Callable[[], SqlDialect]


class CompilerFactory:
    """Factory for creating dialect-specific compilers.

    Example:
        >>> compiler = CompilerFactory.create()            # from settings
        >>> compiler = CompilerFactory.create("mssql", strict=True)
        >>> CompilerFactory.register("sqlite", SqliteDialect)
    """

    _registry: Dict[str, DialectFactory] = {
        "mssql": SqlServerDialect,
        "sqlserver": SqlServerDialect,
        "tsql": SqlServerDialect,
    }

    @classmethod
    def register(cls, name: str, factory: DialectFactory) -> None:
        """Register a dialect under a (case-insensitive) name."""
        key = name.strip().lower()
        if key in cls._registry:
            logger.info(f"Replacing dialect registration '{key}'")
        cls._registry[key] = factory

    @classmethod
    def available(cls) -> List[str]:
        return sorted(cls._registry)

    @classmethod
    def create_dialect(cls, name: Optional[str] = None) -> SqlDialect:
        """Create a dialect by name, defaulting to ``settings.dialect``.

        Raises:
            DDLFlowError: PLATFORM_NOT_SUPPORTED for an unknown name
        """
        if name is None:
            from ddlflow.settings import get_settings
            name = get_settings().dialect

        factory = cls._registry.get(name.strip().lower())
        if factory is None:
            raise platform_not_supported_error(
                name,
                details={"available": cls.available()},
            )
        return factory()

    @classmethod
    def create(cls, dialect: Optional[str] = None, strict: Optional[bool] = None) -> SqlCompiler:
        """Create a compiler auto-configured from settings.

        Args:
            dialect: Dialect name; ``settings.dialect`` when omitted
            strict: Strict compilation; ``settings.strict_compilation`` when omitted

        Returns:
            Compiler bound to the resolved dialect
        """
        if strict is None:
            from ddlflow.settings import get_settings
            strict = get_settings().strict_compilation

        return SqlCompiler(cls.create_dialect(dialect), strict=strict)


def get_compiler(dialect: Optional[str] = None, strict: Optional[bool] = None) -> SqlCompiler:
    """Get a compiler for the named (or configured) dialect."""
    return CompilerFactory.create(dialect, strict)


def get_dialect(name: Optional[str] = None) -> SqlDialect:
    return CompilerFactory.create_dialect(name)


def register_dialect(name: str, factory: DialectFactory) -> None:
    """Register an additional dialect, e.g. under a SQLAlchemy dialect name."""
    CompilerFactory.register(name, factory)
