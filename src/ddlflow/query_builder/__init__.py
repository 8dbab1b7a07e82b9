"""Query builder module for SQL generation across dialects.

This module lowers queued schema-change operations into dialect-specific
SQL. Compilers generate SQL but do NOT execute it; that is handled by the
migration engine through a database driver.

Architecture:
    - base.py: ``SqlCompiler``, dispatching on (operation kind, modifier)
    - dialects/: Capability implementations per database product
    - script.py: Rendering compiled commands as a script file
    - factory.py: Dialect registry and compiler construction from settings

Design Principles:
    1. **SQL Generation Only**: Compilers only generate SQL strings
    2. **Composition**: Product-specific tokens come from the dialect
    3. **Single Pass**: Compilation drains the operation queue once

Example:
    >>> from ddlflow.operations import Database
    >>> from ddlflow.query_builder import get_compiler
    >>>
    >>> db = Database()
    >>> db.drop_table("Users")
    >>> list(get_compiler("mssql").compile(db))
    ['DROP TABLE [Users];']
"""

# Re-export key classes for convenience
from ddlflow.query_builder.base import CompiledStep, SqlCompiler
from ddlflow.query_builder.dialects import BaseDialect, SqlServerDialect
from ddlflow.query_builder.factory import (
    CompilerFactory,
    get_compiler,
    get_dialect,
    register_dialect,
)
from ddlflow.query_builder.script import build_script

__all__ = [
    "CompiledStep",
    "SqlCompiler",
    "BaseDialect",
    "SqlServerDialect",
    "CompilerFactory",
    "get_compiler",
    "get_dialect",
    "register_dialect",
    "build_script",
]
