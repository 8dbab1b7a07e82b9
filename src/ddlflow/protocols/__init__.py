"""Protocol definitions for ddlflow.

Protocols describe the capability interfaces that pluggable components
implement. They have no dependencies beyond Layer 0 constants.
"""

from ddlflow.protocols.dialect import SqlDialect

__all__ = [
    "SqlDialect",
]
