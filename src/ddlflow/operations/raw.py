"""Raw SQL operation.

For changes not covered by specific operation types. The statement is
emitted verbatim and bypasses dialect translation, so use with caution.
"""

from typing import Literal

from pydantic import Field

from ddlflow.constants.sql import OperationKind
from ddlflow.operations.base import BaseOperation


class SqlStatement(BaseOperation):
    """Execute an arbitrary SQL statement."""
    kind: Literal[OperationKind.SQL_STATEMENT] = Field(
        default=OperationKind.SQL_STATEMENT,
        frozen=True
    )
    sql: str = Field(..., min_length=1)
