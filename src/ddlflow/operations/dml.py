"""Data Manipulation Language (DML) operations.

Seed data is the only DML a schema change carries: one ``Insert`` per row.
"""

from typing import Any, Dict, Literal

from pydantic import Field, field_validator

from ddlflow.constants.sql import OperationKind
from ddlflow.operations.base import BaseOperation


class Insert(BaseOperation):
    """Insert a single row.

    The statement lists columns in the insertion order of ``row``.
    """
    kind: Literal[OperationKind.INSERT] = Field(
        default=OperationKind.INSERT,
        frozen=True
    )
    table_name: str = Field(..., min_length=1)
    row: Dict[str, Any] = Field(..., description="Column name to value, in statement order")

    @field_validator('row')
    @classmethod
    def validate_row(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not v:
            raise ValueError("Insert requires at least one column value")
        return v
