"""Table constraint operations.

Constraints declared on a table being created are fused into its CREATE
TABLE statement; declared against an existing table they compile to
standalone ``ALTER TABLE ... ADD/DROP CONSTRAINT`` commands.
"""

from typing import List, Literal, Optional

from pydantic import Field, model_validator

from ddlflow.constants.sql import Modifier, OperationKind
from ddlflow.operations.base import BaseOperation


class BaseConstraint(BaseOperation):
    """Common fields of all table constraints.

    Attributes:
        name: Optional explicit name; a conventional name is derived when unset
        table_name: Table the constraint belongs to
        columns: Ordered constrained column names
    """
    name: Optional[str] = Field(default=None, min_length=1)
    table_name: str = Field(..., min_length=1)
    columns: List[str] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_columns(self):
        """A constraint being added needs at least one column."""
        if self.modifier == Modifier.ADD and not self.columns:
            raise ValueError(
                f"{type(self).__name__} on '{self.table_name}' requires at least one column"
            )
        return self


class PrimaryKeyConstraint(BaseConstraint):
    """Primary key constraint, at most one per table."""
    kind: Literal[OperationKind.PRIMARY_KEY] = Field(
        default=OperationKind.PRIMARY_KEY,
        frozen=True
    )


class ForeignKeyConstraint(BaseConstraint):
    """Foreign key constraint referencing another table."""
    kind: Literal[OperationKind.FOREIGN_KEY] = Field(
        default=OperationKind.FOREIGN_KEY,
        frozen=True
    )
    related_table: Optional[str] = Field(default=None, min_length=1)
    related_columns: List[str] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_reference(self):
        """Local and related column lists must line up."""
        if self.modifier == Modifier.ADD:
            if not self.related_table:
                raise ValueError(f"Foreign key on '{self.table_name}' requires a related table")
            if len(self.columns) != len(self.related_columns):
                raise ValueError(
                    f"Foreign key on '{self.table_name}' maps {len(self.columns)} column(s) "
                    f"to {len(self.related_columns)} related column(s)"
                )
        return self


class UniqueConstraint(BaseConstraint):
    """Unique constraint over one or more columns."""
    kind: Literal[OperationKind.UNIQUE] = Field(
        default=OperationKind.UNIQUE,
        frozen=True
    )
