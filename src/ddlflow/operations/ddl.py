"""Data Definition Language (DDL) operations.

This module contains the table, column and index operations. A ``Table``
also acts as the fluent entry point for everything scoped to it: columns,
constraints, indexes and seed rows are declared through its methods and
enqueued on the owning ``Database`` in call order.
"""

from typing import Any, List, Literal, Mapping, Optional, Sequence, Union

from pydantic import Field, model_validator

from ddlflow.common.exceptions import ErrorCode, validation_error
from ddlflow.constants.sql import Modifier, OperationKind, SqlType
from ddlflow.operations.base import BaseOperation
from ddlflow.operations.constraints import (
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
)
from ddlflow.operations.dml import Insert
from ddlflow.types.base import FlowBaseModel


class Column(FlowBaseModel):
    """Column definition or column change.

    The modifier is relative to the owning table: ADD declares a new
    column, DROP removes it and ALTER renames it, changes its type or both.
    """
    name: str = Field(..., min_length=1)
    new_name: Optional[str] = Field(default=None, min_length=1)
    data_type: Optional[SqlType] = Field(default=None)
    length: Optional[int] = Field(default=None, gt=0)
    scale: Optional[int] = Field(default=None, ge=0)
    precision: Optional[int] = Field(default=None, ge=0)
    nullable: bool = Field(default=True)
    auto_increment: bool = Field(default=False)
    seed: Optional[int] = Field(default=None)
    step: Optional[int] = Field(default=None)
    default_value: Any = Field(default=None)
    modifier: Modifier = Field(default=Modifier.ADD)

    @property
    def is_renamed(self) -> bool:
        return self.new_name is not None and self.new_name != self.name

    @property
    def has_type_change(self) -> bool:
        return self.data_type is not None

    def renamed(self) -> "Column":
        """Copy of this column carrying its new name as the name."""
        return self.model_copy(update={"name": self.new_name, "new_name": None})


class Table(BaseOperation):
    """Create, alter or drop a table.

    For ADD, the table's columns and any constraints declared through it
    are rendered together as one CREATE TABLE statement. For ALTER, each
    column change becomes its own ALTER TABLE statement.
    """
    kind: Literal[OperationKind.TABLE] = Field(
        default=OperationKind.TABLE,
        frozen=True
    )
    name: str = Field(..., min_length=1)
    columns: List[Column] = Field(default_factory=list)

    primary_key: Optional[PrimaryKeyConstraint] = Field(default=None, repr=False)
    foreign_keys: List[ForeignKeyConstraint] = Field(default_factory=list, repr=False)
    unique_constraints: List[UniqueConstraint] = Field(default_factory=list, repr=False)

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    # Columns

    def add_column(
        self,
        name: str,
        data_type: SqlType,
        length: Optional[int] = None,
        *,
        nullable: bool = True,
        scale: Optional[int] = None,
        precision: Optional[int] = None,
        auto_increment: bool = False,
        seed: Optional[int] = None,
        step: Optional[int] = None,
        default_value: Any = None,
    ) -> Column:
        """Declare a new column.

        Args:
            name: Column name
            data_type: Semantic column type
            length: Optional length for character types

        Returns:
            The declared column
        """
        self._require_modifier("add a column", Modifier.ADD, Modifier.ALTER)
        if self.modifier == Modifier.ADD and self.get_column(name) is not None:
            raise validation_error(
                f"Column '{name}' is already declared on table '{self.name}'",
                field="name",
                value=name,
                error_code=ErrorCode.DUPLICATE_OPERATION,
            )
        column = Column(
            name=name,
            data_type=data_type,
            length=length,
            scale=scale,
            precision=precision,
            nullable=nullable,
            auto_increment=auto_increment,
            seed=seed,
            step=step,
            default_value=default_value,
            modifier=Modifier.ADD,
        )
        self.columns.append(column)
        return column

    def alter_column(
        self,
        name: str,
        new_name: Optional[str] = None,
        data_type: Optional[SqlType] = None,
        length: Optional[int] = None,
        *,
        nullable: bool = True,
        scale: Optional[int] = None,
        precision: Optional[int] = None,
        default_value: Any = None,
    ) -> Column:
        """Rename a column, change its type, or both."""
        self._require_modifier("alter a column", Modifier.ALTER)
        if new_name is None and data_type is None:
            raise validation_error(
                f"Altering column '{name}' on '{self.name}' requires a new name or a data type",
                field="name",
                value=name,
            )
        column = Column(
            name=name,
            new_name=new_name,
            data_type=data_type,
            length=length,
            scale=scale,
            precision=precision,
            nullable=nullable,
            default_value=default_value,
            modifier=Modifier.ALTER,
        )
        self.columns.append(column)
        return column

    def drop_column(self, name: str) -> Column:
        self._require_modifier("drop a column", Modifier.ALTER)
        column = Column(name=name, modifier=Modifier.DROP)
        self.columns.append(column)
        return column

    # Constraints

    def add_primary_key(self, *columns: str, name: Optional[str] = None) -> PrimaryKeyConstraint:
        """Declare the table's primary key.

        Raises:
            DDLFlowError: If the table already has a primary key
        """
        self._require_modifier("add a primary key", Modifier.ADD, Modifier.ALTER)
        if self.primary_key is not None or self._owner().has_primary_key(self.name):
            raise validation_error(
                f"Table '{self.name}' already has a primary key",
                field="primary_key",
                value=self.name,
                error_code=ErrorCode.DUPLICATE_OPERATION,
            )
        constraint = PrimaryKeyConstraint(
            name=name,
            table_name=self.name,
            columns=list(columns),
        )
        self._owner().enqueue(constraint)
        self.primary_key = constraint
        return constraint

    def add_foreign_key(
        self,
        columns: Union[str, Sequence[str]],
        related_table: str,
        related_columns: Union[str, Sequence[str]],
        *,
        name: Optional[str] = None,
    ) -> ForeignKeyConstraint:
        self._require_modifier("add a foreign key", Modifier.ADD, Modifier.ALTER)
        constraint = ForeignKeyConstraint(
            name=name,
            table_name=self.name,
            columns=_as_list(columns),
            related_table=related_table,
            related_columns=_as_list(related_columns),
        )
        self._owner().enqueue(constraint)
        self.foreign_keys.append(constraint)
        return constraint

    def add_unique(self, *columns: str, name: Optional[str] = None) -> UniqueConstraint:
        self._require_modifier("add a unique constraint", Modifier.ADD, Modifier.ALTER)
        constraint = UniqueConstraint(
            name=name,
            table_name=self.name,
            columns=list(columns),
        )
        self._owner().enqueue(constraint)
        self.unique_constraints.append(constraint)
        return constraint

    def drop_primary_key(self, name: Optional[str] = None) -> PrimaryKeyConstraint:
        self._require_modifier("drop a primary key", Modifier.ALTER)
        constraint = PrimaryKeyConstraint(name=name, table_name=self.name, modifier=Modifier.DROP)
        self._owner().enqueue(constraint)
        return constraint

    def drop_foreign_key(
        self,
        related_table: Optional[str] = None,
        *,
        name: Optional[str] = None,
    ) -> ForeignKeyConstraint:
        """Drop a foreign key by explicit name or by its conventional name."""
        self._require_modifier("drop a foreign key", Modifier.ALTER)
        if name is None and related_table is None:
            raise validation_error(
                f"Dropping a foreign key on '{self.name}' requires a name or the related table",
                field="name",
            )
        constraint = ForeignKeyConstraint(
            name=name,
            table_name=self.name,
            related_table=related_table,
            modifier=Modifier.DROP,
        )
        self._owner().enqueue(constraint)
        return constraint

    def drop_unique(self, *columns: str, name: Optional[str] = None) -> UniqueConstraint:
        self._require_modifier("drop a unique constraint", Modifier.ALTER)
        if name is None and not columns:
            raise validation_error(
                f"Dropping a unique constraint on '{self.name}' requires a name or its columns",
                field="name",
            )
        constraint = UniqueConstraint(
            name=name,
            table_name=self.name,
            columns=list(columns),
            modifier=Modifier.DROP,
        )
        self._owner().enqueue(constraint)
        return constraint

    # Indexes and rows

    def add_index(self, *columns: str, name: Optional[str] = None) -> "Index":
        self._require_modifier("add an index", Modifier.ADD, Modifier.ALTER)
        index = Index(name=name, table_name=self.name, columns=list(columns))
        self._owner().enqueue(index)
        return index

    def drop_index(self, name: str) -> "Index":
        index = Index(name=name, table_name=self.name, modifier=Modifier.DROP)
        self._owner().enqueue(index)
        return index

    def insert(self, row: Optional[Mapping[str, Any]] = None, **values: Any) -> Insert:
        """Enqueue one seed row; column order follows the mapping order."""
        self._require_modifier("insert rows", Modifier.ADD, Modifier.ALTER)
        data = dict(row or {})
        data.update(values)
        operation = Insert(table_name=self.name, row=data)
        self._owner().enqueue(operation)
        return operation

    def _owner(self):
        if self._database is None:
            raise validation_error(
                f"Table '{self.name}' is not attached to a database",
                field="table",
                value=self.name,
            )
        return self._database

    def _require_modifier(self, action: str, *allowed: Modifier) -> None:
        if self.modifier not in allowed:
            raise validation_error(
                f"Cannot {action} on table '{self.name}' declared with {self.modifier.value}",
                field="modifier",
                value=self.modifier.value,
            )


class Index(BaseOperation):
    """Create or drop an index.

    When ``name`` is omitted the compiler derives ``IX_<table>_<columns>``.
    """
    kind: Literal[OperationKind.INDEX] = Field(
        default=OperationKind.INDEX,
        frozen=True
    )
    name: Optional[str] = Field(default=None, min_length=1)
    table_name: str = Field(..., min_length=1)
    columns: List[str] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_columns(self):
        """An index being created needs at least one column."""
        if self.modifier == Modifier.ADD and not self.columns:
            raise ValueError(f"Index on '{self.table_name}' requires at least one column")
        if self.modifier == Modifier.DROP and not self.name and not self.columns:
            raise ValueError(f"Dropping an index on '{self.table_name}' requires its name")
        return self


def _as_list(columns: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(columns, str):
        return [columns]
    return list(columns)
