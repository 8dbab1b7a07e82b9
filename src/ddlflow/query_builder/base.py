"""Dialect-agnostic SQL compiler.

The compiler drains a ``Database``'s operation queue and lowers each
operation into one or more SQL commands. Statement structure lives here;
every product-specific token (type names, quoting, auto-increment,
index syntax) comes from the composed ``SqlDialect``.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, List, Sequence, Tuple

from pydantic import Field

from ddlflow.common.exceptions import (
    ErrorCode,
    unmapped_type_error,
    unsupported_operation_error,
    validation_error,
)
from ddlflow.constants.migration import StepStatus
from ddlflow.constants.sql import Modifier, OperationKind
from ddlflow.logging import get_logger
from ddlflow.operations import (
    BaseConstraint,
    BaseOperation,
    Column,
    Database,
    ForeignKeyConstraint,
    Index,
    Insert,
    PrimaryKeyConstraint,
    SqlStatement,
    Table,
    UniqueConstraint,
)
from ddlflow.protocols.dialect import SqlDialect
from ddlflow.types.base import FlowBaseModel

logger = get_logger(__name__)

Handler = Callable[[Any], List[str]]


class CompiledStep(FlowBaseModel):
    """Outcome of lowering a single dequeued operation.

    Attributes:
        operation: The operation that was dequeued
        status: COMPILED, or UNSUPPORTED when no handler exists for the
            operation's (kind, modifier) pair
        commands: SQL commands produced, empty when unsupported
    """
    operation: BaseOperation
    status: StepStatus
    commands: List[str] = Field(default_factory=list)

    @property
    def supported(self) -> bool:
        return self.status == StepStatus.COMPILED


class SqlCompiler:
    """Compiles operation queues into SQL commands for one dialect.

    Dispatch is a table keyed by (operation kind, modifier). Every
    operation kind must have at least one handler; a pair without a
    handler compiles to an UNSUPPORTED step.

    Example:
        >>> compiler = SqlCompiler(SqlServerDialect())
        >>> db = Database()
        >>> db.drop_table("Users")
        >>> list(compiler.compile(db))
        ['DROP TABLE [Users];']
    """

    def __init__(self, dialect: SqlDialect, strict: bool = False):
        """Initialize the compiler.

        Args:
            dialect: Dialect supplying types, quoting and syntax variants
            strict: Raise on unsupported operations instead of skipping them

        Raises:
            TypeError: If an operation kind has no handler
        """
        self.dialect = dialect
        self.strict = strict
        self._handlers: Dict[Tuple[OperationKind, Modifier], Handler] = {
            (OperationKind.TABLE, Modifier.ADD): self._create_table,
            (OperationKind.TABLE, Modifier.ALTER): self._alter_table,
            (OperationKind.TABLE, Modifier.DROP): self._drop_table,
            (OperationKind.INDEX, Modifier.ADD): self._create_index,
            (OperationKind.INDEX, Modifier.DROP): self._drop_index,
            (OperationKind.PRIMARY_KEY, Modifier.ADD): self._add_primary_key,
            (OperationKind.PRIMARY_KEY, Modifier.DROP): self._drop_constraint,
            (OperationKind.FOREIGN_KEY, Modifier.ADD): self._add_foreign_key,
            (OperationKind.FOREIGN_KEY, Modifier.DROP): self._drop_constraint,
            (OperationKind.UNIQUE, Modifier.ADD): self._add_unique,
            (OperationKind.UNIQUE, Modifier.DROP): self._drop_constraint,
            (OperationKind.INSERT, Modifier.ADD): self._insert,
            (OperationKind.SQL_STATEMENT, Modifier.ADD): self._sql_statement,
        }
        self._check_handlers()

    def _check_handlers(self) -> None:
        handled = {kind for kind, _ in self._handlers}
        missing = [kind.value for kind in OperationKind if kind not in handled]
        if missing:
            raise TypeError(
                f"{self.__class__.__name__} has no handler for operation kind(s): "
                f"{', '.join(missing)}"
            )

    @property
    def dialect_name(self) -> str:
        return getattr(self.dialect, "name", type(self.dialect).__name__)

    def supports(self, kind: OperationKind, modifier: Modifier) -> bool:
        return (kind, modifier) in self._handlers

    # Public API

    def compile_steps(self, database: Database) -> Iterator[CompiledStep]:
        """Drain the queue, yielding one tagged result per operation.

        The generator consumes the queue as it goes and cannot be restarted.
        Operations fused into an earlier statement never reach this loop.
        """
        queue = database.queue
        while True:
            operation = queue.dequeue_next()
            if operation is None:
                break

            handler = self._handlers.get((operation.kind, operation.modifier))
            if handler is None:
                yield CompiledStep(operation=operation, status=StepStatus.UNSUPPORTED)
                continue

            commands = handler(operation)
            logger.debug(
                "Operation compiled",
                extra={
                    **operation.telemetry_fields(),
                    "dialect": self.dialect_name,
                    "command_count": len(commands),
                },
            )
            yield CompiledStep(operation=operation, status=StepStatus.COMPILED, commands=commands)

    def compile(self, database: Database) -> Iterator[str]:
        """Drain the queue, yielding SQL command strings in order.

        Raises:
            DDLFlowError: UNSUPPORTED_OPERATION in strict mode, UNMAPPED_TYPE
                for a type the dialect cannot render, VALIDATION_ERROR for
                malformed operations
        """
        for step in self.compile_steps(database):
            if not step.supported:
                operation = step.operation
                if self.strict:
                    raise unsupported_operation_error(
                        operation.kind.value,
                        operation.modifier.value,
                        dialect=self.dialect_name,
                    )
                logger.warning(
                    f"Skipping unsupported {operation.modifier.value} of "
                    f"{operation.kind.value} on '{operation.target_name}'",
                    extra={**operation.telemetry_fields(), "dialect": self.dialect_name},
                )
                continue
            for command in step.commands:
                yield command

    # Naming conventions

    @staticmethod
    def primary_key_name(table_name: str) -> str:
        return f"PK_{table_name}"

    @staticmethod
    def foreign_key_name(table_name: str, related_table: str) -> str:
        return f"FK_{table_name}_{related_table}"

    @staticmethod
    def unique_name(table_name: str, columns: Sequence[str]) -> str:
        return f"UQ_{table_name}{''.join(columns)}"

    @staticmethod
    def index_name(table_name: str, columns: Sequence[str]) -> str:
        return f"IX_{table_name}_{''.join(columns)}"

    def constraint_name(self, constraint: BaseConstraint) -> str:
        """Explicit constraint name, or the conventional one."""
        if constraint.name:
            return constraint.name
        if isinstance(constraint, PrimaryKeyConstraint):
            return self.primary_key_name(constraint.table_name)
        if isinstance(constraint, ForeignKeyConstraint):
            if not constraint.related_table:
                raise validation_error(
                    f"Foreign key on '{constraint.table_name}' needs a name or a related table",
                    field="name",
                )
            return self.foreign_key_name(constraint.table_name, constraint.related_table)
        return self.unique_name(constraint.table_name, constraint.columns)

    # Value and fragment formatting

    def format_value(self, value: Any) -> str:
        """Format a literal value.

        Numbers are rendered locale independently. Datetimes use
        ``yyyy-MM-dd`` with `` HH:mm:ss`` appended only when a sub-day
        component is nonzero. Everything else becomes a quoted string.
        """
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return repr(value)
        if isinstance(value, Decimal):
            return format(value, "f")
        if isinstance(value, datetime):
            fmt = "%Y-%m-%d"
            if value.hour or value.minute or value.second:
                fmt += " %H:%M:%S"
            return self.dialect.quote_string(value.strftime(fmt))
        if isinstance(value, date):
            return self.dialect.quote_string(value.strftime("%Y-%m-%d"))
        return self.dialect.quote_string(str(value))

    def format_column_list(self, columns: Sequence[str]) -> str:
        return ", ".join(self.dialect.escape_column_name(c) for c in columns)

    def render_type(self, column: Column) -> str:
        """Render a column's type, failing on a missing or unmapped type."""
        if column.data_type is None:
            raise validation_error(
                f"Column '{column.name}' has no data type",
                field="data_type",
                value=column.name,
            )
        rendered = self.dialect.render_type(
            column.data_type, column.length, column.scale, column.precision
        )
        if not rendered:
            raise unmapped_type_error(
                column.data_type.value,
                self.dialect_name,
                column=column.name,
            )
        return rendered

    def build_column(self, column: Column) -> str:
        """Column fragment: name, type, nullability, identity and default."""
        sql = (
            f"{self.dialect.escape_column_name(column.name)} "
            f"{self.render_type(column)} "
            f"{'NULL' if column.nullable else 'NOT NULL'}"
        )
        if column.auto_increment:
            sql += " " + self.dialect.auto_increment(column.seed, column.step)
        if column.default_value is not None:
            sql += " DEFAULT " + self.format_value(column.default_value)
        return sql

    # Tables

    def _create_table(self, table: Table) -> List[str]:
        elements = [self.build_column(column) for column in table.columns]
        elements.extend(self._inline_constraints(table))
        if not elements:
            raise validation_error(
                f"Table '{table.name}' has no columns",
                field="columns",
                value=table.name,
            )

        lines = []
        last = len(elements) - 1
        for i, element in enumerate(elements):
            lines.append(f"\t{element}{',' if i != last else ''}\n")

        return [f"CREATE TABLE {self.dialect.escape_table_name(table.name)} (\n{''.join(lines)});"]

    def _inline_constraints(self, table: Table) -> List[str]:
        """Render the table's constraints and remove them from the queue.

        Order is fixed: primary key, foreign keys, then unique constraints,
        each group in declaration order.
        """
        constraints: List[BaseConstraint] = []
        if table.primary_key is not None:
            constraints.append(table.primary_key)
        constraints.extend(table.foreign_keys)
        constraints.extend(table.unique_constraints)

        fragments = []
        for constraint in constraints:
            fragments.append(self._inline_constraint(constraint))
            if table.database is not None:
                table.database.remove(constraint)
        return fragments

    def _inline_constraint(self, constraint: BaseConstraint) -> str:
        prefix = ""
        if constraint.name:
            prefix = f"CONSTRAINT {self.dialect.escape_constraint_name(constraint.name)} "
        return prefix + self._constraint_body(constraint)

    def _constraint_body(self, constraint: BaseConstraint) -> str:
        columns = self.format_column_list(constraint.columns)
        if isinstance(constraint, PrimaryKeyConstraint):
            return f"PRIMARY KEY ({columns})"
        if isinstance(constraint, ForeignKeyConstraint):
            return (
                f"FOREIGN KEY ({columns}) "
                f"REFERENCES {self.dialect.escape_table_name(constraint.related_table)} "
                f"({self.format_column_list(constraint.related_columns)})"
            )
        return f"UNIQUE ({columns})"

    def _drop_table(self, table: Table) -> List[str]:
        return [f"DROP TABLE {self.dialect.escape_table_name(table.name)};"]

    def _alter_table(self, table: Table) -> List[str]:
        name = self.dialect.escape_table_name(table.name)
        return [f"ALTER TABLE {name} {self._alter_column(table, column)};" for column in table.columns]

    def _alter_column(self, table: Table, column: Column) -> str:
        if column.modifier == Modifier.ADD:
            return "ADD " + self.build_column(column)
        if column.modifier == Modifier.DROP:
            return "DROP COLUMN " + self.dialect.escape_column_name(column.name)

        old_name = self.dialect.escape_column_name(column.name)
        if column.is_renamed and column.has_type_change:
            return f"CHANGE {old_name} {self.build_column(column.renamed())}"
        if column.is_renamed:
            return self.dialect.rename_column(
                old_name, self.dialect.escape_column_name(column.new_name)
            )
        if column.has_type_change:
            return "MODIFY " + self.build_column(column)

        raise validation_error(
            f"Altering column '{column.name}' on '{table.name}' requires a new name or a data type",
            field="column",
            value=column.name,
            error_code=ErrorCode.INVALID_ARGUMENT,
        )

    # Rows and raw statements

    def _insert(self, insert: Insert) -> List[str]:
        columns = self.format_column_list(list(insert.row.keys()))
        values = ", ".join(self.format_value(v) for v in insert.row.values())
        return [
            f"INSERT INTO {self.dialect.escape_table_name(insert.table_name)} "
            f"({columns}) VALUES({values});"
        ]

    def _sql_statement(self, statement: SqlStatement) -> List[str]:
        sql = statement.sql
        return [sql if sql.endswith(";") else sql + ";"]

    # Indexes

    def _create_index(self, index: Index) -> List[str]:
        name = index.name or self.index_name(index.table_name, index.columns)
        return [
            f"CREATE INDEX {self.dialect.escape_constraint_name(name)} "
            f"ON {self.dialect.escape_table_name(index.table_name)} "
            f"({self.format_column_list(index.columns)});"
        ]

    def _drop_index(self, index: Index) -> List[str]:
        name = index.name or self.index_name(index.table_name, index.columns)
        return [
            self.dialect.drop_index(
                self.dialect.escape_constraint_name(name),
                self.dialect.escape_table_name(index.table_name),
            )
        ]

    # Standalone constraints

    def _add_constraint(self, constraint: BaseConstraint) -> List[str]:
        return [
            f"ALTER TABLE {self.dialect.escape_table_name(constraint.table_name)} "
            f"ADD CONSTRAINT {self.dialect.escape_constraint_name(self.constraint_name(constraint))} "
            f"{self._constraint_body(constraint)};"
        ]

    def _add_primary_key(self, constraint: PrimaryKeyConstraint) -> List[str]:
        return self._add_constraint(constraint)

    def _add_foreign_key(self, constraint: ForeignKeyConstraint) -> List[str]:
        return self._add_constraint(constraint)

    def _add_unique(self, constraint: UniqueConstraint) -> List[str]:
        return self._add_constraint(constraint)

    def _drop_constraint(self, constraint: BaseConstraint) -> List[str]:
        return [
            f"ALTER TABLE {self.dialect.escape_table_name(constraint.table_name)} "
            f"DROP CONSTRAINT {self.dialect.escape_constraint_name(self.constraint_name(constraint))};"
        ]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dialect={self.dialect_name!r}, strict={self.strict})"
