"""Schema-change unit.

A ``Database`` is created fresh for every migration unit. Its methods are
the builder surface migration authors use: each call creates an operation
and appends it to the unit's queue, so the queue order is the call order.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ddlflow.constants.sql import Modifier
from ddlflow.logging import get_logger
from ddlflow.operations.base import BaseOperation
from ddlflow.operations.ddl import Index, Table
from ddlflow.operations.dml import Insert
from ddlflow.operations.queue import OperationQueue
from ddlflow.operations.raw import SqlStatement

logger = get_logger(__name__)


class Database:
    """Owner of one operation queue and the tables it has seen.

    Example:
        >>> db = Database()
        >>> users = db.add_table("Users")
        >>> users.add_column("Id", SqlType.INT, nullable=False)
        >>> users.add_column("Name", SqlType.VARCHAR, 50)
        >>> users.add_primary_key("Id")
        >>> db.insert("Users", {"Id": 1, "Name": "admin"})
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name
        self.queue = OperationQueue()
        self._tables: Dict[str, List[Table]] = {}

    # Queue access

    def enqueue(self, operation: BaseOperation) -> BaseOperation:
        operation.bind(self)
        self.queue.enqueue(operation)
        logger.debug(
            "Operation enqueued",
            extra=operation.telemetry_fields(),
        )
        return operation

    def remove(self, operation: BaseOperation) -> bool:
        return self.queue.remove(operation)

    # Table lookups

    @property
    def tables(self) -> List[Table]:
        """Every table operation declared on this unit, in declaration order."""
        seen: List[Table] = []
        for tables in self._tables.values():
            seen.extend(tables)
        return seen

    def get_table(self, name: str) -> Optional[Table]:
        """Most recently declared table operation with this name."""
        tables = self._tables.get(name)
        return tables[-1] if tables else None

    def has_primary_key(self, table_name: str) -> bool:
        return any(t.primary_key is not None for t in self._tables.get(table_name, []))

    # Builder surface

    def add_table(self, name: str) -> Table:
        return self._declare_table(name, Modifier.ADD)

    def alter_table(self, name: str) -> Table:
        return self._declare_table(name, Modifier.ALTER)

    def drop_table(self, name: str) -> Table:
        return self._declare_table(name, Modifier.DROP)

    def add_index(
        self,
        table_name: str,
        columns: Sequence[str],
        name: Optional[str] = None,
    ) -> Index:
        index = Index(name=name, table_name=table_name, columns=list(columns))
        self.enqueue(index)
        return index

    def drop_index(self, table_name: str, name: str) -> Index:
        index = Index(name=name, table_name=table_name, modifier=Modifier.DROP)
        self.enqueue(index)
        return index

    def insert(self, table_name: str, row: Optional[Mapping[str, Any]] = None, **values: Any) -> Insert:
        """Enqueue one seed row; column order follows the mapping order."""
        data = dict(row or {})
        data.update(values)
        operation = Insert(table_name=table_name, row=data)
        self.enqueue(operation)
        return operation

    def execute_sql(self, sql: str) -> SqlStatement:
        statement = SqlStatement(sql=sql)
        self.enqueue(statement)
        return statement

    def _declare_table(self, name: str, modifier: Modifier) -> Table:
        table = Table(name=name, modifier=modifier)
        self.enqueue(table)
        self._tables.setdefault(name, []).append(table)
        return table

    def __repr__(self) -> str:
        return f"Database(name={self.name!r}, queue={self.queue!r})"
