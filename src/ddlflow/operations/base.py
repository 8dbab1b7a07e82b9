"""Base operation definitions.

This module defines the base operation class that all schema-change
operations inherit from. Operations are data structures that describe what
change should be made, independent of the SQL dialect that renders it.
"""

from typing import TYPE_CHECKING, Dict, Optional

from pydantic import Field, PrivateAttr

from ddlflow.constants.sql import Modifier, OperationKind
from ddlflow.types.base import FlowBaseModel

if TYPE_CHECKING:
    from ddlflow.operations.database import Database


class BaseOperation(FlowBaseModel):
    """Base class for all queued schema-change operations.

    Operations are pure data structures that describe WHAT to change,
    not HOW. They are lowered into SQL by a compiler and executed by the
    migration engine.

    Attributes:
        kind: Frozen discriminator identifying the operation variant
        modifier: Intended effect (ADD, ALTER or DROP)
    """
    kind: OperationKind
    modifier: Modifier = Field(default=Modifier.ADD)

    _database: Optional["Database"] = PrivateAttr(default=None)

    @property
    def database(self) -> Optional["Database"]:
        """Schema-change unit that owns this operation, if enqueued."""
        return self._database

    def bind(self, database: "Database") -> None:
        self._database = database

    def telemetry_fields(self) -> Dict[str, str]:
        """Return flattened telemetry fields describing this operation."""
        payload: Dict[str, str] = {
            "operation.kind": self.kind.value,
            "operation.modifier": self.modifier.value,
        }
        target = self.target_name
        if target:
            payload["operation.target"] = target
        return payload

    @property
    def target_name(self) -> Optional[str]:
        """Name of the table the operation applies to, when there is one."""
        return getattr(self, "table_name", None) or getattr(self, "name", None)
