"""Migration lifecycle events.

Hooks are plain callables invoked synchronously on the engine's thread.
A before-migration hook can stop the whole run by returning ``False`` or
by setting ``event.cancel``; the unit it was announced for never runs.
"""

from typing import Any, Callable, Optional

from pydantic import Field

from ddlflow.constants.migration import MigrationDirection
from ddlflow.types.base import FlowBaseModel


class MigrationEvent(FlowBaseModel):
    """Common event payload.

    Attributes:
        version: Version of the unit
        migration: The migration unit instance
        direction: Direction the unit is applied in
    """
    version: int
    migration: Any = Field(..., exclude=True)
    direction: MigrationDirection

    @property
    def migration_name(self) -> str:
        return type(self.migration).__name__


class BeforeMigrationEvent(MigrationEvent):
    """Fired before a unit is populated; cancellable."""
    cancel: bool = Field(default=False)


class AfterMigrationEvent(MigrationEvent):
    """Fired after a unit has committed."""
    command_count: int = Field(default=0, ge=0)
    duration_seconds: float = Field(default=0.0, ge=0)


BeforeMigrationHook = Callable[[BeforeMigrationEvent], Optional[bool]]
AfterMigrationHook = Callable[[AfterMigrationEvent], None]
