"""Migration unit definition.

A migration unit is one versioned bundle of forward (``up``) and reverse
(``down``) schema-change logic. Both methods receive a fresh ``Database``
and populate its operation queue; they never execute SQL themselves.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ddlflow.operations.database import Database


class Migration(ABC):
    """Base class for migration units.

    Example:
        >>> @migration(1)
        ... class CreateUsers(Migration):
        ...     def up(self, db):
        ...         users = db.add_table("Users")
        ...         users.add_column("Id", SqlType.INT, nullable=False)
        ...         users.add_primary_key("Id")
        ...
        ...     def down(self, db):
        ...         db.drop_table("Users")
    """

    version: Optional[int] = None

    @abstractmethod
    def up(self, db: Database) -> None:
        """Populate ``db`` with the operations that apply this unit."""
        pass

    @abstractmethod
    def down(self, db: Database) -> None:
        """Populate ``db`` with the operations that revert this unit."""
        pass

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def description(self) -> str:
        """First line of the class docstring, or the class name."""
        doc = (type(self).__doc__ or "").strip()
        return doc.splitlines()[0] if doc else self.name

    def __repr__(self) -> str:
        return f"{self.name}(version={self.version})"
