"""Migration discovery.

The registry supplies versioned migration units to the engine in ascending
or descending version order. Units are usually registered with the
``@migration(version)`` class decorator.
"""

from typing import Callable, Dict, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from ddlflow.common.exceptions import ErrorCode, validation_error
from ddlflow.logging import get_logger
from ddlflow.migrations.base import Migration

logger = get_logger(__name__)

M = TypeVar("M", bound=Type[Migration])


class MigrationRegistry:
    """Ordered collection of ``(version, Migration)`` pairs.

    Versions are positive integers; version 0 means "nothing applied".
    """

    def __init__(self) -> None:
        self._migrations: Dict[int, Migration] = {}

    def register(self, version: int, migration: Union[Migration, Type[Migration]]) -> Migration:
        """Register a unit under ``version``.

        Args:
            version: Positive, unique version number
            migration: Migration instance or class (instantiated without arguments)

        Returns:
            The registered instance

        Raises:
            DDLFlowError: INVALID_ARGUMENT for a non-positive version,
                DUPLICATE_VERSION if the version is taken
        """
        if isinstance(version, bool) or not isinstance(version, int) or version <= 0:
            raise validation_error(
                f"Migration version must be a positive integer, got {version!r}",
                field="version",
                value=version,
                error_code=ErrorCode.INVALID_ARGUMENT,
            )
        if version in self._migrations:
            raise validation_error(
                f"Migration version {version} is already registered by "
                f"{self._migrations[version].name}",
                field="version",
                value=version,
                error_code=ErrorCode.DUPLICATE_VERSION,
            )

        instance = migration() if isinstance(migration, type) else migration
        instance.version = version
        self._migrations[version] = instance
        logger.debug(
            "Migration registered",
            extra={"version": version, "migration": instance.name},
        )
        return instance

    def migration(self, version: int) -> Callable[[M], M]:
        """Class decorator registering a ``Migration`` subclass."""
        def decorator(cls: M) -> M:
            cls.version = version
            self.register(version, cls)
            return cls
        return decorator

    def get(self, version: int) -> Migration:
        try:
            return self._migrations[version]
        except KeyError:
            raise validation_error(
                f"No migration registered for version {version}",
                field="version",
                value=version,
                error_code=ErrorCode.VERSION_NOT_FOUND,
            ) from None

    def versions(self) -> List[int]:
        return sorted(self._migrations)

    @property
    def latest_version(self) -> int:
        """Highest registered version, or 0 when empty."""
        return max(self._migrations) if self._migrations else 0

    def ascending(self) -> Iterator[Tuple[int, Migration]]:
        for version in self.versions():
            yield version, self._migrations[version]

    def descending(self) -> Iterator[Tuple[int, Migration]]:
        for version in reversed(self.versions()):
            yield version, self._migrations[version]

    def clear(self) -> None:
        self._migrations.clear()

    def __contains__(self, version: object) -> bool:
        return version in self._migrations

    def __iter__(self) -> Iterator[Tuple[int, Migration]]:
        return self.ascending()

    def __len__(self) -> int:
        return len(self._migrations)


_default_registry = MigrationRegistry()


def get_registry() -> MigrationRegistry:
    """Process-wide registry used by ``@migration`` when none is given."""
    return _default_registry


def migration(version: int, registry: Optional[MigrationRegistry] = None) -> Callable[[M], M]:
    """Register a ``Migration`` subclass under a version.

    Args:
        version: Positive, unique version number
        registry: Target registry; the process-wide registry by default

    Example:
        >>> @migration(3)
        ... class AddEmailToUsers(Migration):
        ...     def up(self, db):
        ...         db.alter_table("Users").add_column("Email", SqlType.NVARCHAR, 255)
        ...
        ...     def down(self, db):
        ...         db.alter_table("Users").drop_column("Email")
    """
    return (registry or _default_registry).migration(version)
