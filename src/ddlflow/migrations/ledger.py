"""Version ledger.

The ledger records which migration versions are applied. ``SqlVersionLedger``
keeps one row per applied version in a SQLAlchemy Core table and writes
through the driver's connection, so recording a version is part of the
unit's transaction and rolls back with it.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Protocol, runtime_checkable

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    MetaData,
    Table,
    delete,
    func,
    insert,
    select,
)
from sqlalchemy.engine import Connection

from ddlflow.common.exceptions import DDLFlowError, ErrorCode
from ddlflow.logging import get_logger
from ddlflow.migrations.driver import SQLAlchemyDriver

logger = get_logger(__name__)


@runtime_checkable
class VersionLedger(Protocol):
    """Protocol for the persisted record of applied versions."""

    def current_version(self) -> int:
        """Highest applied version, 0 when nothing is applied."""
        ...

    def mark_applied(self, version: int) -> None:
        ...

    def mark_unapplied(self, version: int) -> None:
        ...


class SqlVersionLedger:
    """Ledger stored in a ``schema_info`` style table.

    Columns:
        version: BIGINT primary key
        applied_at: DATETIME (UTC) the version was recorded
    """

    def __init__(self, driver: SQLAlchemyDriver, table_name: Optional[str] = None):
        """Initialize the ledger.

        Args:
            driver: Driver whose connection the ledger reads and writes through
            table_name: Ledger table; ``settings.ledger_table`` when omitted
        """
        if table_name is None:
            from ddlflow.settings import get_settings
            table_name = get_settings().ledger_table

        self.driver = driver
        self.metadata = MetaData()
        self.table = Table(
            table_name,
            self.metadata,
            Column("version", BigInteger, primary_key=True, autoincrement=False),
            Column("applied_at", DateTime, nullable=False),
        )
        self._ready = False

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        """Yield the driver connection inside a transaction.

        Joins the unit's transaction when one is open, otherwise runs in a
        short transaction of its own.
        """
        conn = self.driver.connection
        try:
            if self.driver.in_transaction:
                self._ensure_table(conn)
                yield conn
            else:
                self.driver.release_idle()
                with conn.begin():
                    self._ensure_table(conn)
                    yield conn
        except DDLFlowError:
            raise
        except Exception as exc:
            raise DDLFlowError(
                f"Version ledger '{self.table.name}' access failed: {exc}",
                error_code=ErrorCode.LEDGER_ERROR,
                details={"table": self.table.name},
                cause=exc,
            ) from exc

    def _ensure_table(self, conn: Connection) -> None:
        if not self._ready:
            self.metadata.create_all(conn, checkfirst=True)
            self._ready = True

    def current_version(self) -> int:
        with self._connection() as conn:
            version = conn.execute(select(func.max(self.table.c.version))).scalar()
        return int(version) if version is not None else 0

    def applied_versions(self) -> List[int]:
        with self._connection() as conn:
            rows = conn.execute(select(self.table.c.version).order_by(self.table.c.version))
            return [int(v) for v in rows.scalars()]

    def mark_applied(self, version: int) -> None:
        with self._connection() as conn:
            conn.execute(
                insert(self.table).values(
                    version=version,
                    applied_at=datetime.now(timezone.utc).replace(tzinfo=None),
                )
            )
        logger.info("Version recorded as applied", extra={"version": version})

    def mark_unapplied(self, version: int) -> None:
        with self._connection() as conn:
            conn.execute(delete(self.table).where(self.table.c.version == version))
        logger.info("Version recorded as unapplied", extra={"version": version})
