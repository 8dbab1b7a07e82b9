"""Database driver for the migration engine.

The engine only needs four primitives: begin a transaction, execute a SQL
string, commit and roll back. ``SQLAlchemyDriver`` provides them on top of
one SQLAlchemy ``Connection`` held for the duration of a run, so the
version ledger can write through the same transaction as the unit.
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Protocol, runtime_checkable
from urllib import parse

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine, RootTransaction

from ddlflow.common.exceptions import (
    DDLFlowError,
    ErrorCode,
    configuration_error,
    query_execution_error,
)
from ddlflow.logging import get_logger
from ddlflow.utils.decorators import traced

logger = get_logger(__name__)


@runtime_checkable
class DatabaseDriver(Protocol):
    """Protocol for the physical database collaborator."""

    def begin(self) -> Any:
        """Open a transaction and return its handle."""
        ...

    def execute(self, sql: str) -> None:
        ...

    def commit(self, handle: Any) -> None:
        ...

    def rollback(self, handle: Any) -> None:
        ...


def build_odbc_url(odbc_connection_string: str) -> str:
    """Build a ``mssql+pyodbc`` SQLAlchemy URL from a raw ODBC string.

    Example:
        >>> build_odbc_url("Driver={ODBC Driver 18 for SQL Server};Server=db;Database=app")
        'mssql+pyodbc:///?odbc_connect=Driver%3D%7BODBC+Driver+18+...'
    """
    if not odbc_connection_string:
        raise configuration_error("ODBC connection string is empty", config_key="database_url")
    return f"mssql+pyodbc:///?odbc_connect={parse.quote_plus(odbc_connection_string)}"


class SQLAlchemyDriver:
    """SQLAlchemy-based driver executing raw SQL strings.

    Commands are sent with ``exec_driver_sql`` so compiled text reaches the
    DBAPI untouched (no bind-parameter parsing of ``:name`` tokens).

    Example:
        >>> driver = SQLAlchemyDriver(url="mssql+pyodbc:///?odbc_connect=...")
        >>> with driver.transaction():
        ...     driver.execute("CREATE TABLE [Users] ([Id] INT NOT NULL);")
        >>> driver.close()
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        url: Optional[str] = None,
        echo: Optional[bool] = None,
    ):
        """Initialize the driver.

        Args:
            engine: Existing SQLAlchemy engine; the driver will not dispose it
            url: Database URL used to create an engine; ``settings.database_url``
                when neither engine nor url is given
            echo: Echo SQL; ``settings.echo_sql`` when omitted
        """
        self._engine = engine
        self._owns_engine = engine is None
        self._url = url
        self._echo = echo
        self._connection: Optional[Connection] = None
        self._transaction: Optional[RootTransaction] = None

    @property
    def engine(self) -> Engine:
        """Get or create SQLAlchemy engine with lazy initialization."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        from ddlflow.settings import get_settings
        settings = get_settings()

        url = self._url or settings.database_url
        if not url:
            raise configuration_error(
                "No database URL configured; set DDLFLOW_DATABASE_URL or pass url=",
                config_key="database_url",
            )
        echo = settings.echo_sql if self._echo is None else self._echo

        if url.startswith("mssql+pyodbc"):
            import pyodbc
            # SQLAlchemy handles pooling
            pyodbc.pooling = False

        try:
            engine = create_engine(url, echo=echo, pool_pre_ping=True)
        except Exception as exc:
            raise DDLFlowError(
                f"Failed to create database engine: {exc}",
                error_code=ErrorCode.PLATFORM_ERROR,
                cause=exc,
            ) from exc

        logger.info("Created database engine", extra={"db.system": engine.dialect.name})
        return engine

    @property
    def dialect_name(self) -> str:
        """SQLAlchemy dialect name of the target (e.g. ``mssql``)."""
        return self.engine.dialect.name

    @property
    def connection(self) -> Connection:
        """Connection held for the lifetime of the driver.

        Reads outside ``begin()`` autobegin a transaction the driver does not
        own; the next ``begin()`` rolls it back before opening its own.
        """
        if self._connection is None or self._connection.closed:
            self._connection = self.engine.connect()
        return self._connection

    def _span_attributes(self, sql: str) -> Dict[str, Any]:
        """Build OpenTelemetry span attributes for a SQL command."""
        statement = (sql or "").strip()
        if len(statement) > 4096:
            statement = f"{statement[:4093]}..."
        return {
            "db.system": self.dialect_name,
            "db.operation": "execute",
            "db.statement": statement,
            "db.statement.length": len(statement),
        }

    # Transaction primitives

    @property
    def in_transaction(self) -> bool:
        """True while a transaction returned by ``begin()`` is open."""
        return self._transaction is not None and self._transaction.is_active

    def release_idle(self) -> None:
        """Roll back an autobegun transaction no ``begin()`` handle owns."""
        conn = self._connection
        if conn is None or conn.closed or self.in_transaction:
            return
        if conn.in_transaction():
            logger.debug("Rolling back idle autobegun transaction")
            conn.rollback()

    def begin(self) -> RootTransaction:
        if self.in_transaction:
            raise DDLFlowError(
                "A transaction is already open on the migration connection",
                error_code=ErrorCode.TRANSACTION_ERROR,
            )
        conn = self.connection
        self.release_idle()
        self._transaction = conn.begin()
        return self._transaction

    @traced(
        span_name="ddlflow.sql.execute",
        attribute_getter=lambda self, sql: self._span_attributes(sql),
    )
    def execute(self, sql: str) -> None:
        """Execute a single SQL command inside the open transaction."""
        if not self.in_transaction:
            raise DDLFlowError(
                "SQL commands must run inside a transaction opened with begin()",
                error_code=ErrorCode.TRANSACTION_ERROR,
            )
        start_time = time.time()
        try:
            self.connection.exec_driver_sql(sql)
        except Exception as exc:
            logger.error(
                "SQL command failed",
                extra={
                    "db.system": self.dialect_name,
                    "duration.seconds": f"{time.time() - start_time:.6f}",
                    "error": str(exc),
                },
            )
            raise query_execution_error(sql, exc) from exc

        logger.debug(
            "SQL command executed",
            extra={
                "db.system": self.dialect_name,
                "duration.seconds": f"{time.time() - start_time:.6f}",
            },
        )

    def commit(self, handle: RootTransaction) -> None:
        try:
            handle.commit()
        finally:
            if handle is self._transaction:
                self._transaction = None

    def rollback(self, handle: RootTransaction) -> None:
        try:
            if handle.is_active:
                handle.rollback()
        finally:
            if handle is self._transaction:
                self._transaction = None

    @contextmanager
    def transaction(self) -> Iterator[RootTransaction]:
        """Run a block in one transaction, rolling back on error."""
        handle = self.begin()
        try:
            yield handle
        except Exception:
            self.rollback(handle)
            raise
        self.commit(handle)

    def test_connection(self) -> bool:
        """Test if connection to the database is working."""
        try:
            return self.connection.exec_driver_sql("SELECT 1").scalar() == 1
        except Exception as exc:
            logger.error(
                "SQL connection test failed",
                extra={"error": str(exc)},
                exc_info=True,
            )
            return False
        finally:
            self.release_idle()

    def close(self) -> None:
        self._transaction = None
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        if self._owns_engine and self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "SQLAlchemyDriver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
