"""Shared fixtures for ddlflow tests."""

from typing import Any, List, Optional

import pytest

from ddlflow.constants.sql import SqlType
from ddlflow.migrations import Migration, MigrationRegistry
from ddlflow.operations import Database
from ddlflow.query_builder import SqlCompiler, SqlServerDialect
from ddlflow.settings import _reload_settings


class FakeHandle:
    def __init__(self, number: int):
        self.number = number


class FakeDriver:
    """In-memory driver recording every call.

    Any command containing ``fail_on`` raises, mimicking a database error.
    """

    def __init__(self, fail_on: Optional[str] = None):
        self.fail_on = fail_on
        self.executed: List[str] = []
        self.events: List[str] = []
        self._handles = 0
        self.open: Optional[FakeHandle] = None

    def begin(self) -> FakeHandle:
        assert self.open is None, "nested transaction"
        self._handles += 1
        self.open = FakeHandle(self._handles)
        self.events.append("begin")
        return self.open

    def execute(self, sql: str) -> None:
        assert self.open is not None, "execute outside a transaction"
        if self.fail_on and self.fail_on in sql:
            raise RuntimeError(f"boom: {sql}")
        self.executed.append(sql)
        self.events.append("execute")

    def commit(self, handle: Any) -> None:
        assert handle is self.open
        self.open = None
        self.events.append("commit")

    def rollback(self, handle: Any) -> None:
        assert handle is self.open
        self.open = None
        self.events.append("rollback")


class FakeLedger:
    """Ledger that refuses writes outside the driver's transaction."""

    def __init__(self, driver: FakeDriver, applied: Optional[List[int]] = None):
        self.driver = driver
        self.applied = set(applied or [])

    def current_version(self) -> int:
        return max(self.applied) if self.applied else 0

    def mark_applied(self, version: int) -> None:
        assert self.driver.open is not None
        self.applied.add(version)

    def mark_unapplied(self, version: int) -> None:
        assert self.driver.open is not None
        self.applied.discard(version)


class CreateUsers(Migration):
    """Create the Users table."""

    def up(self, db: Database) -> None:
        users = db.add_table("Users")
        users.add_column("Id", SqlType.INT, nullable=False)
        users.add_column("Name", SqlType.VARCHAR, 50)
        users.add_primary_key("Id")

    def down(self, db: Database) -> None:
        db.drop_table("Users")


class SeedUsers(Migration):
    """Seed the Users table."""

    def __init__(self):
        self.populated = 0

    def up(self, db: Database) -> None:
        self.populated += 1
        db.insert("Users", Id=1, Name="admin")

    def down(self, db: Database) -> None:
        self.populated += 1
        db.execute_sql("DELETE FROM [Users] WHERE [Id] = 1")


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate settings from the developer's environment."""
    for key in (
        "DDLFLOW_DATABASE_URL",
        "DDLFLOW_DIALECT",
        "DDLFLOW_LEDGER_TABLE",
        "DDLFLOW_STRICT_COMPILATION",
        "DDLFLOW_LOG_LEVEL",
        "DDLFLOW_ECHO_SQL",
    ):
        monkeypatch.delenv(key, raising=False)
    _reload_settings()
    yield
    monkeypatch.undo()
    _reload_settings()


@pytest.fixture
def dialect() -> SqlServerDialect:
    return SqlServerDialect()


@pytest.fixture
def compiler(dialect) -> SqlCompiler:
    return SqlCompiler(dialect)


@pytest.fixture
def db() -> Database:
    return Database()


@pytest.fixture
def registry() -> MigrationRegistry:
    registry = MigrationRegistry()
    registry.register(1, CreateUsers)
    registry.register(2, SeedUsers)
    return registry


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def ledger(driver) -> FakeLedger:
    return FakeLedger(driver)
