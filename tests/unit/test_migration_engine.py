"""Tests for the migration engine against an in-memory driver and ledger."""

import logging
from unittest.mock import Mock

import pytest

from ddlflow.common.exceptions import DDLFlowError, ErrorCode, MigrationError
from ddlflow.constants.migration import EngineState, MigrationDirection, RunOutcome
from ddlflow.migrations import MigrationEngine
from ddlflow.monitoring import MetricsCollector


@pytest.fixture
def engine(driver, ledger, compiler, registry):
    return MigrationEngine(driver=driver, ledger=ledger, compiler=compiler, registry=registry)


class TestMigrateUp:

    def test_applies_every_unit_in_order(self, engine, driver, ledger):
        result = engine.migrate()

        assert result.outcome == RunOutcome.COMPLETED
        assert result.start_version == 0
        assert result.end_version == 2
        assert result.direction == MigrationDirection.UP
        assert result.applied_versions == [1, 2]
        assert ledger.current_version() == 2
        assert engine.state == EngineState.IDLE

        assert driver.executed[0].startswith("CREATE TABLE [Users] (")
        assert "\tPRIMARY KEY ([Id])\n" in driver.executed[0]
        assert driver.executed[1] == "INSERT INTO [Users] ([Id], [Name]) VALUES(1, 'admin');"

    def test_each_unit_has_its_own_transaction(self, engine, driver):
        engine.migrate()
        assert driver.events == ["begin", "execute", "commit", "begin", "execute", "commit"]

    def test_partial_target(self, engine, ledger):
        result = engine.migrate(1)
        assert result.applied_versions == [1]
        assert ledger.current_version() == 1

    def test_up_to_date(self, engine, driver, ledger):
        ledger.applied = {1, 2}
        result = engine.migrate()

        assert result.outcome == RunOutcome.UP_TO_DATE
        assert result.direction is None
        assert result.start_version == result.end_version == 2
        assert driver.events == []

    def test_unknown_target(self, engine):
        with pytest.raises(DDLFlowError) as exc_info:
            engine.migrate(9)
        assert exc_info.value.error_code == ErrorCode.VERSION_NOT_FOUND
        assert engine.state == EngineState.FAILED


class TestMigrateDown:

    def test_reverts_in_descending_order(self, engine, driver, ledger):
        ledger.applied = {1, 2}
        result = engine.migrate(0)

        assert result.direction == MigrationDirection.DOWN
        assert result.applied_versions == [2, 1]
        assert ledger.current_version() == 0
        assert driver.executed == [
            "DELETE FROM [Users] WHERE [Id] = 1;",
            "DROP TABLE [Users];",
        ]

    def test_partial_revert(self, engine, ledger):
        ledger.applied = {1, 2}
        engine.migrate(1)
        assert ledger.applied == {1}

    def test_end_version_comes_from_ledger(self, engine, ledger, caplog):
        ledger.applied = {1, 2, 5}

        with caplog.at_level(logging.WARNING, logger="ddlflow"):
            result = engine.migrate(0)

        assert result.outcome == RunOutcome.COMPLETED
        assert result.start_version == 5
        assert result.applied_versions == [2, 1]
        assert result.end_version == 5
        assert result.end_version == ledger.current_version()
        assert "Ledger version is not a registered migration" in caplog.text


class TestCollaboratorCalls:

    def test_driver_and_ledger_protocol(self, compiler, registry):
        driver = Mock()
        ledger = Mock()
        ledger.current_version.return_value = 0
        engine = MigrationEngine(driver, ledger, compiler, registry=registry)

        engine.migrate(1)

        handle = driver.begin.return_value
        driver.begin.assert_called_once_with()
        driver.execute.assert_called_once()
        assert driver.execute.call_args.args[0].startswith("CREATE TABLE [Users]")
        ledger.mark_applied.assert_called_once_with(1)
        driver.commit.assert_called_once_with(handle)
        driver.rollback.assert_not_called()

    def test_ledger_failure_rolls_back(self, compiler, registry):
        driver = Mock()
        ledger = Mock()
        ledger.current_version.return_value = 0
        ledger.mark_applied.side_effect = RuntimeError("ledger down")
        engine = MigrationEngine(driver, ledger, compiler, registry=registry)

        with pytest.raises(MigrationError) as exc_info:
            engine.migrate(1)

        assert exc_info.value.version == 1
        driver.rollback.assert_called_once_with(driver.begin.return_value)
        driver.commit.assert_not_called()


class TestFailure:

    def test_failed_unit_rolls_back_and_keeps_ledger(self, engine, driver, ledger):
        driver.fail_on = "INSERT INTO"

        with pytest.raises(MigrationError) as exc_info:
            engine.migrate()

        error = exc_info.value
        assert error.version == 2
        assert error.direction == MigrationDirection.UP
        assert error.migration_name == "SeedUsers"
        assert error.error_code == ErrorCode.MIGRATION_FAILED
        assert isinstance(error.cause, RuntimeError)

        assert ledger.current_version() == 1
        assert driver.events == ["begin", "execute", "commit", "begin", "rollback"]
        assert engine.state == EngineState.FAILED

    def test_compile_failure_happens_before_begin(self, engine, driver, ledger, registry):
        def broken_up(db):
            db.add_table("Empty")

        registry.get(2).up = broken_up

        with pytest.raises(MigrationError):
            engine.migrate()

        assert driver.events == ["begin", "execute", "commit"]
        assert ledger.current_version() == 1

    def test_failure_is_recorded_in_metrics(self, driver, ledger, compiler, registry):
        metrics = MetricsCollector()
        engine = MigrationEngine(driver, ledger, compiler, registry=registry, metrics=metrics)
        driver.fail_on = "INSERT INTO"

        with pytest.raises(MigrationError):
            engine.migrate()

        summary = metrics.get_metrics_summary()
        assert summary["successful_migrations"] == 1
        assert summary["failed_migrations"] == 1
        assert summary["failed_versions"] == [2]


class TestHooks:

    def test_returning_false_cancels(self, engine, driver, ledger, registry):
        seen = []

        @engine.before_migration
        def stop_at_two(event):
            seen.append(event.version)
            return event.version != 2

        result = engine.migrate()

        assert result.outcome == RunOutcome.CANCELLED
        assert result.cancelled_version == 2
        assert result.applied_versions == [1]
        assert result.end_version == 1
        assert seen == [1, 2]
        assert registry.get(2).populated == 0
        assert ledger.current_version() == 1
        assert engine.state == EngineState.ABORTED

    def test_cancel_flag(self, engine, driver):
        def cancel_everything(event):
            event.cancel = True

        engine.before_migration(cancel_everything)
        result = engine.migrate()

        assert result.outcome == RunOutcome.CANCELLED
        assert result.cancelled_version == 1
        assert driver.events == []

    def test_cancellation_skips_later_hooks(self, engine):
        calls = []
        engine.before_migration(lambda event: False)
        engine.before_migration(lambda event: calls.append(event.version))

        engine.migrate()
        assert calls == []

    def test_after_hook_receives_command_count(self, engine):
        events = []
        engine.after_migration(events.append)

        engine.migrate()

        assert [e.version for e in events] == [1, 2]
        assert [e.command_count for e in events] == [1, 1]
        assert events[0].migration_name == "CreateUsers"
        assert all(e.duration_seconds >= 0 for e in events)

    def test_after_hook_not_fired_for_failed_unit(self, engine, driver):
        events = []
        engine.after_migration(events.append)
        driver.fail_on = "INSERT INTO"

        with pytest.raises(MigrationError):
            engine.migrate()
        assert [e.version for e in events] == [1]


class TestGenerateScript:

    def test_script_for_pending_units(self, engine, driver, ledger):
        script = engine.generate_script()

        assert script.startswith("-- Migration 1: CreateUsers (up)\nCREATE TABLE [Users] (")
        assert "-- Migration 2: SeedUsers (up)\nINSERT INTO [Users]" in script
        assert driver.events == []
        assert ledger.current_version() == 0

    def test_script_down(self, engine, ledger):
        ledger.applied = {1, 2}
        script = engine.generate_script(0)
        assert script == (
            "-- Migration 2: SeedUsers (down)\n"
            "DELETE FROM [Users] WHERE [Id] = 1;\n"
            "\n"
            "-- Migration 1: CreateUsers (down)\n"
            "DROP TABLE [Users];\n"
        )

    def test_script_up_to_date(self, engine, ledger):
        ledger.applied = {1, 2}
        assert engine.generate_script() == ""
