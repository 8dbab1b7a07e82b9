"""Migration engine.

Resolves which migration units stand between the ledger's current version
and a target version, then applies them one at a time. Each unit is
populated into a fresh ``Database``, compiled, and executed inside a single
transaction that also records the ledger change. Any failure rolls the
unit back and stops the run.
"""

import time
import uuid
from typing import Any, List, Optional, Tuple

from pydantic import Field

from ddlflow.common.exceptions import (
    ErrorCode,
    migration_failed_error,
    validation_error,
)
from ddlflow.constants.migration import EngineState, MigrationDirection, RunOutcome
from ddlflow.logging import clear_run_context, get_logger, set_run_context
from ddlflow.migrations.base import Migration
from ddlflow.migrations.driver import DatabaseDriver
from ddlflow.migrations.events import (
    AfterMigrationEvent,
    AfterMigrationHook,
    BeforeMigrationEvent,
    BeforeMigrationHook,
)
from ddlflow.migrations.ledger import VersionLedger
from ddlflow.migrations.registry import MigrationRegistry, get_registry
from ddlflow.monitoring.metrics import MetricsCollector, MigrationMetrics
from ddlflow.operations.database import Database
from ddlflow.query_builder.base import SqlCompiler
from ddlflow.query_builder.script import build_script
from ddlflow.types.base import FlowBaseModel
from ddlflow.utils.decorators import traced

logger = get_logger(__name__)

Plan = List[Tuple[int, Migration]]


class MigrationRunResult(FlowBaseModel):
    """Outcome of one ``migrate`` call.

    Attributes:
        outcome: COMPLETED, UP_TO_DATE or CANCELLED
        start_version: Ledger version when the run started
        end_version: Ledger version when the run ended
        direction: Direction of the run, None when already up to date
        applied_versions: Versions committed by this run, in order
        cancelled_version: Version whose before-hook cancelled the run
        run_id: Correlation id attached to the run's log records
    """
    outcome: RunOutcome
    start_version: int
    end_version: int
    direction: Optional[MigrationDirection] = None
    applied_versions: List[int] = Field(default_factory=list)
    cancelled_version: Optional[int] = None
    run_id: str


class MigrationEngine:
    """Applies registered migration units to reach a target version.

    Example:
        >>> driver = SQLAlchemyDriver(url="mssql+pyodbc:///?odbc_connect=...")
        >>> engine = MigrationEngine(
        ...     driver=driver,
        ...     ledger=SqlVersionLedger(driver),
        ...     compiler=get_compiler(driver.dialect_name),
        ... )
        >>> result = engine.migrate()          # latest version
        >>> result = engine.migrate(0)         # revert everything
    """

    def __init__(
        self,
        driver: DatabaseDriver,
        ledger: VersionLedger,
        compiler: SqlCompiler,
        registry: Optional[MigrationRegistry] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.driver = driver
        self.ledger = ledger
        self.compiler = compiler
        self.registry = registry if registry is not None else get_registry()
        self.metrics = metrics
        self.state = EngineState.IDLE
        self._before_hooks: List[BeforeMigrationHook] = []
        self._after_hooks: List[AfterMigrationHook] = []

    # Hooks

    def before_migration(self, hook: BeforeMigrationHook) -> BeforeMigrationHook:
        """Register a before-migration hook; usable as a decorator.

        Returning ``False`` or setting ``event.cancel`` aborts the run.
        """
        self._before_hooks.append(hook)
        return hook

    def after_migration(self, hook: AfterMigrationHook) -> AfterMigrationHook:
        self._after_hooks.append(hook)
        return hook

    def _fire_before(self, event: BeforeMigrationEvent) -> bool:
        for hook in self._before_hooks:
            if hook(event) is False:
                event.cancel = True
            if event.cancel:
                return False
        return True

    def _fire_after(self, event: AfterMigrationEvent) -> None:
        for hook in self._after_hooks:
            hook(event)

    # Resolution

    def resolve(
        self, target_version: Optional[int] = None
    ) -> Tuple[int, int, Optional[MigrationDirection], Plan]:
        """Work out direction and candidate units for a target.

        Args:
            target_version: Version to reach; latest registered when None

        Returns:
            (current version, target version, direction or None, plan)

        Raises:
            DDLFlowError: VERSION_NOT_FOUND for a target that is neither 0
                nor a registered version
        """
        target = self.registry.latest_version if target_version is None else target_version
        if target != 0 and target not in self.registry:
            raise validation_error(
                f"Target version {target} is not a registered migration",
                field="target_version",
                value=target,
                error_code=ErrorCode.VERSION_NOT_FOUND,
            )

        current = self.ledger.current_version()
        if current != 0 and current not in self.registry:
            logger.warning(
                "Ledger version is not a registered migration",
                extra={"current_version": current, "latest_version": self.registry.latest_version},
            )

        if target > current:
            direction = MigrationDirection.UP
            plan = [(v, m) for v, m in self.registry.ascending() if current < v <= target]
        elif target < current:
            direction = MigrationDirection.DOWN
            plan = [(v, m) for v, m in self.registry.descending() if target < v <= current]
        else:
            return current, target, None, []

        logger.info(
            "Migration plan resolved",
            extra={
                "current_version": current,
                "target_version": target,
                "direction": direction.value,
                "versions": [v for v, _ in plan],
            },
        )
        return current, target, direction, plan

    # Execution

    def migrate(self, target_version: Optional[int] = None) -> MigrationRunResult:
        """Apply or revert units until the ledger reaches ``target_version``.

        Raises:
            MigrationError: When a unit fails; the unit is rolled back and the
                ledger stays at the last committed version
        """
        run_id = uuid.uuid4().hex
        set_run_context(run_id=run_id)
        try:
            self.state = EngineState.RESOLVING
            current, target, direction, plan = self.resolve(target_version)

            if direction is None:
                logger.info("Database is up to date", extra={"current_version": current})
                self.state = EngineState.IDLE
                return MigrationRunResult(
                    outcome=RunOutcome.UP_TO_DATE,
                    start_version=current,
                    end_version=current,
                    run_id=run_id,
                )

            self.state = EngineState.RUNNING
            applied: List[int] = []
            for version, unit in plan:
                event = BeforeMigrationEvent(version=version, migration=unit, direction=direction)
                if not self._fire_before(event):
                    self.state = EngineState.ABORTED
                    logger.warning(
                        "Migration run cancelled",
                        extra={"version": version, "migration": unit.name, "direction": direction.value},
                    )
                    if self.metrics:
                        self.metrics.record_cancelled(version, direction.value)
                    return MigrationRunResult(
                        outcome=RunOutcome.CANCELLED,
                        start_version=current,
                        end_version=self.ledger.current_version(),
                        direction=direction,
                        applied_versions=applied,
                        cancelled_version=version,
                        run_id=run_id,
                    )

                command_count, duration = self._apply(version, unit, direction)
                applied.append(version)

                self._fire_after(
                    AfterMigrationEvent(
                        version=version,
                        migration=unit,
                        direction=direction,
                        command_count=command_count,
                        duration_seconds=duration,
                    )
                )

            end_version = self.ledger.current_version()
            self.state = EngineState.IDLE
            logger.info(
                "Migration run completed",
                extra={"start_version": current, "end_version": end_version, "applied": applied},
            )
            return MigrationRunResult(
                outcome=RunOutcome.COMPLETED,
                start_version=current,
                end_version=end_version,
                direction=direction,
                applied_versions=applied,
                run_id=run_id,
            )
        except Exception:
            self.state = EngineState.FAILED
            raise
        finally:
            clear_run_context()

    def _populate(self, unit: Migration, direction: MigrationDirection) -> Database:
        db = Database(name=unit.name)
        if direction == MigrationDirection.UP:
            unit.up(db)
        else:
            unit.down(db)
        return db

    @traced(
        span_name="ddlflow.migration.apply",
        attribute_getter=lambda self, version, unit, direction: {
            "ddlflow.migration.version": version,
            "ddlflow.migration.name": unit.name,
            "ddlflow.migration.direction": direction.value,
        },
    )
    def _apply(self, version: int, unit: Migration, direction: MigrationDirection) -> Tuple[int, float]:
        """Run one unit in its own transaction.

        Returns:
            (number of commands executed, duration in seconds)
        """
        set_run_context(migration_version=version)
        start_time = time.perf_counter()
        handle: Any = None
        executed = 0
        try:
            db = self._populate(unit, direction)
            commands = list(self.compiler.compile(db))

            handle = self.driver.begin()
            for command in commands:
                self.driver.execute(command)
                executed += 1

            if direction == MigrationDirection.UP:
                self.ledger.mark_applied(version)
            else:
                self.ledger.mark_unapplied(version)
            self.driver.commit(handle)
        except Exception as exc:
            if handle is not None:
                self._rollback(handle, version)
            duration = time.perf_counter() - start_time
            self._record(version, unit, direction, executed, duration, success=False, error=exc)
            raise migration_failed_error(version, direction, unit.name, exc) from exc

        duration = time.perf_counter() - start_time
        self._record(version, unit, direction, executed, duration, success=True)
        logger.info(
            "Migration applied",
            extra={
                "version": version,
                "migration": unit.name,
                "direction": direction.value,
                "command_count": executed,
                "duration.seconds": f"{duration:.6f}",
            },
        )
        return executed, duration

    def _rollback(self, handle: Any, version: int) -> None:
        try:
            self.driver.rollback(handle)
        except Exception as exc:
            logger.error(
                "Rollback failed",
                extra={"version": version, "error": str(exc)},
                exc_info=True,
            )

    def _record(
        self,
        version: int,
        unit: Migration,
        direction: MigrationDirection,
        command_count: int,
        duration: float,
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        if self.metrics is None:
            return
        self.metrics.record_migration(
            MigrationMetrics(
                version=version,
                migration=unit.name,
                direction=direction.value,
                command_count=command_count,
                duration_seconds=duration,
                success=success,
                error_message=str(error) if error else None,
            )
        )

    # Script output

    def generate_script(self, target_version: Optional[int] = None) -> str:
        """Compile the units a ``migrate`` call would run into a script.

        Nothing is executed, the ledger is not written and hooks are not
        fired. Each unit's section starts with a comment naming it.
        """
        _, _, direction, plan = self.resolve(target_version)
        if direction is None:
            return ""

        sections = []
        for version, unit in plan:
            try:
                commands = list(self.compiler.compile(self._populate(unit, direction)))
            except Exception as exc:
                raise migration_failed_error(version, direction, unit.name, exc) from exc
            sections.append(
                build_script(
                    commands,
                    self.compiler.dialect,
                    header=f"Migration {version}: {unit.name} ({direction.value})",
                )
            )
        return "\n".join(sections)
