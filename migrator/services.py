"""Migration runner service.

`MigrationRunner` applies the migration files of one directory, in
filename order, through an injected executor. It never opens or closes
connections itself; `run_migrations()` is the convenience wrapper that
scopes an `SQLExecutor` around a run.

Per-file behaviour:
- executed without error -> `Applied`
- error classified as "already exists" -> `Skipped`, run continues
- any other error -> `Failed`, run stops; later files are never read
"""

import logging
from pathlib import Path
from typing import Optional, Protocol, Set

from sqlalchemy.engine import Engine

from .database import SQLExecutor
from .repositories import LedgerRepository
from .schemas import Applied, Failed, FileOutcome, MigrationFile, RunOptions, RunResult, Skipped
from .utils.discovery import find_migration_files, load_migration
from .utils.errors import error_code, is_ignorable

logger = logging.getLogger("migrator.runner")


class Executor(Protocol):
    def execute(self, sql: str) -> None:
        ...


class MigrationRunner:
    """Apply migrations sequentially through `executor`.

    `ledger` is only consulted when a run's options enable it.
    """
    def __init__(self, executor: Executor, ledger: Optional[LedgerRepository] = None):
        self.executor = executor
        self.ledger = ledger

    def plan(self, directory: Path, options: Optional[RunOptions] = None):
        """Return the ordered migration paths a run would visit."""
        options = options or RunOptions()
        return find_migration_files(directory, extension=options.extension, exclude_prefix=options.exclude_prefix)

    def run(self, directory: Path, options: Optional[RunOptions] = None) -> RunResult:
        """Apply every pending migration in `directory`.

        Raises `FileNotFoundError` if the directory is missing; database
        errors never escape, they are reported in the returned result.
        """
        options = options or RunOptions()
        ledger = self._ledger_for(options)
        paths = self.plan(directory, options)
        logger.info("Found %d migration files in %s: %s", len(paths), directory, [p.name for p in paths])

        recorded: Set[str] = ledger.applied_names() if ledger else set()
        result = RunResult()
        for path in paths:
            if path.name in recorded:
                logger.info("Already recorded, skipping: %s", path.name)
                result.outcomes.append(Skipped(name=path.name, reason="recorded in ledger"))
                continue
            migration = load_migration(path)
            outcome = self.apply(migration, options)
            result.outcomes.append(outcome)
            if isinstance(outcome, Failed):
                result.status = "aborted"
                result.aborted_at = migration.name
                logger.error("Migration run aborted at %s", migration.name)
                return result
            if ledger:
                ledger.record(migration.name, migration.checksum)

        logger.info(
            "All migrations completed successfully (%d applied, %d skipped)",
            len(result.applied), len(result.skipped),
        )
        return result

    def apply(self, migration: MigrationFile, options: RunOptions) -> FileOutcome:
        """Execute one migration and classify the outcome."""
        logger.info("Running migration: %s", migration.name)
        try:
            self.executor.execute(migration.contents)
        except Exception as exc:
            code = error_code(exc)
            if is_ignorable(exc, options.ignorable_codes):
                logger.info("Objects already exist, skipping: %s (%s)", migration.name, code)
                return Skipped(name=migration.name, reason=f"already exists ({code})")
            logger.error("Migration %s failed: %s", migration.name, exc)
            return Failed(name=migration.name, error=str(exc).strip(), code=code)
        logger.info("Completed migration: %s", migration.name)
        return Applied(name=migration.name)

    def _ledger_for(self, options: RunOptions) -> Optional[LedgerRepository]:
        if not options.use_ledger:
            return None
        if self.ledger is None:
            raise RuntimeError("use_ledger is set but the runner has no ledger")
        self.ledger.ensure_table()
        return self.ledger


def run_migrations(engine: Engine, directory: Path, options: Optional[RunOptions] = None) -> RunResult:
    """Run `directory` against `engine` over one scoped connection.

    The connection is released when the run finishes, aborts or raises.
    """
    options = options or RunOptions()
    ledger = LedgerRepository(engine) if options.use_ledger else None
    with SQLExecutor(engine) as executor:
        return MigrationRunner(executor, ledger=ledger).run(directory, options)
