"""Command-line entrypoint.

Commands:
- run (default): apply pending migrations, exit 0 on success and 1 on
  any fatal failure
- list: print the ordered files a run would visit, without executing
- tables: list the tables currently in the target database

Flags override the environment-backed `settings`.
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, is_log_level
from .database import get_engine, list_tables, mask_url
from .models import AppliedMigration
from .repositories import LedgerRepository
from .schemas import RunOptions
from .services import run_migrations
from .utils.discovery import find_migration_files

logger = logging.getLogger("migrator.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="migrator", description="Apply SQL migration files in filename order.")
    parser.add_argument("command", nargs="?", default="run", choices=("run", "list", "tables"))
    parser.add_argument("--dir", dest="directory", type=Path, help="Migrations directory (MIGRATIONS_DIR)")
    parser.add_argument("--database-url", help="SQLAlchemy database URL (DATABASE_URL)")
    bootstrap = parser.add_mutually_exclusive_group()
    bootstrap.add_argument("--skip-bootstrap", dest="skip_bootstrap", action="store_true", default=None,
                           help="Exclude files starting with BOOTSTRAP_PREFIX")
    bootstrap.add_argument("--include-bootstrap", dest="skip_bootstrap", action="store_false",
                           help="Include bootstrap files even if SKIP_BOOTSTRAP is set")
    parser.add_argument("--ledger", action="store_true", default=None,
                        help="Record applied files in applied_migrations and skip recorded ones")
    parser.add_argument("--log-level", type=_log_level, help="Logging level (LOG_LEVEL)")
    return parser


def _log_level(value: str) -> str:
    if not is_log_level(value):
        raise argparse.ArgumentTypeError(f"invalid log level: {value!r}")
    return value.upper()


def options_from(args: argparse.Namespace, cfg: Settings) -> RunOptions:
    skip_bootstrap = cfg.SKIP_BOOTSTRAP if args.skip_bootstrap is None else args.skip_bootstrap
    return RunOptions(
        extension=cfg.MIGRATIONS_EXTENSION,
        exclude_prefix=cfg.BOOTSTRAP_PREFIX if skip_bootstrap else None,
        ignorable_codes=cfg.IGNORABLE_ERROR_CODES,
        use_ledger=cfg.USE_LEDGER if args.ledger is None else args.ledger,
    )


def main(argv: Optional[List[str]] = None, cfg: Optional[Settings] = None) -> int:
    """Parse `argv`, run the chosen command and return the exit status."""
    args = build_parser().parse_args(argv)
    cfg = cfg or Settings()
    level = (args.log_level or cfg.LOG_LEVEL).upper()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("migrator").setLevel(level)

    directory = args.directory or cfg.MIGRATIONS_DIR
    database_url = args.database_url or cfg.DATABASE_URL
    options = options_from(args, cfg)

    if args.command == "list":
        return _list(directory, database_url, options)

    engine = None
    try:
        logger.info("Using database: %s", mask_url(database_url))
        engine = get_engine(database_url)
        if args.command == "tables":
            for name in list_tables(engine):
                print(name)
            return 0
        result = run_migrations(engine, directory, options)
    except (FileNotFoundError, SQLAlchemyError) as e:
        logger.error("Migration failed: %s", e)
        return 1
    finally:
        if engine is not None:
            engine.dispose()

    if not result.ok:
        failed = result.failure
        logger.error("Migration failed at %s: %s", failed.name, failed.error)
        return 1
    return 0


def _list(directory: Path, database_url: str, options: RunOptions) -> int:
    try:
        paths = find_migration_files(directory, options.extension, options.exclude_prefix)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1
    recorded = set()
    if options.use_ledger:
        try:
            recorded = _recorded_names(database_url)
        except SQLAlchemyError as e:
            logger.error("Could not read the ledger: %s", e)
            return 1
    for p in paths:
        marker = "  [recorded]" if p.name in recorded else ""
        print(f"{p.name}{marker}")
    return 0


def _recorded_names(database_url: str) -> set:
    """Ledger contents, or nothing if the ledger table was never created."""
    engine = get_engine(database_url)
    try:
        if not inspect(engine).has_table(AppliedMigration.__tablename__):
            return set()
        return LedgerRepository(engine).applied_names()
    finally:
        engine.dispose()


def cli() -> None:
    raise SystemExit(main())


if __name__ == '__main__':
    cli()
