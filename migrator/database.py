"""Database engine and the statement-batch executor.

The runner never opens connections on its own. Callers build an engine
with `get_engine()` and hand an `SQLExecutor` to the runner; the executor
holds exactly one raw DBAPI connection for the lifetime of a run and
returns it to the pool when the `with` block exits, however it exits.
"""

import logging
from typing import List

from sqlalchemy import inspect
from sqlalchemy.engine import Engine, make_url
from sqlmodel import create_engine

logger = logging.getLogger("migrator.database")


def get_engine(database_url: str, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine for `database_url`.

    SQLite engines are created with `check_same_thread` disabled so the
    same engine can be shared with test helpers.
    """
    connect_args = {}
    if make_url(database_url).get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def mask_url(database_url: str) -> str:
    """Return `database_url` with any password replaced by `***`."""
    return make_url(database_url).render_as_string(hide_password=True)


def list_tables(engine: Engine) -> List[str]:
    """Return the table names visible in the engine's default schema."""
    return sorted(inspect(engine).get_table_names())


class SQLExecutor:
    """Run whole SQL files over a single pooled connection.

    Use as a context manager::

        with SQLExecutor(engine) as executor:
            executor.execute(sql)

    `execute` raises the driver's exception unchanged when a batch fails,
    after rolling back so the connection can run the next batch.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._conn = None

    def __enter__(self) -> "SQLExecutor":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def is_sqlite(self) -> bool:
        return self.engine.dialect.name == "sqlite"

    def open(self) -> None:
        if self._conn is None:
            self._conn = self.engine.raw_connection()
            logger.debug("Acquired connection to %s", mask_url(str(self.engine.url)))

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Released connection")

    def execute(self, sql: str) -> None:
        """Submit `sql` as one batch and commit it."""
        if self._conn is None:
            raise RuntimeError("SQLExecutor is not open; use it as a context manager")
        try:
            if self.is_sqlite:
                # sqlite3 cursors refuse multi-statement strings
                self._conn.driver_connection.executescript(sql)
            else:
                cursor = self._conn.cursor()
                try:
                    cursor.execute(sql)
                finally:
                    cursor.close()
            self._conn.commit()
        except Exception:
            self._rollback_quietly()
            raise

    def _rollback_quietly(self) -> None:
        try:
            self._conn.rollback()
        except Exception as exc:
            # the batch error is re-raised by the caller
            logger.warning("Rollback after failed batch also failed: %s", exc)

