from pathlib import Path
import sqlite3
import pytest

from migrator.database import get_engine


class RecordingExecutor:
    """Stand-in executor that remembers every batch it was given.

    `errors` maps a substring of a batch to the exception raised when a
    batch containing it is executed.
    """
    def __init__(self, errors=None):
        self.executed = []
        self.errors = errors or {}

    def execute(self, sql):
        for marker, exc in self.errors.items():
            if marker in sql:
                raise exc
        self.executed.append(sql)


class FakePgError(Exception):
    """Mimics a psycopg error carrying a SQLSTATE."""
    def __init__(self, message, pgcode):
        super().__init__(message)
        self.pgcode = pgcode


@pytest.fixture
def migrations_dir(tmp_path):
    d = tmp_path / "migrations"
    d.mkdir()
    return d


@pytest.fixture
def write_migration(migrations_dir):
    def _write(name, sql):
        path = migrations_dir / name
        path.write_text(sql, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
def engine(db_path):
    eng = get_engine(f"sqlite:///{db_path}")
    yield eng
    eng.dispose()


@pytest.fixture
def table_names(db_path):
    def _names():
        with sqlite3.connect(db_path) as conn:
            rows = conn.execute("SELECT name FROM sqlite_master WHERE type IN ('table', 'index') ORDER BY name").fetchall()
        return [r[0] for r in rows if not r[0].startswith("sqlite_")]
    return _names


@pytest.fixture
def repo_migrations():
    return Path(__file__).resolve().parents[1] / "migrations"
