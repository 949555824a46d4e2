"""Classify database errors raised while executing a migration."""

from __future__ import annotations

import sqlite3
from typing import Iterable, Optional


DUPLICATE_TABLE = "42P07"


def error_code(exc: BaseException) -> Optional[str]:
    """Return the SQLSTATE-style code of a driver error, if it has one.

    SQLAlchemy `DBAPIError`s are unwrapped to the driver exception first.
    psycopg 3 and asyncpg expose `sqlstate`, psycopg2 exposes `pgcode`.
    SQLite has no SQLSTATE, so its "... already exists" errors are
    reported as `42P07`.
    """
    orig = getattr(exc, "orig", None) or exc
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code).upper()
    if isinstance(orig, sqlite3.OperationalError) and "already exists" in str(orig).lower():
        return DUPLICATE_TABLE
    return None


def is_ignorable(exc: BaseException, codes: Iterable[str]) -> bool:
    """True if `exc` means the migration's objects already exist."""
    code = error_code(exc)
    return code is not None and code in set(codes)
