"""Runner settings and validation."""

import logging
import os
from pathlib import Path
from typing import FrozenSet


def is_log_level(name: str) -> bool:
    """True if `name` is a standard logging level name."""
    return isinstance(logging.getLevelName(name.upper()), int)


class Settings:
    DATABASE_URL: str
    MIGRATIONS_DIR: Path
    MIGRATIONS_EXTENSION: str
    BOOTSTRAP_PREFIX: str
    SKIP_BOOTSTRAP: bool
    IGNORABLE_ERROR_CODES: FrozenSet[str]
    USE_LEDGER: bool
    LOG_LEVEL: str

    def __init__(self):
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///app.db")
        self.MIGRATIONS_DIR = Path(os.getenv("MIGRATIONS_DIR", "migrations"))
        self.MIGRATIONS_EXTENSION = os.getenv("MIGRATIONS_EXTENSION", ".sql")
        self.BOOTSTRAP_PREFIX = os.getenv("BOOTSTRAP_PREFIX", "0000_")
        self.SKIP_BOOTSTRAP = os.getenv("SKIP_BOOTSTRAP", "false").lower() == "true"
        codes = os.getenv("IGNORABLE_ERROR_CODES", "42P07")  # duplicate_table
        self.IGNORABLE_ERROR_CODES = frozenset(c.strip().upper() for c in codes.split(",") if c.strip())
        self.USE_LEDGER = os.getenv("USE_LEDGER", "false").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if not self.MIGRATIONS_EXTENSION.startswith("."):
            raise RuntimeError("MIGRATIONS_EXTENSION must start with a dot, e.g. '.sql'")
        if not self.BOOTSTRAP_PREFIX:
            raise RuntimeError("BOOTSTRAP_PREFIX must not be empty")
        if not is_log_level(self.LOG_LEVEL):
            raise RuntimeError(f"LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL, got {self.LOG_LEVEL!r}")


settings = Settings()
