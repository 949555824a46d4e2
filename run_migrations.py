"""Apply the SQL files in migrations/ to the configured database.

Usage: python run_migrations.py [--skip-bootstrap] [--ledger] [--database-url URL]

Files are applied in lexical filename order. `DATABASE_URL` defaults to
`sqlite:///app.db`; the migrations directory defaults to the one next to
this script unless `--dir` or `MIGRATIONS_DIR` says otherwise.
"""
import os
import sys
from pathlib import Path

BASE = Path(__file__).resolve().parent
# Ensure the repo root is on sys.path so `migrator` imports work when running this script directly
if str(BASE) not in sys.path:
    sys.path.insert(0, str(BASE))

from migrator.main import main


if __name__ == '__main__':
    os.environ.setdefault("MIGRATIONS_DIR", str(BASE / "migrations"))
    raise SystemExit(main())
