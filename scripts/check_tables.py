"""CLI script to list the tables present in the target database.
Usage: python scripts/check_tables.py [--database-url URL] [--expect users products ...]
"""
import sys
import argparse
import pathlib
from typing import List, Optional
# Ensure the repo root is on sys.path so `migrator` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from migrator.config import settings
from migrator.database import get_engine, list_tables, mask_url


def main(database_url: Optional[str] = None, expect: Optional[List[str]] = None) -> int:
    """Print every table, then whether each expected table exists.

    Returns 1 if any expected table is missing so the script can gate
    deployments after a migration run.
    """
    url = database_url or settings.DATABASE_URL
    print(f'Connection: {mask_url(url)}')
    engine = get_engine(url)
    try:
        tables = list_tables(engine)
    finally:
        engine.dispose()
    print(f'\nFound {len(tables)} tables:')
    for t in tables:
        print(f'- {t}')
    missing = 0
    for t in expect or []:
        exists = t in tables
        missing += 0 if exists else 1
        print(f'Table "{t}": {"Exists" if exists else "Does NOT exist"}')
    return 1 if missing else 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--database-url', help='SQLAlchemy URL; defaults to DATABASE_URL')
    parser.add_argument('--expect', nargs='*', default=[], help='Table names that must exist')
    args = parser.parse_args()
    raise SystemExit(main(database_url=args.database_url, expect=args.expect))
