"""Helpers to discover migration files in a directory.

Discovery is deliberately flat: only regular files directly inside the
directory are considered. The returned order is plain lexicographic
order on the filename, which is the order migrations are applied in, so
names need a zero-padded numeric or timestamp prefix (`0002_x.sql`
sorts before `0010_y.sql`, but `2_x.sql` sorts after `10_y.sql`).
"""

from pathlib import Path
from typing import List, Optional
from ..schemas import MigrationFile


def _is_excluded(name: str, exclude_prefix: Optional[str]) -> bool:
    return bool(exclude_prefix) and name.startswith(exclude_prefix)


def find_migration_files(directory: Path, extension: str = ".sql", exclude_prefix: Optional[str] = None) -> List[Path]:
    """Return migration paths in application order.

    Files whose suffix is not `extension` (compared case-insensitively)
    and files starting with `exclude_prefix` are dropped. Raises
    `FileNotFoundError` if `directory` does not exist or is not a
    directory.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Migrations directory not found: {directory}")
    ext = extension.lower()
    files = [
        p for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() == ext and not _is_excluded(p.name, exclude_prefix)
    ]
    return sorted(files, key=lambda p: p.name)


def load_migration(path: Path) -> MigrationFile:
    """Read a migration file into an immutable `MigrationFile`."""
    path = Path(path)
    return MigrationFile(name=path.name, path=path, contents=path.read_text(encoding="utf-8"))
