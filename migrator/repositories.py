"""Repository for the applied-migrations ledger.

The ledger is optional; when enabled the runner asks it which files are
already recorded and tells it about every file it applies. Each call
opens a short-lived `Session` so ledger writes never share a transaction
with the migration batches themselves.
"""

from typing import Set
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, select
from . import models


class LedgerRepository:
    """Read/write access to `applied_migrations`."""
    def __init__(self, engine: Engine):
        self.engine = engine

    def ensure_table(self) -> None:
        """Create the ledger table if it does not exist yet."""
        SQLModel.metadata.create_all(self.engine, tables=[models.AppliedMigration.__table__])

    def applied_names(self) -> Set[str]:
        """Return the names of every recorded migration."""
        with Session(self.engine) as session:
            return set(session.exec(select(models.AppliedMigration.name)).all())

    def record(self, name: str, checksum: str) -> models.AppliedMigration:
        """Record `name` as applied, updating the checksum if it is already present."""
        with Session(self.engine) as session:
            entry = session.get(models.AppliedMigration, name)
            if entry is None:
                entry = models.AppliedMigration(name=name, checksum=checksum)
            else:
                entry.checksum = checksum
            session.add(entry)
            session.commit()
            session.refresh(entry)
            return entry
