"""SQLModel data models.

The only table the runner owns is the optional applied-migrations
ledger. Migration files themselves are never stored.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


class AppliedMigration(SQLModel, table=True):
    """One migration file known to have been applied.

    Fields:
    - `name`: the migration filename, e.g. `0001_add_ai_analyses.sql`
    - `checksum`: SHA-256 of the file contents when it was recorded
    """
    __tablename__ = "applied_migrations"

    name: str = Field(primary_key=True)
    checksum: Optional[str] = None
    applied_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
