"""Pydantic value types passed between discovery, the runner and callers.

`MigrationFile` is what discovery produces. Every file the runner
visits yields exactly one outcome (`Applied`, `Skipped` or `Failed`);
the outcomes are folded into a `RunResult`.
"""

import hashlib
from pathlib import Path
from typing import FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MigrationError(RuntimeError):
    """A migration file failed with a non-ignorable database error."""

    def __init__(self, filename: str, error: str, code: Optional[str] = None):
        self.filename = filename
        self.error = error
        self.code = code
        suffix = f" [{code}]" if code else ""
        super().__init__(f"Migration {filename} failed{suffix}: {error}")


class MigrationFile(BaseModel):
    """A migration read from disk. Immutable once loaded."""
    model_config = ConfigDict(frozen=True)

    name: str
    path: Path
    contents: str

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.contents.encode("utf-8")).hexdigest()


class RunOptions(BaseModel):
    """Knobs for a single run.

    `exclude_prefix` is the bootstrap prefix when the skip-bootstrap
    variant is active, otherwise `None`.
    """
    model_config = ConfigDict(frozen=True)

    extension: str = ".sql"
    exclude_prefix: Optional[str] = None
    ignorable_codes: FrozenSet[str] = frozenset({"42P07"})
    use_ledger: bool = False


class Applied(BaseModel):
    status: Literal["applied"] = "applied"
    name: str


class Skipped(BaseModel):
    status: Literal["skipped"] = "skipped"
    name: str
    reason: str


class Failed(BaseModel):
    status: Literal["failed"] = "failed"
    name: str
    error: str
    code: Optional[str] = None


FileOutcome = Union[Applied, Skipped, Failed]


class RunResult(BaseModel):
    """Overall result of a run.

    `status` is `all_applied` when every visited file was applied or
    skipped, and `aborted` when a file failed; `aborted_at` then names
    that file and no later file was executed.
    """
    status: Literal["all_applied", "aborted"] = "all_applied"
    aborted_at: Optional[str] = None
    outcomes: List[FileOutcome] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "all_applied"

    @property
    def applied(self) -> List[str]:
        return [o.name for o in self.outcomes if isinstance(o, Applied)]

    @property
    def skipped(self) -> List[str]:
        return [o.name for o in self.outcomes if isinstance(o, Skipped)]

    @property
    def failure(self) -> Optional[Failed]:
        for o in self.outcomes:
            if isinstance(o, Failed):
                return o
        return None

    def raise_for_failure(self) -> None:
        """Raise `MigrationError` if the run was aborted."""
        failed = self.failure
        if failed is not None:
            raise MigrationError(failed.name, failed.error, failed.code)
