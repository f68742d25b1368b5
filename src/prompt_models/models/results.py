"""Pydantic models for bulk operation results."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ImportFailure(BaseModel):
    """An entry that was skipped during import."""

    index: int  # Position in the imported sequence
    key: str | None = None
    error: str


class ImportResult(BaseModel):
    """Outcome of a bulk import."""

    imported: list[str] = Field(default_factory=list)  # Keys added
    updated: list[str] = Field(default_factory=list)  # Keys that already existed
    failures: list[ImportFailure] = Field(default_factory=list)

    @property
    def failed_count(self) -> int:
        """Number of skipped entries."""
        return len(self.failures)

    @property
    def succeeded_count(self) -> int:
        """Number of entries added or updated."""
        return len(self.imported) + len(self.updated)
