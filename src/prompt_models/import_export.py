"""Import/export capability shared by persisted services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ImportExportError(Exception):
    """Export or import of a data type failed."""

    def __init__(self, message: str, data_type: str, cause: BaseException | None = None) -> None:
        self.data_type = data_type
        self.cause = cause
        detail = f"{message} ({data_type})"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)


class ImportExportable(ABC):
    """A service whose data can be exported and re-imported as JSON."""

    @abstractmethod
    async def export_data(self) -> Any:
        """Export all data."""

    @abstractmethod
    async def import_data(self, data: Any) -> Any:
        """Import previously exported data."""

    @abstractmethod
    async def get_data_type(self) -> str:
        """Tag identifying the exported data."""

    @abstractmethod
    async def validate_data(self, data: Any) -> bool:
        """Check whether data can be imported."""
