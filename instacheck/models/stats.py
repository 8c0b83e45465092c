"""Aggregate processing statistics."""

from pydantic import BaseModel, computed_field


class ProcessingStats(BaseModel):
    """Summary counts derived from the record store."""

    total: int = 0
    processed: int = 0
    open: int = 0
    closed: int = 0
    errors: int = 0

    @computed_field
    @property
    def progress(self) -> float:
        """Percentage of records that reached a terminal status."""
        if self.total == 0:
            return 0.0
        return self.processed / self.total * 100
