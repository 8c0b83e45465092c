"""Username record models."""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class CheckStatus(str, Enum):
    """Lifecycle of a classification attempt."""
    IDLE = "IDLE"
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class PageStatus(str, Enum):
    """Outcome of a classification."""
    UNKNOWN = "UNKNOWN"
    OPEN = "OPEN"  # profile page exists, username taken
    CLOSED = "CLOSED"  # no profile page found, username likely available


def new_record_id() -> str:
    return uuid4().hex[:12]


class UsernameRecord(BaseModel):
    """One queued username and its classification state."""

    id: str = Field(default_factory=new_record_id)
    username: str
    check_status: CheckStatus = CheckStatus.IDLE
    page_status: PageStatus = PageStatus.UNKNOWN
    notes: str | None = None
    profile_url: str | None = None

    @property
    def is_page_open(self) -> str:
        """YES / NO / UNKNOWN as shown in exports."""
        if self.page_status == PageStatus.OPEN:
            return "YES"
        if self.page_status == PageStatus.CLOSED:
            return "NO"
        return "UNKNOWN"

    @property
    def availability(self) -> str:
        """AVAILABLE when no page exists, TAKEN when it does."""
        if self.page_status == PageStatus.CLOSED:
            return "AVAILABLE"
        if self.page_status == PageStatus.OPEN:
            return "TAKEN"
        return "UNKNOWN"

    @property
    def is_terminal(self) -> bool:
        return self.check_status in (CheckStatus.COMPLETED, CheckStatus.FAILED)


class ClassificationResult(BaseModel):
    """Normalized answer from the classifier for a single username."""

    page_status: PageStatus
    notes: str = ""
    profile_url: str | None = None
