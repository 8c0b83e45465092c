"""Pydantic models for instacheck."""

from instacheck.models.record import (
    CheckStatus,
    ClassificationResult,
    PageStatus,
    UsernameRecord,
)
from instacheck.models.run import RunState, RunSummary
from instacheck.models.stats import ProcessingStats

__all__ = [
    "CheckStatus",
    "PageStatus",
    "UsernameRecord",
    "ClassificationResult",
    "ProcessingStats",
    "RunState",
    "RunSummary",
]
