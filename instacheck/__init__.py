"""instacheck - bulk Instagram username page checker."""

from instacheck.models.record import (
    CheckStatus,
    ClassificationResult,
    PageStatus,
    UsernameRecord,
)
from instacheck.models.stats import ProcessingStats
from instacheck.models.run import RunState, RunSummary
from instacheck.config import CheckerConfig
from instacheck.core.orchestrator import UsernameChecker
from instacheck.core.classifier import AnthropicClassifier, Classifier
from instacheck.core.exporter import save_xlsx, save_csv, to_xlsx_bytes

__version__ = "0.1.0"

__all__ = [
    # Main interface
    "UsernameChecker",
    "CheckerConfig",
    "AnthropicClassifier",
    "Classifier",
    # Models
    "CheckStatus",
    "PageStatus",
    "UsernameRecord",
    "ClassificationResult",
    "ProcessingStats",
    "RunState",
    "RunSummary",
    # Export utilities
    "save_xlsx",
    "save_csv",
    "to_xlsx_bytes",
    "__version__",
]
