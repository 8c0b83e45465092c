"""Session orchestrator - coordinates the store, processor, import and export."""

import asyncio
from pathlib import Path

from instacheck.config import CheckerConfig
from instacheck.core.aggregator import compute_stats
from instacheck.core.classifier import AnthropicClassifier, Classifier
from instacheck.core.exporter import save_xlsx, to_xlsx_bytes
from instacheck.core.importer import read_cells, read_cells_from_bytes
from instacheck.core.normalizer import split_text
from instacheck.core.processor import QueueProcessor
from instacheck.core.store import RecordStore
from instacheck.logging import configure_logging, get_logger
from instacheck.models.record import UsernameRecord
from instacheck.models.run import RunState, RunSummary
from instacheck.models.stats import ProcessingStats


class UsernameChecker:
    """
    High-level checking session: queue usernames, run checks, export results.

    Example:
        async with UsernameChecker() as checker:
            checker.add_text("alice\\n@bob")
            await checker.run()
            checker.export()
    """

    def __init__(
        self,
        config: CheckerConfig | None = None,
        classifier: Classifier | None = None,
    ):
        """
        Initialize checker with optional configuration.

        Args:
            config: CheckerConfig instance, uses defaults if None
            classifier: Classifier to use, builds an AnthropicClassifier if None
        """
        self.config = config or CheckerConfig()
        self.classifier = classifier or AnthropicClassifier.from_config(self.config)
        self.store = RecordStore()
        self.processor = QueueProcessor(
            self.store,
            self.classifier,
            delay_ms=self.config.request_delay_ms,
        )
        self._log = get_logger("checker")

    async def __aenter__(self) -> "UsernameChecker":
        """Async context manager entry - configure logging."""
        configure_logging(self.config)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - stop and drain any active run."""
        await self.shutdown()

    # Queue input

    def add_usernames(self, usernames: list[str]) -> list[UsernameRecord]:
        """Queue raw usernames, handles or profile URLs."""
        added = self.store.add(usernames)
        self._log.info("records_added", count=len(added), total=len(self.store))
        return added

    def add_text(self, text: str) -> list[UsernameRecord]:
        """Queue a newline- or comma-separated block of usernames."""
        return self.add_usernames(split_text(text))

    def add_file(self, filepath: str | Path) -> list[UsernameRecord]:
        """Queue every non-empty cell of a spreadsheet or CSV file."""
        return self.add_usernames(read_cells(filepath))

    def add_file_bytes(self, data: bytes, filename: str) -> list[UsernameRecord]:
        """Queue every non-empty cell of an uploaded spreadsheet or CSV."""
        return self.add_usernames(read_cells_from_bytes(data, filename))

    # Run control

    @property
    def state(self) -> RunState:
        return self.processor.state

    @property
    def is_running(self) -> bool:
        return self.processor.is_running

    def start(self) -> bool:
        """
        Start checking eligible records in the background.

        Returns:
            True if a run was started, False if one was already active
        """
        return self.processor.start() is not None

    async def run(self) -> RunSummary | None:
        """Run the queue to completion (or until stopped)."""
        return await self.processor.run()

    def stop(self) -> None:
        self.processor.stop()

    async def wait(self) -> RunSummary | None:
        """Wait for the most recent run to finish."""
        task = self.processor.task
        if task is None:
            return None
        return await task

    def clear(self) -> None:
        """Remove all records and stop any active run."""
        self.processor.stop()
        self.store.clear()
        self._log.info("records_cleared")

    async def shutdown(self) -> None:
        """Stop any active run and wait for its in-flight record."""
        self.processor.stop()
        task = self.processor.task
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)

    # Results

    @property
    def records(self) -> list[UsernameRecord]:
        return self.store.list()

    @property
    def stats(self) -> ProcessingStats:
        return compute_stats(self.store.list())

    def export(self, filepath: str | Path | None = None) -> Path:
        """
        Save all current records to an Excel workbook.

        Args:
            filepath: Output path, defaults to config.export_path

        Returns:
            Path to saved file
        """
        path = save_xlsx(
            self.store.list(),
            filepath or self.config.export_path,
            sheet_name=self.config.export_sheet_name,
        )
        self._log.info("results_exported", path=str(path), rows=len(self.store))
        return path

    def export_bytes(self) -> bytes:
        return to_xlsx_bytes(self.store.list(), sheet_name=self.config.export_sheet_name)
