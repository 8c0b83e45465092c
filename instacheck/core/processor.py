"""Sequential queue processor - drives records through the classifier one at a time."""

import asyncio
from datetime import datetime

from instacheck.core.classifier import Classifier
from instacheck.core.store import RecordStore
from instacheck.logging import get_logger
from instacheck.models.record import CheckStatus
from instacheck.models.run import RunState, RunSummary

API_ERROR_NOTE = "API Error"

ELIGIBLE_STATUSES = (CheckStatus.IDLE, CheckStatus.FAILED)


class CancellationToken:
    """Stop signal for a single run, observed between records."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def sleep(self, seconds: float) -> None:
        """Wait up to ``seconds``, returning early once cancelled."""
        if seconds <= 0 or self.cancelled:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass


class QueueProcessor:
    """
    Runs eligible records through a classifier, one in flight at a time.

    A run snapshots every IDLE or FAILED record when it starts; records added
    afterwards wait for the next run. Stopping takes effect between records,
    so an in-flight classification always finishes.

    Example:
        processor = QueueProcessor(store, classifier)
        summary = await processor.run()
    """

    def __init__(
        self,
        store: RecordStore,
        classifier: Classifier,
        delay_ms: int = 1000,
    ):
        """
        Initialize processor.

        Args:
            store: Record store to read from and write results into
            classifier: Classifier invoked once per record
            delay_ms: Pacing interval after each record
        """
        self.store = store
        self.classifier = classifier
        self.delay_ms = delay_ms
        self._state = RunState.IDLE
        self._token: CancellationToken | None = None
        self._task: asyncio.Task | None = None
        self._log = get_logger("processor")

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == RunState.RUNNING

    @property
    def task(self) -> asyncio.Task | None:
        """Task of the most recent run, if any."""
        return self._task

    def start(self) -> asyncio.Task | None:
        """
        Start a run in the background.

        Must be called from within a running event loop.

        Returns:
            The run's task, or None if a run is already active
        """
        if self._state == RunState.RUNNING:
            self._log.debug("start_ignored", reason="already_running")
            return None

        token = CancellationToken()
        self._token = token
        self._state = RunState.RUNNING
        self._task = asyncio.create_task(self._drain(token))
        return self._task

    async def run(self) -> RunSummary | None:
        """
        Start a run and wait for it to finish.

        Returns:
            RunSummary, or None if a run was already active
        """
        task = self.start()
        if task is None:
            return None
        return await task

    def stop(self) -> None:
        """Signal the active run to stop before its next record."""
        if self._token is not None:
            self._token.cancel()
        if self._state == RunState.RUNNING:
            self._log.info("run_stop_requested")
        self._state = RunState.IDLE

    async def _drain(self, token: CancellationToken) -> RunSummary:
        """Process the eligible snapshot until exhausted or cancelled."""
        start = datetime.now()
        summary = RunSummary()
        queue = [
            (record.id, record.username)
            for record in self.store.list()
            if record.check_status in ELIGIBLE_STATUSES
        ]
        self._log.info("run_started", eligible=len(queue))

        try:
            for record_id, username in queue:
                if token.cancelled:
                    summary.stopped = True
                    break

                summary.attempted += 1
                self.store.update(record_id, check_status=CheckStatus.PROCESSING)

                try:
                    result = await self.classifier.classify(username)
                except Exception as e:
                    self._log.error("record_failed", username=username, error=str(e))
                    self.store.update(
                        record_id,
                        check_status=CheckStatus.FAILED,
                        notes=API_ERROR_NOTE,
                    )
                    summary.failed += 1
                else:
                    self.store.update(
                        record_id,
                        check_status=CheckStatus.COMPLETED,
                        page_status=result.page_status,
                        notes=result.notes,
                        profile_url=result.profile_url,
                    )
                    summary.completed += 1
                    self._log.info(
                        "record_completed",
                        username=username,
                        page_status=result.page_status.value,
                    )

                await token.sleep(self.delay_ms / 1000)
            else:
                summary.stopped = token.cancelled
        finally:
            # A stop followed by a new start hands the state to the newer run
            if self._token is token:
                self._state = RunState.IDLE

        summary.duration_ms = (datetime.now() - start).total_seconds() * 1000
        self._log.info(
            "run_finished",
            attempted=summary.attempted,
            completed=summary.completed,
            failed=summary.failed,
            stopped=summary.stopped,
            duration_ms=summary.duration_ms,
        )
        return summary
