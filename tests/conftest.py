"""Shared fixtures - deterministic classifiers, no internet."""

import asyncio

import pytest
import structlog

from instacheck.core.processor import QueueProcessor
from instacheck.core.store import RecordStore
from instacheck.models.record import ClassificationResult, PageStatus


class StubClassifier:
    """Classifier returning canned results, raising for selected usernames."""

    def __init__(self, results=None, errors=(), on_call=None):
        self.results = results or {}
        self.errors = set(errors)
        self.on_call = on_call
        self.calls: list[str] = []

    async def classify(self, username: str) -> ClassificationResult:
        self.calls.append(username)
        if self.on_call:
            self.on_call(username)
        if username in self.errors:
            raise RuntimeError(f"transport failure for {username}")
        return self.results.get(
            username,
            ClassificationResult(page_status=PageStatus.CLOSED, notes="not found"),
        )


class GatedClassifier:
    """Classifier that blocks on a per-username event until released."""

    def __init__(self):
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []

    def gate(self, username: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[username] = event
        return event

    async def classify(self, username: str) -> ClassificationResult:
        self.calls.append(username)
        gate = self.gates.get(username)
        if gate is not None:
            await gate.wait()
        return ClassificationResult(page_status=PageStatus.OPEN, notes="found")


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Yield to the event loop until predicate() holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Drop logging config bound to streams captured by earlier tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def store() -> RecordStore:
    return RecordStore()


@pytest.fixture
def make_processor(store):
    """Build a processor over the shared store with no pacing delay."""

    def _make(classifier, delay_ms: int = 0) -> QueueProcessor:
        return QueueProcessor(store, classifier, delay_ms=delay_ms)

    return _make
