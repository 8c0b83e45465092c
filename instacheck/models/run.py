"""Queue run state models."""

from enum import Enum

from pydantic import BaseModel


class RunState(str, Enum):
    """Run-level state of the queue processor."""
    IDLE = "idle"
    RUNNING = "running"


class RunSummary(BaseModel):
    """Outcome of one queue run."""

    attempted: int = 0
    completed: int = 0
    failed: int = 0
    stopped: bool = False
    duration_ms: float = 0.0
