"""Milestone progress tracking for the batch.

Progress is reported only when the completed share crosses the next
``step`` percent boundary, so output stays bounded regardless of batch size.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressSnapshot:
    """Progress at one milestone."""
    completed: int
    total: int
    percent: int
    elapsed: float
    remaining: Optional[float]

    def describe(self) -> str:
        eta = f"{self.remaining:.1f}s" if self.remaining is not None else "unknown"
        return (
            f"Progress {self.percent}% ({self.completed}/{self.total}), "
            f"elapsed {self.elapsed:.1f}s, remaining ~{eta}"
        )


class ProgressTracker:
    """Count completed items and emit snapshots at percentage milestones."""

    def __init__(
        self,
        total: int,
        step: int = 10,
        on_milestone: Optional[Callable[[ProgressSnapshot], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.total = total
        self.step = step
        self.on_milestone = on_milestone
        self.clock = clock
        self.completed = 0
        self.milestones: list = []
        self._started = clock()
        self._next_percent = step

    def elapsed(self) -> float:
        return self.clock() - self._started

    def advance(self) -> Optional[ProgressSnapshot]:
        """Record one completed item; returns a snapshot at a milestone."""
        self.completed += 1
        if self.total <= 0:
            return None

        percent = self.completed * 100 // self.total
        if percent < self._next_percent and self.completed < self.total:
            return None

        # Jump past every milestone this item crossed
        while self._next_percent <= percent:
            self._next_percent += self.step

        elapsed = self.elapsed()
        remaining = None
        if self.completed:
            remaining = elapsed / self.completed * (self.total - self.completed)

        snapshot = ProgressSnapshot(
            completed=self.completed,
            total=self.total,
            percent=percent,
            elapsed=elapsed,
            remaining=remaining,
        )
        self.milestones.append(snapshot)
        if self.on_milestone is not None:
            self.on_milestone(snapshot)
        else:
            logger.info(snapshot.describe())
        return snapshot
