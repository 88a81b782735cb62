"""
Mejoras Tracker — Data Models.

Templates ("Mejoras") are the recurring definitions the user manages;
instances are the per-day tasks materialized from them. Instances carry a
snapshot of their template so history survives template edits and deletes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TaskStatus(str, Enum):
    """Lifecycle of a daily task. COMPLETED and FAILED are terminal."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PENDING


@dataclass(frozen=True)
class Unlimited:
    """No daily time limit: the task can be completed any time of the day."""


@dataclass(frozen=True)
class Window:
    """A daily time window, in minutes since midnight."""

    start: int
    end: int


LimitWindow = Unlimited | Window

NO_LIMIT = Unlimited()


@dataclass
class Template:
    """A recurring improvement the user wants to practice.

    recurrence holds weekday indices with 0 = Sunday; None means every day.
    """

    id: int
    title: str
    gain: float                          # percentage awarded on completion
    limits: LimitWindow = NO_LIMIT
    recurrence: frozenset[int] | None = None
    end_date: str | None = None          # ISO date YYYY-MM-DD, inclusive

    def applies_on(self, weekday: int, target_date: str) -> bool:
        """True if this template generates a task for target_date."""
        if self.recurrence is not None and weekday not in self.recurrence:
            return False
        if self.end_date is not None and target_date > self.end_date:
            return False
        return True


@dataclass
class Instance:
    """One day's occurrence of a template."""

    id: int
    template_id: int                     # weak reference, template may be gone
    date: str                            # ISO date YYYY-MM-DD
    title: str
    gain: float
    limits: LimitWindow = NO_LIMIT
    status: TaskStatus = field(default=TaskStatus.PENDING)
    date_completed: str | None = None


@dataclass(frozen=True)
class Stats:
    """Aggregated gain figures."""

    cumulative_gain: float
    today_gain: float
