"""Gain statistics — pure aggregation over completed tasks."""

from __future__ import annotations

from src.data.models import Instance, Stats, TaskStatus


def compute_stats(instances: list[Instance], today: str) -> Stats:
    """Sum gain of completed tasks, overall and for today, to two decimals."""
    completed = [i for i in instances if i.status is TaskStatus.COMPLETED]
    cumulative = sum(i.gain for i in completed)
    today_gain = sum(i.gain for i in completed if i.date == today)
    return Stats(
        cumulative_gain=round(cumulative, 2),
        today_gain=round(today_gain, 2),
    )
