"""
Mejoras Tracker — Instance Materializer.

Derives per-day tasks from templates and applies the two expiry rules:
pending tasks from past days fail, and today's pending tasks fail once
their limit window has closed.

No I/O: this module only transforms data. Both operations are idempotent,
so the caller may re-run them on every scheduler tick.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

from src.core.limits import is_past_limit
from src.data.models import Instance, TaskStatus, Template

logger = logging.getLogger(__name__)


def weekday_index(target_date: str) -> int:
    """Weekday of an ISO date with 0 = Sunday ... 6 = Saturday."""
    return (date.fromisoformat(target_date).weekday() + 1) % 7


def next_id(records: list) -> int:
    """Next free integer id for a collection."""
    return max((r.id for r in records), default=0) + 1


def next_template_id(templates: list[Template], instances: list[Instance]) -> int:
    """Next template id, never reusing one still referenced by a task."""
    used = [t.id for t in templates] + [i.template_id for i in instances]
    return max(used, default=0) + 1


def generate(
    target_date: str,
    templates: list[Template],
    existing: list[Instance],
) -> list[Instance]:
    """Return the new pending instances target_date still needs.

    A template is materialized when its recurrence includes the weekday,
    target_date is not past its end date, and no instance of it exists
    for target_date yet.
    """
    weekday = weekday_index(target_date)
    already = {i.template_id for i in existing if i.date == target_date}

    new_instances: list[Instance] = []
    new_id = next_id(existing)
    for tpl in templates:
        if tpl.id in already:
            continue
        if not tpl.applies_on(weekday, target_date):
            continue
        new_instances.append(
            Instance(
                id=new_id,
                template_id=tpl.id,
                date=target_date,
                title=tpl.title,
                gain=tpl.gain,
                limits=tpl.limits,
                status=TaskStatus.PENDING,
                date_completed=None,
            )
        )
        already.add(tpl.id)
        new_id += 1

    if new_instances:
        logger.info(
            "Materialized %d task(s) for %s", len(new_instances), target_date,
        )
    return new_instances


def expire_overdue(
    today: str,
    instances: list[Instance],
    now_minutes: int,
) -> list[Instance]:
    """Return instances with missed-day and closed-window failures applied.

    The result keeps the input order; untouched instances are returned as-is.
    """
    updated: list[Instance] = []
    for inst in instances:
        if inst.status is not TaskStatus.PENDING:
            updated.append(inst)
            continue

        if inst.date < today:
            reason = "missed day"
        elif inst.date == today and is_past_limit(inst.limits, now_minutes):
            reason = "limit passed"
        else:
            updated.append(inst)
            continue

        logger.info("Failing task #%d '%s' (%s)", inst.id, inst.title, reason)
        updated.append(
            replace(inst, status=TaskStatus.FAILED, date_completed=today)
        )
    return updated
