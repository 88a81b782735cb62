"""
Mejoras Tracker — Tracker Service.

Use cases behind every user action: managing mejoras, viewing and
completing today's tasks, stats, and the periodic expiry tick.

This module is storage-agnostic: it depends on the repository protocols,
not on SQLite. All reads and writes are whole-collection, so each use case
is a load → transform → save cycle.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from src.core.limits import parse_limit
from src.core.materializer import expire_overdue, generate, next_template_id
from src.core.stats import compute_stats
from src.data.models import NO_LIMIT, Instance, LimitWindow, Stats, TaskStatus, Template

if TYPE_CHECKING:
    from src.ports.repository_port import InstanceRepository, TemplateRepository

logger = logging.getLogger(__name__)

# Seeded on first view when no mejoras exist yet
_DEFAULT_MEJORAS = [
    {"title": "Estudiar Estadistica", "limits": "Limites: 8:00 - 9:00", "gain": 0.5},
    {"title": "Leer Libro", "limits": "Limites: 20:00 - 21:00", "gain": 1.0},
]

_EDITABLE_FIELDS = {"title", "gain", "limits", "recurrence", "end_date"}


def _validate_template_fields(
    title: str,
    recurrence: frozenset[int] | None,
    end_date: str | None,
) -> str | None:
    """Raise ValueError on malformed template fields.

    Returns end_date normalized to YYYY-MM-DD.
    """
    if not title.strip():
        raise ValueError("Title must not be empty")
    if recurrence is not None and any(d < 0 or d > 6 for d in recurrence):
        raise ValueError(f"Weekday indices must be 0-6, got {sorted(recurrence)}")
    if end_date is None:
        return None
    return date.fromisoformat(end_date).isoformat()


class TrackerService:
    """Orchestrates templates, daily tasks and stats over injected repositories."""

    def __init__(
        self,
        templates: TemplateRepository,
        instances: InstanceRepository,
        tz_name: str | None = None,
        seed_defaults: bool | None = None,
    ) -> None:
        if tz_name is None or seed_defaults is None:
            from src.config import settings
            if tz_name is None:
                tz_name = settings.TIMEZONE
            if seed_defaults is None:
                seed_defaults = settings.SEED_DEFAULT_MEJORAS

        self._templates = templates
        self._instances = instances
        self._tz = ZoneInfo(tz_name)
        self._seed_defaults = seed_defaults

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def local_now(self, now: datetime | None = None) -> datetime:
        """Current time in the tracker's zone. Naive datetimes are taken as local."""
        if now is None:
            return datetime.now(self._tz)
        if now.tzinfo is None:
            return now.replace(tzinfo=self._tz)
        return now.astimezone(self._tz)

    def today(self, now: datetime | None = None) -> str:
        return self.local_now(now).date().isoformat()

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def verify_storage(self) -> None:
        """Load both collections once; raises StorageError if either is unusable."""
        templates = self._templates.load()
        instances = self._instances.load()
        logger.info(
            "Storage OK: %d mejora(s), %d task(s)", len(templates), len(instances),
        )

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def list_templates(self) -> list[Template]:
        return self._templates.load()

    def get_template(self, template_id: int) -> Template | None:
        """Fetch a single mejora by ID."""
        for tpl in self._templates.load():
            if tpl.id == template_id:
                return tpl
        return None

    def add_template(
        self,
        title: str,
        gain: float,
        limits: LimitWindow = NO_LIMIT,
        recurrence: frozenset[int] | None = None,
        end_date: str | None = None,
        today: str | None = None,
    ) -> Template:
        """Create a mejora and materialize it for today if it applies."""
        end_date = _validate_template_fields(title, recurrence, end_date)

        templates = self._templates.load()
        tpl = Template(
            id=next_template_id(templates, self._instances.load()),
            title=title.strip(),
            gain=gain,
            limits=limits,
            recurrence=recurrence,
            end_date=end_date,
        )
        templates.append(tpl)
        self._templates.save(templates)
        logger.info("Mejora added: #%d '%s' (%+g%%)", tpl.id, tpl.title, tpl.gain)

        self.sync_day(today or self.today())
        return tpl

    def update_template(
        self, template_id: int, today: str | None = None, **changes,
    ) -> Template | None:
        """Apply field changes to a mejora, then sync today.

        Tasks already materialized keep their snapshot of the old values.
        Returns None if the mejora doesn't exist.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown mejora field(s): {', '.join(sorted(unknown))}")

        templates = self._templates.load()
        for index, tpl in enumerate(templates):
            if tpl.id == template_id:
                break
        else:
            return None

        updated = replace(tpl, **changes)
        end_date = _validate_template_fields(
            updated.title, updated.recurrence, updated.end_date,
        )
        updated = replace(updated, end_date=end_date)
        templates[index] = updated
        self._templates.save(templates)
        logger.info("Mejora #%d updated: %s", template_id, ", ".join(sorted(changes)))

        self.sync_day(today or self.today())
        return updated

    def delete_template(self, template_id: int) -> bool:
        """Remove a mejora. Its tasks stay as history."""
        templates = self._templates.load()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            return False
        self._templates.save(remaining)
        logger.info("Mejora #%d deleted", template_id)
        return True

    def _seed(self) -> None:
        first_id = next_template_id([], self._instances.load())
        templates = [
            Template(
                id=index,
                title=d["title"],
                gain=d["gain"],
                limits=parse_limit(d["limits"]),
            )
            for index, d in enumerate(_DEFAULT_MEJORAS, start=first_id)
        ]
        self._templates.save(templates)
        logger.info("Seeded %d default mejora(s)", len(templates))

    # ------------------------------------------------------------------
    # Daily tasks
    # ------------------------------------------------------------------

    def sync_day(self, target_date: str) -> list[Instance]:
        """Materialize any tasks target_date is missing; returns the new ones."""
        templates = self._templates.load()
        instances = self._instances.load()
        new_instances = generate(target_date, templates, instances)
        if new_instances:
            self._instances.save(instances + new_instances)
        return new_instances

    def daily_tasks(self, target_date: str | None = None) -> list[Instance]:
        """All tasks for a date, materializing them on first view."""
        target_date = target_date or self.today()
        if self._seed_defaults and not self._templates.load():
            # Seed only a day with no mejoras and no tasks
            if not any(i.date == target_date for i in self._instances.load()):
                self._seed()
        self.sync_day(target_date)
        return [i for i in self._instances.load() if i.date == target_date]

    def get_task(self, task_id: int) -> Instance | None:
        for inst in self._instances.load():
            if inst.id == task_id:
                return inst
        return None

    def complete_task(self, task_id: int, now: datetime | None = None) -> Instance | None:
        """Mark a pending task completed.

        A pending task whose day or limit window has already passed is
        failed instead, as the next tick would. Completed or failed tasks
        are returned unchanged. Returns None if the task doesn't exist.
        """
        local = self.local_now(now)
        today = local.date().isoformat()
        instances = self._instances.load()
        for index, inst in enumerate(instances):
            if inst.id == task_id:
                break
        else:
            return None

        if inst.status.is_terminal:
            logger.info(
                "Task #%d already %s, ignoring completion", task_id, inst.status.value,
            )
            return inst

        (checked,) = expire_overdue(today, [inst], local.hour * 60 + local.minute)
        if checked is not inst:
            instances[index] = checked
            self._instances.save(instances)
            return checked

        done = replace(inst, status=TaskStatus.COMPLETED, date_completed=today)
        instances[index] = done
        self._instances.save(instances)
        logger.info("Task #%d '%s' completed (%+g%%)", task_id, done.title, done.gain)
        return done

    def stats(self, today: str | None = None) -> Stats:
        return compute_stats(self._instances.load(), today or self.today())

    # ------------------------------------------------------------------
    # Scheduler entry point
    # ------------------------------------------------------------------

    def tick(self, now: datetime | None = None) -> int:
        """Materialize today and fail overdue tasks. Returns how many failed.

        Safe to call any number of times; saves only when something changed.
        """
        local = self.local_now(now)
        today = local.date().isoformat()
        now_minutes = local.hour * 60 + local.minute

        templates = self._templates.load()
        instances = self._instances.load()
        new_instances = generate(today, templates, instances)
        current = instances + new_instances
        updated = expire_overdue(today, current, now_minutes)

        failed = sum(1 for before, after in zip(current, updated) if before is not after)
        if new_instances or failed:
            self._instances.save(updated)
        if failed:
            logger.info("Tick %s %s: %d task(s) failed", today, local.strftime("%H:%M"), failed)
        return failed
