"""
Mejoras Tracker — Local Storage.

Templates and tasks persist as two JSON arrays in a SQLite key-value table,
one row per collection. Every save rewrites the whole collection; there is
a single writer, so no locking is needed.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from src.core.limits import format_limit, parse_limit
from src.data.models import Instance, TaskStatus, Template
from src.ports.repository_port import StorageError

logger = logging.getLogger(__name__)


class KeyValueDB:
    """SQLite-backed string key-value store."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        try:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._init_db()
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Storage unavailable at {db_path}: {exc}") from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the kv table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key   TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
        logger.debug("Key-value table initialized at %s", self._db_path)

    def get(self, key: str) -> str | None:
        """Return the stored value for key, or None if absent."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc
        if row is None:
            return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value for key."""
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc


class _JsonCollection:
    """A JSON array of records stored under one key."""

    def __init__(self, db: KeyValueDB, key: str) -> None:
        self._db = db
        self._key = key

    def _load_records(self) -> list[dict[str, Any]]:
        raw = self._db.get(self._key)
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt JSON under {self._key!r}: {exc}") from exc
        if not isinstance(records, list):
            raise StorageError(f"Expected a JSON array under {self._key!r}")
        return records

    def _save_records(self, records: list[dict[str, Any]]) -> None:
        self._db.set(self._key, json.dumps(records, ensure_ascii=False))


class TemplateStore(_JsonCollection):
    """TemplateRepository backed by a KeyValueDB entry."""

    def __init__(self, db: KeyValueDB, key: str | None = None) -> None:
        if key is None:
            from src.config import settings
            key = settings.TEMPLATES_KEY
        super().__init__(db, key)

    @staticmethod
    def _record_to_template(record: dict[str, Any]) -> Template:
        recurrence = record.get("recurrence")
        return Template(
            id=int(record["id"]),
            title=str(record["title"]),
            gain=float(record["gain"]),
            limits=parse_limit(record.get("limits")),
            recurrence=frozenset(int(d) for d in recurrence) if recurrence is not None else None,
            end_date=record.get("endDate") or None,
        )

    @staticmethod
    def _template_to_record(tpl: Template) -> dict[str, Any]:
        return {
            "id": tpl.id,
            "title": tpl.title,
            "gain": tpl.gain,
            "limits": format_limit(tpl.limits),
            "recurrence": sorted(tpl.recurrence) if tpl.recurrence is not None else None,
            "endDate": tpl.end_date,
        }

    def load(self) -> list[Template]:
        try:
            return [self._record_to_template(r) for r in self._load_records()]
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Corrupt template record: {exc}") from exc

    def save(self, templates: list[Template]) -> None:
        self._save_records([self._template_to_record(t) for t in templates])
        logger.debug("Saved %d template(s)", len(templates))


class InstanceStore(_JsonCollection):
    """InstanceRepository backed by a KeyValueDB entry."""

    def __init__(self, db: KeyValueDB, key: str | None = None) -> None:
        if key is None:
            from src.config import settings
            key = settings.INSTANCES_KEY
        super().__init__(db, key)

    @staticmethod
    def _record_to_instance(record: dict[str, Any]) -> Instance:
        return Instance(
            id=int(record["id"]),
            template_id=int(record["templateId"]),
            date=str(record["date"]),
            title=str(record.get("title", "")),
            gain=float(record.get("gain", 0)),
            limits=parse_limit(record.get("limits")),
            status=TaskStatus(record.get("status", "pending")),
            date_completed=record.get("dateCompleted"),
        )

    @staticmethod
    def _instance_to_record(inst: Instance) -> dict[str, Any]:
        return {
            "id": inst.id,
            "templateId": inst.template_id,
            "title": inst.title,
            "limits": format_limit(inst.limits),
            "gain": inst.gain,
            "status": inst.status.value,
            "date": inst.date,
            "dateCompleted": inst.date_completed,
        }

    def load(self) -> list[Instance]:
        try:
            return [self._record_to_instance(r) for r in self._load_records()]
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Corrupt task record: {exc}") from exc

    def save(self, instances: list[Instance]) -> None:
        self._save_records([self._instance_to_record(i) for i in instances])
        logger.debug("Saved %d task(s)", len(instances))
