"""Storage factory — wires the tracker service to the configured local store."""

from __future__ import annotations

from src.core.tracker import TrackerService
from src.data.db import InstanceStore, KeyValueDB, TemplateStore


def create_tracker(db_path: str | None = None) -> TrackerService:
    """Return a TrackerService backed by the SQLite key-value store.

    Raises StorageError if the database file can't be opened.
    """
    db = KeyValueDB(db_path=db_path)
    return TrackerService(TemplateStore(db), InstanceStore(db))
