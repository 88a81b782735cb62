"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config doesn't sys.exit(),
and provides common fixtures like a temp DB and an in-memory tracker.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("ALLOWED_USER_IDS", "12345")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "America/La_Paz")
os.environ.setdefault("SEED_DEFAULT_MEJORAS", "false")

import pytest


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_mejoras.db")


@pytest.fixture
def kv_db(tmp_db_path):
    """Return a KeyValueDB instance backed by a temp file."""
    from src.data.db import KeyValueDB
    return KeyValueDB(db_path=tmp_db_path)


@pytest.fixture
def template_store(kv_db):
    from src.data.db import TemplateStore
    return TemplateStore(kv_db, key="mejoras")


@pytest.fixture
def instance_store(kv_db):
    from src.data.db import InstanceStore
    return InstanceStore(kv_db, key="tasks")


@pytest.fixture
def tracker():
    """Return a TrackerService over in-memory repositories, no seeding."""
    from src.core.tracker import TrackerService
    from fakes import InMemoryRepository
    return TrackerService(
        InMemoryRepository(),
        InMemoryRepository(),
        tz_name="America/La_Paz",
        seed_defaults=False,
    )
