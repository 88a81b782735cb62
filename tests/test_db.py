"""Tests for src.data.db — KeyValueDB and the JSON collection stores."""

import json
import sqlite3

import pytest

from src.data.db import InstanceStore, KeyValueDB, TemplateStore
from src.data.models import NO_LIMIT, Instance, TaskStatus, Template, Window
from src.ports.repository_port import StorageError


class TestKeyValueDB:
    def test_get_missing_returns_none(self, kv_db):
        assert kv_db.get("nope") is None

    def test_set_and_get(self, kv_db):
        kv_db.set("k", "v1")
        assert kv_db.get("k") == "v1"

    def test_set_replaces(self, kv_db):
        kv_db.set("k", "v1")
        kv_db.set("k", "v2")
        assert kv_db.get("k") == "v2"

    def test_persists_across_instances(self, tmp_db_path):
        KeyValueDB(db_path=tmp_db_path).set("k", "v")
        assert KeyValueDB(db_path=tmp_db_path).get("k") == "v"

    def test_unopenable_path_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(StorageError):
            KeyValueDB(db_path=str(blocker / "sub" / "db.sqlite"))


class TestTemplateStore:
    def test_empty_collection(self, template_store):
        assert template_store.load() == []

    def test_save_and_load(self, template_store):
        templates = [
            Template(id=1, title="Leer Libro", gain=1.0),
            Template(
                id=2, title="Gym", gain=2.5, limits=Window(480, 540),
                recurrence=frozenset({1, 3, 5}), end_date="2026-12-31",
            ),
        ]
        template_store.save(templates)
        assert template_store.load() == templates

    def test_stored_json_format(self, kv_db, template_store):
        template_store.save([
            Template(id=1, title="Gym", gain=2.0, limits=Window(480, 540),
                     recurrence=frozenset({5, 1})),
        ])
        records = json.loads(kv_db.get("mejoras"))
        assert records == [{
            "id": 1,
            "title": "Gym",
            "gain": 2.0,
            "limits": "08:00 - 09:00",
            "recurrence": [1, 5],
            "endDate": None,
        }]

    def test_loads_legacy_records(self, kv_db, template_store):
        kv_db.set("mejoras", json.dumps([
            {"id": 1700000000000, "title": "Estudiar Estadistica",
             "limits": "Limites: 8:00 - 9:00", "gain": 0.5},
            {"id": 1700000000001, "title": "Leer", "limits": "Sin límite",
             "gain": "1", "recurrence": [0, 6], "endDate": ""},
        ]))
        first, second = template_store.load()
        assert first.limits == Window(480, 540)
        assert first.recurrence is None
        assert second.limits == NO_LIMIT
        assert second.gain == 1.0
        assert second.recurrence == frozenset({0, 6})
        assert second.end_date is None

    def test_malformed_limit_loads_as_no_limit(self, kv_db, template_store):
        kv_db.set("mejoras", json.dumps([
            {"id": 1, "title": "X", "limits": "garbage", "gain": 1},
        ]))
        assert template_store.load()[0].limits == NO_LIMIT

    def test_corrupt_json_raises(self, kv_db, template_store):
        kv_db.set("mejoras", "{not json")
        with pytest.raises(StorageError):
            template_store.load()

    def test_non_array_raises(self, kv_db, template_store):
        kv_db.set("mejoras", json.dumps({"id": 1}))
        with pytest.raises(StorageError):
            template_store.load()

    def test_missing_field_raises(self, kv_db, template_store):
        kv_db.set("mejoras", json.dumps([{"id": 1, "gain": 1}]))
        with pytest.raises(StorageError):
            template_store.load()


class TestInstanceStore:
    def test_save_and_load(self, instance_store):
        instances = [
            Instance(id=1, template_id=1, date="2026-02-09", title="Leer", gain=1.0),
            Instance(
                id=2, template_id=2, date="2026-02-09", title="Gym", gain=2.0,
                limits=Window(480, 540), status=TaskStatus.COMPLETED,
                date_completed="2026-02-09",
            ),
        ]
        instance_store.save(instances)
        loaded = instance_store.load()
        assert loaded == instances
        assert loaded[1].status is TaskStatus.COMPLETED

    def test_stored_json_uses_camel_case_field_names(self, kv_db, instance_store):
        instance_store.save([
            Instance(id=1, template_id=3, date="2026-02-09", title="Leer", gain=1.0),
        ])
        record = json.loads(kv_db.get("tasks"))[0]
        assert record["templateId"] == 3
        assert record["status"] == "pending"
        assert record["dateCompleted"] is None
        assert record["limits"] == "Sin límite"

    def test_unknown_status_raises(self, kv_db, instance_store):
        kv_db.set("tasks", json.dumps([
            {"id": 1, "templateId": 1, "date": "2026-02-09", "status": "archived"},
        ]))
        with pytest.raises(StorageError):
            instance_store.load()

    def test_collections_are_independent(self, template_store, instance_store):
        template_store.save([Template(id=1, title="Leer", gain=1.0)])
        assert instance_store.load() == []


class TestStorageErrors:
    def test_read_failure_wrapped(self, tmp_db_path):
        db = KeyValueDB(db_path=tmp_db_path)
        conn = sqlite3.connect(tmp_db_path)
        conn.execute("DROP TABLE kv")
        conn.commit()
        conn.close()
        with pytest.raises(StorageError):
            db.get("mejoras")
