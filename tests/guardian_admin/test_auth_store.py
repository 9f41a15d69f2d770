"""Tests for guardian_admin.auth_store."""

import json

from guardian_admin import CredentialStore, FileStorage, MemoryStorage
from guardian_admin.auth_store import STORAGE_KEY, get_session_path


def test_memory_store_set_get_clear():
    store = CredentialStore()
    assert store.get() is None

    store.set("abc123")
    assert store.get() == "abc123"

    store.clear()
    assert store.get() is None


def test_clear_without_value_is_noop():
    CredentialStore().clear()


def test_origins_are_isolated():
    storage = MemoryStorage()
    a = CredentialStore(storage, origin="ws://a:18174")
    b = CredentialStore(storage, origin="ws://b:18174")

    a.set("for-a")

    assert a.get() == "for-a"
    assert b.get() is None


def test_empty_string_reads_as_no_password():
    store = CredentialStore()
    store.set("")
    assert store.get() is None


def test_file_storage_persists_between_instances(tmp_path):
    path = tmp_path / "session.json"
    CredentialStore(FileStorage(path), origin="ws://a").set("hunter2")

    assert CredentialStore(FileStorage(path), origin="ws://a").get() == "hunter2"
    assert json.loads(path.read_text(encoding="utf-8")) == {"ws://a": {STORAGE_KEY: "hunter2"}}


def test_file_storage_clear_removes_origin(tmp_path):
    path = tmp_path / "session.json"
    storage = FileStorage(path)
    CredentialStore(storage, origin="ws://a").set("x")
    CredentialStore(storage, origin="ws://b").set("y")

    CredentialStore(storage, origin="ws://a").clear()

    assert json.loads(path.read_text(encoding="utf-8")) == {"ws://b": {STORAGE_KEY: "y"}}


def test_file_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")

    assert CredentialStore(FileStorage(path)).get() is None


def test_session_path_override(monkeypatch, tmp_path):
    monkeypatch.setenv("GUARDIAN_ADMIN_SESSION_PATH", str(tmp_path / "s.json"))
    assert get_session_path() == tmp_path / "s.json"
