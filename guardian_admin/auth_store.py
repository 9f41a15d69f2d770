"""Credential persistence for guardian admin clients.

One password value per origin, kept either in memory for the lifetime of
the process or in a JSON session file so CLI invocations can share a login.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

STORAGE_KEY = "guardian-ui-key"
SESSION_PATH_ENV = "GUARDIAN_ADMIN_SESSION_PATH"


class Storage(Protocol):
    def get_item(self, origin: str, key: str) -> str | None: ...

    def set_item(self, origin: str, key: str, value: str) -> None: ...

    def remove_item(self, origin: str, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage scoped by origin."""

    def __init__(self) -> None:
        self._items: dict[str, dict[str, str]] = {}

    def get_item(self, origin: str, key: str) -> str | None:
        return self._items.get(origin, {}).get(key)

    def set_item(self, origin: str, key: str, value: str) -> None:
        self._items.setdefault(origin, {})[key] = value

    def remove_item(self, origin: str, key: str) -> None:
        scoped = self._items.get(origin)
        if scoped is None:
            return
        scoped.pop(key, None)
        if not scoped:
            del self._items[origin]


def get_session_path() -> Path:
    """Return the session file path.

    Supports an override via ``GUARDIAN_ADMIN_SESSION_PATH`` for tests.
    """
    override = os.environ.get(SESSION_PATH_ENV, "").strip()
    if override:
        return Path(override)

    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))
        return base / "guardian-admin" / "session.json"

    return Path.home() / ".config" / "guardian-admin" / "session.json"


class FileStorage:
    """JSON-file storage, ``{origin: {key: value}}``."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or get_session_path()

    def _load(self) -> dict[str, dict[str, str]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Discarding unreadable session file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, dict)}

    def _save(self, data: dict[str, dict[str, str]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            pass

    def get_item(self, origin: str, key: str) -> str | None:
        value = self._load().get(origin, {}).get(key)
        return value if isinstance(value, str) else None

    def set_item(self, origin: str, key: str, value: str) -> None:
        data = self._load()
        data.setdefault(origin, {})[key] = value
        self._save(data)

    def remove_item(self, origin: str, key: str) -> None:
        data = self._load()
        scoped = data.get(origin)
        if scoped is None or key not in scoped:
            return
        del scoped[key]
        if not scoped:
            del data[origin]
        self._save(data)


class CredentialStore:
    """Holds the single active guardian password for one origin."""

    def __init__(self, storage: Storage | None = None, *, origin: str = "default"):
        self.storage = storage if storage is not None else MemoryStorage()
        self.origin = origin

    def get(self) -> str | None:
        return self.storage.get_item(self.origin, STORAGE_KEY) or None

    def set(self, value: str) -> None:
        self.storage.set_item(self.origin, STORAGE_KEY, value)

    def clear(self) -> None:
        self.storage.remove_item(self.origin, STORAGE_KEY)
