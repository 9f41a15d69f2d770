"""Configuration document loading for the guardian admin client.

The hosting application ships a small ``config.json``::

    {"fm_config_api": "ws://127.0.0.1:18174", "tos": ""}

``FM_CONFIG_API`` / ``FM_TOS`` environment variables (optionally from a
``.env`` file) take precedence over the document values.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "GUARDIAN_ADMIN_CONFIG_PATH"
CONFIG_API_ENV = "FM_CONFIG_API"
TOS_ENV = "FM_TOS"
DEFAULT_CONFIG_FILENAME = "config.json"


@dataclass(frozen=True)
class GuardianEnv:
    fm_config_api: str | None = None
    tos: str | None = None

    @property
    def needs_tos_agreement(self) -> bool:
        return bool(self.tos)


def get_config_path(path: str | Path | None = None) -> Path:
    """Return the config document path.

    Explicit argument first, then ``GUARDIAN_ADMIN_CONFIG_PATH``, then
    ``./config.json``.
    """
    if path is not None:
        return Path(path)
    override = os.environ.get(CONFIG_PATH_ENV, "").strip()
    if override:
        return Path(override)
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


def _clean(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def load_env(path: str | Path | None = None) -> GuardianEnv:
    """Load the config document and apply environment overrides."""
    load_dotenv(find_dotenv(usecwd=True))
    config_path = get_config_path(path)

    data: dict = {}
    if config_path.exists():
        try:
            raw = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable config document %s: %s", config_path, e)
        else:
            if isinstance(raw, dict):
                data = raw

    return GuardianEnv(
        fm_config_api=_clean(os.environ.get(CONFIG_API_ENV)) or _clean(data.get("fm_config_api")),
        tos=_clean(os.environ.get(TOS_ENV)) or _clean(data.get("tos")),
    )
