"""Async admin client for federation guardian nodes over websocket JSON-RPC."""

__version__ = "0.1.0"

from .api import GuardianApi, find_module_id
from .auth_store import CredentialStore, FileStorage, MemoryStorage
from .connection import ConnectionManager, ConnectionState
from .consensus import ConsensusStartPolicy
from .env import GuardianEnv, load_env
from .errors import (
    ConfigError,
    ConnectionFailed,
    ConsensusStartFailed,
    GuardianApiError,
    InvalidResponse,
    InvalidTransition,
    ModuleNotFound,
    RemoteError,
    TransportError,
)
from .models import ModuleKind, ServerStatus, StatusResponse
from .setup_progress import GuardianRole, SetupProgress, SetupState

__all__ = [
    "__version__",
    "GuardianApi",
    "find_module_id",
    "CredentialStore",
    "FileStorage",
    "MemoryStorage",
    "ConnectionManager",
    "ConnectionState",
    "ConsensusStartPolicy",
    "GuardianEnv",
    "load_env",
    "GuardianApiError",
    "ConfigError",
    "ConnectionFailed",
    "TransportError",
    "InvalidResponse",
    "RemoteError",
    "ModuleNotFound",
    "ConsensusStartFailed",
    "InvalidTransition",
    "ModuleKind",
    "ServerStatus",
    "StatusResponse",
    "GuardianRole",
    "SetupProgress",
    "SetupState",
]
