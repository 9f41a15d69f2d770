"""Exception taxonomy for the guardian admin client."""

from __future__ import annotations

from typing import Any


class GuardianApiError(Exception):
    """Base exception for guardian client failures."""


class ConfigError(GuardianApiError):
    """Raised when required connection configuration is missing."""


class ConnectionFailed(GuardianApiError):
    """Raised when the websocket transport could not be opened."""


class TransportError(GuardianApiError):
    """Raised for transport-level failures while sending or awaiting a call."""


class InvalidResponse(TransportError):
    """Raised when the server replies with a payload we cannot interpret."""


class RemoteError(GuardianApiError):
    """Structured error returned by the server in the response envelope."""

    def __init__(self, code: int | None, message: str, data: Any = None):
        super().__init__(f"Guardian API error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class ModuleNotFound(GuardianApiError):
    """Raised when a module of the requested kind is absent from the config."""


class ConsensusStartFailed(GuardianApiError):
    """Raised when consensus could not be confirmed within the retry budget."""


class InvalidTransition(GuardianApiError):
    """Raised when setup progress is moved to a non-adjacent phase."""
