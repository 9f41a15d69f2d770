"""Connection lifecycle for the guardian websocket."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from .env import GuardianEnv, load_env
from .errors import ConfigError, ConnectionFailed
from .transport import JsonRpcWebsocket

logger = logging.getLogger(__name__)

# DKG can take a long time, so individual requests get hours, not seconds.
REQUEST_TIMEOUT_SECONDS = 5 * 60 * 60
OPEN_TIMEOUT_SECONDS = 30.0

CONNECTION_FAILED_MESSAGE = (
    "Failed to connect to API, confirm your server is online and try again."
)

TransportFactory = Callable[..., JsonRpcWebsocket]


class ConnectionState(Enum):
    ABSENT = "absent"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class ConnectionManager:
    """Owns at most one live transport and at most one pending open attempt."""

    def __init__(
        self,
        *,
        env_loader: Callable[[], GuardianEnv] = load_env,
        transport_factory: TransportFactory = JsonRpcWebsocket,
        request_timeout: float = REQUEST_TIMEOUT_SECONDS,
        open_timeout: float = OPEN_TIMEOUT_SECONDS,
    ):
        self.env_loader = env_loader
        self.transport_factory = transport_factory
        self.request_timeout = request_timeout
        self.open_timeout = open_timeout

        self._transport: Optional[JsonRpcWebsocket] = None
        self._connecting: Optional[asyncio.Task[JsonRpcWebsocket]] = None

    @property
    def state(self) -> ConnectionState:
        if self._connecting is not None:
            return ConnectionState.CONNECTING
        if self._transport is None:
            return ConnectionState.ABSENT
        if self._transport.is_open:
            return ConnectionState.OPEN
        return ConnectionState.CLOSED

    async def connect(self) -> JsonRpcWebsocket:
        """Return the open transport, opening one if needed.

        Concurrent callers share a single in-flight attempt and observe the
        same outcome.
        """
        if self._transport is not None:
            if self._transport.is_open:
                return self._transport
            self._transport = None

        if self._connecting is None:
            self._connecting = asyncio.create_task(self._open())
        return await asyncio.shield(self._connecting)

    async def shutdown(self) -> bool:
        """Close the transport if any; return whether the close was clean."""
        self._connecting = None
        transport, self._transport = self._transport, None
        if transport is None:
            return True
        return await transport.close()

    async def _open(self) -> JsonRpcWebsocket:
        try:
            url = self.env_loader().fm_config_api
            if not url:
                raise ConfigError("fm_config_api not found in config.json")

            transport = self.transport_factory(
                url,
                request_timeout=self.request_timeout,
                open_timeout=self.open_timeout,
                on_close=self._handle_transport_closed,
            )
            try:
                await transport.open()
            except Exception as e:
                logger.error("failed to open websocket %s: %s", url, e)
                raise ConnectionFailed(CONNECTION_FAILED_MESSAGE) from e

            if self._connecting is not asyncio.current_task():
                # shutdown() ran while we were opening
                await transport.close()
                raise ConnectionFailed("Connection attempt abandoned by shutdown.")

            self._transport = transport
            return transport
        finally:
            if self._connecting is asyncio.current_task():
                self._connecting = None

    def _handle_transport_closed(self, transport: JsonRpcWebsocket) -> None:
        if transport is self._transport:
            logger.info("websocket closed by server, will reconnect on next call")
            self._transport = None
