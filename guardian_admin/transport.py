"""JSON-RPC over a single websocket connection.

Responses are matched to requests by JSON-RPC id. Every call resolves to a
tagged ``RpcOutcome`` so callers never need to inspect payload shapes;
transport failures raise ``TransportError``.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed
from websockets.frames import CloseCode
from websockets.protocol import State

from .errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RpcSuccess:
    result: Any = None


@dataclass(frozen=True)
class RpcFailure:
    code: int | None
    message: str
    data: Any = None


RpcOutcome = Union[RpcSuccess, RpcFailure]

OnClose = Callable[["JsonRpcWebsocket"], None]


def parse_response(message: dict[str, Any]) -> RpcOutcome:
    """Convert a decoded JSON-RPC response object into an outcome."""
    error = message.get("error")
    if error is not None:
        if isinstance(error, dict):
            code = error.get("code")
            return RpcFailure(
                code=code if isinstance(code, int) else None,
                message=str(error.get("message", "")),
                data=error.get("data"),
            )
        return RpcFailure(code=None, message=str(error))
    return RpcSuccess(message.get("result"))


class JsonRpcWebsocket:
    """One websocket, many concurrent JSON-RPC calls."""

    def __init__(
        self,
        url: str,
        *,
        request_timeout: float,
        open_timeout: float = 30.0,
        on_close: Optional[OnClose] = None,
    ):
        self.url = url
        self.request_timeout = request_timeout
        self.open_timeout = open_timeout
        self.on_close = on_close

        self._ws: ClientConnection | None = None
        self._reader: asyncio.Task[None] | None = None
        self._pending: dict[int, asyncio.Future[RpcOutcome]] = {}
        self._ids = itertools.count(1)
        self._closing = False

    @property
    def is_open(self) -> bool:
        return self._ws is not None and self._ws.state is State.OPEN

    async def open(self) -> None:
        self._ws = await connect(self.url, open_timeout=self.open_timeout, max_size=None)
        self._reader = asyncio.create_task(self._read_loop(self._ws))
        logger.debug("websocket opened: %s", self.url)

    async def call(self, method: str, params: list[Any]) -> RpcOutcome:
        ws = self._ws
        if ws is None or not self.is_open:
            raise TransportError(f"websocket is not open, cannot call '{method}'")

        request_id = next(self._ids)
        future: asyncio.Future[RpcOutcome] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        payload = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
        try:
            await ws.send(json.dumps(payload))
            return await asyncio.wait_for(future, self.request_timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"'{method}' timed out after {self.request_timeout:.0f}s"
            ) from e
        except ConnectionClosed as e:
            raise TransportError(f"websocket closed while calling '{method}': {e}") from e
        finally:
            self._pending.pop(request_id, None)

    async def close(self) -> bool:
        """Close the socket; return True when the closing handshake was clean."""
        ws = self._ws
        if ws is None:
            return True
        self._closing = True
        await ws.close()
        if self._reader is not None:
            await self._reader
        return ws.close_code == CloseCode.NORMAL_CLOSURE

    async def _read_loop(self, ws: ClientConnection) -> None:
        reason = "connection closed"
        try:
            async for raw in ws:
                self._dispatch(raw)
        except ConnectionClosed as e:
            reason = str(e)
            logger.warning("websocket %s dropped: %s", self.url, e)
        finally:
            self._fail_pending(TransportError(f"websocket closed: {reason}"))
            if not self._closing and self.on_close is not None:
                self.on_close(self)

    def _dispatch(self, raw: str | bytes) -> None:
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Ignoring undecodable websocket message: %s", e)
            return
        if not isinstance(message, dict):
            logger.warning("Ignoring non-object websocket message: %r", message)
            return

        request_id = message.get("id")
        future = self._pending.get(request_id) if isinstance(request_id, int) else None
        if future is None or future.done():
            logger.debug("Ignoring response for unknown request id %r", request_id)
            return
        future.set_result(parse_response(message))

    def _fail_pending(self, error: TransportError) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._pending.clear()
