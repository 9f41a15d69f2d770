"""
Shared fixtures for guardian-admin tests.
"""

import asyncio
import inspect

import pytest

from guardian_admin import (
    ConnectionManager,
    ConsensusStartPolicy,
    CredentialStore,
    GuardianApi,
    GuardianEnv,
    TransportError,
)
from guardian_admin.transport import RpcFailure, RpcSuccess, parse_response

GUARDIAN_URL = "ws://guardian.local:18174"

# Handler outcome meaning "never answer until the socket is closed".
HANG = object()


class FakeTransport:
    """In-memory stand-in for JsonRpcWebsocket backed by a FakeGuardianServer."""

    def __init__(self, server, url, on_close=None):
        self.server = server
        self.url = url
        self.on_close = on_close
        self.is_open = False
        self.closed = False
        self._closed_event = asyncio.Event()

    async def open(self):
        self.server.opens += 1
        if self.server.open_gate is not None:
            await self.server.open_gate.wait()
        if self.server.open_error is not None:
            raise self.server.open_error
        self.is_open = True

    async def call(self, method, params):
        if not self.is_open:
            raise TransportError(f"websocket is not open, cannot call '{method}'")
        outcome = await self.server.handle(method, params)
        if outcome is HANG:
            await self._closed_event.wait()
            raise TransportError(f"websocket closed while calling '{method}'")
        return outcome

    async def close(self):
        self.is_open = False
        self.closed = True
        self._closed_event.set()
        return True

    def drop(self):
        """Simulate the server killing the socket."""
        self.is_open = False
        self._closed_event.set()
        if self.on_close is not None:
            self.on_close(self)


class FakeGuardianServer:
    """Scripted guardian: per-method handlers, records every open and call."""

    HANG = HANG

    def __init__(self):
        self.opens = 0
        self.calls = []
        self.transports = []
        self.handlers = {}
        self.open_gate = None
        self.open_error = None

    def factory(self, url, *, request_timeout, open_timeout, on_close=None):
        transport = FakeTransport(self, url, on_close)
        self.transports.append(transport)
        return transport

    def respond(self, method, result=None, *, error=None):
        """Answer ``method`` with a result, or with a JSON-RPC error object."""
        if error is not None:
            self.handlers[method] = parse_response({"error": error})
        else:
            self.handlers[method] = RpcSuccess(result)

    def respond_sequence(self, method, outcomes):
        """Answer successive calls from ``outcomes``; the last one repeats.

        Items may be RpcSuccess/RpcFailure, exceptions (raised), HANG, or
        plain values (wrapped as results).
        """
        queue = list(outcomes)

        def _next(params):
            item = queue.pop(0) if len(queue) > 1 else queue[0]
            if item is HANG or isinstance(item, (BaseException, RpcSuccess, RpcFailure)):
                return item
            return RpcSuccess(item)

        self.handlers[method] = _next

    async def handle(self, method, params):
        self.calls.append((method, params))
        handler = self.handlers.get(method, RpcSuccess(None))
        outcome = handler(params) if callable(handler) else handler
        if inspect.isawaitable(outcome):
            outcome = await outcome
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def methods(self):
        return [method for method, _ in self.calls]


@pytest.fixture
def fake_server():
    return FakeGuardianServer()


@pytest.fixture
def guardian_env():
    return GuardianEnv(fm_config_api=GUARDIAN_URL)


@pytest.fixture
def connection(fake_server, guardian_env):
    return ConnectionManager(env_loader=lambda: guardian_env, transport_factory=fake_server.factory)


@pytest.fixture
def api(connection):
    return GuardianApi(
        connection=connection,
        credentials=CredentialStore(),
        consensus_policy=ConsensusStartPolicy(grace_seconds=0.05, retry_delay_seconds=0),
    )
