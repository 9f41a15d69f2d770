"""Guardian admin API client: RPC dispatch over the shared websocket."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Awaitable

from pydantic import TypeAdapter, ValidationError

from .auth_store import CredentialStore
from .connection import ConnectionManager
from .consensus import ConsensusStartPolicy, start_consensus
from .errors import GuardianApiError, InvalidResponse, ModuleNotFound, RemoteError, TransportError
from .models import (
    AuditSummary,
    ClientConfig,
    ConfigGenParams,
    ConsensusState,
    FederationStatus,
    ModuleKind,
    ModulesConfigResponse,
    PeerHashMap,
    StatusResponse,
    Versions,
)
from .rpc import AdminRpc, ModuleRpc, RpcMethod, SetupRpc, SharedRpc, module_method
from .transport import JsonRpcWebsocket, RpcFailure

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def find_module_id(config: ClientConfig | None, kind: ModuleKind) -> int:
    """Return the id of the first module of ``kind`` in a fetched client config."""
    if config is not None:
        for module_id, module in config.modules.items():
            if module.kind == kind.value:
                return int(module_id)
    raise ModuleNotFound(f"No {kind.value} module found")


class GuardianApi:
    """Stateful client for one guardian node.

    Construct once and share: the instance owns the single websocket
    connection and the single active password.
    """

    def __init__(
        self,
        *,
        connection: ConnectionManager | None = None,
        credentials: CredentialStore | None = None,
        consensus_policy: ConsensusStartPolicy | None = None,
    ):
        self.connection = connection or ConnectionManager()
        self.credentials = credentials or CredentialStore()
        self.consensus_policy = consensus_policy or ConsensusStartPolicy()

    async def __aenter__(self) -> "GuardianApi":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def connect(self) -> JsonRpcWebsocket:
        return await self.connection.connect()

    async def shutdown(self) -> bool:
        return await self.connection.shutdown()

    # ------------------------------------------------------------------
    # Password
    # ------------------------------------------------------------------

    def get_password(self) -> str | None:
        return self.credentials.get()

    def clear_password(self) -> None:
        self.credentials.clear()

    async def test_password(self, password: str) -> bool:
        """Make ``password`` active and probe it with an ``auth`` call.

        Any probe failure counts as a wrong password, including transport
        and server errors unrelated to authentication.
        """
        self.credentials.set(password)
        try:
            await self.auth()
        except GuardianApiError as e:
            logger.warning("Password probe failed, clearing password: %s", e)
            self.clear_password()
            return False
        return True

    # ------------------------------------------------------------------
    # Shared RPC methods
    # ------------------------------------------------------------------

    async def auth(self) -> None:
        await self.call(SharedRpc.AUTH)

    async def status(self) -> StatusResponse:
        return await self.call(SharedRpc.STATUS, result_type=StatusResponse)

    async def get_verify_config_hash(self) -> PeerHashMap:
        return await self.call(SharedRpc.GET_VERIFY_CONFIG_HASH, result_type=PeerHashMap)

    # ------------------------------------------------------------------
    # Setup RPC methods
    # ------------------------------------------------------------------

    async def set_password(self, password: str) -> None:
        # The password must be stored first so it rides along on the call.
        self.credentials.set(password)
        try:
            await self.call(SetupRpc.SET_PASSWORD)
        except GuardianApiError:
            self.clear_password()
            raise

    async def set_config_gen_connections(self, our_name: str, leader_url: str | None = None) -> None:
        connections = {"our_name": our_name, "leader_api_url": leader_url}
        await self.call(SetupRpc.SET_CONFIG_GEN_CONNECTIONS, connections)

    async def get_default_config_gen_params(self) -> ConfigGenParams:
        return await self.call(SetupRpc.GET_DEFAULT_CONFIG_GEN_PARAMS, result_type=ConfigGenParams)

    async def get_consensus_config_gen_params(self) -> ConsensusState:
        return await self.call(SetupRpc.GET_CONSENSUS_CONFIG_GEN_PARAMS, result_type=ConsensusState)

    async def set_config_gen_params(self, params: ConfigGenParams | dict[str, Any]) -> None:
        if isinstance(params, ConfigGenParams):
            params = params.model_dump(mode="json")
        await self.call(SetupRpc.SET_CONFIG_GEN_PARAMS, params)

    async def run_dkg(self) -> None:
        await self.call(SetupRpc.RUN_DKG)

    async def verified_configs(self) -> None:
        await self.call(SetupRpc.VERIFIED_CONFIGS)

    async def start_consensus(self) -> None:
        """Start consensus and wait until the restarted server confirms it."""
        await start_consensus(self, self.consensus_policy)

    async def restart_setup(self) -> None:
        await self.call(SetupRpc.RESTART_SETUP)

    # ------------------------------------------------------------------
    # Running RPC methods
    # ------------------------------------------------------------------

    async def version(self) -> Versions:
        return await self.call(AdminRpc.VERSION, result_type=Versions)

    async def federation_status(self) -> FederationStatus:
        return await self.call(AdminRpc.FEDERATION_STATUS, result_type=FederationStatus)

    async def invite_code(self) -> str:
        return await self.call(AdminRpc.INVITE_CODE, result_type=str)

    async def config(self) -> ClientConfig:
        return await self.call(AdminRpc.CONFIG, result_type=ClientConfig)

    async def audit(self) -> AuditSummary:
        return await self.call(AdminRpc.AUDIT, result_type=AuditSummary)

    async def modules_config(self) -> ModulesConfigResponse:
        return await self.call(AdminRpc.MODULES_CONFIG, result_type=ModulesConfigResponse)

    def fetch_block_count(self, config: ClientConfig | None) -> Awaitable[int]:
        """Ask the wallet module for its block count.

        The wallet module lookup happens before the coroutine is created, so
        ``ModuleNotFound`` is raised by the call itself, not by awaiting it.
        """
        wallet_module_id = find_module_id(config, ModuleKind.WALLET)
        return self.module_api_call(wallet_module_id, ModuleRpc.BLOCK_COUNT, result_type=int)

    async def module_api_call(
        self,
        module_id: int,
        rpc: ModuleRpc | str,
        params: Any = None,
        *,
        result_type: Any = Any,
    ) -> Any:
        return await self.call_any_method(module_method(module_id, rpc), params, result_type=result_type)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def call(self, method: RpcMethod, params: Any = None, *, result_type: Any = Any) -> Any:
        return await self.call_any_method(method.value, params, result_type=result_type)

    async def call_any_method(self, method: str, params: Any = None, *, result_type: Any = Any) -> Any:
        """Send ``method`` with the active password and unwrap the outcome.

        Errors from this package propagate unchanged; anything else raised
        while connecting or awaiting is wrapped once into ``TransportError``.
        """
        try:
            websocket = await self.connection.connect()
            outcome = await websocket.call(method, [{"auth": self.get_password(), "params": params}])
        except GuardianApiError as e:
            logger.error("error calling '%s' on websocket rpc: %s", method, e)
            raise
        except Exception as e:
            logger.error("error calling '%s' on websocket rpc: %s", method, e)
            raise TransportError(f"error calling '{method}': {e}") from e

        if isinstance(outcome, RpcFailure):
            logger.error("'%s' rpc returned error %s: %s", method, outcome.code, outcome.message)
            raise RemoteError(outcome.code, outcome.message, outcome.data)

        result = self._coerce(method, outcome.result, result_type)
        logger.info("%s rpc result: %r", method, result)
        return result

    @staticmethod
    def _coerce(method: str, result: Any, result_type: Any) -> Any:
        if result_type is Any:
            return result
        try:
            return _adapter(result_type).validate_python(result)
        except ValidationError as e:
            logger.error("'%s' rpc returned an unexpected result: %s", method, e)
            raise InvalidResponse(f"'{method}' returned an unexpected result: {e}") from e
