"""Pydantic models for guardian API results."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _RemoteModel(BaseModel):
    """Base model for server payloads; unknown fields are kept, not rejected."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ServerStatus(str, Enum):
    AWAITING_PASSWORD = "AwaitingPassword"
    SHARING_CONFIG_GEN_PARAMS = "SharingConfigGenParams"
    READY_FOR_CONFIG_GEN = "ReadyForConfigGen"
    CONFIG_GEN_FAILED = "ConfigGenFailed"
    VERIFYING_CONFIGS = "VerifyingConfigs"
    VERIFIED_CONFIGS = "VerifiedConfigs"
    CONSENSUS_RUNNING = "ConsensusRunning"
    SETUP_RESTARTED = "SetupRestarted"


class ModuleKind(str, Enum):
    LN = "ln"
    MINT = "mint"
    WALLET = "wallet"


class PeerConnectionStatus(str, Enum):
    CONNECTED = "Connected"
    DISCONNECTED = "Disconnected"


class PeerStatus(_RemoteModel):
    last_contribution: int | None = None
    connection_status: PeerConnectionStatus | None = None
    flagged: bool = False


class FederationStatus(_RemoteModel):
    session_count: int = 0
    status_by_peer: dict[int, PeerStatus] = Field(default_factory=dict)
    peers_online: int = 0
    peers_offline: int = 0
    peers_flagged: int = 0
    scheduled_shutdown: int | None = None


class StatusResponse(_RemoteModel):
    server: ServerStatus
    federation: FederationStatus | None = None


class Peer(_RemoteModel):
    name: str
    cert: str | None = None
    api_url: str | None = None
    p2p_url: str | None = None
    status: ServerStatus | None = None


class ConfigGenParams(_RemoteModel):
    meta: dict[str, Any] = Field(default_factory=dict)
    modules: dict[str, Any] = Field(default_factory=dict)


class ConsensusParams(_RemoteModel):
    peers: dict[int, Peer] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)
    modules: dict[str, Any] = Field(default_factory=dict)


class ConsensusState(_RemoteModel):
    requested: ConfigGenParams | None = None
    consensus: ConsensusParams
    our_current_id: int


class CoreVersions(_RemoteModel):
    core_consensus: int | dict[str, Any] | None = None
    api: list[Any] = Field(default_factory=list)


class Versions(_RemoteModel):
    core: CoreVersions | None = None
    modules: dict[str, Any] = Field(default_factory=dict)


class ModuleConfig(_RemoteModel):
    kind: str


class GlobalConfig(_RemoteModel):
    api_endpoints: dict[int, Any] = Field(default_factory=dict)
    consensus_version: Any = None
    meta: dict[str, Any] = Field(default_factory=dict)


class ClientConfig(_RemoteModel):
    global_config: GlobalConfig | None = Field(default=None, alias="global")
    modules: dict[str, ModuleConfig] = Field(default_factory=dict)


class ModuleSummary(_RemoteModel):
    net_assets: int
    kind: str


class AuditSummary(_RemoteModel):
    net_assets: int
    module_summaries: dict[int, ModuleSummary] = Field(default_factory=dict)


# Keyed by module id.
ModulesConfigResponse = dict[int, ModuleConfig]

# Consensus config hash reported by each peer, keyed by peer id.
PeerHashMap = dict[int, str]
