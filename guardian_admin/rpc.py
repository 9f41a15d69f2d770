"""Remote method identifiers exposed by a guardian node, by access level."""

from enum import Enum


class SharedRpc(str, Enum):
    AUTH = "auth"
    STATUS = "status"
    GET_VERIFY_CONFIG_HASH = "get_verify_config_hash"


class SetupRpc(str, Enum):
    SET_PASSWORD = "set_password"
    SET_CONFIG_GEN_CONNECTIONS = "set_config_gen_connections"
    GET_DEFAULT_CONFIG_GEN_PARAMS = "get_default_config_gen_params"
    GET_CONSENSUS_CONFIG_GEN_PARAMS = "get_consensus_config_gen_params"
    SET_CONFIG_GEN_PARAMS = "set_config_gen_params"
    RUN_DKG = "run_dkg"
    VERIFIED_CONFIGS = "verified_configs"
    START_CONSENSUS = "start_consensus"
    RESTART_SETUP = "restart_setup"


class AdminRpc(str, Enum):
    VERSION = "version"
    FEDERATION_STATUS = "federation_status"
    INVITE_CODE = "invite_code"
    CONFIG = "config"
    AUDIT = "audit"
    MODULES_CONFIG = "modules_config"
    MODULE_API_CALL = "module"


class ModuleRpc(str, Enum):
    BLOCK_COUNT = "block_count"


RpcMethod = SharedRpc | SetupRpc | AdminRpc


def module_method(module_id: int, rpc: ModuleRpc | str) -> str:
    """Build the method name for a module-scoped call, ``module_<id>_<op>``."""
    op = rpc.value if isinstance(rpc, ModuleRpc) else rpc
    return f"{AdminRpc.MODULE_API_CALL.value}_{int(module_id)}_{op}"
