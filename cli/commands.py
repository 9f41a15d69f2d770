"""
CLI subcommand implementations for guardian-admin.

Subcommands::

    guardian-admin status | version | federation-status | invite-code
    guardian-admin audit | config | modules-config | block-count
    guardian-admin login [--password P] | logout
    guardian-admin start-consensus | restart-setup
    guardian-admin setup set-password | connect --name N [--leader-url U]
    guardian-admin setup default-params | consensus-params | set-params --file F
    guardian-admin setup run-dkg | verify-hash | verified-configs

Global options: ``--config PATH`` (config.json with ``fm_config_api``),
``--verbose``.
"""

import argparse
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import TypeAdapter, ValidationError

from guardian_admin import (
    ConnectionManager,
    CredentialStore,
    FileStorage,
    GuardianApi,
    GuardianApiError,
    load_env,
)
from guardian_admin.models import ConfigGenParams

logger = logging.getLogger(__name__)

_JSON = TypeAdapter(Any)

# Commands that map straight onto one GuardianApi coroutine method.
SIMPLE_COMMANDS = {
    "status": "status",
    "version": "version",
    "federation-status": "federation_status",
    "invite-code": "invite_code",
    "audit": "audit",
    "config": "config",
    "modules-config": "modules_config",
    "start-consensus": "start_consensus",
    "restart-setup": "restart_setup",
}

SIMPLE_SETUP_COMMANDS = {
    "default-params": "get_default_config_gen_params",
    "consensus-params": "get_consensus_config_gen_params",
    "run-dkg": "run_dkg",
    "verify-hash": "get_verify_config_hash",
    "verified-configs": "verified_configs",
}


def build_api(config_path: str | None = None, session_path: str | None = None) -> GuardianApi:
    """Wire a GuardianApi whose login persists in the session file."""
    env = load_env(config_path)
    storage = FileStorage(Path(session_path)) if session_path else FileStorage()
    credentials = CredentialStore(storage, origin=env.fm_config_api or "default")
    connection = ConnectionManager(env_loader=lambda: env)
    return GuardianApi(connection=connection, credentials=credentials)


def print_json(value: Any) -> None:
    print(json.dumps(_JSON.dump_python(value, mode="json", by_alias=True), indent=2))


def _prompt_password(args, *, confirm: bool = False) -> str:
    if getattr(args, "password", None):
        return args.password
    password = getpass.getpass("Guardian password: ")
    if confirm and getpass.getpass("Confirm password: ") != password:
        print("Error: Passwords do not match.")
        sys.exit(1)
    return password


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

async def cmd_login(api: GuardianApi, args) -> None:
    if await api.test_password(_prompt_password(args)):
        print("Logged in.")
        return
    print("Error: Invalid password (or the guardian could not be reached).")
    sys.exit(1)


def cmd_logout(api: GuardianApi, args) -> None:
    api.clear_password()
    print("Logged out.")


async def cmd_block_count(api: GuardianApi, args) -> int:
    config = await api.config()
    return await api.fetch_block_count(config)


async def cmd_setup(api: GuardianApi, args) -> Any:
    action = args.setup_action

    if action in SIMPLE_SETUP_COMMANDS:
        return await getattr(api, SIMPLE_SETUP_COMMANDS[action])()

    if action == "set-password":
        await api.set_password(_prompt_password(args, confirm=True))
        print("Password set.")
    elif action == "connect":
        await api.set_config_gen_connections(args.name, args.leader_url)
        print("Connection info submitted.")
    elif action == "set-params":
        path = Path(args.file)
        if not path.exists():
            print(f"Error: Params file not found: {path}")
            sys.exit(1)
        try:
            params = ConfigGenParams.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            print(f"Error: Invalid params file {path}: {e}")
            sys.exit(1)
        await api.set_config_gen_params(params)
        print("Config gen params submitted.")
    return None


async def run_command(api: GuardianApi, args) -> Any:
    """Dispatch parsed ``args`` to the matching subcommand."""
    command = args.command
    if command in SIMPLE_COMMANDS:
        return await getattr(api, SIMPLE_COMMANDS[command])()
    if command == "login":
        return await cmd_login(api, args)
    if command == "logout":
        return cmd_logout(api, args)
    if command == "block-count":
        return await cmd_block_count(api, args)
    if command == "setup":
        return await cmd_setup(api, args)
    raise ValueError(f"Unknown command: {command}")


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="guardian-admin",
        description="Administer a federation guardian node over its websocket API",
    )
    parser.add_argument("--config", help="Path to config.json (default: ./config.json)")
    parser.add_argument("--session-file", help="Where the login is kept between runs")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name in SIMPLE_COMMANDS:
        subparsers.add_parser(name, help=f"Call {SIMPLE_COMMANDS[name]}")
    subparsers.add_parser("block-count", help="Wallet module block count")

    p_login = subparsers.add_parser("login", help="Check and remember the guardian password")
    p_login.add_argument("--password", help="Password (prompted when omitted)")
    subparsers.add_parser("logout", help="Forget the remembered password")

    # --- setup ---
    p_setup = subparsers.add_parser("setup", help="Federation setup calls")
    sp_setup = p_setup.add_subparsers(dest="setup_action", required=True)

    for name in SIMPLE_SETUP_COMMANDS:
        sp_setup.add_parser(name, help=f"Call {SIMPLE_SETUP_COMMANDS[name]}")

    sp_password = sp_setup.add_parser("set-password", help="Set the guardian password")
    sp_password.add_argument("--password", help="Password (prompted when omitted)")

    sp_connect = sp_setup.add_parser("connect", help="Set our name and the leader's API url")
    sp_connect.add_argument("--name", required=True, help="Our guardian name")
    sp_connect.add_argument("--leader-url", default=None, help="Leader API url (omit on the leader)")

    sp_params = sp_setup.add_parser("set-params", help="Submit config gen params from a JSON file")
    sp_params.add_argument("--file", required=True, help="Path to the params JSON")

    return parser


async def main(argv: list[str] | None = None):
    """Entry point for the CLI."""
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
    )

    api = build_api(args.config, args.session_file)
    try:
        async with api:
            result = await run_command(api, args)
    except GuardianApiError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if result is not None:
        print_json(result)
