"""Start-consensus protocol.

``start_consensus`` makes the guardian leave setup mode and restart its
networking, so the call itself may never get a clean response. We give it a
grace period, then reconnect and poll ``status`` until the server reports
``ConsensusRunning`` or the retry budget runs out.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import ConsensusStartFailed, GuardianApiError
from .models import ServerStatus
from .rpc import SetupRpc

if TYPE_CHECKING:
    from .api import GuardianApi

logger = logging.getLogger(__name__)

START_CONSENSUS_GRACE_SECONDS = 5.0
CONFIRM_MAX_ATTEMPTS = 10
CONFIRM_RETRY_DELAY_SECONDS = 1.0


@dataclass(frozen=True)
class ConsensusStartPolicy:
    grace_seconds: float = START_CONSENSUS_GRACE_SECONDS
    max_attempts: int = CONFIRM_MAX_ATTEMPTS
    retry_delay_seconds: float = CONFIRM_RETRY_DELAY_SECONDS


def _log_abandoned_call(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.info("start_consensus call ended with %s (expected while the server restarts)", error)


async def _issue(api: GuardianApi, grace_seconds: float) -> None:
    """Send start_consensus; return once it succeeds or the grace delay elapses."""
    call = asyncio.ensure_future(api.call(SetupRpc.START_CONSENSUS))
    call.add_done_callback(_log_abandoned_call)
    timer = asyncio.ensure_future(asyncio.sleep(grace_seconds))

    try:
        done, _ = await asyncio.wait({call, timer}, return_when=asyncio.FIRST_COMPLETED)
        if call in done and call.exception() is None:
            return
        # Either the grace delay won or the call failed early; the server
        # dropping the connection is expected, so wait out the grace delay.
        await timer
    finally:
        timer.cancel()


async def _confirm_once(api: GuardianApi) -> bool:
    # Connect-then-close is only a liveness probe; status() reconnects.
    await api.connect()
    await api.shutdown()
    status = await api.status()
    if status.server == ServerStatus.CONSENSUS_RUNNING:
        return True
    logger.warning("Expected status ConsensusRunning, got %s", status.server.value)
    return False


async def start_consensus(api: GuardianApi, policy: ConsensusStartPolicy | None = None) -> None:
    policy = policy or ConsensusStartPolicy()
    await _issue(api, policy.grace_seconds)

    for attempt in range(1, policy.max_attempts + 1):
        try:
            if await _confirm_once(api):
                logger.info("Consensus running (confirmed on attempt %d)", attempt)
                return
        except GuardianApiError as e:
            logger.warning("Failed to confirm consensus running (attempt %d/%d): %s",
                           attempt, policy.max_attempts, e)
        if attempt < policy.max_attempts:
            await asyncio.sleep(policy.retry_delay_seconds)

    raise ConsensusStartFailed("Failed to start consensus, see logs for more info.")
