"""Setup wizard progress rules.

The wizard itself lives elsewhere; these helpers keep its progress monotonic
and adjacent-only, and answer the back/restart questions it needs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from .errors import InvalidTransition
from .models import Peer, ServerStatus


class SetupProgress(str, Enum):
    START = "Start"
    SET_CONFIGURATION = "SetConfiguration"
    CONNECT_GUARDIANS = "ConnectGuardians"
    RUN_DKG = "RunDKG"
    VERIFY_GUARDIANS = "VerifyGuardians"
    SETUP_COMPLETE = "SetupComplete"


class GuardianRole(str, Enum):
    HOST = "Host"
    FOLLOWER = "Follower"
    SOLO = "Solo"


PROGRESS_ORDER: tuple[SetupProgress, ...] = tuple(SetupProgress)

BACK_ALLOWED = {SetupProgress.SET_CONFIGURATION, SetupProgress.CONNECT_GUARDIANS}
RESTART_ALLOWED = {
    SetupProgress.CONNECT_GUARDIANS,
    SetupProgress.RUN_DKG,
    SetupProgress.VERIFY_GUARDIANS,
}


def next_progress(progress: SetupProgress) -> Optional[SetupProgress]:
    """Return the phase after ``progress``, or None at the end."""
    idx = PROGRESS_ORDER.index(progress)
    return PROGRESS_ORDER[idx + 1] if idx + 1 < len(PROGRESS_ORDER) else None


def previous_progress(progress: SetupProgress) -> Optional[SetupProgress]:
    """Return the phase before ``progress``, or None at the start."""
    idx = PROGRESS_ORDER.index(progress)
    return PROGRESS_ORDER[idx - 1] if idx > 0 else None


def can_go_back(progress: SetupProgress) -> bool:
    return progress in BACK_ALLOWED and previous_progress(progress) is not None


def can_restart(progress: SetupProgress, role: Optional[GuardianRole] = None) -> bool:
    """Return True when the restart action is offered (hosts only, when a role is known)."""
    if progress not in RESTART_ALLOWED:
        return False
    return role is None or role == GuardianRole.HOST


def is_peer_restarted(progress: SetupProgress, peers: Iterable[Peer]) -> bool:
    """Return True when a peer restarted setup during a restartable phase."""
    if progress not in RESTART_ALLOWED:
        return False
    return any(peer.status == ServerStatus.SETUP_RESTARTED for peer in peers)


@dataclass
class SetupState:
    progress: SetupProgress = SetupProgress.START
    role: Optional[GuardianRole] = None
    peers: list[Peer] = field(default_factory=list)

    def advance(self) -> SetupProgress:
        nxt = next_progress(self.progress)
        if nxt is None:
            raise InvalidTransition(f"Cannot advance past {self.progress.value}")
        self.progress = nxt
        return nxt

    def go_back(self) -> SetupProgress:
        if not can_go_back(self.progress):
            raise InvalidTransition(f"Cannot go back from {self.progress.value}")
        self.progress = previous_progress(self.progress)
        return self.progress

    def move_to(self, target: SetupProgress) -> SetupProgress:
        if target == next_progress(self.progress):
            return self.advance()
        if target == previous_progress(self.progress):
            return self.go_back()
        raise InvalidTransition(
            f"Cannot move from {self.progress.value} to {target.value}"
        )

    def reset(self) -> None:
        """Back to the initial state, dropping role and peers."""
        self.progress = SetupProgress.START
        self.role = None
        self.peers = []
