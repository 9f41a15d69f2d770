"""Tests for guardian_admin.setup_progress."""

import pytest

from guardian_admin import GuardianRole, InvalidTransition, SetupProgress, SetupState
from guardian_admin.models import Peer
from guardian_admin.setup_progress import (
    PROGRESS_ORDER,
    can_go_back,
    can_restart,
    is_peer_restarted,
    next_progress,
    previous_progress,
)


def test_progress_order():
    assert [p.value for p in PROGRESS_ORDER] == [
        "Start",
        "SetConfiguration",
        "ConnectGuardians",
        "RunDKG",
        "VerifyGuardians",
        "SetupComplete",
    ]


def test_next_and_previous_at_the_edges():
    assert next_progress(SetupProgress.START) == SetupProgress.SET_CONFIGURATION
    assert next_progress(SetupProgress.SETUP_COMPLETE) is None
    assert previous_progress(SetupProgress.START) is None
    assert previous_progress(SetupProgress.RUN_DKG) == SetupProgress.CONNECT_GUARDIANS


@pytest.mark.parametrize(
    "progress, back, restart",
    [
        (SetupProgress.START, False, False),
        (SetupProgress.SET_CONFIGURATION, True, False),
        (SetupProgress.CONNECT_GUARDIANS, True, True),
        (SetupProgress.RUN_DKG, False, True),
        (SetupProgress.VERIFY_GUARDIANS, False, True),
        (SetupProgress.SETUP_COMPLETE, False, False),
    ],
)
def test_back_and_restart_availability(progress, back, restart):
    assert can_go_back(progress) is back
    assert can_restart(progress) is restart


def test_restart_is_host_only_when_role_known():
    assert can_restart(SetupProgress.RUN_DKG, GuardianRole.HOST) is True
    assert can_restart(SetupProgress.RUN_DKG, GuardianRole.FOLLOWER) is False


def test_peer_restart_only_counts_in_restartable_phases():
    peers = [Peer(name="alice", status="ConsensusRunning"), Peer(name="bob", status="SetupRestarted")]

    assert is_peer_restarted(SetupProgress.VERIFY_GUARDIANS, peers) is True
    assert is_peer_restarted(SetupProgress.SET_CONFIGURATION, peers) is False
    assert is_peer_restarted(SetupProgress.RUN_DKG, peers[:1]) is False


class TestSetupState:
    def test_advances_through_every_phase(self):
        state = SetupState()
        visited = [state.progress]
        while state.progress != SetupProgress.SETUP_COMPLETE:
            visited.append(state.advance())

        assert tuple(visited) == PROGRESS_ORDER
        with pytest.raises(InvalidTransition):
            state.advance()

    def test_go_back_only_where_allowed(self):
        state = SetupState(progress=SetupProgress.SET_CONFIGURATION)
        assert state.go_back() == SetupProgress.START

        state = SetupState(progress=SetupProgress.CONNECT_GUARDIANS)
        assert state.go_back() == SetupProgress.SET_CONFIGURATION

        state = SetupState(progress=SetupProgress.RUN_DKG)
        with pytest.raises(InvalidTransition):
            state.go_back()

    def test_move_to_rejects_jumps(self):
        state = SetupState(progress=SetupProgress.SET_CONFIGURATION)

        with pytest.raises(InvalidTransition):
            state.move_to(SetupProgress.RUN_DKG)

        assert state.move_to(SetupProgress.CONNECT_GUARDIANS) == SetupProgress.CONNECT_GUARDIANS

    def test_reset_returns_to_start(self):
        state = SetupState(
            progress=SetupProgress.VERIFY_GUARDIANS,
            role=GuardianRole.HOST,
            peers=[Peer(name="alice")],
        )

        state.reset()

        assert state == SetupState()
