"""Tests for the per-file lifecycle FSM.

Covers:
  - All 3 legal transitions succeed
  - Illegal transitions raise
  - The EVENTS table mirrors the FSM definition
"""

from __future__ import annotations

import warnings

import pytest

from trashlife.fsm import (
    EVENTS,
    EVENTS_FROM_STATE,
    TransitionNotAllowed,
    create_fsm,
    validate_event,
)
from trashlife.models import FileState

class TestFSMTransitions:
    """Test all 3 legal transitions succeed and illegal ones raise."""

    def test_active_to_trashed(self):
        """Legal: active -> trashed via delete."""
        fsm = create_fsm("active")
        fsm.delete()
        assert fsm.current_state_value == "trashed"

    def test_trashed_to_active(self):
        """Legal: trashed -> active via restore."""
        fsm = create_fsm("trashed")
        fsm.restore()
        assert fsm.current_state_value == "active"

    def test_trashed_to_purged(self):
        """Legal: trashed -> purged via purge."""
        fsm = create_fsm(FileState.TRASHED)
        fsm.purge()
        assert fsm.current_state_value == "purged"

    def test_illegal_active_to_purged(self):
        """Illegal: an active file cannot be purged without passing the trash."""
        fsm = create_fsm("active")
        with pytest.raises(TransitionNotAllowed):
            fsm.purge()

    def test_illegal_delete_twice(self):
        """Illegal: a trashed file cannot be deleted again."""
        fsm = create_fsm("trashed")
        with pytest.raises(TransitionNotAllowed):
            fsm.delete()

    @pytest.mark.parametrize("event", ["delete", "restore", "purge"])
    def test_purged_is_dead_end(self, event):
        """Nothing leaves the purged state."""
        fsm = create_fsm("purged")
        with pytest.raises(TransitionNotAllowed):
            fsm.send(event)

    def test_unknown_state_rejected(self):
        with pytest.raises(ValueError):
            create_fsm("archived")

    def test_validate_event_emits_no_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert validate_event("active", "delete") == FileState.TRASHED


class TestEventTable:
    """The static EVENTS table must agree with the FSM."""

    def test_three_events(self):
        assert set(EVENTS) == {"delete", "restore", "purge"}

    @pytest.mark.parametrize("event,edge", sorted(EVENTS.items()))
    def test_validate_event_matches_table(self, event, edge):
        from_state, to_state = edge
        assert validate_event(from_state, event) == FileState(to_state)

    def test_events_from_state(self):
        assert EVENTS_FROM_STATE["active"] == ["delete"]
        assert sorted(EVENTS_FROM_STATE["trashed"]) == ["purge", "restore"]
        assert "purged" not in EVENTS_FROM_STATE

    @pytest.mark.parametrize("state", list(FileState))
    @pytest.mark.parametrize("event", ["delete", "restore", "purge"])
    def test_reverse_lookup_agrees_with_fsm(self, state, event):
        try:
            validate_event(state, event)
            legal = True
        except TransitionNotAllowed:
            legal = False
        assert (event in EVENTS_FROM_STATE.get(state.value, [])) is legal
