"""Per-file lifecycle finite state machine.

Each guarded per-file operation builds an FSM instance at the file's
current lifecycle position and fires the matching event. The FSM is
purely a validation tool -- it does NOT touch the (Files, Trash) sets
and has no on_enter_state callbacks. The engine computes the next State
itself once the event is accepted.
"""

from __future__ import annotations

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from trashlife.models import FileState, OperationKind

# Event names mapped to (from_state, to_state)
EVENTS = {
    OperationKind.DELETE.value: (FileState.ACTIVE.value, FileState.TRASHED.value),
    OperationKind.RESTORE.value: (FileState.TRASHED.value, FileState.ACTIVE.value),
    OperationKind.PURGE.value: (FileState.TRASHED.value, FileState.PURGED.value),
}

# Reverse lookup: from_state -> list of valid events
EVENTS_FROM_STATE: dict[str, list[str]] = {}
for _event_name, (_from_state, _to_state) in EVENTS.items():
    EVENTS_FROM_STATE.setdefault(_from_state, []).append(_event_name)


class FileLifecycleSM(StateMachine):
    """Three-state lifecycle for a single soft-deletable file.

    States:
        active  -- File exists and is not in the trash.
        trashed -- File exists and is in the trash.
        purged  -- File is gone for good (no outgoing transitions).
    """

    active = State("active", initial=True, value="active")
    trashed = State("trashed", value="trashed")
    purged = State("purged", final=True, value="purged")

    delete = active.to(trashed)
    restore = trashed.to(active)
    purge = trashed.to(purged)


def create_fsm(current_state: str | FileState) -> FileLifecycleSM:
    """Create an FSM instance at the given lifecycle position.

    Args:
        current_state: One of 'active', 'trashed', 'purged'.

    Returns:
        A FileLifecycleSM positioned at *current_state*.
    """
    return FileLifecycleSM(start_value=FileState(current_state).value)


def validate_event(current_state: str | FileState, event: str) -> FileState:
    """Fire *event* on a fresh FSM at *current_state* and return the target.

    Raises:
        TransitionNotAllowed: If *event* is not legal from *current_state*.
    """
    fsm = create_fsm(current_state)
    fsm.send(event)
    return FileState(fsm.current_state_value)


__all__ = [
    "EVENTS",
    "EVENTS_FROM_STATE",
    "FileLifecycleSM",
    "TransitionNotAllowed",
    "create_fsm",
    "validate_event",
]
