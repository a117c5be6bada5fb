"""Transition engine: guarded, pure operations over (Files, Trash) states.

Every operation takes a :class:`~trashlife.models.State` and returns a new
one; the input is never mutated, so earlier trace entries stay valid for
inspection and replay. Fields an operation does not change are carried
over by identity.

Per-file guards are validated by :mod:`trashlife.fsm`; a rejected event
surfaces as :class:`~trashlife.exceptions.GuardFailure`. The subset
invariant is re-checked after every successful transition and a failure
there raises :class:`~trashlife.exceptions.InvariantViolation`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from trashlife.exceptions import GuardFailure, InvariantViolation
from trashlife.fsm import EVENTS_FROM_STATE, TransitionNotAllowed, validate_event
from trashlife.models import (
    EMPTY,
    NOOP,
    FileId,
    FileState,
    Operation,
    OperationKind,
    State,
    delete_op,
    purge_op,
    restore_op,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# State & invariant
# ---------------------------------------------------------------------------


def new_state(files: Iterable[FileId], trash: Iterable[FileId] = ()) -> State:
    """Build a State, rejecting a trash set that is not a subset of files.

    Raises:
        InvariantViolation: If *trash* contains identifiers absent from *files*.
    """
    state = State(frozenset(files), frozenset(trash))
    check_invariant(state)
    return state


def check_invariant(state: State) -> None:
    """Raise InvariantViolation unless Trash is a subset of Files."""
    orphans = state.trash - state.files
    if orphans:
        logger.error("Invariant violated: orphaned trash %s in %s", sorted(map(str, orphans)), state.describe())
        raise InvariantViolation(orphans)


def file_state(state: State, file_id: FileId) -> FileState:
    """Lifecycle position of *file_id* in *state*.

    Identifiers not in Files are reported as purged, whether they were
    removed earlier or never existed in this state.
    """
    if file_id in state.trash:
        return FileState.TRASHED
    if file_id in state.files:
        return FileState.ACTIVE
    return FileState.PURGED


def is_terminal(state: State) -> bool:
    """True when no files remain (which implies an empty trash)."""
    return not state.files


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def _guard(state: State, operation: Operation) -> None:
    current = file_state(state, operation.file_id)
    try:
        validate_event(current, operation.kind.value)
    except TransitionNotAllowed:
        reason = _rejection_reason(operation.kind, operation.file_id, current)
        logger.debug("Guard rejected %s: %s", operation, reason)
        raise GuardFailure(operation, reason) from None


def _rejection_reason(kind: OperationKind, file_id: FileId, current: FileState) -> str:
    if current == FileState.PURGED:
        return f"{file_id} is not in the file set"
    if kind == OperationKind.DELETE:
        return f"{file_id} is already in the trash"
    return f"{file_id} is not in the trash"


def delete(state: State, file_id: FileId) -> State:
    """Move an active file into the trash."""
    _guard(state, delete_op(file_id))
    return _commit(state, State(state.files, state.trash | {file_id}), delete_op(file_id))


def restore(state: State, file_id: FileId) -> State:
    """Take a trashed file back out of the trash."""
    _guard(state, restore_op(file_id))
    return _commit(state, State(state.files, state.trash - {file_id}), restore_op(file_id))


def purge(state: State, file_id: FileId) -> State:
    """Permanently remove a trashed file from both Trash and Files."""
    _guard(state, purge_op(file_id))
    return _commit(
        state,
        State(state.files - {file_id}, state.trash - {file_id}),
        purge_op(file_id),
    )


def empty(state: State) -> State:
    """Purge every trashed file in one atomic step.

    Equivalent to applying :func:`purge` to each trashed file, in any order.
    """
    if not state.trash:
        logger.debug("Guard rejected empty(): trash is empty")
        raise GuardFailure(EMPTY, "trash is empty")
    return _commit(state, State(state.files - state.trash, frozenset()), EMPTY)


def noop(state: State) -> State:
    """Always enabled; returns the very same state."""
    return _commit(state, state, NOOP)


def _commit(before: State, after: State, operation: Operation) -> State:
    check_invariant(after)
    if after.files - before.files:
        # Files may only shrink: the core never fabricates identifiers.
        raise InvariantViolation(
            frozenset(),
            f"{operation} added files {sorted(map(str, after.files - before.files))}",
        )
    logger.debug("%s: %s -> %s", operation, before.describe(), after.describe())
    return after


_PER_FILE = {
    OperationKind.DELETE: delete,
    OperationKind.RESTORE: restore,
    OperationKind.PURGE: purge,
}

_BULK = {
    OperationKind.EMPTY: empty,
    OperationKind.NOOP: noop,
}


def apply(state: State, operation: Operation) -> State:
    """Apply one operation descriptor to *state* and return the next state.

    Raises:
        GuardFailure: If the operation's precondition does not hold.
        InvariantViolation: If the resulting state breaks Trash ⊆ Files.
    """
    if operation.kind.per_file:
        return _PER_FILE[operation.kind](state, operation.file_id)
    return _BULK[operation.kind](state)


def enabled_operations(state: State) -> frozenset[Operation]:
    """Every operation whose guard holds in *state*; always contains noop."""
    ops: set[Operation] = {NOOP}
    for file_id in state.files:
        for event in EVENTS_FROM_STATE.get(file_state(state, file_id).value, []):
            ops.add(Operation(OperationKind(event), file_id))
    if state.trash:
        ops.add(EMPTY)
    return frozenset(ops)


def is_enabled(state: State, operation: Operation) -> bool:
    return operation in enabled_operations(state)
