"""Stateful facade owning one file set and its trash.

The pure engine functions never mutate anything; ``TrashBin`` keeps the
current State and a history of every accepted state. All mutation goes
through one lock per instance, which is the single ownership boundary for
the (Files, Trash) pair.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from trashlife import engine
from trashlife.events import EventCollector
from trashlife.exceptions import GuardFailure
from trashlife.models import (
    EMPTY,
    NOOP,
    FileId,
    Operation,
    State,
    delete_op,
    purge_op,
    restore_op,
)

logger = logging.getLogger(__name__)


class TrashBin:
    """A file set with soft delete, restore, purge and empty."""

    def __init__(
        self,
        files: Iterable[FileId] = (),
        trash: Iterable[FileId] = (),
        collector: EventCollector | None = None,
    ) -> None:
        self._state = engine.new_state(files, trash)
        self._history: list[State] = [self._state]
        self._lock = threading.Lock()
        self._collector = collector

    @property
    def state(self) -> State:
        return self._state

    @property
    def history(self) -> list[State]:
        """Every accepted state, oldest first (a copy)."""
        with self._lock:
            return list(self._history)

    def apply(self, operation: Operation) -> State:
        """Apply *operation* to the current state and make the result current.

        Raises:
            GuardFailure: The current state is left unchanged.
        """
        with self._lock:
            before = self._state
            step = len(self._history) - 1
            try:
                after = engine.apply(before, operation)
            except GuardFailure as e:
                if self._collector is not None:
                    self._collector.emit(step, operation, before, before, "rejected", e.reason)
                raise
            self._state = after
            self._history.append(after)
            if self._collector is not None:
                self._collector.emit(step, operation, before, after, "success")
            return after

    def delete(self, file_id: FileId) -> State:
        return self.apply(delete_op(file_id))

    def restore(self, file_id: FileId) -> State:
        return self.apply(restore_op(file_id))

    def purge(self, file_id: FileId) -> State:
        return self.apply(purge_op(file_id))

    def empty(self) -> State:
        return self.apply(EMPTY)

    def noop(self) -> State:
        return self.apply(NOOP)

    def enabled(self) -> frozenset[Operation]:
        """Operations whose guards hold in the current state."""
        return engine.enabled_operations(self._state)

    def __contains__(self, file_id: FileId) -> bool:
        return file_id in self._state.files

    def __repr__(self) -> str:
        return f"TrashBin({self._state.describe()})"
