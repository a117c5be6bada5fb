"""Structured event log for transition attempts.

Every transition attempt produces a record with attempt_id, step, event,
file_id, the before/after sets, and outcome. The EventCollector stores
records in a list for test assertions and mirrors each one to the
``trashlife.events`` logger as JSON.
"""

from __future__ import annotations

import json
import logging
import uuid

from trashlife.models import Operation, State

logger = logging.getLogger(__name__)


def _sorted_ids(items: frozenset) -> list[str]:
    return sorted(str(i) for i in items)


class EventCollector:
    """Collects structured event records in-memory for test assertions."""

    def __init__(self) -> None:
        self.events: list[dict] = []

    def emit(
        self,
        step: int,
        operation: Operation,
        before: State,
        after: State,
        outcome: str,  # "success" | "rejected"
        error: str | None = None,
    ) -> dict:
        """Record an event and return the record dict."""
        record = {
            "attempt_id": str(uuid.uuid4()),
            "step": step,
            "event": operation.kind.value,
            "file_id": operation.file_id,
            "from_files": _sorted_ids(before.files),
            "from_trash": _sorted_ids(before.trash),
            "to_files": _sorted_ids(after.files),
            "to_trash": _sorted_ids(after.trash),
            "outcome": outcome,
            "error": error,
        }
        self.events.append(record)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(json.dumps(record, default=str))
        return record

    def successes(self) -> list[dict]:
        """Return events with outcome='success'."""
        return [e for e in self.events if e["outcome"] == "success"]

    def rejections(self) -> list[dict]:
        """Return events with outcome='rejected'."""
        return [e for e in self.events if e["outcome"] == "rejected"]

    def for_file(self, file_id) -> list[dict]:
        """Return all events targeting a specific file."""
        return [e for e in self.events if e["file_id"] == file_id]

    def clear(self) -> None:
        """Clear all collected events."""
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)
