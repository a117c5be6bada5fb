"""Tests for the structured transition event log."""

from __future__ import annotations

from trashlife.engine import new_state
from trashlife.models import EMPTY, delete_op
from trashlife.trace import TraceDriver


def test_record_fields(collector):
    before = new_state({"A", "B"})
    after = new_state({"A", "B"}, {"B"})
    record = collector.emit(0, delete_op("B"), before, after, "success")

    assert set(record) == {
        "attempt_id", "step", "event", "file_id",
        "from_files", "from_trash", "to_files", "to_trash",
        "outcome", "error",
    }
    assert record["event"] == "delete"
    assert record["file_id"] == "B"
    assert record["from_trash"] == []
    assert record["to_trash"] == ["B"]
    assert record["error"] is None


def test_filters(collector):
    driver = TraceDriver(collector=collector)
    driver.replay(new_state({"A", "B"}), [delete_op("A"), EMPTY, EMPTY, delete_op("B")])

    assert len(collector.successes()) == 3
    assert len(collector.rejections()) == 1
    assert [e["event"] for e in collector.for_file("A")] == ["delete"]
    assert [e["outcome"] for e in collector.for_file(None)] == ["success", "rejected"]


def test_attempt_ids_unique(collector):
    TraceDriver(seed=4, collector=collector).run(new_state({"A"}), 10)
    assert len({e["attempt_id"] for e in collector.events}) == 10


def test_clear(collector):
    collector.emit(0, EMPTY, new_state({"A"}, {"A"}), new_state(set()), "success")
    collector.clear()
    assert len(collector) == 0
