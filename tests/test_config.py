"""Tests for simulation config and replay-script loading."""

from __future__ import annotations

import pytest

from trashlife.config import load_config, load_script, parse_step
from trashlife.exceptions import ScriptError
from trashlife.models import EMPTY, NOOP, Policy, delete_op, purge_op


class TestLoadConfig:
    def test_merges_over_defaults(self, write_json):
        path = write_json({"steps": 10, "policy": "eager", "seed": 3})
        config = load_config(path)
        assert config.steps == 10
        assert config.policy == Policy.EAGER
        assert config.seed == 3
        assert config.files == ["A", "B", "C"]
        assert config.stop_at_terminal is False

    def test_files_coerced_to_strings(self, write_json):
        config = load_config(write_json({"files": [1, "two"]}))
        assert config.files == ["1", "two"]

    def test_unknown_keys_ignored(self, write_json):
        config = load_config(write_json({"retention_days": 30}))
        assert config.steps == 50

    def test_bad_policy(self, write_json):
        with pytest.raises(ValueError):
            load_config(write_json({"policy": "round_robin"}))

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_config(tmp_path / "nope.json")

    @pytest.mark.parametrize(
        "data,match",
        [
            ([1, 2], "JSON object"),
            ({"files": "AB"}, "'files'"),
            ({"steps": "10"}, "'steps'"),
            ({"steps": True}, "'steps'"),
            ({"seed": "7"}, "'seed'"),
            ({"stop_at_terminal": "yes"}, "'stop_at_terminal'"),
        ],
    )
    def test_rejects_wrong_shape(self, write_json, data, match):
        with pytest.raises(ValueError, match=match):
            load_config(write_json(data))

    def test_null_seed_allowed(self, write_json):
        assert load_config(write_json({"seed": None})).seed is None


class TestParseStep:
    def test_text(self):
        assert parse_step("purge(A)") == purge_op("A")

    def test_object(self):
        assert parse_step({"op": "delete", "file": "A"}) == delete_op("A")
        assert parse_step({"op": "empty"}) == EMPTY

    def test_object_file_coerced(self):
        assert parse_step({"op": "delete", "file": 7}) == delete_op("7")

    @pytest.mark.parametrize(
        "step",
        [{"file": "A"}, {"op": "shred", "file": "A"}, {"op": "restore"}, 42, None],
    )
    def test_rejects(self, step):
        with pytest.raises(ScriptError):
            parse_step(step)


class TestLoadScript:
    def test_full_script(self, write_json):
        path = write_json(
            {
                "files": ["A", "B", "C"],
                "trash": ["A"],
                "steps": ["delete(B)", {"op": "empty"}, "noop()"],
            }
        )
        script = load_script(path)
        assert script.files == ["A", "B", "C"]
        assert script.trash == ["A"]
        assert script.operations == [delete_op("B"), EMPTY, NOOP]

    def test_defaults(self, write_json):
        script = load_script(write_json({"files": []}))
        assert script.trash == []
        assert script.operations == []

    def test_missing_files_key(self, write_json):
        with pytest.raises(ScriptError, match="'files' list"):
            load_script(write_json({"steps": []}))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ScriptError, match="Invalid JSON"):
            load_script(path)

    @pytest.mark.parametrize(
        "data,match",
        [
            ([{"files": ["A"]}], "'files' list"),
            ({"files": ["A"], "trash": 5}, "'trash' must be a list"),
            ({"files": ["A", "B"], "trash": "AB"}, "'trash' must be a list"),
            ({"files": ["A"], "steps": "delete(A)"}, "'steps' must be a list"),
        ],
    )
    def test_rejects_wrong_shape(self, write_json, data, match):
        with pytest.raises(ScriptError, match=match):
            load_script(write_json(data))
