"""Configuration and replay-script loading."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from trashlife.exceptions import ScriptError
from trashlife.models import Operation, OperationKind, Policy, SimulationConfig


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def load_config(config_path: Path) -> SimulationConfig:
    """Load simulation configuration from JSON, merging with defaults.

    Args:
        config_path: Path to a JSON object with any of ``files``, ``steps``,
            ``policy``, ``seed``, ``stop_at_terminal``.

    Returns:
        SimulationConfig with values from file merged over defaults.

    Raises:
        ValueError: If the file is not a JSON object, a field has the wrong
            type, or it holds an unknown policy or a negative step count.
    """
    with open(config_path) as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: expected a JSON object")

    # Build kwargs from JSON data, only including recognised fields
    field_names = set(SimulationConfig.__dataclass_fields__)
    kwargs = {k: v for k, v in data.items() if k in field_names}

    if "files" in kwargs and not isinstance(kwargs["files"], list):
        raise ValueError(f"{config_path}: 'files' must be a list")
    if "steps" in kwargs and not _is_int(kwargs["steps"]):
        raise ValueError(f"{config_path}: 'steps' must be an integer")
    if kwargs.get("seed") is not None and not _is_int(kwargs["seed"]):
        raise ValueError(f"{config_path}: 'seed' must be an integer or null")
    if "stop_at_terminal" in kwargs and not isinstance(kwargs["stop_at_terminal"], bool):
        raise ValueError(f"{config_path}: 'stop_at_terminal' must be true or false")

    if "files" in kwargs:
        kwargs["files"] = [str(f) for f in kwargs["files"]]
    if "policy" in kwargs:
        kwargs["policy"] = Policy(kwargs["policy"])

    return SimulationConfig(**kwargs)


@dataclass
class ReplayScript:
    """A scripted run: initial sets plus the operations to apply in order."""

    files: list[str]
    trash: list[str] = field(default_factory=list)
    operations: list[Operation] = field(default_factory=list)


def parse_step(step: object) -> Operation:
    """Turn one script entry into an Operation.

    Entries are either text (``"delete(A)"``) or objects
    (``{"op": "delete", "file": "A"}``).
    """
    if isinstance(step, str):
        return Operation.parse(step)
    if isinstance(step, dict):
        if "op" not in step:
            raise ScriptError(f"Script step missing 'op': {step!r}")
        try:
            kind = OperationKind(step["op"])
        except ValueError:
            raise ScriptError(f"Unknown operation kind: {step['op']!r}") from None
        file_id = step.get("file")
        try:
            return Operation(kind, None if file_id is None else str(file_id))
        except ValueError as e:
            raise ScriptError(str(e)) from e
    raise ScriptError(f"Unsupported script step: {step!r}")


def load_script(script_path: Path) -> ReplayScript:
    """Load a replay script from JSON.

    Raises:
        ScriptError: If the script is not an object with a ``files`` list
            or any step cannot be parsed.
    """
    with open(script_path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ScriptError(f"Invalid JSON in {script_path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("files"), list):
        raise ScriptError(f"{script_path}: expected an object with a 'files' list")
    for key in ("trash", "steps"):
        if not isinstance(data.get(key, []), list):
            raise ScriptError(f"{script_path}: '{key}' must be a list")

    return ReplayScript(
        files=[str(f) for f in data["files"]],
        trash=[str(f) for f in data.get("trash", [])],
        operations=[parse_step(s) for s in data.get("steps", [])],
    )
