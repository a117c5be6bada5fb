"""Soft-delete file lifecycle model: files, trash and guarded transitions."""

__version__ = "0.1.0"

from trashlife.engine import (
    apply,
    check_invariant,
    enabled_operations,
    file_state,
    is_terminal,
    new_state,
)
from trashlife.exceptions import GuardFailure, InvariantViolation, ScriptError, TransitionError
from trashlife.models import FileState, Operation, OperationKind, Policy, SimulationConfig, State
from trashlife.trace import Trace, TraceDriver
from trashlife.trashbin import TrashBin

__all__ = [
    "FileState",
    "GuardFailure",
    "InvariantViolation",
    "Operation",
    "OperationKind",
    "Policy",
    "ScriptError",
    "SimulationConfig",
    "State",
    "Trace",
    "TraceDriver",
    "TransitionError",
    "TrashBin",
    "__version__",
    "apply",
    "check_invariant",
    "enabled_operations",
    "file_state",
    "is_terminal",
    "new_state",
]
