"""Data models and enums for the trash lifecycle engine."""

from __future__ import annotations

import re
from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from trashlife.exceptions import ScriptError

FileId = Hashable


class FileState(str, Enum):
    """Lifecycle position of a single file within a State."""

    ACTIVE = "active"
    TRASHED = "trashed"
    PURGED = "purged"


class OperationKind(str, Enum):
    """The five transition kinds the engine understands."""

    DELETE = "delete"
    RESTORE = "restore"
    PURGE = "purge"
    EMPTY = "empty"
    NOOP = "noop"

    @property
    def per_file(self) -> bool:
        """True for kinds that act on exactly one file."""
        return self in (OperationKind.DELETE, OperationKind.RESTORE, OperationKind.PURGE)


class Policy(str, Enum):
    """Selection policy used by the trace driver."""

    UNIFORM = "uniform"
    EAGER = "eager"
    LAZY = "lazy"


_OPERATION_RE = re.compile(r"^\s*(?P<kind>[a-z]+)\s*\(\s*(?P<arg>[^()]*?)\s*\)\s*$")


@dataclass(frozen=True)
class Operation:
    """Descriptor of one transition: a kind plus its target file, if any."""

    kind: OperationKind
    file_id: FileId | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, OperationKind):
            object.__setattr__(self, "kind", OperationKind(self.kind))
        if self.kind.per_file and self.file_id is None:
            raise ValueError(f"{self.kind.value}() requires a file identifier")
        if not self.kind.per_file and self.file_id is not None:
            raise ValueError(f"{self.kind.value}() does not take a file identifier")

    def __str__(self) -> str:
        arg = "" if self.file_id is None else str(self.file_id)
        return f"{self.kind.value}({arg})"

    @classmethod
    def parse(cls, text: str) -> Operation:
        """Parse ``delete(A)`` / ``empty()`` style text into an Operation.

        Raises:
            ScriptError: If the text is not a recognised operation.
        """
        match = _OPERATION_RE.match(text)
        if match is None:
            raise ScriptError(f"Cannot parse operation: {text!r}")
        try:
            kind = OperationKind(match.group("kind"))
        except ValueError:
            raise ScriptError(f"Unknown operation kind in {text!r}") from None
        arg = match.group("arg") or None
        try:
            return cls(kind, arg)
        except ValueError as e:
            raise ScriptError(str(e)) from e

    def sort_key(self) -> tuple[str, str, str]:
        if self.file_id is None:
            return (self.kind.value, "", "")
        # Type name keeps 1 and "1" apart so seeded choices stay reproducible.
        return (self.kind.value, type(self.file_id).__name__, str(self.file_id))


NOOP = Operation(OperationKind.NOOP)
EMPTY = Operation(OperationKind.EMPTY)


def delete_op(file_id: FileId) -> Operation:
    return Operation(OperationKind.DELETE, file_id)


def restore_op(file_id: FileId) -> Operation:
    return Operation(OperationKind.RESTORE, file_id)


def purge_op(file_id: FileId) -> Operation:
    return Operation(OperationKind.PURGE, file_id)


@dataclass(frozen=True)
class State:
    """One point in a trace: the known files and the trashed subset.

    Construction does not validate the subset property; use
    :func:`trashlife.engine.new_state` for a checked constructor.
    """

    files: frozenset = field(default_factory=frozenset)
    trash: frozenset = field(default_factory=frozenset)

    @property
    def active(self) -> frozenset:
        """Files that exist and are not in the trash."""
        return self.files - self.trash

    def describe(self) -> str:
        """Compact human-readable rendering, e.g. ``files={A,B} trash={A}``."""
        return f"files={_render_set(self.files)} trash={_render_set(self.trash)}"


def _render_set(items: Iterable) -> str:
    return "{" + ",".join(sorted(str(i) for i in items)) + "}"


@dataclass(frozen=True)
class TraceStep:
    """One attempted transition within a trace.

    A rejected step has ``error`` set and ``after`` is ``before``.
    """

    index: int
    operation: Operation
    before: State
    after: State
    error: str | None = None

    @property
    def accepted(self) -> bool:
        return self.error is None


@dataclass
class SimulationConfig:
    """Settings for a generated trace run."""

    files: list[str] = field(default_factory=lambda: ["A", "B", "C"])
    steps: int = 50
    policy: Policy = Policy.UNIFORM
    seed: int | None = None
    stop_at_terminal: bool = False

    def __post_init__(self) -> None:
        """Coerce policy strings and reject nonsensical step counts."""
        if isinstance(self.policy, str) and not isinstance(self.policy, Policy):
            self.policy = Policy(self.policy)
        if self.steps < 0:
            raise ValueError(f"steps must be non-negative, got {self.steps}")
