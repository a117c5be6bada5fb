"""Exception types for trash lifecycle transitions."""

from __future__ import annotations


class TransitionError(Exception):
    """Base class for every error raised by the transition engine."""
    pass


class GuardFailure(TransitionError):
    """Operation precondition not met -- the caller picked an illegal step.

    Recoverable: the state the operation was applied to is never touched.
    """

    def __init__(self, operation: object, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation}: {reason}")


class InvariantViolation(TransitionError):
    """Trash is not a subset of Files -- an operation implementation is wrong."""

    def __init__(self, orphans: frozenset, message: str | None = None) -> None:
        self.orphans = frozenset(orphans)
        if message is None:
            rendered = ",".join(sorted(str(o) for o in self.orphans))
            message = f"trash contains files not in the file set: {{{rendered}}}"
        super().__init__(message)


class ScriptError(ValueError):
    """Malformed replay script or operation text."""
    pass
