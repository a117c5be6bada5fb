"""Trace driver and trace-level property checks.

The driver repeatedly picks one enabled operation (or replays a scripted
one), asks the engine for the next state, and appends the step to a
:class:`Trace`. The engine re-checks the subset invariant on every
transition; an :class:`~trashlife.exceptions.InvariantViolation` is never
caught here and ends the run.

Selection policies:
    uniform -- any enabled operation, noop included. No fairness, so a
               trashed file may stay in the trash forever.
    eager   -- any enabled operation except noop, which is only chosen
               when nothing else is enabled (weak fairness).
    lazy    -- always noop.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass, field

from trashlife import engine
from trashlife.events import EventCollector
from trashlife.exceptions import GuardFailure
from trashlife.models import NOOP, Operation, OperationKind, Policy, State, TraceStep

logger = logging.getLogger(__name__)


@dataclass
class Trace:
    """Ordered record of a run: the initial state plus every attempted step."""

    initial: State
    steps: list[TraceStep] = field(default_factory=list)

    @property
    def states(self) -> list[State]:
        """Initial state followed by the state after each step."""
        return [self.initial] + [s.after for s in self.steps]

    @property
    def final(self) -> State:
        return self.steps[-1].after if self.steps else self.initial

    @property
    def rejected(self) -> list[TraceStep]:
        return [s for s in self.steps if not s.accepted]

    def __len__(self) -> int:
        return len(self.steps)


def select_operation(policy: Policy, state: State, rng: random.Random) -> Operation:
    """Pick the next operation for *state* according to *policy*."""
    if policy == Policy.LAZY:
        return NOOP

    # Sort before choosing so a seed reproduces the same trace.
    candidates = sorted(engine.enabled_operations(state), key=Operation.sort_key)
    if policy == Policy.EAGER:
        progressing = [op for op in candidates if op.kind != OperationKind.NOOP]
        if progressing:
            candidates = progressing
    return rng.choice(candidates)


class TraceDriver:
    """Builds traces by applying operations one at a time.

    Args:
        policy: Selection policy for :meth:`run`.
        seed: Seed for the driver's private random generator.
        collector: Optional EventCollector receiving one record per attempt.
    """

    def __init__(
        self,
        policy: Policy | str = Policy.UNIFORM,
        seed: int | None = None,
        collector: EventCollector | None = None,
    ) -> None:
        self.policy = Policy(policy)
        self.seed = seed
        self._rng = random.Random(seed)
        self._collector = collector

    def run(self, initial: State, steps: int, stop_at_terminal: bool = False) -> Trace:
        """Generate a trace of up to *steps* policy-selected transitions."""
        engine.check_invariant(initial)
        trace = Trace(initial)
        current = initial

        for index in range(steps):
            if stop_at_terminal and engine.is_terminal(current):
                logger.info("Terminal state reached after %d steps", index)
                break
            operation = select_operation(self.policy, current, self._rng)
            after = engine.apply(current, operation)
            self._record(trace, index, operation, current, after)
            current = after

        logger.info(
            "Generated %d-step trace (policy=%s, seed=%s): %s",
            len(trace), self.policy.value, self.seed, current.describe(),
        )
        return trace

    def replay(
        self,
        initial: State,
        operations: Iterable[Operation],
        stop_on_failure: bool = False,
    ) -> Trace:
        """Apply a scripted sequence of operations.

        Guard failures are recorded as rejected steps with the state left
        unchanged. With *stop_on_failure* the first GuardFailure is re-raised
        after being recorded.
        """
        engine.check_invariant(initial)
        trace = Trace(initial)
        current = initial

        for index, operation in enumerate(operations):
            try:
                after = engine.apply(current, operation)
            except GuardFailure as e:
                logger.info("Step %d rejected: %s", index, e)
                self._record(trace, index, operation, current, current, error=e.reason)
                if stop_on_failure:
                    raise
                continue
            self._record(trace, index, operation, current, after)
            current = after

        return trace

    def _record(
        self,
        trace: Trace,
        index: int,
        operation: Operation,
        before: State,
        after: State,
        error: str | None = None,
    ) -> None:
        trace.steps.append(TraceStep(index, operation, before, after, error))
        if self._collector is not None:
            self._collector.emit(
                step=index,
                operation=operation,
                before=before,
                after=after,
                outcome="success" if error is None else "rejected",
                error=error,
            )


# ---------------------------------------------------------------------------
# Property checks -- each returns a list of violation messages (empty = pass)
# ---------------------------------------------------------------------------


def check_safety(trace: Trace) -> list[str]:
    """Trash ⊆ Files in every state of the trace."""
    violations = []
    for position, state in enumerate(trace.states):
        orphans = state.trash - state.files
        if orphans:
            violations.append(
                f"state {position}: trash not subset of files ({state.describe()})"
            )
    return violations


def check_monotonic(trace: Trace) -> list[str]:
    """Files never grows across a single step."""
    violations = []
    for step in trace.steps:
        added = step.after.files - step.before.files
        if added:
            violations.append(
                f"step {step.index} ({step.operation}) added files {sorted(map(str, added))}"
            )
    return violations


def check_progress(trace: Trace) -> list[str]:
    """Some operation is enabled in every state, and accepted steps were enabled."""
    violations = []
    for position, state in enumerate(trace.states):
        if not engine.enabled_operations(state):
            violations.append(f"state {position}: no operation enabled")
    for step in trace.steps:
        if step.accepted and not engine.is_enabled(step.before, step.operation):
            violations.append(f"step {step.index}: {step.operation} accepted while disabled")
    return violations


def check_terminal_idempotent(trace: Trace) -> list[str]:
    """Once Files is empty only noop is enabled and the state never changes."""
    violations = []
    terminal: State | None = None
    for position, state in enumerate(trace.states):
        if terminal is not None and state != terminal:
            violations.append(f"state {position}: left terminal state ({state.describe()})")
        if engine.is_terminal(state):
            if engine.enabled_operations(state) != frozenset({NOOP}):
                violations.append(f"state {position}: terminal state enables more than noop")
            terminal = state
    return violations


def check_all(trace: Trace) -> dict[str, list[str]]:
    """Run every safety and progress check; keys are property names."""
    return {
        "safety": check_safety(trace),
        "monotonic": check_monotonic(trace),
        "progress": check_progress(trace),
        "terminal": check_terminal_idempotent(trace),
    }


def lingering_trash(trace: Trace) -> dict:
    """Files still trashed at the end, mapped to how many trailing states held them.

    Under the uniform or lazy policy this is the witness that "every trashed
    file eventually leaves the trash" does not hold.
    """
    states = trace.states
    result = {}
    for file_id in trace.final.trash:
        streak = 0
        for state in reversed(states):
            if file_id not in state.trash:
                break
            streak += 1
        result[file_id] = streak
    return result
