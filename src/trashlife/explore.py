"""Exhaustive exploration of the reachable state space for small universes.

Breadth-first search from an initial state, firing every enabled
operation in every reached state. Safety, monotonicity and progress are
checked on each state and edge, so a clean report is a bounded proof for
that universe.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass, field

from trashlife import engine
from trashlife.exceptions import InvariantViolation
from trashlife.models import NOOP, Operation, State

logger = logging.getLogger(__name__)


@dataclass
class ReachabilityReport:
    """Everything reached from one or more initial states."""

    initial: list[State] = field(default_factory=list)
    states: set[State] = field(default_factory=set)
    edges: list[tuple[State, Operation, State]] = field(default_factory=list)
    violations: list[str] = field(default_factory=list)

    @property
    def terminal_states(self) -> set[State]:
        return {s for s in self.states if engine.is_terminal(s)}

    @property
    def ok(self) -> bool:
        return not self.violations


def explore(initial: State, report: ReachabilityReport | None = None) -> ReachabilityReport:
    """Enumerate every state reachable from *initial*."""
    engine.check_invariant(initial)
    if report is None:
        report = ReachabilityReport()
    report.initial.append(initial)
    if initial in report.states:
        # Already expanded from an earlier initial state, successors included.
        return report

    seen = {initial}
    queue = deque([initial])
    while queue:
        state = queue.popleft()
        enabled = engine.enabled_operations(state)
        if not enabled:
            report.violations.append(f"no operation enabled in {state.describe()}")
        if engine.is_terminal(state) and enabled != frozenset({NOOP}):
            report.violations.append(f"terminal {state.describe()} enables more than noop")

        for operation in sorted(enabled, key=Operation.sort_key):
            try:
                after = engine.apply(state, operation)
            except InvariantViolation as e:
                report.violations.append(f"{operation} from {state.describe()}: {e}")
                continue
            if after.files - state.files:
                report.violations.append(f"{operation} from {state.describe()} grew the file set")
            if operation == NOOP and after != state:
                report.violations.append(f"noop changed {state.describe()}")
            report.edges.append((state, operation, after))
            if after not in seen and after not in report.states:
                seen.add(after)
                queue.append(after)

    report.states |= seen
    logger.debug(
        "Explored %s: %d states, %d edges", initial.describe(), len(seen), len(report.edges)
    )
    return report


def universe(size: int) -> list[str]:
    """Identifiers ``f1..fN`` for a bounded universe."""
    return [f"f{i}" for i in range(1, size + 1)]


def explore_universe(size: int) -> ReachabilityReport:
    """Explore from every initial state (Files₀ ⊆ U, ∅) over a universe of *size*."""
    ids = universe(size)
    report = ReachabilityReport()
    for r in range(len(ids) + 1):
        for files in itertools.combinations(ids, r):
            explore(engine.new_state(files), report)
    logger.info(
        "Universe of %d: %d reachable states, %d edges, %d violations",
        size, len(report.states), len(report.edges), len(report.violations),
    )
    return report
