"""Shared pytest fixtures for the trash lifecycle tests.

Provides ready-made states, an event collector, and a factory for
replay-script files.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from trashlife.engine import new_state
from trashlife.events import EventCollector
from trashlife.models import State


@pytest.fixture
def abc_state() -> State:
    """Files {A, B, C} with an empty trash."""
    return new_state({"A", "B", "C"})


@pytest.fixture
def trashed_ab_state() -> State:
    """Files {A, B, C} with A and B in the trash."""
    return new_state({"A", "B", "C"}, {"A", "B"})


@pytest.fixture
def terminal_state() -> State:
    """No files and no trash."""
    return new_state(set())


@pytest.fixture
def collector() -> EventCollector:
    """Create a fresh EventCollector."""
    return EventCollector()


@pytest.fixture
def write_json(tmp_path: Path) -> Callable:
    """Factory fixture: write a JSON document to a temp file and return its path."""

    def _write(data: object, name: str = "data.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write
