"""Pytest fixtures shared across the chart editor tests."""

from __future__ import annotations

import random
from collections.abc import Callable, Iterator, Sequence

import pytest

from charting.model import ChartModel, default_model


@pytest.fixture
def model() -> ChartModel:
    """Return a fresh default chart model."""

    return default_model()


@pytest.fixture
def rng() -> random.Random:
    """Return a seeded random source for dataset sampling."""

    return random.Random(1234)


@pytest.fixture
def memory_store():
    """Return an empty in-memory settings store."""

    from editor.persistence import MemoryStore

    return MemoryStore()


@pytest.fixture
def recording_library():
    """Return a rendering library that records every chart it creates."""

    from editor.rendering import ChartJsLibrary

    class RecordingLibrary(ChartJsLibrary):
        def __init__(self) -> None:
            self.created = []

        def create(self, target, config):
            handle = super().create(target, config)
            self.created.append(handle)
            return handle

    return RecordingLibrary()


@pytest.fixture
def make_session(memory_store, recording_library, rng) -> Callable[..., object]:
    """Return a factory building mounted editor sessions over the shared store."""

    from editor.session import EditorSession

    def _make(instance_id: str = "chart-1", *, mount: bool = True, store=None):
        session = EditorSession(
            instance_id=instance_id,
            store=store if store is not None else memory_store,
            library=recording_library,
            rng=rng,
        )
        return session.mount() if mount else session

    return _make


@pytest.fixture(autouse=True)
def _reset_rendering_library() -> Iterator[None]:
    """Forget the process-wide rendering library between tests."""

    from editor.rendering import reset_library

    reset_library()
    yield
    reset_library()


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    The suite must be runnable by intent:
    - `unit`: pure, fast tests with no database or HTTP access.
    - `integration`: tests touching Django sessions, the database, or views.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
