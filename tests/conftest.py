"""
Shared pytest fixtures and configuration for stepwise tests.

This module provides:
- Settings cache and logging state cleanup for test isolation
- A controllable fake clock for deterministic StopClock timings
- Sample step lists

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.

    def test_something(fake_clock, counting_steps):
        ...
"""

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from stepwise.core.settings import clear_settings_cache
from stepwise.orchestration import Step, step


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """
    Run each test with default settings.

    Strips STEPWISE_* variables, moves into an empty directory so no .env
    file is picked up, and clears the settings cache before and after.
    """
    import os

    for key in list(os.environ):
        if key.startswith("STEPWISE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore structlog defaults and drop bound context after each test."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Time Fixtures
# =============================================================================


class FakeClock:
    """Stands in for the StopClock time sources; advance it by hand."""

    def __init__(self, wall_ms: float = 1_700_000_000_000.0, perf_ms: float = 5_000.0):
        self.wall_ms = wall_ms
        self.perf_ms = perf_ms

    def advance(self, ms: float) -> None:
        self.wall_ms += ms
        self.perf_ms += ms


@pytest.fixture
def fake_clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """
    Freeze StopClock time; call ``fake_clock.advance(ms)`` to move it.

        def test_delta(fake_clock):
            clock = StopClock()
            fake_clock.advance(5)
            assert clock.stop() == 5
    """
    clock = FakeClock()
    monkeypatch.setattr("stepwise.core.stopclock._wall_ms", lambda: clock.wall_ms)
    monkeypatch.setattr("stepwise.core.stopclock._perf_ms", lambda: clock.perf_ms)
    return clock


# =============================================================================
# Sample Steps
# =============================================================================


@pytest.fixture
def counting_steps() -> list[Step]:
    """
    Three steps that build on a shared dict: x = 1, x += 1, x += 1.

    Run with a ``{"x": 0}`` context, x ends at 3.
    """

    def set_one(ctx):
        ctx["x"] = 1

    def increment(ctx):
        ctx["x"] += 1

    return [step("A", set_one), step("B", increment), step("C", increment)]
