"""
StopClock: a restartable interval timer with labeled stops.

A StopClock captures a start instant when created (or reset) and records an
ordered sequence of "stops".  Each stop stores the cumulative milliseconds
elapsed since ``start``; :meth:`StopClock.stop` returns the *delta* since the
previous stop (or since ``start`` for the first one).

The stepper keeps one clock for the whole run and one per step:

    ::

        run clock    start ──── stop(step 0) ──── stop(step 1) ──── stop(final)
        step clock   start ── stop(guard) ── stop(work)

Usage:
    clock = StopClock()
    load()
    clock.stop("load")           # -> ms spent in load()
    transform()
    clock.stop("transform")      # -> ms spent in transform()

    clock.find_stop("load").index   # -> 0
    clock.time                      # -> ms from start to the last stop
    str(clock)                      # -> "12.81ms"

Design:
- ``start`` is wall-clock milliseconds since the epoch, for reporting
- elapsed values come from ``time.perf_counter`` and never go backwards
- labels need not be unique; lookups return the first match

Tags:
    timing, stopwatch, performance, stepwise

Doc-Types:
    api-reference
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any


def _wall_ms() -> float:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time() * 1000.0


def _perf_ms() -> float:
    """Monotonic high-resolution reading in milliseconds."""
    return time.perf_counter() * 1000.0


@dataclass(frozen=True)
class Stop:
    """A recorded stop: cumulative ``elapsed`` ms since start, optional label."""

    elapsed: float
    label: str | None
    index: int

    def __float__(self) -> float:
        return self.elapsed


@dataclass(frozen=True)
class StopMatch:
    """Result of :meth:`StopClock.find_stop`: the stop plus the clock's start."""

    elapsed: float
    label: str | None
    index: int
    start: float

    def __float__(self) -> float:
        return self.elapsed


@dataclass(frozen=True)
class StopSummary:
    """One stop as reported by :attr:`StopClock.summary`."""

    time: float  # absolute instant of the stop (ms since epoch)
    delta: float  # ms since the previous stop, 0 for the first
    total: float  # ms since start
    label: str | None


@dataclass(frozen=True)
class StopClockSummary:
    """Snapshot of a StopClock."""

    start: float
    stops: tuple[StopSummary, ...]
    stop: float  # cumulative ms of the last stop, math.inf without stops
    total: float
    since_start: float

    def __float__(self) -> float:
        return self.total

    def __str__(self) -> str:
        return f"{self.total}ms"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for logging."""
        return {
            "start": self.start,
            "stops": [
                {
                    "time": s.time,
                    "delta": round(s.delta, 3),
                    "total": round(s.total, 3),
                    "label": s.label,
                }
                for s in self.stops
            ],
            "stop": None if math.isinf(self.stop) else round(self.stop, 3),
            "total": round(self.total, 3),
            "since_start": round(self.since_start, 3),
        }


class StopClock:
    """Restartable interval timer. See module docstring."""

    def __init__(self) -> None:
        self.stops: list[Stop] = []
        self.reset()

    def reset(self) -> None:
        """Restart the clock: new ``start``, no stops."""
        self._anchor = _perf_ms()
        self.start = _wall_ms()
        self.stops.clear()

    def _elapsed(self) -> float:
        return _perf_ms() - self._anchor

    def stop(self, label: str | None = None) -> float:
        """
        Record a stop and return the milliseconds since the previous one.

        The stop itself stores the cumulative value since ``start``.
        """
        now = self._elapsed()
        last = self.stops[-1].elapsed if self.stops else 0.0
        self.stops.append(Stop(elapsed=now, label=label, index=len(self.stops)))
        return now - last

    def find_stop(self, label: str | None) -> StopMatch | None:
        """Return the first stop recorded with ``label``, or ``None``."""
        if label is None:
            return None
        for s in self.stops:
            if s.label == label:
                return StopMatch(elapsed=s.elapsed, label=s.label, index=s.index, start=self.start)
        return None

    @property
    def time(self) -> float:
        """Ms from start to the last stop; a live reading if never stopped."""
        if self.stops:
            return self.stops[-1].elapsed
        return self._elapsed()

    @property
    def time_since_start(self) -> float:
        """Ms between now and ``start``, regardless of stops."""
        return self._elapsed()

    @property
    def time_since_last_stop(self) -> float:
        """Ms between now and the last stop (or ``start`` if none)."""
        if self.stops:
            return self._elapsed() - self.stops[-1].elapsed
        return self._elapsed()

    @property
    def summary(self) -> StopClockSummary:
        stops = []
        previous = None
        for s in self.stops:
            stops.append(
                StopSummary(
                    time=self.start + s.elapsed,
                    delta=0.0 if previous is None else s.elapsed - previous,
                    total=s.elapsed,
                    label=s.label,
                )
            )
            previous = s.elapsed
        return StopClockSummary(
            start=self.start,
            stops=tuple(stops),
            stop=self.stops[-1].elapsed if self.stops else math.inf,
            total=self.time,
            since_start=self.time_since_start,
        )

    def __float__(self) -> float:
        return self.time

    def __str__(self) -> str:
        return f"{self.time}ms"

    def __repr__(self) -> str:
        return f"StopClock(start={self.start!r}, stops={len(self.stops)})"


__all__ = [
    "Stop",
    "StopMatch",
    "StopSummary",
    "StopClockSummary",
    "StopClock",
]
