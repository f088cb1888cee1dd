"""Dataset: what happened to one step during one run.

A fresh Dataset is built at the start of each step's turn, filled in while
the step runs, and frozen by convention once the step finishes.  Its clock
holds up to two stops: the first right after the guard, the second after
the work function.  A step that fails gets an ``"error"`` stop at the point of
failure instead of the next regular one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stepwise.core.errors import describe_error
from stepwise.core.stopclock import StopClock

if TYPE_CHECKING:
    from stepwise.orchestration.step_types import Step


@dataclass(eq=False)
class Dataset:
    """Per-step, per-run timing and outcome."""

    step: Step
    clock: StopClock = field(default_factory=StopClock)
    error: BaseException | None = None
    bound_args: tuple[Any, ...] | None = None
    proceeded: bool = False

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def status(self) -> str:
        """``"failed"``, ``"skipped"`` (guard said no) or ``"completed"``."""
        if self.error is not None:
            return "failed"
        if not self.proceeded:
            return "skipped"
        return "completed"

    @property
    def guard_ms(self) -> float | None:
        """Time spent evaluating the guard."""
        if not self.clock.stops:
            return None
        return self.clock.stops[0].elapsed

    @property
    def work_ms(self) -> float | None:
        """Time spent in the work function (0 when the guard skipped it)."""
        if len(self.clock.stops) < 2:
            return None
        return self.clock.stops[1].elapsed - self.clock.stops[0].elapsed

    @property
    def duration_ms(self) -> float:
        return self.clock.time

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging/storage."""
        result: dict[str, Any] = {
            "step": self.step.name,
            "status": self.status,
            "duration_ms": round(self.duration_ms, 3),
            "timing": self.clock.summary.to_dict(),
        }
        if self.guard_ms is not None:
            result["guard_ms"] = round(self.guard_ms, 3)
        if self.work_ms is not None:
            result["work_ms"] = round(self.work_ms, 3)
        if self.error is not None:
            result["error"] = describe_error(self.error)
        return result

    def __repr__(self) -> str:
        return f"Dataset(step={self.step.name!r}, status={self.status!r})"


__all__ = ["Dataset"]
