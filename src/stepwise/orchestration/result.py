"""StepperResult: summary of a stepper's current state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from stepwise.core.errors import describe_error
from stepwise.core.stopclock import StopClockSummary
from stepwise.orchestration.dataset import Dataset


@dataclass(frozen=True)
class StepperResult:
    """Snapshot returned by ``Stepper.run()`` and ``Stepper.results``.

    Attributes:
        stepped: True once a run has completed (False after ``reset()``)
        timing: Summary of the run-level clock
        total_time: Milliseconds for the whole run
        has_errors: True if any dataset carries an error
        errors: The raised exceptions, in step order
        data: Every dataset of the run, in step order
    """

    stepped: bool
    timing: StopClockSummary
    total_time: float
    has_errors: bool
    errors: tuple[BaseException, ...]
    data: tuple[Dataset, ...]

    @classmethod
    def from_datasets(
        cls,
        *,
        stepped: bool,
        timing: StopClockSummary,
        total_time: float,
        data: list[Dataset],
    ) -> StepperResult:
        errors = tuple(d.error for d in data if d.error is not None)
        return cls(
            stepped=stepped,
            timing=timing,
            total_time=total_time,
            has_errors=bool(errors),
            errors=errors,
            data=tuple(data),
        )

    @property
    def failed_steps(self) -> list[str]:
        """Names of steps whose guard or work raised."""
        return [d.step.name for d in self.data if d.status == "failed"]

    @property
    def skipped_steps(self) -> list[str]:
        """Names of steps whose guard declined to run the work."""
        return [d.step.name for d in self.data if d.status == "skipped"]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging/storage."""
        return {
            "stepped": self.stepped,
            "total_time": round(self.total_time, 3),
            "has_errors": self.has_errors,
            "errors": [describe_error(e) for e in self.errors],
            "timing": self.timing.to_dict(),
            "data": [d.to_dict() for d in self.data],
        }


__all__ = ["StepperResult"]
