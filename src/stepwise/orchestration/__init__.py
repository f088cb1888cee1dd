"""Sequential step orchestration.

Architecture::

    step_types.py   Step, StepOptions, step() factory, owner-aware invoke()
    dataset.py      Dataset: per-step, per-run timing and outcome
    events.py       StepEvent, StepEventBus, StepObserver
    result.py       StepperResult snapshot
    stepper.py      Stepper: runs steps in order, isolates failures
"""

from .dataset import Dataset
from .events import StepEvent, StepEventBus, StepEventHandler, StepObserver
from .result import StepperResult
from .step_types import Step, StepOptions, step
from .stepper import StepList, Stepper

__all__ = [
    "Dataset",
    "StepEvent",
    "StepEventBus",
    "StepEventHandler",
    "StepObserver",
    "StepperResult",
    "Step",
    "StepOptions",
    "step",
    "StepList",
    "Stepper",
]
