"""
stepwise - run named steps in order, time them, and keep going on failure.

Usage::

    from stepwise import Stepper, step

    stepper = Stepper(
        app,
        step("Calculate the ports", lambda app: app.compute_ports()),
        step("Start the HTTP server", lambda app: app.serve()),
    )
    result = stepper.run()

    for data in result.data:
        print(data.step.name, data.status, f"{data.duration_ms:.2f}ms")
"""

from stepwise.core.errors import (
    ConfigError,
    StepDefinitionError,
    StepwiseError,
    StepwiseWarning,
)
from stepwise.core.logging import configure_logging, get_logger
from stepwise.core.settings import StepwiseSettings, get_settings
from stepwise.core.stopclock import StopClock, StopClockSummary
from stepwise.orchestration import (
    Dataset,
    Step,
    StepEvent,
    StepEventBus,
    StepObserver,
    StepOptions,
    Stepper,
    StepperResult,
    step,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "StepDefinitionError",
    "StepwiseError",
    "StepwiseWarning",
    "configure_logging",
    "get_logger",
    "StepwiseSettings",
    "get_settings",
    "StopClock",
    "StopClockSummary",
    "Dataset",
    "Step",
    "StepEvent",
    "StepEventBus",
    "StepObserver",
    "StepOptions",
    "Stepper",
    "StepperResult",
    "step",
    "__version__",
]
