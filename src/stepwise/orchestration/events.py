"""Lifecycle notifications emitted by the stepper.

Three events fire during a run, each carrying ``(error, step, dataset)``:

- ``StepEvent.STARTED``   before the guard is evaluated (error is ``None``)
- ``StepEvent.COMPLETED`` after guard and work succeeded (error is ``None``)
- ``StepEvent.FAILED``    after the guard or work raised (error is set)

Delivery is synchronous, in subscription order, on the thread that called
``run()``.  A handler that raises is logged and skipped; the remaining
handlers still run and the stepper carries on unaffected.

Usage::

    bus = StepEventBus()
    bus.subscribe(StepEvent.FAILED, lambda error, step, data: alert(step.name, error))

    class Progress:
        def on_started(self, error, step, dataset): ...
        def on_completed(self, error, step, dataset): ...
        def on_failed(self, error, step, dataset): ...

    bus.subscribe_observer(Progress())

Tags:
    stepwise, events, observer, lifecycle

Doc-Types:
    api-reference
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from stepwise.core.logging import get_logger

if TYPE_CHECKING:
    from stepwise.orchestration.dataset import Dataset
    from stepwise.orchestration.step_types import Step

logger = get_logger(__name__)


class StepEvent(str, Enum):
    """Lifecycle event identifiers, usable as subscription keys."""

    STARTED = "Step started"
    COMPLETED = "Step completed"
    FAILED = "Step Failed"


StepEventHandler = Callable[["BaseException | None", "Step", "Dataset"], object]


@runtime_checkable
class StepObserver(Protocol):
    """Typed alternative to per-event callbacks."""

    def on_started(self, error: BaseException | None, step: Step, dataset: Dataset) -> None: ...

    def on_completed(self, error: BaseException | None, step: Step, dataset: Dataset) -> None: ...

    def on_failed(self, error: BaseException | None, step: Step, dataset: Dataset) -> None: ...


_OBSERVER_METHODS = {
    StepEvent.STARTED: "on_started",
    StepEvent.COMPLETED: "on_completed",
    StepEvent.FAILED: "on_failed",
}


@dataclass
class Subscription:
    """Internal subscription record."""

    id: str
    event: StepEvent
    handler: StepEventHandler


class StepEventBus:
    """Synchronous, in-process event bus for step lifecycle events."""

    def __init__(self) -> None:
        self._subscriptions: dict[str, Subscription] = {}

    def subscribe(self, event: StepEvent | str, handler: StepEventHandler) -> str:
        """Register ``handler`` for ``event`` and return a subscription ID.

        ``event`` may be a :class:`StepEvent` or its string value.
        """
        if not callable(handler):
            raise TypeError(f"Event handler must be callable, got {type(handler).__name__}")
        sub_id = f"sub_{uuid.uuid4().hex[:12]}"
        self._subscriptions[sub_id] = Subscription(
            id=sub_id,
            event=StepEvent(event),
            handler=handler,
        )
        return sub_id

    def subscribe_observer(self, observer: StepObserver) -> list[str]:
        """Subscribe each ``on_*`` method the observer defines."""
        ids = []
        for event, method_name in _OBSERVER_METHODS.items():
            method = getattr(observer, method_name, None)
            if method is not None:
                ids.append(self.subscribe(event, method))
        return ids

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a subscription. Returns False if it was not registered."""
        return self._subscriptions.pop(subscription_id, None) is not None

    def handlers(self, event: StepEvent | str) -> list[StepEventHandler]:
        event = StepEvent(event)
        return [sub.handler for sub in self._subscriptions.values() if sub.event is event]

    def emit(
        self,
        event: StepEvent,
        error: BaseException | None,
        step: Step,
        dataset: Dataset,
    ) -> int:
        """Deliver an event to every matching handler; return how many ran cleanly."""
        delivered = 0
        # Snapshot so handlers may (un)subscribe while being called
        for sub in [s for s in self._subscriptions.values() if s.event is event]:
            try:
                sub.handler(error, step, dataset)
            except Exception as e:
                logger.warning(
                    "step_event_handler_error",
                    subscription_id=sub.id,
                    event_type=event.value,
                    step=step.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            delivered += 1
        return delivered

    def clear(self) -> None:
        self._subscriptions.clear()

    def __len__(self) -> int:
        return len(self._subscriptions)


__all__ = [
    "StepEvent",
    "StepEventHandler",
    "StepObserver",
    "StepEventBus",
    "Subscription",
]
