"""Stepper: runs a list of steps in order against a shared context.

The Stepper owns an ordered list of :class:`~stepwise.orchestration.step_types.Step`
objects and a *context*: the values every guard and work function receives.
Each call to :meth:`Stepper.run`:

1.  resets the run clock
2.  for every step, in registration order:
      - builds a fresh :class:`~stepwise.orchestration.dataset.Dataset`
      - emits ``StepEvent.STARTED``
      - evaluates the guard, stops the step clock
      - runs the work function if the guard was truthy, stops the step clock
      - emits ``StepEvent.COMPLETED`` (or ``StepEvent.FAILED`` with the error)
      - stops the run clock
3.  stops the run clock once more and returns a
    :class:`~stepwise.orchestration.result.StepperResult`

A failing step never aborts the run: its exception is stored on its
dataset, reported through ``result.errors`` and the ``FAILED`` event, and
the next step runs.  Context mutations made before the failure are kept.

Example::

    from stepwise import Stepper, StepEvent, step

    stepper = Stepper(
        {"x": 0},
        step("A", lambda ctx: ctx.update(x=1)),
        step("B", lambda ctx: ctx.update(x=ctx["x"] + 1)),
        step("C", lambda ctx: ctx.update(x=ctx["x"] + 1)),
    )
    stepper.on(StepEvent.FAILED, lambda error, s, data: print(s.name, error))

    result = stepper.run()
    assert len(result.data) == 3 and not result.has_errors

    stepper.steps.append(step("D", lambda ctx: ctx.update(done=True)))
    stepper.reset()
    stepper.run()

Tags:
    stepwise, orchestration, sequential-execution, timing

Doc-Types:
    api-reference
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Any, SupportsIndex

from pydantic import ValidationError

from stepwise.core.logging import LogContext, get_logger
from stepwise.core.settings import StepwiseSettings, get_settings
from stepwise.core.stopclock import StopClock
from stepwise.orchestration.dataset import Dataset
from stepwise.orchestration.events import StepEvent, StepEventBus, StepEventHandler, StepObserver
from stepwise.orchestration.result import StepperResult
from stepwise.orchestration.step_types import Step, coerce_step

logger = get_logger(__name__)


class StepList(list):
    """The stepper's step list: edit it in place, bare callables get wrapped."""

    def __init__(self, steps: Iterable[Any] = ()) -> None:
        super().__init__(coerce_step(s, stacklevel=5) for s in steps)

    def append(self, item: Any) -> None:
        super().append(coerce_step(item))

    def insert(self, index: SupportsIndex, item: Any) -> None:
        super().insert(index, coerce_step(item))

    def extend(self, items: Iterable[Any]) -> None:
        super().extend(coerce_step(s, stacklevel=4) for s in items)

    def __iadd__(self, items: Iterable[Any]) -> StepList:
        self.extend(items)
        return self

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            super().__setitem__(index, [coerce_step(s) for s in value])
        else:
            super().__setitem__(index, coerce_step(value))


def _as_args(context: Any) -> list[Any]:
    """Normalize the constructor's context into an argument list."""
    if context is None:
        return []
    if isinstance(context, (list, tuple)):
        return list(context)
    return [context]


class Stepper:
    """Sequential step runner with per-step timing and error isolation."""

    STEP_STARTED = StepEvent.STARTED
    STEP_COMPLETED = StepEvent.COMPLETED
    STEP_FAILED = StepEvent.FAILED

    def __init__(
        self,
        context: Any = None,
        *steps: Step,
        events: StepEventBus | None = None,
        settings: StepwiseSettings | None = None,
    ) -> None:
        """Initialise the stepper.

        Args:
            context: Value(s) handed to every guard and work function.
                ``None`` means no arguments, a list or tuple is spread into
                positional arguments, anything else is passed as the single
                argument.
            *steps: Steps to run, in order.
            events: Event bus to publish lifecycle events on (a private
                one is created if omitted).
            settings: Overrides :func:`~stepwise.core.settings.get_settings`.
        """
        self._original_args: tuple[Any, ...] = tuple(_as_args(context))
        self._bound_args: list[Any] = list(self._original_args)
        self._steps = StepList(steps)
        self._data: list[Dataset] = []
        self._clock = StopClock()
        self._events = events if events is not None else StepEventBus()
        self._settings = settings
        self.has_stepped = False

    @classmethod
    def of(cls, *args: Any, **kwargs: Any) -> Stepper:
        """Shortcut constructor: ``Stepper.of(context, step1, step2)``."""
        return cls(*args, **kwargs)

    # ── State ────────────────────────────────────────────────────

    @property
    def steps(self) -> StepList:
        """The registered steps. Append/remove in place; it cannot be replaced.

        ``stepper.steps += [...]`` assigns back to this property and raises
        ``AttributeError``; use ``extend`` (or ``+=`` on a local alias).
        """
        return self._steps

    @property
    def context(self) -> list[Any]:
        """The working arguments passed to each step."""
        return self._bound_args

    @property
    def events(self) -> StepEventBus:
        """The bus lifecycle events are published on."""
        return self._events

    @property
    def settings(self) -> StepwiseSettings:
        """Explicit settings, else the process-wide ones.

        Invalid environment settings never stop a run: they are logged and
        the defaults are used instead.
        """
        if self._settings is not None:
            return self._settings
        try:
            return get_settings()
        except ValidationError as e:
            logger.warning(
                "stepper_settings_invalid",
                error=str(e),
                error_count=e.error_count(),
            )
            return StepwiseSettings.model_construct()

    def add_step(self, step: Step) -> Step:
        """Append a step and return it (handy for later removal)."""
        self._steps.append(step)
        return self._steps[-1]

    def remove_step(self, step: Step) -> bool:
        """Remove ``step`` by identity. Returns False if it was not registered."""
        for index, registered in enumerate(self._steps):
            if registered is step:
                del self._steps[index]
                return True
        return False

    def reset(self) -> None:
        """Forget previous runs and restore the context arguments.

        The argument list is rebuilt from the values given at construction.
        Objects inside it are the same objects, so their mutations persist.
        Registered steps are kept.
        """
        self.has_stepped = False
        self._bound_args = list(self._original_args)
        self._data = []

    # ── Events ───────────────────────────────────────────────────

    def on(self, event: StepEvent | str, handler: StepEventHandler) -> str:
        """Subscribe ``handler(error, step, dataset)`` to a lifecycle event."""
        return self._events.subscribe(event, handler)

    def off(self, subscription_id: str) -> bool:
        """Drop a subscription made with :meth:`on`. False if unknown."""
        return self._events.unsubscribe(subscription_id)

    def observe(self, observer: StepObserver) -> list[str]:
        """Subscribe an object implementing ``on_started/on_completed/on_failed``."""
        return self._events.subscribe_observer(observer)

    # ── Execution ────────────────────────────────────────────────

    def start(self, alt_owner: Any = None) -> StepperResult:
        """Alias for :meth:`run`."""
        return self.run(alt_owner)

    def run(self, alt_owner: Any = None) -> StepperResult:
        """Run every registered step once, in order.

        Args:
            alt_owner: Passed as ``owner`` to guards and work functions that
                accept it, instead of the step itself. ``None`` means no
                override, so ``None`` itself cannot be passed as the owner.

        Returns:
            The :attr:`results` snapshot after the run.
        """
        log_steps = self.settings.log_steps
        run_id = uuid.uuid4().hex[:12]
        self._clock.reset()

        # Steps added by a step during the run are picked up next run
        steps = list(self._steps)

        with LogContext(run_id=run_id):
            logger.info("stepper_run_started", steps=len(steps), args=len(self._bound_args))

            for index, current in enumerate(steps):
                with LogContext(step=current.name, step_index=index):
                    self._run_step(current, alt_owner, log_steps)
                self._clock.stop(current.name)

            self._clock.stop()
            self.has_stepped = True

            result = self.results
            logger.info(
                "stepper_run_completed",
                steps=len(result.data),
                errors=len(result.errors),
                skipped=len(result.skipped_steps),
                total_ms=round(result.total_time, 3),
            )
        return result

    def _run_step(self, current: Step, alt_owner: Any, log_steps: bool) -> None:
        dataset = Dataset(step=current, bound_args=tuple(self._bound_args))
        self._events.emit(StepEvent.STARTED, None, current, dataset)

        try:
            dataset.clock.reset()
            proceed = current.should_proceed(self._bound_args, alt_owner)
            dataset.clock.stop("guard")
            if proceed:
                dataset.proceeded = True
                current.perform(self._bound_args, alt_owner)
            dataset.clock.stop("work")
        except Exception as e:
            dataset.clock.stop("error")
            dataset.error = e
            if log_steps:
                logger.warning(
                    "step_failed",
                    error_type=type(e).__name__,
                    error=str(e),
                    duration_ms=round(dataset.duration_ms, 3),
                )
            self._events.emit(StepEvent.FAILED, e, current, dataset)
            self._data.append(dataset)
            return

        if log_steps:
            logger.debug(
                "step_completed" if dataset.proceeded else "step_skipped",
                guard_ms=round(dataset.guard_ms, 3),
                work_ms=round(dataset.work_ms, 3),
            )
        self._events.emit(StepEvent.COMPLETED, None, current, dataset)
        self._data.append(dataset)

    # ── Results ──────────────────────────────────────────────────

    @property
    def results(self) -> StepperResult:
        """Summary of the current state; valid before, during and after runs."""
        return StepperResult.from_datasets(
            stepped=self.has_stepped,
            timing=self._clock.summary,
            total_time=self._clock.time,
            data=self._data,
        )

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"Stepper(steps={len(self._steps)}, stepped={self.has_stepped})"


__all__ = ["Stepper", "StepList"]
