"""Step: a named unit of work with an optional guard.

A Step pairs a **work** function with a **guard** predicate.  Each run the
stepper calls the guard with the shared context; if it returns something
truthy the work function runs next.

ARCHITECTURE
────────────
::

    step(name, work, *options)     ── factory, merges options in order
      ├── StepOptions(guard=..., metadata=...)
      └── {"guard" | "proceed": fn, "metadata": {...}, <other>: value}

    Step                           ── dataclass, identity equality
      ├── .should_proceed(args, owner)
      └── .perform(args, owner)

Guard and work functions receive the context values positionally.  A
function that declares an ``owner`` parameter (or ``**kwargs``) also
receives the invocation owner: the object passed to ``Stepper.run()``, or
the Step itself by default::

    def load(config, owner):
        owner.metadata["loaded_from"] = config["path"]

    step("load", load, {"guard": lambda config: "path" in config})

Example::

    from stepwise import Stepper, step

    stepper = Stepper(
        {"x": 0},
        step("A", lambda ctx: ctx.update(x=1)),
        step("B", lambda ctx: ctx.update(x=ctx["x"] + 1)),
    )

Tags:
    stepwise, orchestration, step, guard

Doc-Types:
    api-reference
"""

from __future__ import annotations

import inspect
import warnings
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from stepwise.core.errors import StepDefinitionError, StepwiseWarning

# Type aliases for step callables
WorkFn = Callable[..., Any]
GuardFn = Callable[..., Any]

OWNER_PARAMETER = "owner"

_GUARD_KEYS = ("guard", "proceed")


def always_proceed(*args: Any, **kwargs: Any) -> bool:
    """Default guard."""
    return True


def no_op(*args: Any, **kwargs: Any) -> None:
    """Default work function."""
    return None


def _callable_ref(fn: Callable[..., Any] | None) -> str | None:
    """Return ``'module:qualname'`` for a named function, else ``None``.

    Lambdas, locals, and the built-in defaults return ``None``.
    """
    if fn is None or fn in (always_proceed, no_op):
        return None
    module = getattr(fn, "__module__", None)
    qualname = getattr(fn, "__qualname__", None)
    if not module or not qualname:
        return None
    if "<lambda>" in qualname or "<locals>" in qualname:
        return None
    return f"{module}:{qualname}"


def accepts_owner(fn: Callable[..., Any]) -> bool:
    """True if ``fn`` can take the ``owner`` keyword."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        # Some builtins have no introspectable signature
        return False
    for param in sig.parameters.values():
        if param.kind == inspect.Parameter.VAR_KEYWORD:
            return True
        if param.name == OWNER_PARAMETER and param.kind in (
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.KEYWORD_ONLY,
        ):
            return True
    return False


def invoke(fn: Callable[..., Any], args: Sequence[Any], owner: Any) -> Any:
    """Call ``fn(*args)``, adding ``owner=`` when ``fn`` declares it."""
    if accepts_owner(fn):
        return fn(*args, **{OWNER_PARAMETER: owner})
    return fn(*args)


@dataclass(frozen=True)
class StepOptions:
    """Recognized optional fields for :func:`step`."""

    guard: GuardFn | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class Step:
    """
    A single step registered with a :class:`~stepwise.orchestration.stepper.Stepper`.

    Steps compare by identity: two steps may share a name and still be
    distinct entries in the stepper's list.
    """

    name: str
    work: WorkFn | None = None
    guard: GuardFn | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.work is None:
            self.work = no_op
        if self.guard is None:
            self.guard = always_proceed
        if not callable(self.work):
            raise StepDefinitionError(
                f"Step work must be callable, got {type(self.work).__name__}"
            ).with_context(step=self.name)
        if not callable(self.guard):
            raise StepDefinitionError(
                f"Step guard must be callable, got {type(self.guard).__name__}"
            ).with_context(step=self.name)

    def should_proceed(self, args: Sequence[Any], owner: Any = None) -> Any:
        """Evaluate the guard against ``args``."""
        return invoke(self.guard, args, self if owner is None else owner)

    def perform(self, args: Sequence[Any], owner: Any = None) -> Any:
        """Run the work function against ``args``."""
        return invoke(self.work, args, self if owner is None else owner)

    @property
    def has_guard(self) -> bool:
        return self.guard is not always_proceed

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging."""
        result: dict[str, Any] = {"name": self.name}
        if work_ref := _callable_ref(self.work):
            result["work"] = work_ref
        if guard_ref := _callable_ref(self.guard):
            result["guard"] = guard_ref
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result

    def __repr__(self) -> str:
        return f"Step({self.name!r})"


def step(name: str, work: WorkFn | None = None, *options: StepOptions | Mapping[str, Any]) -> Step:
    """
    Build a :class:`Step`, merging any number of options in order.

    Options are :class:`StepOptions` instances or mappings.  In a mapping,
    ``guard`` (or its alias ``proceed``) sets the guard, ``metadata`` is
    merged into the step's metadata, and any other key is stored in the
    metadata under its own name.  Later options win.

    Raises:
        StepDefinitionError: For an option that is neither kind, or a
            non-callable guard/work.
    """
    guard: GuardFn | None = None
    metadata: dict[str, Any] = {}

    for option in options:
        if isinstance(option, StepOptions):
            if option.guard is not None:
                guard = option.guard
            metadata.update(option.metadata)
        elif isinstance(option, Mapping):
            for key, value in option.items():
                if key in _GUARD_KEYS:
                    guard = value
                elif key == "metadata":
                    metadata.update(value)
                else:
                    metadata[key] = value
        else:
            raise StepDefinitionError(
                f"Unsupported step option: {type(option).__name__}"
            ).with_context(step=name)

    return Step(name=name, work=work, guard=guard, metadata=metadata)


def coerce_step(candidate: Any, *, stacklevel: int = 3) -> Step:
    """
    Return ``candidate`` if it is a Step, else wrap a bare callable.

    Wrapping is tolerated misuse: it emits a :class:`StepwiseWarning`
    and names the step after the function.
    """
    if isinstance(candidate, Step):
        return candidate
    if callable(candidate):
        name = getattr(candidate, "__name__", type(candidate).__name__)
        warnings.warn(
            f"Got a bare callable {name!r} instead of a Step; "
            f"wrap it with step({name!r}, fn) to name it explicitly.",
            StepwiseWarning,
            stacklevel=stacklevel,
        )
        return step(name, candidate)
    raise StepDefinitionError(f"Expected a Step, got {type(candidate).__name__}")


__all__ = [
    "GuardFn",
    "WorkFn",
    "Step",
    "StepOptions",
    "step",
    "coerce_step",
    "invoke",
    "accepts_owner",
    "always_proceed",
    "no_op",
]
