"""
Chain - runs operations in sequence, feeding each result into the next.

Usage:
    create_user = (
        ChainBuilder()
        .step(CreateUser)
        .step(SaveStats, {"source": "signup"})
        .step(SendEmail, {"sent_at": deferred(utcnow)})
        .build(name_in_error=True)
    )

    create_user.run({"name": "Ann", "age": 37})

Each step:
1. Merges its additional params over the incoming value (additional params win)
2. Resolves deferred values by calling them with no arguments
3. Calls the operation's run() with the merged params

A success result ("ok") moves on to the next step; the last step's value is
the chain's result, wrapped in Ok. Anything else stops the chain and is
returned as is. With name_in_error=True, error results are wrapped in
OperationError so callers can tell which step failed.

Exceptions raised while resolving deferred values, or by an operation itself,
are not caught.
"""

import functools
import logging
import types
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from ..config import settings
from ..contracts.normalize import is_params, merge_params
from .operation import operation_name
from .results import Ok, OperationError, is_error, is_ok, unwrap

logger = logging.getLogger('paramchain.chain')


class Deferred:
    """A value computed when the chain step that receives it is about to run."""
    __slots__ = ('fn',)

    def __init__(self, fn: Callable[[], Any]):
        if not callable(fn):
            raise TypeError(f"deferred() expects a callable, got {type(fn).__name__}")
        self.fn = fn

    def __call__(self) -> Any:
        return self.fn()

    def __repr__(self):
        return f"Deferred({self.fn!r})"


def deferred(fn: Callable[[], Any]) -> Deferred:
    return Deferred(fn)


_THUNK_TYPES = (Deferred, types.FunctionType, types.MethodType, functools.partial)


def resolve_deferred(params: dict) -> dict:
    """
    Replace deferred values with what they produce.

    Deferred objects, plain functions, lambdas, bound methods and partials
    are called with no arguments. Classes, builtins and other callables are
    left alone.
    """
    return {
        key: value() if isinstance(value, _THUNK_TYPES) else value
        for key, value in params.items()
    }


def _runner(operation: Any) -> Callable[[Any], Any]:
    run = getattr(operation, 'run', None)
    if callable(run):
        return run
    if callable(operation):
        return operation
    raise TypeError(f"chain step must have a run() method or be callable, got {operation!r}")


@dataclass(frozen=True)
class ChainStep:
    """One operation in a chain plus the params merged in before it runs."""
    operation: Any
    additional_params: Any = field(default_factory=dict)

    def __post_init__(self):
        _runner(self.operation)
        if self.additional_params is None:
            object.__setattr__(self, 'additional_params', {})
        elif not is_params(self.additional_params):
            raise TypeError(
                f"additional params for {operation_name(self.operation)} must be a mapping "
                f"or a keyword list, got {type(self.additional_params).__name__}"
            )

    def run(self, params: Any) -> Any:
        return _runner(self.operation)(params)


def _to_step(step: Any) -> ChainStep:
    if isinstance(step, ChainStep):
        return step
    if isinstance(step, tuple) and len(step) == 2:
        return ChainStep(operation=step[0], additional_params=step[1])
    return ChainStep(operation=step)


class Chain:
    """Ordered, immutable sequence of chain steps."""

    def __init__(self, steps: Any = (), name_in_error: Optional[bool] = None):
        self.steps: Tuple[ChainStep, ...] = tuple(_to_step(step) for step in steps)
        if name_in_error is None:
            name_in_error = settings.chain_name_in_error
        self.name_in_error = name_in_error

    def run(self, params: Any = None) -> Any:
        """
        Run every step in order.

        Returns:
            Ok(value of the last step), or the first non-success result
            (wrapped in OperationError for error results when name_in_error)
        """
        if not self.steps:
            return Ok(params)

        pending = params
        for index, step in enumerate(self.steps):
            step_params = resolve_deferred(merge_params(pending, step.additional_params))
            result = step.run(step_params)

            if not is_ok(result):
                return self._halt(index, step, result)

            pending = unwrap(result)

        return Ok(pending)

    def _halt(self, index: int, step: ChainStep, result: Any) -> Any:
        name = operation_name(step.operation)
        logger.info(
            f"Chain halted at step {index + 1}/{len(self.steps)} ({name}): {type(result).__name__}",
            extra={
                "event": "chain_halted",
                "operation": name,
                "step": index,
            }
        )
        if self.name_in_error and is_error(result):
            return OperationError(operation=step.operation, result=result)
        return result

    def __len__(self):
        return len(self.steps)

    def __repr__(self):
        names = [operation_name(step.operation) for step in self.steps]
        return f"Chain({' -> '.join(names)})"


class ChainBuilder:
    """Appends chain steps, then freezes them into a Chain."""

    def __init__(self):
        self._steps: List[ChainStep] = []

    def step(self, operation: Any, additional_params: Any = None) -> 'ChainBuilder':
        self._steps.append(ChainStep(operation=operation, additional_params=additional_params))
        return self

    operation = step

    def build(self, name_in_error: Optional[bool] = None) -> Chain:
        return Chain(self._steps, name_in_error=name_in_error)
