"""
Operation results.

Every operation run ends in one of:
- Ok(value): success, value is passed on
- Error(reason): an explicit failure
- ValidationFailed(errors): params broke the contract (an Error)
- Interrupt(payload): processing was stopped on purpose
- OperationError(operation, result): an Error tagged with the chain step
  that produced it (only from chains built with name_in_error=True)

Plain ("ok", value) and ("error", reason) tuples are understood too, so
operations don't have to import these classes.
"""

from dataclasses import dataclass
from typing import Any, Dict, Hashable, List


@dataclass(frozen=True)
class Ok:
    value: Any


@dataclass(frozen=True)
class Error:
    reason: Any


@dataclass(frozen=True)
class ValidationFailed(Error):
    """Reason is the {name: [messages]} mapping from validation."""

    @property
    def errors(self) -> Dict[Hashable, List[Any]]:
        return self.reason


@dataclass(frozen=True)
class Interrupt:
    payload: Any


@dataclass(frozen=True)
class OperationError:
    operation: Any
    result: Any


def is_ok(result: Any) -> bool:
    if isinstance(result, Ok):
        return True
    return isinstance(result, tuple) and len(result) == 2 and result[0] == 'ok'


def is_error(result: Any) -> bool:
    """Error-shaped: an Error (incl. ValidationFailed) or an ("error", ...) tuple."""
    if isinstance(result, Error):
        return True
    return isinstance(result, tuple) and len(result) >= 1 and result[0] == 'error'


def unwrap(result: Any) -> Any:
    """Value inside a success result."""
    if isinstance(result, Ok):
        return result.value
    if is_ok(result):
        return result[1]
    raise ValueError(f"not a success result: {result!r}")
