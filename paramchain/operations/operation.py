"""
Operation - a unit of business logic guarded by a contract.

Usage:
    class CreateUser(Operation):
        contract = [
            ("name", {"type": "string", "length": {"min": 1}}),
            ("age", {"type": "integer", "numericality": {"gte": 18}}),
            ("role", {"in": ["admin", "user"], "default": "user"}),
        ]

        def process(self, params):
            if params["name"] == "root":
                self.interrupt({"reason": "reserved name"})
            return {"user": params["name"], "role": params["role"]}

    CreateUser.run({"name": "Ann", "age": 37})
    # Ok(value={'user': 'Ann', 'role': 'user'})

run():
1. Validates params against the contract (defaults filled in)
2. On failure, logs the violation and returns ValidationFailed(errors)
3. Calls process() with the validated params
4. Wraps a plain return value in Ok; result objects pass through
"""

import logging
from typing import Any

from ..config import settings
from ..contracts.registry import Contract
from ..contracts.validate import ContractViolation, ValidationOutcome, validate_params
from .results import Error, Interrupt, Ok, ValidationFailed, is_error, is_ok, unwrap

logger = logging.getLogger('paramchain.operation')


class _InterruptSignal(Exception):
    def __init__(self, payload: Any):
        super().__init__(payload)
        self.payload = payload


class OperationFailed(Exception):
    """Raised by run_or_raise when an operation doesn't succeed."""

    def __init__(self, operation: Any, result: Any):
        super().__init__(f"{operation_name(operation)} failed: {result!r}")
        self.operation = operation
        self.result = result


def operation_name(operation: Any) -> str:
    """Readable name for an operation class, instance or function."""
    name = getattr(operation, '__qualname__', None)
    if name:
        return name
    return type(operation).__qualname__


def _wrap_result(result: Any) -> Any:
    if isinstance(result, (Ok, Error, Interrupt)):
        return result
    if is_ok(result):
        return Ok(unwrap(result))
    if is_error(result):
        return Error(result[1] if len(result) > 1 else None)
    return Ok(result)


def _log_violation(operation: Any, outcome: ValidationOutcome) -> None:
    """Log contract violation for observability."""
    name = operation_name(operation)
    logger.warning(
        f"Contract violation: operation={name} "
        f"params={sorted(map(str, outcome.errors))}",
        extra={
            "event": "contract_violation",
            "operation": name,
            "details": outcome.errors,
        }
    )


class Operation:
    """
    Base class for operations.

    Subclasses set `contract` (a Contract or declarations, frozen when the
    class is created) and implement process().
    """
    contract: Contract = Contract()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        declared = cls.__dict__.get('contract')
        if declared is not None and not isinstance(declared, Contract):
            cls.contract = Contract.from_declarations(declared)

    def process(self, params: dict) -> Any:
        raise NotImplementedError(f"{type(self).__qualname__} must implement process()")

    @staticmethod
    def interrupt(payload: Any = None) -> None:
        """Stop process() right here; run() returns Interrupt(payload)."""
        raise _InterruptSignal(payload)

    @classmethod
    def validate(cls, params: Any = None) -> ValidationOutcome:
        return validate_params(cls.contract, params)

    @classmethod
    def run(cls, params: Any = None) -> Any:
        """Validate params, then process them."""
        outcome = cls.validate(params)
        if not outcome.is_valid:
            if settings.log_validation_errors:
                _log_violation(cls, outcome)
            return ValidationFailed(outcome.errors)

        try:
            result = cls().process(outcome.params)
        except _InterruptSignal as signal:
            logger.debug(f"{operation_name(cls)} interrupted")
            return Interrupt(signal.payload)

        return _wrap_result(result)

    @classmethod
    def run_or_raise(cls, params: Any = None) -> Any:
        """
        Like run(), but returns the bare value.

        Raises:
            ContractViolation: If params break the contract
            OperationFailed: On an error or interrupt result
        """
        result = cls.run(params)
        if isinstance(result, Ok):
            return result.value
        if isinstance(result, ValidationFailed):
            raise ContractViolation(
                message=f"{len(result.errors)} param validation error(s)",
                errors=result.errors,
            )
        raise OperationFailed(cls, result)
