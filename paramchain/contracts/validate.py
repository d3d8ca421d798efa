"""
Contract validation - applies every check of a contract to a set of params.

For each declared parameter:
- Defaults are filled in first, so a defaulted value is still checked
- A missing parameter is only checked for `required`
- `allow_nil=True` lets an explicit None through without further checks
- Every other declared check runs; nothing stops at the first failure
- `inner` contracts are validated recursively, failures named `parent.child`

All failures are merged into one mapping {name: [message, ...]}. Validation
never raises for bad params; use validate_or_raise() for exception style.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional

from ..config import settings
from .checks import CHECKS, MSG_WRONG_TYPE, CheckError, check_required, flatten_errors
from .normalize import is_params, param_present, to_params_map
from .options import ParamSpec
from .registry import Contract

logger = logging.getLogger('paramchain.contracts.validate')

ValidationErrors = Dict[Hashable, List[Any]]


@dataclass
class ContractViolation(Exception):
    """Raised by the raising entry points when params break a contract."""
    message: str
    errors: ValidationErrors = field(default_factory=dict)

    def __str__(self):
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "message": self.message,
            "errors": {str(name): list(messages) for name, messages in self.errors.items()},
        }


@dataclass(frozen=True)
class ValidationOutcome:
    """Validated (default-filled) params plus every failure found."""
    params: Dict[Hashable, Any]
    errors: ValidationErrors

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.is_valid,
            "errors": {str(name): list(messages) for name, messages in self.errors.items()},
        }


def _add_error(errors: ValidationErrors, error: CheckError) -> None:
    for name, message in error.items():
        messages = errors.setdefault(name, [])
        if message not in messages:
            messages.append(message)


def _validate_inner(spec: ParamSpec, values: Dict[Hashable, Any], default_required: bool) -> List[CheckError]:
    name = spec.name
    value = values.get(name)
    if value is None:
        return []
    if not is_params(value):
        return [{name: MSG_WRONG_TYPE}]

    nested = validate_params(Contract(params=spec.inner), value, default_required=default_required)
    values[name] = nested.params
    return [
        {f"{name}.{child}": message}
        for child, messages in nested.errors.items()
        for message in messages
    ]


def _validate_param(spec: ParamSpec, values: Dict[Hashable, Any], default_required: bool) -> List[CheckError]:
    name = spec.name

    if spec.has_default and not param_present(values, name):
        values[name] = copy.deepcopy(spec.default)

    if not param_present(values, name):
        return flatten_errors(check_required(values, name, spec.is_required(default_required)))

    if spec.allows_nil and values[name] is None:
        return []

    failures: List[CheckError] = []
    for kind, config in spec.checks():
        failures.extend(flatten_errors(CHECKS[kind](values, name, config)))

    if spec.inner is not None:
        failures.extend(_validate_inner(spec, values, default_required))

    return failures


def validate_params(
    contract: Any,
    params: Any,
    default_required: Optional[bool] = None,
) -> ValidationOutcome:
    """
    Validate params against a contract.

    Args:
        contract: A Contract, or declarations accepted by Contract.from_declarations
        params: Mapping or keyword list of incoming params
        default_required: `required` for params that don't declare it
            (defaults to settings.default_required)

    Returns:
        ValidationOutcome with the default-filled params and all errors
    """
    if not isinstance(contract, Contract):
        contract = Contract.from_declarations(contract)
    if default_required is None:
        default_required = settings.default_required

    values = to_params_map(params)
    errors: ValidationErrors = {}

    for spec in contract:
        for failure in _validate_param(spec, values, default_required):
            _add_error(errors, failure)

    if errors:
        logger.debug(f"param_validation: {len(errors)} invalid param(s): {sorted(map(str, errors))}")

    return ValidationOutcome(params=values, errors=errors)


def validate_or_raise(contract: Any, params: Any, default_required: Optional[bool] = None) -> Dict[Hashable, Any]:
    """
    Validate params and return them default-filled.

    Raises:
        ContractViolation: If any check fails
    """
    outcome = validate_params(contract, params, default_required=default_required)
    if not outcome.is_valid:
        raise ContractViolation(
            message=f"{len(outcome.errors)} param validation error(s)",
            errors=outcome.errors,
        )
    return outcome.params
