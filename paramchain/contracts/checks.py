"""
Check library - low-level validation functions.

Every check has the same shape:

    check_xxx(params, name, config) -> True | {name: message} | [results...]

- params: the input collection (mapping or keyword list)
- name: the parameter being checked
- config: the option value declared for that parameter

A check returns True when the constraint holds, or an error mapping
{name: message}. Checks that test several sub-constraints at once
(numericality, length) may return a list with one entry per sub-constraint,
where passing entries are True.

Checks never raise for bad data. A bad *config* is a contract definition
problem and is rejected when the contract is built (see options.py).

Usage:
    from paramchain.contracts.checks import check_numericality

    check_numericality({"age": 17}, "age", {"gte": 18, "lt": 130})
    # [{'age': 'must be greater than or equal to 18'}, True]
"""

import importlib.util
import logging
import numbers
import operator
import re
import sys
import types
import warnings
from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel

from .normalize import get_param, is_keyword_list, param_present
from .types import CustomCheck, TypeKind

logger = logging.getLogger('paramchain.contracts.checks')

CheckError = Dict[Hashable, Any]
CheckResult = Union[bool, CheckError, List[Union[bool, CheckError]]]


# =============================================================================
# MESSAGES
# =============================================================================

MSG_REQUIRED = 'is required'
MSG_WRONG_TYPE = 'has wrong type'
MSG_NOT_A_NUMBER = 'not a number'
MSG_INVALID_FORMAT = 'has invalid format'
MSG_NOT_STRUCT = 'is not expected struct'
MSG_NOT_VALID = "isn't valid"
MSG_NIL_NOT_ALLOWED = "doesn't allow nil"


# =============================================================================
# VALUE INSPECTION
# =============================================================================

def is_number(value: Any) -> bool:
    """Real numbers count; bools don't."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def is_atom(value: Any) -> bool:
    """None, True/False and Enum members are symbols."""
    return value is None or isinstance(value, (bool, Enum))


def is_struct(value: Any) -> bool:
    """Record instances: dataclasses, pydantic models and namedtuples."""
    if isinstance(value, type):
        return False
    if is_dataclass(value) or isinstance(value, BaseModel):
        return True
    return isinstance(value, tuple) and hasattr(value, '_fields')


def _atom_name(value: Any) -> str:
    if isinstance(value, Enum):
        return value.name
    return str(value)


def is_module(value: Any) -> bool:
    """A module object, or the dotted name of an importable module."""
    if isinstance(value, types.ModuleType):
        return True
    if not isinstance(value, str) or not value:
        return False
    if value in sys.modules:
        return True
    try:
        return importlib.util.find_spec(value) is not None
    except (ImportError, ValueError, AttributeError):
        return False


_HEX_DIGITS = frozenset('0123456789abcdef')
_UUID_DASH_POSITIONS = frozenset((8, 13, 18, 23))
_UUID_LENGTH = 36


def normalize_uuid(value: Any) -> Optional[str]:
    """
    Return the lowercase form of a canonical 8-4-4-4-12 UUID string.

    Returns None for anything else (wrong length, misplaced dashes,
    non-hex characters, non-strings).

    Examples:
        >>> normalize_uuid("550E8400-E29B-41D4-A716-446655440000")
        '550e8400-e29b-41d4-a716-446655440000'
        >>> normalize_uuid("not-a-uuid") is None
        True
    """
    if not isinstance(value, str) or len(value) != _UUID_LENGTH:
        return None

    chars = []
    for position, char in enumerate(value):
        if position in _UUID_DASH_POSITIONS:
            if char != '-':
                return None
            chars.append(char)
            continue
        lowered = char.lower()
        if lowered not in _HEX_DIGITS:
            return None
        chars.append(lowered)
    return ''.join(chars)


def validate_uuid(value: Any) -> bool:
    return normalize_uuid(value) is not None


def strict_equal(left: Any, right: Any) -> bool:
    """
    Type-sensitive equality: 1 and 1.0 differ, True and 1 differ.

    Mappings, lists, tuples, sets and dataclass records are compared element
    by element.
    """
    if type(left) is not type(right):
        return False
    if isinstance(left, Mapping):
        if left.keys() != right.keys():
            return False
        return all(strict_equal(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(strict_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, (set, frozenset)):
        if len(left) != len(right):
            return False
        return all(strict_member(item, right) for item in left) and all(
            strict_member(item, left) for item in right
        )
    if is_dataclass(left) and not isinstance(left, type):
        return all(
            strict_equal(getattr(left, f.name), getattr(right, f.name))
            for f in fields(left)
        )
    return left == right


def strict_member(value: Any, items: Iterable) -> bool:
    return any(strict_equal(value, item) for item in items)


def get_length(value: Any) -> Any:
    """
    Length used by check_length.

    Examples:
        >>> get_length("abc"), get_length([1, 2, 3]), get_length({"a": 1, "b": 2})
        (3, 3, 2)
        >>> get_length((1, 2, 3)), get_length(5), get_length(object())
        (3, 5, 0)
        >>> get_length(None), get_length(True)
        (4, 4)
    """
    if is_atom(value):
        return len(_atom_name(value))
    if is_number(value):
        return value
    if isinstance(value, (str, list, tuple, set, frozenset, Mapping)):
        return len(value)
    return 0


def _constraint_items(constraints: Any) -> List[Tuple[Any, Any]]:
    """Constraint pairs in declaration order, from a mapping or a pair list."""
    if constraints is None:
        return []
    if isinstance(constraints, Mapping):
        return list(constraints.items())
    return [tuple(pair) for pair in constraints]


# =============================================================================
# CHECKS
# =============================================================================

def check_required(params: Any, name: Hashable, required: bool) -> CheckResult:
    """
    Checks that name was supplied when required.

    Examples:
        >>> check_required({}, "a", False)
        True
        >>> check_required({"a": None}, "a", True)
        True
        >>> check_required({}, "a", True)
        {'a': 'is required'}
    """
    if not required:
        return True
    return True if param_present(params, name) else {name: MSG_REQUIRED}


_TYPE_CHECKS: Dict[TypeKind, Callable[[Any], bool]] = {
    TypeKind.BOOLEAN: lambda v: isinstance(v, bool),
    TypeKind.INTEGER: lambda v: isinstance(v, int) and not isinstance(v, bool),
    TypeKind.FLOAT: lambda v: isinstance(v, float),
    TypeKind.STRING: lambda v: isinstance(v, str),
    TypeKind.TUPLE: lambda v: isinstance(v, tuple),
    TypeKind.MAP: lambda v: isinstance(v, Mapping),
    TypeKind.STRUCT: lambda v: isinstance(v, Mapping) or is_struct(v),
    TypeKind.LIST: lambda v: isinstance(v, list),
    TypeKind.ATOM: is_atom,
    TypeKind.FUNCTION: lambda v: callable(v) and not isinstance(v, type),
    TypeKind.KEYWORD: is_keyword_list,
    TypeKind.MODULE: is_module,
    TypeKind.UUID: validate_uuid,
}


def check_type(params: Any, name: Hashable, kind: Any) -> CheckResult:
    """
    Checks the type of a supplied value.

    Absent params and unknown kinds pass; only known kinds are enforced.

    Examples:
        >>> check_type({"a": 1}, "a", "integer")
        True
        >>> check_type({"a": None}, "a", "string")
        {'a': 'has wrong type'}
        >>> check_type({"a": 1}, "a", "whatever")
        True
    """
    if not param_present(params, name):
        return True

    known = TypeKind.lookup(kind)
    if known is None:
        return True

    if known is TypeKind.STRUCT:
        warnings.warn(
            "type check with 'struct' is deprecated, please use 'map' instead",
            DeprecationWarning,
            stacklevel=2,
        )
        logger.warning(
            f"Deprecated type kind 'struct' used for param '{name}'",
            extra={"event": "deprecated_type_kind", "param": name},
        )

    value = get_param(params, name)
    return True if _TYPE_CHECKS[known](value) else {name: MSG_WRONG_TYPE}


# canonical name -> (comparator, message template)
_NUMBER_CHECKS = {
    'equal_to': (operator.eq, 'must be equal to {}'),
    'greater_than': (operator.gt, 'must be greater than {}'),
    'greater_than_or_equal_to': (operator.ge, 'must be greater than or equal to {}'),
    'less_than': (operator.lt, 'must be less than {}'),
    'less_than_or_equal_to': (operator.le, 'must be less than or equal to {}'),
}

NUMERICALITY_ALIASES = {
    'eq': 'equal_to',
    'equals': 'equal_to',
    'is': 'equal_to',
    'gt': 'greater_than',
    'min': 'greater_than_or_equal_to',
    'gte': 'greater_than_or_equal_to',
    'lt': 'less_than',
    'max': 'less_than_or_equal_to',
    'lte': 'less_than_or_equal_to',
}

# Every sub-constraint name check_numericality compares; other names pass
NUMERICALITY_NAMES = frozenset(_NUMBER_CHECKS) | frozenset(NUMERICALITY_ALIASES)


def _check_number(number: Any, name: Hashable, check: Any, threshold: Any) -> CheckResult:
    check = NUMERICALITY_ALIASES.get(check, check)
    if check not in _NUMBER_CHECKS:
        return True
    compare, message = _NUMBER_CHECKS[check]
    return True if compare(number, threshold) else {name: message.format(threshold)}


def check_numericality(params: Any, name: Hashable, constraints: Any) -> CheckResult:
    """
    Checks a number against numericality constraints.

    Returns True when every constraint holds. Otherwise returns one entry per
    constraint, True for the ones that hold.

    Examples:
        >>> check_numericality({"a": 3}, "a", {"equal_to": 3})
        True
        >>> check_numericality({"a": "3"}, "a", {"gt": 1})
        {'a': 'not a number'}
        >>> check_numericality({"a": 5}, "a", {"gt": 1, "lt": 4})
        [True, {'a': 'must be less than 4'}]
    """
    if not param_present(params, name):
        return True

    number = get_param(params, name)
    if not is_number(number):
        return {name: MSG_NOT_A_NUMBER}

    results = [
        _check_number(number, name, check, threshold)
        for check, threshold in _constraint_items(constraints)
    ]
    if all(result is True for result in results):
        return True
    return results


_MEMBERSHIP_TYPES = (list, tuple, set, frozenset)


def check_in(params: Any, name: Hashable, allowed: Any) -> CheckResult:
    """
    Checks whether a value is one of the allowed values (type-sensitive).

    Examples:
        >>> check_in({"a": 1}, "a", [1, 2, 3])
        True
        >>> check_in({"a": 1.0}, "a", [1, 2, 3])
        {'a': 'must be one of [1, 2, 3]'}
    """
    if not isinstance(allowed, _MEMBERSHIP_TYPES):
        return True
    if strict_member(get_param(params, name), allowed):
        return True
    return {name: f"must be one of {allowed!r}"}


def check_not_in(params: Any, name: Hashable, excluded: Any) -> CheckResult:
    """
    Checks whether a value is none of the excluded values.

    Examples:
        >>> check_not_in({"a": 4}, "a", [1, 2, 3])
        True
    """
    if not isinstance(excluded, _MEMBERSHIP_TYPES):
        return True
    if strict_member(get_param(params, name), excluded):
        return {name: f"must not be included in {excluded!r}"}
    return True


def check_format(params: Any, name: Hashable, pattern: Any) -> CheckResult:
    """
    Checks whether a string value matches pattern. Non-strings pass.

    Examples:
        >>> check_format({"a": "foobar"}, "a", r"bar")
        True
        >>> check_format({"a": "foo"}, "a", r"^bar$")
        {'a': 'has invalid format'}
    """
    value = get_param(params, name)
    if not isinstance(value, str):
        return True
    return True if re.search(pattern, value) else {name: MSG_INVALID_FORMAT}


check_regex = check_format


def _length_bounds(bounds: Any) -> Tuple[Any, Any]:
    if isinstance(bounds, range):
        return bounds.start, bounds.stop - 1
    low, high = bounds
    return low, high


def _check_length_constraint(name: Hashable, length: Any, check: Any, expected: Any) -> CheckResult:
    if check == 'min':
        return length >= expected or {name: f"length must be greater than or equal to {expected}"}
    if check == 'max':
        return length <= expected or {name: f"length must be less than or equal to {expected}"}
    if check == 'is':
        return length == expected or {name: f"length must be equal to {expected}"}
    if check == 'in':
        low, high = _length_bounds(expected)
        return low <= length <= high or {name: f"length must be in range {low}..{high}"}
    return True


def check_length(params: Any, name: Hashable, constraints: Any) -> CheckResult:
    """
    Checks the length of a value against length constraints.

    Always returns one entry per constraint, in declaration order.

    Examples:
        >>> check_length({"a": "123"}, "a", {"min": 0})
        [True]
        >>> check_length({"a": [1, 2, 3]}, "a", {"in": (2, 4)})
        [True]
        >>> check_length({"a": [1, 2, 3]}, "a", {"is": 3, "max": 2})
        [True, {'a': 'length must be less than or equal to 2'}]
    """
    length = get_length(get_param(params, name))
    return [
        _check_length_constraint(name, length, check, expected)
        for check, expected in _constraint_items(constraints)
    ]


def check_struct(params: Any, name: Hashable, expected: Any) -> CheckResult:
    """
    Checks that a value is a record of the expected type.

    expected may be a record instance (types must match exactly) or a
    record class.
    """
    value = get_param(params, name)
    expected_type = expected if isinstance(expected, type) else type(expected)
    if is_struct(value) and type(value) is expected_type:
        return True
    return {name: MSG_NOT_STRUCT}


def check_equals(params: Any, name: Hashable, expected: Any) -> CheckResult:
    """
    Checks that a value equals expected, types included.

    Examples:
        >>> check_equals({"a": 1}, "a", 1)
        True
        >>> check_equals({"a": 1.0}, "a", 1)
        {'a': 'must be equal to 1'}
    """
    if strict_equal(get_param(params, name), expected):
        return True
    return {name: f"must be equal to {expected!r}"}


check_exactly = check_equals


def check_func(params: Any, name: Hashable, check: Any) -> CheckResult:
    """
    Runs a custom predicate.

    check is a CustomCheck, or a bare callable that receives only the value.

    Examples:
        >>> check_func({"a": 1}, "a", lambda value: value > 0)
        True
        >>> check_func({"a": -1}, "a", lambda value: ("error", "must be positive"))
        {'a': 'must be positive'}
    """
    if not isinstance(check, CustomCheck):
        check = CustomCheck(check)

    result = check(params, name, get_param(params, name))

    if isinstance(result, tuple) and len(result) == 2 and result[0] == 'error':
        return {name: result[1]}
    if result is False:
        return {name: MSG_NOT_VALID}
    return True


def check_allow_nil(params: Any, name: Hashable, allowed: bool) -> CheckResult:
    """
    Checks that a value isn't None unless None is allowed.

    Examples:
        >>> check_allow_nil({"a": None}, "a", True)
        True
        >>> check_allow_nil({"a": None}, "a", False)
        {'a': "doesn't allow nil"}
    """
    if allowed:
        return True
    return True if get_param(params, name) is not None else {name: MSG_NIL_NOT_ALLOWED}


# Option kind -> check function. Order is the order checks run in.
CHECKS: Dict[str, Callable[[Any, Hashable, Any], CheckResult]] = {
    'required': check_required,
    'type': check_type,
    'numericality': check_numericality,
    'in': check_in,
    'not_in': check_not_in,
    'format': check_format,
    'length': check_length,
    'struct': check_struct,
    'equals': check_equals,
    'exactly': check_exactly,
    'func': check_func,
    'allow_nil': check_allow_nil,
}


def is_success(result: CheckResult) -> bool:
    """True for True, or for a list made only of True."""
    if result is True:
        return True
    if isinstance(result, list):
        return all(item is True for item in result)
    return False


def flatten_errors(result: CheckResult) -> List[CheckError]:
    """The failing {name: message} entries of a check result."""
    if result is True:
        return []
    if isinstance(result, list):
        return [item for item in result if item is not True]
    return [result]
