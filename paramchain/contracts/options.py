"""
Parameter options - parses what a contract declares for one parameter.

A declaration is a name plus a dict of options:

    ("age", {"type": "integer", "numericality": {"gte": 18}, "default": 18})

ParamOptions turns that dict into a frozen model:
- frozen=True: contracts are shared by every call, nothing may mutate them
- populate_by_name=True: `in` is stored as `in_`, both spellings accepted
- extra='ignore': unknown option kinds are ignored (forward-compatible)

Malformed configs (a non-boolean `required`, a bad regex, a non-numeric
numericality threshold) fail here, when the contract is built, never while
validating params.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Hashable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator

from .checks import CHECKS, NUMERICALITY_NAMES, is_number
from .types import CustomCheck, TypeKind

# Option kind -> ParamOptions field name, where they differ
_FIELD_NAMES = {'in': 'in_'}

_LENGTH_CHECKS = ('min', 'max', 'is', 'in')

# Declared as None, these options mean "no check"
_UNSET_WHEN_NONE = frozenset(('format', 'func', 'allow_nil'))


def _pairs(value: Any, option: str) -> Tuple[Tuple[str, Any], ...]:
    if isinstance(value, Mapping):
        items = list(value.items())
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ValueError(f"'{option}' expects a mapping of constraints, got {type(value).__name__}")

    pairs = []
    for item in items:
        if not (isinstance(item, tuple) and len(item) == 2):
            raise ValueError(f"'{option}' constraints must be (name, value) pairs, got {item!r}")
        pairs.append((str(item[0]), item[1]))
    return tuple(pairs)


def _is_bounds(value: Any) -> bool:
    if isinstance(value, range):
        return True
    return (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and all(is_number(bound) for bound in value)
    )


class ParamOptions(BaseModel):
    """Declared options for one parameter."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra='ignore',
        arbitrary_types_allowed=True,
    )

    type: Any = None
    required: Optional[StrictBool] = None
    default: Any = None
    numericality: Optional[Tuple[Tuple[str, Any], ...]] = None
    in_: Any = Field(default=None, alias='in')
    not_in: Any = None
    format: Any = None
    length: Optional[Tuple[Tuple[str, Any], ...]] = None
    inner: Optional[Tuple[Any, ...]] = None
    struct: Any = None
    equals: Any = None
    exactly: Any = None
    func: Any = None
    allow_nil: Optional[StrictBool] = None

    @model_validator(mode='before')
    @classmethod
    def accept_regex_alias(cls, data: Any) -> Any:
        """`regex` is another name for `format`."""
        if isinstance(data, Mapping) and 'regex' in data and 'format' not in data:
            data = dict(data)
            data['format'] = data.pop('regex')
        return data

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        # Known kinds become TypeKind members, unknown kinds are kept as given
        return TypeKind.lookup(v) or v

    @field_validator('numericality', mode='before')
    @classmethod
    def parse_numericality(cls, v):
        if v is None:
            return None
        pairs = _pairs(v, 'numericality')
        for check, threshold in pairs:
            if check in NUMERICALITY_NAMES and not is_number(threshold):
                raise ValueError(f"numericality '{check}' expects a number, got {threshold!r}")
        return pairs

    @field_validator('in_', 'not_in', mode='before')
    @classmethod
    def parse_membership(cls, v):
        if v is not None and not isinstance(v, (list, tuple, set, frozenset)):
            raise ValueError(f"expects a list of values, got {type(v).__name__}")
        return v

    @field_validator('format', mode='before')
    @classmethod
    def compile_format(cls, v):
        if v is None or isinstance(v, re.Pattern):
            return v
        if not isinstance(v, str):
            raise ValueError(f"format expects a regex, got {type(v).__name__}")
        try:
            return re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid format regex {v!r}: {e}")

    @field_validator('length', mode='before')
    @classmethod
    def parse_length(cls, v):
        if v is None:
            return None
        pairs = _pairs(v, 'length')
        for check, expected in pairs:
            if check == 'in':
                if not _is_bounds(expected):
                    raise ValueError(f"length 'in' expects a range or (min, max), got {expected!r}")
            elif check in _LENGTH_CHECKS and not is_number(expected):
                raise ValueError(f"length '{check}' expects a number, got {expected!r}")
        return pairs

    @field_validator('inner', mode='before')
    @classmethod
    def parse_inner(cls, v):
        if v is None:
            return None
        # A built Contract exposes its specs as `.params`
        specs = getattr(v, 'params', None)
        if specs is not None:
            return tuple(specs)
        return tuple(parse_declarations(v))

    @field_validator('func', mode='before')
    @classmethod
    def wrap_func(cls, v):
        if v is None or isinstance(v, CustomCheck):
            return v
        if not callable(v):
            raise ValueError(f"func expects a callable, got {type(v).__name__}")
        return CustomCheck(v)

    def declared(self, kind: str) -> bool:
        """True if the contract declared this option kind."""
        return _FIELD_NAMES.get(kind, kind) in self.model_fields_set

    def get(self, kind: str) -> Any:
        return getattr(self, _FIELD_NAMES.get(kind, kind))


@dataclass(frozen=True)
class ParamSpec:
    """One declared parameter: a name and its options."""
    name: Hashable
    options: ParamOptions

    @property
    def has_default(self) -> bool:
        return self.options.declared('default')

    @property
    def default(self) -> Any:
        return self.options.default

    @property
    def allows_nil(self) -> bool:
        return self.options.allow_nil is True

    @property
    def inner(self) -> Optional[Tuple['ParamSpec', ...]]:
        return self.options.inner

    def is_required(self, default_required: bool) -> bool:
        if self.options.declared('required'):
            return bool(self.options.required)
        return default_required

    def checks(self) -> Iterator[Tuple[str, Any]]:
        """Declared (kind, config) pairs, in check-library order, minus `required`."""
        for kind in CHECKS:
            if kind == 'required' or not self.options.declared(kind):
                continue
            config = self.options.get(kind)
            if config is None and kind in _UNSET_WHEN_NONE:
                continue
            yield kind, config


def parse_options(name: Hashable, options: Any) -> ParamSpec:
    """Build a ParamSpec from a name and an options mapping (or ParamOptions)."""
    if isinstance(options, ParamOptions):
        return ParamSpec(name=name, options=options)
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise ValueError(f"options for '{name}' must be a mapping, got {type(options).__name__}")
    return ParamSpec(name=name, options=ParamOptions.model_validate(dict(options)))


def parse_declarations(declarations: Any) -> List[ParamSpec]:
    """
    Parse param declarations in any supported shape.

    Accepts:
        {"a": {...}, "b": {...}}
        [("a", {...}), ("b", {...})]
        [ParamSpec(...), ...]
    """
    if isinstance(declarations, Mapping):
        items = list(declarations.items())
    elif isinstance(declarations, (list, tuple)):
        items = list(declarations)
    else:
        raise ValueError(
            f"param declarations must be a mapping or a list, got {type(declarations).__name__}"
        )

    specs = []
    seen = set()
    for item in items:
        if isinstance(item, ParamSpec):
            spec = item
        elif isinstance(item, tuple) and len(item) == 2:
            spec = parse_options(item[0], item[1])
        else:
            raise ValueError(f"param declarations must be (name, options) pairs, got {item!r}")
        if spec.name in seen:
            raise ValueError(f"param '{spec.name}' is declared more than once")
        seen.add(spec.name)
        specs.append(spec)
    return specs
