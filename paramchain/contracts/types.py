"""
Shared types for contract declarations.

- TypeKind: the value kinds the `type` option knows how to check
- FuncSignature: which arguments a custom `func` check receives
- CustomCheck: a predicate plus its declared signature
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class TypeKind(str, Enum):
    """Kinds accepted by the `type` option."""
    BOOLEAN = 'boolean'
    INTEGER = 'integer'
    FLOAT = 'float'
    STRING = 'string'
    TUPLE = 'tuple'
    MAP = 'map'
    STRUCT = 'struct'        # Deprecated alias of MAP
    LIST = 'list'
    ATOM = 'atom'            # None, True/False or an Enum member
    FUNCTION = 'function'
    KEYWORD = 'keyword'      # [] or [(str, value), ...]
    MODULE = 'module'
    UUID = 'uuid'

    @classmethod
    def lookup(cls, kind: Any):
        """Return the TypeKind for kind, or None if it isn't a known kind."""
        if isinstance(kind, cls):
            return kind
        if isinstance(kind, str):
            try:
                return cls(kind.strip().lower())
            except ValueError:
                return None
        return None


class FuncSignature(str, Enum):
    """Arguments passed to a custom check."""
    VALUE = 'value'                          # fn(value)
    PARAMS_VALUE = 'params_value'            # fn(params, value)
    PARAMS_NAME_VALUE = 'params_name_value'  # fn(params, name, value)


@dataclass(frozen=True)
class CustomCheck:
    """
    A caller-supplied predicate for the `func` option.

    The predicate may return:
    - ("error", message) -> fails with that message
    - False              -> fails with "isn't valid"
    - anything else      -> passes
    """
    fn: Callable[..., Any]
    signature: FuncSignature = FuncSignature.VALUE

    def __post_init__(self):
        if not callable(self.fn):
            raise TypeError(f"CustomCheck.fn must be callable, got {type(self.fn).__name__}")
        if not isinstance(self.signature, FuncSignature):
            object.__setattr__(self, 'signature', FuncSignature(self.signature))

    def __call__(self, params: Any, name: Any, value: Any) -> Any:
        if self.signature == FuncSignature.VALUE:
            return self.fn(value)
        if self.signature == FuncSignature.PARAMS_VALUE:
            return self.fn(params, value)
        return self.fn(params, name, value)
