"""
Contract definitions - the frozen description of what an operation accepts.

A Contract is an ordered tuple of ParamSpecs. It is built once (per operation
class) and then shared by every call, so it is immutable.

Build one from declarations:

    contract = Contract.from_declarations([
        ("name", {"type": "string", "length": {"min": 1}}),
        ("age", {"type": "integer", "numericality": {"gte": 18}}),
    ])

or with the builder:

    contract = (
        ContractBuilder()
        .param("name", type="string", length={"min": 1})
        .param("age", type="integer", numericality={"gte": 18})
        .param("role", in_=["admin", "user"], default="user")
        .build()
    )
"""

from dataclasses import dataclass
from typing import Any, Hashable, Iterator, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from .options import ParamSpec, parse_declarations, parse_options


class ContractDefinitionError(ValueError):
    """Raised when a contract declaration is malformed."""

    def __init__(self, message: str, field: Any = None):
        super().__init__(message)
        self.field = field


def _describe(error: Exception) -> str:
    if isinstance(error, PydanticValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in e['loc']) or 'options'}: {e['msg']}"
            for e in error.errors()
        )
    return str(error)


@dataclass(frozen=True)
class Contract:
    """Ordered, immutable set of parameter specs for one operation."""
    params: Tuple[ParamSpec, ...] = ()

    @classmethod
    def from_declarations(cls, declarations: Any) -> 'Contract':
        """
        Build a contract from a mapping or a list of (name, options) pairs.

        Raises:
            ContractDefinitionError: If any declaration is malformed
        """
        if isinstance(declarations, Contract):
            return declarations
        if declarations is None:
            return cls()
        try:
            return cls(params=tuple(parse_declarations(declarations)))
        except (PydanticValidationError, ValueError, TypeError) as e:
            raise ContractDefinitionError(f"Invalid contract: {_describe(e)}") from e

    @property
    def names(self) -> List[Hashable]:
        return [spec.name for spec in self.params]

    def get(self, name: Hashable) -> Optional[ParamSpec]:
        for spec in self.params:
            if spec.name == name:
                return spec
        return None

    def __iter__(self) -> Iterator[ParamSpec]:
        return iter(self.params)

    def __len__(self) -> int:
        return len(self.params)


class ContractBuilder:
    """Appends parameter declarations, then freezes them into a Contract."""

    def __init__(self):
        self._params: List[ParamSpec] = []

    def param(self, name: Hashable, options: Any = None, **kwargs) -> 'ContractBuilder':
        """
        Declare a parameter.

        Options may be passed as a dict, as keyword arguments, or both
        (keyword arguments win). Use `in_` for the `in` option.

        Raises:
            ContractDefinitionError: If the options are malformed or the name
                is already declared
        """
        merged = dict(options or {})
        merged.update(kwargs)

        if any(spec.name == name for spec in self._params):
            raise ContractDefinitionError(f"Param '{name}' is declared more than once", field=name)

        try:
            spec = parse_options(name, merged)
        except (PydanticValidationError, ValueError, TypeError) as e:
            raise ContractDefinitionError(f"Invalid options for '{name}': {_describe(e)}", field=name) from e

        self._params.append(spec)
        return self

    parameter = param

    def build(self) -> Contract:
        return Contract(params=tuple(self._params))
