"""
Contract package.

Provides parameter declarations, the check library and contract validation.
"""

from .types import TypeKind, FuncSignature, CustomCheck
from .options import ParamOptions, ParamSpec
from .registry import Contract, ContractBuilder, ContractDefinitionError
from .validate import (
    ContractViolation,
    ValidationOutcome,
    validate_params,
    validate_or_raise,
)

__all__ = [
    'TypeKind',
    'FuncSignature',
    'CustomCheck',
    'ParamOptions',
    'ParamSpec',
    'Contract',
    'ContractBuilder',
    'ContractDefinitionError',
    'ContractViolation',
    'ValidationOutcome',
    'validate_params',
    'validate_or_raise',
]
