"""
paramchain - contract-checked operations and operation chains.

Public API:
- Operation: business logic guarded by a parameter contract
- Contract / ContractBuilder: declare what an operation accepts
- validate_params: run a contract against params without an operation
- Chain / ChainBuilder: run operations in sequence, stop at the first failure
- Ok, Error, ValidationFailed, Interrupt, OperationError: results
"""

from .contracts import (
    Contract,
    ContractBuilder,
    ContractDefinitionError,
    ContractViolation,
    CustomCheck,
    FuncSignature,
    TypeKind,
    ValidationOutcome,
    validate_params,
    validate_or_raise,
)
from .operations import (
    Chain,
    ChainBuilder,
    Error,
    Interrupt,
    Ok,
    Operation,
    OperationError,
    OperationFailed,
    ValidationFailed,
    deferred,
)

try:
    from importlib.metadata import version
    __version__ = version("paramchain")
except Exception:
    __version__ = "0.1.0"

__all__ = [
    'Contract',
    'ContractBuilder',
    'ContractDefinitionError',
    'ContractViolation',
    'CustomCheck',
    'FuncSignature',
    'TypeKind',
    'ValidationOutcome',
    'validate_params',
    'validate_or_raise',
    'Chain',
    'ChainBuilder',
    'Error',
    'Interrupt',
    'Ok',
    'Operation',
    'OperationError',
    'OperationFailed',
    'ValidationFailed',
    'deferred',
]
