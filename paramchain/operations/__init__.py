"""
Operations package.

Provides the Operation base class, result types and the chain executor.
"""

from .results import (
    Ok,
    Error,
    ValidationFailed,
    Interrupt,
    OperationError,
    is_ok,
    is_error,
    unwrap,
)
from .operation import Operation, OperationFailed, operation_name
from .chain import Chain, ChainBuilder, ChainStep, Deferred, deferred, resolve_deferred

__all__ = [
    'Ok',
    'Error',
    'ValidationFailed',
    'Interrupt',
    'OperationError',
    'is_ok',
    'is_error',
    'unwrap',
    'Operation',
    'OperationFailed',
    'operation_name',
    'Chain',
    'ChainBuilder',
    'ChainStep',
    'Deferred',
    'deferred',
    'resolve_deferred',
]
