import logging

from .common import Completion, CompletionType
from .core import RunResult
from .errors import (
    AccessViolation,
    ConflictWithPreviousDeclaration,
    ControlFlowError,
    ExecutionAborted,
    HostError,
    InterpreterError,
    InvalidClassDefinition,
    OperationNotPossible,
    RuntimeFault,
    StructuralError,
    ThrownValue,
    TypeMismatch,
    UncaughtThrow,
    UndefinedReference,
)
from .main import Interpreter
from .values import format_value

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AccessViolation",
    "Completion",
    "CompletionType",
    "ConflictWithPreviousDeclaration",
    "ControlFlowError",
    "ExecutionAborted",
    "HostError",
    "Interpreter",
    "InterpreterError",
    "InvalidClassDefinition",
    "OperationNotPossible",
    "RunResult",
    "RuntimeFault",
    "StructuralError",
    "ThrownValue",
    "TypeMismatch",
    "UncaughtThrow",
    "UndefinedReference",
    "format_value",
]
