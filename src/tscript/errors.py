from __future__ import annotations

from typing import Any


class InterpreterError(Exception):
    """Base class for every failure the interpreter reports to its host."""


# ----------------------------
# structural errors (never catchable by interpreted try/catch)
# ----------------------------


class StructuralError(InterpreterError):
    pass


class ConflictWithPreviousDeclaration(StructuralError):
    def __init__(self, identifier: str):
        super().__init__(f"'{identifier}' conflicts with a previous declaration in the same scope")
        self.identifier = identifier


class InvalidClassDefinition(StructuralError):
    pass


class ControlFlowError(StructuralError):
    """A break/continue escaped every loop that could absorb it."""


class ExecutionAborted(StructuralError):
    pass


# ----------------------------
# run-time errors (surface as Throw completions)
# ----------------------------


class RuntimeFault(InterpreterError):
    def to_value(self) -> Any:
        """The value bound to the catch identifier when this fault is caught."""
        return {"type": type(self).__name__, "message": str(self)}


class UndefinedReference(RuntimeFault):
    pass


class OperationNotPossible(RuntimeFault):
    pass


class TypeMismatch(RuntimeFault):
    pass


class AccessViolation(RuntimeFault):
    pass


class HostError(RuntimeFault):
    pass


class ThrownValue(RuntimeFault):
    """Carries a value thrown by interpreted code across an expression boundary."""

    def __init__(self, value: Any):
        super().__init__("value thrown by interpreted code")
        self.value = value

    def to_value(self) -> Any:
        return self.value


class UncaughtThrow(InterpreterError):
    def __init__(self, value: Any, message: str):
        super().__init__(f"uncaught throw: {message}")
        self.value = value
