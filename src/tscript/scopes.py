from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional

from .errors import (
    ConflictWithPreviousDeclaration,
    InterpreterError,
    OperationNotPossible,
    UndefinedReference,
)

if TYPE_CHECKING:
    from .objects import ClassValue

_MISSING = object()


class ScopeStack:
    """
    Two synchronized stacks of frames: declarations and variables.

    A frame maps identifiers to bindings. Plain dicts are used for block
    scopes; class code additionally pushes member views (see objects.py)
    which only need `__contains__`, `__getitem__` and `__setitem__`, and may
    offer `inaccessible(name)` to explain a failed lookup.

    Both stacks always have the same depth. Lookups scan innermost to
    outermost depth and the first depth binding the identifier wins, so
    inner scopes shadow outer ones whichever stack holds the binding.
    """

    def __init__(
        self,
        declarations: Optional[list] = None,
        variables: Optional[list] = None,
        *,
        context_class: "ClassValue | None" = None,
    ):
        self.declarations: list[Any] = list(declarations or [])
        self.variables: list[Any] = list(variables or [])
        if len(self.declarations) != len(self.variables):
            raise ValueError("declaration and variable stacks must have equal depth")
        # Class whose code is running; drives protected/private checks.
        self.context_class = context_class

    def __len__(self) -> int:
        return len(self.declarations)

    def __repr__(self) -> str:
        return f"<ScopeStack depth={len(self)} context={self.context_class!r}>"

    # ----- frame management -----

    def push(self, declarations: Any = None, variables: Any = None) -> None:
        self.declarations.append({} if declarations is None else declarations)
        self.variables.append({} if variables is None else variables)

    def pop(self) -> tuple[Any, Any]:
        if not self.declarations:
            raise RuntimeError("pop from an empty scope stack")
        return self.declarations.pop(), self.variables.pop()

    @contextmanager
    def nested(self, declarations: Any = None, variables: Any = None) -> Iterator["ScopeStack"]:
        self.push(declarations, variables)
        try:
            yield self
        finally:
            self.pop()

    def layered(self, *, context_class: Any = _MISSING) -> "ScopeStack":
        """
        A new, independent stack sharing the current frames.

        Frames pushed onto the result never appear here, while bindings added
        later to a shared frame are seen by both.
        """
        if context_class is _MISSING:
            context_class = self.context_class
        return ScopeStack(self.declarations, self.variables, context_class=context_class)

    # ----- binding -----

    def _check_free(self, identifier: str) -> None:
        # One binding per identifier and scope, across both stacks.
        if identifier in self.declarations[-1] or identifier in self.variables[-1]:
            raise ConflictWithPreviousDeclaration(identifier)

    def declare(self, identifier: str, item: Any) -> None:
        self._check_free(identifier)
        self.declarations[-1][identifier] = item

    def define(self, identifier: str, value: Any) -> None:
        self._check_free(identifier)
        self.variables[-1][identifier] = value

    def assign(self, identifier: str, value: Any) -> Any:
        frame, is_variable = self._nearest(identifier)
        if frame is None:
            raise self._unresolved(identifier, f"'{identifier}' is not defined")
        if not is_variable:
            raise OperationNotPossible(f"cannot assign to declaration '{identifier}'")
        frame[identifier] = value
        return value

    # ----- lookup -----

    @staticmethod
    def _find(frames: list, identifier: str) -> Any:
        for frame in reversed(frames):
            if identifier in frame:
                return frame
        return None

    def _nearest(self, identifier: str) -> tuple[Any, bool]:
        """(frame, is_variable) of the innermost depth binding `identifier`."""
        for depth in reversed(range(len(self.declarations))):
            if identifier in self.variables[depth]:
                return self.variables[depth], True
            if identifier in self.declarations[depth]:
                return self.declarations[depth], False
        return None, False

    def _unresolved(self, identifier: str, message: str) -> InterpreterError:
        # Member views know about members that exist but are not accessible here.
        for frame in reversed(self.variables + self.declarations):
            explain = getattr(frame, "inaccessible", None)
            error = explain(identifier) if explain is not None else None
            if error is not None:
                return error
        return UndefinedReference(message)

    def lookup_variable(self, identifier: str, default: Any = _MISSING) -> Any:
        frame = self._find(self.variables, identifier)
        if frame is not None:
            return frame[identifier]
        if default is _MISSING:
            raise self._unresolved(identifier, f"variable '{identifier}' is not defined")
        return default

    def lookup_declaration(self, identifier: str, default: Any = _MISSING) -> Any:
        frame = self._find(self.declarations, identifier)
        if frame is not None:
            return frame[identifier]
        if default is _MISSING:
            raise self._unresolved(identifier, f"'{identifier}' is not declared")
        return default

    def lookup(self, identifier: str) -> Any:
        """Innermost binding wins; within one depth a variable is checked first."""
        frame, _ = self._nearest(identifier)
        if frame is None:
            raise self._unresolved(identifier, f"'{identifier}' is not defined")
        return frame[identifier]
