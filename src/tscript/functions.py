from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from . import nodes
from .errors import HostError, InterpreterError
from .values import Shape, check_number

if TYPE_CHECKING:
    from .objects import ClassValue, Instance
    from .scopes import ScopeStack


class FunctionValue:
    """
    A declared function, read as a value.

    `scopes` is the stack snapshot taken when the declaring block was entered;
    calls layer a fresh frame on top of it (static scoping). Methods carry the
    class that declares them in `owner`.
    """

    shape = Shape.FUNCTION

    __slots__ = ("node", "scopes", "owner", "static", "name")

    def __init__(
        self,
        node: nodes.Function,
        scopes: "ScopeStack",
        *,
        owner: "ClassValue | None" = None,
        static: bool = False,
    ):
        self.node = node
        self.scopes = scopes
        self.owner = owner
        self.static = static
        self.name = node.identifier

    @property
    def parameters(self) -> list[nodes.Parameter]:
        return self.node.parameters

    @property
    def qualname(self) -> str:
        if self.owner is None:
            return self.name
        return f"{self.owner.name}.{self.name}"

    def __repr__(self) -> str:
        return f"<function {self.qualname}>"


class BoundMethod:
    shape = Shape.FUNCTION

    def __init__(bound, func: FunctionValue, instance: "Instance"):
        bound.func = func
        bound.instance = instance

    @property
    def name(bound) -> str:
        return bound.func.name

    def __eq__(bound, other: object) -> bool:
        if not isinstance(other, BoundMethod):
            return NotImplemented
        return bound.func is other.func and bound.instance is other.instance

    def __hash__(bound) -> int:
        return hash((id(bound.func), id(bound.instance)))

    def __repr__(bound) -> str:
        return f"<method {bound.func.qualname} of {bound.instance!r}>"


def from_host(value: Any) -> Any:
    """Convert a value returned by host code into an interpreter value."""
    if value is None or type(value) in (bool, float, str):
        return value
    if type(value) is int:
        return check_number(value)
    if isinstance(value, (list, tuple)):
        return [from_host(item) for item in value]
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise HostError(f"dictionary keys must be strings, not {type(key).__name__}")
            out[key] = from_host(item)
        return out
    if isinstance(getattr(type(value), "shape", None), Shape):
        return value
    raise HostError(f"host returned an unsupported value of type {type(value).__name__}")


class Builtin:
    """A host callable registered in the outermost declaration scope."""

    shape = Shape.FUNCTION

    __slots__ = ("name", "func")

    def __init__(self, name: str, func: Callable[..., Any]):
        if not callable(func):
            raise TypeError(f"built-in {name!r} must be callable")
        self.name = name
        self.func = func

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        try:
            result = self.func(*args, **kwargs)
        except InterpreterError:
            raise
        except Exception as exc:
            raise HostError(f"built-in '{self.name}' failed: {exc}") from exc
        return from_host(result)

    def __repr__(self) -> str:
        return f"<built-in {self.name}>"
