"""Classes, instances and namespaces as runtime values.

Member visibility is decided against the *context class*: the class whose
constructor or method is currently running (None for free code).

    public     always accessible
    protected  accessible from the declaring class and all its descendants
    private    accessible from the declaring class only
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, Optional

from . import nodes
from .errors import AccessViolation, OperationNotPossible, UndefinedReference
from .functions import BoundMethod
from .values import Shape

if TYPE_CHECKING:
    from .scopes import ScopeStack


class Visibility(enum.Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class MemberKind(enum.Enum):
    FIELD = "field"
    METHOD = "method"
    CLASS = "class"


@dataclass(eq=False)
class Member:
    name: str
    owner: "ClassValue"
    visibility: Visibility
    kind: MemberKind
    static: bool
    node: Any
    # FunctionValue for methods, ClassValue for nested classes.
    value: Any = None


class ClassValue:
    shape = Shape.CLASS

    def __init__(self, node: nodes.Class, scopes: "ScopeStack"):
        self.node = node
        self.scopes = scopes
        self.name = node.identifier
        self.base: Optional[ClassValue] = None
        self.members: Dict[str, Member] = {}
        self.constructor: Optional[nodes.Constructor] = None
        self.constructor_visibility = Visibility.PUBLIC
        self.directives: list[nodes.UseDirective] = []
        # names brought in by `use` directives inside the class body
        self.imports: Dict[str, Any] = {}
        self.statics: Dict[str, Any] = {}
        self.finalized = False
        self.statics_initialized = False

    def lineage(self) -> Iterator["ClassValue"]:
        cls: Optional[ClassValue] = self
        while cls is not None:
            yield cls
            cls = cls.base

    def is_subclass_of(self, other: "ClassValue") -> bool:
        return any(cls is other for cls in self.lineage())

    def own_fields(self) -> Iterator[Member]:
        for member in self.members.values():
            if member.kind is MemberKind.FIELD and not member.static:
                yield member

    def __repr__(self) -> str:
        return f"<class {self.name}>"


class Instance:
    shape = Shape.OBJECT

    __slots__ = ("cls", "fields")

    def __init__(self, cls: ClassValue):
        self.cls = cls
        # (declaring class, name) -> value, so equally named fields of a base
        # and a derived class never collide.
        self.fields: Dict[tuple[ClassValue, str], Any] = {}

    def __repr__(self) -> str:
        return f"<{self.cls.name} object>"


class NamespaceValue:
    """A namespace (or loaded module) with persistent declaration/variable frames."""

    shape = Shape.NAMESPACE

    def __init__(self, name: str, scopes: "ScopeStack", node: Optional[nodes.Namespace] = None):
        self.name = name
        self.scopes = scopes
        self.node = node
        self.initialized = False

    @property
    def declarations(self) -> dict:
        return self.scopes.declarations[-1]

    @property
    def variables(self) -> dict:
        return self.scopes.variables[-1]

    def lookup(self, identifier: str) -> Any:
        if identifier in self.variables:
            return self.variables[identifier]
        if identifier in self.declarations:
            return self.declarations[identifier]
        raise UndefinedReference(f"namespace '{self.name}' has no member '{identifier}'")

    def __repr__(self) -> str:
        return f"<namespace {self.name}>"


# ----------------------------
# member resolution
# ----------------------------


def is_visible(visibility: Visibility, owner: ClassValue, context: Optional[ClassValue]) -> bool:
    if visibility is Visibility.PUBLIC:
        return True
    if context is None:
        return False
    if visibility is Visibility.PRIVATE:
        return context is owner
    return context.is_subclass_of(owner)


def can_access(member: Member, context: Optional[ClassValue]) -> bool:
    return is_visible(member.visibility, member.owner, context)


def _is_static(member: Member) -> bool:
    return member.static or member.kind is MemberKind.CLASS


def _inaccessible(member: Member) -> AccessViolation:
    return AccessViolation(
        f"{member.visibility.value} member '{member.name}' of class {member.owner.name} "
        "is not accessible here"
    )


def find_member(
    start: ClassValue,
    name: str,
    context: Optional[ClassValue],
    accept: Callable[[Member], bool] = lambda member: True,
) -> tuple[Optional[Member], Optional[Member]]:
    """
    Walk the base chain from `start`, skipping members `accept` rejects.

    Returns (first accessible match, first match of any visibility).
    """
    first: Optional[Member] = None
    for cls in start.lineage():
        member = cls.members.get(name)
        if member is None or not accept(member):
            continue
        if first is None:
            first = member
        if can_access(member, context):
            return member, first
    return None, first


def lookup_member(
    start: ClassValue,
    name: str,
    context: Optional[ClassValue],
    *,
    static_only: bool = False,
) -> Member:
    accept = _is_static if static_only else (lambda member: True)
    member, first = find_member(start, name, context, accept)
    if member is not None:
        return member
    if first is not None:
        raise _inaccessible(first)
    raise UndefinedReference(f"class {start.name} has no member '{name}'")


def read_member(member: Member, instance: Optional[Instance]) -> Any:
    if member.kind is MemberKind.CLASS:
        return member.value
    if member.kind is MemberKind.METHOD:
        if member.static:
            return member.value
        if instance is None:
            # Unbound; calling it without an instance fails at call time.
            return member.value
        return BoundMethod(member.value, instance)
    if member.static:
        if member.name not in member.owner.statics:
            raise UndefinedReference(
                f"static member '{member.name}' of class {member.owner.name} is not initialized"
            )
        return member.owner.statics[member.name]
    if instance is None:
        raise OperationNotPossible(f"member '{member.name}' needs an instance")
    key = (member.owner, member.name)
    if key not in instance.fields:
        raise UndefinedReference(f"field '{member.name}' is not initialized")
    return instance.fields[key]


def write_member(member: Member, instance: Optional[Instance], value: Any) -> Any:
    if member.kind is not MemberKind.FIELD:
        raise OperationNotPossible(f"cannot assign to {member.kind.value} '{member.name}'")
    if member.static:
        member.owner.statics[member.name] = value
        return value
    if instance is None:
        raise OperationNotPossible(f"member '{member.name}' needs an instance")
    instance.fields[(member.owner, member.name)] = value
    return value


class MemberFrame:
    """
    A scope frame exposing class members to code running inside a class.

    Two frames are pushed per class context: one on the variable stack
    (fields and `this`) and one on the declaration stack (methods, nested
    classes, names imported into the class body). Instance members are only
    visible when an instance is bound; lookups start at the instance's
    runtime class so overridden methods dispatch dynamically.
    """

    def __init__(self, context: ClassValue, instance: Optional[Instance], *, fields: bool):
        self.context = context
        self.instance = instance
        self.fields = fields

    def _start(self) -> ClassValue:
        return self.instance.cls if self.instance is not None else self.context

    def _wants(self, member: Member) -> bool:
        if self.fields != (member.kind is MemberKind.FIELD):
            return False
        return _is_static(member) or self.instance is not None

    def _find(self, name: str) -> tuple[Optional[Member], Optional[Member]]:
        return find_member(self._start(), name, self.context, self._wants)

    def __contains__(self, name: str) -> bool:
        if self.fields and name == "this" and self.instance is not None:
            return True
        if not self.fields and any(name in cls.imports for cls in self.context.lineage()):
            return True
        # Members hidden from this context do not shadow outer bindings.
        return self._find(name)[0] is not None

    def __getitem__(self, name: str) -> Any:
        if self.fields and name == "this" and self.instance is not None:
            return self.instance
        member, _ = self._find(name)
        if member is not None:
            return read_member(member, self.instance)
        for cls in self.context.lineage():
            if name in cls.imports:
                return cls.imports[name]
        raise KeyError(name)

    def __setitem__(self, name: str, value: Any) -> None:
        if not self.fields or name == "this":
            raise OperationNotPossible(f"cannot assign to '{name}'")
        member, _ = self._find(name)
        if member is None:
            raise KeyError(name)
        write_member(member, self.instance, value)

    def inaccessible(self, name: str) -> Optional[AccessViolation]:
        member, first = self._find(name)
        if member is None and first is not None:
            return _inaccessible(first)
        return None

    def __repr__(self) -> str:
        kind = "fields" if self.fields else "declarations"
        return f"<MemberFrame {kind} of {self.context.name}>"
