from __future__ import annotations

import logging
from typing import Any, Iterator

from . import nodes
from .errors import InvalidClassDefinition, RuntimeFault
from .functions import FunctionValue
from .objects import ClassValue, Member, MemberKind, NamespaceValue, Visibility
from .scopes import ScopeStack

logger = logging.getLogger(__name__)


def class_items(node: nodes.Class) -> Iterator[tuple[Visibility, Any]]:
    for item in node.public_items:
        yield Visibility.PUBLIC, item
    for item in node.private_items:
        yield Visibility.PRIVATE, item
    for item in node.protected_items:
        yield Visibility.PROTECTED, item


class DeclarationMixin:
    """Hoisting pass run on every block entry, before its first statement."""

    def _hoist(self, items: list, scopes: ScopeStack) -> None:
        classes: list[ClassValue] = []
        self._register(items, scopes, classes)
        for cls in classes:
            self._finalize_class(cls)

    def _register(self, items: list, scopes: ScopeStack, classes: list[ClassValue]) -> None:
        for item in items:
            if isinstance(item, nodes.Function):
                scopes.declare(item.identifier, FunctionValue(item, scopes.layered()))
            elif isinstance(item, nodes.Class):
                cls = ClassValue(item, scopes.layered())
                scopes.declare(item.identifier, cls)
                classes.append(cls)
            elif isinstance(item, nodes.Namespace):
                # The namespace keeps its own frames for the rest of the run.
                inner = scopes.layered()
                inner.push()
                scopes.declare(item.identifier, NamespaceValue(item.identifier, inner, item))
                self._register(item.body.items, inner, classes)
            else:
                continue
            logger.debug("hoisted %s '%s'", type(item).__name__.lower(), item.identifier)

    # ----- classes -----

    def _finalize_class(self, cls: ClassValue) -> None:
        if cls.finalized:
            return
        if cls in self._finalizing:
            raise InvalidClassDefinition(f"class {cls.name} inherits from itself")
        self._finalizing.add(cls)
        try:
            if cls.node.extends is not None:
                cls.base = self._resolve_base(cls)
            nested = self._collect_members(cls)
        finally:
            self._finalizing.discard(cls)
        cls.finalized = True
        for inner in nested:
            self._finalize_class(inner)

    def _resolve_base(self, cls: ClassValue) -> ClassValue:
        extends = cls.node.extends
        try:
            base = self._resolve_declaration_path(extends, cls.scopes)
        except RuntimeFault as exc:
            raise InvalidClassDefinition(
                f"class {cls.name}: cannot resolve base {extends}: {exc}"
            ) from exc
        if not isinstance(base, ClassValue):
            raise InvalidClassDefinition(f"class {cls.name}: base {extends} is not a class")
        self._finalize_class(base)
        return base

    def _collect_members(self, cls: ClassValue) -> list[ClassValue]:
        nested: list[ClassValue] = []

        def add(member: Member) -> None:
            if member.name in cls.members:
                raise InvalidClassDefinition(
                    f"class {cls.name} declares member '{member.name}' more than once"
                )
            cls.members[member.name] = member

        for visibility, item in class_items(cls.node):
            if isinstance(item, nodes.Constructor):
                if cls.constructor is not None:
                    raise InvalidClassDefinition(f"class {cls.name} has more than one constructor")
                cls.constructor = item
                cls.constructor_visibility = visibility
                continue
            if isinstance(item, nodes.UseDirective):
                cls.directives.append(item)
                continue
            if not isinstance(item, (nodes.StaticDeclaration, nodes.InstanceDeclaration)):
                raise InvalidClassDefinition(
                    f"class {cls.name}: unexpected item {type(item).__name__}"
                )

            static = isinstance(item, nodes.StaticDeclaration)
            decl = item.declaration
            if isinstance(decl, nodes.VariableDeclaration):
                for variable in decl.variables:
                    field = Member(
                        variable.identifier, cls, visibility, MemberKind.FIELD, static, variable
                    )
                    add(field)
            elif isinstance(decl, nodes.Function):
                method = FunctionValue(decl, cls.scopes, owner=cls, static=static)
                kind = MemberKind.METHOD
                add(Member(decl.identifier, cls, visibility, kind, static, decl, method))
            elif isinstance(decl, nodes.Class):
                inner = ClassValue(decl, self._class_scopes(cls, None))
                add(Member(decl.identifier, cls, visibility, MemberKind.CLASS, True, decl, inner))
                nested.append(inner)
            elif isinstance(decl, nodes.Namespace):
                raise InvalidClassDefinition(
                    f"class {cls.name}: namespace '{decl.identifier}' cannot be declared in a class"
                )
            else:
                raise InvalidClassDefinition(
                    f"class {cls.name}: unexpected declaration {type(decl).__name__}"
                )
        logger.debug("finalized class %s (%d members)", cls.name, len(cls.members))
        return nested
