from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

from . import nodes
from .common import Completion, CompletionType
from .errors import (
    AccessViolation,
    ConflictWithPreviousDeclaration,
    ControlFlowError,
    OperationNotPossible,
    ThrownValue,
    UndefinedReference,
)
from .functions import BoundMethod, Builtin, FunctionValue
from .objects import (
    ClassValue,
    Instance,
    MemberFrame,
    MemberKind,
    NamespaceValue,
    is_visible,
    lookup_member,
    read_member,
    write_member,
)
from .scopes import ScopeStack
from .values import copy_value, is_number, type_name

logger = logging.getLogger(__name__)

Load = Callable[[], Any]
Store = Callable[[Any], Any]


class HelperMixin:
    # ----- names and members -----

    def _load_name(self, name: nodes.Name, scopes: ScopeStack) -> Any:
        value = scopes.lookup(name.head)
        for identifier in name.parts[1:]:
            value = self._get_member(value, identifier, scopes)
        return value

    def _get_member(self, obj: Any, identifier: str, scopes: ScopeStack) -> Any:
        if isinstance(obj, Instance):
            member = lookup_member(obj.cls, identifier, scopes.context_class)
            return read_member(member, obj)
        if isinstance(obj, ClassValue):
            member = lookup_member(obj, identifier, scopes.context_class, static_only=True)
            return read_member(member, None)
        if isinstance(obj, NamespaceValue):
            return obj.lookup(identifier)
        if type(obj) is dict:
            if identifier not in obj:
                raise UndefinedReference(f"dictionary has no key '{identifier}'")
            return obj[identifier]
        raise OperationNotPossible(f"{type_name(obj)} has no member '{identifier}'")

    def _set_member(self, obj: Any, identifier: str, value: Any, scopes: ScopeStack) -> Any:
        if isinstance(obj, Instance):
            member = lookup_member(obj.cls, identifier, scopes.context_class)
            return write_member(member, obj, value)
        if isinstance(obj, ClassValue):
            member = lookup_member(obj, identifier, scopes.context_class, static_only=True)
            return write_member(member, None, value)
        if isinstance(obj, NamespaceValue):
            if identifier in obj.variables:
                obj.variables[identifier] = value
                return value
            if identifier in obj.declarations:
                raise OperationNotPossible(f"cannot assign to declaration '{identifier}'")
            raise UndefinedReference(f"namespace '{obj.name}' has no variable '{identifier}'")
        if type(obj) is dict:
            obj[identifier] = value
            return value
        raise OperationNotPossible(f"cannot set member '{identifier}' on {type_name(obj)}")

    def _array_index(self, container: list, index: Any) -> int:
        if not is_number(index):
            raise OperationNotPossible(f"array index must be a Number, not {type_name(index)}")
        if index < 0 or index >= len(container):
            raise UndefinedReference(f"array index {index} out of range")
        return index

    def _check_key(self, key: Any) -> None:
        if type(key) is not str:
            raise OperationNotPossible(f"dictionary key must be a String, not {type_name(key)}")

    def _get_item(self, container: Any, index: Any) -> Any:
        if type(container) is list:
            return container[self._array_index(container, index)]
        if type(container) is dict:
            self._check_key(index)
            if index not in container:
                raise UndefinedReference(f"dictionary has no key '{index}'")
            return container[index]
        if type(container) is str:
            if not is_number(index):
                raise OperationNotPossible(f"string index must be a Number, not {type_name(index)}")
            if index < 0 or index >= len(container):
                raise UndefinedReference(f"string index {index} out of range")
            return container[index]
        raise OperationNotPossible(f"cannot index {type_name(container)}")

    def _set_item(self, container: Any, index: Any, value: Any) -> Any:
        if type(container) is list:
            container[self._array_index(container, index)] = value
            return value
        if type(container) is dict:
            self._check_key(index)
            container[index] = value
            return value
        raise OperationNotPossible(f"cannot assign items of {type_name(container)}")

    def _resolve_target(self, target: nodes.Node, scopes: ScopeStack) -> tuple[Load, Store]:
        """
        Resolve an assignment target once and return (load, store) closures.

        The container part of the target is evaluated here, before the
        right-hand side, so compound assignment reads and writes the same slot.
        """
        if isinstance(target, nodes.Name):
            if len(target.parts) == 1:
                identifier = target.head

                def load() -> Any:
                    return scopes.lookup(identifier)

                def store(value: Any) -> Any:
                    return scopes.assign(identifier, value)

                return load, store

            owner = self._load_name(nodes.Name(target.parts[:-1]), scopes)
            return self._member_target(owner, target.last, scopes)

        if isinstance(target, nodes.MemberAccess):
            owner = self.eval_expr(target.expression, scopes)
            return self._member_target(owner, target.identifier, scopes)

        if isinstance(target, nodes.ItemAccess):
            container = self.eval_expr(target.container, scopes)
            index = self.eval_expr(target.index, scopes)

            def load() -> Any:
                return self._get_item(container, index)

            def store(value: Any) -> Any:
                return self._set_item(container, index, value)

            return load, store

        raise OperationNotPossible(f"cannot assign to {type(target).__name__}")

    def _member_target(self, owner: Any, identifier: str, scopes: ScopeStack) -> tuple[Load, Store]:
        def load() -> Any:
            return self._get_member(owner, identifier, scopes)

        def store(value: Any) -> Any:
            return self._set_member(owner, identifier, value, scopes)

        return load, store

    # ----- calls -----

    @contextmanager
    def _call_guard(self, what: str) -> Iterator[None]:
        if self._depth >= self.max_call_depth:
            raise OperationNotPossible(
                f"maximum call depth ({self.max_call_depth}) exceeded calling {what}"
            )
        self._depth += 1
        try:
            yield
        except RecursionError as exc:
            raise OperationNotPossible(f"host stack exhausted calling {what}") from exc
        finally:
            self._depth -= 1

    def _call(self, callee: Any, args: list, named: Dict[str, Any], scopes: ScopeStack) -> Any:
        if isinstance(callee, FunctionValue):
            return self._invoke(callee, args, named)
        if isinstance(callee, BoundMethod):
            return self._invoke(callee.func, args, named, instance=callee.instance)
        if isinstance(callee, ClassValue):
            return self._construct(callee, args, named, scopes)
        if isinstance(callee, Builtin):
            return callee(*args, **named)
        raise OperationNotPossible(f"{type_name(callee)} is not callable")

    def _invoke(
        self,
        func: FunctionValue,
        args: list,
        named: Dict[str, Any],
        *,
        instance: Optional[Instance] = None,
    ) -> Any:
        if func.owner is not None:
            if instance is None and not func.static:
                raise OperationNotPossible(f"method {func.qualname} needs an instance")
            scopes = self._class_scopes(func.owner, None if func.static else instance)
        else:
            scopes = func.scopes.layered()
        with self._call_guard(func.qualname):
            scopes.push()
            self._bind_parameters(func.qualname, func.parameters, args, named, scopes)
            completion = self.exec_stmt(func.node.body, scopes)
            return self._call_result(completion, func.qualname)

    def _bind_parameters(
        self,
        what: str,
        parameters: list[nodes.Parameter],
        args: list,
        named: Dict[str, Any],
        scopes: ScopeStack,
    ) -> None:
        if len(args) > len(parameters):
            raise OperationNotPossible(
                f"{what}() takes {len(parameters)} arguments but {len(args)} were given"
            )
        known = {parameter.identifier for parameter in parameters}
        for key in named:
            if key not in known:
                raise OperationNotPossible(f"{what}() got an unexpected named argument '{key}'")

        for position, parameter in enumerate(parameters):
            if parameter.identifier in named:
                value = named[parameter.identifier]
            elif position < len(args):
                value = args[position]
            elif parameter.expression is not None:
                # Defaults are evaluated per call and see the earlier parameters.
                value = copy_value(self.eval_expr(parameter.expression, scopes))
            else:
                raise OperationNotPossible(f"{what}() missing argument '{parameter.identifier}'")
            scopes.define(parameter.identifier, value)

    def _call_result(self, completion: Completion, what: str) -> Any:
        kind = completion.type
        if kind is CompletionType.RETURN:
            return copy_value(completion.value)
        if kind is CompletionType.NORMAL:
            return None
        if kind is CompletionType.THROW:
            raise ThrownValue(completion.value)
        raise ControlFlowError(f"'{kind.value}' outside of a loop in {what}")

    # ----- classes -----

    def _class_scopes(self, cls: ClassValue, instance: Optional[Instance]) -> ScopeStack:
        scopes = cls.scopes.layered(context_class=cls)
        scopes.push(
            MemberFrame(cls, instance, fields=False),
            MemberFrame(cls, instance, fields=True),
        )
        return scopes

    def _check_constructor(self, cls: ClassValue, context: Optional[ClassValue]) -> None:
        if not is_visible(cls.constructor_visibility, cls, context):
            raise AccessViolation(
                f"{cls.constructor_visibility.value} constructor of class {cls.name} "
                "is not accessible here"
            )

    def _construct(
        self, cls: ClassValue, args: list, named: Dict[str, Any], scopes: ScopeStack
    ) -> Instance:
        self._check_constructor(cls, scopes.context_class)
        for ancestor in cls.lineage():
            self._initialize_statics(ancestor)
        instance = Instance(cls)
        self._initialize(cls, instance, args, named)
        return instance

    def _initialize(
        self, cls: ClassValue, instance: Instance, args: list, named: Dict[str, Any]
    ) -> None:
        """Base part first, then own fields in declaration order, then the body."""
        what = f"{cls.name} constructor"
        constructor = cls.constructor
        with self._call_guard(what):
            scopes = self._class_scopes(cls, instance)
            scopes.push()
            parameters = constructor.parameters if constructor is not None else []
            self._bind_parameters(cls.name, parameters, args, named, scopes)

            if cls.base is not None:
                self._check_constructor(cls.base, cls)
                super_args = []
                if constructor is not None:
                    super_args = [
                        copy_value(self.eval_expr(expression, scopes))
                        for expression in constructor.super_parameters
                    ]
                self._initialize(cls.base, instance, super_args, {})
            elif constructor is not None and constructor.super_parameters:
                raise OperationNotPossible(
                    f"class {cls.name} has no base class to pass arguments to"
                )

            self._initialize_fields(cls, instance)
            if constructor is not None:
                completion = self.exec_stmt(constructor.body, scopes)
                self._call_result(completion, what)

    def _initialize_fields(self, cls: ClassValue, instance: Instance) -> None:
        scopes = self._class_scopes(cls, instance)
        for member in cls.own_fields():
            expression = member.node.expression
            value = None if expression is None else self.eval_expr(expression, scopes)
            instance.fields[(cls, member.name)] = copy_value(value)

    def _bind_import(self, cls: ClassValue, identifier: str, item: Any) -> None:
        if identifier in cls.imports or identifier in cls.members:
            raise ConflictWithPreviousDeclaration(identifier)
        cls.imports[identifier] = item

    def _initialize_statics(self, cls: ClassValue) -> None:
        if cls.statics_initialized:
            return
        cls.statics_initialized = True
        logger.debug("initializing static members of class %s", cls.name)
        scopes = self._class_scopes(cls, None)
        for directive in cls.directives:
            self._use(directive, scopes, functools.partial(self._bind_import, cls))
        for member in cls.members.values():
            if member.kind is MemberKind.CLASS:
                self._initialize_statics(member.value)
            elif member.kind is MemberKind.FIELD and member.static:
                expression = member.node.expression
                value = None if expression is None else self.eval_expr(expression, scopes)
                cls.statics[member.name] = copy_value(value)

    # ----- use directives -----

    def _declaration_member(self, item: Any, identifier: str, scopes: ScopeStack) -> Any:
        if isinstance(item, NamespaceValue):
            if identifier not in item.declarations:
                raise UndefinedReference(f"namespace '{item.name}' declares no '{identifier}'")
            return item.declarations[identifier]
        if isinstance(item, ClassValue):
            self._finalize_class(item)
            member = lookup_member(item, identifier, scopes.context_class, static_only=True)
            if member.kind is MemberKind.FIELD:
                raise OperationNotPossible(
                    f"'{identifier}' of class {item.name} is not a declaration"
                )
            return member.value
        raise OperationNotPossible(f"{type_name(item)} has no member declarations")

    def _resolve_declaration_path(
        self, name: nodes.Name, scopes: ScopeStack, *, within: Optional[NamespaceValue] = None
    ) -> Any:
        if within is None:
            item = scopes.lookup_declaration(name.head)
        else:
            item = self._declaration_member(within, name.head, scopes)
        for identifier in name.parts[1:]:
            item = self._declaration_member(item, identifier, scopes)
        return item

    def _use(
        self, directive: nodes.UseDirective, scopes: ScopeStack, bind: Callable[[str, Any], None]
    ) -> None:
        """Resolve what a `use` directive imports and hand each binding to `bind`."""
        source: Optional[NamespaceValue] = None
        if directive.source is not None:
            source = self.modules.load(str(directive.source))
            if not directive.imports:
                for identifier, item in source.declarations.items():
                    bind(identifier, item)
                return

        for entry in directive.imports:
            item = self._resolve_declaration_path(entry.name, scopes, within=source)
            if isinstance(entry, nodes.ImportNamespace):
                if not isinstance(item, NamespaceValue):
                    raise OperationNotPossible(f"'{entry.name}' is not a namespace")
                for identifier, declared in item.declarations.items():
                    bind(identifier, declared)
            else:
                bind(entry.alias or entry.name.last, item)
