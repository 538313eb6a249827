from __future__ import annotations

from typing import Optional

from . import nodes
from .common import BREAK, CONTINUE, NORMAL, Completion, CompletionType
from .errors import ControlFlowError, TypeMismatch
from .scopes import ScopeStack
from .values import binary_operate, compound_operator, copy_value, require_boolean, type_name


class StatementMixin:
    # ----- blocks and declarations -----

    def exec_Block(self, node: nodes.Block, scopes: ScopeStack) -> Completion:
        with scopes.nested():
            self._hoist(node.items, scopes)
            return self.exec_items(node.items, scopes)

    def exec_VariableDeclaration(
        self, node: nodes.VariableDeclaration, scopes: ScopeStack
    ) -> Completion:
        for variable in node.variables:
            value = None
            if variable.expression is not None:
                value = self.eval_expr(variable.expression, scopes)
            scopes.define(variable.identifier, copy_value(value))
        return NORMAL

    def exec_Function(self, node: nodes.Function, scopes: ScopeStack) -> Completion:
        # Registered when the enclosing block was entered.
        return NORMAL

    def exec_Class(self, node: nodes.Class, scopes: ScopeStack) -> Completion:
        self._initialize_statics(scopes.lookup_declaration(node.identifier))
        return NORMAL

    def exec_Namespace(self, node: nodes.Namespace, scopes: ScopeStack) -> Completion:
        namespace = scopes.lookup_declaration(node.identifier)
        if namespace.initialized:
            return NORMAL
        namespace.initialized = True
        completion = self.exec_items(node.body.items, namespace.scopes)
        if completion.type in (CompletionType.NORMAL, CompletionType.THROW):
            return completion
        raise ControlFlowError(
            f"'{completion.type.value}' is not allowed in the body of namespace {node.identifier}"
        )

    def exec_UseDirective(self, node: nodes.UseDirective, scopes: ScopeStack) -> Completion:
        self._use(node, scopes, scopes.declare)
        return NORMAL

    # ----- simple statements -----

    def exec_ExpressionStatement(
        self, node: nodes.ExpressionStatement, scopes: ScopeStack
    ) -> Completion:
        self.eval_expr(node.expression, scopes)
        return NORMAL

    def exec_Assignment(self, node: nodes.Assignment, scopes: ScopeStack) -> Completion:
        load, store = self._resolve_target(node.left_hand_side, scopes)
        value = self.eval_expr(node.expression, scopes)
        if node.operation is not nodes.AssignmentOperator.EQUALS:
            value = binary_operate(compound_operator(node.operation), load(), value)
        store(copy_value(value))
        return NORMAL

    def exec_Break(self, node: nodes.Break, scopes: ScopeStack) -> Completion:
        return BREAK

    def exec_Continue(self, node: nodes.Continue, scopes: ScopeStack) -> Completion:
        return CONTINUE

    def exec_Return(self, node: nodes.Return, scopes: ScopeStack) -> Completion:
        if node.expression is None:
            return Completion.returned()
        return Completion.returned(copy_value(self.eval_expr(node.expression, scopes)))

    def exec_Throw(self, node: nodes.Throw, scopes: ScopeStack) -> Completion:
        return Completion.thrown(copy_value(self.eval_expr(node.expression, scopes)))

    # ----- compound statements -----

    def exec_Condition(self, node: nodes.Condition, scopes: ScopeStack) -> Completion:
        if require_boolean(self.eval_expr(node.expression, scopes), "condition"):
            return self.exec_stmt(node.do_then, scopes)
        if node.do_else is not None:
            return self.exec_stmt(node.do_else, scopes)
        return NORMAL

    @staticmethod
    def _loop_exit(completion: Completion) -> Optional[Completion]:
        """None to keep looping, otherwise the completion the loop ends with."""
        if completion.type is CompletionType.BREAK:
            return NORMAL
        if completion.type in (CompletionType.NORMAL, CompletionType.CONTINUE):
            return None
        return completion

    def exec_ForLoop(self, node: nodes.ForLoop, scopes: ScopeStack) -> Completion:
        iterable = self.eval_expr(node.expression, scopes)
        if type(iterable) is not list:
            raise TypeMismatch(f"for loop needs an Array, not {type_name(iterable)}")
        loop_var = node.loop_var
        for element in copy_value(iterable):
            with scopes.nested():
                if isinstance(loop_var, nodes.Name):
                    _, store = self._resolve_target(loop_var, scopes)
                    store(element)
                elif loop_var is not None:
                    scopes.define(loop_var, element)
                completion = self.exec_stmt(node.do_for_each, scopes)
            outcome = self._loop_exit(completion)
            if outcome is not None:
                return outcome
        return NORMAL

    def exec_WhileDoLoop(self, node: nodes.WhileDoLoop, scopes: ScopeStack) -> Completion:
        while require_boolean(self.eval_expr(node.expression, scopes), "loop condition"):
            outcome = self._loop_exit(self.exec_stmt(node.do_while, scopes))
            if outcome is not None:
                return outcome
        return NORMAL

    def exec_DoWhileLoop(self, node: nodes.DoWhileLoop, scopes: ScopeStack) -> Completion:
        while True:
            outcome = self._loop_exit(self.exec_stmt(node.do_while, scopes))
            if outcome is not None:
                return outcome
            if not require_boolean(self.eval_expr(node.expression, scopes), "loop condition"):
                return NORMAL

    def exec_TryCatch(self, node: nodes.TryCatch, scopes: ScopeStack) -> Completion:
        completion = self.exec_stmt(node.do_try, scopes)
        if completion.type is not CompletionType.THROW:
            return completion
        with scopes.nested():
            scopes.define(node.error, copy_value(completion.value))
            return self.exec_stmt(node.do_catch, scopes)
