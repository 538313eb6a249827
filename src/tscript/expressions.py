from __future__ import annotations

from typing import Any, Dict

from . import nodes
from .errors import OperationNotPossible
from .scopes import ScopeStack
from .values import binary_operate, check_number, copy_value, unary_operate

_SHORT_CIRCUIT = (nodes.BinaryOperator.AND, nodes.BinaryOperator.OR)


class ExpressionMixin:
    def eval_Literal(self, node: nodes.Literal, scopes: ScopeStack) -> Any:
        value = node.value
        if value is not None and type(value) not in (bool, int, float, str):
            raise OperationNotPossible(f"unsupported literal {value!r}")
        if type(value) is int:
            return check_number(value)
        return value

    def eval_ArrayLiteral(self, node: nodes.ArrayLiteral, scopes: ScopeStack) -> list:
        return [copy_value(self.eval_expr(element, scopes)) for element in node.elements]

    def eval_DictionaryLiteral(self, node: nodes.DictionaryLiteral, scopes: ScopeStack) -> dict:
        out: Dict[str, Any] = {}
        for key, expression in node.entries:
            out[key] = copy_value(self.eval_expr(expression, scopes))
        return out

    def eval_LambdaLiteral(self, node: nodes.LambdaLiteral, scopes: ScopeStack) -> Any:
        raise OperationNotPossible("lambda literals are not supported")

    def eval_Group(self, node: nodes.Group, scopes: ScopeStack) -> Any:
        return self.eval_expr(node.expression, scopes)

    def eval_Name(self, node: nodes.Name, scopes: ScopeStack) -> Any:
        return self._load_name(node, scopes)

    def eval_UnaryOperation(self, node: nodes.UnaryOperation, scopes: ScopeStack) -> Any:
        return unary_operate(node.operator, self.eval_expr(node.expression, scopes))

    def eval_BinaryOperation(self, node: nodes.BinaryOperation, scopes: ScopeStack) -> Any:
        op = node.operator
        left = self.eval_expr(node.left, scopes)
        if op in _SHORT_CIRCUIT and type(left) is bool and left is (op is nodes.BinaryOperator.OR):
            return left
        right = self.eval_expr(node.right, scopes)
        return binary_operate(op, left, right)

    def eval_FunctionCall(self, node: nodes.FunctionCall, scopes: ScopeStack) -> Any:
        callee = self.eval_expr(node.expression, scopes)
        args: list = []
        named: Dict[str, Any] = {}
        for argument in node.arguments:
            value = copy_value(self.eval_expr(argument.expression, scopes))
            if argument.identifier is None:
                args.append(value)
            elif argument.identifier in named:
                raise OperationNotPossible(f"named argument '{argument.identifier}' given twice")
            else:
                named[argument.identifier] = value
        return self._call(callee, args, named, scopes)

    def eval_ItemAccess(self, node: nodes.ItemAccess, scopes: ScopeStack) -> Any:
        container = self.eval_expr(node.container, scopes)
        index = self.eval_expr(node.index, scopes)
        return self._get_item(container, index)

    def eval_MemberAccess(self, node: nodes.MemberAccess, scopes: ScopeStack) -> Any:
        obj = self.eval_expr(node.expression, scopes)
        return self._get_member(obj, node.identifier, scopes)
