"""Terse AST factories used by the tests in place of a parser.

Plain Python scalars, lists and dicts passed where an expression is expected
become literals; use `name("a.b")` to reference a binding.
"""

from __future__ import annotations

from typing import Any

from tscript import nodes as n


def expr(value: Any) -> n.Node:
    if isinstance(value, n.Node):
        return value
    if isinstance(value, list):
        return n.ArrayLiteral([expr(item) for item in value])
    if isinstance(value, dict):
        return n.DictionaryLiteral([(key, expr(item)) for key, item in value.items()])
    return n.Literal(value)


def name(dotted: str) -> n.Name:
    return n.Name.of(dotted)


def block(*items: n.Node) -> n.Block:
    return n.Block(list(items))


def _body(items: tuple) -> n.Block:
    if len(items) == 1 and isinstance(items[0], n.Block):
        return items[0]
    return block(*items)


def _params(params: Any) -> list[n.Parameter]:
    out = []
    for param in params:
        if isinstance(param, tuple):
            out.append(n.Parameter(param[0], expr(param[1])))
        else:
            out.append(n.Parameter(param))
    return out


# ----- expressions -----


def binop(left: Any, op: str, right: Any) -> n.BinaryOperation:
    return n.BinaryOperation(expr(left), n.BinaryOperator(op), expr(right))


def unop(op: str, operand: Any) -> n.UnaryOperation:
    return n.UnaryOperation(n.UnaryOperator(op), expr(operand))


def call(callee: Any, *args: Any, **named: Any) -> n.FunctionCall:
    if isinstance(callee, str):
        callee = name(callee)
    arguments = [n.FunctionCallArgument(expr(arg)) for arg in args]
    arguments += [n.FunctionCallArgument(expr(value), key) for key, value in named.items()]
    return n.FunctionCall(callee, arguments)


def member(obj: Any, identifier: str) -> n.MemberAccess:
    return n.MemberAccess(expr(obj), identifier)


def item(container: Any, index: Any) -> n.ItemAccess:
    return n.ItemAccess(expr(container), expr(index))


# ----- statements -----


def var(identifier: str, value: Any = None) -> n.VariableDeclaration:
    initializer = None if value is None else expr(value)
    return n.VariableDeclaration([n.Variable(identifier, initializer)])


def assign(target: Any, value: Any, op: str = "=") -> n.Assignment:
    if isinstance(target, str):
        target = name(target)
    return n.Assignment(target, expr(value), n.AssignmentOperator(op))


def do(expression: Any) -> n.ExpressionStatement:
    return n.ExpressionStatement(expr(expression))


def printed(*args: Any) -> n.ExpressionStatement:
    return do(call("print", *args))


def ret(value: Any = None) -> n.Return:
    return n.Return(None if value is None else expr(value))


def throw(value: Any) -> n.Throw:
    return n.Throw(expr(value))


def brk() -> n.Break:
    return n.Break()


def cont() -> n.Continue:
    return n.Continue()


def if_(condition: Any, then: n.Node, otherwise: n.Node | None = None) -> n.Condition:
    return n.Condition(expr(condition), then, otherwise)


def for_(loop_var: Any, iterable: Any, *body: n.Node) -> n.ForLoop:
    return n.ForLoop(loop_var, expr(iterable), _body(body))


def while_(condition: Any, *body: n.Node) -> n.WhileDoLoop:
    return n.WhileDoLoop(expr(condition), _body(body))


def do_while(condition: Any, *body: n.Node) -> n.DoWhileLoop:
    return n.DoWhileLoop(expr(condition), _body(body))


def try_(do_try: n.Node, error: str, do_catch: n.Node) -> n.TryCatch:
    return n.TryCatch(do_try, error, do_catch)


# ----- declarations -----


def func(identifier: str, params: Any, *body: n.Node) -> n.Function:
    return n.Function(identifier, _params(params), _body(body))


def namespace(identifier: str, *items: n.Node) -> n.Namespace:
    return n.Namespace(identifier, block(*items))


def cls(
    identifier: str,
    *,
    extends: str | None = None,
    public: Any = (),
    private: Any = (),
    protected: Any = (),
) -> n.Class:
    return n.Class(
        identifier,
        None if extends is None else name(extends),
        list(public),
        list(private),
        list(protected),
    )


def field(identifier: str, value: Any = None, *, static: bool = False) -> n.Node:
    declaration = var(identifier, value)
    return n.StaticDeclaration(declaration) if static else n.InstanceDeclaration(declaration)


def method(identifier: str, params: Any, *body: n.Node, static: bool = False) -> n.Node:
    declaration = func(identifier, params, *body)
    return n.StaticDeclaration(declaration) if static else n.InstanceDeclaration(declaration)


def ctor(params: Any, *body: n.Node, super_args: Any = ()) -> n.Constructor:
    return n.Constructor(_params(params), _body(body), [expr(arg) for arg in super_args])


def use(*imports: n.Node, source: str | None = None) -> n.UseDirective:
    return n.UseDirective(list(imports), None if source is None else name(source))


def imp(dotted: str, alias: str | None = None) -> n.ImportName:
    return n.ImportName(name(dotted), alias)


def imp_ns(dotted: str) -> n.ImportNamespace:
    return n.ImportNamespace(name(dotted))
