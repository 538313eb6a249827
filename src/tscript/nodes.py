"""AST node definitions consumed by the interpreter.

The external parser produces a tree of these nodes rooted at a `Block`.
Nodes are immutable and compared by identity; the interpreter only keeps
references into the tree and never rewrites it.
"""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass, field
from typing import Optional, Union

Identifier = str


def ident(text: str) -> Identifier:
    return sys.intern(text)


class Node:
    """Common base for every AST node."""


class Statement(Node):
    pass


class Expression(Node):
    pass


class Declaration(Node):
    pass


class Directive(Node):
    pass


# ----------------------------
# names
# ----------------------------


@dataclass(frozen=True, eq=False)
class Name(Expression):
    """A qualified path such as `outer.inner.value`."""

    parts: tuple[Identifier, ...]

    def __post_init__(self) -> None:
        parts = tuple(ident(part) for part in self.parts)
        if not parts:
            raise ValueError("a name needs at least one identifier")
        object.__setattr__(self, "parts", parts)

    @classmethod
    def of(cls, dotted: str) -> "Name":
        return cls(tuple(dotted.split(".")))

    @property
    def head(self) -> Identifier:
        return self.parts[0]

    @property
    def last(self) -> Identifier:
        return self.parts[-1]

    def __str__(self) -> str:
        return ".".join(self.parts)


# ----------------------------
# operators
# ----------------------------


class UnaryOperator(enum.Enum):
    NOT = "not"
    ADD = "+"
    SUB = "-"


class BinaryOperator(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    RDIV = "/"
    IDIV = "//"
    MOD = "%"
    POW = "^"
    EQ = "=="
    NEQ = "!="
    LT = "<"
    GT = ">"
    LEQ = "<="
    GEQ = ">="
    AND = "and"
    OR = "or"
    XOR = "xor"
    RANGE = ":"


class AssignmentOperator(enum.Enum):
    EQUALS = "="
    ADD = "+="
    SUB = "-="
    MUL = "*="
    DIV = "/="
    MOD = "%="
    EXP = "^="


class GroupKind(enum.Enum):
    ROUNDED = "()"
    SQUARE = "[]"
    CURLY = "{}"


# ----------------------------
# expressions
# ----------------------------


@dataclass(frozen=True, eq=False)
class Literal(Expression):
    """Null, Boolean, Integer, Real or String literal (a Python scalar)."""

    value: Union[None, bool, int, float, str]


@dataclass(frozen=True, eq=False)
class ArrayLiteral(Expression):
    elements: list[Expression] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class DictionaryLiteral(Expression):
    entries: list[tuple[str, Expression]] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class LambdaLiteral(Expression):
    pass


@dataclass(frozen=True, eq=False)
class Group(Expression):
    expression: Expression
    kind: GroupKind = GroupKind.ROUNDED


@dataclass(frozen=True, eq=False)
class UnaryOperation(Expression):
    operator: UnaryOperator
    expression: Expression


@dataclass(frozen=True, eq=False)
class BinaryOperation(Expression):
    left: Expression
    operator: BinaryOperator
    right: Expression


@dataclass(frozen=True, eq=False)
class FunctionCallArgument(Node):
    expression: Expression
    identifier: Optional[Identifier] = None


@dataclass(frozen=True, eq=False)
class FunctionCall(Expression):
    expression: Expression
    arguments: list[FunctionCallArgument] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class ItemAccess(Expression):
    container: Expression
    index: Expression


@dataclass(frozen=True, eq=False)
class MemberAccess(Expression):
    expression: Expression
    identifier: Identifier


# ----------------------------
# blocks and declarations
# ----------------------------


@dataclass(frozen=True, eq=False)
class Block(Statement):
    items: list[Node] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class Variable(Node):
    identifier: Identifier
    expression: Optional[Expression] = None


@dataclass(frozen=True, eq=False)
class VariableDeclaration(Declaration):
    variables: list[Variable]


@dataclass(frozen=True, eq=False)
class Parameter(Node):
    identifier: Identifier
    expression: Optional[Expression] = None


@dataclass(frozen=True, eq=False)
class Function(Declaration):
    identifier: Identifier
    parameters: list[Parameter]
    body: Block


@dataclass(frozen=True, eq=False)
class Constructor(Node):
    parameters: list[Parameter]
    body: Block
    super_parameters: list[Expression] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class StaticDeclaration(Node):
    declaration: Declaration


@dataclass(frozen=True, eq=False)
class InstanceDeclaration(Node):
    declaration: Declaration


ClassItem = Union[Constructor, StaticDeclaration, InstanceDeclaration, Directive]


@dataclass(frozen=True, eq=False)
class Class(Declaration):
    identifier: Identifier
    extends: Optional[Name] = None
    public_items: list[ClassItem] = field(default_factory=list)
    private_items: list[ClassItem] = field(default_factory=list)
    protected_items: list[ClassItem] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class Namespace(Declaration):
    identifier: Identifier
    body: Block


# ----------------------------
# directives
# ----------------------------


@dataclass(frozen=True, eq=False)
class ImportNamespace(Node):
    name: Name


@dataclass(frozen=True, eq=False)
class ImportName(Node):
    name: Name
    alias: Optional[Identifier] = None


@dataclass(frozen=True, eq=False)
class UseDirective(Directive):
    imports: list[Union[ImportNamespace, ImportName]] = field(default_factory=list)
    source: Optional[Name] = None


# ----------------------------
# statements
# ----------------------------


LeftHandSide = Union[Name, ItemAccess, MemberAccess]


@dataclass(frozen=True, eq=False)
class Assignment(Statement):
    left_hand_side: LeftHandSide
    expression: Expression
    operation: AssignmentOperator = AssignmentOperator.EQUALS


@dataclass(frozen=True, eq=False)
class ExpressionStatement(Statement):
    expression: Expression


@dataclass(frozen=True, eq=False)
class Condition(Statement):
    expression: Expression
    do_then: Statement
    do_else: Optional[Statement] = None


@dataclass(frozen=True, eq=False)
class ForLoop(Statement):
    # An Identifier declares a fresh per-iteration variable; a Name assigns
    # to an existing binding.
    loop_var: Union[Identifier, Name, None]
    expression: Expression
    do_for_each: Statement


@dataclass(frozen=True, eq=False)
class WhileDoLoop(Statement):
    expression: Expression
    do_while: Statement


@dataclass(frozen=True, eq=False)
class DoWhileLoop(Statement):
    expression: Expression
    do_while: Statement


@dataclass(frozen=True, eq=False)
class Break(Statement):
    pass


@dataclass(frozen=True, eq=False)
class Continue(Statement):
    pass


@dataclass(frozen=True, eq=False)
class Return(Statement):
    expression: Optional[Expression] = None


@dataclass(frozen=True, eq=False)
class Throw(Statement):
    expression: Expression


@dataclass(frozen=True, eq=False)
class TryCatch(Statement):
    do_try: Statement
    error: Identifier
    do_catch: Statement


HOISTED_DECLARATIONS: tuple[type, ...] = (Function, Class, Namespace)
