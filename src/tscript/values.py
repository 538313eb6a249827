"""Runtime value model and operator semantics.

Interpreted values are plain Python objects:

    Null        -> None
    Boolean     -> bool
    Number      -> int (32-bit signed range enforced)
    Real        -> float
    String      -> str
    Array       -> list
    Dictionary  -> dict (str keys)
    Object      -> objects.Instance

Functions, classes and namespaces become values when a declaration is read
through a name; they advertise their shape with a `shape` class attribute.
Objects are shared by reference, every other shape is a value type and is
copied whenever it is stored.
"""

from __future__ import annotations

import enum
import math
from typing import Any

from .errors import OperationNotPossible, TypeMismatch
from .nodes import AssignmentOperator, BinaryOperator, UnaryOperator

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


class Shape(enum.Enum):
    NULL = "Null"
    BOOLEAN = "Boolean"
    NUMBER = "Number"
    REAL = "Real"
    STRING = "String"
    ARRAY = "Array"
    DICTIONARY = "Dictionary"
    OBJECT = "Object"
    FUNCTION = "Function"
    CLASS = "Class"
    NAMESPACE = "Namespace"


_NUMERIC = frozenset({Shape.NUMBER, Shape.REAL})
_SCALAR_SHAPES = {
    type(None): Shape.NULL,
    bool: Shape.BOOLEAN,
    int: Shape.NUMBER,
    float: Shape.REAL,
    str: Shape.STRING,
    list: Shape.ARRAY,
    dict: Shape.DICTIONARY,
}


def shape_of(value: Any) -> Shape:
    # type() rather than isinstance(): bool is an int subclass.
    shape = _SCALAR_SHAPES.get(type(value))
    if shape is not None:
        return shape
    shape = getattr(type(value), "shape", None)
    if isinstance(shape, Shape):
        return shape
    raise TypeError(f"not an interpreter value: {type(value).__name__}")


def type_name(value: Any) -> str:
    return shape_of(value).value


def is_number(value: Any) -> bool:
    return type(value) is int


def is_numeric(value: Any) -> bool:
    return type(value) in (int, float)


def copy_value(value: Any) -> Any:
    """Copy value types; objects and callables stay shared."""
    if type(value) is list:
        return [copy_value(item) for item in value]
    if type(value) is dict:
        return {key: copy_value(item) for key, item in value.items()}
    return value


def check_number(value: int) -> int:
    if value < INT_MIN or value > INT_MAX:
        raise OperationNotPossible(f"integer overflow: {value} does not fit in 32 bits")
    return value


def require_boolean(value: Any, what: str) -> bool:
    if type(value) is not bool:
        raise TypeMismatch(f"{what} must be a Boolean, not {type_name(value)}")
    return value


# ----------------------------
# formatting
# ----------------------------


def format_value(value: Any, *, nested: bool = False) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if type(value) is str:
        return f'"{value}"' if nested else value
    if type(value) is list:
        return "[" + ", ".join(format_value(item, nested=True) for item in value) + "]"
    if type(value) is dict:
        entries = (f'"{key}": {format_value(item, nested=True)}' for key, item in value.items())
        return "{" + ", ".join(entries) + "}"
    return repr(value)


# ----------------------------
# comparison
# ----------------------------


def values_equal(left: Any, right: Any) -> bool:
    left_shape = shape_of(left)
    right_shape = shape_of(right)
    if left_shape in _NUMERIC and right_shape in _NUMERIC:
        return left == right
    if left_shape is not right_shape:
        return False
    if left_shape is Shape.ARRAY:
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if left_shape is Shape.DICTIONARY:
        return left.keys() == right.keys() and all(
            values_equal(item, right[key]) for key, item in left.items()
        )
    if left_shape is Shape.OBJECT:
        return left is right
    return left == right


def compare_values(left: Any, right: Any) -> int:
    """Three-way comparison; raises OperationNotPossible for unordered pairs."""
    left_shape = shape_of(left)
    right_shape = shape_of(right)
    if left_shape in _NUMERIC and right_shape in _NUMERIC:
        pass
    elif left_shape is Shape.STRING and right_shape is Shape.STRING:
        pass
    elif left_shape is Shape.ARRAY and right_shape is Shape.ARRAY:
        for a, b in zip(left, right):
            order = compare_values(a, b)
            if order:
                return order
        return (len(left) > len(right)) - (len(left) < len(right))
    else:
        raise OperationNotPossible(
            f"cannot compare {left_shape.value} and {right_shape.value}"
        )
    if left != left or right != right:
        raise OperationNotPossible("cannot order NaN")
    return (left > right) - (left < right)


# ----------------------------
# arithmetic
# ----------------------------


def _require_numeric(op: Any, left: Any, right: Any) -> None:
    if not (is_numeric(left) and is_numeric(right)):
        raise OperationNotPossible(
            f"cannot apply '{op.value}' to {type_name(left)} and {type_name(right)}"
        )


def _require_nonzero(right: Any) -> None:
    if right == 0:
        raise OperationNotPossible("division by zero")


def _truncating_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _numeric_result(left: Any, right: Any, result: Any) -> Any:
    if is_number(left) and is_number(right):
        return check_number(result)
    return float(result)


def _power(left: Any, right: Any) -> Any:
    if is_number(left) and is_number(right) and right >= 0:
        return check_number(left**right)
    try:
        return math.pow(float(left), float(right))
    except (OverflowError, ValueError) as exc:
        raise OperationNotPossible(f"cannot raise {left!r} to {right!r}: {exc}") from exc


def make_range(start: Any, stop: Any) -> list:
    if not (is_number(start) and is_number(stop)):
        raise OperationNotPossible(
            f"range bounds must be Numbers, not {type_name(start)} and {type_name(stop)}"
        )
    return list(range(start, stop + 1))


def unary_operate(op: UnaryOperator, operand: Any) -> Any:
    if op is UnaryOperator.NOT:
        if type(operand) is not bool:
            raise OperationNotPossible(f"cannot apply 'not' to {type_name(operand)}")
        return not operand
    if not is_numeric(operand):
        raise OperationNotPossible(f"cannot apply unary '{op.value}' to {type_name(operand)}")
    if op is UnaryOperator.ADD:
        return operand
    if op is UnaryOperator.SUB:
        return check_number(-operand) if is_number(operand) else -operand
    raise NotImplementedError(f"UnaryOperator {op} not supported")


def binary_operate(op: BinaryOperator, left: Any, right: Any) -> Any:
    """Apply `op` to two already-evaluated operands."""
    if op is BinaryOperator.EQ:
        return values_equal(left, right)
    if op is BinaryOperator.NEQ:
        return not values_equal(left, right)
    if op is BinaryOperator.LT:
        return compare_values(left, right) < 0
    if op is BinaryOperator.GT:
        return compare_values(left, right) > 0
    if op is BinaryOperator.LEQ:
        return compare_values(left, right) <= 0
    if op is BinaryOperator.GEQ:
        return compare_values(left, right) >= 0

    if op in (BinaryOperator.AND, BinaryOperator.OR, BinaryOperator.XOR):
        if type(left) is not bool or type(right) is not bool:
            raise OperationNotPossible(
                f"cannot apply '{op.value}' to {type_name(left)} and {type_name(right)}"
            )
        if op is BinaryOperator.AND:
            return left and right
        if op is BinaryOperator.OR:
            return left or right
        return left != right

    if op is BinaryOperator.RANGE:
        return make_range(left, right)

    _require_numeric(op, left, right)
    if op is BinaryOperator.ADD:
        return _numeric_result(left, right, left + right)
    if op is BinaryOperator.SUB:
        return _numeric_result(left, right, left - right)
    if op is BinaryOperator.MUL:
        return _numeric_result(left, right, left * right)
    if op is BinaryOperator.RDIV:
        _require_nonzero(right)
        return float(left) / float(right)
    if op is BinaryOperator.IDIV:
        _require_nonzero(right)
        if is_number(left) and is_number(right):
            return check_number(_truncating_div(left, right))
        quotient = left / right
        return float(math.trunc(quotient)) if math.isfinite(quotient) else quotient
    if op is BinaryOperator.MOD:
        _require_nonzero(right)
        if is_number(left) and is_number(right):
            return left - right * _truncating_div(left, right)
        return math.fmod(left, right)
    if op is BinaryOperator.POW:
        return _power(left, right)
    raise NotImplementedError(f"BinaryOperator {op} not supported")


_COMPOUND_OPERATORS = {
    AssignmentOperator.ADD: BinaryOperator.ADD,
    AssignmentOperator.SUB: BinaryOperator.SUB,
    AssignmentOperator.MUL: BinaryOperator.MUL,
    AssignmentOperator.DIV: BinaryOperator.RDIV,
    AssignmentOperator.MOD: BinaryOperator.MOD,
    AssignmentOperator.EXP: BinaryOperator.POW,
}


def compound_operator(op: AssignmentOperator) -> BinaryOperator:
    return _COMPOUND_OPERATORS[op]
