from typing import Any, Callable

from ..errors import OperationNotPossible
from ..values import format_value, type_name

_SIZED = (list, dict, str)


def _len(value: Any) -> int:
    if type(value) not in _SIZED:
        raise OperationNotPossible(
            f"len() needs an Array, Dictionary or String, not {type_name(value)}"
        )
    return len(value)


def _str(value: Any) -> str:
    return format_value(value)


def _keys(value: Any) -> list:
    if type(value) is not dict:
        raise OperationNotPossible(f"keys() needs a Dictionary, not {type_name(value)}")
    return list(value)


def _type(value: Any) -> str:
    return type_name(value)


def make_default_builtins(write: Callable[[str], Any]) -> dict[str, Callable[..., Any]]:
    """Build the default built-in registry; `print` sends its text to `write`."""

    def _print(*values: Any) -> None:
        write(" ".join(format_value(value) for value in values) + "\n")

    return {
        "print": _print,
        "len": _len,
        "str": _str,
        "keys": _keys,
        "type": _type,
    }
