from __future__ import annotations

import enum
from typing import Any


class CompletionType(enum.Enum):
    NORMAL = "normal"
    BREAK = "break"
    CONTINUE = "continue"
    RETURN = "return"
    THROW = "throw"


class Completion:
    """Outcome of executing one statement.

    Anything but NORMAL is abrupt and travels outward until the construct that
    owns it absorbs it: loops take BREAK/CONTINUE, calls take RETURN and
    try/catch takes THROW.
    """

    __slots__ = ("type", "value")

    def __init__(self, type: CompletionType, value: Any = None):
        self.type = type
        self.value = value

    @property
    def is_abrupt(self) -> bool:
        return self.type is not CompletionType.NORMAL

    @classmethod
    def returned(cls, value: Any = None) -> "Completion":
        return cls(CompletionType.RETURN, value)

    @classmethod
    def thrown(cls, value: Any) -> "Completion":
        return cls(CompletionType.THROW, value)

    def __repr__(self) -> str:
        if self.type in (CompletionType.BREAK, CompletionType.CONTINUE):
            return f"<Completion {self.type.value}>"
        return f"<Completion {self.type.value} {self.value!r}>"


NORMAL = Completion(CompletionType.NORMAL)
BREAK = Completion(CompletionType.BREAK)
CONTINUE = Completion(CompletionType.CONTINUE)
