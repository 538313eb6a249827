from __future__ import annotations

from .core import InterpreterCore
from .expressions import ExpressionMixin
from .helpers import HelperMixin
from .resolver import DeclarationMixin
from .statements import StatementMixin


class Interpreter(StatementMixin, ExpressionMixin, HelperMixin, DeclarationMixin, InterpreterCore):
    pass
