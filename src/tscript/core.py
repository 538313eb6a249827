from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, TextIO, Union

from . import nodes
from .common import NORMAL, Completion, CompletionType
from .errors import (
    ControlFlowError,
    ExecutionAborted,
    InterpreterError,
    RuntimeFault,
    UncaughtThrow,
)
from .functions import Builtin
from .lib import ModuleLoader, make_default_builtins
from .objects import ClassValue
from .scopes import ScopeStack
from .values import format_value

logger = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 64

ModuleSource = Union[Mapping[str, nodes.Block], Callable[[str], Optional[nodes.Block]]]


@dataclass
class RunResult:
    value: Any = None
    exception: Optional[InterpreterError] = None
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.exception is None

    def raise_for_exception(self) -> None:
        if self.exception is not None:
            raise self.exception


class InterpreterCore:
    def __init__(
        self,
        builtins: Optional[Mapping[str, Callable[..., Any]]] = None,
        *,
        output: Optional[TextIO] = None,
        modules: Optional[ModuleSource] = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    ):
        """
        builtins:
          - None -> the default registry (print, len, str, keys, type)
          - a mapping name -> callable, added on top of the defaults
        output:
          stream `print` writes to; None means sys.stdout at call time
        modules:
          - None -> `use ... from` always fails
          - mapping of dotted module name -> Block
          - callable(name) -> Block or None
        """
        if output is not None and not callable(getattr(output, "write", None)):
            raise TypeError("output must be a writable text stream or None")
        if modules is not None and not isinstance(modules, Mapping) and not callable(modules):
            raise TypeError("modules must be a mapping, a callable or None")
        if type(max_call_depth) is not int:
            raise TypeError("max_call_depth must be an int")
        if max_call_depth < 1:
            raise ValueError("max_call_depth must be at least 1")

        self.output = output
        self.max_call_depth = max_call_depth
        self.modules = ModuleLoader(self, modules)
        self.builtins: Dict[str, Builtin] = {}
        for name, func in make_default_builtins(self._write).items():
            self.register_builtin(name, func)
        if builtins is not None:
            if not isinstance(builtins, Mapping):
                raise TypeError("builtins must be a mapping or None")
            for name, func in builtins.items():
                self.register_builtin(name, func)

        self._depth = 0
        self._abort_requested = False
        self._finalizing: set[ClassValue] = set()
        self._transcript: list[str] = []

    def register_builtin(self, name: str, func: Callable[..., Any]) -> None:
        if not isinstance(name, str) or not name:
            raise TypeError("built-in name must be a non-empty string")
        if not isinstance(func, Builtin):
            func = Builtin(name, func)
        self.builtins[nodes.ident(name)] = func

    def abort(self) -> None:
        """Ask a running program to stop at its next statement."""
        self._abort_requested = True

    def _write(self, text: str) -> None:
        self._transcript.append(text)
        stream = self.output if self.output is not None else sys.stdout
        stream.write(text)

    # ----- run -----

    def make_global_scopes(self) -> ScopeStack:
        """A fresh stack whose outermost declaration frame holds the built-ins."""
        return ScopeStack([dict(self.builtins)], [{}])

    def run(self, program: nodes.Block) -> RunResult:
        """
        Execute `program` in fresh global scopes.

        Errors reported by the interpreter are captured in the result; host
        bugs (anything that is not an InterpreterError) propagate. A host
        callback may call run() again; the outer run's state is restored
        afterwards.
        """
        if not isinstance(program, nodes.Block):
            raise TypeError("program must be a Block")
        saved = (self._abort_requested, self._depth, self._transcript)
        self._abort_requested = False
        self._depth = 0
        self._transcript = []
        try:
            return self._run(program)
        finally:
            self._abort_requested, self._depth, self._transcript = saved

    def _run(self, program: nodes.Block) -> RunResult:
        logger.debug("running program (%d top-level items)", len(program.items))
        try:
            completion = self.exec_stmt(program, self.make_global_scopes())
            value = self._finish_program(completion)
        except InterpreterError as exc:
            logger.debug("program failed: %s: %s", type(exc).__name__, exc)
            return RunResult(exception=exc, output="".join(self._transcript))
        logger.debug("program finished with %s", format_value(value, nested=True))
        return RunResult(value=value, output="".join(self._transcript))

    def _finish_program(self, completion: Completion) -> Any:
        kind = completion.type
        if kind is CompletionType.NORMAL:
            return None
        if kind is CompletionType.RETURN:
            return completion.value
        if kind is CompletionType.THROW:
            message = format_value(completion.value, nested=True)
            logger.debug("uncaught throw: %s", message)
            raise UncaughtThrow(completion.value, message)
        raise ControlFlowError(f"'{kind.value}' outside of a loop")

    # ----- dispatch -----

    def exec_items(self, items: list, scopes: ScopeStack) -> Completion:
        for item in items:
            completion = self.exec_stmt(item, scopes)
            if completion.is_abrupt:
                return completion
        return NORMAL

    def exec_stmt(self, node: nodes.Node, scopes: ScopeStack) -> Completion:
        if self._abort_requested:
            logger.debug("execution aborted by the host")
            raise ExecutionAborted("execution aborted by the host")
        m = getattr(self, f"exec_{node.__class__.__name__}", None)
        if m is None:
            raise NotImplementedError(f"Statement not supported: {node.__class__.__name__}")
        try:
            return m(node, scopes)
        except RuntimeFault as exc:
            return Completion.thrown(exc.to_value())

    def eval_expr(self, node: nodes.Node, scopes: ScopeStack) -> Any:
        m = getattr(self, f"eval_{node.__class__.__name__}", None)
        if m is None:
            raise NotImplementedError(f"Expression not supported: {node.__class__.__name__}")
        return m(node, scopes)
