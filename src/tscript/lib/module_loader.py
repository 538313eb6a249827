from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .. import nodes
from ..common import CompletionType
from ..errors import OperationNotPossible, ThrownValue, UndefinedReference
from ..objects import NamespaceValue

logger = logging.getLogger(__name__)


class ModuleLoader:
    """Resolves `use ... from <module>` by executing host-provided programs once."""

    def __init__(self, interpreter: Any, modules: Any = None):
        self.interpreter = interpreter
        self.source = modules
        self.modules: dict[str, NamespaceValue] = {}
        # modules whose top level threw: name -> thrown value
        self.failures: dict[str, Any] = {}
        self._loading: set[str] = set()

    def _find(self, name: str) -> nodes.Block:
        program = None
        if isinstance(self.source, Mapping):
            program = self.source.get(name)
        elif self.source is not None:
            program = self.source(name)
        if program is None:
            raise UndefinedReference(f"module '{name}' not found")
        if not isinstance(program, nodes.Block):
            raise OperationNotPossible(f"module '{name}' is not a program block")
        return program

    def load(self, name: str) -> NamespaceValue:
        existing = self.modules.get(name)
        if existing is not None:
            return existing
        if name in self.failures:
            raise ThrownValue(self.failures[name])
        if name in self._loading:
            raise OperationNotPossible(f"circular use of module '{name}'")

        program = self._find(name)
        logger.debug("loading module %s", name)
        interpreter = self.interpreter
        scopes = interpreter.make_global_scopes()
        scopes.push()
        module = NamespaceValue(name, scopes)

        self._loading.add(name)
        try:
            interpreter._hoist(program.items, scopes)
            completion = interpreter.exec_items(program.items, scopes)
        finally:
            self._loading.discard(name)
        if completion.type is CompletionType.THROW:
            logger.debug("module %s failed while loading", name)
            self.failures[name] = completion.value
            raise ThrownValue(completion.value)
        if completion.type is not CompletionType.RETURN:
            interpreter._finish_program(completion)

        module.initialized = True
        self.modules[name] = module
        return module
