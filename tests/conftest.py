from __future__ import annotations

import io
import sys
from pathlib import Path

# Allow importing the package when running plain `pytest` without an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

import pytest

from tscript import Interpreter
from tscript.nodes import Block


@pytest.fixture
def run_program():
    def _run(*items, check: bool = True, **options):
        if len(items) == 1 and isinstance(items[0], Block):
            program = items[0]
        else:
            program = Block(list(items))
        options.setdefault("output", io.StringIO())
        interpreter = Interpreter(**options)
        result = interpreter.run(program)
        if check:
            result.raise_for_exception()
        return result

    return _run
