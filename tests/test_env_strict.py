from __future__ import annotations

import io
import logging

import pytest
from builders import binop, block, call, do, func, name, printed, ret, try_

from tscript import ExecutionAborted, Interpreter, RunResult, StructuralError, UncaughtThrow
from tscript.functions import Builtin


@pytest.mark.parametrize(
    "options, error",
    [
        ({"output": "not a stream"}, TypeError),
        ({"modules": 3}, TypeError),
        ({"max_call_depth": 2.5}, TypeError),
        ({"max_call_depth": True}, TypeError),
        ({"max_call_depth": 0}, ValueError),
    ],
)
def test_constructor_validates_options(options, error):
    with pytest.raises(error):
        Interpreter(**options)


def test_builtins_must_be_a_mapping_of_callables():
    with pytest.raises(TypeError):
        Interpreter([("f", len)])
    with pytest.raises(TypeError):
        Interpreter({"f": 3})


def test_run_needs_a_block():
    with pytest.raises(TypeError):
        Interpreter().run([printed("x")])


def test_default_builtins(run_program):
    result = run_program(
        ret(
            [
                call("len", "abc"),
                call("len", [1, 2]),
                call("keys", {"b": 1, "a": 2}),
                call("str", [1, "a"]),
                call("type", 1.5),
                call("type", None),
            ]
        )
    )
    assert result.value == [3, 2, ["b", "a"], '[1, "a"]', "Real", "Null"]


def test_print_joins_its_arguments(run_program):
    result = run_program(printed("a", 1, True, None))
    assert result.output == "a 1 true null\n"


def test_print_writes_to_stdout_by_default(capsys):
    result = Interpreter().run(block(printed("hello")))
    assert result.ok
    assert capsys.readouterr().out == "hello\n"
    assert result.output == "hello\n"


def test_output_is_collected_per_run():
    stream = io.StringIO()
    interpreter = Interpreter(output=stream)
    first = interpreter.run(block(printed("one")))
    second = interpreter.run(block(printed("two")))
    assert (first.output, second.output) == ("one\n", "two\n")
    assert stream.getvalue() == "one\ntwo\n"


def test_register_builtin():
    interpreter = Interpreter(output=io.StringIO())
    interpreter.register_builtin("twice", lambda value: value * 2)
    assert isinstance(interpreter.builtins["twice"], Builtin)
    assert interpreter.run(block(ret(call("twice", 21)))).value == 42
    with pytest.raises(TypeError):
        interpreter.register_builtin("", len)


def test_user_builtins_override_defaults():
    lines = []
    interpreter = Interpreter({"print": lambda *values: lines.append(values)})
    interpreter.run(block(printed("x", 1)))
    assert lines == [("x", 1)]


def test_failing_builtin_raises_a_catchable_host_error(run_program):
    def explode():
        raise ValueError("kaboom")

    result = run_program(
        try_(block(do(call("explode"))), "e", block(ret(name("e")))),
        builtins={"explode": explode},
    )
    assert result.value["type"] == "HostError"
    assert "kaboom" in result.value["message"]


def test_builtin_returning_unsupported_value(run_program):
    result = run_program(ret(call("thing")), builtins={"thing": object}, check=False)
    assert isinstance(result.exception, UncaughtThrow)
    assert result.exception.value["type"] == "HostError"


def test_host_values_are_converted(run_program):
    result = run_program(
        ret(call("pair")),
        builtins={"pair": lambda: (1, {"k": (2.5, "s")})},
    )
    assert result.value == [1, {"k": [2.5, "s"]}]


def test_run_result():
    assert RunResult(value=1).ok
    failed = Interpreter(output=io.StringIO()).run(block(printed(name("missing"))))
    assert not failed.ok
    assert failed.value is None
    with pytest.raises(UncaughtThrow):
        failed.raise_for_exception()


def test_abort_stops_at_the_next_statement():
    stream = io.StringIO()
    interpreter = Interpreter(output=stream)
    interpreter.register_builtin("stop", interpreter.abort)
    result = interpreter.run(block(printed("before"), do(call("stop")), printed("after")))
    assert isinstance(result.exception, ExecutionAborted)
    assert isinstance(result.exception, StructuralError)
    assert result.output == "before\n"
    assert interpreter.run(block(ret(1))).value == 1


def test_nested_runs_from_a_builtin_keep_the_outer_state():
    stream = io.StringIO()
    interpreter = Interpreter(output=stream)

    def callback():
        return interpreter.run(block(printed("inner"))).output

    interpreter.register_builtin("callback", callback)
    result = interpreter.run(
        block(
            func("wrapped", [], ret(call("callback"))),
            printed("a"),
            do(call("wrapped")),
            printed("b"),
            ret(call("wrapped")),
        )
    )
    assert result.ok
    assert result.value == "inner\n"
    assert result.output == "a\nb\n"
    assert stream.getvalue() == "a\ninner\nb\ninner\n"
    assert interpreter._depth == 0


def test_call_depth_is_limited(run_program):
    result = run_program(
        func("down", ["n"], ret(call("down", binop(name("n"), "+", 1)))),
        do(call("down", 0)),
        max_call_depth=5,
        check=False,
    )
    assert isinstance(result.exception, UncaughtThrow)
    assert result.exception.value["type"] == "OperationNotPossible"
    assert "maximum call depth (5)" in result.exception.value["message"]


def test_call_depth_counts_nested_calls_only(run_program):
    program = [
        func("leaf", [], ret(1)),
        func("outer", [], ret(call("leaf"))),
    ]
    result = run_program(*program, ret([call("leaf"), call("leaf")]), max_call_depth=1)
    assert result.value == [1, 1]
    result = run_program(*program, ret(call("outer")), max_call_depth=1, check=False)
    assert result.exception.value["type"] == "OperationNotPossible"


def test_runs_are_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="tscript")
    Interpreter(output=io.StringIO()).run(block(ret(1)))
    messages = [record.getMessage() for record in caplog.records]
    assert "running program (1 top-level items)" in messages
    assert "program finished with 1" in messages
