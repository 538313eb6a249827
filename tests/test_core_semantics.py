from __future__ import annotations

from builders import (
    assign,
    binop,
    block,
    brk,
    call,
    cls,
    do,
    func,
    if_,
    item,
    name,
    namespace,
    printed,
    ret,
    var,
)

from tscript import ConflictWithPreviousDeclaration, ControlFlowError, UncaughtThrow


def test_nested_block_shadows_outer_variable(run_program):
    result = run_program(
        var("x", 1),
        block(var("x", 2), printed(name("x"))),
        printed(name("x")),
    )
    assert result.output == "2\n1\n"


def test_function_is_callable_before_its_declaration(run_program):
    result = run_program(
        printed(call("answer")),
        func("answer", [], ret(42)),
    )
    assert result.output == "42\n"


def test_mutually_recursive_functions(run_program):
    result = run_program(
        printed(call("is_even", 4)),
        func(
            "is_even",
            ["n"],
            if_(binop(name("n"), "==", 0), ret(True)),
            ret(call("is_odd", binop(name("n"), "-", 1))),
        ),
        func(
            "is_odd",
            ["n"],
            if_(binop(name("n"), "==", 0), ret(False)),
            ret(call("is_even", binop(name("n"), "-", 1))),
        ),
    )
    assert result.output == "true\n"


def test_variable_is_not_visible_before_its_declaration(run_program):
    result = run_program(printed(name("x")), var("x", 1), check=False)
    assert isinstance(result.exception, UncaughtThrow)
    assert result.exception.value["type"] == "UndefinedReference"


def test_redeclaring_a_variable_in_the_same_scope_conflicts(run_program):
    result = run_program(var("x", 1), var("x", 2), check=False)
    assert isinstance(result.exception, ConflictWithPreviousDeclaration)
    assert result.exception.identifier == "x"


def test_duplicate_declarations_fail_before_any_statement_runs(run_program):
    result = run_program(
        printed("never"),
        func("f", [], ret(1)),
        func("f", [], ret(2)),
        check=False,
    )
    assert isinstance(result.exception, ConflictWithPreviousDeclaration)
    assert result.output == ""


def test_variable_and_function_share_one_namespace_per_scope(run_program):
    result = run_program(func("f", [], ret(1)), var("f", 2), check=False)
    assert isinstance(result.exception, ConflictWithPreviousDeclaration)


def test_functions_see_their_declaring_scope_not_the_caller(run_program):
    result = run_program(
        var("x", "global"),
        func("show", [], ret(name("x"))),
        func("test", [], var("x", "local"), ret(call("show"))),
        printed(call("test")),
    )
    assert result.output == "global\n"


def test_function_sees_variables_defined_after_it(run_program):
    result = run_program(
        func("f", [], ret(name("y"))),
        var("y", 5),
        printed(call("f")),
    )
    assert result.output == "5\n"


def test_inner_block_declarations_are_not_visible_outside(run_program):
    result = run_program(
        block(func("g", [], ret(1))),
        do(call("g")),
        check=False,
    )
    assert result.exception.value["type"] == "UndefinedReference"


def test_user_function_shadows_builtin(run_program):
    result = run_program(
        func("len", ["x"], ret(42)),
        ret(call("len", [1])),
    )
    assert result.value == 42


def test_top_level_return_is_the_final_value(run_program):
    assert run_program(ret(binop(2, "*", 21))).value == 42
    assert run_program(var("x", 1)).value is None


def test_break_outside_a_loop_is_structural(run_program):
    result = run_program(brk(), check=False)
    assert isinstance(result.exception, ControlFlowError)


def test_arrays_are_copied_on_assignment(run_program):
    result = run_program(
        var("a", [1, 2]),
        var("b", name("a")),
        assign(item(name("b"), 0), 9),
        printed(name("a")),
        printed(name("b")),
    )
    assert result.output == "[1, 2]\n[9, 2]\n"


def test_arguments_are_copied_into_the_callee(run_program):
    result = run_program(
        func("mutate", ["xs"], assign(item(name("xs"), 0), 100)),
        var("a", [1]),
        do(call("mutate", name("a"))),
        printed(name("a")),
    )
    assert result.output == "[1]\n"


def test_nested_containers_are_updated_in_place(run_program):
    result = run_program(
        var("grid", [[0, 0], [0, 0]]),
        assign(item(item(name("grid"), 1), 0), 5),
        ret(name("grid")),
    )
    assert result.value == [[0, 0], [5, 0]]


def test_assigning_to_a_declaration_is_not_possible(run_program):
    result = run_program(func("f", [], ret(1)), assign("f", 1), check=False)
    assert result.exception.value["type"] == "OperationNotPossible"


def test_inner_function_shadows_outer_variable(run_program):
    result = run_program(
        var("f", 1),
        block(func("f", [], ret(2)), ret(call("f"))),
    )
    assert result.value == 2


def test_inner_class_shadows_outer_variable(run_program):
    result = run_program(
        var("Point", 1),
        block(cls("Point"), ret(call("type", call("Point")))),
    )
    assert result.value == "Object"


def test_assigning_to_a_shadowing_declaration_is_not_possible(run_program):
    result = run_program(
        var("f", 1),
        block(func("f", [], ret(2)), assign("f", 3)),
        check=False,
    )
    assert result.exception.value["type"] == "OperationNotPossible"
    assert "declaration 'f'" in result.exception.value["message"]


def test_namespace_keeps_its_variables_between_calls(run_program):
    result = run_program(
        namespace(
            "counter",
            var("count", 0),
            func("inc", [], assign("count", 1, "+="), ret(name("count"))),
        ),
        printed(call("counter.inc")),
        printed(call("counter.inc")),
        printed(name("counter.count")),
    )
    assert result.output == "1\n2\n2\n"


def test_nested_namespace_paths(run_program):
    result = run_program(
        namespace("a", namespace("b", func("f", [], ret("deep")))),
        ret(call("a.b.f")),
    )
    assert result.value == "deep"


def test_namespace_variable_can_be_assigned_through_its_path(run_program):
    result = run_program(
        namespace("config", var("level", 1)),
        assign("config.level", 3),
        ret(name("config.level")),
    )
    assert result.value == 3
