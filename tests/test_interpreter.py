import pytest

from dialang import Dialog, run_program
from dialang.errors import ScriptRuntimeError
from dialang.types import BooleanVal, FloatVal, IntegerVal, StringVal, to_float32, to_string

T = BooleanVal(True)
F = BooleanVal(False)


def test_division_always_yields_float():
    assert run_program('<< 5 / 2') == [FloatVal(2.5)]
    assert run_program('<< 4 / 2') == [FloatVal(2.0)]


def test_integer_addition_stays_integer():
    assert run_program('a = 1\na = a + 1\n<< a') == [IntegerVal(2)]
    assert run_program('<< 1 + 1.5') == [FloatVal(2.5)]


def test_string_concatenation_wins():
    assert run_program('<< "x" + 1') == [StringVal('x1')]
    assert run_program('<< 1.5 + "x"') == [StringVal('1.5x')]
    assert run_program('<< true + ""') == [StringVal('true')]


def test_while_loop():
    assert run_program('i = 0\nwhile i < 3\n  << i\n  i = i + 1') == [IntegerVal(0), IntegerVal(1), IntegerVal(2)]


def test_if_else():
    assert run_program('if 1 > 0\n  << "yes"\nelse\n  << "no"') == [StringVal('yes')]


def test_else_if_takes_first_true_branch():
    text = 'x = 5\nif x > 10\n  << "big"\nelse if x > 3\n  << "medium"\nelse if x > 1\n  << "small"\n'
    assert run_program(text) == [StringVal('medium')]
    assert run_program('if false\n  << 1') == []


def test_interpolation():
    assert run_program('name = "Bob"\n<< "Hi {name}!"') == [StringVal('Hi Bob!')]


def test_interpolation_display_forms():
    text = 'x = 2.50\n<< "{x} {true} {1 / 4} {10 / 2} {-3}"'
    assert run_program(text) == [StringVal('2.5 true 0.25 5 -3')]


def test_output_count_matches_executed_statements():
    text = 'i = 0\nwhile i < 3\n  j = 0\n  while j < 2\n    << i * 10 + j\n    j = j + 1\n  i = i + 1'
    assert [v.value for v in run_program(text)] == [0, 1, 10, 11, 20, 21]


def test_loop_guard():
    produced = []
    with pytest.raises(ScriptRuntimeError, match='More than 100 iterations exceeded at line 1') as exc:
        for item in Dialog(max_loop_iterations=100).run('while true\n  << 1'):
            produced.append(item)
    assert len(produced) == 100
    assert exc.value.line == 1


def test_loop_guard_resets_when_loop_ends():
    text = 'n = 0\nwhile n < 3\n  i = 0\n  while i < 60\n    i = i + 1\n  n = n + 1\n<< n'
    assert run_program(text) == [IntegerVal(3)]


def test_zero_iterations_allowed():
    with pytest.raises(ScriptRuntimeError):
        run_program('while true\n  << 1', max_loop_iterations=0)
    assert run_program('while false\n  << 1', max_loop_iterations=0) == []


def test_division_by_zero_points_at_divisor():
    with pytest.raises(ScriptRuntimeError, match='Division by zero') as exc:
        run_program('<< 1 / 0')
    assert (exc.value.initial, exc.value.final) == (8, 9)
    with pytest.raises(ScriptRuntimeError, match='Division by zero'):
        run_program('<< 5 % 0.0')


def test_modulo_truncates():
    assert run_program('<< 7 % -3\n<< -7 % 3\n<< 7.5 % 2') == [IntegerVal(1), IntegerVal(-1), FloatVal(1.5)]


def test_integer_overflow_wraps():
    assert run_program('<< 2147483647 + 1\n<< 65536 * 65536') == [IntegerVal(-2147483648), IntegerVal(0)]


def test_float_math_uses_single_precision():
    [value] = run_program('<< 0.1 + 0.2')
    assert value == FloatVal(to_float32(0.3))
    assert to_string(value) == '0.3'
    assert run_program('<< 16777216.0 + 1.0') == [FloatVal(16777216.0)]


def test_comparisons():
    assert run_program('<< 1 < 2\n<< 2 <= 2\n<< 3 > 2.5\n<< 2 >= 3') == [T, T, T, F]


def test_comparison_tolerance_is_smallest_float():
    # the next single precision value after 1 is already "greater"
    assert run_program('<< 1.0000001 > 1\n<< 1.0000001 == 1') == [T, F]
    # too close to be told apart from 1 in single precision
    assert run_program('<< 1.00000001 == 1') == [T]


def test_equality_rules():
    text = '<< 1 == 1.0\n<< "a" == "a"\n<< true != false\n<< 1 == "1"\n<< true == 1\n<< "a" != "b"'
    assert run_program(text) == [T, T, T, F, F, T]


def test_boolean_operators():
    assert run_program('<< true and false\n<< true or false\n<< true xor true\n<< not false') == [F, T, F, T]


def test_negation_keeps_kind():
    assert run_program('<< -3\n<< -2.5') == [IntegerVal(-3), FloatVal(-2.5)]


def test_type_errors_name_both_operands():
    with pytest.raises(ScriptRuntimeError, match="Operator '-' expects numbers, got boolean and integer") as exc:
        run_program('x = true\n<< x - 1')
    assert (exc.value.line, exc.value.initial) == (2, 4)


def test_logical_operator_requires_booleans():
    with pytest.raises(ScriptRuntimeError, match='got boolean and integer') as exc:
        run_program('<< true and 1')
    assert exc.value.initial == 13


def test_unary_type_errors():
    with pytest.raises(ScriptRuntimeError, match="Operator '-' expects a number, got string"):
        run_program('<< -"a"')
    with pytest.raises(ScriptRuntimeError, match="Operator 'not' expects a boolean, got integer"):
        run_program('<< not 1')


def test_condition_must_be_boolean():
    with pytest.raises(ScriptRuntimeError, match='Condition must be a boolean, got integer'):
        run_program('if 1\n  << 1')


def test_undefined_variable():
    with pytest.raises(ScriptRuntimeError, match="Variable 'y' is not defined"):
        run_program('<< y')


def test_variables_snapshot():
    dialog = Dialog()
    list(dialog.run('a = 1\nb = "x"'))
    assert dialog.variables == {'a': IntegerVal(1), 'b': StringVal('x')}
    dialog.variables['a'] = IntegerVal(5)
    assert dialog.variables['a'] == IntegerVal(1)


def test_variables_persist_between_runs():
    dialog = Dialog()
    list(dialog.run('a = 1'))
    assert list(dialog.run('<< a + 1')) == [IntegerVal(2)]
