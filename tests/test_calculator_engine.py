import math

import pytest

from calculator_engine import AngleMode, CalculatorEngine, CalculatorState, format_number
from config import MESSAGES


def _type(engine: CalculatorEngine, keys: str) -> CalculatorState:
    state = engine.state
    for key in keys:
        state = engine.append(key)
    return state


@pytest.mark.parametrize(
    "value, expected",
    [
        (4.0, "4"),
        (1 / 3, "0.333333"),
        (2.5, "2.5"),
        (-2.5, "-2.5"),
        (0.1 + 0.2, "0.3"),
        (2.0000000000001, "2"),
        (-1e-13, "0"),
        (-1e-7, "0"),
        (1e-6, "0.000001"),
        (120, "120"),
        (1e20, "100000000000000000000"),
        (1e21, "1×10^21"),
        (1e40, "1×10^40"),
        (-2.5e30, "-2.5×10^30"),
        (math.nan, "NaN"),
        (math.inf, "NaN"),
        (None, "NaN"),
    ],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_initial_state(engine):
    state = engine.state
    assert state.input_text == ""
    assert state.result is None
    assert state.last_expression is None
    assert state.angle_mode is AngleMode.DEGREES
    assert state.just_computed is False
    assert state.display_text == "0"
    assert state.history_text == ""


def test_evaluate_and_chain(engine):
    _type(engine, "2+2")
    state = engine.evaluate()
    assert state.result == "4"
    assert state.last_expression == "2+2"
    assert state.input_text == "4"
    assert state.just_computed is True
    assert state.display_text == "4"
    assert state.history_text == "2+2"

    state = engine.append_operator("+")
    assert state.input_text == "4+"
    assert state.just_computed is False
    assert state.result is None
    assert state.last_expression is None

    engine.append("3")
    state = engine.evaluate()
    assert state.result == "7"
    assert state.last_expression == "4+3"


def test_symbol_after_result_starts_new_input(engine):
    _type(engine, "9*9")
    engine.evaluate()
    state = engine.append("(")
    assert state.input_text == "("
    assert state.result is None
    assert state.last_expression is None
    assert state.just_computed is False


def test_symbol_while_editing_appends(engine):
    state = _type(engine, "12.5")
    assert state.input_text == "12.5"
    assert state.display_text == "12.5"


def test_evaluate_blank_input_is_noop(engine):
    engine.append_symbol(" ")
    state = engine.evaluate()
    assert state.just_computed is False
    assert state.result is None
    assert state.last_expression is None
    assert state.input_text == " "


def test_evaluate_failure_shows_error(engine):
    _type(engine, "2+")
    state = engine.evaluate()
    assert state.result == MESSAGES["error"]
    assert state.last_expression == "2+"
    assert state.input_text == "2+"
    assert state.just_computed is True


def test_evaluate_division_by_zero(engine):
    _type(engine, "1/0")
    assert engine.evaluate().result == MESSAGES["error"]


def test_operator_after_error_keeps_typed_expression(engine):
    _type(engine, "(2")
    engine.evaluate()
    state = engine.append_operator("+")
    assert state.input_text == "(2+"
    assert state.just_computed is False


def test_clear(engine):
    _type(engine, "5*5")
    engine.evaluate()
    state = engine.clear()
    assert state == CalculatorState(angle_mode=state.angle_mode)


def test_backspace_while_editing(engine):
    _type(engine, "123")
    assert engine.backspace().input_text == "12"
    engine.backspace()
    engine.backspace()
    assert engine.backspace().input_text == ""


def test_backspace_after_result_clears_everything(engine):
    _type(engine, "12+3")
    engine.evaluate()
    state = engine.backspace()
    assert state.input_text == ""
    assert state.result is None
    assert state.last_expression is None
    assert state.just_computed is False


def test_toggle_angle_mode_keeps_input(engine):
    _type(engine, "30")
    state = engine.toggle_angle_mode()
    assert state.angle_mode is AngleMode.RADIANS
    assert state.input_text == "30"
    assert engine.toggle_angle_mode().angle_mode is AngleMode.DEGREES


def test_insert_constant(engine):
    engine.append("2")
    state = engine.insert_constant("π")
    assert state.input_text == "2π"
    assert engine.evaluate().result == "6.283185"

    state = engine.insert_constant("e")
    assert state.input_text == "e"
    assert state.just_computed is False
    assert engine.evaluate().result == "2.718282"


def test_sin_in_degrees(engine):
    _type(engine, "30")
    state = engine.apply_function("sin")
    assert state.result == "0.5"
    assert state.input_text == "0.5"
    assert state.last_expression == "sin(30°)"
    assert state.just_computed is True


def test_trig_in_radians(engine):
    engine.toggle_angle_mode()
    _type(engine, "0")
    state = engine.apply_function("cos")
    assert state.result == "1"
    assert state.last_expression == "cos(0)"


def test_trig_undefined_point(engine):
    _type(engine, "90")
    state = engine.apply_function("tan")
    assert state.result == MESSAGES["calculation_error"]
    assert state.input_text == "90"
    assert state.last_expression == "tan(90°)"


def test_cot_in_degrees(engine):
    _type(engine, "45")
    assert engine.apply_function("cot").result == "1"


def test_function_on_invalid_input(engine):
    _type(engine, "2+")
    state = engine.apply_function("sin")
    assert state.result == MESSAGES["invalid_input"]
    assert state.input_text == "2+"
    assert state.last_expression is None
    assert state.just_computed is True


def test_function_uses_expression_value(engine):
    _type(engine, "3*3")
    state = engine.apply_function("sqrt")
    assert state.result == "3"
    assert state.last_expression == "√(3*3)"


def test_square_root_of_negative(engine):
    _type(engine, "-4")
    state = engine.apply_function("sqrt")
    assert state.result == MESSAGES["calculation_error"]
    assert state.input_text == "-4"


def test_factorial(engine):
    _type(engine, "5")
    state = engine.apply_function("factorial")
    assert state.result == "120"
    assert state.last_expression == "5!"


def test_factorial_keeps_exact_digits(engine):
    _type(engine, "20")
    assert engine.apply_function("factorial").result == "2432902008176640000"


@pytest.mark.parametrize("keys", ["2.5", "-3", "2+"])
def test_factorial_rejects_non_integers(engine, keys):
    _type(engine, keys)
    state = engine.apply_function("factorial")
    assert state.result == MESSAGES["non_negative_integer"]
    assert state.input_text == keys


def test_reciprocal(engine):
    _type(engine, "4")
    state = engine.apply_function("reciprocal")
    assert state.result == "0.25"
    assert state.last_expression == "1/(4)"


def test_reciprocal_of_zero(engine):
    _type(engine, "0")
    assert engine.apply_function("reciprocal").result == MESSAGES["invalid_or_zero"]


def test_exp(engine):
    _type(engine, "0")
    state = engine.apply_function("exp")
    assert state.result == "1"
    assert state.last_expression == "e^(0)"


@pytest.mark.parametrize(
    "keys, exponent, result, label",
    [
        ("3", 2, "9", "(3)^2"),
        ("2", 3, "8", "(2)^3"),
        ("4", -1, "0.25", "(4)^-1"),
        ("9", 0.5, "3", "(9)^0.5"),
    ],
)
def test_apply_power(engine, keys, exponent, result, label):
    _type(engine, keys)
    state = engine.apply_power(exponent)
    assert state.result == result
    assert state.last_expression == label


def test_power_outside_reals_shows_nan(engine):
    _type(engine, "-8")
    assert engine.apply_power(0.5).result == "NaN"


def test_result_feeds_next_function(engine):
    _type(engine, "16")
    engine.apply_function("sqrt")
    state = engine.apply_function("sqrt")
    assert state.result == "2"
    assert state.last_expression == "√(4)"


def test_unknown_function(engine):
    with pytest.raises(ValueError):
        engine.apply_function("sinh")


def test_large_result_uses_scientific_form(engine):
    _type(engine, "10^20")
    assert engine.evaluate().result == "100000000000000000000"

    state = engine.apply_power(2)
    assert state.result == "1×10^40"
    assert state.input_text == "1×10^40"

    state = engine.evaluate()
    assert state.result == "1×10^40"
    assert state.last_expression == "1×10^40"


def test_scientific_result_can_be_reused(engine):
    _type(engine, "10^25")
    engine.evaluate()
    engine.append_operator("*")
    engine.append("2")
    assert engine.evaluate().result == "2×10^25"
