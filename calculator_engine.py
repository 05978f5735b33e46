"""
Motor de la calculadora científica.

Este módulo provee ``CalculatorEngine``, la máquina de estados que
traduce cada pulsación (dígito, operador, función, ``=``...) en una
transición sobre ``CalculatorState``. La evaluación de expresiones se
delega en ``FormulaEvaluator`` y las funciones científicas en
``math_utils``.

Estados:
    - Edición: ``just_computed`` es falso, el usuario compone ``input_text``.
    - Calculado: la última acción produjo un resultado visible.

Cada transición devuelve un ``CalculatorState`` nuevo; el motor guarda
el último en ``engine.state``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

import math_utils
from config import (
    DEFAULT_ANGLE_MODE,
    FORMAT_DECIMALS,
    INTEGER_TOLERANCE,
    MAX_FACTORIAL_INPUT,
    MESSAGES,
    NAN_MARKER,
    SCIENTIFIC_THRESHOLD,
)
from formula_evaluator import FormulaEvaluator
from logging_utils import get_logger

logger = get_logger(__name__)

OPERATORS = frozenset("+-*/%×÷")
SYMBOLS = frozenset("0123456789.()")
CONSTANTS = {"π": "π", "pi": "π", "e": "e"}
POWER_EXPONENTS = (2, 3, -1, 0.5)


class AngleMode(Enum):
    DEGREES = "deg"
    RADIANS = "rad"

    def toggled(self) -> "AngleMode":
        return AngleMode.RADIANS if self is AngleMode.DEGREES else AngleMode.DEGREES


@dataclass(frozen=True)
class CalculatorState:
    input_text: str = ""
    result: str | None = None
    last_expression: str | None = None
    angle_mode: AngleMode = AngleMode(DEFAULT_ANGLE_MODE)
    just_computed: bool = False

    @property
    def display_text(self) -> str:
        """Texto de la línea principal de la pantalla."""
        if self.just_computed and self.result:
            return self.result
        return self.input_text or "0"

    @property
    def history_text(self) -> str:
        """Texto de la línea superior (expresión anterior)."""
        if self.just_computed and self.last_expression:
            return self.last_expression
        return ""


# ── Formato del resultado ────────────────────────────────────────

def format_number(value) -> str:
    """Enteros sin punto decimal; el resto con hasta 6 decimales.

    Desde 1e21 en valor absoluto se usa ``m×10^k`` con la mantisa más
    corta que identifica al float, de modo que el texto se puede volver
    a evaluar.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if value is None or not math.isfinite(value):
        return NAN_MARKER
    if abs(value) >= SCIENTIFIC_THRESHOLD:
        mantissa, _, exponent = repr(float(value)).partition("e")
        return f"{mantissa}×10^{int(exponent)}"

    nearest = math.floor(value + 0.5)
    if abs(nearest - value) < INTEGER_TOLERANCE:
        return str(int(nearest))

    text = f"{value:.{FORMAT_DECIMALS}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def _as_result(value) -> math_utils.MathResult:
    if isinstance(value, math_utils.MathResult):
        return value
    return math_utils.MathResult(value)


def _power_label(exponent) -> str:
    return format_number(exponent)


# ── Máquina de estados ───────────────────────────────────────────

class CalculatorEngine:
    """Evalúa expresiones y aplica funciones científicas sobre el estado."""

    _TRIG_FUNCTIONS: dict[str, Callable] = {
        "sin": math_utils.sin,
        "cos": math_utils.cos,
        "tan": math_utils.tan,
        "cot": math_utils.cotan,
    }

    def __init__(self, evaluator: FormulaEvaluator | None = None, state: CalculatorState | None = None):
        self._evaluator = evaluator if evaluator is not None else FormulaEvaluator()
        self.state = state if state is not None else CalculatorState()

    # ── Propiedad: modo angular ──────────────────────────────────

    @property
    def angle_mode(self) -> AngleMode:
        return self.state.angle_mode

    def _commit(self, **changes) -> CalculatorState:
        self.state = replace(self.state, **changes)
        return self.state

    def _value_of(self, text: str) -> float | None:
        return self._evaluator.try_evaluate(text)

    # ── Entrada ──────────────────────────────────────────────────

    def append(self, symbol: str) -> CalculatorState:
        """Despacha un símbolo de teclado a la transición correspondiente."""
        if symbol in OPERATORS:
            return self.append_operator(symbol)
        if symbol in CONSTANTS:
            return self.insert_constant(symbol)
        return self.append_symbol(symbol)

    def append_symbol(self, symbol: str) -> CalculatorState:
        if self.state.just_computed and symbol in SYMBOLS:
            return self._commit(
                input_text=symbol,
                result=None,
                last_expression=None,
                just_computed=False,
            )
        return self._commit(
            input_text=self.state.input_text + symbol,
            result=None,
            last_expression=None,
            just_computed=False,
        )

    def append_operator(self, operator: str) -> CalculatorState:
        # Tras un cálculo correcto input_text ya contiene el resultado formateado
        return self._commit(
            input_text=self.state.input_text + operator,
            result=None,
            last_expression=None,
            just_computed=False,
        )

    def insert_constant(self, name: str) -> CalculatorState:
        token_text = CONSTANTS[name]
        if self.state.just_computed:
            return self._commit(
                input_text=token_text,
                result=None,
                last_expression=None,
                just_computed=False,
            )
        return self._commit(input_text=self.state.input_text + token_text)

    def clear(self) -> CalculatorState:
        return self._commit(
            input_text="",
            result=None,
            last_expression=None,
            just_computed=False,
        )

    def backspace(self) -> CalculatorState:
        if self.state.just_computed:
            # Se descarta también la expresión previa; no se restaura.
            return self.clear()
        return self._commit(input_text=self.state.input_text[:-1])

    def toggle_angle_mode(self) -> CalculatorState:
        return self._commit(angle_mode=self.state.angle_mode.toggled())

    # ── Evaluación principal ─────────────────────────────────────

    def evaluate(self) -> CalculatorState:
        """Calcula ``input_text`` (botón ``=``)."""
        original = self.state.input_text
        if not original or not original.strip():
            return self._commit(result=None, last_expression=None, just_computed=False)

        value = self._value_of(original)
        if value is None:
            logger.debug("no se pudo evaluar %r", original)
            return self._commit(
                result=MESSAGES["error"],
                last_expression=original,
                just_computed=True,
            )

        formatted = format_number(value)
        return self._commit(
            input_text=formatted,
            result=formatted,
            last_expression=original,
            just_computed=True,
        )

    # ── Funciones inmediatas ─────────────────────────────────────

    def apply_function(self, name: str) -> CalculatorState:
        """Aplica ``sin``, ``cos``, ``tan``, ``cot``, ``factorial``,
        ``sqrt``, ``reciprocal`` o ``exp`` al valor actual."""
        if name in self._TRIG_FUNCTIONS:
            return self._apply_trig(name)
        handlers = {
            "factorial": self._apply_factorial,
            "sqrt": self._apply_square_root,
            "reciprocal": self._apply_reciprocal,
            "exp": self._apply_exp,
        }
        try:
            handler = handlers[name]
        except KeyError:
            raise ValueError(f"Función desconocida: {name}") from None
        return handler()

    def apply_power(self, exponent: float) -> CalculatorState:
        text = self.state.input_text
        value = self._value_of(text)
        if value is None:
            return self._invalid(MESSAGES["invalid_input"])
        out = math_utils.power(value, exponent)
        return self._computed(format_number(out), f"({text})^{_power_label(exponent)}")

    def _apply_trig(self, name: str) -> CalculatorState:
        text = self.state.input_text
        value = self._value_of(text)
        if value is None:
            return self._invalid(MESSAGES["invalid_input"])

        degrees = self.state.angle_mode is AngleMode.DEGREES
        angle = value * math.pi / 180 if degrees else value
        outcome = _as_result(self._TRIG_FUNCTIONS[name](angle))
        label = f"{name}({text}{'°' if degrees else ''})"
        if not outcome.ok:
            return self._failed(label)
        return self._computed(format_number(outcome.value), label)

    def _apply_factorial(self) -> CalculatorState:
        value = self._value_of(self.state.input_text)
        if value is None or not float(value).is_integer() or value < 0:
            return self._invalid(MESSAGES["non_negative_integer"])
        n = int(value)
        if n > MAX_FACTORIAL_INPUT:
            return self._failed(f"{n}!")
        outcome = math_utils.factorial(n)
        if not outcome.ok:
            return self._failed(f"{n}!")
        return self._computed(format_number(outcome.value), f"{n}!")

    def _apply_square_root(self) -> CalculatorState:
        text = self.state.input_text
        value = self._value_of(text)
        if value is None:
            return self._invalid(MESSAGES["invalid_input"])
        outcome = math_utils.square_root(value)
        label = f"√({text})"
        if not outcome.ok:
            return self._failed(label)
        return self._computed(format_number(outcome.value), label)

    def _apply_reciprocal(self) -> CalculatorState:
        text = self.state.input_text
        value = self._value_of(text)
        if value is None or value == 0:
            return self._invalid(MESSAGES["invalid_or_zero"])
        outcome = math_utils.reciprocal(value)
        return self._computed(format_number(outcome.value), f"1/({text})")

    def _apply_exp(self) -> CalculatorState:
        text = self.state.input_text
        value = self._value_of(text)
        if value is None:
            return self._invalid(MESSAGES["invalid_input"])
        try:
            out = math.exp(value)
        except OverflowError:
            out = math.inf
        return self._computed(format_number(out), f"e^({text})")

    # ── Resultados de funciones ──────────────────────────────────

    def _computed(self, formatted: str, label: str) -> CalculatorState:
        return self._commit(
            input_text=formatted,
            result=formatted,
            last_expression=label,
            just_computed=True,
        )

    def _invalid(self, marker: str) -> CalculatorState:
        logger.debug("entrada rechazada %r: %s", self.state.input_text, marker)
        return self._commit(result=marker, last_expression=None, just_computed=True)

    def _failed(self, label: str) -> CalculatorState:
        return self._commit(
            result=MESSAGES["calculation_error"],
            last_expression=label,
            just_computed=True,
        )
