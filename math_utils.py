"""
Utilidades matemáticas de la calculadora científica.

Funciones puras: no guardan estado ni notifican a la interfaz. Las que
pueden fallar devuelven un ``MathResult`` con el valor centinela NaN y
el error correspondiente; la capa que las llama decide cómo mostrarlo.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum

from config import BMI_THRESHOLDS, EXCHANGE_RATES, BMIThresholds, ExchangeRates
from errors import (
    CalculationError,
    division_by_zero,
    domain_error,
    invalid_format,
)
from logging_utils import get_logger

logger = get_logger(__name__)

TRIG_LIMIT = 1e15
TRIG_EPSILON = 1e-15

_BINARY_RE = re.compile(r"[01]+")
_HEX_RE = re.compile(r"[0-9A-Fa-f]+")
_HEX_DIGITS = "0123456789ABCDEF"


@dataclass(frozen=True)
class MathResult:
    """Valor numérico o error. En caso de error el valor es NaN."""

    value: float
    error: CalculationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self):
        if self.error is not None:
            raise self.error
        return self.value


def _success(value) -> MathResult:
    return MathResult(value)


def _failure(error: CalculationError) -> MathResult:
    logger.debug("operación rechazada: %s", error.message)
    return MathResult(math.nan, error)


# ── Aritmética básica ───────────────────────────────────────────

def add(a: float, b: float) -> float:
    return a + b


def subtract(a: float, b: float) -> float:
    return a - b


def multiply(a: float, b: float) -> float:
    return a * b


def divide(a: float, b: float) -> MathResult:
    if b == 0:
        return _failure(division_by_zero("El divisor no puede ser cero"))
    return _success(a / b)


# ── Funciones avanzadas ─────────────────────────────────────────

def factorial(n) -> MathResult:
    """n! para enteros no negativos, calculado con enteros exactos."""
    if n < 0 or not math.isfinite(n) or n != int(n):
        return _failure(domain_error("El factorial solo admite enteros no negativos"))
    n = int(n)
    if n in (0, 1):
        return _success(1)
    return _success(math.prod(range(2, n + 1)))


def power(base: float, exponent: float) -> float:
    """Potencia real; NaN fuera de los reales e infinito si desborda."""
    try:
        return math.pow(base, exponent)
    except ValueError:
        return math.nan
    except OverflowError:
        if base < 0 and float(exponent).is_integer() and int(exponent) % 2:
            return -math.inf
        return math.inf


def square_root(n: float) -> MathResult:
    if n < 0:
        return _failure(domain_error("La raíz cuadrada solo admite números no negativos"))
    return _success(math.sqrt(n))


def reciprocal(n: float) -> MathResult:
    if n == 0:
        return _failure(division_by_zero("No se puede calcular el recíproco de cero"))
    return _success(1 / n)


# ── Trigonometría (entrada en radianes) ─────────────────────────

def sin(x: float) -> float:
    return math.sin(x)


def cos(x: float) -> float:
    return math.cos(x)


def tan(x: float) -> MathResult:
    # |tan| enorme equivale a un múltiplo impar de π/2
    result = math.tan(x)
    if abs(result) > TRIG_LIMIT:
        return _failure(domain_error("La tangente no está definida en este punto"))
    return _success(result)


def cotan(x: float) -> MathResult:
    tan_value = math.tan(x)
    if abs(tan_value) < TRIG_EPSILON or abs(tan_value) > TRIG_LIMIT:
        return _failure(domain_error("La cotangente no está definida en este punto"))
    return _success(1 / tan_value)


# ── Temperatura ─────────────────────────────────────────────────

def celsius_to_fahrenheit(c: float) -> float:
    return c * 9 / 5 + 32


def fahrenheit_to_celsius(f: float) -> float:
    return (f - 32) * 5 / 9


# ── Índice de masa corporal ─────────────────────────────────────

class BMICategory(Enum):
    INVALID = "Datos inválidos"
    UNDERWEIGHT = "Bajo peso"
    NORMAL = "Normal"
    OVERWEIGHT = "Sobrepeso"
    OBESE = "Obesidad"


def calculate_bmi(height_cm: float, weight_kg: float) -> MathResult:
    """IMC a partir de la estatura en centímetros y el peso en kilogramos."""
    if height_cm <= 0 or weight_kg <= 0:
        return _failure(domain_error("La estatura y el peso deben ser positivos"))
    height_m = height_cm / 100
    return _success(weight_kg / (height_m * height_m))


def get_bmi_category(bmi: float, thresholds: BMIThresholds = BMI_THRESHOLDS) -> BMICategory:
    if math.isnan(bmi):
        return BMICategory.INVALID
    if bmi < thresholds.underweight:
        return BMICategory.UNDERWEIGHT
    if bmi < thresholds.normal:
        return BMICategory.NORMAL
    if bmi < thresholds.overweight:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


# ── Ecuaciones ──────────────────────────────────────────────────

class LinearKind(Enum):
    UNIQUE = "unique"
    INFINITE = "infinite"
    NONE = "none"


@dataclass(frozen=True)
class LinearSolution:
    kind: LinearKind
    x: float | None = None


def solve_linear_equation(a: float, b: float) -> LinearSolution:
    """Resuelve ax + b = 0."""
    if a == 0:
        if b == 0:
            return LinearSolution(LinearKind.INFINITE)
        return LinearSolution(LinearKind.NONE)
    return LinearSolution(LinearKind.UNIQUE, -b / a)


class QuadraticKind(Enum):
    NO_REAL_ROOTS = "no_real_roots"
    REPEATED_ROOT = "repeated_root"
    DISTINCT_ROOTS = "distinct_roots"


@dataclass(frozen=True)
class QuadraticSolution:
    kind: QuadraticKind
    x1: float | None = None
    x2: float | None = None

    @property
    def roots(self) -> tuple[float, ...]:
        if self.kind is QuadraticKind.NO_REAL_ROOTS:
            return ()
        return (self.x1, self.x2)


def solve_quadratic_equation(a: float, b: float, c: float) -> QuadraticSolution | MathResult:
    """Resuelve ax² + bx + c = 0.

    Devuelve un ``MathResult`` fallido si ``a`` es cero; en otro caso una
    ``QuadraticSolution`` cuya primera raíz usa +√Δ.
    """
    if a == 0:
        return _failure(domain_error("No es una ecuación cuadrática"))

    discriminant = b * b - 4 * a * c
    if discriminant < 0:
        return QuadraticSolution(QuadraticKind.NO_REAL_ROOTS)
    if discriminant == 0:
        x = -b / (2 * a)
        return QuadraticSolution(QuadraticKind.REPEATED_ROOT, x, x)

    sqrt_discriminant = math.sqrt(discriminant)
    return QuadraticSolution(
        QuadraticKind.DISTINCT_ROOTS,
        (-b + sqrt_discriminant) / (2 * a),
        (-b - sqrt_discriminant) / (2 * a),
    )


# ── Conversión de bases ─────────────────────────────────────────

def _to_base(num: float, base: int) -> str:
    n = math.trunc(num)
    if n < 0:
        return "-" + _to_base(-n, base)
    if n == 0:
        return "0"

    digits = []
    while n > 0:
        n, remainder = divmod(n, base)
        digits.append(_HEX_DIGITS[remainder])
    return "".join(reversed(digits))


def decimal_to_binary(num: float) -> str | MathResult:
    if not math.isfinite(num):
        return _failure(domain_error("Solo se pueden convertir números finitos"))
    return _to_base(num, 2)


def decimal_to_hex(num: float) -> str | MathResult:
    if not math.isfinite(num):
        return _failure(domain_error("Solo se pueden convertir números finitos"))
    return _to_base(num, 16)


def binary_to_decimal(binary: str) -> MathResult:
    if not _BINARY_RE.fullmatch(binary):
        return _failure(invalid_format("Número binario inválido"))
    return _success(int(binary, 2))


def hex_to_decimal(hex_text: str) -> MathResult:
    if not _HEX_RE.fullmatch(hex_text):
        return _failure(invalid_format("Número hexadecimal inválido"))
    return _success(int(hex_text, 16))


# ── Divisas (tasas fijas) ───────────────────────────────────────

def cny_to_usd(amount: float, rates: ExchangeRates = EXCHANGE_RATES) -> MathResult:
    if amount < 0:
        return _failure(domain_error("El importe no puede ser negativo"))
    return _success(amount * rates.cny_to_usd)


def usd_to_cny(amount: float, rates: ExchangeRates = EXCHANGE_RATES) -> MathResult:
    if amount < 0:
        return _failure(domain_error("El importe no puede ser negativo"))
    return _success(amount * rates.usd_to_cny)
