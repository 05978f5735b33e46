"""Preprocesado, parseo y evaluación de expresiones para la calculadora científica."""

from __future__ import annotations

import io
import math
import re
import token
import tokenize
from typing import Iterable, Mapping

from mpmath import mp

from config import EVAL_DPS
from errors import (
    CalculationError,
    division_by_zero,
    domain_error,
    non_finite,
    parse_error,
)
from logging_utils import get_logger

logger = get_logger(__name__)


_IMPLICIT_MULT_DIGIT = re.compile(r"(\d)\s*([a-zA-Zπ(])")
_IMPLICIT_MULT_PARENS = re.compile(r"\)\s*\(")
_PERCENT_LITERAL = re.compile(r"(\d+(?:\.\d+)?)%")


def sanitize_expression(expr: str) -> str:
    """Normaliza una expresión escrita en la UI a la sintaxis del evaluador.

    ``×``/``÷`` pasan a ``*``/``/``, ``²`` a ``^2``, se inserta la
    multiplicación implícita (``2x`` -> ``2*x``, ``)(`` -> ``)*(``), ``π``
    pasa a ``pi`` y un literal seguido de ``%`` se divide entre 100.
    Nunca falla: la validación ocurre al evaluar.
    """
    if not expr:
        return expr
    e = str(expr)
    e = e.replace("×", "*").replace("÷", "/")
    e = e.replace("²", "^2")
    e = _IMPLICIT_MULT_DIGIT.sub(r"\1*\2", e)
    e = _IMPLICIT_MULT_PARENS.sub(")*(", e)
    e = e.replace("π", "pi")
    e = _PERCENT_LITERAL.sub(r"(\1/100)", e)
    return e


class MPMathProvider:
    """Provee funciones y constantes de mpmath en un namespace seguro.

    Los ángulos se interpretan siempre en radianes; la conversión desde
    grados corresponde a la máquina de estados de la calculadora.
    """

    def __init__(self, dps: int = EVAL_DPS):
        self._dps = max(15, dps)

    @property
    def dps(self) -> int:
        return self._dps

    @staticmethod
    def _factorial(x):
        if not mp.isfinite(x):
            raise ValueError("factorial no admite infinito o NaN")

        if mp.floor(x) == x and x >= 0:
            return mp.factorial(int(x))

        raise ValueError("factorial requiere entero no negativo")

    def build_namespace(self) -> dict:
        return {
            "sin": mp.sin,
            "cos": mp.cos,
            "tan": mp.tan,
            "cot": mp.cot,
            "asin": mp.asin,
            "acos": mp.acos,
            "atan": mp.atan,
            "sqrt": mp.sqrt,
            "exp": mp.exp,
            "log": mp.log,
            "ln": mp.log,
            "abs": mp.fabs,
            "factorial": self._factorial,
            "mpf": mp.mpf,
            "pi": mp.mpf(mp.pi),
            "e": mp.mpf(mp.e),
        }


class CompiledFormula:
    """Expresión ya traducida y compilada; se evalúa con valores de variables."""

    def __init__(self, code, source: str, variables: tuple[str, ...], provider: MPMathProvider):
        self._code = code
        self.source = source
        self.variables = variables
        self._provider = provider

    def __call__(self, **values) -> float:
        missing = [name for name in self.variables if name not in values]
        if missing:
            raise parse_error(f"Falta el valor de {missing[0]}")

        with mp.workdps(self._provider.dps):
            namespace = self._provider.build_namespace()
            for name in self.variables:
                namespace[name] = mp.mpf(values[name])
            try:
                value = eval(self._code, {"__builtins__": {}}, namespace)
            except ZeroDivisionError as exc:
                raise division_by_zero("División entre cero") from exc
            except (NameError, TypeError) as exc:
                raise parse_error(f"Expresión inválida: {exc}") from exc
            except OverflowError as exc:
                raise non_finite("Resultado demasiado grande") from exc
            except (ValueError, ArithmeticError) as exc:
                raise domain_error(str(exc) or "Fuera del dominio") from exc

        return _to_real(value)


def _to_real(value) -> float:
    if isinstance(value, mp.mpc):
        if value.imag != 0:
            raise non_finite("El resultado no es un número real")
        value = value.real
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise parse_error("La expresión no produce un número") from exc
    if not math.isfinite(number):
        raise non_finite("El resultado no es finito")
    return number


class FormulaEvaluator:
    """Transforma expresiones de UI y evalúa su valor numérico."""

    _ALLOWED_CHARS = re.compile(r"^[\d\s+\-*/^().,!%a-zA-Z]*$")
    _FUNCTION_IDENTIFIERS = {
        "sin",
        "cos",
        "tan",
        "cot",
        "asin",
        "acos",
        "atan",
        "sqrt",
        "exp",
        "log",
        "ln",
        "abs",
        "factorial",
    }
    _CONSTANT_IDENTIFIERS = {"pi", "e"}

    def __init__(self, provider: MPMathProvider | None = None):
        self._provider = provider if provider is not None else MPMathProvider()

    # ── API pública ──────────────────────────────────────────────

    def evaluate(self, expression: str, variables: Mapping[str, float] | None = None) -> float:
        """Evalúa la expresión y devuelve un ``float`` finito.

        Raises:
            CalculationError: expresión vacía, inválida, fuera del dominio
                o con resultado no finito.
        """
        variables = dict(variables or {})
        formula = self.compile(expression, variables.keys())
        return formula(**variables)

    def try_evaluate(self, expression: str, variables: Mapping[str, float] | None = None) -> float | None:
        """Como ``evaluate`` pero devuelve ``None`` ante cualquier fallo."""
        try:
            return self.evaluate(expression, variables)
        except CalculationError as exc:
            logger.debug("evaluación fallida de %r: %s", expression, exc)
            return None

    def compile(self, expression: str, variables: Iterable[str] = ()) -> CompiledFormula:
        variables = tuple(variables)
        source = self.to_python(expression, variables)
        try:
            code = compile(source, "<formula>", "eval")
        except SyntaxError as exc:
            raise parse_error("Error de sintaxis") from exc
        return CompiledFormula(code, source, variables, self._provider)

    def to_python(self, expression: str, variables: Iterable[str] = ()) -> str:
        """Traduce una expresión de UI a código Python sobre el namespace seguro."""
        if not expression or not expression.strip():
            raise parse_error("Expresión vacía")

        expr = sanitize_expression(expression.strip())
        expr = expr.replace("−", "-")
        self._validate_raw_expression(expr)

        expr = self._replace_factorial(expr)
        expr = expr.replace("^", "**")
        expr = self._insert_implicit_mult(expr)
        self._validate_identifiers(expr, set(variables))

        return self._promote_numeric_literals(expr)

    # ── Validación ───────────────────────────────────────────────

    def _validate_raw_expression(self, expression: str):
        if not self._ALLOWED_CHARS.fullmatch(expression):
            raise parse_error("Expresión contiene caracteres inválidos")
        if "**" in expression or "//" in expression:
            raise parse_error("Expresión contiene operadores no permitidos")

    def _validate_identifiers(self, expr: str, variables: set[str]):
        allowed = self._FUNCTION_IDENTIFIERS | self._CONSTANT_IDENTIFIERS | variables
        for name in re.findall(r"[A-Za-z_][A-Za-z_0-9]*", expr):
            if name not in allowed:
                raise parse_error(f"Identificador no permitido: {name}")

        for function_name in self._FUNCTION_IDENTIFIERS:
            if re.search(rf"\b{function_name}\b(?!\s*\()", expr):
                raise parse_error(f"Falta '(' después de {function_name}")

        for name in self._CONSTANT_IDENTIFIERS | variables:
            if re.search(rf"\b{name}\b\s*\(", expr):
                raise parse_error(f"{name} no es una función")

    # ── Traducción de sintaxis ───────────────────────────────────

    def _replace_factorial(self, expr: str) -> str:
        chars = list(expr)
        i = len(chars) - 1

        while i >= 0:
            if chars[i] != "!":
                i -= 1
                continue

            j = i - 1

            if j >= 0 and chars[j] == ")":
                depth = 1
                j -= 1
                while j >= 0 and depth > 0:
                    if chars[j] == ")":
                        depth += 1
                    elif chars[j] == "(":
                        depth -= 1
                    j -= 1
                j += 1
                operand = "".join(chars[j:i])
                chars[j : i + 1] = list(f"factorial({operand})")
                i = j - 1
                continue

            if j >= 0 and (chars[j].isdigit() or chars[j] == "."):
                start = j
                while start > 0 and (
                    chars[start - 1].isdigit() or chars[start - 1] == "."
                ):
                    start -= 1
                operand = "".join(chars[start:i])
                chars[start : i + 1] = list(f"factorial({operand})")
                i = start - 1
                continue

            if j >= 0 and chars[j].isalpha():
                start = j
                while start > 0 and chars[start - 1].isalpha():
                    start -= 1
                operand = "".join(chars[start:i])
                chars[start : i + 1] = list(f"factorial({operand})")
                i = start - 1
                continue

            raise parse_error("'!' sin operando")

        return "".join(chars)

    @staticmethod
    def _insert_implicit_mult(expr: str) -> str:
        patterns = [
            (r"\)\s*([\d.A-Za-z])", r")*\1"),
            (r"\b(pi|e)\b\s*([\d(.])", r"\1*\2"),
        ]
        for pat, repl in patterns:
            expr = re.sub(pat, repl, expr)
        return expr

    @staticmethod
    def _promote_numeric_literals(expression: str) -> str:
        tokens = []
        stream = io.StringIO(expression)
        previous_token_text = ""

        try:
            for tok in tokenize.generate_tokens(stream.readline):
                if tok.type == token.NUMBER:
                    if tok.string.lower().endswith("j"):
                        raise parse_error("Números complejos no permitidos")
                    is_integer_literal = bool(re.fullmatch(r"\d+", tok.string))
                    if is_integer_literal and previous_token_text == "**":
                        promoted = tok.string
                    else:
                        promoted = f'mpf("{tok.string}")'
                    tok = tokenize.TokenInfo(tok.type, promoted, tok.start, tok.end, tok.line)
                tokens.append(tok)
                if tok.type in {token.OP, token.NUMBER, token.NAME, token.STRING}:
                    previous_token_text = tok.string
        except (tokenize.TokenError, SyntaxError) as exc:
            raise parse_error("Error de sintaxis") from exc

        return tokenize.untokenize(tokens)
