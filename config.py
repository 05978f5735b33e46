"""
Configuración de la calculadora científica.

Constantes de aplicación, formato, graficación y conversión. Los valores
de tasas de cambio y umbrales de IMC son inmutables y se crean una sola
vez al iniciar el proceso.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from logging_utils import get_logger

logger = get_logger(__name__)


# Aplicación
APP_TITLE = "Calculadora Científica"
VERSION = "1.0.0"
DEFAULT_ANGLE_MODE = "deg"

# Formato de resultados
FORMAT_DECIMALS = 6
INTEGER_TOLERANCE = 1e-12
SCIENTIFIC_THRESHOLD = 1e21
NAN_MARKER = "NaN"
MAX_FACTORIAL_INPUT = 3000

# Precisión de trabajo del evaluador (dígitos decimales)
EVAL_DPS = 30

# Graficación
GRAPH_EXPRESSION = "y=x^2"
GRAPH_RANGE = 10.0
GRAPH_STEPS = 1200
GRAPH_Y_LIMIT = 1e6
GRAPH_ZOOM_MIN = 0.5
GRAPH_ZOOM_MAX = 3.0
GRAPH_DEBOUNCE_MS = 300

# Marcadores mostrados en la pantalla de resultado
MESSAGES = {
    "error": "Error",
    "invalid_input": "Entrada inválida",
    "calculation_error": "Error de cálculo",
    "non_negative_integer": "Introduce un entero no negativo",
    "invalid_or_zero": "Entrada inválida o división entre cero",
    "graph_parse_error": "No se pudo interpretar la función",
}


@dataclass(frozen=True)
class ExchangeRates:
    """Tasas fijas de ejemplo; no provienen de un servicio en vivo."""

    cny_to_usd: float = 0.14
    usd_to_cny: float = 7.15


@dataclass(frozen=True)
class BMIThresholds:
    underweight: float = 18.5
    normal: float = 24.0
    overweight: float = 28.0


def load_exchange_rates(environ: Mapping[str, str] | None = None) -> ExchangeRates:
    """Lee las tasas desde el entorno, con los valores por defecto como respaldo."""
    if environ is None:
        environ = os.environ
    defaults = ExchangeRates()

    def _read(key: str, default: float) -> float:
        raw = environ.get(key)
        if raw is None or not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError:
            raise ValueError(f"Valor inválido para {key}: {raw!r}") from None
        if value <= 0:
            raise ValueError(f"{key} debe ser positivo")
        return value

    return ExchangeRates(
        cny_to_usd=_read("CALCULADORA_CNY_TO_USD", defaults.cny_to_usd),
        usd_to_cny=_read("CALCULADORA_USD_TO_CNY", defaults.usd_to_cny),
    )


def exchange_rates_or_default(environ: Mapping[str, str] | None = None) -> ExchangeRates:
    """Como ``load_exchange_rates``, pero un valor mal escrito no impide arrancar."""
    try:
        return load_exchange_rates(environ)
    except ValueError as exc:
        logger.warning("tasas de cambio ignoradas, se usan las predeterminadas: %s", exc)
        return ExchangeRates()


EXCHANGE_RATES = exchange_rates_or_default()
BMI_THRESHOLDS = BMIThresholds()
