"""Tipos de error de cálculo compartidos por el evaluador y las utilidades."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    DOMAIN = "domain"
    DIVISION_BY_ZERO = "division_by_zero"
    INVALID_FORMAT = "invalid_format"
    PARSE = "parse"
    NON_FINITE = "non_finite"


@dataclass(eq=False)
class CalculationError(ValueError):
    """Error de cálculo con una categoría y un mensaje para el usuario."""

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


def domain_error(message: str) -> CalculationError:
    return CalculationError(ErrorKind.DOMAIN, message)


def division_by_zero(message: str) -> CalculationError:
    return CalculationError(ErrorKind.DIVISION_BY_ZERO, message)


def invalid_format(message: str) -> CalculationError:
    return CalculationError(ErrorKind.INVALID_FORMAT, message)


def parse_error(message: str) -> CalculationError:
    return CalculationError(ErrorKind.PARSE, message)


def non_finite(message: str) -> CalculationError:
    return CalculationError(ErrorKind.NON_FINITE, message)


__all__ = [
    "ErrorKind",
    "CalculationError",
    "domain_error",
    "division_by_zero",
    "invalid_format",
    "parse_error",
    "non_finite",
]
