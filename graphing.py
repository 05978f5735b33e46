"""Muestreo de funciones y/x para la herramienta de graficación."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Callable, Protocol

from config import (
    GRAPH_DEBOUNCE_MS,
    GRAPH_EXPRESSION,
    GRAPH_RANGE,
    GRAPH_STEPS,
    GRAPH_Y_LIMIT,
    GRAPH_ZOOM_MAX,
    GRAPH_ZOOM_MIN,
    MESSAGES,
)
from errors import CalculationError
from formula_evaluator import FormulaEvaluator
from logging_utils import get_logger

logger = get_logger(__name__)

_Y_PREFIX = re.compile(r"^y\s*=\s*")
_DIGIT_X = re.compile(r"(\d)\s*x")


@dataclass(frozen=True)
class Point:
    x: float
    y: float


def prepare_function_expression(expression: str) -> str:
    """``y = 2x²`` -> ``2*x^2``."""
    expr = str(expression).strip()
    expr = _Y_PREFIX.sub("", expr)
    expr = expr.replace("²", "^2")
    expr = _DIGIT_X.sub(r"\1*x", expr)
    return expr


def generate_function_data(
    expression: str,
    start: float = -GRAPH_RANGE,
    end: float = GRAPH_RANGE,
    steps: int = 1000,
    evaluator: FormulaEvaluator | None = None,
) -> list[Point]:
    """Muestrea ``steps + 1`` puntos en ``[start, end]``.

    Se descartan los puntos no finitos o con ``|y| >= 1e6``. Lanza
    ``CalculationError`` si la expresión no se puede interpretar.
    """
    if steps <= 0:
        raise ValueError("steps debe ser positivo")
    evaluator = evaluator if evaluator is not None else FormulaEvaluator()
    formula = evaluator.compile(prepare_function_expression(expression), ("x",))

    step_size = (end - start) / steps
    data = []
    for i in range(steps + 1):
        x = start + i * step_size
        try:
            y = formula(x=x)
        except CalculationError:
            continue
        if math.isfinite(y) and abs(y) < GRAPH_Y_LIMIT:
            data.append(Point(float(x), float(y)))

    data.sort(key=lambda point: point.x)
    return data


class Scheduler(Protocol):
    """Interfaz ``after``/``after_cancel`` de los widgets de tkinter."""

    def after(self, ms: int, func: Callable[[], None]): ...

    def after_cancel(self, id) -> None: ...


class Debouncer:
    """Ejecuta la última llamada pendiente tras ``delay_ms`` sin cambios."""

    def __init__(self, scheduler: Scheduler, delay_ms: int = GRAPH_DEBOUNCE_MS):
        self._scheduler = scheduler
        self._delay_ms = delay_ms
        self._pending_id = None

    @property
    def pending(self) -> bool:
        return self._pending_id is not None

    def trigger(self, func: Callable[[], None]) -> None:
        self.cancel()

        def _run():
            self._pending_id = None
            func()

        self._pending_id = self._scheduler.after(self._delay_ms, _run)

    def cancel(self) -> None:
        if self._pending_id is not None:
            self._scheduler.after_cancel(self._pending_id)
            self._pending_id = None


class GraphingTool:
    """Estado de la herramienta de graficación: expresión, zoom y puntos."""

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        evaluator: FormulaEvaluator | None = None,
        on_update: Callable[["GraphingTool"], None] | None = None,
    ):
        self.expression = GRAPH_EXPRESSION
        self.zoom = 1.0
        self.data: list[Point] = []
        self.error: str | None = None
        self._evaluator = evaluator if evaluator is not None else FormulaEvaluator()
        self._on_update = on_update
        self._debouncer = Debouncer(scheduler) if scheduler is not None else None

    @property
    def x_range(self) -> tuple[float, float]:
        return (-GRAPH_RANGE / self.zoom, GRAPH_RANGE / self.zoom)

    def set_expression(self, expression: str) -> None:
        self.expression = expression
        self._schedule()

    def set_zoom(self, zoom: float) -> None:
        self.zoom = min(GRAPH_ZOOM_MAX, max(GRAPH_ZOOM_MIN, float(zoom)))
        self._schedule()

    def _schedule(self) -> None:
        if self._debouncer is None:
            self.generate_graph()
        else:
            self._debouncer.trigger(self.generate_graph)

    def generate_graph(self) -> list[Point]:
        self.error = None
        start, end = self.x_range
        try:
            self.data = generate_function_data(
                self.expression, start, end, GRAPH_STEPS, evaluator=self._evaluator
            )
        except CalculationError as exc:
            logger.debug("no se pudo graficar %r: %s", self.expression, exc)
            self.data = []
            self.error = MESSAGES["graph_parse_error"]
        if self._on_update is not None:
            self._on_update(self)
        return self.data
