import pytest

from calculator_engine import CalculatorEngine
from formula_evaluator import FormulaEvaluator


class FakeScheduler:
    """Sustituye ``after``/``after_cancel`` de tkinter en las pruebas."""

    def __init__(self):
        self.pending = {}
        self.cancelled = []
        self._next_id = 0

    def after(self, ms, func=None):
        self._next_id += 1
        self.pending[self._next_id] = (ms, func)
        return self._next_id

    def after_cancel(self, after_id):
        self.cancelled.append(after_id)
        self.pending.pop(after_id, None)

    def run_pending(self):
        for after_id in list(self.pending):
            _ms, func = self.pending.pop(after_id)
            func()


@pytest.fixture
def evaluator() -> FormulaEvaluator:
    return FormulaEvaluator()


@pytest.fixture
def engine(evaluator) -> CalculatorEngine:
    return CalculatorEngine(evaluator)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
