"""Punto de entrada de la calculadora científica."""

import tkinter as tk

from calculator_engine import CalculatorEngine
from calculator_ui import CalculatorApp
from config import EVAL_DPS
from formula_evaluator import FormulaEvaluator, MPMathProvider
from logging_utils import configure_level, get_logger


def main():
    configure_level()
    get_logger().info("iniciando calculadora")

    root = tk.Tk()
    root.minsize(360, 560)
    engine = CalculatorEngine(FormulaEvaluator(MPMathProvider(dps=EVAL_DPS)))
    CalculatorApp(root, engine=engine)
    root.mainloop()


if __name__ == "__main__":
    main()
