from calculator_engine import CalculatorEngine, POWER_EXPONENTS
from formula_evaluator import sanitize_expression
import sys


def _press(engine: CalculatorEngine, key: str):
	"""Aplica una tecla con la misma sintaxis de acciones que la interfaz."""
	if key == "=":
		return engine.evaluate()
	if key == "C":
		return engine.clear()
	if key == "⌫":
		return engine.backspace()
	if key == "DRG":
		return engine.toggle_angle_mode()
	if key.startswith("func:"):
		return engine.apply_function(key[5:])
	if key.startswith("pow:"):
		return engine.apply_power(POWER_EXPONENTS[int(key[4:])])
	return engine.append(key)


def _tokens(sequence: str) -> list[str]:
	keys = []
	for part in sequence.split(" "):
		if not part:
			continue
		if part in ("=", "C", "⌫", "DRG") or ":" in part:
			keys.append(part)
		else:
			keys.extend(part)
	return keys


def _walk(sequence: str):
	engine = CalculatorEngine()
	states = []
	for key in _tokens(sequence):
		states.append((key, _press(engine, key)))
	return engine.state, states


def inspect_sequence(sequence: str) -> None:
	"""Imprime el estado tras cada tecla de la secuencia."""
	final, states = _walk(sequence)

	print("Sequence inspection")
	print(f"keys:           {sequence}")
	for key, state in states:
		mark = "=" if state.just_computed else " "
		print(
			f"  {key:>14} {mark} input={state.input_text!r} "
			f"result={state.result!r} last={state.last_expression!r}"
		)
	print(f"display:        {final.display_text}")


def run_regressions() -> None:
	checks: list[tuple[str, bool]] = []
	expected_actual: list[tuple[str, str, str]] = []

	state, _ = _walk("2+2 =")
	checks.append(("2+2 shows 4", state.result == "4"))
	checks.append(("2+2 keeps original expression", state.last_expression == "2+2"))
	checks.append(("2+2 leaves result as next input", state.input_text == "4"))

	state, _ = _walk("2+2 = + 3 =")
	expected_actual.append(("2+2 = + 3 =", "7", state.result or ""))
	checks.append(("operator after result chains on it", state.result == "7"))

	state, _ = _walk("2+2 = 5")
	checks.append(("digit after result starts a new input", state.input_text == "5"))
	checks.append(("digit after result clears last expression", state.last_expression is None))

	state, _ = _walk("1/3 =")
	expected_actual.append(("1/3", "0.333333", state.result or ""))
	checks.append(("1/3 rounds to six decimals", state.result == "0.333333"))

	state, _ = _walk("30 func:sin")
	expected_actual.append(("sin(30°)", "0.5", state.result or ""))
	checks.append(("sin in degrees", state.result == "0.5"))
	checks.append(("sin label uses degree sign", state.last_expression == "sin(30°)"))

	state, _ = _walk("DRG 0 func:cos")
	checks.append(("cos in radians", state.result == "1" and state.last_expression == "cos(0)"))

	state, _ = _walk("90 func:tan")
	checks.append(("tan(90°) reports calculation error", state.result == "Error de cálculo"))

	state, _ = _walk("5 func:factorial")
	checks.append(("5! is 120", state.result == "120" and state.last_expression == "5!"))

	state, _ = _walk("3 pow:0")
	checks.append(("3 squared", state.result == "9" and state.last_expression == "(3)^2"))

	state, _ = _walk("2+ =")
	checks.append(("incomplete expression shows error", state.result == "Error"))
	checks.append(("error keeps the typed expression", state.input_text == "2+"))

	state, _ = _walk("12+3 = ⌫")
	checks.append(("backspace after result clears everything", state.input_text == "" and state.result is None))

	checks.append(("sanitize implicit product", sanitize_expression("2x+3") == "2*x+3"))
	checks.append(("sanitize superscript", sanitize_expression("3²") == "3^2"))
	checks.append(("sanitize percent", sanitize_expression("50%+30") == "(50/100)+30"))

	failed = [name for name, ok in checks if not ok]
	for name, ok in checks:
		print(f"{name}: {'OK' if ok else 'FAIL'}")

	print("\nExpected vs Actual:")
	for label, expected, actual in expected_actual:
		status = "OK" if expected == actual else "FAIL"
		print(f"- {label}: {status}")
		print(f"  expected: {expected}")
		print(f"  actual:   {actual}")

	if failed:
		print("\nFAILED CHECKS:")
		for name in failed:
			print(f"- {name}")
		raise SystemExit(1)

	print("\nAll regression checks passed.")


if __name__ == "__main__":
	# Uso rápido:
	#   python regression_checks.py
	#   python regression_checks.py --inspect "2+2 = + 3 ="
	#   python regression_checks.py --inspect "DRG 1 func:sin"
	if "--inspect" in sys.argv:
		try:
			sequence = sys.argv[sys.argv.index("--inspect") + 1]
		except (ValueError, IndexError):
			raise SystemExit("Missing key sequence after --inspect")

		inspect_sequence(sequence)
	else:
		run_regressions()
