"""
Interfaz gráfica de la calculadora científica.

Usa tkinter. La ventana principal solo traduce pulsaciones en
transiciones de ``CalculatorEngine`` y pinta el estado resultante;
las herramientas (gráficas, ecuaciones, conversiones e IMC) se abren
en ventanas aparte y llaman directamente a ``math_utils``.
"""

import math
import tkinter as tk
from tkinter import font as tkfont

import math_utils
from calculator_engine import POWER_EXPONENTS, AngleMode, CalculatorEngine, format_number
from config import APP_TITLE, GRAPH_ZOOM_MAX, GRAPH_ZOOM_MIN, MESSAGES
from graphing import GraphingTool
from logging_utils import get_logger

logger = get_logger(__name__)


# ═════════════════════════════════════════════════════════════════
#  Ventana principal
# ═════════════════════════════════════════════════════════════════

class CalculatorApp:
    """Ventana principal de la calculadora científica."""

    # ── Paleta de colores ────────────────────────────────────────
    C = {
        "bg":         "#1E1E2E",
        "display_bg": "#181825",
        "num":        "#313244",
        "num_fg":     "#CDD6F4",
        "op":         "#F38BA8",
        "op_fg":      "#1E1E2E",
        "func":       "#45475A",
        "func_fg":    "#CDD6F4",
        "special":    "#585B70",
        "special_fg": "#CDD6F4",
        "equals":     "#89B4FA",
        "equals_fg":  "#1E1E2E",
        "toggle_on":  "#A6E3A1",
        "expr_fg":    "#BAC2DE",
        "result_fg":  "#A6E3A1",
    }

    # ── Botones de funciones inmediatas ──────────────────────────
    #  (texto, acción)

    SCIENCE_BUTTONS = [
        [("sin", "func:sin"), ("cos", "func:cos"),
         ("tan", "func:tan"), ("cot", "func:cot")],
        [("x!", "func:factorial"), ("√x", "func:sqrt"),
         ("1/x", "func:reciprocal"), ("x²", "pow:0")],
        [("x³", "pow:1"), ("x⁻¹", "pow:2"),
         ("x½", "pow:3"), ("eˣ", "func:exp")],
        [("(", "insert:("), (")", "insert:)"),
         ("π", "const:π"), ("e", "const:e")],
    ]

    # ── Definiciones del teclado principal ────────────────────────
    #  Cada fila es una lista de (texto, acción, tipo_color)
    #  tipo_color: "num", "op", "func", "special", "equals"

    KEYPAD = [
        [("C",  "clear",     "special"), ("⌫", "backspace", "special"),
         ("%",  "insert:%",  "func"),    ("÷", "insert:/",  "op")],

        [("7",  "insert:7",  "num"), ("8", "insert:8", "num"),
         ("9",  "insert:9",  "num"), ("×", "insert:*", "op")],

        [("4",  "insert:4",  "num"), ("5", "insert:5", "num"),
         ("6",  "insert:6",  "num"), ("-", "insert:-", "op")],

        [("1",  "insert:1",  "num"), ("2", "insert:2", "num"),
         ("3",  "insert:3",  "num"), ("+", "insert:+", "op")],

        [("0",  "insert:0",  "num"), (".", "insert:.", "num"),
         ("=",  "equals",    "equals")],
    ]

    KEYBOARD_INSERT = set("0123456789.()+-*/%")

    # ────────────────────────────────────────────────────────────

    def __init__(self, root: tk.Tk, engine=None):
        self.root = root
        self.root.title(APP_TITLE)
        self.root.configure(bg=self.C["bg"])
        self.root.resizable(False, False)

        self.engine = engine if engine is not None else CalculatorEngine()

        self._init_fonts()
        self._create_menu()
        self._create_display()
        self._create_toggle_bar()
        self._create_science_panel()
        self._create_keypad()
        self._bind_keyboard()
        self._render()

    # ── Fuentes ──────────────────────────────────────────────────

    def _init_fonts(self):
        self._f_expr   = tkfont.Font(family="Consolas", size=13)
        self._f_result = tkfont.Font(family="Consolas", size=24, weight="bold")
        self._f_btn    = tkfont.Font(family="Segoe UI", size=15)
        self._f_func   = tkfont.Font(family="Segoe UI", size=12)
        self._f_small  = tkfont.Font(family="Segoe UI", size=11)

    # ── Menú de herramientas ─────────────────────────────────────

    def _create_menu(self):
        menubar = tk.Menu(self.root)
        tools = tk.Menu(menubar, tearoff=0)
        tools.add_command(label="Gráfica de funciones", command=lambda: GraphWindow(self.root))
        tools.add_command(label="Ecuaciones", command=lambda: EquationWindow(self.root))
        tools.add_command(label="Conversiones", command=lambda: ConverterWindow(self.root))
        tools.add_command(label="IMC", command=lambda: BMIWindow(self.root))
        menubar.add_cascade(label="Herramientas", menu=tools)
        self.root.config(menu=menubar)

    # ── Pantalla ─────────────────────────────────────────────────

    def _create_display(self):
        frame = tk.Frame(self.root, bg=self.C["display_bg"], padx=12, pady=8)
        frame.pack(fill="x", padx=6, pady=(6, 2))

        # Expresión anterior (solo tras un cálculo)
        self.history_var = tk.StringVar()
        tk.Label(
            frame, textvariable=self.history_var, font=self._f_expr,
            bg=self.C["display_bg"], fg=self.C["expr_fg"], anchor="e",
        ).pack(fill="x", pady=(4, 0))

        # Entrada o resultado
        self.display_var = tk.StringVar(value="0")
        tk.Label(
            frame, textvariable=self.display_var, font=self._f_result,
            bg=self.C["display_bg"], fg=self.C["result_fg"], anchor="e",
            width=17,
        ).pack(fill="x", pady=(2, 4))

    # ── Barra de toggles (DEG/RAD) ───────────────────────────────

    def _create_toggle_bar(self):
        frame = tk.Frame(self.root, bg=self.C["bg"])
        frame.pack(fill="x", padx=6, pady=(2, 2))

        self.angle_btn = tk.Button(
            frame, text="DEG", font=self._f_small, width=6,
            bg=self.C["op"], fg=self.C["op_fg"],
            activebackground=self.C["op"], relief="flat",
            command=lambda: self._on_key("angle"),
        )
        self.angle_btn.pack(side="right")

    # ── Panel de funciones científicas ───────────────────────────

    def _create_science_panel(self):
        frame = tk.Frame(self.root, bg=self.C["bg"])
        frame.pack(fill="x", padx=6, pady=2)
        for col in range(4):
            frame.columnconfigure(col, weight=1, uniform="sci")

        for r, row_def in enumerate(self.SCIENCE_BUTTONS):
            for col, (text, action) in enumerate(row_def):
                tk.Button(
                    frame, text=text, font=self._f_func,
                    bg=self.C["func"], fg=self.C["func_fg"],
                    activebackground=self.C["special"], relief="flat",
                    command=lambda a=action: self._on_key(a),
                ).grid(row=r, column=col, sticky="nsew", padx=2, pady=2, ipady=4)

    # ── Teclado numérico / operadores ────────────────────────────

    def _create_keypad(self):
        frame = tk.Frame(self.root, bg=self.C["bg"])
        frame.pack(fill="both", expand=True, padx=6, pady=(2, 6))

        max_cols = max(len(row) for row in self.KEYPAD)
        for c in range(max_cols):
            frame.columnconfigure(c, weight=1, uniform="key")

        for r, row_def in enumerate(self.KEYPAD):
            spans = self._compute_spans(len(row_def), max_cols)
            col_pos = 0
            for idx, (text, action, kind) in enumerate(row_def):
                btn = tk.Button(
                    frame, text=text, font=self._f_btn,
                    bg=self.C[kind], fg=self.C[f"{kind}_fg"],
                    activebackground=self.C["special"], relief="flat",
                    command=lambda a=action: self._on_key(a),
                )
                btn.grid(row=r, column=col_pos, columnspan=spans[idx],
                         sticky="nsew", padx=2, pady=2, ipady=8)
                col_pos += spans[idx]

        for r in range(len(self.KEYPAD)):
            frame.rowconfigure(r, weight=1)

    @staticmethod
    def _compute_spans(cols_in_row: int, max_cols: int) -> list[int]:
        """Reparte max_cols entre cols_in_row botones."""
        base, extra = divmod(max_cols, cols_in_row)
        spans = [base] * cols_in_row
        # Asignar columnas extra al último botón (generalmente '=')
        spans[-1] += extra
        return spans

    # ── Atajos de teclado ────────────────────────────────────────

    def _bind_keyboard(self):
        self.root.bind("<Return>", lambda _e: self._on_key("equals"))
        self.root.bind("<KP_Enter>", lambda _e: self._on_key("equals"))
        self.root.bind("<BackSpace>", lambda _e: self._on_key("backspace"))
        self.root.bind("<Escape>", lambda _e: self._on_key("clear"))
        self.root.bind("<Key>", self._on_keypress)

    def _on_keypress(self, event):
        if event.char == "=":
            self._on_key("equals")
        elif event.char and event.char in self.KEYBOARD_INSERT:
            self._on_key(f"insert:{event.char}")

    # ── Acciones ─────────────────────────────────────────────────

    def _on_key(self, action: str):
        engine = self.engine
        if action == "clear":
            engine.clear()
        elif action == "backspace":
            engine.backspace()
        elif action == "equals":
            engine.evaluate()
        elif action == "angle":
            engine.toggle_angle_mode()
        elif action.startswith("insert:"):
            engine.append(action[7:])
        elif action.startswith("const:"):
            engine.insert_constant(action[6:])
        elif action.startswith("func:"):
            engine.apply_function(action[5:])
        elif action.startswith("pow:"):
            engine.apply_power(POWER_EXPONENTS[int(action[4:])])
        self._render()

    def _render(self):
        state = self.engine.state
        self.history_var.set(state.history_text)
        self.display_var.set(state.display_text)
        if state.angle_mode is AngleMode.DEGREES:
            self.angle_btn.config(text="DEG", bg=self.C["op"], fg=self.C["op_fg"])
        else:
            self.angle_btn.config(text="RAD", bg=self.C["toggle_on"], fg=self.C["bg"])


# ═════════════════════════════════════════════════════════════════
#  Herramientas
# ═════════════════════════════════════════════════════════════════

def _read_float(var: tk.StringVar) -> float | None:
    try:
        value = float(var.get().strip().replace(",", "."))
    except ValueError:
        return None
    # float() acepta "nan" e "inf"
    return value if math.isfinite(value) else None


class _ToolWindow:
    C = CalculatorApp.C

    def __init__(self, parent, title: str):
        self.top = tk.Toplevel(parent)
        self.top.title(title)
        self.top.configure(bg=self.C["bg"], padx=10, pady=10)
        self.output_var = tk.StringVar()

    def _label(self, parent, text, row, col=0):
        tk.Label(parent, text=text, bg=self.C["bg"], fg=self.C["func_fg"]).grid(
            row=row, column=col, sticky="w", padx=2, pady=2)

    def _entry(self, parent, row, col=1, value=""):
        var = tk.StringVar(value=value)
        tk.Entry(parent, textvariable=var, width=12).grid(
            row=row, column=col, sticky="ew", padx=2, pady=2)
        return var

    def _button(self, parent, text, command, row, col=0, span=2):
        tk.Button(
            parent, text=text, command=command, relief="flat",
            bg=self.C["equals"], fg=self.C["equals_fg"],
        ).grid(row=row, column=col, columnspan=span, sticky="ew", padx=2, pady=4)

    def _output(self, parent, row, span=2):
        tk.Label(
            parent, textvariable=self.output_var, bg=self.C["display_bg"],
            fg=self.C["result_fg"], anchor="w", justify="left",
        ).grid(row=row, column=0, columnspan=span, sticky="ew", padx=2, pady=4)

    def _show(self, outcome: math_utils.MathResult, fmt=format_number) -> bool:
        if not outcome.ok:
            self.output_var.set(outcome.error.message)
            return False
        self.output_var.set(fmt(outcome.value))
        return True


class GraphWindow(_ToolWindow):
    """Graficador con redibujado diferido al dejar de escribir."""

    WIDTH = 520
    HEIGHT = 360

    def __init__(self, parent):
        super().__init__(parent, "Gráfica de funciones")
        self.tool = GraphingTool(scheduler=self.top, on_update=self._draw)

        self.expr_var = tk.StringVar(value=self.tool.expression)
        self.expr_var.trace_add("write", lambda *_: self.tool.set_expression(self.expr_var.get()))
        tk.Entry(self.top, textvariable=self.expr_var, width=40).pack(fill="x")

        self.zoom_var = tk.DoubleVar(value=self.tool.zoom)
        tk.Scale(
            self.top, from_=GRAPH_ZOOM_MIN, to=GRAPH_ZOOM_MAX, resolution=0.1,
            orient="horizontal", label="Zoom", variable=self.zoom_var,
            command=lambda value: self.tool.set_zoom(float(value)),
        ).pack(fill="x")

        self.canvas = tk.Canvas(self.top, width=self.WIDTH, height=self.HEIGHT,
                                bg=self.C["display_bg"], highlightthickness=0)
        self.canvas.pack()
        tk.Label(self.top, textvariable=self.output_var, bg=self.C["bg"],
                 fg=self.C["op"]).pack(fill="x")

        self.tool.generate_graph()

    def _draw(self, tool: GraphingTool):
        self.canvas.delete("all")
        self.output_var.set(tool.error or "")
        if not tool.data:
            return

        x_min, x_max = tool.x_range
        ys = [p.y for p in tool.data]
        y_min, y_max = min(ys), max(ys)
        if y_max - y_min < 1e-9:
            y_min, y_max = y_min - 1, y_max + 1

        def to_canvas(x, y):
            cx = (x - x_min) / (x_max - x_min) * self.WIDTH
            cy = self.HEIGHT - (y - y_min) / (y_max - y_min) * self.HEIGHT
            return cx, cy

        # Ejes
        if y_min <= 0 <= y_max:
            _, cy = to_canvas(x_min, 0)
            self.canvas.create_line(0, cy, self.WIDTH, cy, fill=self.C["special"])
        cx, _ = to_canvas(0, y_min)
        self.canvas.create_line(cx, 0, cx, self.HEIGHT, fill=self.C["special"])

        # Tramos continuos: se corta donde faltan muestras
        max_gap = 2 * (x_max - x_min) / max(1, len(tool.data))
        segment = []
        previous = None
        for point in tool.data:
            if previous is not None and point.x - previous.x > max_gap:
                self._polyline(segment)
                segment = []
            segment.extend(to_canvas(point.x, point.y))
            previous = point
        self._polyline(segment)

    def _polyline(self, coords):
        if len(coords) >= 4:
            self.canvas.create_line(*coords, fill=self.C["equals"], width=2)


class EquationWindow(_ToolWindow):
    """ax + b = 0 y ax² + bx + c = 0."""

    def __init__(self, parent):
        super().__init__(parent, "Ecuaciones")
        frame = tk.Frame(self.top, bg=self.C["bg"])
        frame.pack(fill="both")

        self._label(frame, "Lineal  ax + b = 0", 0)
        self.lin_a = self._entry(frame, 1, value="1")
        self._label(frame, "a", 1)
        self.lin_b = self._entry(frame, 2, value="0")
        self._label(frame, "b", 2)
        self._button(frame, "Resolver lineal", self._solve_linear, 3)

        self._label(frame, "Cuadrática  ax² + bx + c = 0", 4)
        self.quad = []
        for i, name in enumerate("abc"):
            self._label(frame, name, 5 + i)
            self.quad.append(self._entry(frame, 5 + i, value="1" if name == "a" else "0"))
        self._button(frame, "Resolver cuadrática", self._solve_quadratic, 8)
        self._output(frame, 9)

    def _solve_linear(self):
        a, b = _read_float(self.lin_a), _read_float(self.lin_b)
        if a is None or b is None:
            self.output_var.set(MESSAGES["invalid_input"])
            return
        solution = math_utils.solve_linear_equation(a, b)
        if solution.kind is math_utils.LinearKind.INFINITE:
            self.output_var.set("La ecuación tiene infinitas soluciones")
        elif solution.kind is math_utils.LinearKind.NONE:
            self.output_var.set("La ecuación no tiene solución")
        else:
            self.output_var.set(f"x = {format_number(solution.x)}")

    def _solve_quadratic(self):
        a, b, c = (_read_float(var) for var in self.quad)
        if a is None or b is None or c is None:
            self.output_var.set(MESSAGES["invalid_input"])
            return
        solution = math_utils.solve_quadratic_equation(a, b, c)
        if isinstance(solution, math_utils.MathResult):
            self._show(solution)
        elif solution.kind is math_utils.QuadraticKind.NO_REAL_ROOTS:
            self.output_var.set("La ecuación no tiene raíces reales")
        elif solution.kind is math_utils.QuadraticKind.REPEATED_ROOT:
            self.output_var.set(f"x₁ = x₂ = {format_number(solution.x1)}")
        else:
            self.output_var.set(
                f"x₁ = {format_number(solution.x1)}\nx₂ = {format_number(solution.x2)}")


class ConverterWindow(_ToolWindow):
    """Temperatura, divisas (tasas fijas) y bases numéricas."""

    CONVERSIONS = [
        ("°C → °F", "float", math_utils.celsius_to_fahrenheit),
        ("°F → °C", "float", math_utils.fahrenheit_to_celsius),
        ("CNY → USD", "float", math_utils.cny_to_usd),
        ("USD → CNY", "float", math_utils.usd_to_cny),
        ("Decimal → binario", "float", math_utils.decimal_to_binary),
        ("Decimal → hexadecimal", "float", math_utils.decimal_to_hex),
        ("Binario → decimal", "text", math_utils.binary_to_decimal),
        ("Hexadecimal → decimal", "text", math_utils.hex_to_decimal),
    ]

    def __init__(self, parent):
        super().__init__(parent, "Conversiones")
        frame = tk.Frame(self.top, bg=self.C["bg"])
        frame.pack(fill="both")

        self.kind_var = tk.StringVar(value=self.CONVERSIONS[0][0])
        tk.OptionMenu(frame, self.kind_var, *[c[0] for c in self.CONVERSIONS]).grid(
            row=0, column=0, columnspan=2, sticky="ew")
        self._label(frame, "Valor", 1)
        self.value_var = self._entry(frame, 1)
        self._button(frame, "Convertir", self._convert, 2)
        self._output(frame, 3)

    def _convert(self):
        label = self.kind_var.get()
        _, kind, func = next(c for c in self.CONVERSIONS if c[0] == label)
        if kind == "text":
            self._show(func(self.value_var.get().strip()))
            return

        value = _read_float(self.value_var)
        if value is None:
            self.output_var.set(MESSAGES["invalid_input"])
            return
        out = func(value)
        if isinstance(out, math_utils.MathResult):
            self._show(out)
        elif isinstance(out, str):
            self.output_var.set(out)
        else:
            self.output_var.set(format_number(out))


class BMIWindow(_ToolWindow):
    """Índice de masa corporal."""

    def __init__(self, parent):
        super().__init__(parent, "IMC")
        frame = tk.Frame(self.top, bg=self.C["bg"])
        frame.pack(fill="both")

        self._label(frame, "Estatura (cm)", 0)
        self.height_var = self._entry(frame, 0)
        self._label(frame, "Peso (kg)", 1)
        self.weight_var = self._entry(frame, 1)
        self._button(frame, "Calcular", self._calculate, 2)
        self._output(frame, 3)

    def _calculate(self):
        height, weight = _read_float(self.height_var), _read_float(self.weight_var)
        if height is None or weight is None:
            self.output_var.set(MESSAGES["invalid_input"])
            return
        outcome = math_utils.calculate_bmi(height, weight)
        if self._show(outcome, fmt=lambda v: f"{v:.1f}"):
            category = math_utils.get_bmi_category(outcome.value)
            self.output_var.set(f"IMC {outcome.value:.1f} · {category.value}")
