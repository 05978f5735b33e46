import pytest

from config import GRAPH_DEBOUNCE_MS, GRAPH_STEPS, MESSAGES
from errors import CalculationError
from graphing import Debouncer, GraphingTool, Point, generate_function_data, prepare_function_expression


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("y=x^2", "x^2"),
        ("  y = 2x²  ", "2*x^2"),
        ("3 x + 1", "3*x + 1"),
        ("sin(x)", "sin(x)"),
    ],
)
def test_prepare_function_expression(raw, expected):
    assert prepare_function_expression(raw) == expected


def test_generate_function_data_samples_range():
    data = generate_function_data("y=x^2", -1, 1, 4)
    assert [p.x for p in data] == [-1, -0.5, 0, 0.5, 1]
    assert [p.y for p in data] == [1, 0.25, 0, 0.25, 1]


def test_generate_function_data_skips_undefined_points():
    data = generate_function_data("y=1/x", -1, 1, 2)
    assert data == [Point(-1.0, -1.0), Point(1.0, 1.0)]


def test_generate_function_data_drops_large_values():
    data = generate_function_data("10^7*x", -1, 1, 2)
    assert data == [Point(0.0, 0.0)]


def test_generate_function_data_drops_complex_values():
    data = generate_function_data("sqrt(x)", -1, 1, 2)
    assert [p.x for p in data] == [0, 1]


def test_generate_function_data_rejects_bad_expression():
    with pytest.raises(CalculationError):
        generate_function_data("y=foo(x)")
    with pytest.raises(ValueError):
        generate_function_data("x", steps=0)


def test_debouncer_runs_latest_call_only(scheduler):
    calls = []
    debouncer = Debouncer(scheduler, delay_ms=GRAPH_DEBOUNCE_MS)

    debouncer.trigger(lambda: calls.append("first"))
    debouncer.trigger(lambda: calls.append("second"))
    assert debouncer.pending
    assert scheduler.cancelled == [1]
    assert [ms for ms, _ in scheduler.pending.values()] == [GRAPH_DEBOUNCE_MS]

    scheduler.run_pending()
    assert calls == ["second"]
    assert not debouncer.pending


def test_debouncer_cancel(scheduler):
    calls = []
    debouncer = Debouncer(scheduler)
    debouncer.trigger(lambda: calls.append(1))
    debouncer.cancel()
    scheduler.run_pending()
    assert calls == []


def test_graphing_tool_default_graph():
    tool = GraphingTool()
    data = tool.generate_graph()
    assert tool.error is None
    assert len(data) == GRAPH_STEPS + 1
    assert data[0].x == pytest.approx(-10)
    assert data[-1].y == pytest.approx(100)


def test_graphing_tool_debounces_expression_changes(scheduler):
    updates = []
    tool = GraphingTool(scheduler=scheduler, on_update=updates.append)

    tool.set_expression("y=x")
    tool.set_expression("y=2x")
    assert tool.data == []
    assert updates == []

    scheduler.run_pending()
    assert updates == [tool]
    assert tool.data[-1].y == pytest.approx(20)


def test_graphing_tool_zoom(scheduler):
    tool = GraphingTool(scheduler=scheduler)
    tool.set_zoom(2)
    assert tool.x_range == (-5, 5)
    tool.set_zoom(10)
    assert tool.zoom == 3
    tool.set_zoom(0.1)
    assert tool.zoom == 0.5

    scheduler.run_pending()
    assert tool.data[0].x == pytest.approx(-20)


def test_graphing_tool_reports_parse_error():
    tool = GraphingTool()
    tool.set_expression("y=")
    assert tool.data == []
    assert tool.error == MESSAGES["graph_parse_error"]

    tool.set_expression("y=x+1")
    assert tool.error is None
    assert tool.data
