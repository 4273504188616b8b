# tests/unit/test_layout.py
import math

import pytest

from app.core.config import LayoutCfg
from graph_based.layout import LayoutError
from graph_based.layout.fit import fit_transform
from graph_based.layout.force import ForceLayout, layout_graph
from graph_based.layout.shapes import misconception_shape, node_shape

NODES = [{"id": "a"}, {"id": "b"}, {"id": "c"}, {"id": "d"}]
EDGES = [{"from": "a", "to": "b"}, {"from": "b", "to": "c"}, {"from": "a", "to": "d"}]


def test_deterministic_for_a_given_seed():
    p1 = ForceLayout(NODES, EDGES, 800, 600).run().positions
    p2 = ForceLayout(NODES, EDGES, 800, 600).run().positions
    assert p1 == p2


def test_positions_always_finite():
    sim = ForceLayout(NODES, EDGES, 800, 600)
    for _ in range(10):
        sim.tick()
        assert all(math.isfinite(x) and math.isfinite(y) for x, y in sim.positions().values())


def test_levels_drive_vertical_order():
    res = layout_graph(NODES, EDGES, 800, 600)
    y = {k: p[1] for k, p in res.positions.items()}
    assert res.levels == {"a": 0, "b": 1, "d": 1, "c": 2}
    assert y["a"] < y["b"] < y["c"]
    assert y["a"] < y["d"]


def test_run_settles_within_budget():
    res = ForceLayout(NODES, EDGES, 800, 600).run(max_ticks=1000)
    assert res.settled
    assert res.ticks < 1000


def test_tick_budget_returns_unsettled_positions():
    res = ForceLayout(NODES, EDGES, 800, 600).run(max_ticks=5)
    assert res.ticks == 5
    assert not res.settled
    assert set(res.positions) == {"a", "b", "c", "d"}


def test_coincident_nodes_are_separated():
    nodes = [{"id": "a", "x": 100.0, "y": 100.0}, {"id": "b", "x": 100.0, "y": 100.0}]
    res = ForceLayout(nodes, [], 800, 600, layered=False).run()
    (ax, ay), (bx, by) = res.positions["a"], res.positions["b"]
    assert math.hypot(ax - bx, ay - by) > 1.0


def test_dangling_edges_are_ignored():
    res = layout_graph([{"id": "a"}, {"id": "b"}], [{"from": "a", "to": "ghost"}], 800, 600)
    assert set(res.positions) == {"a", "b"}


def test_empty_graph():
    res = layout_graph([], [], 800, 600)
    assert res.positions == {}
    assert res.transform == {"scale": 1.0, "translate_x": 0.0, "translate_y": 0.0}


def test_invalid_viewport():
    with pytest.raises(LayoutError):
        ForceLayout(NODES, EDGES, 0, 600)


def test_drag_pins_node_to_pointer():
    sim = ForceLayout(NODES, EDGES, 800, 600)
    sim.run(max_ticks=20)
    sim.drag_start("a")
    sim.drag_to("a", 10.0, 20.0)
    for _ in range(5):
        sim.tick()
    assert sim.positions()["a"] == (10.0, 20.0)
    assert sim.alpha_target == pytest.approx(0.3)
    sim.drag_end("a")
    assert sim.dragging is None and sim.alpha_target == 0.0
    sim.tick()
    assert sim.positions()["a"] != (10.0, 20.0)


def test_one_drag_at_a_time():
    sim = ForceLayout(NODES, EDGES, 800, 600)
    sim.drag_start("a")
    with pytest.raises(LayoutError):
        sim.drag_start("b")
    with pytest.raises(LayoutError):
        sim.drag_to("b", 0, 0)
    with pytest.raises(LayoutError):
        sim.drag_end("b")
    sim.drag_end("a")
    sim.drag_start("b")
    assert sim.dragging == "b"


def test_drag_unknown_node():
    sim = ForceLayout(NODES, EDGES, 800, 600)
    with pytest.raises(LayoutError):
        sim.drag_start("zzz")


def test_settings_are_honoured():
    cfg = LayoutCfg(seed=1, max_ticks=3)
    res = ForceLayout(NODES, EDGES, 800, 600, cfg=cfg).run()
    assert res.ticks == 3


# ---- fit ----

def test_fit_empty_is_identity():
    assert fit_transform([], 800, 600) == {"scale": 1.0, "translate_x": 0.0, "translate_y": 0.0}


def test_fit_single_point_is_clamped_to_max_zoom():
    t = fit_transform([(100.0, 100.0)], 800, 600)
    assert t["scale"] == 2.0
    assert t["translate_x"] == pytest.approx(200.0)
    assert t["translate_y"] == pytest.approx(100.0)


def test_fit_wide_graph_is_clamped_to_min_zoom():
    t = fit_transform([(0.0, 0.0), (10000.0, 0.0)], 800, 600)
    assert t["scale"] == 0.4


def test_fit_centers_bounding_box():
    t = fit_transform([(0.0, 0.0), (400.0, 300.0)], 800, 600, padding=60)
    scale = 0.95 / max(520 / 800, 420 / 600)
    assert t["scale"] == pytest.approx(scale)
    assert t["translate_x"] == pytest.approx(400 - scale * 200)
    assert t["translate_y"] == pytest.approx(300 - scale * 150)


# ---- shapes ----

def test_math_shapes_are_role_colored_circles():
    s = node_shape({"id": "p", "role": "PROBLEM"}, "MATH")
    assert (s.kind, s.color, s.icon) == ("circle", "#6366F1", "?")
    s = node_shape({"id": "x"}, "PHYSICS")
    assert (s.kind, s.color, s.icon) == ("circle", "#334155", "•")


@pytest.mark.parametrize("ntype, kind, color", [
    ("decision", "diamond", "#F59E0B"),
    ("loop", "diamond", "#F59E0B"),
    ("start", "pill", "#3B82F6"),
    ("end", "pill", "#3B82F6"),
    ("process", "rect", "#8B5CF6"),
    ("default", "rect", "#8B5CF6"),
])
def test_coding_flowchart_shapes(ntype, kind, color):
    s = node_shape({"id": "n", "type": ntype}, "CODING")
    assert s.kind == kind and s.color == color


def test_misconception_shapes():
    assert misconception_shape({"type": "misconception"}).icon == "!"
    assert misconception_shape({"type": "concept"}).color == "#10B981"
