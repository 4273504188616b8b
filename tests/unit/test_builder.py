# tests/unit/test_builder.py
from tutor.builder import (
    build_flashcards, build_misconception_graph, build_reasoning_graph,
    build_response, build_steps,
)


def test_reasoning_graph_defaults_and_normalization():
    g = build_reasoning_graph({
        "nodes": [
            {"id": "a", "role": "problem", "label": "Start"},
            {"id": 2, "type": "weird"},
            {"label": "no id"},
            "not a node",
        ],
        "edges": [{"from": "a", "to": "2", "reason": "then"}, {"from": "a"}],
        "main_path": ["a", "", None, "2"],
    })
    assert [n.id for n in g.nodes] == ["a", "2"]
    a, b = g.nodes
    assert a.role == "PROBLEM" and a.label == "Start"
    assert b.role == "STEP" and b.type == "default" and b.label == "2"
    assert len(g.edges) == 1 and g.edges[0].source == "a" and g.edges[0].target == "2"
    assert g.main_path == ["a", "2"]


def test_duplicate_ids_last_write_wins():
    g = build_reasoning_graph({"nodes": [
        {"id": "a", "label": "first"}, {"id": "b"}, {"id": "a", "label": "second"},
    ]})
    assert [n.id for n in g.nodes] == ["a", "b"]
    assert g.nodes[0].label == "second"


def test_dangling_edges_are_kept_and_source_target_accepted():
    g = build_reasoning_graph({
        "nodes": [{"id": "a"}],
        "edges": [{"source": "a", "target": "ghost"}],
    })
    assert g.edges[0].target == "ghost"


def test_reasoning_graph_without_nodes_is_none():
    assert build_reasoning_graph({"nodes": []}) is None
    assert build_reasoning_graph("nope") is None
    assert build_reasoning_graph(None) is None


def test_main_path_not_a_list_is_ignored():
    g = build_reasoning_graph({"nodes": [{"id": "a"}], "main_path": "a"})
    assert g.main_path == []


def test_misconception_graph():
    g = build_misconception_graph({
        "nodes": [{"id": "m1", "type": "misconception", "severity": "HIGH"}, {"id": "c1", "type": "???"}],
        "edges": [{"from": "m1", "to": "c1", "relation": "stems_from"}, {"from": "c1", "to": "m1", "relation": "x"}],
    })
    assert g.nodes[0].type == "misconception" and g.nodes[0].severity == "high"
    assert g.nodes[1].type == "concept" and g.nodes[1].severity is None
    assert [e.relation for e in g.edges] == ["stems_from", "related_to"]


def test_steps_and_flashcards():
    steps = build_steps([
        {"step_id": "step1", "evaluation": "incorrect", "feedback": "chain rule"},
        {"evaluation": "???"},
        7,
    ])
    assert [s.step_id for s in steps] == ["step1", ""]
    assert steps[0].evaluation == "INCORRECT"
    assert steps[1].evaluation == "CORRECT"

    cards = build_flashcards([{"front": "Q", "back": "A"}, {"front": "Q only"}])
    assert len(cards) == 1 and cards[0].back == "A"


def test_build_response_tolerates_missing_sections():
    resp = build_response({"domain": "coding", "problem_summary": "Reverse a list"})
    assert resp.domain == "CODING"
    assert resp.problem_summary.short_text == "Reverse a list"
    assert resp.reasoning_graph is None and resp.misconception_graph is None
    assert resp.student_analysis == [] and resp.flashcards == []
    assert resp.code_solution is None


def test_build_response_rejects_non_objects():
    assert build_response(["a", "b"]) is None
    assert build_response(None) is None


def test_unknown_domain_falls_back_to_math():
    assert build_response({"domain": "CHEMISTRY"}).domain == "MATH"
