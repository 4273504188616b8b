# tests/unit/test_correlate.py
import pytest

from graph_based.correlate import STRATEGIES, first_number, resolve_step
from tutor.models import StudentStepAnalysis


def _steps(*ids):
    return [{"step_id": i} for i in ids]


def test_first_number():
    assert first_number("step12b3") == 12
    assert first_number("start") is None
    assert first_number(None) is None


def test_unique_numeric_match_across_conventions():
    assert resolve_step("S2", _steps("step1", "step2", "step3")) == 1
    assert resolve_step("node-3", _steps("step1", "step2", "step3")) == 2


def test_exact_match_wins_over_numeric_coincidence():
    assert resolve_step("step3", _steps("s3", "a3", "step3")) == 2


def test_positional_fallback():
    assert resolve_step("process-2", _steps("a", "b", "c")) == 1


def test_out_of_range_positional_is_no_match():
    assert resolve_step("5", _steps("step1", "step2", "step3")) is None


def test_node_without_digits():
    assert resolve_step("start", _steps("start", "step1")) == 0
    assert resolve_step("start", _steps("step1", "step2")) is None


def test_zero_is_not_a_position():
    assert resolve_step("step0", _steps("a", "b")) is None


@pytest.mark.parametrize("node_id, steps", [
    (None, _steps("step1")),
    ("", _steps("step1")),
    ("step1", None),
    ("step1", []),
    ("step1", [{}, {"step_id": None}, {"step_id": 1.5}, "junk"]),
    (True, _steps("step1")),
    (["step1"], _steps("step1")),
])
def test_malformed_input_never_raises(node_id, steps):
    resolve_step(node_id, steps)


def test_accepts_models_strings_and_int_ids():
    steps = [StudentStepAnalysis(step_id="intro"), StudentStepAnalysis(step_id="step2")]
    assert resolve_step("2", steps) == 1
    assert resolve_step("b", ["a", "b"]) == 1
    assert resolve_step(4, [{"step_id": 4}]) == 0


def test_strategies_are_ordered_and_named():
    assert [name for name, _ in STRATEGIES] == ["unique_number", "exact_id", "position"]
