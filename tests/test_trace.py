"""Tests de la trace de diagnostic."""

import pytest

from colocmatch.config import AttributeModel
from colocmatch.matching.schema import SurveyProfile
from colocmatch.matching.scorer import CompatibilityScorer
from colocmatch.matching.trace import ScoreTrace, explain, format_trace


@pytest.fixture
def scorer() -> CompatibilityScorer:
    model = AttributeModel.from_list(
        [
            {"key": "region", "domain": "categorical", "weight": 50, "hard_filter": True},
            {"key": "budget", "domain": "numeric_range", "weight": 50, "range_span": 500, "unit": "$"},
            {"key": "hobbies", "domain": "multi_select", "weight": 20},
        ]
    )
    return CompatibilityScorer(model)


A = SurveyProfile("a", {"region": "NYC", "budget": 1500, "hobbies": {"yoga", "cooking"}})
B = SurveyProfile("b", {"region": "NYC", "budget": 1800})


def test_trace_does_not_change_result(scorer: CompatibilityScorer) -> None:
    result, trace = explain(scorer, A, B)
    assert result == scorer.score(A, B)
    assert trace.result is result


def test_trace_sums(scorer: CompatibilityScorer) -> None:
    _, trace = explain(scorer, A, B)
    assert trace.weighted_sum == pytest.approx(70.0)
    assert trace.total_weight == pytest.approx(100.0)
    assert [f.key for f in trace.fields] == ["region", "budget", "hobbies"]
    budget = trace.fields[1]
    assert budget.weight == 50.0
    assert budget.contribution == pytest.approx(20.0)
    assert trace.fields[2].contribution == 0.0
    assert trace.fields[0].hard_filter is True


def test_trace_to_dict_extends_result_shape(scorer: CompatibilityScorer) -> None:
    result, trace = explain(scorer, A, B, {"hobbies": 5})
    d = trace.to_dict()
    for key, value in result.to_dict().items():
        assert d[key] == value
    assert d["weightedSum"] == pytest.approx(70.0)
    assert d["totalWeight"] == pytest.approx(100.0)
    assert d["weights"] == {"region": 50.0, "budget": 50.0, "hobbies": 5.0}
    assert d["trace"][0]["valueA"] == "NYC"
    assert d["trace"][2]["valueA"] == ["cooking", "yoga"]


def test_collector_is_reset_between_calls(scorer: CompatibilityScorer) -> None:
    trace = ScoreTrace()
    scorer.score(A, B, trace=trace)
    scorer.score(B, A, trace=trace)
    assert trace.requester_id == "b"
    assert len(trace.fields) == 3


def test_format_trace(scorer: CompatibilityScorer) -> None:
    _, trace = explain(scorer, A, B, {"hobies": 1})
    text = format_trace(trace)
    assert "===== DEBUG COMPATIBILITY =====" in text
    assert "Comparing users: a and b" in text
    assert "budget" in text
    assert "weighted_sum = 70.0000" in text
    assert "[hard filter]" in text
    assert "warning:" in text
