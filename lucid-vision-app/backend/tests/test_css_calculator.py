"""
Deterministic scoring: channel math, blend, rounding and band thresholds.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from models.analysis import ResponseAnalysis  # noqa: E402
from models.base import Category, DecisionBand, WeakestSignal  # noqa: E402
from services import css_calculator  # noqa: E402
from services.css_calculator import (  # noqa: E402
    calculate,
    channel_scores,
    classify_band,
    round_css,
    score_response,
    word_count,
)
from conftest import forty_words, vision_payload  # noqa: E402


def _analysis(**overrides) -> ResponseAnalysis:
    return ResponseAnalysis.model_validate(vision_payload(**overrides))


def _saturated(**overrides) -> ResponseAnalysis:
    payload = vision_payload(
        coverage_hits=["specific_goal", "people_involved", "success_criteria"],
        specificity_markers={"numbers": ["3", "2027"], "names": ["Lisbon", "Ana"], "measurables": ["10k"]},
        sensory_emotional_hits={"sensory": ["salt air", "warm"], "emotions": ["calm", "joy"], "body_sensations": ["open chest", "loose shoulders"]},
        action_identity_markers={"i_am_statements": ["I am steady"], "future_actions": ["swim daily"], "behaviors": ["cook dinner", "journal"]},
        proposed_css=1.0,
    )
    payload.update(overrides)
    return ResponseAnalysis.model_validate(payload)


def test_forty_word_vision_answer_scores_evoke():
    analysis = _analysis()

    final = calculate(forty_words(), analysis, Category.VISION)
    result = score_response(forty_words(), analysis, Category.VISION)

    assert final == pytest.approx(0.387667, abs=1e-5)
    assert result.css == 0.39
    assert result.decision_band == DecisionBand.EVOKE
    assert result.weakest_signal == WeakestSignal.SPECIFICITY
    assert result.coverage_hits == ["specific_goal", "people_involved"]


def test_channel_scores_for_forty_word_answer():
    scores = channel_scores(forty_words(), _analysis(), Category.VISION)

    assert scores.length_coverage == pytest.approx(0.5 * 0.8 + 0.5 * (2 / 3))
    assert scores.specificity == 0.0
    assert scores.richness == 0.0
    assert scores.action_identity == 0.0
    assert scores.coherence == 1.0


@pytest.mark.parametrize(
    "css,band",
    [
        (1.0, DecisionBand.ADVANCE),
        (0.70, DecisionBand.ADVANCE),
        (0.6999, DecisionBand.CLARIFY),
        (0.40, DecisionBand.CLARIFY),
        (0.3999, DecisionBand.EVOKE),
        (0.0, DecisionBand.EVOKE),
    ],
)
def test_band_thresholds(css, band):
    assert classify_band(css) == band


@pytest.mark.parametrize(
    "final,reported,band",
    [
        (0.6951, 0.70, DecisionBand.CLARIFY),
        (0.6999, 0.70, DecisionBand.CLARIFY),
        (0.3951, 0.40, DecisionBand.EVOKE),
        (0.70, 0.70, DecisionBand.ADVANCE),
    ],
)
def test_band_uses_unrounded_score(monkeypatch, final, reported, band):
    monkeypatch.setattr(css_calculator, "calculate", lambda *a: final)
    result = css_calculator.score_response("x", _analysis(), Category.VISION)
    assert result.css == reported
    assert result.decision_band == band


def test_fully_saturated_answer_reaches_one():
    answer = " ".join(["word"] * 80)
    result = score_response(answer, _saturated(), Category.VISION)

    assert calculate(answer, _saturated(), Category.VISION) == pytest.approx(1.0)
    assert result.css == 1.0
    assert result.decision_band == DecisionBand.ADVANCE


def test_saturation_caps_each_channel():
    many = [str(i) for i in range(20)]
    analysis = _saturated(
        specificity_markers={"numbers": many},
        sensory_emotional_hits={"sensory": many},
        action_identity_markers={"behaviors": many},
    )
    scores = channel_scores(" ".join(["w"] * 500), analysis, Category.VISION)

    assert scores.specificity == 1.0
    assert scores.richness == 1.0
    assert scores.action_identity == 1.0
    assert scores.length_coverage == 1.0


def test_coherence_penalties_floor_at_zero():
    analysis = _analysis(coherence_issues={"contradictions": ["a", "b", "c", "d", "e", "f"]})
    assert channel_scores(forty_words(), analysis, Category.VISION).coherence == 0.0

    analysis = _analysis(coherence_issues={"hedges": ["maybe"], "contradictions": ["x"], "vagueness": ["soon"]})
    assert channel_scores(forty_words(), analysis, Category.VISION).coherence == pytest.approx(0.6)


def test_final_score_stays_in_unit_interval():
    low = _analysis(coverage_hits=[], proposed_css=0.0, coherence_issues={"contradictions": ["a"] * 10})
    assert 0.0 <= calculate("", low, Category.EMBODIMENT) <= 1.0

    high = _saturated(proposed_css=1.0)
    assert 0.0 <= calculate(" ".join(["w"] * 200), high, Category.EMBODIMENT) <= 1.0


def test_more_coverage_never_lowers_css():
    slots = ["specific_goal", "scene_location_timeframe", "people_involved", "sensory_details", "success_criteria"]
    previous = -1.0
    for n in range(len(slots) + 1):
        css = calculate(forty_words(), _analysis(coverage_hits=slots[:n]), Category.VISION)
        assert css >= previous
        previous = css


def test_coverage_required_differs_by_category():
    analysis = _analysis(coverage_hits=["a", "b"])
    # Emotion needs two slots, Vision three
    assert channel_scores(forty_words(), analysis, Category.EMOTION).length_coverage > \
        channel_scores(forty_words(), analysis, Category.VISION).length_coverage


def test_subscores_are_final_css_times_weight():
    analysis = _analysis()
    final = calculate(forty_words(), analysis, Category.VISION)
    sub = score_response(forty_words(), analysis, Category.VISION).subscores

    assert sub.lengthCoverage == pytest.approx(final * 0.20)
    assert sub.specificity == pytest.approx(final * 0.25)
    assert sub.richness == pytest.approx(final * 0.20)
    assert sub.actionIdentity == pytest.approx(final * 0.20)
    assert sub.coherence == pytest.approx(final * 0.15)


def test_scoring_is_deterministic():
    analysis = _analysis()
    first = score_response(forty_words(), analysis, Category.BELIEF)
    second = score_response(forty_words(), analysis, Category.BELIEF)
    assert first == second


@pytest.mark.parametrize(
    "value,expected",
    [(0.385, 0.39), (0.3849, 0.38), (0.0, 0.0), (0.12345, 0.12)],
)
def test_round_css_rounds_half_up(value, expected):
    assert round_css(value) == pytest.approx(expected)


def test_word_count_splits_on_whitespace_runs():
    assert word_count("one two  three\tfour\nfive") == 5
    assert word_count("single") == 1
    # Leading whitespace yields an empty leading token
    assert word_count(" padded answer") == 3
