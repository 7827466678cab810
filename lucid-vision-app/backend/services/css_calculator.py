"""
Context Sufficiency Score (CSS) calculator.

Pure, deterministic scoring of one answer from the analyzer's signals with
fixed channel weights and saturation points.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import List

from models.analysis import ResponseAnalysis
from models.base import Category, DecisionBand, WeakestSignal
from models.lexicon import coverage_for
from models.vision import Subscores

# Channel weights (sum to 1.0)
W_LENGTH_COVERAGE = 0.20
W_SPECIFICITY = 0.25
W_RICHNESS = 0.20
W_ACTION_IDENTITY = 0.20
W_COHERENCE = 0.15

# Saturation points
FULL_LENGTH_WORDS = 50
SPECIFICITY_SATURATION = 5
RICHNESS_SATURATION = 6
ACTION_SATURATION = 4

# Coherence penalties per issue
HEDGE_PENALTY = 0.1
CONTRADICTION_PENALTY = 0.2
VAGUENESS_PENALTY = 0.1

# Blend of deterministic score and the provider's proposed score
CALCULATED_BLEND = 0.7
PROPOSED_BLEND = 0.3

ADVANCE_THRESHOLD = 0.70
CLARIFY_THRESHOLD = 0.40

_WHITESPACE = re.compile(r"\s+")


def round_css(value: float) -> float:
    """Two decimals, halves rounded up."""
    return math.floor(value * 100 + 0.5) / 100


def word_count(answer: str) -> int:
    # Whitespace split without trimming: leading/trailing space adds a token
    return len(_WHITESPACE.split(answer))


@dataclass(frozen=True)
class ChannelScores:
    length_coverage: float
    specificity: float
    richness: float
    action_identity: float
    coherence: float

    @property
    def weighted(self) -> float:
        return (
            W_LENGTH_COVERAGE * self.length_coverage
            + W_SPECIFICITY * self.specificity
            + W_RICHNESS * self.richness
            + W_ACTION_IDENTITY * self.action_identity
            + W_COHERENCE * self.coherence
        )


def channel_scores(answer: str, analysis: ResponseAnalysis, category: Category) -> ChannelScores:
    """The five normalized channel scores, each in [0, 1]."""
    length_score = min(word_count(answer) / FULL_LENGTH_WORDS, 1.0)
    required = coverage_for(category).required
    coverage_score = min(len(analysis.coverage_hits) / required, 1.0)

    coherence = analysis.coherence_issues
    penalty = (
        HEDGE_PENALTY * len(coherence.hedges)
        + CONTRADICTION_PENALTY * len(coherence.contradictions)
        + VAGUENESS_PENALTY * len(coherence.vagueness)
    )

    return ChannelScores(
        length_coverage=0.5 * length_score + 0.5 * coverage_score,
        specificity=min(analysis.specificity_markers.count() / SPECIFICITY_SATURATION, 1.0),
        richness=min(analysis.sensory_emotional_hits.count() / RICHNESS_SATURATION, 1.0),
        action_identity=min(analysis.action_identity_markers.count() / ACTION_SATURATION, 1.0),
        coherence=max(1.0 - penalty, 0.0),
    )


def calculate(answer: str, analysis: ResponseAnalysis, category: Category) -> float:
    """Final CSS in [0, 1], unrounded."""
    calculated = channel_scores(answer, analysis, category).weighted
    final = CALCULATED_BLEND * calculated + PROPOSED_BLEND * analysis.proposed_css
    return max(0.0, min(1.0, final))


def classify_band(css: float) -> DecisionBand:
    if css >= ADVANCE_THRESHOLD:
        return DecisionBand.ADVANCE
    if css >= CLARIFY_THRESHOLD:
        return DecisionBand.CLARIFY
    return DecisionBand.EVOKE


def diagnostic_subscores(final_css: float) -> Subscores:
    """Per-channel display values: the final CSS scaled by each channel weight.

    They do not sum to the final CSS, which also blends in the proposed score.
    """
    return Subscores(
        lengthCoverage=final_css * W_LENGTH_COVERAGE,
        specificity=final_css * W_SPECIFICITY,
        richness=final_css * W_RICHNESS,
        actionIdentity=final_css * W_ACTION_IDENTITY,
        coherence=final_css * W_COHERENCE,
    )


@dataclass
class CSSResult:
    css: float
    decision_band: DecisionBand
    subscores: Subscores
    coverage_hits: List[str] = field(default_factory=list)
    categories_addressed: List[str] = field(default_factory=list)
    weakest_signal: WeakestSignal = WeakestSignal.SPECIFICITY
    rationale: str = ""


def score_response(answer: str, analysis: ResponseAnalysis, category: Category) -> CSSResult:
    """Score one analyzed answer.

    Only the reported ``css`` is rounded to two decimals; the band is taken
    from the unrounded score, so 0.6999 stays CLARIFY even though it reports
    as 0.70.
    """
    final = calculate(answer, analysis, category)
    return CSSResult(
        css=round_css(final),
        decision_band=classify_band(final),
        subscores=diagnostic_subscores(final),
        coverage_hits=list(analysis.coverage_hits),
        categories_addressed=list(analysis.categories_addressed),
        weakest_signal=analysis.weakest_signal,
        rationale=analysis.rationale,
    )
