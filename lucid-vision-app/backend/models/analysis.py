"""
Schema for the structured signals extracted from one vision answer.

Provider output is untrusted: every list defaults to empty, ``null`` becomes
empty, scalars are coerced, and ``proposed_css`` is clamped into [0, 1].
"""

from __future__ import annotations

import math
from typing import Any, List

from pydantic import BaseModel, BeforeValidator, Field, field_validator
from typing_extensions import Annotated

from models.base import WeakestSignal

FALLBACK_PROPOSED_CSS = 0.5
FALLBACK_RATIONALE = "AI analysis unavailable, using fallback"


def _coerce_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        return []
    out: List[str] = []
    for item in value:
        if item is None or isinstance(item, (dict, list)):
            continue
        text = str(item).strip()
        if text:
            out.append(text)
    return out


SignalList = Annotated[List[str], BeforeValidator(_coerce_str_list)]


class SpecificityMarkers(BaseModel):
    numbers: SignalList = Field(default_factory=list)
    names: SignalList = Field(default_factory=list)
    measurables: SignalList = Field(default_factory=list)

    def count(self) -> int:
        return len(self.numbers) + len(self.names) + len(self.measurables)


class SensoryEmotionalHits(BaseModel):
    sensory: SignalList = Field(default_factory=list)
    emotions: SignalList = Field(default_factory=list)
    body_sensations: SignalList = Field(default_factory=list)

    def count(self) -> int:
        return len(self.sensory) + len(self.emotions) + len(self.body_sensations)


class ActionIdentityMarkers(BaseModel):
    i_am_statements: SignalList = Field(default_factory=list)
    future_actions: SignalList = Field(default_factory=list)
    behaviors: SignalList = Field(default_factory=list)

    def count(self) -> int:
        return len(self.i_am_statements) + len(self.future_actions) + len(self.behaviors)


class CoherenceIssues(BaseModel):
    hedges: SignalList = Field(default_factory=list)
    contradictions: SignalList = Field(default_factory=list)
    vagueness: SignalList = Field(default_factory=list)


_SIGNAL_ALIASES = {
    "length": WeakestSignal.LENGTH,
    "length_coverage": WeakestSignal.LENGTH,
    "lengthcoverage": WeakestSignal.LENGTH,
    "coverage": WeakestSignal.LENGTH,
    "specificity": WeakestSignal.SPECIFICITY,
    "richness": WeakestSignal.RICHNESS,
    "sensory": WeakestSignal.RICHNESS,
    "emotional_richness": WeakestSignal.RICHNESS,
    "actionidentity": WeakestSignal.ACTION_IDENTITY,
    "action_identity": WeakestSignal.ACTION_IDENTITY,
    "action/identity": WeakestSignal.ACTION_IDENTITY,
    "action": WeakestSignal.ACTION_IDENTITY,
    "identity": WeakestSignal.ACTION_IDENTITY,
    "coherence": WeakestSignal.COHERENCE,
}


def normalize_weakest_signal(value: Any) -> WeakestSignal:
    """Map free-form provider labels onto the five signal names."""
    if isinstance(value, WeakestSignal):
        return value
    if isinstance(value, str):
        key = value.strip().lower().replace(" ", "_")
        if key in _SIGNAL_ALIASES:
            return _SIGNAL_ALIASES[key]
        # "Action/Identity clarity", "coherence/confidence" and similar
        for alias, signal in _SIGNAL_ALIASES.items():
            if key.startswith(alias):
                return signal
    return WeakestSignal.SPECIFICITY


class ResponseAnalysis(BaseModel):
    """Signals for one answer, as returned by the language-understanding provider."""

    categories_addressed: List[str] = Field(default_factory=list)
    coverage_hits: List[str] = Field(default_factory=list)
    specificity_markers: SpecificityMarkers = Field(default_factory=SpecificityMarkers)
    sensory_emotional_hits: SensoryEmotionalHits = Field(default_factory=SensoryEmotionalHits)
    action_identity_markers: ActionIdentityMarkers = Field(default_factory=ActionIdentityMarkers)
    coherence_issues: CoherenceIssues = Field(default_factory=CoherenceIssues)
    proposed_css: float = FALLBACK_PROPOSED_CSS
    rationale: str = ""
    weakest_signal: WeakestSignal = WeakestSignal.SPECIFICITY

    @field_validator("categories_addressed", "coverage_hits", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> List[str]:
        return _coerce_str_list(value)

    @field_validator(
        "specificity_markers",
        "sensory_emotional_hits",
        "action_identity_markers",
        "coherence_issues",
        mode="before",
    )
    @classmethod
    def _groups(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("proposed_css", mode="before")
    @classmethod
    def _clamp_css(cls, value: Any) -> float:
        try:
            css = float(value)
        except (TypeError, ValueError):
            return FALLBACK_PROPOSED_CSS
        if math.isnan(css):
            return FALLBACK_PROPOSED_CSS
        return max(0.0, min(1.0, css))

    @field_validator("rationale", mode="before")
    @classmethod
    def _rationale(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("weakest_signal", mode="before")
    @classmethod
    def _signal(cls, value: Any) -> WeakestSignal:
        return normalize_weakest_signal(value)

    @classmethod
    def fallback(cls, category: str) -> "ResponseAnalysis":
        """Degraded-but-valid analysis used when the provider is unavailable."""
        return cls(
            categories_addressed=[category],
            proposed_css=FALLBACK_PROPOSED_CSS,
            rationale=FALLBACK_RATIONALE,
            weakest_signal=WeakestSignal.SPECIFICITY,
        )
