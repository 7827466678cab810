"""
Vision session aggregate: responses, per-category scoring state and
synthesis output for one user's reflective conversation.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.base import (
    CATEGORY_ORDER,
    Category,
    DecisionBand,
    LifeArea,
    VisionStatus,
    WeakestSignal,
)
from utils.date_utils import get_current_utc


class Response(BaseModel):
    """One answered question. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    category: Category
    question: str
    answer: str
    created_at: datetime = Field(default_factory=get_current_utc)


class Coverage(BaseModel):
    hits: List[str] = Field(default_factory=list)
    required: int = 0
    met: bool = False


class Subscores(BaseModel):
    lengthCoverage: float = 0.0
    specificity: float = 0.0
    richness: float = 0.0
    actionIdentity: float = 0.0
    coherence: float = 0.0


class CategoryState(BaseModel):
    css: float = Field(0.0, ge=0.0, le=1.0)
    coverage: Coverage = Field(default_factory=Coverage)
    subscores: Subscores = Field(default_factory=Subscores)
    decision_band: DecisionBand = DecisionBand.EVOKE
    weakest_signal: WeakestSignal = WeakestSignal.SPECIFICITY
    last_scored_at: Optional[datetime] = None


def compute_overall_completeness(
    category_states: Mapping[Category, CategoryState],
) -> int:
    """round(100 * mean css over the five categories, missing counted as 0)."""
    total = 0.0
    for category in CATEGORY_ORDER:
        state = category_states.get(category)
        total += state.css if state is not None else 0.0
    return int(round(100 * total / len(CATEGORY_ORDER)))


class VisionSession(BaseModel):
    """Aggregate root. Owns its responses and category states exclusively."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    title: Optional[str] = None
    categories: List[LifeArea] = Field(default_factory=list)
    category_states: Dict[Category, CategoryState] = Field(default_factory=dict)
    overall_completeness: int = Field(0, ge=0, le=100)
    summary: Optional[str] = None
    tagline: Optional[str] = None
    status: VisionStatus = VisionStatus.PROCESSING
    responses: List[Response] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=get_current_utc)
    updated_at: datetime = Field(default_factory=get_current_utc)

    def responses_in(self, category: Category) -> List[Response]:
        return [r for r in self.responses if r.category == category]

    def css_scores(self) -> Dict[str, float]:
        """Lower-cased category name to css, 0 for unscored categories."""
        scores: Dict[str, float] = {}
        for category in CATEGORY_ORDER:
            state = self.category_states.get(category)
            scores[category.value.lower()] = state.css if state is not None else 0.0
        return scores

    def refresh_completeness(self) -> None:
        self.overall_completeness = compute_overall_completeness(self.category_states)

    def touch(self) -> None:
        self.updated_at = get_current_utc()
