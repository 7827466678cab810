"""
Category Aggregator
-------------------
Folds per-response CSS results into per-category state on a
``VisionSession`` and keeps ``overall_completeness`` in step.

Each scored response fully overwrites the state of every category it
addresses; states are never incrementally patched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import structlog

from models.base import CATEGORY_ORDER, Category, DecisionBand, WeakestSignal
from models.lexicon import coverage_for
from models.vision import CategoryState, Coverage, Response, VisionSession
from services.css_calculator import CSSResult, score_response as score_answer
from services.response_analyzer import ResponseAnalyzer
from utils.date_utils import get_current_utc

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScoreOutcome:
    css: float
    decision_band: DecisionBand
    categories_addressed: List[Category]
    weakest_signal: WeakestSignal


def resolve_addressed(category: Category, names: Iterable[str]) -> List[Category]:
    """Known categories named by the analyzer plus ``category``, in fixed order."""
    addressed = {category}
    for name in names:
        parsed = Category.parse(name)
        if parsed is not None:
            addressed.add(parsed)
    return [c for c in CATEGORY_ORDER if c in addressed]


def build_state(category: Category, result: CSSResult, scored_at: datetime) -> CategoryState:
    spec = coverage_for(category)
    return CategoryState(
        css=result.css,
        coverage=Coverage(
            hits=list(result.coverage_hits),
            required=spec.required,
            met=len(result.coverage_hits) >= spec.required,
        ),
        subscores=result.subscores,
        decision_band=result.decision_band,
        weakest_signal=result.weakest_signal,
        last_scored_at=scored_at,
    )


def apply_result(
    session: VisionSession,
    category: Category,
    result: CSSResult,
    scored_at: Optional[datetime] = None,
) -> List[Category]:
    """Overwrite every addressed category's state and refresh completeness."""
    scored_at = scored_at or get_current_utc()
    addressed = resolve_addressed(category, result.categories_addressed)
    for target in addressed:
        session.category_states[target] = build_state(target, result, scored_at)
    session.refresh_completeness()
    return addressed


class CategoryAggregator:
    """Runs analysis and scoring for responses and applies them to a session."""

    def __init__(self, analyzer: ResponseAnalyzer):
        self.analyzer = analyzer

    async def _score(
        self,
        category: Category,
        question: str,
        answer: str,
        previous: Sequence[Response],
    ) -> CSSResult:
        analysis = await self.analyzer.analyze(category, question, answer, previous)
        return score_answer(answer, analysis, category)

    async def score_response(
        self,
        session: VisionSession,
        category: Category,
        question: str,
        answer: str,
    ) -> ScoreOutcome:
        """Score a new answer against the session's prior answers in ``category``.

        Mutates ``session`` in memory only; the caller appends the response and
        persists the aggregate.
        """
        result = await self._score(category, question, answer, session.responses_in(category))
        addressed = apply_result(session, category, result)
        logger.info(
            "response_scored",
            vision_id=session.id,
            category=category.value,
            css=result.css,
            decision_band=result.decision_band.value,
            categories_addressed=[c.value for c in addressed],
            overall_completeness=session.overall_completeness,
        )
        return ScoreOutcome(
            css=result.css,
            decision_band=result.decision_band,
            categories_addressed=addressed,
            weakest_signal=result.weakest_signal,
        )

    async def score_category(
        self,
        category: Category,
        responses: Sequence[Response],
    ) -> Optional[CategoryState]:
        """State for ``category`` from its latest response, earlier ones as context."""
        if not responses:
            return None
        latest = responses[-1]
        result = await self._score(category, latest.question, latest.answer, responses[:-1])
        return build_state(category, result, get_current_utc())

    async def rescore(self, session: VisionSession) -> VisionSession:
        """Rebuild every category state by replaying the response history in order."""
        session.category_states = {}
        seen: List[Response] = []
        for response in session.responses:
            previous = [r for r in seen if r.category == response.category]
            result = await self._score(response.category, response.question, response.answer, previous)
            apply_result(session, response.category, result, scored_at=response.created_at)
            seen.append(response)
        session.refresh_completeness()
        return session
