"""
Adaptive Question Controller
----------------------------
Picks the weakest category and asks the generation provider for one follow-up
question aimed at that category's weakest signal.

There is no safe default question: provider failures propagate as
``ProviderUnavailableError``.
"""

from __future__ import annotations

import random
from typing import Mapping, Optional, Sequence

import structlog

from core.config import QUESTION_MAX_TOKENS, QUESTION_TEMPERATURE
from core.exceptions import ProviderUnavailableError
from models.base import CATEGORY_ORDER, Category
from models.lexicon import coverage_for
from models.vision import CategoryState, Response
from models.vision_prompts import (
    BAND_GOALS,
    CATEGORY_EXAMPLES,
    COACH_SYSTEM_PROMPT,
    SIGNAL_HINTS,
    VISION_STARTERS,
)
from services.css_calculator import classify_band
from services.llm_client import strip_wrapping_quotes
from services.providers import TextGenerationProvider
from utils.error_handling import log_exception, user_message_for

logger = structlog.get_logger(__name__)


def next_category(category_states: Mapping[Category, CategoryState]) -> Category:
    """Lowest css wins; missing counts as 0; ties go to the earlier category."""
    def _key(indexed):
        index, category = indexed
        state = category_states.get(category)
        return (state.css if state is not None else 0.0, index)

    return min(enumerate(CATEGORY_ORDER), key=_key)[1]


def format_history(responses: Sequence[Response]) -> str:
    if not responses:
        return "No previous responses yet."
    return "\n\n".join(
        f"{i}. [{r.category.value}] {r.question}\n   Answer: {r.answer}"
        for i, r in enumerate(responses, 1)
    )


def clean_question(text: str) -> str:
    """Strip wrapping quotes and keep only the first question of a compound one."""
    question = strip_wrapping_quotes(text)
    if question.count("?") > 1:
        first = question[: question.index("?") + 1].strip()
        logger.info("compound_question_trimmed", original=question, kept=first)
        question = first
    return question


def build_question_prompt(
    category: Category,
    responses: Sequence[Response],
    state: Optional[CategoryState],
) -> str:
    css = state.css if state is not None else 0.0
    band = classify_band(css)
    weakest = (state.weakest_signal.value if state is not None else "specificity")
    hits = len(state.coverage.hits) if state is not None else 0
    required = coverage_for(category).required
    goal = BAND_GOALS[band.value].format(weakest_signal=weakest)
    examples = "\n".join(CATEGORY_EXAMPLES[category])

    return f"""You are helping a user develop their vision in the **{category.value}** dimension.

**Example questions for this dimension:**
{examples}

**Previous responses across all dimensions:**
{format_history(responses)}

**Current {category.value} context status:**
- CSS Score: {css:.2f} (Decision: {band.value})
- Weakest signal: {weakest} ({SIGNAL_HINTS.get(weakest, "")})
- Coverage: {hits}/{required} slots covered

**Constraints:**
- Maximum 15 words total.
- Single question only (no "and", no follow-ups, no multi-part).
- Cut unnecessary adjectives and adverbs; concrete beats inspirational.

**Your task:**
Generate ONE brief question that:
1. References specific details from their previous responses
2. {goal}
3. Stays focused on {category.value}

Return only the question."""


class QuestionController:
    """Chooses what to ask next in the vision-building loop."""

    def __init__(self, provider: TextGenerationProvider, rng: Optional[random.Random] = None):
        self.provider = provider
        self._rng = rng or random.Random()

    next_category = staticmethod(next_category)

    async def generate_next_question(
        self,
        category: Category,
        prior_responses: Sequence[Response],
        category_state: Optional[CategoryState] = None,
    ) -> str:
        if category == Category.VISION and not any(
            r.category == Category.VISION for r in prior_responses
        ):
            return self._rng.choice(VISION_STARTERS)

        prompt = build_question_prompt(category, prior_responses, category_state)
        try:
            raw = await self.provider.generate_text(
                prompt,
                system=COACH_SYSTEM_PROMPT,
                temperature=QUESTION_TEMPERATURE,
                max_tokens=QUESTION_MAX_TOKENS,
            )
        except Exception as e:
            log_exception("question_generation_failed", e, category=category.value)
            raise ProviderUnavailableError(
                user_message_for(e, "Failed to load the next prompt. Please retry.")
            ) from e

        question = clean_question(raw)
        if not question:
            logger.warning("question_generation_empty", category=category.value)
            raise ProviderUnavailableError("Failed to load the next prompt. Please retry.")
        return question
