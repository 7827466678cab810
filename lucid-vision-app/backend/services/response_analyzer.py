"""
Response Analyzer
-----------------
Asks the language-understanding provider for structured signals about one
answer (coverage hits, specificity, sensory/emotional richness,
action/identity markers, coherence issues) and validates them.

The provider is untrusted. Any failure degrades to
``ResponseAnalysis.fallback`` so that submitting a response never hard-fails
because analysis was unavailable.
"""

from __future__ import annotations

from typing import Sequence

import structlog
from pydantic import ValidationError

from core.config import ANALYSIS_TEMPERATURE
from models.analysis import ResponseAnalysis
from models.base import Category
from models.lexicon import HEDGE_WORDS, VAGUE_WORDS, coverage_for
from models.vision import Response
from services.providers import TextAnalysisProvider
from utils.error_handling import log_exception

logger = structlog.get_logger(__name__)


def _build_prompt(
    category: Category,
    question: str,
    answer: str,
    previous: Sequence[Response],
) -> str:
    slots = ", ".join(coverage_for(category).slots)
    lines = [
        f'Analyze this user response for a vision evocation conversation in the "{category.value}" category.',
        "",
        f"**Question:** {question}",
        f"**Answer:** {answer}",
    ]
    if previous:
        lines += ["", "Previous responses in this category:"]
        for i, r in enumerate(previous, 1):
            lines.append(f"{i}. {r.question}\n   {r.answer}")
    lines += [
        "",
        "Extract the following information and return ONLY a valid JSON object:",
        "",
        "{",
        '  "categories_addressed": ["Primary category plus any other of Vision, Emotion, Belief, Identity, Embodiment this answer clearly addresses"],',
        f'  "coverage_hits": ["Coverage slots hit, chosen from: {slots}"],',
        '  "specificity_markers": {',
        '    "numbers": ["Numbers, amounts, dates, durations mentioned"],',
        '    "names": ["Names, places, specific entities mentioned"],',
        '    "measurables": ["Measurable outcomes or metrics"]',
        "  },",
        '  "sensory_emotional_hits": {',
        '    "sensory": ["Sensory words/descriptions found"],',
        '    "emotions": ["Emotion words found"],',
        '    "body_sensations": ["Body/somatic descriptions found"]',
        "  },",
        '  "action_identity_markers": {',
        '    "i_am_statements": ["Any \'I am\' declarations"],',
        '    "future_actions": ["Specific future actions/rituals mentioned"],',
        '    "behaviors": ["Daily behaviors or habits described"]',
        "  },",
        '  "coherence_issues": {',
        f'    "hedges": ["Hedge words such as {", ".join(HEDGE_WORDS)}"],',
        '    "contradictions": ["Contradictory statements"],',
        f'    "vagueness": ["Vague statements that need clarification, e.g. {", ".join(VAGUE_WORDS)}"]',
        "  },",
        '  "proposed_css": 0.75,',
        '  "rationale": "Brief explanation of why this score makes sense",',
        '  "weakest_signal": "One of: length, specificity, richness, actionIdentity, coherence"',
        "}",
        "",
        "Be precise and only include what is actually present. If something is not there, use empty arrays.",
    ]
    return "\n".join(lines)


class ResponseAnalyzer:
    """Turns one free-text answer into a validated ``ResponseAnalysis``."""

    def __init__(self, provider: TextAnalysisProvider):
        self.provider = provider

    async def analyze(
        self,
        category: Category,
        question: str,
        answer: str,
        previous_responses: Sequence[Response] = (),
    ) -> ResponseAnalysis:
        prompt = _build_prompt(category, question, answer, previous_responses)
        try:
            raw = await self.provider.analyze_json(prompt, temperature=ANALYSIS_TEMPERATURE)
        except Exception as e:
            log_exception("response_analysis_unavailable", e, category=category.value)
            return ResponseAnalysis.fallback(category.value)

        if not isinstance(raw, dict):
            logger.warning(
                "response_analysis_non_object",
                category=category.value,
                payload_type=type(raw).__name__,
            )
            return ResponseAnalysis.fallback(category.value)

        try:
            analysis = ResponseAnalysis.model_validate(raw)
        except ValidationError as ve:
            logger.warning("response_analysis_invalid", category=category.value, error=str(ve))
            return ResponseAnalysis.fallback(category.value)

        logger.debug(
            "response_analyzed",
            category=category.value,
            coverage_hits=len(analysis.coverage_hits),
            proposed_css=analysis.proposed_css,
            weakest_signal=analysis.weakest_signal.value,
        )
        return analysis
