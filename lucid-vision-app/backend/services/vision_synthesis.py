"""
Vision Synthesis
----------------
Title/life-area labelling, first-person summary and tagline generation for a
vision session. Everything here runs in the background after a response is
submitted, or on an explicit ``/process`` request.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import structlog

from core.config import (
    SUMMARY_MAX_TOKENS,
    SUMMARY_TEMPERATURE,
    TAGLINE_MAX_TOKENS,
    TAGLINE_TEMPERATURE,
    TITLE_MAX_TOKENS,
    TITLE_TEMPERATURE,
)
from core.exceptions import ProviderUnavailableError
from models.base import LifeArea
from models.vision import Response
from services.llm_client import extract_json_object, strip_wrapping_quotes
from services.providers import TextGenerationProvider

logger = structlog.get_logger(__name__)

DEFAULT_TITLE = "Untitled Vision"
MAX_LIFE_AREAS = 3


def _history(responses: Sequence[Response]) -> str:
    return "\n\n".join(
        f"{i}. [{r.category.value}] {r.question}\n   Answer: {r.answer}"
        for i, r in enumerate(responses, 1)
    )


def parse_life_areas(values) -> List[LifeArea]:
    if not isinstance(values, list):
        return []
    areas: List[LifeArea] = []
    for value in values:
        try:
            area = LifeArea(str(value).strip().lower())
        except ValueError:
            continue
        if area not in areas:
            areas.append(area)
    return areas[:MAX_LIFE_AREAS]


class VisionSynthesizer:
    """Wraps the generation provider with the synthesis prompts."""

    def __init__(self, provider: TextGenerationProvider):
        self.provider = provider

    async def _generate(self, prompt: str, **kwargs) -> str:
        try:
            return await self.provider.generate_text(prompt, **kwargs)
        except Exception as e:
            raise ProviderUnavailableError("Vision synthesis provider failed") from e

    async def generate_title_and_categories(
        self, responses: Sequence[Response]
    ) -> Tuple[str, List[LifeArea]]:
        areas = ", ".join(a.value for a in LifeArea)
        prompt = f"""Analyze these vision responses and create a title:

{_history(responses)}

Step 1: Identify the PRIMARY SUBJECT - what specific thing are they building, creating or achieving?
- Look for proper nouns (app names, business names, project names)
- Look for concrete goals (e.g. "financial freedom", "coaching business")

Step 2: Create a title (2-5 words) that:
- Includes the primary subject if it is a proper noun or specific project
- Captures what they are actually doing, not generic inspiration

Return ONLY a JSON object:
{{"title": "specific title with key subject included", "categories": ["relevant", "categories"]}}

Available categories: {areas}
Select 1-3 categories that are clearly relevant."""

        raw = await self._generate(
            prompt,
            temperature=TITLE_TEMPERATURE,
            max_tokens=TITLE_MAX_TOKENS,
            json_mode=True,
        )
        data = extract_json_object(raw or "")
        if data is None:
            logger.warning("title_parse_failed", preview=(raw or "")[:120])
            return DEFAULT_TITLE, []

        title = strip_wrapping_quotes(str(data.get("title") or "")) or DEFAULT_TITLE
        return title, parse_life_areas(data.get("categories"))

    async def generate_summary(self, responses: Sequence[Response]) -> str:
        prompt = f"""Create a comprehensive, inspiring vision summary (8-12 sentences) based on these responses:

{_history(responses)}

This summary should:
- Be written in first person ("I") so they can see and feel themselves living this vision
- Capture the depth across Vision, Emotion, Belief, Identity and Embodiment
- Include specific details, emotions and aspirations they shared
- Be broken into 3-4 short paragraphs separated by blank lines

Return only the summary, nothing else."""

        summary = (await self._generate(
            prompt,
            temperature=SUMMARY_TEMPERATURE,
            max_tokens=SUMMARY_MAX_TOKENS,
        )).strip()
        if not summary:
            raise ProviderUnavailableError("Vision summary came back empty")
        return summary

    async def generate_tagline(
        self, responses: Sequence[Response], summary: Optional[str]
    ) -> str:
        prompt = f"""Create a personal tagline based on this vision:

**Original Responses:**
{_history(responses)}

**Vision Summary:**
"{summary or ''}"

Create a tagline (8-12 words) that:
- Starts with "I" (first person)
- Mentions the specific subject or project by name or clear reference
- Uses concrete details from their responses, not abstract language

Good: "I build Lucid Vision to help people manifest their dreams"
Too vague: "I empower transformation and healing"

Return only the tagline, starting with "I"."""

        raw = await self._generate(
            prompt,
            temperature=TAGLINE_TEMPERATURE,
            max_tokens=TAGLINE_MAX_TOKENS,
        )
        tagline = strip_wrapping_quotes(raw)
        if not tagline:
            raise ProviderUnavailableError("Vision tagline came back empty")
        return tagline
