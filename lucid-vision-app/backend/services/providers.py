"""
Collaborator interfaces consumed by the scoring and questioning services.

Concrete providers are constructed once per process and injected; the
services never reach for a global client.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class TextAnalysisProvider(Protocol):
    """Language-understanding provider returning one JSON object per prompt."""

    async def analyze_json(
        self,
        prompt: str,
        *,
        temperature: float = ...,
    ) -> Dict[str, Any]: ...


@runtime_checkable
class TextGenerationProvider(Protocol):
    """Free-text generation (questions, summaries, taglines)."""

    async def generate_text(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        temperature: float = ...,
        max_tokens: int = ...,
        json_mode: bool = False,
    ) -> str: ...


@runtime_checkable
class MeditationAudioGenerator(Protocol):
    """Downstream audio pipeline, invoked once a vision is synthesized."""

    async def generate(self, vision_id: str, user_id: str) -> None: ...
