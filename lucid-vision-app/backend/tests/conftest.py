"""Global pytest fixtures for backend tests.

Providers are replaced by in-process fakes and the store runs in its
in-memory mode, so no network, Redis or API keys are needed.
"""

from __future__ import annotations

import asyncio
import copy
import json
import os
import sys
from typing import Any, Callable, Dict, List, Optional

import pytest

# ---------------------------------------------------------------------------
#  Ensure project modules are importable across test collection
# ---------------------------------------------------------------------------

_BACKEND_DIR = os.path.dirname(os.path.dirname(__file__))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-pytest-only-0123456789")

from services.category_aggregator import CategoryAggregator  # noqa: E402
from services.question_controller import QuestionController  # noqa: E402
from services.response_analyzer import ResponseAnalyzer  # noqa: E402
from services.task_registry import TaskRegistry  # noqa: E402
from services.vision_service import VisionService  # noqa: E402
from services.vision_store import VisionStore  # noqa: E402
from services.vision_synthesis import VisionSynthesizer  # noqa: E402


def forty_words() -> str:
    return " ".join(["word"] * 40)


def vision_payload(**overrides: Any) -> Dict[str, Any]:
    """Analyzer output for a 40-word Vision answer hitting two slots."""
    payload: Dict[str, Any] = {
        "categories_addressed": ["Vision"],
        "coverage_hits": ["specific_goal", "people_involved"],
        "specificity_markers": {"numbers": [], "names": [], "measurables": []},
        "sensory_emotional_hits": {"sensory": [], "emotions": [], "body_sensations": []},
        "action_identity_markers": {"i_am_statements": [], "future_actions": [], "behaviors": []},
        "coherence_issues": {"hedges": [], "contradictions": [], "vagueness": []},
        "proposed_css": 0.6,
        "rationale": "Clear goal, thin detail",
        "weakest_signal": "specificity",
    }
    payload.update(overrides)
    return payload


class FakeAnalysisProvider:
    """Returns a fixed payload (or raises) and records every prompt."""

    def __init__(self, payload: Any = None, error: Optional[Exception] = None):
        self.payload = vision_payload() if payload is None else payload
        self.error = error
        self.prompts: List[str] = []

    async def analyze_json(self, prompt: str, *, temperature: float = 0.3) -> Any:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.payload)


class PausableAnalysisProvider(FakeAnalysisProvider):
    """Analysis fake that can be held mid-call until ``resume`` is called."""

    def __init__(self, payload: Any = None):
        super().__init__(payload)
        self.entered = asyncio.Event()
        self._released = asyncio.Event()
        self._released.set()

    def pause(self) -> None:
        self.entered.clear()
        self._released.clear()

    def resume(self) -> None:
        self._released.set()

    async def analyze_json(self, prompt: str, *, temperature: float = 0.3) -> Any:
        self.entered.set()
        await self._released.wait()
        return await super().analyze_json(prompt, temperature=temperature)


class FakeGenerationProvider:
    """Answers title, summary, tagline and question prompts with canned text.

    ``responder`` may be set to a callable ``(prompt, kwargs) -> str`` to
    override the routing; ``error`` makes every call raise.
    """

    def __init__(
        self,
        *,
        question: str = "What does the morning of that day look like?",
        title: Optional[Dict[str, Any]] = None,
        summary: str = "I wake up in the house I built.\n\nI feel calm and certain.",
        tagline: str = "I build a calm home for my family by the sea",
        error: Optional[Exception] = None,
        responder: Optional[Callable[[str, Dict[str, Any]], str]] = None,
    ):
        self.question = question
        self.title = title if title is not None else {
            "title": "Seaside Family Home",
            "categories": ["love", "wealth"],
        }
        self.summary = summary
        self.tagline = tagline
        self.error = error
        self.responder = responder
        self.calls: List[Dict[str, Any]] = []

    async def generate_text(self, prompt: str, **kwargs: Any) -> str:
        self.calls.append({"prompt": prompt, **kwargs})
        if self.error is not None:
            raise self.error
        if self.responder is not None:
            return self.responder(prompt, kwargs)
        if kwargs.get("json_mode"):
            return json.dumps(self.title)
        if "personal tagline" in prompt:
            return self.tagline
        if "vision summary" in prompt:
            return self.summary
        return self.question


class FakeAudioGenerator:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[tuple] = []

    async def generate(self, vision_id: str, user_id: str) -> None:
        self.calls.append((vision_id, user_id))
        if self.error is not None:
            raise self.error


def build_service(
    store: VisionStore,
    analysis: FakeAnalysisProvider,
    generation: FakeGenerationProvider,
    tasks: TaskRegistry,
    audio: Optional[FakeAudioGenerator] = None,
) -> VisionService:
    return VisionService(
        store=store,
        aggregator=CategoryAggregator(ResponseAnalyzer(analysis)),
        controller=QuestionController(generation),
        synthesizer=VisionSynthesizer(generation),
        tasks=tasks,
        audio_generator=audio,
    )


@pytest.fixture
def store() -> VisionStore:
    # Never initialized: the store stays in its in-memory mode
    return VisionStore(redis_url="redis://localhost:0")


@pytest.fixture
def analysis_provider() -> FakeAnalysisProvider:
    return FakeAnalysisProvider()


@pytest.fixture
def generation_provider() -> FakeGenerationProvider:
    return FakeGenerationProvider()


@pytest.fixture
def audio_generator() -> FakeAudioGenerator:
    return FakeAudioGenerator()


@pytest.fixture
def tasks() -> TaskRegistry:
    return TaskRegistry()


@pytest.fixture
def service(store, analysis_provider, generation_provider, tasks, audio_generator) -> VisionService:
    return build_service(store, analysis_provider, generation_provider, tasks, audio_generator)
