"""
Lucid Vision services package public API.

Stable entrypoints are exposed lazily so that importing ``services`` does
not pull in the provider client or the store:

    from services import VisionService, VisionStore, ResponseAnalyzer

Each name maps to ``(module, attribute)`` and is imported on first access.
"""

from __future__ import annotations

from importlib import import_module
from typing import Dict, Tuple

_EXPLICIT_EXPORTS: Dict[str, Tuple[str, str]] = {
    # Scoring
    "ResponseAnalyzer": ("response_analyzer", "ResponseAnalyzer"),
    "calculate": ("css_calculator", "calculate"),
    "classify_band": ("css_calculator", "classify_band"),
    "score_response": ("css_calculator", "score_response"),
    "CSSResult": ("css_calculator", "CSSResult"),
    "CategoryAggregator": ("category_aggregator", "CategoryAggregator"),
    "ScoreOutcome": ("category_aggregator", "ScoreOutcome"),

    # Questioning and synthesis
    "QuestionController": ("question_controller", "QuestionController"),
    "next_category": ("question_controller", "next_category"),
    "VisionSynthesizer": ("vision_synthesis", "VisionSynthesizer"),

    # Session state
    "VisionService": ("vision_service", "VisionService"),
    "VisionStore": ("vision_store", "VisionStore"),
    "TaskRegistry": ("task_registry", "TaskRegistry"),
    "TaskPriority": ("task_registry", "TaskPriority"),

    # Providers
    "LLMClient": ("llm_client", "LLMClient"),
    "llm_client": ("llm_client", "llm_client"),
    "initialise_llm_client": ("llm_client", "initialise_llm_client"),
    "TextAnalysisProvider": ("providers", "TextAnalysisProvider"),
    "TextGenerationProvider": ("providers", "TextGenerationProvider"),
    "MeditationAudioGenerator": ("providers", "MeditationAudioGenerator"),
}

__all__ = sorted(_EXPLICIT_EXPORTS)


def __getattr__(name: str):
    try:
        module_name, attr = _EXPLICIT_EXPORTS[name]
    except KeyError:
        raise AttributeError(f"module 'services' has no attribute '{name}'") from None
    value = getattr(import_module(f"{__name__}.{module_name}"), attr)
    globals()[name] = value
    return value


def __dir__():
    return sorted(set(globals()) | set(__all__))
