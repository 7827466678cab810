"""
Base models and common types for the Lucid Vision API
"""

from enum import Enum
from typing import Optional


class Category(str, Enum):
    """The five reflection dimensions scored by the CSS engine.

    Declaration order is the fixed enumeration order used for tie-breaking.
    """

    VISION = "Vision"
    EMOTION = "Emotion"
    BELIEF = "Belief"
    IDENTITY = "Identity"
    EMBODIMENT = "Embodiment"

    @classmethod
    def parse(cls, value: object) -> Optional["Category"]:
        """Resolve a category from its name, case-insensitively."""
        if isinstance(value, Category):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


CATEGORY_ORDER = tuple(Category)


class DecisionBand(str, Enum):
    ADVANCE = "ADVANCE"
    CLARIFY = "CLARIFY"
    EVOKE = "EVOKE"


class WeakestSignal(str, Enum):
    LENGTH = "length"
    SPECIFICITY = "specificity"
    RICHNESS = "richness"
    ACTION_IDENTITY = "actionIdentity"
    COHERENCE = "coherence"


class VisionStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class LifeArea(str, Enum):
    """Labels auto-detected for a vision (shown as filters in the app)."""

    HEALTH = "health"
    WEALTH = "wealth"
    RELATIONSHIPS = "relationships"
    PLAY = "play"
    LOVE = "love"
    PURPOSE = "purpose"
    SPIRIT = "spirit"
    HEALING = "healing"
