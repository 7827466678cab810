"""
Canonical coverage slots and word lists for context sufficiency scoring.

Kept as plain module-level tables so the analyzer prompt, the calculator and
the question controller all read the same definitions.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from models.base import Category


@dataclass(frozen=True)
class CoverageSpec:
    required: int
    slots: Tuple[str, ...]


COVERAGE_SLOTS: Dict[Category, CoverageSpec] = {
    Category.VISION: CoverageSpec(
        required=3,
        slots=(
            "specific_goal",
            "scene_location_timeframe",
            "people_involved",
            "sensory_details",
            "success_criteria",
        ),
    ),
    Category.EMOTION: CoverageSpec(
        required=2,
        slots=(
            "named_emotions",
            "body_sensations",
            "frequency_words",
            "peak_memory_anchor",
        ),
    ),
    Category.BELIEF: CoverageSpec(
        required=2,
        slots=(
            "limiting_belief",
            "empowering_belief",
            "evidence_reframe",
        ),
    ),
    Category.IDENTITY: CoverageSpec(
        required=2,
        slots=(
            "i_am_traits",
            "daily_behaviors",
            "others_experience",
            "energetic_signature",
        ),
    ),
    Category.EMBODIMENT: CoverageSpec(
        required=3,
        slots=(
            "daily_rituals",
            "near_term_actions",
            "act_as_if",
            "signs_synchronicities",
            "surrender_trust",
        ),
    ),
}


# Sensory/emotional lexicons for richness detection
SENSORY_WORDS: Tuple[str, ...] = (
    "see", "seeing", "saw", "look", "looking", "watch", "watching", "view", "visible",
    "hear", "hearing", "heard", "listen", "listening", "sound", "sounds",
    "feel", "feeling", "felt", "touch", "touching", "sensation", "warm", "cold", "soft", "hard",
    "smell", "smelling", "scent", "fragrance", "aroma",
    "taste", "tasting", "flavor", "sweet", "bitter",
)

EMOTION_WORDS: Tuple[str, ...] = (
    "joy", "joyful", "happy", "happiness", "excited", "excitement",
    "love", "loving", "loved", "peaceful", "peace", "calm", "serene",
    "free", "freedom", "liberated", "powerful", "power", "empowered",
    "grateful", "gratitude", "thankful", "blessed",
    "confident", "confidence", "certain", "sure",
    "afraid", "fear", "fearful", "anxious", "anxiety", "worried", "worry",
    "sad", "sadness", "grief", "angry", "anger",
)

HEDGE_WORDS: Tuple[str, ...] = ("maybe", "perhaps", "kinda", "sorta", "possibly", "might", "could")
VAGUE_WORDS: Tuple[str, ...] = ("soon", "later", "more", "better", "things", "stuff")


def coverage_for(category: Category) -> CoverageSpec:
    return COVERAGE_SLOTS[category]
