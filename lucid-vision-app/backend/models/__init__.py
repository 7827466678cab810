"""
Models package for the Lucid Vision API
"""

from models.base import (
    CATEGORY_ORDER,
    Category,
    DecisionBand,
    WeakestSignal,
    VisionStatus,
    LifeArea,
)

from models.analysis import ResponseAnalysis

from models.vision import (
    Response,
    Coverage,
    Subscores,
    CategoryState,
    VisionSession,
    compute_overall_completeness,
)

from models.api import (
    ResponseSubmission,
    TitleUpdate,
    CategoriesUpdate,
    VisionEnvelope,
    VisionList,
    NextQuestion,
    ScoreUpdate,
    ProcessAccepted,
    DeleteResult,
)

__all__ = [
    # Base types
    "CATEGORY_ORDER",
    "Category",
    "DecisionBand",
    "WeakestSignal",
    "VisionStatus",
    "LifeArea",
    # Scoring
    "ResponseAnalysis",
    "Response",
    "Coverage",
    "Subscores",
    "CategoryState",
    "VisionSession",
    "compute_overall_completeness",
    # API bodies
    "ResponseSubmission",
    "TitleUpdate",
    "CategoriesUpdate",
    "VisionEnvelope",
    "VisionList",
    "NextQuestion",
    "ScoreUpdate",
    "ProcessAccepted",
    "DeleteResult",
]
