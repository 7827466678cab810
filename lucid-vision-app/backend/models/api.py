"""
Request and response bodies for the vision endpoints
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from models.base import Category, DecisionBand, LifeArea, VisionStatus, WeakestSignal
from models.vision import VisionSession


class ResponseSubmission(BaseModel):
    # Category and text are checked by the service so that an empty answer or
    # unknown category is reported the same way from every entry point
    category: str
    question: str
    answer: str


class TitleUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=120)


class CategoriesUpdate(BaseModel):
    categories: List[LifeArea] = Field(default_factory=list)


class VisionEnvelope(BaseModel):
    vision: VisionSession


class VisionList(BaseModel):
    visions: List[VisionSession]


class NextQuestion(BaseModel):
    question: str
    category: Category


class ScoreUpdate(BaseModel):
    overall_completeness: int
    css_scores: Dict[str, float]
    css: float
    decision_band: DecisionBand
    categories_addressed: List[Category]
    weakest_signal: WeakestSignal


class ProcessAccepted(BaseModel):
    status: VisionStatus = VisionStatus.PROCESSING
    vision_id: Optional[str] = None


class DeleteResult(BaseModel):
    deleted: bool = True
