"""
Vision-building routes: session lifecycle, adaptive questions and scoring
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from core.dependencies import get_current_user, get_vision_service
from models.api import (
    CategoriesUpdate,
    DeleteResult,
    NextQuestion,
    ProcessAccepted,
    ResponseSubmission,
    ScoreUpdate,
    TitleUpdate,
    VisionEnvelope,
    VisionList,
)
from services.vision_service import VisionService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/visions", tags=["visions"])


@router.post("", response_model=VisionEnvelope, status_code=201)
async def create_vision(
    current_user: Any = Depends(get_current_user),
    service: VisionService = Depends(get_vision_service),
):
    """Start a new, empty vision session"""
    vision = await service.create_vision(str(current_user.id))
    return VisionEnvelope(vision=vision)


@router.get("", response_model=VisionList)
async def list_visions(
    current_user: Any = Depends(get_current_user),
    service: VisionService = Depends(get_vision_service),
):
    """List the current user's visions, newest first"""
    visions = await service.list_visions(str(current_user.id))
    return VisionList(visions=visions)


@router.get("/{vision_id}", response_model=VisionEnvelope)
async def get_vision(
    vision_id: str,
    current_user: Any = Depends(get_current_user),
    service: VisionService = Depends(get_vision_service),
):
    """Full session including ordered responses"""
    vision = await service.get_vision(str(current_user.id), vision_id)
    return VisionEnvelope(vision=vision)


@router.post("/{vision_id}/next-question", response_model=NextQuestion)
async def next_question(
    vision_id: str,
    current_user: Any = Depends(get_current_user),
    service: VisionService = Depends(get_vision_service),
):
    question, category = await service.next_question(str(current_user.id), vision_id)
    return NextQuestion(question=question, category=category)


@router.post("/{vision_id}/response", response_model=ScoreUpdate)
async def submit_response(
    vision_id: str,
    body: ResponseSubmission,
    current_user: Any = Depends(get_current_user),
    service: VisionService = Depends(get_vision_service),
):
    """Score an answer and return the updated completeness"""
    session, outcome = await service.submit_response(
        str(current_user.id),
        vision_id,
        body.category,
        body.question,
        body.answer,
    )
    return ScoreUpdate(
        overall_completeness=session.overall_completeness,
        css_scores=session.css_scores(),
        css=outcome.css,
        decision_band=outcome.decision_band,
        categories_addressed=outcome.categories_addressed,
        weakest_signal=outcome.weakest_signal,
    )


@router.post("/{vision_id}/process", response_model=ProcessAccepted, status_code=202)
async def process_vision(
    vision_id: str,
    current_user: Any = Depends(get_current_user),
    service: VisionService = Depends(get_vision_service),
):
    """Kick off background synthesis (summary and tagline)"""
    status = await service.process_vision(str(current_user.id), vision_id)
    return ProcessAccepted(status=status, vision_id=vision_id)


@router.patch("/{vision_id}/title", response_model=VisionEnvelope)
async def update_title(
    vision_id: str,
    body: TitleUpdate,
    current_user: Any = Depends(get_current_user),
    service: VisionService = Depends(get_vision_service),
):
    vision = await service.update_title(str(current_user.id), vision_id, body.title)
    return VisionEnvelope(vision=vision)


@router.patch("/{vision_id}/categories", response_model=VisionEnvelope)
async def update_categories(
    vision_id: str,
    body: CategoriesUpdate,
    current_user: Any = Depends(get_current_user),
    service: VisionService = Depends(get_vision_service),
):
    vision = await service.update_categories(str(current_user.id), vision_id, body.categories)
    return VisionEnvelope(vision=vision)


@router.delete("/{vision_id}", response_model=DeleteResult)
async def delete_vision(
    vision_id: str,
    current_user: Any = Depends(get_current_user),
    service: VisionService = Depends(get_vision_service),
):
    """Delete a vision and its responses"""
    deleted = await service.delete_vision(str(current_user.id), vision_id)
    return DeleteResult(deleted=deleted)
