"""
Vision Service
--------------
Orchestrates the vision-building loop for one user: session lifecycle,
response submission (analysis, scoring, aggregation), next-question
selection and background synthesis.

Submission scores against a snapshot and persists only ``responses``, the
category states and completeness, merged into the stored record under the
store lock. Background tasks only ever patch ``title``, ``categories``,
``summary``, ``tagline`` and ``status``, so neither side rolls back the
other.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import structlog

from core.exceptions import (
    InvalidResponseError,
    VisionNotFoundError,
    VisionStateError,
)
from logging_config import bind_request_context
from models.base import Category, LifeArea, VisionStatus
from models.vision import Response, VisionSession
from services.category_aggregator import CategoryAggregator, ScoreOutcome
from services.providers import MeditationAudioGenerator
from services.question_controller import QuestionController
from services.task_registry import TaskPriority, TaskRegistry
from services.vision_store import VisionStore
from services.vision_synthesis import VisionSynthesizer
from utils.error_handling import log_exception

logger = structlog.get_logger(__name__)


class VisionService:
    def __init__(
        self,
        store: VisionStore,
        aggregator: CategoryAggregator,
        controller: QuestionController,
        synthesizer: VisionSynthesizer,
        tasks: TaskRegistry,
        audio_generator: Optional[MeditationAudioGenerator] = None,
    ):
        self.store = store
        self.aggregator = aggregator
        self.controller = controller
        self.synthesizer = synthesizer
        self.tasks = tasks
        self.audio_generator = audio_generator

    # ─── access ───────────────────────────────────────────────

    async def _owned(self, user_id: str, vision_id: str) -> VisionSession:
        session = await self.store.get(vision_id)
        if session is None or session.user_id != user_id:
            raise VisionNotFoundError(vision_id)
        bind_request_context(vision_id=vision_id)
        return session

    async def create_vision(self, user_id: str) -> VisionSession:
        session = VisionSession(user_id=user_id)
        await self.store.save(session)
        logger.info("vision_created", vision_id=session.id, user_id=user_id)
        return session

    async def list_visions(self, user_id: str) -> List[VisionSession]:
        """The user's visions, newest first. Sessions with no responses are deleted."""
        visions: List[VisionSession] = []
        for session in await self.store.list_for_user(user_id):
            if not session.responses:
                await self.store.delete(session.id)
                logger.info("empty_vision_pruned", vision_id=session.id, user_id=user_id)
                continue
            visions.append(session)
        return visions

    async def get_vision(self, user_id: str, vision_id: str) -> VisionSession:
        return await self._owned(user_id, vision_id)

    async def delete_vision(self, user_id: str, vision_id: str) -> bool:
        await self._owned(user_id, vision_id)
        deleted = await self.store.delete(vision_id)
        logger.info("vision_deleted", vision_id=vision_id)
        return deleted

    async def update_title(self, user_id: str, vision_id: str, title: str) -> VisionSession:
        await self._owned(user_id, vision_id)
        clean = title.strip()
        if not clean:
            raise InvalidResponseError("Title cannot be empty", vision_id=vision_id)
        return await self._patch(vision_id, {"title": clean})

    async def update_categories(
        self, user_id: str, vision_id: str, categories: Sequence[LifeArea]
    ) -> VisionSession:
        await self._owned(user_id, vision_id)
        return await self._patch(vision_id, {"categories": list(dict.fromkeys(categories))})

    async def _patch(self, vision_id: str, patch) -> VisionSession:
        if not await self.store.update_fields(vision_id, patch):
            raise VisionNotFoundError(vision_id)
        session = await self.store.get(vision_id)
        if session is None:
            raise VisionNotFoundError(vision_id)
        return session

    # ─── vision-building loop ─────────────────────────────────

    async def next_question(self, user_id: str, vision_id: str) -> Tuple[str, Category]:
        session = await self._owned(user_id, vision_id)
        category = self.controller.next_category(session.category_states)
        question = await self.controller.generate_next_question(
            category,
            session.responses,
            session.category_states.get(category),
        )
        logger.info("next_question", vision_id=vision_id, category=category.value)
        return question, category

    async def submit_response(
        self,
        user_id: str,
        vision_id: str,
        category: str,
        question: str,
        answer: str,
    ) -> Tuple[VisionSession, ScoreOutcome]:
        session = await self._owned(user_id, vision_id)

        parsed = Category.parse(category)
        if parsed is None:
            raise InvalidResponseError(f"Unknown category: {category}", vision_id=vision_id)
        question = (question or "").strip()
        answer = (answer or "").strip()
        if not question:
            raise InvalidResponseError("Question cannot be empty", vision_id=vision_id)
        if not answer:
            raise InvalidResponseError("Answer cannot be empty", vision_id=vision_id)

        outcome = await self.aggregator.score_response(session, parsed, question, answer)
        stored = await self.store.record_response(
            vision_id,
            Response(category=parsed, question=question, answer=answer),
            session.category_states,
            session.overall_completeness,
        )
        if stored is None:
            raise VisionNotFoundError(vision_id)

        if len(stored.responses) == 1:
            self.tasks.spawn(
                self._refresh_title_and_categories(vision_id),
                "vision_title",
                vision_id=vision_id,
            )
        self.tasks.spawn(
            self._refresh_summary(vision_id),
            "vision_summary",
            vision_id=vision_id,
        )
        return stored, outcome

    async def process_vision(self, user_id: str, vision_id: str) -> VisionStatus:
        """Schedule full synthesis and return immediately."""
        session = await self._owned(user_id, vision_id)
        if session.status != VisionStatus.PROCESSING:
            raise VisionStateError(
                f"Vision is already {session.status.value}", vision_id=vision_id
            )
        if not session.responses:
            raise InvalidResponseError("Vision has no responses to synthesize", vision_id=vision_id)

        self.tasks.spawn(
            self._synthesize(vision_id),
            "vision_synthesis",
            vision_id=vision_id,
            priority=TaskPriority.HIGH,
        )
        return VisionStatus.PROCESSING

    # ─── background work ──────────────────────────────────────

    async def _refresh_title_and_categories(self, vision_id: str) -> None:
        session = await self.store.get(vision_id)
        if session is None:
            return
        title, areas = await self.synthesizer.generate_title_and_categories(session.responses)
        await self.store.update_fields(vision_id, {"title": title, "categories": areas})

    async def _refresh_summary(self, vision_id: str) -> None:
        session = await self.store.get(vision_id)
        if session is None:
            return
        summary = await self.synthesizer.generate_summary(session.responses)
        tagline = await self.synthesizer.generate_tagline(session.responses, summary)
        await self.store.update_fields(vision_id, {"summary": summary, "tagline": tagline})

    async def _synthesize(self, vision_id: str) -> None:
        session = await self.store.get(vision_id)
        if session is None:
            return
        try:
            summary = await self.synthesizer.generate_summary(session.responses)
            tagline = await self.synthesizer.generate_tagline(session.responses, summary)
        except Exception as e:
            log_exception("vision_synthesis_failed", e, vision_id=vision_id)
            await self.store.update_fields(vision_id, {"status": VisionStatus.FAILED})
            return

        written = await self.store.update_fields(
            vision_id,
            {"summary": summary, "tagline": tagline, "status": VisionStatus.COMPLETED},
        )
        if not written:
            return
        logger.info("vision_synthesis_completed", vision_id=vision_id)

        if self.audio_generator is not None:
            try:
                await self.audio_generator.generate(vision_id, session.user_id)
            except Exception as e:
                log_exception("meditation_audio_failed", e, vision_id=vision_id)
