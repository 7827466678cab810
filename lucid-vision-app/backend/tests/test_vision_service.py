"""
Vision service: submission flow, background synthesis and session lifecycle.
"""

import asyncio
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from core.exceptions import (  # noqa: E402
    InvalidResponseError,
    PersistenceError,
    VisionNotFoundError,
    VisionStateError,
)
from models.base import Category, DecisionBand, LifeArea, VisionStatus  # noqa: E402
from models.vision_prompts import VISION_STARTERS  # noqa: E402
from conftest import (  # noqa: E402
    FakeAnalysisProvider,
    FakeAudioGenerator,
    FakeGenerationProvider,
    PausableAnalysisProvider,
    build_service,
    forty_words,
    vision_payload,
)


@pytest.mark.asyncio
async def test_submit_response_scores_and_persists(service, store):
    vision = await service.create_vision("u1")

    session, outcome = await service.submit_response(
        "u1", vision.id, "vision", "  What do you see?  ", forty_words()
    )

    assert outcome.css == 0.39
    assert outcome.decision_band == DecisionBand.EVOKE
    assert outcome.categories_addressed == [Category.VISION]
    assert session.overall_completeness == 8
    assert session.css_scores() == {
        "vision": 0.39, "emotion": 0.0, "belief": 0.0, "identity": 0.0, "embodiment": 0.0,
    }

    stored = await store.get(vision.id)
    assert len(stored.responses) == 1
    assert stored.responses[0].category == Category.VISION
    assert stored.responses[0].question == "What do you see?"
    assert stored.category_states[Category.VISION].css == 0.39
    await service.tasks.wait_idle()


@pytest.mark.asyncio
async def test_background_tasks_fill_title_summary_and_tagline(service, store, generation_provider):
    vision = await service.create_vision("u1")
    await service.submit_response("u1", vision.id, "Vision", "Where are you?", forty_words())

    await service.tasks.wait_idle()

    stored = await store.get(vision.id)
    assert stored.title == "Seaside Family Home"
    assert stored.categories == [LifeArea.LOVE, LifeArea.WEALTH]
    assert stored.summary == generation_provider.summary
    assert stored.tagline == generation_provider.tagline
    # Background writes never touch scoring state
    assert stored.category_states[Category.VISION].css == 0.39
    assert stored.status == VisionStatus.PROCESSING


@pytest.mark.asyncio
async def test_title_only_generated_for_first_response(service, generation_provider):
    vision = await service.create_vision("u1")
    await service.submit_response("u1", vision.id, "Vision", "Q1?", forty_words())
    await service.tasks.wait_idle()
    await service.submit_response("u1", vision.id, "Emotion", "Q2?", "calm and warm")
    await service.tasks.wait_idle()

    title_calls = [c for c in generation_provider.calls if c.get("json_mode")]
    assert len(title_calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "category,question,answer",
    [
        ("Vision", "Q?", ""),
        ("Vision", "Q?", "   "),
        ("Vision", "", "An answer"),
        ("Wealth", "Q?", "An answer"),
    ],
)
async def test_invalid_submission_is_rejected_without_mutation(service, store, analysis_provider, category, question, answer):
    vision = await service.create_vision("u1")

    with pytest.raises(InvalidResponseError) as excinfo:
        await service.submit_response("u1", vision.id, category, question, answer)

    assert excinfo.value.status_code == 422
    stored = await store.get(vision.id)
    assert stored.responses == []
    assert stored.category_states == {}
    assert analysis_provider.prompts == []


@pytest.mark.asyncio
async def test_persistence_failure_leaves_stored_session_untouched(service, store, monkeypatch):
    vision = await service.create_vision("u1")

    async def _fail(session):
        raise PersistenceError("Failed to save vision", vision_id=session.id)

    monkeypatch.setattr(store, "_write", _fail)
    with pytest.raises(PersistenceError):
        await service.submit_response("u1", vision.id, "Vision", "Q?", forty_words())
    monkeypatch.undo()

    stored = await store.get(vision.id)
    assert stored.responses == []
    assert stored.overall_completeness == 0


@pytest.mark.asyncio
async def test_analysis_outage_does_not_block_submission(store, tasks, generation_provider):
    service = build_service(
        store, FakeAnalysisProvider(error=TimeoutError("analysis timed out")), generation_provider, tasks
    )
    vision = await service.create_vision("u1")

    session, outcome = await service.submit_response("u1", vision.id, "Vision", "Q?", forty_words())

    assert outcome.css == 0.31
    assert len(session.responses) == 1
    await tasks.wait_idle()


@pytest.mark.asyncio
async def test_foreign_or_unknown_vision_is_not_found(service):
    vision = await service.create_vision("owner")

    with pytest.raises(VisionNotFoundError):
        await service.get_vision("intruder", vision.id)
    with pytest.raises(VisionNotFoundError):
        await service.submit_response("intruder", vision.id, "Vision", "Q?", "A")
    with pytest.raises(VisionNotFoundError):
        await service.delete_vision("owner", "does-not-exist")


@pytest.mark.asyncio
async def test_list_prunes_sessions_without_responses(service, store):
    empty = await service.create_vision("u1")
    kept = await service.create_vision("u1")
    await service.submit_response("u1", kept.id, "Vision", "Q?", forty_words())
    await service.tasks.wait_idle()

    visions = await service.list_visions("u1")

    assert [v.id for v in visions] == [kept.id]
    assert await store.get(empty.id) is None


@pytest.mark.asyncio
async def test_next_question_starts_with_vision_starter(service):
    vision = await service.create_vision("u1")

    question, category = await service.next_question("u1", vision.id)

    assert category == Category.VISION
    assert question in VISION_STARTERS


@pytest.mark.asyncio
async def test_next_question_moves_to_weakest_category(service, generation_provider):
    vision = await service.create_vision("u1")
    await service.submit_response("u1", vision.id, "Vision", "Q?", forty_words())
    await service.tasks.wait_idle()

    question, category = await service.next_question("u1", vision.id)

    assert category == Category.EMOTION
    assert question == generation_provider.question


@pytest.mark.asyncio
async def test_update_title_and_categories(service):
    vision = await service.create_vision("u1")

    updated = await service.update_title("u1", vision.id, "  Lisbon Studio  ")
    assert updated.title == "Lisbon Studio"

    updated = await service.update_categories(
        "u1", vision.id, [LifeArea.PURPOSE, LifeArea.PURPOSE, LifeArea.PLAY]
    )
    assert updated.categories == [LifeArea.PURPOSE, LifeArea.PLAY]

    with pytest.raises(InvalidResponseError):
        await service.update_title("u1", vision.id, "   ")


@pytest.mark.asyncio
async def test_process_completes_and_triggers_audio(service, store, audio_generator):
    vision = await service.create_vision("u1")
    await service.submit_response("u1", vision.id, "Vision", "Q?", forty_words())
    await service.tasks.wait_idle()

    status = await service.process_vision("u1", vision.id)
    assert status == VisionStatus.PROCESSING
    await service.tasks.wait_idle()

    stored = await store.get(vision.id)
    assert stored.status == VisionStatus.COMPLETED
    assert stored.summary and stored.tagline
    assert audio_generator.calls == [(vision.id, "u1")]

    with pytest.raises(VisionStateError):
        await service.process_vision("u1", vision.id)


@pytest.mark.asyncio
async def test_audio_failure_keeps_vision_completed(store, tasks, analysis_provider, generation_provider):
    audio = FakeAudioGenerator(error=RuntimeError("tts down"))
    service = build_service(store, analysis_provider, generation_provider, tasks, audio)
    vision = await service.create_vision("u1")
    await service.submit_response("u1", vision.id, "Vision", "Q?", forty_words())
    await tasks.wait_idle()

    await service.process_vision("u1", vision.id)
    await tasks.wait_idle()

    assert (await store.get(vision.id)).status == VisionStatus.COMPLETED
    assert len(audio.calls) == 1


@pytest.mark.asyncio
async def test_process_failure_marks_vision_failed(store, tasks, analysis_provider):
    generation = FakeGenerationProvider()
    service = build_service(store, analysis_provider, generation, tasks)
    vision = await service.create_vision("u1")
    await service.submit_response("u1", vision.id, "Vision", "Q?", forty_words())
    await tasks.wait_idle()

    generation.error = RuntimeError("provider down")
    await service.process_vision("u1", vision.id)
    await tasks.wait_idle()

    assert (await store.get(vision.id)).status == VisionStatus.FAILED


@pytest.mark.asyncio
async def test_process_without_responses_is_rejected(service):
    vision = await service.create_vision("u1")

    with pytest.raises(InvalidResponseError):
        await service.process_vision("u1", vision.id)


@pytest.mark.asyncio
async def test_background_write_after_delete_is_dropped(service, store):
    vision = await service.create_vision("u1")
    await service.submit_response("u1", vision.id, "Vision", "Q?", forty_words())

    # Background title/summary tasks are scheduled but have not run yet
    assert await service.delete_vision("u1", vision.id) is True
    await service.tasks.wait_idle()

    assert await store.get(vision.id) is None


@pytest.mark.asyncio
async def test_failed_background_summary_is_not_fatal(store, tasks):
    generation = FakeGenerationProvider(summary="")
    service = build_service(store, FakeAnalysisProvider(vision_payload()), generation, tasks)
    vision = await service.create_vision("u1")

    session, _ = await service.submit_response("u1", vision.id, "Vision", "Q?", forty_words())
    await tasks.wait_idle()

    stored = await store.get(vision.id)
    assert stored.summary is None
    assert stored.title == "Seaside Family Home"
    assert len(stored.responses) == 1


@pytest.mark.asyncio
async def test_submission_during_synthesis_keeps_background_fields(store, tasks, generation_provider):
    analysis = PausableAnalysisProvider()
    service = build_service(store, analysis, generation_provider, tasks)
    vision = await service.create_vision("u1")
    await service.submit_response("u1", vision.id, "Vision", "Q1?", forty_words())
    await tasks.wait_idle()

    # Second answer is held inside analysis while synthesis runs to completion
    analysis.pause()
    pending = asyncio.create_task(
        service.submit_response("u1", vision.id, "Emotion", "Q2?", "calm and warm")
    )
    await analysis.entered.wait()
    await service.process_vision("u1", vision.id)
    await tasks.wait_idle()
    assert (await store.get(vision.id)).status == VisionStatus.COMPLETED

    analysis.resume()
    session, _ = await pending
    await tasks.wait_idle()

    stored = await store.get(vision.id)
    assert stored.status == VisionStatus.COMPLETED
    assert stored.title == "Seaside Family Home"
    assert stored.summary == generation_provider.summary
    assert [r.question for r in stored.responses] == ["Q1?", "Q2?"]
    assert session.status == VisionStatus.COMPLETED
    assert session.title == "Seaside Family Home"


@pytest.mark.asyncio
async def test_concurrent_submissions_keep_both_responses(store, tasks, generation_provider):
    analysis = PausableAnalysisProvider()
    service = build_service(store, analysis, generation_provider, tasks)
    vision = await service.create_vision("u1")

    analysis.pause()
    first = asyncio.create_task(service.submit_response("u1", vision.id, "Vision", "Q1?", forty_words()))
    second = asyncio.create_task(service.submit_response("u1", vision.id, "Emotion", "Q2?", "calm"))
    await analysis.entered.wait()
    analysis.resume()
    await asyncio.gather(first, second)
    await tasks.wait_idle()

    stored = await store.get(vision.id)
    assert sorted(r.question for r in stored.responses) == ["Q1?", "Q2?"]
    # Title is generated once, from whichever submission landed first
    assert stored.title == "Seaside Family Home"
    assert len([c for c in generation_provider.calls if c.get("json_mode")]) == 1


@pytest.mark.asyncio
async def test_submission_to_vision_deleted_mid_analysis_is_not_found(store, tasks, generation_provider):
    analysis = PausableAnalysisProvider()
    service = build_service(store, analysis, generation_provider, tasks)
    vision = await service.create_vision("u1")

    analysis.pause()
    pending = asyncio.create_task(service.submit_response("u1", vision.id, "Vision", "Q?", forty_words()))
    await analysis.entered.wait()
    await service.delete_vision("u1", vision.id)
    analysis.resume()

    with pytest.raises(VisionNotFoundError):
        await pending
    assert await store.get(vision.id) is None
