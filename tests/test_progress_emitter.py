"""Tests for the bounded progress event channel."""

import pytest

from content_engine.domain.models.pipeline import EventStatus, PipelineStage, ProgressEvent
from content_engine.domain.repositories.memory import InMemoryProgressEventRepository
from content_engine.domain.streaming.progress_emitter import ProgressEventEmitter
from tests.fakes import FailingEventRepository, SlowEventRepository


def _event(index: int, content_id: str = "content-1") -> ProgressEvent:
    return ProgressEvent(
        content_id=content_id,
        project_id="proj-1",
        stage=PipelineStage.RESEARCH,
        status=EventStatus.STARTED,
        details=f"event {index}"
    )


@pytest.mark.asyncio
async def test_events_are_saved_in_emit_order():
    repository = InMemoryProgressEventRepository()
    emitter = ProgressEventEmitter(repository)
    emitter.start()

    for index in range(20):
        assert emitter.emit(_event(index)) is True
    await emitter.flush()

    saved = await repository.find_by_content("content-1")
    assert [event.details for event in saved] == [f"event {i}" for i in range(20)]
    await emitter.stop()


@pytest.mark.asyncio
async def test_full_queue_drops_events_without_blocking():
    repository = InMemoryProgressEventRepository()
    emitter = ProgressEventEmitter(repository, max_queue_size=2)

    results = [emitter.emit(_event(index)) for index in range(3)]

    assert results == [True, True, False]
    assert emitter.dropped_events == 1

    emitter.start()
    await emitter.stop()
    saved = await repository.find_by_content("content-1")
    assert [event.details for event in saved] == ["event 0", "event 1"]


@pytest.mark.asyncio
async def test_failed_save_is_logged_and_skipped():
    repository = FailingEventRepository(failures=1)
    emitter = ProgressEventEmitter(repository)
    emitter.start()

    emitter.emit(_event(0))
    emitter.emit(_event(1))
    await emitter.flush()

    assert emitter.failed_saves == 1
    saved = await repository.find_by_content("content-1")
    assert [event.details for event in saved] == ["event 1"]
    await emitter.stop()


@pytest.mark.asyncio
async def test_slow_save_times_out():
    repository = SlowEventRepository(delay=1.0)
    emitter = ProgressEventEmitter(repository, save_timeout=0.05)
    emitter.start()

    emitter.emit(_event(0))
    await emitter.flush()

    assert emitter.failed_saves == 1
    assert await repository.find_by_content("content-1") == []
    await emitter.stop()


@pytest.mark.asyncio
async def test_stop_drains_pending_events():
    repository = InMemoryProgressEventRepository()
    emitter = ProgressEventEmitter(repository)
    emitter.start()

    for index in range(5):
        emitter.emit(_event(index))
    await emitter.stop()

    assert len(await repository.find_by_content("content-1")) == 5
    assert emitter.running is False


@pytest.mark.asyncio
async def test_start_is_idempotent():
    emitter = ProgressEventEmitter(InMemoryProgressEventRepository())
    emitter.start()
    worker = emitter._worker

    emitter.start()

    assert emitter._worker is worker
    await emitter.stop()
