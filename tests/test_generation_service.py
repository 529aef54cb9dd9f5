"""Tests for templated generation against a context window."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from content_engine.domain.context import ContextWindowManager, EntryRole
from content_engine.domain.errors import ContextWindowNotFoundError, GenerationError
from content_engine.domain.generation.generation_service import GenerationService, PROMPT_PRIORITY
from content_engine.domain.generation.prompt_templates import PromptData
from content_engine.domain.models.content import ContentType
from content_engine.domain.models.pipeline import PipelineStage
from tests.fakes import FakeBackend


def _data() -> PromptData:
    return PromptData(content_title="Async Python", content_type=ContentType.BLOG_POST)


@pytest.mark.asyncio
async def test_generate_records_prompt_and_response():
    backend = FakeBackend(["Research summary"])
    manager = ContextWindowManager()
    service = GenerationService(backend, manager)

    response = await service.generate(
        "proj-1", ContentType.BLOG_POST, PipelineStage.RESEARCH, _data(), response_priority=6
    )

    assert response == "Research summary"
    entries = await manager.read("proj-1")
    assert [e.role for e in entries] == [EntryRole.USER, EntryRole.ASSISTANT]
    assert [e.priority for e in entries] == [PROMPT_PRIORITY, 6]
    assert entries[1].metadata["stage"] == "research"
    assert entries[1].metadata["content_type"] == "BlogPost"


@pytest.mark.asyncio
async def test_backend_receives_prior_turns_in_order():
    backend = FakeBackend(["first", "second"])
    manager = ContextWindowManager()
    service = GenerationService(backend, manager)

    await service.generate("proj-1", ContentType.BLOG_POST, PipelineStage.RESEARCH, _data())
    await service.generate(
        "proj-1", ContentType.BLOG_POST, PipelineStage.OUTLINE,
        _data().model_copy(update={"additional_context": {"research": "notes"}})
    )

    second_call = backend.calls[1]
    assert [type(m) for m in second_call] == [HumanMessage, AIMessage, HumanMessage]
    assert second_call[1].content == "first"


@pytest.mark.asyncio
async def test_domain_knowledge_is_rendered_into_prompt(project):
    backend = FakeBackend(["notes"])
    manager = ContextWindowManager()
    service = GenerationService(backend, manager)

    await service.inject_client_context(project)
    await service.generate("proj-1", ContentType.BLOG_POST, PipelineStage.RESEARCH, _data())

    assert "industry: developer tooling" in backend.last_prompt()
    window = await manager.snapshot("proj-1")
    assert window.client_id == "client-1"


@pytest.mark.asyncio
async def test_backend_failure_is_counted_and_raised():
    backend = FakeBackend([GenerationError("model overloaded")])
    manager = ContextWindowManager()
    service = GenerationService(backend, manager)

    with pytest.raises(GenerationError):
        await service.generate("proj-1", ContentType.BLOG_POST, PipelineStage.RESEARCH, _data())

    metrics = service.metrics()
    assert metrics["failed_generations"] == 1
    assert metrics["total_generations"] == 0
    entries = await manager.read("proj-1")
    assert [e.role for e in entries] == [EntryRole.USER]


@pytest.mark.asyncio
async def test_metrics_break_down_by_stage_and_type():
    backend = FakeBackend(default="abcdefgh")
    service = GenerationService(backend, ContextWindowManager())

    await service.generate("proj-1", ContentType.BLOG_POST, PipelineStage.RESEARCH, _data())
    await service.generate(
        "proj-2", ContentType.SOCIAL_POST, PipelineStage.RESEARCH,
        PromptData(content_title="Launch", content_type=ContentType.SOCIAL_POST)
    )

    metrics = service.metrics()
    assert metrics["total_generations"] == 2
    assert metrics["stage_breakdown"]["research"] == 2
    assert metrics["stage_breakdown"]["draft"] == 0
    assert metrics["content_type_breakdown"]["BlogPost"] == 1
    assert metrics["content_type_breakdown"]["SocialPost"] == 1
    assert metrics["total_response_tokens"] == 4
    assert metrics["total_tokens"] == metrics["total_prompt_tokens"] + 4


@pytest.mark.asyncio
async def test_inject_client_context_creates_window(project):
    manager = ContextWindowManager()
    service = GenerationService(FakeBackend(), manager)

    with pytest.raises(ContextWindowNotFoundError):
        await manager.metrics(project.project_id)
    await service.inject_client_context(project)

    metrics = await manager.metrics(project.project_id)
    assert metrics.domain_knowledge_entries == len(project.domain_knowledge())
