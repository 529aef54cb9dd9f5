"""Tests for the chat model backend adapter and message mapping."""

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from content_engine.domain.context import ContextEntry, EntryRole
from content_engine.domain.errors import GenerationError
from content_engine.domain.generation.backend import (
    ChatModelBackend, entries_to_messages, message_text
)


@pytest.mark.asyncio
async def test_chat_model_backend_returns_text():
    backend = ChatModelBackend(FakeListChatModel(responses=["An outline"]))

    assert await backend.generate("Write an outline") == "An outline"


@pytest.mark.asyncio
async def test_chat_model_backend_accepts_turns():
    backend = ChatModelBackend(FakeListChatModel(responses=["Edited"]))

    text = await backend.generate([HumanMessage(content="draft please"), AIMessage(content="Draft"), HumanMessage(content="edit it")])

    assert text == "Edited"


@pytest.mark.asyncio
async def test_empty_response_is_an_error():
    backend = ChatModelBackend(FakeListChatModel(responses=["   "]))

    with pytest.raises(GenerationError):
        await backend.generate("Write something")


@pytest.mark.asyncio
async def test_empty_prompt_is_an_error():
    backend = ChatModelBackend(FakeListChatModel(responses=["unused"]))

    with pytest.raises(GenerationError):
        await backend.generate([])


def test_entries_map_to_chat_turns():
    entries = [
        ContextEntry(role=EntryRole.SYSTEM, content="You write for Acme"),
        ContextEntry(role=EntryRole.USER, content="Research asyncio"),
        ContextEntry(role=EntryRole.ASSISTANT, content="Notes"),
    ]

    messages = entries_to_messages(entries)

    assert [type(m) for m in messages] == [SystemMessage, HumanMessage, AIMessage]
    assert [m.content for m in messages] == ["You write for Acme", "Research asyncio", "Notes"]


def test_message_text_joins_text_parts():
    message = AIMessage(content=[{"type": "text", "text": "Hello "}, {"type": "image_url", "image_url": "x"}, "world"])

    assert message_text(message) == "Hello world"
