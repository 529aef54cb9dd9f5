from abc import ABC, abstractmethod
from typing import List, Sequence, Union
import structlog

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, AIMessage, SystemMessage

from content_engine.domain.context.context_window import ContextEntry, EntryRole
from content_engine.domain.errors import GenerationError

logger = structlog.get_logger(__name__)

Prompt = Union[str, Sequence[BaseMessage]]


class GenerationBackend(ABC):
    """Produces text from a single prompt or an ordered list of prior turns"""

    @abstractmethod
    async def generate(self, prompt: Prompt) -> str:
        """Generate text; raises on failure"""
        pass


class ChatModelBackend(GenerationBackend):
    """Generation backend over any langchain chat model"""

    def __init__(self, model: BaseChatModel):
        self.model = model

    async def generate(self, prompt: Prompt) -> str:
        messages = to_messages(prompt)
        if not messages:
            raise GenerationError("empty prompt")

        try:
            response = await self.model.ainvoke(messages)
        except Exception as e:
            logger.error("Chat model call failed", error=str(e), turns=len(messages))
            raise GenerationError(f"chat model call failed: {e}") from e

        text = message_text(response)
        if not text.strip():
            raise GenerationError("chat model returned an empty response")
        return text


def to_messages(prompt: Prompt) -> List[BaseMessage]:
    """Normalise a prompt string or turn list to chat messages"""
    if isinstance(prompt, str):
        return [HumanMessage(content=prompt)]
    return list(prompt)


def message_text(message: BaseMessage) -> str:
    """Extract plain text from a chat message, joining multi-part content"""
    content = message.content
    if isinstance(content, str):
        return content

    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


def entries_to_messages(entries: Sequence[ContextEntry]) -> List[BaseMessage]:
    """Map context entries to chat turns, preserving order"""
    messages: List[BaseMessage] = []
    for entry in entries:
        if entry.role == EntryRole.USER:
            messages.append(HumanMessage(content=entry.content))
        elif entry.role == EntryRole.ASSISTANT:
            messages.append(AIMessage(content=entry.content))
        elif entry.role == EntryRole.SYSTEM:
            messages.append(SystemMessage(content=entry.content))
        else:
            raise ValueError(f"unknown context entry role: {entry.role}")
    return messages
