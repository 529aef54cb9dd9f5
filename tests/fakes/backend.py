"""Scripted generation backends for tests."""

import asyncio
from typing import Any, List, Optional

from langchain_core.messages import BaseMessage

from content_engine.domain.generation.backend import GenerationBackend, Prompt, to_messages


class FakeBackend(GenerationBackend):
    """Returns scripted responses in call order.

    Each script step is a string to return or an exception to raise. Once the
    script runs out every call gets ``default`` (also a string or exception).
    """

    def __init__(self, script: Optional[List[Any]] = None, default: Any = "Generated text."):
        self.script = list(script or [])
        self.default = default
        self.calls: List[List[BaseMessage]] = []

    async def generate(self, prompt: Prompt) -> str:
        self.calls.append(to_messages(prompt))
        step = self.script.pop(0) if self.script else self.default
        if isinstance(step, BaseException):
            raise step
        return step

    def last_prompt(self) -> str:
        return self.calls[-1][-1].content


class BlockingBackend(FakeBackend):
    """Scripted backend that hangs forever from call number ``block_on`` (1-based) on."""

    def __init__(self, block_on: int, script: Optional[List[Any]] = None):
        super().__init__(script)
        self.block_on = block_on

    async def generate(self, prompt: Prompt) -> str:
        if len(self.calls) + 1 >= self.block_on:
            self.calls.append(to_messages(prompt))
            await asyncio.Event().wait()
        return await super().generate(prompt)
