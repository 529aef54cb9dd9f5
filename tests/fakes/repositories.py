import asyncio

from content_engine.domain.models.pipeline import ProgressEvent
from content_engine.domain.repositories.memory import InMemoryProgressEventRepository


class FailingEventRepository(InMemoryProgressEventRepository):
    """Fails the first ``failures`` saves, then stores normally."""

    def __init__(self, failures: int = 1):
        super().__init__()
        self.failures = failures

    async def save(self, event: ProgressEvent) -> None:
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("event store unavailable")
        await super().save(event)


class SlowEventRepository(InMemoryProgressEventRepository):
    """Takes ``delay`` seconds per save."""

    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay

    async def save(self, event: ProgressEvent) -> None:
        await asyncio.sleep(self.delay)
        await super().save(event)
