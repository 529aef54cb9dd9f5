from typing import Optional
import asyncio
import contextlib
import structlog

from content_engine.domain.models.pipeline import ProgressEvent
from content_engine.domain.repositories.base import ProgressEventRepository

logger = structlog.get_logger(__name__)


class ProgressEventEmitter:
    """Bounded fire-and-forget channel from pipelines to the event sink.

    ``emit`` never blocks the pipeline: when the queue is full the event is
    dropped and the drop is logged. A single worker saves events in the order
    they were emitted; a failed or slow save is logged and skipped.
    """

    def __init__(
        self,
        repository: ProgressEventRepository,
        max_queue_size: int = 256,
        save_timeout: float = 5.0
    ):
        self.repository = repository
        self.save_timeout = save_timeout
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self.dropped_events = 0
        self.failed_saves = 0
        self._worker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self):
        """Start the save worker on the running loop"""

        if self.running:
            return
        self._worker = asyncio.create_task(self._run(), name="progress-event-worker")
        logger.info("Progress event worker started", queue_size=self.queue.maxsize)

    async def stop(self):
        """Drain pending events, then stop the worker"""

        if not self.running:
            return

        await self.flush()
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None

        logger.info(
            "Progress event worker stopped",
            dropped_events=self.dropped_events,
            failed_saves=self.failed_saves
        )

    async def flush(self):
        """Wait until every queued event has been handled"""

        if self.running:
            await self.queue.join()

    def emit(self, event: ProgressEvent) -> bool:
        """Queue an event without blocking; returns False if it was dropped"""

        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped_events += 1
            logger.warning(
                "Progress event queue full, dropping event",
                event_type=event.event_type,
                content_id=event.content_id,
                dropped_events=self.dropped_events
            )
            return False
        return True

    async def _run(self):
        while True:
            event = await self.queue.get()
            try:
                await asyncio.wait_for(self.repository.save(event), timeout=self.save_timeout)
            except asyncio.TimeoutError:
                self.failed_saves += 1
                logger.error(
                    "Timed out saving progress event",
                    event_type=event.event_type,
                    content_id=event.content_id,
                    timeout_seconds=self.save_timeout
                )
            except Exception as e:
                self.failed_saves += 1
                logger.error(
                    "Failed to save progress event",
                    event_type=event.event_type,
                    content_id=event.content_id,
                    error=str(e)
                )
            finally:
                self.queue.task_done()
