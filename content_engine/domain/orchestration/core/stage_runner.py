from typing import Optional
from datetime import timedelta
import asyncio
import time

from content_engine.domain.errors import StageExecutionError, StageInputError, StageTimeoutError
from content_engine.domain.models.content import ContentItem
from content_engine.domain.models.pipeline import (
    EventStatus, PipelineConfig, PipelineStage, ProgressEvent, StageResult, StageStatus
)
from content_engine.domain.orchestration.stages.base_stage import BaseStageExecutor
from content_engine.domain.streaming.progress_emitter import ProgressEventEmitter
from content_engine.infrastructure.observability.logging import PipelineLogger


class StageRunner:
    """Runs a stage with bounded attempts, a per-attempt deadline and linear backoff"""

    def __init__(self, config: PipelineConfig, emitter: ProgressEventEmitter):
        self.config = config
        self.emitter = emitter
        self.pipeline_logger = PipelineLogger(__name__)

    async def run(self, content: ContentItem, executor: BaseStageExecutor) -> StageResult:
        """Execute the stage until it succeeds or its attempts are exhausted.

        Each attempt gets a fresh deadline and a fresh copy of the content, so
        a failed attempt leaves nothing behind on the item. Timeouts are retried
        immediately; other errors wait ``attempt * retry_backoff_seconds``.
        StageInputError is not retried since the input will not change.
        """

        stage = executor.stage
        max_attempts = self.config.max_retries
        started = time.monotonic()
        last_error = ""
        timed_out = False

        for attempt in range(1, max_attempts + 1):
            self._emit(content, executor, EventStatus.STARTED, started, f"attempt {attempt}/{max_attempts}")
            attempt_start = time.monotonic()

            try:
                result = await asyncio.wait_for(
                    executor.execute(content.model_copy(deep=True)),
                    timeout=self.config.stage_timeout_seconds
                )
            except asyncio.TimeoutError:
                timed_out = True
                last_error = f"timed out after {self.config.stage_timeout_seconds}s"
                self._log_attempt(content, stage, attempt, "timeout", attempt_start, last_error)
                self._emit(content, executor, EventStatus.TIMEOUT, started, f"attempt {attempt}: {last_error}")
                continue
            except StageInputError as e:
                self._log_attempt(content, stage, attempt, "invalid_input", attempt_start, str(e))
                self._emit(content, executor, EventStatus.FAILED, started, str(e))
                raise
            except Exception as e:
                timed_out = False
                last_error = str(e) or type(e).__name__
                self._log_attempt(content, stage, attempt, "error", attempt_start, last_error)
                self._emit(content, executor, EventStatus.ERROR, started, f"attempt {attempt}: {last_error}")
                if attempt < max_attempts:
                    await asyncio.sleep(attempt * self.config.retry_backoff_seconds)
                continue

            result.attempts = attempt
            self._log_attempt(content, stage, attempt, "completed", attempt_start)
            self._emit(content, executor, EventStatus.COMPLETED, started, f"completed in {attempt} attempt(s)")
            return result

        message = f"stage {stage.value} failed after {max_attempts} attempts: {last_error}"
        self._emit(content, executor, EventStatus.FAILED, started, message)

        failed = StageResult(
            stage=stage,
            status=StageStatus.TIMEOUT if timed_out else StageStatus.FAILED,
            elapsed_seconds=time.monotonic() - started,
            metadata={"error": last_error},
            attempts=max_attempts
        )
        error_class = StageTimeoutError if timed_out else StageExecutionError
        raise error_class(message, stage=stage, attempts=max_attempts, result=failed)

    def _emit(self, content: ContentItem, executor: BaseStageExecutor, status: EventStatus, started: float, details: str):
        self.emitter.emit(ProgressEvent(
            content_id=content.content_id,
            project_id=content.project_id,
            stage=executor.stage,
            status=status,
            time_elapsed=timedelta(seconds=time.monotonic() - started),
            details=details
        ))

    def _log_attempt(
        self,
        content: ContentItem,
        stage: PipelineStage,
        attempt: int,
        outcome: str,
        attempt_start: float,
        error: Optional[str] = None
    ):
        self.pipeline_logger.log_stage_attempt(
            stage=stage.value,
            content_id=content.content_id,
            attempt=attempt,
            max_attempts=self.config.max_retries,
            outcome=outcome,
            duration_ms=round((time.monotonic() - attempt_start) * 1000, 1),
            error=error
        )
