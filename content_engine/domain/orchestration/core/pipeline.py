from typing import TypedDict, List, Dict, Any, Optional, Literal, Union
from datetime import timedelta
from langgraph.graph import StateGraph, END
import asyncio
import time
import structlog

from content_engine.domain.context.context_manager import ContextWindowManager
from content_engine.domain.errors import (
    ContentEngineError, ContentValidationError, PipelineError, StageExecutionError, StageInputError
)
from content_engine.domain.generation.generation_service import GenerationService
from content_engine.domain.models.content import ContentItem, ContentStatus, ContentType
from content_engine.domain.models.pipeline import (
    EventStatus, PipelineConfig, PipelineStage, ProgressEvent, StageResult, PIPELINE_STAGES
)
from content_engine.domain.orchestration.stages.base_stage import BaseStageExecutor
from content_engine.domain.quality.quality_checker import QualityChecker, QualityCheckOptions
from content_engine.domain.repositories.base import ContentRepository, ProjectRepository
from content_engine.domain.streaming.progress_emitter import ProgressEventEmitter
from content_engine.infrastructure.observability.logging import PipelineLogger
from .stage_runner import StageRunner

logger = structlog.get_logger(__name__)

QUALITY_NODE = "quality_check"

# Status entered before a stage runs; stages not listed keep the current status
STAGE_ENTRY_STATUS: Dict[PipelineStage, ContentStatus] = {
    PipelineStage.RESEARCH: ContentStatus.RESEARCHING,
    PipelineStage.DRAFT: ContentStatus.DRAFTING,
    PipelineStage.EDIT: ContentStatus.EDITING,
}


class PipelineState(TypedDict):
    """State for the content pipeline graph"""
    content: ContentItem
    stage_trace: List[str]
    error: Optional[str]
    failed_stage: Optional[str]
    stage_error: Optional[ContentEngineError]


class ContentPipeline:
    """Content pipeline orchestrator using LangGraph.

    Graph::

        research -> outline -> draft -> edit -> quality_check -> finalize -> END
            |          |          |        |                         |
            +----------+----------+--------+----- fail --------------+--> END

    Every stage runs exactly once per item, inside the StageRunner retry
    envelope. The item is persisted after each status change and each stage
    result, so a failed run leaves an inspectable partial item behind.
    """

    def __init__(
        self,
        content_repository: ContentRepository,
        project_repository: ProjectRepository,
        context_manager: ContextWindowManager,
        generation: GenerationService,
        stages: List[BaseStageExecutor],
        emitter: ProgressEventEmitter,
        config: Optional[PipelineConfig] = None,
        quality_checker: Optional[QualityChecker] = None
    ):
        self.content_repository = content_repository
        self.project_repository = project_repository
        self.context_manager = context_manager
        self.generation = generation
        self.emitter = emitter
        self.config = config or PipelineConfig()
        self.quality_checker = quality_checker
        self.runner = StageRunner(self.config, emitter)
        self.pipeline_logger = PipelineLogger(__name__)

        self.stages: Dict[PipelineStage, BaseStageExecutor] = {executor.stage: executor for executor in stages}
        missing = [stage.value for stage in PIPELINE_STAGES if stage not in self.stages]
        if missing:
            raise ValueError(f"missing stage executors: {', '.join(missing)}")

        self.workflow = self._create_workflow()

    def _create_workflow(self):
        """Create the stage graph"""

        workflow = StateGraph(PipelineState)

        for stage in PIPELINE_STAGES:
            workflow.add_node(stage.value, self._stage_node(stage))
        workflow.add_node(QUALITY_NODE, self.quality_check_node)

        workflow.set_entry_point(PipelineStage.RESEARCH.value)

        # Each stage either continues to its successor or ends the run
        successors = {
            PipelineStage.RESEARCH: PipelineStage.OUTLINE.value,
            PipelineStage.OUTLINE: PipelineStage.DRAFT.value,
            PipelineStage.DRAFT: PipelineStage.EDIT.value,
            PipelineStage.EDIT: QUALITY_NODE,
        }
        for stage, next_node in successors.items():
            workflow.add_conditional_edges(
                stage.value,
                self._router(stage.value, next_node),
                {
                    "continue": next_node,
                    "fail": END
                }
            )

        workflow.add_edge(QUALITY_NODE, PipelineStage.FINALIZE.value)
        workflow.add_edge(PipelineStage.FINALIZE.value, END)

        return workflow.compile()

    async def create_content(self, project_id: str, title: str, content_type: Union[ContentType, str]) -> ContentItem:
        """Create a content item and drive it through every stage.

        Returns the item in Review status. Raises ProjectNotFoundError or
        ContentValidationError for bad input, and PipelineError (carrying the
        persisted partial item) when a stage exhausts its attempts.
        """

        try:
            content_type = ContentType(content_type)
        except ValueError as e:
            raise ContentValidationError(f"unknown content type: {content_type}") from e

        content = ContentItem.create(project_id, title, content_type)
        project = await self.project_repository.find_by_id(project_id)

        await self.content_repository.create(content)
        started = time.monotonic()

        with structlog.contextvars.bound_contextvars(content_id=content.content_id, project_id=project_id):
            logger.info("Content pipeline started", title=title, content_type=content_type.value)
            self._emit_pipeline(content, EventStatus.STARTED, started, f"creating {content_type.value}")

            try:
                await self.context_manager.ensure_window(
                    project_id, content_type=content_type, client_id=project.client_id
                )
                await self.generation.inject_client_context(project)

                final_state = await self.workflow.ainvoke({
                    "content": content,
                    "stage_trace": [],
                    "error": None,
                    "failed_stage": None,
                    "stage_error": None
                })
            except asyncio.CancelledError:
                logger.warning("Content pipeline cancelled", status=content.status.value)
                self._emit_pipeline(content, EventStatus.FAILED, started, "cancelled")
                raise
            except Exception as e:
                await self._fail(content, None, str(e) or type(e).__name__, started)
                raise PipelineError(f"content pipeline failed: {e}", content=content) from e

            if final_state.get("error"):
                failed_stage = final_state.get("failed_stage")
                stage_error = final_state.get("stage_error")
                await self._fail(content, failed_stage, final_state["error"], started, stage_error)
                raise PipelineError(
                    f"content pipeline failed at {failed_stage}: {final_state['error']}",
                    content=content,
                    stage=failed_stage
                ) from stage_error

            logger.info(
                "Content pipeline completed",
                stages=final_state["stage_trace"],
                version=content.version,
                word_count=content.word_count,
                duration_ms=round((time.monotonic() - started) * 1000, 1)
            )
            self._emit_pipeline(content, EventStatus.COMPLETED, started, f"ready for review at version {content.version}")

        return content

    def _stage_node(self, stage: PipelineStage):
        executor = self.stages[stage]

        async def node(state: PipelineState) -> Dict[str, Any]:
            content = state["content"]

            entry_status = STAGE_ENTRY_STATUS.get(stage)
            if entry_status is not None:
                content.update_status(entry_status)
                await self.content_repository.update(content)

            try:
                result = await self.runner.run(content, executor)
            except (StageExecutionError, StageInputError) as e:
                return {"error": str(e), "failed_stage": stage.value, "stage_error": e}

            self._fold_result(content, result)
            if stage == PipelineStage.FINALIZE:
                content.update_status(ContentStatus.REVIEW)
            await self.content_repository.update(content)

            return {"content": content, "stage_trace": state["stage_trace"] + [stage.value]}

        node.__name__ = f"{stage.value}_node"
        return node

    def _fold_result(self, content: ContentItem, result: StageResult):
        """Fold a stage result into the content item"""

        stage = result.stage
        if stage.replaces_body:
            content.update_body(result.content, author=stage.value)

        if stage == PipelineStage.RESEARCH:
            content.update_metadata("research", result.metadata)
        elif stage == PipelineStage.OUTLINE:
            content.update_metadata("outline", result.content)
        elif stage == PipelineStage.FINALIZE:
            content.update_metadata("delivery", result.metadata)

        attempts = dict(content.metadata.get("stage_attempts", {}))
        attempts[stage.value] = result.attempts
        content.update_metadata("stage_attempts", attempts)

    async def quality_check_node(self, state: PipelineState) -> Dict[str, Any]:
        """Attach quality findings; never fails the pipeline"""

        content = state["content"]
        trace = state["stage_trace"] + [QUALITY_NODE]

        if self.quality_checker is None:
            return {"stage_trace": trace}

        options = QualityCheckOptions(
            check_plagiarism=self.config.enable_plagiarism_check,
            check_fact_accuracy=self.config.enable_fact_checking,
            evaluate_seo=self.config.seo_optimization
        )

        try:
            report = await self.quality_checker.check_content(content.model_copy(deep=True), options)
        except Exception as e:
            logger.warning("Quality check failed, continuing", error=str(e) or type(e).__name__)
            return {"stage_trace": trace}

        content.update_statistics(report.to_statistics())
        content.update_metadata("quality_suggestions", report.suggestions_by_category)
        if report.keywords:
            content.update_metadata("keywords", list(report.keywords))
        if report.factual_errors:
            content.update_metadata("factual_errors", [error.model_dump() for error in report.factual_errors])
        await self.content_repository.update(content)

        logger.info(
            "Quality check completed",
            readability_score=report.readability_score,
            seo_score=report.seo_score
        )
        return {"content": content, "stage_trace": trace}

    def _router(self, from_node: str, next_node: str):
        def route(state: PipelineState) -> Literal["continue", "fail"]:
            condition = "fail" if state.get("error") else "continue"
            self.pipeline_logger.log_workflow_transition(
                content_id=state["content"].content_id,
                from_node=from_node,
                to_node=next_node if condition == "continue" else "END",
                condition=condition
            )
            return condition

        return route

    async def _fail(
        self,
        content: ContentItem,
        failed_stage: Optional[str],
        error: str,
        started: float,
        stage_error: Optional[ContentEngineError] = None
    ):
        """Annotate and persist the partial item, leaving its status where it stopped.

        The status is not reset to Planning: statuses only move forward, so
        the item keeps the state of the stage that was running (Drafting for a
        failed draft) and error/failed_stage say what went wrong there.
        """

        content.update_metadata("error", error)
        content.update_metadata("failed_stage", failed_stage or "pipeline")
        result = getattr(stage_error, "result", None)
        if result is not None:
            content.update_metadata("failed_stage_result", result.model_dump(mode="json"))

        try:
            await self.content_repository.update(content)
        except Exception as e:
            logger.error("Failed to persist failed content", error=str(e))

        logger.error(
            "Content pipeline failed",
            failed_stage=failed_stage,
            status=content.status.value,
            error=error
        )
        self._emit_pipeline(content, EventStatus.FAILED, started, error)

    def _emit_pipeline(self, content: ContentItem, status: EventStatus, started: float, details: str):
        self.emitter.emit(ProgressEvent(
            content_id=content.content_id,
            project_id=content.project_id,
            stage=None,
            status=status,
            time_elapsed=timedelta(seconds=time.monotonic() - started),
            details=details
        ))
