from typing import Dict, Any, Optional
import time
import structlog

from content_engine.domain.context.context_manager import ContextWindowManager
from content_engine.domain.context.context_window import ContextEntry, EntryRole, estimate_tokens
from content_engine.domain.models.content import ContentType
from content_engine.domain.models.pipeline import PipelineStage
from content_engine.domain.models.project import Project
from content_engine.infrastructure.observability.logging import MetricsCollector
from content_engine.infrastructure.observability.langfuse_tracing import GenerationTracer
from .backend import GenerationBackend, entries_to_messages
from .prompt_templates import PromptTemplateManager, PromptData

logger = structlog.get_logger(__name__)

PROMPT_PRIORITY = 5


class GenerationService:
    """Runs templated generation against a project's context window"""

    def __init__(
        self,
        backend: GenerationBackend,
        context_manager: ContextWindowManager,
        templates: Optional[PromptTemplateManager] = None,
        metrics: Optional[MetricsCollector] = None,
        tracer: Optional[GenerationTracer] = None
    ):
        self.backend = backend
        self.context_manager = context_manager
        self.templates = templates or PromptTemplateManager()
        self.metrics_collector = metrics or MetricsCollector()
        self.tracer = tracer or GenerationTracer()

    async def generate(
        self,
        project_id: str,
        content_type: ContentType,
        stage: PipelineStage,
        data: PromptData,
        response_priority: int = 8,
        response_metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        """Render the stage prompt, call the backend with the window's turns and record the exchange"""

        start = time.monotonic()

        await self.context_manager.ensure_window(project_id, content_type=content_type)

        # Client facts live beside the entries, not in them
        window = await self.context_manager.snapshot(project_id)
        data = data.model_copy(update={
            "domain_knowledge": {**window.domain_knowledge, **data.domain_knowledge}
        })

        prompt = self.templates.render(content_type, stage, data)

        await self.context_manager.append(project_id, ContextEntry(
            role=EntryRole.USER,
            content=prompt,
            priority=PROMPT_PRIORITY,
            metadata={"stage": stage.value, "content_type": content_type.value}
        ))

        entries = await self.context_manager.read(project_id)

        try:
            response = await self.backend.generate(entries_to_messages(entries))
        except Exception as e:
            duration_ms = (time.monotonic() - start) * 1000
            self.metrics_collector.increment_counter("generation.failures", tags={"stage": stage.value})
            self.tracer.trace_generation(
                project_id, stage.value, content_type.value, prompt, None, duration_ms, error=str(e)
            )
            raise

        await self.context_manager.append(project_id, ContextEntry(
            role=EntryRole.ASSISTANT,
            content=response,
            priority=response_priority,
            metadata={
                "stage": stage.value,
                "content_type": content_type.value,
                "token_count": estimate_tokens(response),
                **(response_metadata or {})
            }
        ))

        duration_ms = (time.monotonic() - start) * 1000
        self._record_generation(content_type, stage, duration_ms, prompt, response)
        self.tracer.trace_generation(
            project_id, stage.value, content_type.value, prompt, response, duration_ms,
            metadata={"context_turns": len(entries)}
        )

        logger.debug(
            "Generated stage output",
            project_id=project_id,
            stage=stage.value,
            duration_ms=round(duration_ms, 1),
            response_tokens=estimate_tokens(response)
        )

        return response

    async def inject_client_context(self, project: Project):
        """Load the project's client facts into its context window"""

        await self.context_manager.ensure_window(project.project_id, client_id=project.client_id)
        await self.context_manager.inject_domain_knowledge(project.project_id, project.domain_knowledge())

    def _record_generation(
        self,
        content_type: ContentType,
        stage: PipelineStage,
        duration_ms: float,
        prompt: str,
        response: str
    ):
        """Collect generation metrics"""

        self.metrics_collector.increment_counter("generation.total")
        self.metrics_collector.increment_counter(f"generation.stage.{stage.value}")
        self.metrics_collector.increment_counter(f"generation.content_type.{content_type.value}")
        self.metrics_collector.increment_counter("tokens.prompt", estimate_tokens(prompt))
        self.metrics_collector.increment_counter("tokens.response", estimate_tokens(response))
        self.metrics_collector.record_latency("generation", duration_ms, tags={"stage": stage.value})

    def metrics(self) -> Dict[str, Any]:
        """Aggregate generation metrics"""

        summary = self.metrics_collector.get_metrics_summary()
        latency = summary.get("latency.generation", {})
        prompt_tokens = self.metrics_collector.get_counter("tokens.prompt")
        response_tokens = self.metrics_collector.get_counter("tokens.response")

        return {
            "total_generations": self.metrics_collector.get_counter("generation.total"),
            "failed_generations": self.metrics_collector.get_counter("generation.failures"),
            "average_latency_ms": latency.get("avg", 0),
            "total_prompt_tokens": prompt_tokens,
            "total_response_tokens": response_tokens,
            "total_tokens": prompt_tokens + response_tokens,
            "stage_breakdown": {
                stage.value: self.metrics_collector.get_counter(f"generation.stage.{stage.value}")
                for stage in PipelineStage
            },
            "content_type_breakdown": {
                content_type.value: self.metrics_collector.get_counter(f"generation.content_type.{content_type.value}")
                for content_type in ContentType
            },
        }
