from typing import Optional
import structlog

from content_engine.domain.context.context_manager import ContextWindowManager
from content_engine.domain.generation.backend import GenerationBackend
from content_engine.domain.generation.generation_service import GenerationService
from content_engine.domain.generation.prompt_templates import PromptTemplateManager
from content_engine.domain.orchestration.core.pipeline import ContentPipeline
from content_engine.domain.orchestration.stages import default_stages
from content_engine.domain.quality.quality_checker import QualityChecker
from content_engine.domain.repositories.base import (
    ContentRepository, ProjectRepository, ProgressEventRepository
)
from content_engine.domain.repositories.memory import (
    InMemoryContentRepository, InMemoryProjectRepository, InMemoryProgressEventRepository
)
from content_engine.domain.streaming.progress_emitter import ProgressEventEmitter
from content_engine.infrastructure.config.settings import Settings
from content_engine.infrastructure.observability.langfuse_tracing import GenerationTracer
from content_engine.infrastructure.observability.logging import MetricsCollector

logger = structlog.get_logger(__name__)


class ContentEngine:
    """Wired set of collaborators for one process"""

    def __init__(
        self,
        settings: Settings,
        content_repository: ContentRepository,
        project_repository: ProjectRepository,
        event_repository: ProgressEventRepository,
        context_manager: ContextWindowManager,
        generation: GenerationService,
        emitter: ProgressEventEmitter,
        pipeline: ContentPipeline,
        tracer: GenerationTracer
    ):
        self.settings = settings
        self.content_repository = content_repository
        self.project_repository = project_repository
        self.event_repository = event_repository
        self.context_manager = context_manager
        self.generation = generation
        self.emitter = emitter
        self.pipeline = pipeline
        self.tracer = tracer

    async def start(self):
        """Start background workers"""
        self.emitter.start()
        logger.info("Content engine started", environment=self.settings.environment, tracing=self.tracer.enabled)

    async def stop(self):
        """Drain events and flush traces"""
        await self.emitter.stop()
        self.tracer.flush()
        logger.info("Content engine stopped")


def build_engine(
    settings: Settings,
    backend: GenerationBackend,
    content_repository: Optional[ContentRepository] = None,
    project_repository: Optional[ProjectRepository] = None,
    event_repository: Optional[ProgressEventRepository] = None,
    quality_checker: Optional[QualityChecker] = None,
    templates: Optional[PromptTemplateManager] = None
) -> ContentEngine:
    """Construct the engine; repositories default to in-memory stores"""

    config = settings.pipeline_config()
    content_repository = content_repository or InMemoryContentRepository()
    project_repository = project_repository or InMemoryProjectRepository()
    event_repository = event_repository or InMemoryProgressEventRepository()

    tracer = GenerationTracer(
        public_key=settings.langfuse_public_key,
        secret_key=settings.langfuse_secret_key,
        host=settings.langfuse_host,
        environment=settings.environment
    )
    context_manager = ContextWindowManager(default_max_tokens=config.context_window_tokens)
    generation = GenerationService(
        backend,
        context_manager,
        templates=templates,
        metrics=MetricsCollector(),
        tracer=tracer
    )
    emitter = ProgressEventEmitter(
        event_repository,
        max_queue_size=config.event_queue_size,
        save_timeout=config.event_save_timeout_seconds
    )
    pipeline = ContentPipeline(
        content_repository=content_repository,
        project_repository=project_repository,
        context_manager=context_manager,
        generation=generation,
        stages=default_stages(generation, project_repository),
        emitter=emitter,
        config=config,
        quality_checker=quality_checker
    )

    return ContentEngine(
        settings=settings,
        content_repository=content_repository,
        project_repository=project_repository,
        event_repository=event_repository,
        context_manager=context_manager,
        generation=generation,
        emitter=emitter,
        pipeline=pipeline,
        tracer=tracer
    )
