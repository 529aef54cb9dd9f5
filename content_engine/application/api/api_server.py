from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import structlog

from content_engine.application.container import build_engine
from content_engine.domain.errors import (
    ContentNotFoundError, ContentValidationError, ContextWindowNotFoundError,
    PipelineError, ProjectNotFoundError
)
from content_engine.domain.generation.backend import GenerationBackend
from content_engine.domain.quality.quality_checker import QualityChecker
from content_engine.domain.repositories.base import (
    ContentRepository, ProjectRepository, ProgressEventRepository
)
from content_engine.infrastructure.config.settings import Settings, get_settings
from content_engine.infrastructure.observability.logging import setup_logging
from .route import router

logger = structlog.get_logger(__name__)


def create_app(
    backend: GenerationBackend,
    settings: Optional[Settings] = None,
    project_repository: Optional[ProjectRepository] = None,
    content_repository: Optional[ContentRepository] = None,
    event_repository: Optional[ProgressEventRepository] = None,
    quality_checker: Optional[QualityChecker] = None
) -> FastAPI:
    """Build the HTTP adapter around a freshly wired engine"""

    settings = settings or get_settings()
    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        service_name=settings.service_name,
        environment=settings.environment
    )

    engine = build_engine(
        settings,
        backend,
        content_repository=content_repository,
        project_repository=project_repository,
        event_repository=event_repository,
        quality_checker=quality_checker
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await engine.start()
        try:
            yield
        finally:
            await engine.stop()

    app = FastAPI(
        title="Content Engine",
        description="LangGraph-based content generation pipeline",
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.engine = engine
    app.include_router(router)
    register_exception_handlers(app)

    @app.get("/health")
    async def health_check() -> JSONResponse:
        return JSONResponse(content={"status": "ok"}, status_code=200)

    return app


def register_exception_handlers(app: FastAPI):
    """Map domain errors to HTTP responses"""

    async def not_found(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    async def invalid_input(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    async def pipeline_failed(request: Request, exc: PipelineError) -> JSONResponse:
        content = exc.content.model_dump(mode="json") if exc.content is not None else None
        logger.warning("Pipeline request failed", stage=exc.stage, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc), "failed_stage": exc.stage, "timed_out": exc.timed_out, "content": content}
        )

    for exc_class in (ProjectNotFoundError, ContentNotFoundError, ContextWindowNotFoundError):
        app.add_exception_handler(exc_class, not_found)
    app.add_exception_handler(ContentValidationError, invalid_input)
    app.add_exception_handler(ValidationError, invalid_input)
    app.add_exception_handler(PipelineError, pipeline_failed)
