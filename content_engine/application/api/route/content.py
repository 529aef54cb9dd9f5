from typing import Dict, Any, List
from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from content_engine.application.container import ContentEngine
from content_engine.domain.context.context_window import ContextMetrics
from content_engine.domain.models.content import ContentItem, ContentType
from content_engine.domain.models.pipeline import ProgressEvent
from content_engine.domain.models.project import Project

router = APIRouter(prefix="/api/v1")


class CreateContentRequest(BaseModel):
    title: str
    content_type: ContentType


class ExportedWindow(BaseModel):
    project_id: str
    serialized: str = Field(description="JSON produced by export, accepted by import")


class ImportWindowRequest(BaseModel):
    serialized: str


def get_engine(request: Request) -> ContentEngine:
    return request.app.state.engine


@router.post("/projects", status_code=status.HTTP_201_CREATED, response_model=Project)
async def create_project(project: Project, engine: ContentEngine = Depends(get_engine)):
    await engine.project_repository.save(project)
    return project


@router.post(
    "/projects/{project_id}/content",
    status_code=status.HTTP_201_CREATED,
    response_model=ContentItem
)
async def create_content(
    project_id: str,
    body: CreateContentRequest,
    engine: ContentEngine = Depends(get_engine)
):
    """Run the full pipeline; the response carries the item in Review"""
    return await engine.pipeline.create_content(project_id, body.title, body.content_type)


@router.get("/projects/{project_id}/content", response_model=List[ContentItem])
async def list_project_content(project_id: str, engine: ContentEngine = Depends(get_engine)):
    return await engine.content_repository.find_by_project(project_id)


@router.get("/content/{content_id}", response_model=ContentItem)
async def get_content(content_id: str, engine: ContentEngine = Depends(get_engine)):
    return await engine.content_repository.find_by_id(content_id)


@router.get("/content/{content_id}/events", response_model=List[ProgressEvent])
async def get_content_events(content_id: str, engine: ContentEngine = Depends(get_engine)):
    await engine.emitter.flush()
    return await engine.event_repository.find_by_content(content_id)


@router.get("/projects/{project_id}/context/metrics", response_model=ContextMetrics)
async def get_context_metrics(project_id: str, engine: ContentEngine = Depends(get_engine)):
    return await engine.context_manager.metrics(project_id)


@router.post("/projects/{project_id}/context/knowledge", status_code=status.HTTP_204_NO_CONTENT)
async def inject_knowledge(
    project_id: str,
    knowledge: Dict[str, Any],
    engine: ContentEngine = Depends(get_engine)
):
    await engine.context_manager.inject_domain_knowledge(project_id, knowledge)


@router.get("/projects/{project_id}/context/export", response_model=ExportedWindow)
async def export_context(project_id: str, engine: ContentEngine = Depends(get_engine)):
    serialized = await engine.context_manager.export_window(project_id)
    return ExportedWindow(project_id=project_id, serialized=serialized)


@router.post("/context/import", response_model=ExportedWindow)
async def import_context(body: ImportWindowRequest, engine: ContentEngine = Depends(get_engine)):
    project_id = await engine.context_manager.import_window(body.serialized)
    return ExportedWindow(project_id=project_id, serialized=body.serialized)


@router.get("/metrics/generation")
async def get_generation_metrics(engine: ContentEngine = Depends(get_engine)):
    return engine.generation.metrics()
