from typing import Dict, List
import asyncio

from content_engine.domain.errors import ContentNotFoundError, ProjectNotFoundError
from content_engine.domain.models.content import ContentItem
from content_engine.domain.models.pipeline import ProgressEvent
from content_engine.domain.models.project import Project
from .base import ContentRepository, ProjectRepository, ProgressEventRepository


class InMemoryContentRepository(ContentRepository):
    """In-memory content store; keeps copies so callers cannot mutate stored rows"""

    def __init__(self):
        self.items: Dict[str, ContentItem] = {}
        self._lock = asyncio.Lock()

    async def create(self, content: ContentItem) -> None:
        async with self._lock:
            if content.content_id in self.items:
                raise ValueError(f"content already exists: {content.content_id}")
            self.items[content.content_id] = content.model_copy(deep=True)

    async def update(self, content: ContentItem) -> None:
        async with self._lock:
            if content.content_id not in self.items:
                raise ContentNotFoundError(content.content_id)
            self.items[content.content_id] = content.model_copy(deep=True)

    async def find_by_id(self, content_id: str) -> ContentItem:
        async with self._lock:
            if content_id not in self.items:
                raise ContentNotFoundError(content_id)
            return self.items[content_id].model_copy(deep=True)

    async def find_by_project(self, project_id: str) -> List[ContentItem]:
        async with self._lock:
            return [
                item.model_copy(deep=True)
                for item in self.items.values()
                if item.project_id == project_id
            ]


class InMemoryProjectRepository(ProjectRepository):
    """In-memory project store"""

    def __init__(self):
        self.projects: Dict[str, Project] = {}
        self._lock = asyncio.Lock()

    async def save(self, project: Project) -> None:
        async with self._lock:
            self.projects[project.project_id] = project.model_copy(deep=True)

    async def find_by_id(self, project_id: str) -> Project:
        async with self._lock:
            if project_id not in self.projects:
                raise ProjectNotFoundError(project_id)
            return self.projects[project_id].model_copy(deep=True)


class InMemoryProgressEventRepository(ProgressEventRepository):
    """Append-only in-memory event log"""

    def __init__(self):
        self.events: List[ProgressEvent] = []
        self._lock = asyncio.Lock()

    async def save(self, event: ProgressEvent) -> None:
        async with self._lock:
            self.events.append(event)

    async def find_by_content(self, content_id: str) -> List[ProgressEvent]:
        async with self._lock:
            return [event for event in self.events if event.content_id == content_id]
