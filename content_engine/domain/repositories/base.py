from abc import ABC, abstractmethod
from typing import List

from content_engine.domain.models.content import ContentItem
from content_engine.domain.models.pipeline import ProgressEvent
from content_engine.domain.models.project import Project


class ContentRepository(ABC):
    """Persistence for content items"""

    @abstractmethod
    async def create(self, content: ContentItem) -> None:
        pass

    @abstractmethod
    async def update(self, content: ContentItem) -> None:
        pass

    @abstractmethod
    async def find_by_id(self, content_id: str) -> ContentItem:
        """Raises ContentNotFoundError"""
        pass

    @abstractmethod
    async def find_by_project(self, project_id: str) -> List[ContentItem]:
        pass


class ProjectRepository(ABC):
    """Read access to client projects"""

    @abstractmethod
    async def save(self, project: Project) -> None:
        pass

    @abstractmethod
    async def find_by_id(self, project_id: str) -> Project:
        """Raises ProjectNotFoundError"""
        pass


class ProgressEventRepository(ABC):
    """Durable sink for pipeline progress events"""

    @abstractmethod
    async def save(self, event: ProgressEvent) -> None:
        pass

    @abstractmethod
    async def find_by_content(self, content_id: str) -> List[ProgressEvent]:
        pass
