from abc import ABC, abstractmethod
from typing import Dict, Any
import time
import structlog

from content_engine.domain.errors import ProjectNotFoundError, StageInputError
from content_engine.domain.generation.generation_service import GenerationService
from content_engine.domain.generation.prompt_templates import PromptData
from content_engine.domain.models.content import ContentItem
from content_engine.domain.models.pipeline import PipelineStage, StageResult
from content_engine.domain.models.project import Project
from content_engine.domain.repositories.base import ProjectRepository

logger = structlog.get_logger(__name__)


class BaseStageExecutor(ABC):
    """Base class for a single pipeline stage"""

    stage: PipelineStage
    response_priority: int = 8

    def __init__(self, generation: GenerationService, projects: ProjectRepository):
        self.generation = generation
        self.projects = projects

    async def execute(self, content: ContentItem) -> StageResult:
        """Run one attempt of the stage against a snapshot of the content"""

        self.validate_input(content)
        if not self.generation.templates.has_template(content.content_type, self.stage):
            raise StageInputError(
                f"no {self.stage.value} template for content type {content.content_type.value}"
            )

        start = time.monotonic()

        data = await self.build_prompt_data(content)
        response = await self.generation.generate(
            content.project_id,
            content.content_type,
            self.stage,
            data,
            response_priority=self.response_priority,
            response_metadata=self.response_metadata(content)
        )

        result = self.build_result(content, response)
        result.elapsed_seconds = time.monotonic() - start
        return result

    @abstractmethod
    def validate_input(self, content: ContentItem):
        """Raise StageInputError when the upstream output this stage needs is missing"""
        pass

    @abstractmethod
    def build_result(self, content: ContentItem, response: str) -> StageResult:
        pass

    def additional_context(self, content: ContentItem) -> Dict[str, Any]:
        return {}

    def response_metadata(self, content: ContentItem) -> Dict[str, Any]:
        return {}

    async def build_prompt_data(self, content: ContentItem) -> PromptData:
        """Prompt data from the owning project, with generic defaults when it is gone"""

        data = PromptData(
            content_title=content.title,
            content_type=content.content_type,
            additional_context=self.additional_context(content)
        )

        try:
            project = await self.projects.find_by_id(content.project_id)
        except ProjectNotFoundError:
            logger.warning(
                "Project missing, using default prompt data",
                project_id=content.project_id,
                stage=self.stage.value
            )
            return data

        return data.model_copy(update=self._project_fields(project))

    def _project_fields(self, project: Project) -> Dict[str, Any]:
        return {
            "client_name": project.client_name,
            "project_title": project.title,
            "content_goals": list(project.content_goals),
            "target_audience": project.target_audience,
            "brand_voice": project.brand_voice,
            "keywords": list(project.keywords),
            "style_guide": dict(project.style_preferences),
        }
