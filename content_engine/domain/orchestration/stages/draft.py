from typing import Dict, Any

from content_engine.domain.errors import StageInputError
from content_engine.domain.models.content import ContentItem, count_words
from content_engine.domain.models.pipeline import PipelineStage, StageResult
from .base_stage import BaseStageExecutor


class DraftStage(BaseStageExecutor):
    """Writes the first full draft from the outline and research"""

    stage = PipelineStage.DRAFT
    response_priority = 8

    def validate_input(self, content: ContentItem):
        if not content.metadata.get("outline"):
            raise StageInputError("outline not found in content metadata")

    def additional_context(self, content: ContentItem) -> Dict[str, Any]:
        return {
            "outline": content.metadata["outline"],
            "research": content.metadata.get("research"),
        }

    def build_result(self, content: ContentItem, response: str) -> StageResult:
        return StageResult(
            stage=self.stage,
            content=response,
            metadata={"stage": self.stage.value, "word_count": count_words(response)}
        )
