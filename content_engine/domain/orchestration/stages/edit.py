from typing import Dict, Any

from content_engine.domain.errors import StageInputError
from content_engine.domain.models.content import ContentItem, count_words
from content_engine.domain.models.pipeline import PipelineStage, StageResult
from .base_stage import BaseStageExecutor


class EditStage(BaseStageExecutor):
    """Improves clarity and flow of the current draft"""

    stage = PipelineStage.EDIT
    response_priority = 9

    def validate_input(self, content: ContentItem):
        if not content.body.strip():
            raise StageInputError("no draft content available for editing")

    def additional_context(self, content: ContentItem) -> Dict[str, Any]:
        return {"draft": content.body}

    def build_result(self, content: ContentItem, response: str) -> StageResult:
        return StageResult(
            stage=self.stage,
            content=response,
            metadata={"stage": self.stage.value, "word_count": count_words(response)}
        )
