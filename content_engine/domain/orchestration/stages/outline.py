from typing import Dict, Any

from content_engine.domain.errors import StageInputError
from content_engine.domain.models.content import ContentItem
from content_engine.domain.models.pipeline import PipelineStage, StageResult
from .base_stage import BaseStageExecutor


class OutlineStage(BaseStageExecutor):
    """Turns research notes into a structured outline"""

    stage = PipelineStage.OUTLINE
    response_priority = 7

    def validate_input(self, content: ContentItem):
        if not content.metadata.get("research"):
            raise StageInputError("research data not found in content metadata")

    def additional_context(self, content: ContentItem) -> Dict[str, Any]:
        return {"research": content.metadata["research"]}

    def build_result(self, content: ContentItem, response: str) -> StageResult:
        return StageResult(stage=self.stage, content=response, metadata={"stage": self.stage.value})
