from content_engine.domain.generation.research_notes import parse_research_notes
from content_engine.domain.models.content import ContentItem
from content_engine.domain.models.pipeline import PipelineStage, StageResult
from .base_stage import BaseStageExecutor


class ResearchStage(BaseStageExecutor):
    """Gathers topics, facts and sources for the title"""

    stage = PipelineStage.RESEARCH
    response_priority = 6

    def validate_input(self, content: ContentItem):
        # Only the title is needed and the item guarantees it
        return None

    def build_result(self, content: ContentItem, response: str) -> StageResult:
        notes = parse_research_notes(response)
        return StageResult(
            stage=self.stage,
            content=notes.summary,
            metadata=notes.model_dump()
        )
