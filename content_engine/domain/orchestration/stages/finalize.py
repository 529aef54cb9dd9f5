from typing import Dict, Any
from datetime import datetime

from content_engine.domain.errors import StageInputError
from content_engine.domain.generation.prompt_templates import PromptData
from content_engine.domain.models.content import ContentItem, ContentType, count_words
from content_engine.domain.models.pipeline import PipelineStage, StageResult
from .base_stage import BaseStageExecutor

CONTENT_FORMATS: Dict[ContentType, str] = {
    ContentType.BLOG_POST: "HTML/Markdown",
    ContentType.SOCIAL_POST: "Plain Text",
    ContentType.TECHNICAL_ARTICLE: "Markdown",
    ContentType.EMAIL_NEWSLETTER: "HTML",
    ContentType.WEBSITE_COPY: "HTML",
    ContentType.PRODUCT_DESCRIPTION: "Plain Text",
    ContentType.PRESS_RELEASE: "Plain Text",
}


class FinalizeStage(BaseStageExecutor):
    """Formats the edited text for delivery"""

    stage = PipelineStage.FINALIZE
    response_priority = 10

    def validate_input(self, content: ContentItem):
        if not content.body.strip():
            raise StageInputError("no edited content available for finalization")

    def additional_context(self, content: ContentItem) -> Dict[str, Any]:
        return {"edited_draft": content.body}

    async def build_prompt_data(self, content: ContentItem) -> PromptData:
        data = await super().build_prompt_data(content)

        # Keywords found by the quality check win over the project's
        keywords = content.metadata.get("keywords")
        if isinstance(keywords, list) and keywords:
            data = data.model_copy(update={"keywords": [str(k) for k in keywords]})
        return data

    def response_metadata(self, content: ContentItem) -> Dict[str, Any]:
        return {"delivery_ready": True, "content_format": content_format(content.content_type)}

    def build_result(self, content: ContentItem, response: str) -> StageResult:
        word_count = count_words(response)

        return StageResult(
            stage=self.stage,
            content=response,
            metadata={
                "stage": "finalized",
                "word_count": word_count,
                "delivery_ready": True,
                "finalized_at": datetime.utcnow().isoformat(),
                "content_format": content_format(content.content_type),
                "meets_word_count_minimum": word_count >= content.minimum_word_count,
            }
        )


def content_format(content_type: ContentType) -> str:
    return CONTENT_FORMATS.get(content_type, "Plain Text")
