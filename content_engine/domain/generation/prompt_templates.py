"""
Prompt templates keyed by content type and pipeline stage.

Templates are langchain ``PromptTemplate`` objects in f-string format. Every
content type gets a generic template per stage; blog posts, social posts and
technical articles override them with type-specific wording.
"""

from typing import Dict, Any, List, Optional
import json
from pydantic import BaseModel, Field

from langchain_core.prompts import PromptTemplate

from content_engine.domain.errors import TemplateNotFoundError, TemplateRenderError
from content_engine.domain.models.content import ContentType
from content_engine.domain.models.pipeline import PipelineStage, PIPELINE_STAGES


class PromptData(BaseModel):
    """Structured data rendered into stage prompts"""
    client_name: str = "Client"
    project_title: str = ""
    content_title: str
    content_type: ContentType
    content_goals: List[str] = Field(default_factory=list)
    target_audience: str = "general audience"
    brand_voice: str = "professional"
    keywords: List[str] = Field(default_factory=list)
    style_guide: Dict[str, Any] = Field(default_factory=dict)
    domain_knowledge: Dict[str, Any] = Field(default_factory=dict)
    additional_context: Dict[str, Any] = Field(default_factory=dict)


class PromptTemplateManager:
    """Registry of prompt templates per (content type, stage)"""

    def __init__(self, register_defaults: bool = True):
        self.templates: Dict[ContentType, Dict[PipelineStage, PromptTemplate]] = {}
        if register_defaults:
            self._register_default_templates()

    def _register_default_templates(self):
        """Register generic templates for every type, then type-specific overrides"""

        for content_type in ContentType:
            for stage in PIPELINE_STAGES:
                self.register_template(content_type, stage, GENERIC_TEMPLATES[stage])

        for content_type, overrides in TYPE_TEMPLATES.items():
            for stage, text in overrides.items():
                self.register_template(content_type, stage, text)

    def register_template(self, content_type: ContentType, stage: PipelineStage, text: str):
        """Register or replace a template"""

        content_type = ContentType(content_type)
        stage = PipelineStage(stage)
        try:
            template = PromptTemplate.from_template(text)
        except (ValueError, KeyError) as e:
            raise TemplateRenderError(f"invalid template for {content_type.value}/{stage.value}: {e}") from e

        self.templates.setdefault(content_type, {})[stage] = template

    def has_template(self, content_type: ContentType, stage: PipelineStage) -> bool:
        return PipelineStage(stage) in self.templates.get(ContentType(content_type), {})

    def render(self, content_type: ContentType, stage: PipelineStage, data: PromptData) -> str:
        """Render the template for a content type and stage"""

        content_type = ContentType(content_type)
        stage = PipelineStage(stage)
        content_templates = self.templates.get(content_type)
        if not content_templates:
            raise TemplateNotFoundError(f"no templates found for content type: {content_type.value}")

        template = content_templates.get(stage)
        if template is None:
            raise TemplateNotFoundError(
                f"template not found: {stage.value} for content type: {content_type.value}"
            )

        values = template_values(data)
        try:
            return template.format(**{k: v for k, v in values.items() if k in template.input_variables})
        except (KeyError, ValueError) as e:
            raise TemplateRenderError(
                f"missing value {e} for template {stage.value}/{content_type.value}"
            ) from e


def template_values(data: PromptData) -> Dict[str, str]:
    """Flatten prompt data to the string variables templates may reference"""

    extra = data.additional_context
    return {
        "client_name": data.client_name,
        "project_title": data.project_title or data.content_title,
        "content_title": data.content_title,
        "content_type": data.content_type.value,
        "content_goals": _bullets(data.content_goals) or "- inform the reader",
        "target_audience": data.target_audience,
        "brand_voice": data.brand_voice,
        "keywords": ", ".join(data.keywords) or "none specified",
        "style_guide": _key_values(data.style_guide) or "none",
        "domain_knowledge": _key_values(data.domain_knowledge) or "none",
        "research": _as_text(extra.get("research")),
        "outline": _as_text(extra.get("outline")),
        "draft": _as_text(extra.get("draft")),
        "edited_draft": _as_text(extra.get("edited_draft")),
        "platform": str(extra.get("platform", "LinkedIn")),
        "max_length": str(extra.get("max_length", 280)),
        "technical_domain": str(extra.get("technical_domain", "software engineering")),
        "technical_concepts": ", ".join(extra.get("technical_concepts", [])) or data.content_title,
    }


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _key_values(mapping: Dict[str, Any]) -> str:
    return "\n".join(f"{key}: {_as_text(value)}" for key, value in sorted(mapping.items()))


def _as_text(value: Optional[Any]) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return json.dumps(value, default=str, indent=2)


RESEARCH_RESPONSE_FORMAT = """Respond with a single JSON object and nothing else, using this schema:
{{"topics": [string], "key_facts": [string], "sources": [string], "references": [string], "summary": string}}"""


GENERIC_TEMPLATES: Dict[PipelineStage, str] = {
    PipelineStage.RESEARCH: """You are conducting research for a {content_type} titled "{content_title}" for {client_name}.
The target audience is {target_audience}.
The main content goals are:
{content_goals}

Identify key topics, relevant facts, statistics and credible sources that the piece should draw on.
Client context to consider:
{domain_knowledge}

""" + RESEARCH_RESPONSE_FORMAT,

    PipelineStage.OUTLINE: """Create a detailed outline for a {content_type} titled "{content_title}" for {client_name}.
The target audience is {target_audience} and the piece should follow a {brand_voice} brand voice.

Research to build on:
{research}

The outline should include an introduction, the main sections with subpoints, and a conclusion with a call to action.""",

    PipelineStage.DRAFT: """Write a complete {content_type} titled "{content_title}" for {client_name}.
Follow this outline:
{outline}

Supporting research:
{research}

Write in a {brand_voice} tone for {target_audience}. Naturally incorporate these keywords: {keywords}""",

    PipelineStage.EDIT: """Edit the following {content_type} to improve clarity, flow, accuracy and engagement.
Title: {content_title}
Client: {client_name}
Audience: {target_audience}
Brand voice: {brand_voice}

Draft to edit:
{draft}

Return only the edited text.""",

    PipelineStage.FINALIZE: """Finalize the following {content_type} for delivery to {client_name}.
Title: {content_title}

Content:
{edited_draft}

Apply final formatting for publication and make sure these keywords appear naturally: {keywords}
Return only the final text.""",
}


TYPE_TEMPLATES: Dict[ContentType, Dict[PipelineStage, str]] = {
    ContentType.BLOG_POST: {
        PipelineStage.OUTLINE: """Create a detailed outline for a blog post titled "{content_title}" for {client_name}.
The target audience is {target_audience} and the post should align with their {brand_voice} brand voice.
The content should incorporate these keywords: {keywords}

Research to build on:
{research}

The outline should include:
1. Introduction with a compelling hook
2. Main sections with subpoints (at least 3-5 main sections)
3. Conclusion with call to action

Format the outline with clear hierarchical structure using headings and subheadings.""",

        PipelineStage.DRAFT: """Write a comprehensive blog post draft titled "{content_title}" for {client_name}.
Follow this outline:
{outline}

The content should be written in a {brand_voice} tone for {target_audience}.
Naturally incorporate these keywords: {keywords}

Include relevant examples, data points, and actionable advice. The content should be engaging, informative, and aligned with these goals:
{content_goals}""",

        PipelineStage.FINALIZE: """Finalize the following blog post for publication.
Title: {content_title}
Client: {client_name}

Content:
{edited_draft}

Format the post for web publication with:
- Proper heading structure (H1, H2, H3)
- Short, scannable paragraphs
- SEO optimization for the target keywords: {keywords}
- Meta description suggestion (under 160 characters)""",
    },

    ContentType.SOCIAL_POST: {
        PipelineStage.DRAFT: """Create a compelling social media post for {client_name} about "{content_title}".
The post should be written in a {brand_voice} tone for {target_audience} and suitable for {platform}.
Maximum length: {max_length} characters.
Base it on this outline:
{outline}
Include appropriate hashtags and a call to action.""",

        PipelineStage.EDIT: """Refine the following social media post to maximize engagement while maintaining brand voice.
Platform: {platform}
Brand: {client_name}
Audience: {target_audience}
Tone: {brand_voice}

Original post:
{draft}

Keep it under {max_length} characters and return only the post.""",
    },

    ContentType.TECHNICAL_ARTICLE: {
        PipelineStage.RESEARCH: """Conduct technical research for an article titled "{content_title}" for {client_name}.
The target audience consists of {target_audience}.
The article should cover these technical concepts: {technical_concepts}

Identify key technical information, specifications, code examples, and authoritative sources.
Client context to consider:
{domain_knowledge}

""" + RESEARCH_RESPONSE_FORMAT,

        PipelineStage.DRAFT: """Write a comprehensive technical article titled "{content_title}" for {client_name}.
Follow this technical outline:
{outline}

Supporting research:
{research}

The article should maintain technical accuracy, explain concepts clearly for {target_audience},
include code examples where useful and use terminology consistent with {technical_domain}.""",

        PipelineStage.EDIT: """Review and improve the following technical article draft for technical accuracy, clarity, and educational value.
Title: {content_title}
Audience: {target_audience}
Technical domain: {technical_domain}

Draft to edit:
{draft}

Return only the edited article.""",
    },
}
