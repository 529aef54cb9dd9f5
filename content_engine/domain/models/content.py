from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from enum import Enum
import uuid

from content_engine.domain.errors import ContentValidationError, InvalidStatusTransitionError


class ContentType(str, Enum):
    """Kinds of content the pipeline can produce"""
    BLOG_POST = "BlogPost"
    SOCIAL_POST = "SocialPost"
    EMAIL_NEWSLETTER = "EmailNewsletter"
    WEBSITE_COPY = "WebsiteCopy"
    TECHNICAL_ARTICLE = "TechnicalArticle"
    PRODUCT_DESCRIPTION = "ProductDescription"
    PRESS_RELEASE = "PressRelease"


class ContentStatus(str, Enum):
    """Content lifecycle status"""
    PLANNING = "Planning"
    RESEARCHING = "Researching"
    DRAFTING = "Drafting"
    EDITING = "Editing"
    REVIEW = "Review"
    APPROVED = "Approved"
    PUBLISHED = "Published"
    ARCHIVED = "Archived"


# Forward order of the lifecycle; a status may only move to itself or later
STATUS_ORDER: List[ContentStatus] = list(ContentStatus)

MIN_WORD_COUNTS: Dict[ContentType, int] = {
    ContentType.BLOG_POST: 500,
    ContentType.SOCIAL_POST: 50,
    ContentType.EMAIL_NEWSLETTER: 300,
    ContentType.WEBSITE_COPY: 200,
    ContentType.TECHNICAL_ARTICLE: 800,
    ContentType.PRODUCT_DESCRIPTION: 150,
    ContentType.PRESS_RELEASE: 400,
}


def count_words(text: str) -> int:
    """Whitespace-delimited word count"""
    return len(text.split())


class ContentStatistics(BaseModel):
    """Quality scores attached after the quality check"""
    readability_score: float = 0.0
    seo_score: float = 0.0
    engagement_score: float = 0.0
    plagiarism_score: float = 0.0


class ContentVersion(BaseModel):
    """Snapshot of a content body before it was replaced"""
    version_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    content_id: str
    version_number: int
    body: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    created_by: str = Field(description="Author tag, usually the stage that replaced the body")


class ContentItem(BaseModel):
    """Versioned text artifact produced by the pipeline"""
    content_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    project_id: str
    title: str
    content_type: ContentType
    status: ContentStatus = Field(default=ContentStatus.PLANNING)
    body: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    version: int = 1
    word_count: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    versions: List[ContentVersion] = Field(default_factory=list)
    statistics: ContentStatistics = Field(default_factory=ContentStatistics)

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("title is required")
        return value

    @classmethod
    def create(cls, project_id: str, title: str, content_type: ContentType) -> "ContentItem":
        """Create a new content item in Planning status"""
        if not title or not title.strip():
            raise ContentValidationError("title is required")
        return cls(project_id=project_id, title=title, content_type=ContentType(content_type))

    def update_body(self, body: str, author: str):
        """Replace the body, snapshotting the previous one as a version"""
        self.versions.append(ContentVersion(
            content_id=self.content_id,
            version_number=self.version,
            body=self.body,
            metadata=dict(self.metadata),
            created_by=author
        ))

        self.body = body
        self.version += 1
        self.word_count = count_words(body)
        self.touch()

    def update_status(self, status: ContentStatus):
        """Move the status forward through the lifecycle"""
        status = ContentStatus(status)
        if STATUS_ORDER.index(status) < STATUS_ORDER.index(self.status):
            raise InvalidStatusTransitionError(
                f"cannot move content {self.content_id} from {self.status.value} to {status.value}"
            )
        self.status = status
        self.touch()

    def update_metadata(self, key: str, value: Any):
        """Add or replace a metadata key"""
        self.metadata[key] = value
        self.touch()

    def update_statistics(self, statistics: ContentStatistics):
        """Replace the quality statistics"""
        self.statistics = statistics
        self.touch()

    def touch(self):
        self.updated_at = datetime.utcnow()

    @property
    def minimum_word_count(self) -> int:
        return MIN_WORD_COUNTS.get(self.content_type, 100)

    @property
    def meets_word_count_minimum(self) -> bool:
        return self.word_count >= self.minimum_word_count
