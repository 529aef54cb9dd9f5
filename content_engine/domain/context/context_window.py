from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum

from content_engine.domain.models.content import ContentType


class EntryRole(str, Enum):
    """Speaker of a context entry"""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


def estimate_tokens(text: str) -> int:
    """Approximate token cost of text: ceil(characters / 4)"""
    return (len(text) + 3) // 4


class ContextEntry(BaseModel):
    """Single turn of project memory"""
    role: EntryRole
    content: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    priority: int = Field(default=5, ge=0, le=10, description="Higher number is retained longer")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def token_count(self) -> int:
        return estimate_tokens(self.content)


class ContextWindow(BaseModel):
    """Bounded, priority-ordered memory for one project"""
    project_id: str
    client_id: Optional[str] = None
    content_type: Optional[ContentType] = None
    entries: List[ContextEntry] = Field(default_factory=list)
    max_tokens: int = Field(gt=0)
    current_token_count: int = 0
    last_accessed: datetime = Field(default_factory=datetime.utcnow)
    domain_knowledge: Dict[str, Any] = Field(default_factory=dict)


class ContextMetrics(BaseModel):
    """Usage metrics for a context window"""
    entry_count: int
    token_usage: int
    token_capacity: int
    utilization_pct: float
    domain_knowledge_entries: int
    last_accessed: datetime
