from typing import Dict, Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timedelta
from enum import Enum
import uuid


class PipelineStage(str, Enum):
    """Content generation stages, in execution order"""
    RESEARCH = "research"
    OUTLINE = "outline"
    DRAFT = "draft"
    EDIT = "edit"
    FINALIZE = "finalize"

    @property
    def replaces_body(self) -> bool:
        """Whether the stage output replaces the content body (version-creating)"""
        if self in (PipelineStage.RESEARCH, PipelineStage.OUTLINE):
            return False
        if self in (PipelineStage.DRAFT, PipelineStage.EDIT, PipelineStage.FINALIZE):
            return True
        raise ValueError(f"unknown pipeline stage: {self}")


PIPELINE_STAGES: List[PipelineStage] = [
    PipelineStage.RESEARCH,
    PipelineStage.OUTLINE,
    PipelineStage.DRAFT,
    PipelineStage.EDIT,
    PipelineStage.FINALIZE,
]


class StageStatus(str, Enum):
    """Outcome of a single stage execution"""
    COMPLETED = "completed"
    FAILED = "failed"
    TIMEOUT = "timeout"


class EventStatus(str, Enum):
    """Status carried by a progress event"""
    STARTED = "started"
    COMPLETED = "completed"
    ERROR = "error"
    TIMEOUT = "timeout"
    FAILED = "failed"


class StageResult(BaseModel):
    """Transient result of a stage, folded into the content item"""
    stage: PipelineStage
    content: str = ""
    status: StageStatus = Field(default=StageStatus.COMPLETED)
    elapsed_seconds: float = 0.0
    metadata: Dict[str, Any] = Field(default_factory=dict)
    attempts: int = 1


class ProgressEvent(BaseModel):
    """Immutable record of a stage attempt or pipeline outcome"""
    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    content_id: str
    project_id: str
    stage: Optional[PipelineStage] = Field(None, description="None for whole-pipeline events")
    status: EventStatus
    time_elapsed: timedelta = Field(default_factory=timedelta)
    details: str = ""
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @property
    def event_type(self) -> str:
        scope = self.stage.value if self.stage else "pipeline"
        return f"pipeline.{scope}.{self.status.value}"


class PipelineConfig(BaseModel):
    """Retry, timeout and auxiliary-check policy for the pipeline"""
    max_retries: int = Field(default=3, ge=1, description="Attempts per stage")
    stage_timeout_seconds: float = Field(default=60.0, gt=0)
    retry_backoff_seconds: float = Field(default=1.0, ge=0, description="Backoff unit, multiplied by attempt number")
    context_window_tokens: int = Field(default=8000, gt=0)
    enable_fact_checking: bool = True
    enable_plagiarism_check: bool = True
    seo_optimization: bool = True
    event_queue_size: int = Field(default=256, gt=0)
    event_save_timeout_seconds: float = Field(default=5.0, gt=0)
