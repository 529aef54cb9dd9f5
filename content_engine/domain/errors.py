"""
Exception hierarchy for the content engine.

Stage-level errors are retried by the stage runner unless they derive from
StageInputError; everything that escapes the pipeline is a PipelineError,
ProjectNotFoundError or ContentValidationError.
"""

from typing import Any, Optional


class ContentEngineError(Exception):
    """Base error for the content engine"""


class ContentValidationError(ContentEngineError, ValueError):
    """Content item failed validation"""


class InvalidStatusTransitionError(ContentEngineError):
    """Content status moved backwards through the pipeline"""


class ContextWindowNotFoundError(ContentEngineError, KeyError):
    """No context window registered for the project"""

    def __init__(self, project_id: str):
        super().__init__(project_id)
        self.project_id = project_id

    def __str__(self) -> str:
        return f"context window not found for project {self.project_id}"


class ProjectNotFoundError(ContentEngineError, KeyError):
    """Owning project does not exist"""

    def __init__(self, project_id: str):
        super().__init__(project_id)
        self.project_id = project_id

    def __str__(self) -> str:
        return f"project not found: {self.project_id}"


class ContentNotFoundError(ContentEngineError, KeyError):
    """Content item does not exist"""

    def __init__(self, content_id: str):
        super().__init__(content_id)
        self.content_id = content_id

    def __str__(self) -> str:
        return f"content not found: {self.content_id}"


class TemplateNotFoundError(ContentEngineError):
    """No prompt template registered for a content type and stage"""


class GenerationError(ContentEngineError):
    """Generation backend failed to produce text"""


class StageInputError(ContentEngineError):
    """Stage cannot run with the current content state; never retried"""


class TemplateRenderError(StageInputError):
    """Prompt template could not be rendered with the given data"""


class StageExecutionError(ContentEngineError):
    """Stage kept failing until its retries were exhausted"""

    def __init__(self, message: str, stage: Any = None, attempts: int = 0, result: Any = None):
        super().__init__(message)
        self.stage = stage
        self.attempts = attempts
        self.result = result


class StageTimeoutError(StageExecutionError):
    """Stage kept timing out until its retries were exhausted"""


class PipelineError(ContentEngineError):
    """Terminal pipeline failure; carries the persisted partial content"""

    def __init__(self, message: str, content: Any = None, stage: Optional[Any] = None):
        super().__init__(message)
        self.content = content
        self.stage = stage

    @property
    def timed_out(self) -> bool:
        """Whether the failing stage ran out of time on its last attempt"""
        return isinstance(self.__cause__, StageTimeoutError)
