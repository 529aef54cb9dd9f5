from .pipeline import ContentPipeline
from .stage_runner import StageRunner

__all__ = ["ContentPipeline", "StageRunner"]
