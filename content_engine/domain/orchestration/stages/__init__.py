from typing import List

from content_engine.domain.generation.generation_service import GenerationService
from content_engine.domain.repositories.base import ProjectRepository
from .base_stage import BaseStageExecutor
from .research import ResearchStage
from .outline import OutlineStage
from .draft import DraftStage
from .edit import EditStage
from .finalize import FinalizeStage


def default_stages(generation: GenerationService, projects: ProjectRepository) -> List[BaseStageExecutor]:
    """Stage executors in pipeline order"""
    return [
        ResearchStage(generation, projects),
        OutlineStage(generation, projects),
        DraftStage(generation, projects),
        EditStage(generation, projects),
        FinalizeStage(generation, projects),
    ]


__all__ = [
    "BaseStageExecutor",
    "ResearchStage",
    "OutlineStage",
    "DraftStage",
    "EditStage",
    "FinalizeStage",
    "default_stages",
]
