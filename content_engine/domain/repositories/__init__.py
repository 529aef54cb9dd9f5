from .base import ContentRepository, ProjectRepository, ProgressEventRepository
from .memory import InMemoryContentRepository, InMemoryProjectRepository, InMemoryProgressEventRepository

__all__ = [
    "ContentRepository",
    "ProjectRepository",
    "ProgressEventRepository",
    "InMemoryContentRepository",
    "InMemoryProjectRepository",
    "InMemoryProgressEventRepository",
]
