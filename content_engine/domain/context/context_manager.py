from typing import Dict, List, Any, Optional
import asyncio
import structlog
from datetime import datetime

from content_engine.domain.errors import ContextWindowNotFoundError
from content_engine.domain.models.content import ContentType
from content_engine.infrastructure.observability.logging import PipelineLogger
from .context_window import ContextEntry, ContextWindow, ContextMetrics, estimate_tokens

logger = structlog.get_logger(__name__)
pipeline_logger = PipelineLogger(__name__)


class ContextWindowManager:
    """Registry of per-project context windows with priority-based eviction.

    Every window has its own lock; append, eviction, knowledge injection,
    import and reads all hold it, so readers never observe a window
    mid-eviction. The registry lock only guards creation and removal of
    windows.
    """

    def __init__(self, default_max_tokens: int = 8000):
        if default_max_tokens <= 0:
            raise ValueError("default_max_tokens must be positive")
        self.default_max_tokens = default_max_tokens
        self._windows: Dict[str, ContextWindow] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._registry_lock = asyncio.Lock()

    async def ensure_window(
        self,
        project_id: str,
        content_type: Optional[ContentType] = None,
        client_id: Optional[str] = None
    ) -> bool:
        """Create a window for the project if absent; returns True if created"""

        async with self._registry_lock:
            if project_id in self._windows:
                return False

            self._windows[project_id] = ContextWindow(
                project_id=project_id,
                client_id=client_id,
                content_type=content_type,
                max_tokens=self.default_max_tokens
            )
            self._locks[project_id] = asyncio.Lock()

        logger.info("Created context window", project_id=project_id, max_tokens=self.default_max_tokens)
        return True

    async def append(self, project_id: str, entry: ContextEntry) -> List[ContextEntry]:
        """Append an entry, evicting low-priority entries first if it would not fit.

        Returns the evicted entries. The append itself never fails for size:
        an entry larger than the whole window is still stored after
        everything else has been evicted.
        """

        lock = self._lock_for(project_id)

        async with lock:
            window = self._window(project_id)
            entry_tokens = estimate_tokens(entry.content)
            evicted: List[ContextEntry] = []

            if window.current_token_count + entry_tokens > window.max_tokens:
                required = window.current_token_count + entry_tokens - window.max_tokens
                evicted = self._evict(window, required)

            window.entries.append(entry.model_copy(deep=True))
            window.current_token_count += entry_tokens
            window.last_accessed = datetime.utcnow()

        if evicted:
            pipeline_logger.log_context_update(
                project_id,
                "evict",
                {
                    "evicted_entries": len(evicted),
                    "freed_tokens": sum(e.token_count for e in evicted),
                    "token_usage": window.current_token_count
                }
            )

        return evicted

    def _evict(self, window: ContextWindow, tokens_to_free: int) -> List[ContextEntry]:
        """Remove the lowest-priority entries until tokens_to_free is reached.

        Victims are the prefix of a stable ascending sort by priority, so
        equal priorities are evicted oldest first. Survivors keep their
        append order. Caller holds the window lock.
        """

        by_priority = sorted(range(len(window.entries)), key=lambda i: window.entries[i].priority)

        freed = 0
        victims = set()
        for index in by_priority:
            if freed >= tokens_to_free:
                break
            victims.add(index)
            freed += window.entries[index].token_count

        evicted = [e for i, e in enumerate(window.entries) if i in victims]
        window.entries = [e for i, e in enumerate(window.entries) if i not in victims]
        window.current_token_count -= freed

        return evicted

    async def read(self, project_id: str) -> List[ContextEntry]:
        """Ordered snapshot of the window's entries"""

        lock = self._lock_for(project_id)

        async with lock:
            window = self._window(project_id)
            window.last_accessed = datetime.utcnow()
            return [entry.model_copy(deep=True) for entry in window.entries]

    async def snapshot(self, project_id: str) -> ContextWindow:
        """Consistent copy of the whole window"""

        lock = self._lock_for(project_id)

        async with lock:
            window = self._window(project_id)
            return window.model_copy(deep=True)

    async def inject_domain_knowledge(self, project_id: str, knowledge: Dict[str, Any]):
        """Merge client-specific facts into the window (last write wins per key)"""

        lock = self._lock_for(project_id)

        async with lock:
            window = self._window(project_id)
            window.domain_knowledge.update(knowledge)
            window.last_accessed = datetime.utcnow()

        pipeline_logger.log_context_update(project_id, "inject_knowledge", {"keys": sorted(knowledge.keys())})

    async def metrics(self, project_id: str) -> ContextMetrics:
        """Usage metrics for the project's window"""

        lock = self._lock_for(project_id)

        async with lock:
            window = self._window(project_id)
            return ContextMetrics(
                entry_count=len(window.entries),
                token_usage=window.current_token_count,
                token_capacity=window.max_tokens,
                utilization_pct=window.current_token_count / window.max_tokens * 100,
                domain_knowledge_entries=len(window.domain_knowledge),
                last_accessed=window.last_accessed
            )

    async def export_window(self, project_id: str) -> str:
        """Serialize the whole window (entries, knowledge, counters) to JSON"""

        lock = self._lock_for(project_id)

        async with lock:
            window = self._window(project_id)
            return window.model_dump_json()

    async def import_window(self, serialized: str) -> str:
        """Restore a window from export_window output, replacing any existing one"""

        window = ContextWindow.model_validate_json(serialized)
        project_id = window.project_id

        # Recount from the entries; the stored counter may be stale
        actual_tokens = sum(entry.token_count for entry in window.entries)
        if actual_tokens != window.current_token_count:
            logger.warning(
                "Imported token count did not match entries",
                project_id=project_id,
                stored=window.current_token_count,
                actual=actual_tokens
            )
            window.current_token_count = actual_tokens

        # Registry lock first, then the window lock; same order as drop_window
        async with self._registry_lock:
            lock = self._locks.setdefault(project_id, asyncio.Lock())
            async with lock:
                self._windows[project_id] = window

        logger.info(
            "Imported context window",
            project_id=project_id,
            entries=len(window.entries),
            token_usage=window.current_token_count
        )
        return project_id

    async def drop_window(self, project_id: str) -> bool:
        """Remove a project's window"""

        async with self._registry_lock:
            lock = self._locks.get(project_id)
            if lock is None:
                return False

            async with lock:
                self._windows.pop(project_id, None)
                self._locks.pop(project_id, None)

        logger.info("Dropped context window", project_id=project_id)
        return True

    def project_ids(self) -> List[str]:
        """Projects that currently have a window"""
        return list(self._windows.keys())

    def _lock_for(self, project_id: str) -> asyncio.Lock:
        lock = self._locks.get(project_id)
        if lock is None:
            raise ContextWindowNotFoundError(project_id)
        return lock

    def _window(self, project_id: str) -> ContextWindow:
        # Re-resolved under the window lock; import_window may have replaced it
        window = self._windows.get(project_id)
        if window is None:
            raise ContextWindowNotFoundError(project_id)
        return window
