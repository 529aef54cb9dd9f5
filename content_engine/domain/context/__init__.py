# This module handles per-project generation context

# +-----------------------------+
# |   Domain knowledge          |   (Client facts, injected out-of-band)
# |-----------------------------|
# | Industry, brand voice       |
# | Audience, goals, style      |
# +-----------------------------+
#            (never evicted, not counted against the budget)

# +-----------------------------+
# |   Context entries           |   (Bounded by a token budget)
# |-----------------------------|
# | Stage prompts      (p=5)    |
# | Research / outline (p=6,7)  |
# | Draft / edit       (p=8,9)  |
# | Final text         (p=10)   |
# +-----------------------------+
#            (lowest priority evicted first, oldest first on ties)

#         |
#         v
#   [Generation backend]

from .context_window import ContextEntry, ContextWindow, ContextMetrics, EntryRole, estimate_tokens
from .context_manager import ContextWindowManager

__all__ = [
    "ContextEntry",
    "ContextWindow",
    "ContextMetrics",
    "ContextWindowManager",
    "EntryRole",
    "estimate_tokens",
]
