"""Content generation pipeline with per-project context windows."""
