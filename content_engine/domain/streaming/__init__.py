from .progress_emitter import ProgressEventEmitter

__all__ = ["ProgressEventEmitter"]
