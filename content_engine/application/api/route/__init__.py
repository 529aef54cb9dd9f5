from .content import router

__all__ = ["router"]
