from .score_router import router as score_router

__all__ = [
    "score_router",
]
