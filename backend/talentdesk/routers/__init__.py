from .candidates import router as candidates_router

__all__ = ["candidates_router"]
