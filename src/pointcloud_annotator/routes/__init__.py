"""Route modules for the point-cloud annotator."""

from .annotations import router as annotations_router

__all__ = ["annotations_router"]
