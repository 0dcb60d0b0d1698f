"""Service modules for the point-cloud annotator."""

from .annotation_service import AnnotationService

__all__ = ["AnnotationService"]
