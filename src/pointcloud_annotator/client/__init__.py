"""HTTP client for the annotation API."""

from .api import AnnotationClient

__all__ = ["AnnotationClient"]
