"""Data models for the point-cloud annotator."""

from .annotation import Annotation, Coordinates

__all__ = ["Annotation", "Coordinates"]
