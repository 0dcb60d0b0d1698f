"""Core helpers for the point-cloud annotator.

``cloud_loader`` pulls in Open3D and is imported directly by the viewer.
"""

from .picking import ray_nearest_point
from .validation import (
    MAX_TEXT_BYTES,
    WARN_TEXT_BYTES,
    normalize_text,
    parse_coordinates,
    text_byte_length,
    validate_annotation_id,
)

__all__ = [
    "ray_nearest_point",
    "MAX_TEXT_BYTES",
    "WARN_TEXT_BYTES",
    "normalize_text",
    "parse_coordinates",
    "text_byte_length",
    "validate_annotation_id",
]
