"""
Annotation field validation.

Shared by the service (authoritative) and the HTTP client (fast-fail).
Each check raises ValidationError with the message returned to callers.
"""

import math
from typing import Any, Mapping

from ..errors import ValidationError
from ..models.annotation import Coordinates

MAX_TEXT_BYTES = 256
WARN_TEXT_BYTES = 200

MISSING_COORDINATES = "Missing required fields: x, y, z coordinates are required"
INVALID_COORDINATES = "Invalid coordinates: x, y, z must be finite numbers"
INVALID_TEXT = "Text field is required and must be a string"
TEXT_TOO_LONG = f"Annotation text exceeds {MAX_TEXT_BYTES} bytes limit"
MISSING_ID = "Annotation ID is required"


def text_byte_length(text: str) -> int:
    """Length of text in bytes once encoded as UTF-8."""
    return len(text.encode("utf-8"))


def _to_finite_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(INVALID_COORDINATES)
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(INVALID_COORDINATES)
    if not math.isfinite(number):
        raise ValidationError(INVALID_COORDINATES)
    return number


def parse_coordinates(payload: Mapping[str, Any]) -> Coordinates:
    """Extract x, y, z as finite floats."""
    if any(payload.get(axis) is None for axis in ("x", "y", "z")):
        raise ValidationError(MISSING_COORDINATES)
    return Coordinates(
        _to_finite_float(payload["x"]),
        _to_finite_float(payload["y"]),
        _to_finite_float(payload["z"]),
    )


def normalize_text(text: Any) -> str:
    """
    Validate annotation text and return it trimmed.

    The byte limit applies to the submitted value, before trimming.
    """
    if not isinstance(text, str) or not text.strip():
        raise ValidationError(INVALID_TEXT)
    if text_byte_length(text) > MAX_TEXT_BYTES:
        raise ValidationError(TEXT_TOO_LONG)
    return text.strip()


def validate_annotation_id(annotation_id: Any) -> str:
    if not isinstance(annotation_id, str) or not annotation_id.strip():
        raise ValidationError(MISSING_ID)
    return annotation_id
