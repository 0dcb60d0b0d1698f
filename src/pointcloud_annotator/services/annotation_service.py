"""Create, list and delete annotations against a store."""

import logging
import uuid
from typing import Any, Mapping

from ..core.validation import normalize_text, parse_coordinates, validate_annotation_id
from ..errors import InfrastructureError
from ..models.annotation import Annotation, utc_timestamp
from ..store.base import AnnotationStore

log = logging.getLogger(__name__)


class AnnotationService:
    """
    Stateless annotation operations.

    Validation happens here regardless of what the caller already checked;
    a rejected request never reaches the store.
    """

    def __init__(self, store: AnnotationStore) -> None:
        self.store = store

    def create(self, payload: Mapping[str, Any]) -> Annotation:
        """Validate a draft and insert it with a fresh id and timestamp.

        Raises:
            ValidationError: missing/invalid coordinates or text, text over 256 bytes
            InfrastructureError: the store write failed
        """
        coords = parse_coordinates(payload)
        text = normalize_text(payload.get("text"))

        annotation = Annotation(
            annotation_id=str(uuid.uuid4()),
            x=coords.x,
            y=coords.y,
            z=coords.z,
            text=text,
            created_at=utc_timestamp(),
        )
        self.store.put(annotation.to_json())
        log.info("Created annotation %s at (%.3f, %.3f, %.3f)", annotation.annotation_id, *coords)
        return annotation

    def list(self) -> list[Annotation]:
        """Every stored annotation, in store order."""
        rows = self.store.scan()
        try:
            return [Annotation.from_item(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise InfrastructureError("scan", f"malformed annotation row: {e}") from e

    def delete(self, annotation_id: Any) -> None:
        """Delete by id. Succeeds whether or not the row existed."""
        annotation_id = validate_annotation_id(annotation_id)
        self.store.delete(annotation_id)
        log.info("Deleted annotation %s", annotation_id)
