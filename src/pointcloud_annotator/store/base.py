"""Key-value table interface for annotation rows."""

from abc import ABC, abstractmethod
from typing import Any


class AnnotationStore(ABC):
    """
    Table of annotation rows keyed by ``annotationId``.

    Rows are plain dicts in the wire shape. Implementations raise
    InfrastructureError when the backend cannot be reached.
    """

    name = "abstract"

    @abstractmethod
    def put(self, item: dict[str, Any]) -> None:
        """Insert one row."""

    @abstractmethod
    def scan(self) -> list[dict[str, Any]]:
        """Return every row, in no particular order."""

    @abstractmethod
    def delete(self, annotation_id: str) -> None:
        """Delete one row by key. Deleting an absent key is not an error."""
