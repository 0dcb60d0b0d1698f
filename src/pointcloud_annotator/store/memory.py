"""In-process annotation store."""

import threading
from typing import Any

from .base import AnnotationStore


class MemoryAnnotationStore(AnnotationStore):
    """Dict-backed store; contents are lost when the process exits."""

    name = "memory"

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def put(self, item: dict[str, Any]) -> None:
        with self._lock:
            self._rows[item["annotationId"]] = dict(item)

    def scan(self) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(row) for row in self._rows.values()]

    def delete(self, annotation_id: str) -> None:
        with self._lock:
            self._rows.pop(annotation_id, None)

    def __len__(self) -> int:
        return len(self._rows)
