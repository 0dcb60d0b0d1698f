"""JSON file annotation store."""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from ..errors import InfrastructureError
from .base import AnnotationStore

log = logging.getLogger(__name__)


class JsonFileAnnotationStore(AnnotationStore):
    """
    Keeps every row in a single JSON document.

    Writes go to a temporary file in the same directory which then replaces
    the document, so a crash never leaves a half-written file behind.
    """

    name = "json"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InfrastructureError("read", f"{self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("annotations"), list):
            raise InfrastructureError("read", f"{self.path}: missing 'annotations' array")

        rows: dict[str, dict[str, Any]] = {}
        for index, row in enumerate(data["annotations"]):
            if not isinstance(row, dict) or not isinstance(row.get("annotationId"), str):
                raise InfrastructureError(
                    "read", f"{self.path}: annotation {index} has no 'annotationId'"
                )
            rows[row["annotationId"]] = row
        return rows

    def _write(self, rows: dict[str, dict[str, Any]]) -> None:
        document = {"version": "1.0", "annotations": list(rows.values())}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=".annotations-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise InfrastructureError("write", f"{self.path}: {e}") from e

    def put(self, item: dict[str, Any]) -> None:
        with self._lock:
            rows = self._read()
            rows[item["annotationId"]] = dict(item)
            self._write(rows)
        log.debug("Stored annotation %s in %s", item["annotationId"], self.path)

    def scan(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._read().values())

    def delete(self, annotation_id: str) -> None:
        with self._lock:
            rows = self._read()
            if rows.pop(annotation_id, None) is None:
                return
            self._write(rows)
        log.debug("Removed annotation %s from %s", annotation_id, self.path)
