"""Annotation UI controller: local annotation list, pending form, markers."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from ..core.validation import MAX_TEXT_BYTES, WARN_TEXT_BYTES, normalize_text, text_byte_length
from ..errors import RequestError, ValidationError
from ..models.annotation import Coordinates
from .adapter import ViewerAdapter

log = logging.getLogger(__name__)

TITLE_CHARS = 50


class ControllerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"


@dataclass
class PendingAnnotation:
    """Coordinates picked in the viewer plus the text typed so far."""

    position: Coordinates
    text: str = ""


@dataclass(frozen=True)
class TextGauge:
    """Byte counter shown next to the text input."""

    byte_count: int
    level: str  # "ok", "warning" or "error"


@dataclass(frozen=True)
class AnnotationItem:
    """One row of the rendered annotation list."""

    annotation_id: str
    title: str
    x: str
    y: str
    z: str
    selected: bool


def marker_title(text: str) -> str:
    if len(text) > TITLE_CHARS:
        return text[:TITLE_CHARS] + "..."
    return text


def measure_text(text: str) -> TextGauge:
    count = text_byte_length(text)
    if count > MAX_TEXT_BYTES:
        level = "error"
    elif count > WARN_TEXT_BYTES:
        level = "warning"
    else:
        level = "ok"
    return TextGauge(count, level)


class AnnotationController:
    """
    Keeps the local annotation list in step with the service.

    Creation cycle: IDLE -> PENDING (point picked, form open) -> SAVING
    (request in flight) -> IDLE on success, back to PENDING on failure.
    Local state only changes after the server has confirmed a mutation.
    Request failures are reported through the notifier, never raised.

    Args:
        client: Object with ``list()``, ``create(draft)`` and ``delete(id)``
        viewer: Viewer providing picking and marker display
        notifier: Object with ``notify(title, body, kind=...)``
        confirm: Asked before any delete; returns True to proceed
        max_workers: Concurrent deletes issued by clear_all
    """

    def __init__(
        self,
        client: Any,
        viewer: ViewerAdapter,
        notifier: Any,
        confirm: Callable[[str], bool],
        max_workers: int = 8,
    ) -> None:
        self.client = client
        self.viewer = viewer
        self.notifier = notifier
        self.confirm = confirm
        self.max_workers = max_workers

        self.annotations: list[dict[str, Any]] = []
        self.selected_id: Optional[str] = None
        self.pending: Optional[PendingAnnotation] = None
        self.state = ControllerState.IDLE

        # annotation id -> marker handle returned by the viewer
        self._markers: dict[str, Any] = {}
        self._in_flight: set[str] = set()
        self._in_flight_lock = threading.Lock()
        self._listeners: list[Callable[[], None]] = []

    # ── observers ────────────────────────────────────────────────────────

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback run after every visible state change."""
        self._listeners.append(callback)

    def _changed(self) -> None:
        for callback in self._listeners:
            callback()

    def _toast(self, kind: str, title: str, message: str) -> None:
        self.notifier.notify(title, message, kind=kind)

    # ── in-flight guard ──────────────────────────────────────────────────

    def is_busy(self, action: str) -> bool:
        """True while a request for ``action`` ("save", "clear" or "delete:<id>") runs."""
        with self._in_flight_lock:
            return action in self._in_flight

    def _acquire(self, action: str) -> bool:
        with self._in_flight_lock:
            if action in self._in_flight:
                return False
            self._in_flight.add(action)
        self._changed()
        return True

    def _release(self, action: str) -> None:
        with self._in_flight_lock:
            self._in_flight.discard(action)
        self._changed()

    # ── loading and rendering ────────────────────────────────────────────

    def load(self) -> bool:
        """Replace the local list with the server's and rebuild markers."""
        try:
            rows = self.client.list()
        except RequestError as e:
            log.error("Failed to load annotations: %s", e)
            self._toast(
                "error",
                "Error",
                "Failed to load annotations. Please check your API endpoint configuration.",
            )
            return False

        self.annotations = [dict(row) for row in rows]
        known = {a["annotationId"] for a in self.annotations}
        if self.selected_id not in known:
            self.selected_id = None
        self.render_markers()
        self._changed()
        return True

    def render_markers(self) -> None:
        """Drop every marker handle and place one per annotation."""
        for handle in self._markers.values():
            self.viewer.remove_marker(handle)
        self._markers.clear()
        for annotation in self.annotations:
            self._add_marker(annotation)

    def _add_marker(self, annotation: dict[str, Any]) -> None:
        position = Coordinates(
            float(annotation["x"]), float(annotation["y"]), float(annotation["z"])
        )
        self._markers[annotation["annotationId"]] = self.viewer.place_marker(
            annotation["annotationId"], position, marker_title(annotation["text"])
        )

    def _remove_marker(self, annotation_id: str) -> None:
        handle = self._markers.pop(annotation_id, None)
        if handle is not None:
            self.viewer.remove_marker(handle)

    @property
    def marker_ids(self) -> set[str]:
        return set(self._markers)

    def items(self) -> list[AnnotationItem]:
        """Render model for the annotation list."""
        return [
            AnnotationItem(
                annotation_id=a["annotationId"],
                title=marker_title(a["text"]),
                x=f"{float(a['x']):.2f}",
                y=f"{float(a['y']):.2f}",
                z=f"{float(a['z']):.2f}",
                selected=a["annotationId"] == self.selected_id,
            )
            for a in self.annotations
        ]

    def select(self, annotation_id: Optional[str]) -> None:
        if annotation_id is not None and not self._find(annotation_id):
            return
        self.selected_id = annotation_id
        self._changed()

    def _find(self, annotation_id: str) -> Optional[dict[str, Any]]:
        for annotation in self.annotations:
            if annotation["annotationId"] == annotation_id:
                return annotation
        return None

    # ── creation cycle ───────────────────────────────────────────────────

    def handle_click(
        self, ray_origin: Sequence[float], ray_direction: Sequence[float]
    ) -> Optional[Coordinates]:
        """Translate a viewer click and open the form if it hit the cloud."""
        position = self.viewer.translate_click_to_3d(ray_origin, ray_direction)
        if position is None:
            return None
        if not self.begin_annotation(position):
            return None
        return position

    def begin_annotation(self, position: Coordinates) -> bool:
        """Open the form for a picked point. Ignored while a save is running."""
        if self.state is ControllerState.SAVING:
            return False
        self.pending = PendingAnnotation(Coordinates(*position))
        self.state = ControllerState.PENDING
        self._changed()
        return True

    def update_text(self, text: str) -> TextGauge:
        if self.pending is not None and self.state is ControllerState.PENDING:
            self.pending.text = text
        return measure_text(text)

    def save(self) -> Optional[dict[str, Any]]:
        """Submit the pending annotation; returns the stored record on success."""
        pending = self.pending
        if pending is None or self.state is not ControllerState.PENDING:
            return None

        try:
            normalize_text(pending.text)
        except ValidationError as e:
            self._toast("error", "Validation Error", e.message)
            return None

        if not self._acquire("save"):
            return None
        self.state = ControllerState.SAVING
        self._changed()
        try:
            annotation = self.client.create(
                {
                    "x": pending.position.x,
                    "y": pending.position.y,
                    "z": pending.position.z,
                    "text": pending.text,
                }
            )
        except (RequestError, ValidationError) as e:
            log.error("Failed to save annotation: %s", e)
            self.state = ControllerState.PENDING
            self._toast("error", "Save Failed", "Failed to save annotation. Please try again.")
            return None
        finally:
            self._release("save")

        self.annotations.append(dict(annotation))
        self._add_marker(annotation)
        self.pending = None
        self.state = ControllerState.IDLE
        self._changed()
        self._toast(
            "success", "Annotation Created", "Your annotation has been saved successfully"
        )
        return annotation

    def cancel(self) -> bool:
        """Discard the pending annotation. Has no effect once a save was sent."""
        if self.state is not ControllerState.PENDING:
            return False
        self.pending = None
        self.state = ControllerState.IDLE
        self._changed()
        return True

    def handle_key(self, key: str) -> bool:
        if key == "Escape":
            return self.cancel()
        return False

    # ── deletion ─────────────────────────────────────────────────────────

    def delete(self, annotation_id: str) -> bool:
        """Confirm, delete on the server, then drop the local copy."""
        if self._find(annotation_id) is None:
            return False

        action = f"delete:{annotation_id}"
        if not self._acquire(action):
            return False
        try:
            if not self.confirm("Are you sure you want to delete this annotation?"):
                return False
            try:
                self.client.delete(annotation_id)
            except (RequestError, ValidationError) as e:
                log.error("Failed to delete annotation %s: %s", annotation_id, e)
                self._toast(
                    "error", "Delete Failed", "Failed to delete annotation. Please try again."
                )
                return False
        finally:
            self._release(action)

        self._remove_marker(annotation_id)
        self.annotations = [a for a in self.annotations if a["annotationId"] != annotation_id]
        if self.selected_id == annotation_id:
            self.selected_id = None
        self._changed()
        self._toast(
            "success", "Annotation Deleted", "The annotation has been removed successfully"
        )
        return True

    def clear_all(self) -> bool:
        """
        Delete every known annotation concurrently.

        Local state is cleared only when every delete succeeded; after a
        partial failure the list is left as it was.
        """
        if not self.annotations:
            return True
        if not self._acquire("clear"):
            return False
        try:
            if not self.confirm("Are you sure you want to delete all annotations?"):
                return False

            ids = [a["annotationId"] for a in self.annotations]
            workers = max(1, min(self.max_workers, len(ids)))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [pool.submit(self.client.delete, annotation_id) for annotation_id in ids]
            failures = [f.exception() for f in futures if f.exception() is not None]
        finally:
            self._release("clear")

        for error in failures:
            if not isinstance(error, (RequestError, ValidationError)):
                raise error

        if failures:
            log.error("Clear all: %d of %d deletes failed", len(failures), len(ids))
            self._toast("error", "Clear Failed", "Failed to clear annotations. Please try again.")
            return False

        cleared = set(ids)
        for annotation_id in ids:
            self._remove_marker(annotation_id)
        self.annotations = [a for a in self.annotations if a["annotationId"] not in cleared]
        if self.selected_id in cleared:
            self.selected_id = None
        self._changed()
        self._toast(
            "success", "All Annotations Cleared", "All annotations have been removed successfully"
        )
        return True
