"""
Client data layer for the annotation API.

Thin wrappers over the three endpoints. Every failure, including a 2xx
response that carries ``success: false``, surfaces as RequestError.
"""

import logging
import threading
from typing import Any, Mapping, Optional
from urllib.parse import quote

import requests

from ..core.validation import normalize_text, validate_annotation_id
from ..errors import RequestError

log = logging.getLogger(__name__)


class AnnotationClient:
    """
    Calls the annotation service at ``base_url``.

    Without an explicit ``session`` each calling thread gets its own
    ``requests.Session``, since clear-all issues deletes from a thread pool.
    An injected session is shared as-is.
    """

    def __init__(self, base_url: str, session: Optional[Any] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._shared_session = session
        self._local = threading.local()

    @property
    def session(self) -> Any:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _send(self, method: str, path: str, action: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self.session.request(method, self._url(path), **kwargs)
        except requests.RequestException as e:
            log.error("Error %s: %s", action, e)
            raise RequestError(None, f"Failed to {action}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        status = response.status_code
        if not 200 <= status < 300:
            detail = data.get("error") if isinstance(data, dict) else None
            message = f"Failed to {action}: {detail or f'HTTP {status}'}"
            log.error("Error %s: %s", action, message)
            raise RequestError(status, message)

        if not isinstance(data, dict) or data.get("success") is not True:
            detail = data.get("error") if isinstance(data, dict) else "malformed response"
            raise RequestError(status, f"Failed to {action}: {detail}")

        return data

    def create(self, draft: Mapping[str, Any]) -> dict[str, Any]:
        """
        Create an annotation from ``{x, y, z, text}``.

        The text is checked locally before anything is sent; the server
        validates again independently.

        Returns:
            The server-assigned record, including ``annotationId`` and ``createdAt``
        """
        text = normalize_text(draft.get("text"))
        data = self._send(
            "POST",
            "/annotations",
            "create annotation",
            json={"x": draft.get("x"), "y": draft.get("y"), "z": draft.get("z"), "text": text},
        )
        annotation = data.get("annotation")
        if not isinstance(annotation, dict):
            raise RequestError(None, "Failed to create annotation: response has no annotation")
        return annotation

    def delete(self, annotation_id: str) -> None:
        """Delete an annotation by id."""
        annotation_id = validate_annotation_id(annotation_id)
        self._send(
            "DELETE",
            f"/annotations/{quote(annotation_id, safe='')}",
            "delete annotation",
        )

    def list(self) -> list[dict[str, Any]]:
        """All annotations currently stored."""
        data = self._send("GET", "/annotations", "fetch annotations")
        return list(data.get("annotations") or [])
