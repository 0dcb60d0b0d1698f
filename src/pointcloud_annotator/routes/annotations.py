"""Annotation CRUD routes."""

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..errors import InfrastructureError, ValidationError
from ..services.annotation_service import AnnotationService

log = logging.getLogger(__name__)

router = APIRouter()


def _service(request: Request) -> AnnotationService:
    return request.app.state.annotation_service


def _failure(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    return JSONResponse(body, status_code=status_code)


async def _read_payload(request: Request) -> dict[str, Any]:
    """Request body as a dict; anything that is not a JSON object reads as empty."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


@router.post("/annotations")
async def create_annotation(request: Request):
    """Create an annotation at a 3D coordinate."""
    payload = await _read_payload(request)
    log.info("createAnnotation payload keys: %s", sorted(payload))

    try:
        annotation = _service(request).create(payload)
    except ValidationError as e:
        log.info("Rejected annotation: %s", e.message)
        return _failure(400, e.message)
    except InfrastructureError as e:
        log.exception("Error creating annotation")
        return _failure(500, "Failed to create annotation", str(e))

    return JSONResponse(
        {"success": True, "annotation": annotation.to_json()}, status_code=201
    )


@router.get("/annotations")
async def get_annotations(request: Request):
    """Get all annotations."""
    try:
        annotations = _service(request).list()
    except InfrastructureError as e:
        log.exception("Error getting annotations")
        return _failure(500, "Failed to retrieve annotations", str(e))

    return JSONResponse(
        {"success": True, "annotations": [a.to_json() for a in annotations]}
    )


@router.delete("/annotations")
async def delete_annotation_without_id(request: Request):
    """Deleting without an id is a client error."""
    return await delete_annotation(request, "")


@router.delete("/annotations/{annotation_id}")
async def delete_annotation(request: Request, annotation_id: str):
    """Delete an annotation. Unknown ids also report success."""
    try:
        _service(request).delete(annotation_id)
    except ValidationError as e:
        return _failure(400, e.message)
    except InfrastructureError as e:
        log.exception("Error deleting annotation %s", annotation_id)
        return _failure(500, "Failed to delete annotation", str(e))

    return JSONResponse({"success": True, "message": "Annotation deleted successfully"})
