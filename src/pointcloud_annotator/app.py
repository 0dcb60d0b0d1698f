#!/usr/bin/env python3
"""
Point-Cloud Annotator API
FastAPI application storing text notes pinned to point-cloud coordinates
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request

from . import __version__
from .config import Settings
from .routes import annotations_router
from .services.annotation_service import AnnotationService
from .store import AnnotationStore, create_store
from .utils.fastapi_utils import add_cors_middleware, create_app as _create_fastapi_app

log = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[AnnotationStore] = None,
) -> FastAPI:
    """
    Build the annotation API.

    Args:
        settings: Runtime settings (read from the environment when omitted)
        store: Store backend; built from ``settings.store`` when omitted

    Returns:
        FastAPI application with the annotation routes mounted
    """
    settings = settings or Settings()
    if store is None:
        store = create_store(settings)

    app = _create_fastapi_app(
        title="Point-Cloud Annotator",
        description="Create, list and delete text annotations on 3D point clouds",
        version=__version__,
    )
    add_cors_middleware(app)

    app.state.settings = settings
    app.state.annotation_service = AnnotationService(store)
    app.include_router(annotations_router)

    @app.get("/health")
    async def health(request: Request):
        """Liveness probe reporting the active store backend."""
        return {"status": "ok", "store": request.app.state.annotation_service.store.name}

    log.info("Annotation API ready (store=%s)", store.name)
    return app
