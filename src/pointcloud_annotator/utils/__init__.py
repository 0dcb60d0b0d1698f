"""Utility modules for the point-cloud annotator."""

from .fastapi_utils import add_cors_middleware, create_app, find_available_port, run_server

__all__ = ["add_cors_middleware", "create_app", "find_available_port", "run_server"]
