"""
Annotator error types.

All errors inherit from AnnotatorError for easy catching.
"""

from typing import Optional


class AnnotatorError(Exception):
    """Base exception for all annotator failures."""
    pass


class ValidationError(AnnotatorError):
    """Raised when client-supplied data violates the annotation contract."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InfrastructureError(AnnotatorError):
    """Raised when the annotation store or its backend is unavailable."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store {operation} failed: {reason}")


class RequestError(AnnotatorError):
    """Raised by the HTTP client for any non-success response."""

    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        if status is None:
            super().__init__(message)
        else:
            super().__init__(f"HTTP {status}: {message}")
