"""Annotation store backends."""

from .base import AnnotationStore
from .json_store import JsonFileAnnotationStore
from .memory import MemoryAnnotationStore

__all__ = [
    "AnnotationStore",
    "JsonFileAnnotationStore",
    "MemoryAnnotationStore",
    "create_store",
]


def create_store(settings) -> AnnotationStore:
    """Build the store backend named by ``settings.store``."""
    if settings.store == "memory":
        return MemoryAnnotationStore()
    if settings.store == "json":
        return JsonFileAnnotationStore(settings.data_dir / "annotations.json")
    if settings.store == "dynamodb":
        from .dynamodb import DynamoAnnotationStore

        return DynamoAnnotationStore.from_settings(settings)
    raise ValueError(f"Unknown store backend: {settings.store}")
