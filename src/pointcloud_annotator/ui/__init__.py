"""Annotation UI: controller state machine and viewer contract.

The viser-backed viewer and panel live in ``viser_viewer`` and ``panel`` and
are imported directly by the CLI.
"""

from .adapter import ViewerAdapter
from .controller import AnnotationController, AnnotationItem, ControllerState, TextGauge

__all__ = [
    "ViewerAdapter",
    "AnnotationController",
    "AnnotationItem",
    "ControllerState",
    "TextGauge",
]
