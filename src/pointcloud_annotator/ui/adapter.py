"""Contract between the annotation controller and a 3D viewer."""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from ..models.annotation import Coordinates


class ViewerAdapter(ABC):
    """Click picking and marker display provided by a rendering backend."""

    @abstractmethod
    def translate_click_to_3d(
        self, ray_origin: Sequence[float], ray_direction: Sequence[float]
    ) -> Optional[Coordinates]:
        """World coordinate of the cloud point under a click, or None."""

    @abstractmethod
    def place_marker(self, annotation_id: str, position: Coordinates, label: str) -> Any:
        """Show a labeled marker and return an opaque handle for it."""

    @abstractmethod
    def remove_marker(self, handle: Any) -> None:
        """Remove a marker previously returned by place_marker."""

    @abstractmethod
    def remove_all_markers(self) -> None:
        """Remove every annotation marker from the scene."""
