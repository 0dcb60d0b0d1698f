"""Viser-backed point cloud viewer implementing the ViewerAdapter contract."""

import logging
from typing import Any, Optional, Sequence

import numpy as np
import viser

from ..core.picking import ray_nearest_point
from ..models.annotation import Coordinates
from .adapter import ViewerAdapter

log = logging.getLogger(__name__)

MARKER_COLOR = (255, 196, 0)


class ViserViewerAdapter(ViewerAdapter):
    """
    Shows one point cloud and the annotation markers in a viser scene.

    Clicks arrive from the browser as camera rays; the picked point is the
    nearest cloud point within ``pick_radius`` of the ray. When no radius is
    given it defaults to 1% of the cloud's largest extent.
    """

    def __init__(
        self,
        server: viser.ViserServer,
        points: np.ndarray,
        colors: np.ndarray,
        *,
        point_size: float = 0.01,
        pick_radius: Optional[float] = None,
        marker_radius: Optional[float] = None,
    ) -> None:
        self.server = server
        self.points = np.asarray(points, dtype=np.float32)
        self.colors = colors

        extent = float(np.max(np.ptp(self.points, axis=0))) if len(self.points) else 1.0
        self.pick_radius = pick_radius if pick_radius is not None else max(extent * 0.01, 1e-6)
        self.marker_radius = marker_radius if marker_radius is not None else self.pick_radius * 0.8
        self.point_size = point_size

        self._cloud_handle = None
        self._marker_nodes: dict[str, tuple[Any, Any]] = {}

    def show_cloud(self) -> None:
        if self._cloud_handle is not None:
            self._cloud_handle.remove()
        self._cloud_handle = self.server.scene.add_point_cloud(
            name="/pointcloud",
            points=self.points,
            colors=self.colors,
            point_size=self.point_size,
            point_shape="circle",
        )
        log.info("Showing %d points (pick radius %.4f)", len(self.points), self.pick_radius)

    def translate_click_to_3d(
        self, ray_origin: Sequence[float], ray_direction: Sequence[float]
    ) -> Optional[Coordinates]:
        if ray_origin is None or ray_direction is None:
            return None
        return ray_nearest_point(
            self.points, np.array(ray_origin), np.array(ray_direction), self.pick_radius
        )

    def place_marker(self, annotation_id: str, position: Coordinates, label: str) -> Any:
        prefix = f"/annotations/{annotation_id}"
        sphere = self.server.scene.add_icosphere(
            name=f"{prefix}/marker",
            radius=self.marker_radius,
            color=MARKER_COLOR,
            position=tuple(position),
        )
        text = self.server.scene.add_label(
            name=f"{prefix}/label",
            text=label,
            position=(position.x, position.y, position.z + self.marker_radius * 2),
        )
        self._marker_nodes[annotation_id] = (sphere, text)
        return annotation_id

    def remove_marker(self, handle: Any) -> None:
        nodes = self._marker_nodes.pop(handle, None)
        if nodes is None:
            return
        for node in nodes:
            node.remove()

    def remove_all_markers(self) -> None:
        for handle in list(self._marker_nodes):
            self.remove_marker(handle)
