"""Ray picking against a point cloud."""

from typing import Optional

import numpy as np

from ..models.annotation import Coordinates


def ray_nearest_point(
    points: np.ndarray,
    ray_origin: np.ndarray,
    ray_direction: np.ndarray,
    pick_radius: float,
) -> Optional[Coordinates]:
    """
    Find the cloud point a camera ray passes closest to.

    Only points in front of the camera whose perpendicular distance to the
    ray is within ``pick_radius`` are candidates. Among those the one nearest
    the camera wins, so clicks land on the visible surface.

    Args:
        points: (N, 3) point positions in world space
        ray_origin: ray start (camera position)
        ray_direction: ray direction, need not be normalized
        pick_radius: maximum perpendicular distance from the ray

    Returns:
        Coordinates of the picked point, or None if nothing is close enough
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if pts.shape[0] == 0:
        return None

    origin = np.asarray(ray_origin, dtype=np.float64).reshape(3)
    direction = np.asarray(ray_direction, dtype=np.float64).reshape(3)
    norm = np.linalg.norm(direction)
    if norm < 1e-12:
        return None
    direction = direction / norm

    diff = pts - origin
    t = diff @ direction
    in_front = t > 0
    if not np.any(in_front):
        return None

    proj = origin + t[:, None] * direction
    dist = np.linalg.norm(pts - proj, axis=1)
    candidates = in_front & (dist <= pick_radius)
    if not np.any(candidates):
        return None

    idx = np.flatnonzero(candidates)
    best = idx[np.argmin(t[idx])]
    x, y, z = pts[best]
    return Coordinates(float(x), float(y), float(z))
