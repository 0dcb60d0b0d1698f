"""Point cloud loader for the formats Open3D reads."""

from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import open3d as o3d


class CloudLoader:
    """Loader for point cloud files."""

    def __init__(self, voxel_size: Optional[float] = None, center: bool = False):
        self.supported_formats = {'.ply', '.pcd', '.xyz', '.xyzn', '.xyzrgb', '.pts'}
        self.voxel_size = voxel_size
        self.center = center
        # Translation applied by centering; annotations stay in file coordinates
        # only when this is zero.
        self.offset = np.zeros(3)

    def load_file(self, file_path: Path) -> o3d.geometry.PointCloud:
        """Load a point cloud file and return an Open3D point cloud.

        Args:
            file_path: Path to the point cloud file
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix not in self.supported_formats:
            raise ValueError(f"Unsupported file format: {suffix}")

        cloud = o3d.io.read_point_cloud(str(file_path))
        if len(cloud.points) == 0:
            raise ValueError(f"Loaded point cloud has no points: {file_path}")

        return self.process_cloud(cloud)

    def process_cloud(self, cloud: o3d.geometry.PointCloud) -> o3d.geometry.PointCloud:
        """Downsample and optionally center the loaded cloud."""
        if self.voxel_size:
            cloud = cloud.voxel_down_sample(self.voxel_size)

        cloud.remove_non_finite_points()

        if self.center:
            bbox = cloud.get_axis_aligned_bounding_box()
            self.offset = -np.asarray(bbox.get_center())
            cloud.translate(self.offset)

        return cloud

    def to_arrays(self, cloud: o3d.geometry.PointCloud) -> Tuple[np.ndarray, np.ndarray]:
        """Points as float32 (N, 3) and colors as uint8 (N, 3) for the viewer."""
        points = np.asarray(cloud.points, dtype=np.float32)
        if cloud.has_colors():
            colors = (np.clip(np.asarray(cloud.colors), 0.0, 1.0) * 255).astype(np.uint8)
        else:
            # Height-coded grey ramp so uncoloured scans still show shape
            z = points[:, 2]
            span = float(z.max() - z.min()) or 1.0
            shade = (80 + 175 * (z - z.min()) / span).astype(np.uint8)
            colors = np.stack([shade, shade, shade], axis=1)
        return points, colors

    def get_cloud_info(self, cloud: o3d.geometry.PointCloud) -> dict:
        """Get information about the point cloud."""
        bbox = cloud.get_axis_aligned_bounding_box()
        extent = bbox.get_extent()

        return {
            'points': len(cloud.points),
            'bbox_min': bbox.min_bound.tolist(),
            'bbox_max': bbox.max_bound.tolist(),
            'extent': extent.tolist(),
            'max_dimension': float(np.max(extent)),
            'has_normals': cloud.has_normals(),
            'has_colors': cloud.has_colors(),
            'offset': self.offset.tolist(),
        }

    def is_supported_format(self, file_path: Path) -> bool:
        """Check if file format is supported."""
        return file_path.suffix.lower() in self.supported_formats

    def get_supported_formats(self) -> list:
        """Get list of supported file formats."""
        return sorted(self.supported_formats)
