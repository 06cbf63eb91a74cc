"""
Point cloud sources for the capture pipeline.

A source stands in for the depth sensor of the capture program: it hands out a
single frame as an (n, 3) array, or None when no frame is available.
"""

import logging
import numpy as np
import pyvista as pv
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union


class CloudSource(ABC):
    """A producer of single point cloud frames."""

    @abstractmethod
    def try_get_latest(self) -> Optional[np.ndarray]:
        """Return the most recent frame as an (n, 3) float64 array, or None."""


class FileCloudSource(CloudSource):
    """
    Reads a frame previously grabbed to disk (PCD, PLY, XYZ, PTS...).

    Frames are read with open3d, installed with the 'reconstruction' extra.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def try_get_latest(self) -> Optional[np.ndarray]:
        if not self.path.exists():
            logging.error(f"Cloud file not found: {self.path}")
            return None

        import open3d as o3d

        try:
            pcd = o3d.io.read_point_cloud(str(self.path))
        except (RuntimeError, ValueError) as e:
            logging.error(f"Error reading cloud {self.path}: {str(e)}")
            return None

        # open3d returns an empty cloud for unreadable or unsupported files
        points = np.asarray(pcd.points)
        if len(points) == 0:
            logging.error(f"Cloud {self.path} is empty or could not be read")
            return None
        return points.astype(np.float64)


class SyntheticCloudSource(CloudSource):
    """
    Produces a frame from a pyvista primitive.

    Useful when no sensor is attached: the frame is the vertex set of a sphere,
    cube or cylinder, optionally jittered with seeded Gaussian noise.
    """

    SHAPES = ('sphere', 'cube', 'cylinder')

    def __init__(
        self,
        shape: str = 'sphere',
        radius: float = 0.05,
        resolution: int = 30,
        noise: float = 0.0,
        seed: int = 0
    ):
        if shape not in self.SHAPES:
            raise ValueError(f"Unknown shape: {shape}. Expected one of {self.SHAPES}")
        self.shape = shape
        self.radius = radius
        self.resolution = resolution
        self.noise = noise
        self.seed = seed

    def _make_primitive(self) -> pv.PolyData:
        if self.shape == 'sphere':
            return pv.Sphere(
                radius=self.radius,
                center=(0, 0, 0),
                theta_resolution=self.resolution,
                phi_resolution=self.resolution
            )
        if self.shape == 'cube':
            length = 2 * self.radius
            return pv.Cube(center=(0, 0, 0), x_length=length, y_length=length, z_length=length)
        return pv.Cylinder(
            center=(0, 0, 0),
            direction=(0, 0, 1),
            radius=self.radius,
            height=4 * self.radius,
            resolution=self.resolution
        )

    def try_get_latest(self) -> Optional[np.ndarray]:
        points = np.array(self._make_primitive().points, dtype=np.float64)
        if self.noise > 0:
            rng = np.random.default_rng(self.seed)
            points += rng.normal(scale=self.noise, size=points.shape)
        return points


def make_cloud_source(config: dict) -> CloudSource:
    """Create a cloud source from the 'source' section of the configuration."""
    source_type = config.get('type', 'synthetic')
    if source_type == 'file':
        if not config.get('path'):
            raise ValueError("A file source needs a 'path'")
        return FileCloudSource(config['path'])
    if source_type == 'synthetic':
        return SyntheticCloudSource(
            shape=config.get('shape', 'sphere'),
            radius=config.get('radius', 0.05),
            resolution=config.get('resolution', 30),
            noise=config.get('noise', 0.0),
            seed=config.get('seed', 0)
        )
    raise ValueError(f"Unknown cloud source type: {source_type}")
