import logging
import numpy as np
import open3d as o3d
import trimesh
from typing import Dict, Optional, Sequence, Tuple

from ..data.mesh_processor import MeshProcessor


def to_point_cloud(points: np.ndarray, normals: Optional[np.ndarray] = None) -> o3d.geometry.PointCloud:
    """Wrap an (n, 3) array as an open3d point cloud."""
    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(np.asarray(points, dtype=np.float64))
    if normals is not None:
        pcd.normals = o3d.utility.Vector3dVector(np.asarray(normals, dtype=np.float64))
    return pcd


def estimate_normals(
    points: np.ndarray,
    radius: float = 0.01,
    max_nn: int = 30,
    viewpoint: Sequence[float] = (0.0, 0.0, 0.0)
) -> np.ndarray:
    """
    Estimate per-point normals from a radius neighborhood.

    Args:
        points: (n, 3) point cloud
        radius: Neighborhood radius
        max_nn: Maximum number of neighbors per point
        viewpoint: Normals are flipped to face this location (the sensor origin)

    Returns:
        np.ndarray: (n, 3) unit normals
    """
    pcd = to_point_cloud(points)
    pcd.estimate_normals(search_param=o3d.geometry.KDTreeSearchParamHybrid(radius=radius, max_nn=max_nn))
    pcd.orient_normals_towards_camera_location(camera_location=np.asarray(viewpoint, dtype=np.float64))
    return np.asarray(pcd.normals)


def triangulate(
    points: np.ndarray,
    normals: np.ndarray,
    radii: Sequence[float] = (0.005, 0.01, 0.02)
) -> trimesh.Trimesh:
    """
    Triangulate an oriented point cloud with ball pivoting.

    Args:
        points: (n, 3) point cloud
        normals: (n, 3) normals of the points
        radii: Ball radii, smallest first

    Returns:
        trimesh.Trimesh: Mesh whose vertices keep the order of the input points
    """
    pcd = to_point_cloud(points, normals)
    o3d_mesh = o3d.geometry.TriangleMesh.create_from_point_cloud_ball_pivoting(
        pcd, o3d.utility.DoubleVector(list(radii))
    )
    vertices = np.asarray(o3d_mesh.vertices)
    faces = np.asarray(o3d_mesh.triangles, dtype=np.int64)
    return MeshProcessor.build_mesh(vertices, faces)


def reconstruct_mesh(points: np.ndarray, config: Optional[Dict] = None) -> Tuple[trimesh.Trimesh, np.ndarray]:
    """
    Estimate normals and triangulate a point cloud.

    Args:
        points: (n, 3) point cloud
        config: 'reconstruction' section of the configuration

    Returns:
        Tuple[trimesh.Trimesh, np.ndarray]: Mesh and the estimated normals
    """
    config = config or {}
    normals = estimate_normals(
        points,
        radius=config.get('normal_radius', 0.01),
        max_nn=config.get('normal_max_nn', 30),
        viewpoint=config.get('viewpoint', (0.0, 0.0, 0.0))
    )
    logging.info(f"Estimated normals for {len(points)} points")

    mesh = triangulate(points, normals, radii=config.get('ball_radii', (0.005, 0.01, 0.02)))
    logging.info(f"Triangulated mesh has {len(mesh.vertices)} vertices and {len(mesh.faces)} faces")
    return mesh, normals
