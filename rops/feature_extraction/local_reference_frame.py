"""
Local reference frame (LRF) construction and surface normalization.

The LRF is built from a weighted scatter matrix of the local surface around the
query point. When the local surface carries triangles the scatter matrix is
integrated over each triangle and weighted by triangle area and by the squared
distance of the triangle centroid to the support boundary. Without triangles
every point is used directly, weighted by its squared distance to the boundary.

The x axis is the eigenvector of the largest eigenvalue, z the eigenvector of
the smallest one, and y is the cross product of z and x, so the frame is
right-handed. The sign of an axis is chosen so that the weighted projections of
the local surface onto it sum to a non-negative value. A projection sum within
SIGN_TOLERANCE of the weighted offset lengths counts as a tie. On a flat patch
the z sum is always a tie, so the sign of y is resolved instead and z is taken
as x cross y. A tie on y as well keeps the sign returned by the eigen-solver.
"""

import numpy as np
import trimesh
from typing import Tuple

from ..data.mesh_processor import LocalSurface
from ..exceptions import DegenerateNeighborhood

SIGN_TOLERANCE = 1e-9


def _triangle_scatter(
    triangle_points: np.ndarray,
    query: np.ndarray,
    support_radius: float
) -> Tuple[np.ndarray, np.ndarray, float, float]:
    """
    Area and distance weighted scatter matrix of a triangulated surface.

    Returns:
        Tuple[np.ndarray, np.ndarray, float, float]: Scatter matrix, weighted sum
        of the corner vectors (used for sign disambiguation), weighted sum of the
        corner vector lengths and total weight
    """
    relative = triangle_points - query
    areas = trimesh.triangles.area(triangle_points)
    total_area = areas.sum()

    centroids = relative.mean(axis=1)
    distance_weights = (support_radius - np.linalg.norm(centroids, axis=1)) ** 2
    weights = (areas / total_area) * distance_weights
    total_weight = weights.sum()

    # sum_{i,j} p_i p_j^T (1 + delta_ij) = (sum p)(sum p)^T + sum p p^T
    corner_sum = relative.sum(axis=1)
    per_triangle = (
        np.einsum('ti,tj->tij', corner_sum, corner_sum)
        + np.einsum('tki,tkj->tij', relative, relative)
    ) / 12.0
    scatter = np.einsum('t,tij->ij', weights, per_triangle)
    direction = np.einsum('t,ti->i', weights, corner_sum)
    scale = np.dot(weights, np.linalg.norm(relative, axis=2).sum(axis=1))
    return scatter, direction, scale, total_weight


def _point_scatter(
    points: np.ndarray,
    query: np.ndarray,
    support_radius: float
) -> Tuple[np.ndarray, np.ndarray, float, float]:
    """Distance weighted scatter matrix of bare points."""
    relative = points - query
    lengths = np.linalg.norm(relative, axis=1)
    weights = (support_radius - lengths) ** 2
    total_weight = weights.sum()
    scatter = np.einsum('n,ni,nj->ij', weights, relative, relative)
    direction = np.einsum('n,ni->i', weights, relative)
    return scatter, direction, np.dot(weights, lengths), total_weight


def _orient(axis: np.ndarray, direction: np.ndarray, scale: float) -> Tuple[np.ndarray, bool]:
    """Flip axis towards direction. Returns the axis and whether the sign was decided."""
    projection = np.dot(direction, axis)
    if abs(projection) <= SIGN_TOLERANCE * scale:
        return axis, False
    return (axis if projection > 0 else -axis), True


def compute_lrf(
    surface: LocalSurface,
    query: np.ndarray,
    support_radius: float,
    tolerance: float = 1e-10
) -> np.ndarray:
    """
    Compute the local reference frame of a query point.

    Args:
        surface: Local surface around the query point
        query: (3,) query point
        support_radius: Radius the local surface was cropped with
        tolerance: Relative eigenvalue threshold below which the frame is degenerate

    Returns:
        np.ndarray: (3, 3) matrix whose rows are the x, y and z axes

    Raises:
        DegenerateNeighborhood: If the local surface is coincident or collinear
    """
    query = np.asarray(query, dtype=np.float64)

    use_triangles = len(surface.triangles) > 0
    if use_triangles:
        triangle_points = surface.triangle_points
        use_triangles = trimesh.triangles.area(triangle_points).sum() > 0

    if use_triangles:
        scatter, direction, scale, total_weight = _triangle_scatter(triangle_points, query, support_radius)
    else:
        scatter, direction, scale, total_weight = _point_scatter(surface.points, query, support_radius)

    if not total_weight > 0:
        raise DegenerateNeighborhood(
            f"Local surface of {len(surface)} points has no weight inside the support"
        )
    scatter /= total_weight

    # eigh returns eigenvalues in ascending order
    eigenvalues, eigenvectors = np.linalg.eigh(scatter)
    largest, middle = eigenvalues[2], eigenvalues[1]
    if largest <= 0 or middle <= tolerance * largest:
        raise DegenerateNeighborhood(
            f"Local surface of {len(surface)} points is coincident or collinear "
            f"(eigenvalues {eigenvalues[::-1]})"
        )

    x_axis, _ = _orient(eigenvectors[:, 2], direction, scale)
    z_axis, decided = _orient(eigenvectors[:, 0], direction, scale)
    if decided:
        y_axis = np.cross(z_axis, x_axis)
    else:
        # flat support: the surface has no side along z
        y_axis, _ = _orient(np.cross(z_axis, x_axis), direction, scale)
        z_axis = np.cross(x_axis, y_axis)

    return np.vstack([x_axis, y_axis, z_axis])


def check_lrf(lrf: np.ndarray, atol: float = 1e-6) -> None:
    """
    Verify that an LRF is a proper rotation.

    Raises:
        DegenerateNeighborhood: If the axes are not orthonormal or not finite
    """
    lrf = np.asarray(lrf, dtype=np.float64)
    if lrf.shape != (3, 3) or not np.all(np.isfinite(lrf)):
        raise DegenerateNeighborhood(f"Invalid local reference frame: {lrf}")
    if not np.allclose(lrf @ lrf.T, np.eye(3), atol=atol):
        raise DegenerateNeighborhood("Local reference frame axes are not orthonormal")
    if np.linalg.det(lrf) < 0:
        raise DegenerateNeighborhood("Local reference frame is not right-handed")


def transform_to_lrf(points: np.ndarray, query: np.ndarray, lrf: np.ndarray) -> np.ndarray:
    """
    Express points in the canonical frame of the query point.

    The query point becomes the origin and the LRF axes become the X, Y and Z axes.
    """
    check_lrf(lrf)
    return (np.asarray(points, dtype=np.float64) - query) @ lrf.T
