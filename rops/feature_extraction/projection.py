"""
Rotational projection of a normalized local surface.

For each canonical axis (X, Y, Z) the surface is rotated by the angles
2*pi*i/n, i = 0..n-1, and each rotated copy is projected onto the XY, XZ and YZ
planes. Every projection is binned into a bins x bins distribution matrix over
the bounding box of the projected points.
"""

import numpy as np
from scipy.spatial.transform import Rotation
from typing import Optional

AXES = np.eye(3)

# (first coordinate, second coordinate) kept by each projection
PLANES = ((0, 1), (0, 2), (1, 2))
PLANE_NAMES = ('XY', 'XZ', 'YZ')

# Extents below this fraction of the surface size are treated as flat
RELATIVE_FLAT_EXTENT = 1e-9


def rotation_angles(number_of_rotations: int) -> np.ndarray:
    """Angles 0, 2*pi/n, ..., 2*pi*(n-1)/n."""
    return 2.0 * np.pi * np.arange(number_of_rotations) / number_of_rotations


def rotation_matrix(axis: int, angle: float) -> np.ndarray:
    """Rotation by angle (radians) around canonical axis 0, 1 or 2."""
    return Rotation.from_rotvec(AXES[axis] * angle).as_matrix()


def distribution_matrix(coords: np.ndarray, number_of_bins: int, min_extent: float = 0.0) -> np.ndarray:
    """
    Bin 2D points into a normalized distribution matrix.

    Args:
        coords: (k, 2) projected points
        number_of_bins: Dimension of the square matrix
        min_extent: Extents not above this value put every point in the first bin

    Returns:
        np.ndarray: (bins, bins) matrix summing to 1, or all zeros for no points
    """
    coords = np.asarray(coords, dtype=np.float64)
    if len(coords) == 0:
        return np.zeros((number_of_bins, number_of_bins))

    mins = coords.min(axis=0)
    extents = coords.max(axis=0) - mins

    bin_index = np.zeros(coords.shape, dtype=np.int64)
    for dim in range(2):
        if extents[dim] > min_extent:
            bin_index[:, dim] = np.floor((coords[:, dim] - mins[dim]) / extents[dim] * number_of_bins)
    # the maximum lands on the upper edge
    np.clip(bin_index, 0, number_of_bins - 1, out=bin_index)

    flat = bin_index[:, 0] * number_of_bins + bin_index[:, 1]
    counts = np.bincount(flat, minlength=number_of_bins * number_of_bins)
    return counts.reshape(number_of_bins, number_of_bins) / len(coords)


def rotational_projections(
    points: np.ndarray,
    number_of_rotations: int,
    number_of_bins: int,
    min_extent: Optional[float] = None
) -> np.ndarray:
    """
    Distribution matrices of all rotated projections of a normalized surface.

    Args:
        points: (k, 3) local surface in its canonical frame
        number_of_rotations: Rotations per axis
        number_of_bins: Distribution matrix dimension
        min_extent: Flat extent threshold, relative to the surface size by default

    Returns:
        np.ndarray: (3, number_of_rotations, 3, bins, bins) array ordered by
        axis, rotation angle and plane
    """
    points = np.asarray(points, dtype=np.float64)
    if min_extent is None:
        scale = np.abs(points).max() if len(points) > 0 else 0.0
        min_extent = RELATIVE_FLAT_EXTENT * scale

    matrices = np.zeros((3, number_of_rotations, len(PLANES), number_of_bins, number_of_bins))
    angles = rotation_angles(number_of_rotations)
    for axis in range(3):
        for i_rotation, angle in enumerate(angles):
            rotated = points @ rotation_matrix(axis, angle).T
            for i_plane, plane in enumerate(PLANES):
                matrices[axis, i_rotation, i_plane] = distribution_matrix(
                    rotated[:, plane], number_of_bins, min_extent
                )
    return matrices
