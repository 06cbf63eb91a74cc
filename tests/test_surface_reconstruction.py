import pytest
import numpy as np

o3d = pytest.importorskip("open3d")

from rops.reconstruction.surface_reconstruction import estimate_normals, triangulate, reconstruct_mesh


@pytest.fixture
def sphere_points():
    # Fibonacci sphere of unit radius
    n = 600
    i = np.arange(n) + 0.5
    phi = np.arccos(1 - 2 * i / n)
    theta = np.pi * (1 + 5 ** 0.5) * i
    return np.column_stack([np.cos(theta) * np.sin(phi), np.sin(theta) * np.sin(phi), np.cos(phi)])


def test_estimate_normals(sphere_points):
    normals = estimate_normals(sphere_points, radius=0.3, max_nn=30)

    assert normals.shape == sphere_points.shape
    assert np.allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-6)
    # oriented towards the viewpoint at the sphere center
    assert np.all(np.sum(normals * sphere_points, axis=1) < 0)


def test_estimate_normals_faces_viewpoint(sphere_points):
    viewpoint = np.array([0.0, 0.0, 10.0])
    normals = estimate_normals(sphere_points, radius=0.3, max_nn=30, viewpoint=viewpoint)

    assert np.all(np.sum(normals * (viewpoint - sphere_points), axis=1) >= 0)
    # the cap seen by the sensor gets outward normals
    top = sphere_points[:, 2] > 0.5
    assert np.all(np.sum(normals[top] * sphere_points[top], axis=1) > 0)


def test_triangulate(sphere_points):
    normals = -sphere_points
    mesh = triangulate(sphere_points, normals, radii=(0.1, 0.2, 0.4))

    assert len(mesh.vertices) == len(sphere_points)
    assert len(mesh.faces) > 0
    assert mesh.faces.max() < len(mesh.vertices)


def test_reconstruct_mesh(sphere_points):
    config = {'normal_radius': 0.3, 'normal_max_nn': 30, 'ball_radii': [0.1, 0.2, 0.4]}
    mesh, normals = reconstruct_mesh(sphere_points, config)

    assert normals.shape == sphere_points.shape
    assert len(mesh.faces) > 0


def test_reconstruct_mesh_uses_viewpoint(sphere_points):
    config = {'normal_radius': 0.3, 'normal_max_nn': 30, 'ball_radii': [0.1, 0.2, 0.4], 'viewpoint': [0.0, 0.0, 10.0]}
    _, normals = reconstruct_mesh(sphere_points, config)

    top = sphere_points[:, 2] > 0.5
    assert np.all(np.sum(normals[top] * sphere_points[top], axis=1) > 0)
