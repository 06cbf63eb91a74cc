import pytest
import numpy as np
import trimesh
from scipy.spatial.transform import Rotation


@pytest.fixture
def sample_mesh():
    # Create a simple cube mesh
    vertices = np.array([
        [0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
        [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1]
    ], dtype=np.float64)
    faces = np.array([
        [0, 1, 2], [0, 2, 3],  # bottom
        [4, 5, 6], [4, 6, 7],  # top
        [0, 1, 5], [0, 5, 4],  # front
        [2, 3, 7], [2, 7, 6],  # back
        [0, 3, 7], [0, 7, 4],  # left
        [1, 2, 6], [1, 6, 5]   # right
    ])
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def grid_faces(nx, ny):
    faces = []
    for i in range(nx - 1):
        for j in range(ny - 1):
            a = i * ny + j
            b = (i + 1) * ny + j
            faces.append([a, b, b + 1])
            faces.append([a, b + 1, a + 1])
    return np.array(faces)


def make_height_field(nx=21, ny=11, jitter=0.01, seed=0, flat=False):
    """Asymmetric jittered height field over a rectangle, triangulated on its grid."""
    rng = np.random.default_rng(seed)
    x, y = np.meshgrid(np.linspace(-1.0, 1.0, nx), np.linspace(-0.5, 0.5, ny), indexing='ij')
    x = x + rng.uniform(-jitter, jitter, size=x.shape)
    y = y + rng.uniform(-jitter, jitter, size=y.shape)
    if flat:
        z = np.zeros_like(x)
    else:
        z = 0.2 * np.sin(2 * x) + 0.15 * x * y + 0.1 * y ** 2 + rng.uniform(-jitter, jitter, size=x.shape)
    vertices = np.column_stack([x.ravel(), y.ravel(), z.ravel()])
    return trimesh.Trimesh(vertices=vertices, faces=grid_faces(nx, ny), process=False)


@pytest.fixture
def height_field():
    return make_height_field()


@pytest.fixture
def flat_grid():
    # planar patch at z=0; vertex 115 is the grid center
    return make_height_field(flat=True)


@pytest.fixture
def rigid_transform():
    rotation = Rotation.from_euler('xyz', [37.0, -64.0, 112.0], degrees=True).as_matrix()
    translation = np.array([0.7, -2.3, 5.1])
    return rotation, translation


def transform_mesh(mesh, rotation, translation):
    vertices = np.asarray(mesh.vertices) @ rotation.T + translation
    return trimesh.Trimesh(vertices=vertices, faces=np.asarray(mesh.faces), process=False)
