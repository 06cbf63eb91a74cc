import logging
import numpy as np
import trimesh
from dataclasses import dataclass
from scipy.spatial import cKDTree
from typing import Dict, Optional, Union
from pathlib import Path

from ..exceptions import MalformedMesh, InsufficientSupport


@dataclass
class LocalSurface:
    """Points and triangles of a mesh that lie within the support radius of a query point."""
    points: np.ndarray
    triangles: np.ndarray
    indices: np.ndarray

    def __len__(self) -> int:
        return len(self.points)

    @property
    def triangle_points(self) -> np.ndarray:
        """Triangle corners as a (t, 3, 3) array."""
        return self.points[self.triangles]


class MeshProcessor:
    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize the mesh processor with configuration.

        Args:
            config (Dict): Configuration dictionary with processing parameters
        """
        self.config = config or {}
        self.leafsize = self.config.get('leafsize', 16)
        self.balanced_tree = self.config.get('balanced_tree', True)
        self.mesh = None
        self.tree = None
        self.vertices = None
        self.faces = None
        self.vertex_faces = None

    @staticmethod
    def build_mesh(vertices, faces=None) -> trimesh.Trimesh:
        """
        Build a validated mesh from raw arrays.

        Args:
            vertices: (n, 3) array of point coordinates
            faces: (m, 3) array of point indices, or None for a bare point cloud

        Returns:
            trimesh.Trimesh: Mesh with the vertex order left untouched
        """
        vertices = np.asarray(vertices, dtype=np.float64)
        if faces is None:
            faces = np.zeros((0, 3), dtype=np.int64)
        faces = np.asarray(faces)
        if faces.size == 0:
            faces = faces.reshape(0, 3)

        MeshProcessor._check_arrays(vertices, faces)

        # process=False keeps vertex indices aligned with the caller's query points
        return trimesh.Trimesh(vertices=vertices, faces=faces.astype(np.int64), process=False)

    @staticmethod
    def _check_arrays(vertices: np.ndarray, faces: np.ndarray) -> None:
        if vertices.ndim != 2 or vertices.shape[1] != 3:
            raise MalformedMesh(f"Vertices must have shape (n, 3), got {vertices.shape}")
        if not np.all(np.isfinite(vertices)):
            raise MalformedMesh("Vertices contain non-finite coordinates")
        if faces.ndim != 2 or faces.shape[1] != 3:
            raise MalformedMesh(f"Faces must have shape (m, 3), got {faces.shape}")
        if len(faces) == 0:
            return
        if not np.issubdtype(faces.dtype, np.integer):
            raise MalformedMesh(f"Faces must hold integer indices, got dtype {faces.dtype}")
        if faces.min() < 0 or faces.max() >= len(vertices):
            bad = np.where((faces < 0) | (faces >= len(vertices)))[0]
            raise MalformedMesh(
                f"Triangle {int(bad[0])} references a point index outside [0, {len(vertices)})"
            )

    def validate_mesh(self, mesh: trimesh.Trimesh) -> trimesh.Trimesh:
        """
        Check that every triangle references an existing point and every
        coordinate is finite.

        Raises:
            MalformedMesh: If the mesh is not well formed
        """
        self._check_arrays(np.asarray(mesh.vertices), np.asarray(mesh.faces))
        return mesh

    def load_mesh(self, mesh: Union[trimesh.Trimesh, str, Path]) -> trimesh.Trimesh:
        """
        Load a mesh and build its spatial index.

        Args:
            mesh: Either a trimesh.Trimesh object or a path to a mesh file

        Returns:
            trimesh.Trimesh: The validated mesh
        """
        # Load mesh if path is provided
        if isinstance(mesh, (str, Path)):
            mesh_path = Path(mesh)
            if not mesh_path.exists():
                raise FileNotFoundError(f"Mesh file not found: {mesh_path}")
            mesh = trimesh.load(str(mesh_path), force='mesh', process=False)

        self.validate_mesh(mesh)
        self.build_index(mesh)
        logging.info(f"Loaded mesh with {len(mesh.vertices)} vertices and {len(mesh.faces)} faces")
        return mesh

    def build_index(self, mesh: trimesh.Trimesh) -> cKDTree:
        """
        Build the KD-tree and the vertex to face adjacency used by radius queries.

        Both are only read afterwards, so one processor can serve many worker threads.
        """
        self.mesh = mesh
        self.vertices = np.asarray(mesh.vertices, dtype=np.float64)
        self.faces = np.asarray(mesh.faces, dtype=np.int64)
        self.tree = cKDTree(self.vertices, leafsize=self.leafsize, balanced_tree=self.balanced_tree)

        # Computed eagerly: trimesh caches lazily, which is not safe across threads
        if len(self.faces) > 0:
            self.vertex_faces = np.asarray(mesh.vertex_faces, dtype=np.int64)
        else:
            self.vertex_faces = np.full((len(self.vertices), 0), -1, dtype=np.int64)
        return self.tree

    def extract_local_surface(self, query: np.ndarray, support_radius: float) -> LocalSurface:
        """
        Crop the local surface around a query point.

        Args:
            query: (3,) query point
            support_radius: Radius of the spherical support

        Returns:
            LocalSurface: Points within support_radius (inclusive) and the triangles
            whose three corners are all among them, reindexed to the local points

        Raises:
            InsufficientSupport: If no point lies within support_radius
        """
        if self.tree is None:
            raise ValueError("No mesh loaded. Call load_mesh() first.")

        query = np.asarray(query, dtype=np.float64)
        indices = self.tree.query_ball_point(query, support_radius)
        if len(indices) == 0:
            raise InsufficientSupport(
                f"No mesh point within {support_radius} of {np.array2string(query, precision=4)}"
            )
        indices = np.sort(np.asarray(indices, dtype=np.int64))

        triangles = np.zeros((0, 3), dtype=np.int64)
        candidates = self.vertex_faces[indices].ravel()
        candidates = np.unique(candidates[candidates >= 0])
        if len(candidates) > 0:
            faces = self.faces[candidates]
            positions = np.searchsorted(indices, faces)
            clipped = np.minimum(positions, len(indices) - 1)
            inside = (indices[clipped] == faces).all(axis=1)
            triangles = positions[inside]

        return LocalSurface(
            points=self.vertices[indices],
            triangles=triangles,
            indices=indices
        )
