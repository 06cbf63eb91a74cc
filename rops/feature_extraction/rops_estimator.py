"""
RoPS descriptor estimation.

This module implements the RoPSEstimator class, which runs every query point
through the full pipeline: local surface cropping, local reference frame,
normalization into the canonical frame, rotational projections, moments and
entropy, and concatenation into the final descriptor.

Descriptor layout: axis (X, Y, Z) is the outermost loop, then rotation angle,
then projection plane (XY, XZ, YZ), then the five statistics
(M11, M12, M21, M22, E). With 3 rotations the descriptor has 135 values.
"""

import concurrent.futures
import logging
import numpy as np
import trimesh
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union
from tqdm import tqdm

from ..data.mesh_processor import MeshProcessor
from ..exceptions import InsufficientSupport, DegenerateNeighborhood
from ..utils.config import validate_rops_config
from .local_reference_frame import compute_lrf, transform_to_lrf
from .moments import MOMENT_ORDERS, SUB_FEATURE_SIZE, central_moments
from .projection import PLANES, PLANE_NAMES, rotational_projections

AXIS_NAMES = ('X', 'Y', 'Z')
STATISTIC_NAMES = tuple(f"M{a}{b}" for a, b in MOMENT_ORDERS) + ('E',)


class PointStatus(Enum):
    OK = 'ok'
    INSUFFICIENT_SUPPORT = 'insufficient_support'
    DEGENERATE_NEIGHBORHOOD = 'degenerate_neighborhood'


@dataclass
class PointResult:
    index: int
    status: PointStatus
    descriptor: Optional[np.ndarray]
    message: str = ''

    @property
    def ok(self) -> bool:
        return self.status is PointStatus.OK


@dataclass
class DescriptorBatch:
    """Per-point results, index-aligned with the query points."""
    results: List[PointResult]
    descriptor_size: int

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, idx: int) -> PointResult:
        return self.results[idx]

    def __iter__(self) -> Iterator[PointResult]:
        return iter(self.results)

    @property
    def descriptors(self) -> List[Optional[np.ndarray]]:
        return [r.descriptor for r in self.results]

    @property
    def statuses(self) -> List[PointStatus]:
        return [r.status for r in self.results]

    @property
    def valid_mask(self) -> np.ndarray:
        return np.array([r.ok for r in self.results], dtype=bool)

    @property
    def num_failed(self) -> int:
        return int(len(self.results) - self.valid_mask.sum())

    @property
    def indices(self) -> np.ndarray:
        """Query indices of the rows returned by to_array()."""
        return np.array([r.index for r in self.results if r.descriptor is not None], dtype=np.int64)

    def to_array(self) -> np.ndarray:
        """
        Stack every available descriptor.

        Skipped points have no row; zero-filled points keep theirs, so under the
        'zero' policy the array is aligned with the query points.
        """
        rows = [r.descriptor for r in self.results if r.descriptor is not None]
        if not rows:
            return np.zeros((0, self.descriptor_size))
        return np.vstack(rows)


def descriptor_labels(number_of_rotations: int) -> List[str]:
    """Name of every descriptor value, e.g. 'X/rot0/XY/M11', in descriptor order."""
    return [
        f"{axis}/rot{i}/{plane}/{statistic}"
        for axis in AXIS_NAMES
        for i in range(number_of_rotations)
        for plane in PLANE_NAMES
        for statistic in STATISTIC_NAMES
    ]


def assemble_descriptor(sub_features: np.ndarray) -> np.ndarray:
    """Concatenate (3, rotations, 3, 5) sub-features in axis, angle, plane order."""
    return np.asarray(sub_features, dtype=np.float64).reshape(-1)


def normalize_descriptor(descriptor: np.ndarray) -> np.ndarray:
    """Divide by the L1 norm; near-zero descriptors are returned unchanged."""
    norm = np.sum(np.abs(descriptor))
    if norm < np.finfo(np.float64).eps:
        return descriptor
    return descriptor / norm


class RoPSEstimator:
    """
    Computes RoPS descriptors for query points of a triangle mesh.

    Usage:
        estimator = RoPSEstimator({'support_radius': 0.0285, 'number_of_bins': 5})
        batch = estimator.compute(mesh)
        descriptors = batch.to_array()
    """

    def __init__(self, config: Optional[Dict] = None, mesh_config: Optional[Dict] = None):
        """
        Initialize the estimator.

        Args:
            config: RoPS parameters (support_radius, number_of_rotations,
                number_of_bins, normalize_descriptor, failure_policy,
                degeneracy_tolerance, num_workers, show_progress)
            mesh_config: Parameters forwarded to MeshProcessor

        Raises:
            InvalidConfiguration: If a parameter is out of range
        """
        self.config = validate_rops_config(config)
        self.support_radius = self.config['support_radius']
        self.number_of_rotations = self.config['number_of_rotations']
        self.number_of_bins = self.config['number_of_bins']
        self.normalize = self.config['normalize_descriptor']
        self.failure_policy = self.config['failure_policy']
        self.tolerance = self.config['degeneracy_tolerance']
        self.num_workers = self.config['num_workers']
        self.show_progress = self.config['show_progress']
        self.processor = MeshProcessor(mesh_config)

    @property
    def descriptor_size(self) -> int:
        return 3 * self.number_of_rotations * len(PLANES) * SUB_FEATURE_SIZE

    @property
    def labels(self) -> List[str]:
        return descriptor_labels(self.number_of_rotations)

    def set_mesh(self, mesh: Union[trimesh.Trimesh, str]) -> trimesh.Trimesh:
        """Validate the mesh and build its spatial index."""
        return self.processor.load_mesh(mesh)

    def compute_descriptor(self, query: np.ndarray) -> np.ndarray:
        """
        Compute the descriptor of a single query point against the current mesh.

        Raises:
            InsufficientSupport: If no mesh point is within the support radius
            DegenerateNeighborhood: If the local reference frame is undefined
        """
        query = np.asarray(query, dtype=np.float64)
        surface = self.processor.extract_local_surface(query, self.support_radius)
        lrf = compute_lrf(surface, query, self.support_radius, self.tolerance)
        canonical = transform_to_lrf(surface.points, query, lrf)

        matrices = rotational_projections(canonical, self.number_of_rotations, self.number_of_bins)
        sub_features = np.zeros(matrices.shape[:3] + (SUB_FEATURE_SIZE,))
        for index in np.ndindex(*matrices.shape[:3]):
            sub_features[index] = central_moments(matrices[index])

        descriptor = assemble_descriptor(sub_features)
        if self.normalize:
            descriptor = normalize_descriptor(descriptor)
        return descriptor

    def _process_point(self, index: int, query: np.ndarray) -> PointResult:
        try:
            descriptor = self.compute_descriptor(query)
        except (InsufficientSupport, DegenerateNeighborhood) as e:
            if self.failure_policy == 'raise':
                raise
            if isinstance(e, InsufficientSupport):
                status = PointStatus.INSUFFICIENT_SUPPORT
            else:
                status = PointStatus.DEGENERATE_NEIGHBORHOOD
            message = str(e)
        else:
            return PointResult(index=index, status=PointStatus.OK, descriptor=descriptor)

        logging.debug(f"Point {index}: {status.value} ({message})")
        descriptor = np.zeros(self.descriptor_size) if self.failure_policy == 'zero' else None
        return PointResult(index=index, status=status, descriptor=descriptor, message=message)

    def compute(
        self,
        mesh: Union[trimesh.Trimesh, str],
        query_points: Optional[np.ndarray] = None
    ) -> DescriptorBatch:
        """
        Compute descriptors for a batch of query points.

        Args:
            mesh: Mesh (or path to a mesh file) the descriptors are computed on
            query_points: (q, 3) query points; every mesh vertex when None

        Returns:
            DescriptorBatch: One result per query point, in query order

        Raises:
            MalformedMesh: If the mesh is not well formed
        """
        mesh = self.set_mesh(mesh)
        if query_points is None:
            query_points = np.asarray(mesh.vertices, dtype=np.float64)
        query_points = np.asarray(query_points, dtype=np.float64).reshape(-1, 3)
        if not np.all(np.isfinite(query_points)):
            raise ValueError("Query points contain non-finite coordinates")

        n_points = len(query_points)
        results: List[Optional[PointResult]] = [None] * n_points
        logging.info(
            f"Computing {n_points} RoPS descriptors (radius={self.support_radius}, "
            f"rotations={self.number_of_rotations}, bins={self.number_of_bins}, "
            f"workers={self.num_workers})"
        )

        with tqdm(total=n_points, desc='RoPS', disable=not self.show_progress) as progress:
            if self.num_workers > 1:
                with concurrent.futures.ThreadPoolExecutor(max_workers=self.num_workers) as executor:
                    futures = {
                        executor.submit(self._process_point, i, query): i
                        for i, query in enumerate(query_points)
                    }
                    for future in concurrent.futures.as_completed(futures):
                        try:
                            results[futures[future]] = future.result()
                        except Exception:
                            # only queued points are cancelled; running ones finish
                            for pending in futures:
                                pending.cancel()
                            raise
                        progress.update(1)
            else:
                for i, query in enumerate(query_points):
                    results[i] = self._process_point(i, query)
                    progress.update(1)

        batch = DescriptorBatch(results=results, descriptor_size=self.descriptor_size)
        if batch.num_failed > 0:
            failures = {}
            for status in batch.statuses:
                if status is not PointStatus.OK:
                    failures[status.value] = failures.get(status.value, 0) + 1
            logging.warning(
                f"{batch.num_failed}/{n_points} points failed ({failures}); "
                f"failure policy '{self.failure_policy}'"
            )
        logging.info(f"Computed {n_points - batch.num_failed}/{n_points} RoPS descriptors")
        return batch
