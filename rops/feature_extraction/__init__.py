"""
RoPS feature extraction.

This package provides the stages of the RoPS descriptor: local reference
frames, rotational projections, distribution matrix statistics and the
estimator that chains them for batches of query points.
"""

from .local_reference_frame import compute_lrf, check_lrf, transform_to_lrf
from .projection import PLANES, rotation_angles, rotation_matrix, distribution_matrix, rotational_projections
from .moments import SUB_FEATURE_SIZE, central_moments, shannon_entropy
from .rops_estimator import (
    RoPSEstimator,
    DescriptorBatch,
    PointResult,
    PointStatus,
    assemble_descriptor,
    normalize_descriptor,
    descriptor_labels,
)

__all__ = [
    'compute_lrf',
    'check_lrf',
    'transform_to_lrf',
    'PLANES',
    'rotation_angles',
    'rotation_matrix',
    'distribution_matrix',
    'rotational_projections',
    'SUB_FEATURE_SIZE',
    'central_moments',
    'shannon_entropy',
    'RoPSEstimator',
    'DescriptorBatch',
    'PointResult',
    'PointStatus',
    'assemble_descriptor',
    'normalize_descriptor',
    'descriptor_labels',
]
