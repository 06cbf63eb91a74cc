"""
RoPS (Rotation-invariant Point Shape) descriptors for triangle meshes.
"""

from .exceptions import (
    RoPSError,
    InvalidConfiguration,
    MalformedMesh,
    InsufficientSupport,
    DegenerateNeighborhood,
)
from .data.mesh_processor import MeshProcessor, LocalSurface
from .feature_extraction import RoPSEstimator, DescriptorBatch, PointResult, PointStatus

__version__ = "0.1.0"

__all__ = [
    'RoPSError',
    'InvalidConfiguration',
    'MalformedMesh',
    'InsufficientSupport',
    'DegenerateNeighborhood',
    'MeshProcessor',
    'LocalSurface',
    'RoPSEstimator',
    'DescriptorBatch',
    'PointResult',
    'PointStatus',
]
