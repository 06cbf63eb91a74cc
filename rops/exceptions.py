"""
Errors raised by the RoPS pipeline.

Configuration and mesh errors are raised before any query point is processed.
InsufficientSupport and DegenerateNeighborhood are local to one query point and
are turned into per-point statuses by RoPSEstimator.compute().
"""


class RoPSError(ValueError):
    """Base class for all RoPS errors."""


class InvalidConfiguration(RoPSError):
    """Raised when a configuration value is out of range or of the wrong type."""


class MalformedMesh(RoPSError):
    """Raised when a mesh has bad triangle indices or non-finite coordinates."""


class InsufficientSupport(RoPSError):
    """Raised when no mesh point lies within the support radius of a query point."""


class DegenerateNeighborhood(RoPSError):
    """Raised when the local surface cannot define a local reference frame."""
