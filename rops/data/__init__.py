from .mesh_processor import MeshProcessor, LocalSurface
from .cloud_source import CloudSource, FileCloudSource, SyntheticCloudSource, make_cloud_source

__all__ = [
    'MeshProcessor',
    'LocalSurface',
    'CloudSource',
    'FileCloudSource',
    'SyntheticCloudSource',
    'make_cloud_source',
]
