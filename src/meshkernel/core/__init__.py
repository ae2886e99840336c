"""
Core module - Mesh store, selections, configuration, errors and interop.
"""

from meshkernel.core.config import ConfigManager, KernelConfig
from meshkernel.core.exceptions import (
    MeshKernelError,
    ConfigurationError,
    CSGError,
    GeometryError,
    IndexInvalidatedError,
    InvalidSelectionError,
    VertexCountMismatchError,
)
from meshkernel.core.mesh import Edge, Face, Mesh, Vertex, edge_key, parse_edge_key
from meshkernel.core.selection import Selection
from meshkernel.core.geometry import GeometryConverter, GeometryLoader

__all__ = [
    # Config
    "ConfigManager",
    "KernelConfig",
    # Exceptions
    "MeshKernelError",
    "ConfigurationError",
    "CSGError",
    "GeometryError",
    "IndexInvalidatedError",
    "InvalidSelectionError",
    "VertexCountMismatchError",
    # Mesh
    "Edge",
    "Face",
    "Mesh",
    "Vertex",
    "edge_key",
    "parse_edge_key",
    "Selection",
    # Interop
    "GeometryConverter",
    "GeometryLoader",
]
