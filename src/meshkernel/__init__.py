"""
meshkernel - In-memory polygon mesh editing kernel

Indexed vertex/edge/face mesh store with topology operators (extrude, inset,
bevel, bridge, subdivision, welding, triangulation), face-classification CSG
booleans with an undo ledger, and validation/repair passes.
"""

__version__ = "0.1.0"
__author__ = "meshkernel Contributors"

from meshkernel.core.config import ConfigManager, KernelConfig
from meshkernel.core.mesh import Edge, Face, Mesh, Vertex
from meshkernel.core.selection import Selection

__all__ = [
    "__version__",
    "ConfigManager",
    "KernelConfig",
    "Edge",
    "Face",
    "Mesh",
    "Vertex",
    "Selection",
]
