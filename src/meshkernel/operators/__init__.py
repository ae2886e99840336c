"""
Operators module — topology-editing operations on a Mesh.

In-place operators return an ``OperationResult``; smoothing, surface
subdivision and shape interpolation return new meshes.
"""

from meshkernel.operators.bevel import bevel_edges, bevel_faces, bevel_vertices
from meshkernel.operators.bridge import bridge_edge_loops
from meshkernel.operators.extrude import extrude_edges, extrude_faces, extrude_vertices
from meshkernel.operators.inset import inset_faces
from meshkernel.operators.loop_cut import loop_cut
from meshkernel.operators.merge import (
    merge_vertices,
    remove_degenerate_faces,
    remove_orphaned_vertices,
)
from meshkernel.operators.morph import interpolate_shapes, morph_vertices
from meshkernel.operators.results import MergeResult, OperationResult
from meshkernel.operators.smoothing import laplacian_smooth, smooth_vertices
from meshkernel.operators.subdivide import subdivide_faces, subdivide_surface

__all__ = [
    "bevel_edges",
    "bevel_faces",
    "bevel_vertices",
    "bridge_edge_loops",
    "extrude_edges",
    "extrude_faces",
    "extrude_vertices",
    "inset_faces",
    "loop_cut",
    "merge_vertices",
    "remove_degenerate_faces",
    "remove_orphaned_vertices",
    "interpolate_shapes",
    "morph_vertices",
    "MergeResult",
    "OperationResult",
    "laplacian_smooth",
    "smooth_vertices",
    "subdivide_faces",
    "subdivide_surface",
]
