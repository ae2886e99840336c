"""
CSG module — face-classification booleans and their undo ledger.
"""

from meshkernel.csg.engine import (
    BooleanResult,
    Classification,
    apply_boolean,
    boolean_operation,
    classify_faces,
    difference,
    intersection,
    union,
    xor,
)
from meshkernel.csg.history import BooleanHistory, BooleanHistoryEntry
from meshkernel.csg.raycast import TriangleSoup, point_in_mesh, ray_triangle_intersection

__all__ = [
    "BooleanResult",
    "Classification",
    "apply_boolean",
    "boolean_operation",
    "classify_faces",
    "difference",
    "intersection",
    "union",
    "xor",
    "BooleanHistory",
    "BooleanHistoryEntry",
    "TriangleSoup",
    "point_in_mesh",
    "ray_triangle_intersection",
]
