"""
Geometry module — vector helpers, triangulation and mesh analysis.
"""

from meshkernel.geometry.analysis import analyze_mesh, polygon_histogram
from meshkernel.geometry.triangulation import (
    ear_clip,
    triangle_array,
    triangulate,
    triangulate_mesh,
)
from meshkernel.geometry.vectors import (
    barycentric,
    centroid,
    face_normal,
    normalize,
    point_in_triangle,
    polygon_area,
    triangle_area,
)

__all__ = [
    "analyze_mesh",
    "polygon_histogram",
    "ear_clip",
    "triangle_array",
    "triangulate",
    "triangulate_mesh",
    "barycentric",
    "centroid",
    "face_normal",
    "normalize",
    "point_in_triangle",
    "polygon_area",
    "triangle_area",
]
