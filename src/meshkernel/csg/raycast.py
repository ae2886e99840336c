"""
Ray casting for inside/outside tests.

A point is inside a closed mesh when a ray from it crosses the surface an odd
number of times. Intersections use the Möller–Trumbore algorithm, vectorized
over every triangle of the mesh at once.

Parity is meaningless for a point lying on the surface itself: the answer
would depend on which way the ray happens to leave. Callers check
``point_on_surface`` first and decide what such points mean.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from meshkernel.core.mesh import Mesh
from meshkernel.geometry.triangulation import triangle_array
from meshkernel.geometry.vectors import normalize

# Slightly off +X so rays from axis-aligned faces do not run along edges
RAY_DIRECTION = normalize(np.array([1.0, 0.0017, 0.0031]))


def ray_triangle_intersection(
    origin: ArrayLike,
    direction: ArrayLike,
    v0: ArrayLike,
    v1: ArrayLike,
    v2: ArrayLike,
    tolerance: float = 1e-6,
) -> Optional[float]:
    """
    Distance along the ray to triangle ``v0 v1 v2``, or None if missed.

    Rays parallel to the triangle (``|det| < tolerance``) miss, as do hits
    at ``t <= tolerance`` (behind or at the origin).
    """
    origin = np.asarray(origin, dtype=np.float64)
    direction = np.asarray(direction, dtype=np.float64)
    v0 = np.asarray(v0, dtype=np.float64)
    edge1 = np.asarray(v1, dtype=np.float64) - v0
    edge2 = np.asarray(v2, dtype=np.float64) - v0

    h = np.cross(direction, edge2)
    det = edge1 @ h
    if abs(det) < tolerance:
        return None

    inv_det = 1.0 / det
    s = origin - v0
    u = inv_det * (s @ h)
    if u < 0.0 or u > 1.0:
        return None

    q = np.cross(s, edge1)
    v = inv_det * (direction @ q)
    if v < 0.0 or u + v > 1.0:
        return None

    t = inv_det * (edge2 @ q)
    return float(t) if t > tolerance else None


@dataclass
class TriangleSoup:
    """
    Triangulated copy of a mesh's surface, prepared for ray casting.

    Attributes:
        v0, v1, v2: (T, 3) triangle corners
        face_ids: (T,) source face of each triangle
    """

    v0: NDArray[np.float64]
    v1: NDArray[np.float64]
    v2: NDArray[np.float64]
    face_ids: NDArray[np.int64]

    @classmethod
    def from_mesh(cls, mesh: Mesh) -> "TriangleSoup":
        triangles, face_ids = triangle_array(mesh)
        positions = mesh.vertex_positions()
        if len(triangles) == 0:
            empty = np.zeros((0, 3))
            return cls(empty, empty.copy(), empty.copy(), face_ids)
        return cls(
            positions[triangles[:, 0]],
            positions[triangles[:, 1]],
            positions[triangles[:, 2]],
            face_ids,
        )

    def __len__(self) -> int:
        return len(self.face_ids)

    def intersect(
        self, origin: ArrayLike, direction: ArrayLike, tolerance: float = 1e-6
    ) -> tuple[NDArray[np.bool_], NDArray[np.float64]]:
        """
        Intersect one ray with every triangle.

        Returns:
            ``(hit, t)``: boolean mask of hit triangles and the ray distance
            for each triangle (meaningful only where ``hit``).
        """
        origin = np.asarray(origin, dtype=np.float64)
        direction = np.asarray(direction, dtype=np.float64)
        edge1 = self.v1 - self.v0
        edge2 = self.v2 - self.v0

        h = np.cross(direction, edge2)
        det = np.einsum("ij,ij->i", edge1, h)
        valid = np.abs(det) >= tolerance
        inv_det = np.divide(1.0, det, out=np.zeros_like(det), where=valid)

        s = origin - self.v0
        u = inv_det * np.einsum("ij,ij->i", s, h)
        q = np.cross(s, edge1)
        v = inv_det * (q @ direction)
        t = inv_det * np.einsum("ij,ij->i", edge2, q)

        hit = valid & (u >= 0.0) & (u <= 1.0) & (v >= 0.0) & (u + v <= 1.0) & (t > tolerance)
        return hit, t

    def touching(self, point: ArrayLike, tolerance: float = 1e-6) -> NDArray[np.bool_]:
        """
        Mask of triangles that ``point`` lies on, within ``tolerance``.

        The point must be within ``tolerance`` of the triangle's plane and its
        projection inside the triangle, edges and corners included.
        Zero-area triangles never match.
        """
        point = np.asarray(point, dtype=np.float64)
        edge1 = self.v1 - self.v0
        edge2 = self.v2 - self.v0
        w = point - self.v0

        normal = np.cross(edge1, edge2)
        length = np.linalg.norm(normal, axis=1)
        valid = length > tolerance * tolerance
        safe_length = np.where(valid, length, 1.0)
        distance = np.abs(np.einsum("ij,ij->i", w, normal)) / safe_length

        d00 = np.einsum("ij,ij->i", edge1, edge1)
        d01 = np.einsum("ij,ij->i", edge1, edge2)
        d11 = np.einsum("ij,ij->i", edge2, edge2)
        d20 = np.einsum("ij,ij->i", w, edge1)
        d21 = np.einsum("ij,ij->i", w, edge2)
        denom = d00 * d11 - d01 * d01
        denom = np.where(valid, denom, 1.0)
        u = (d11 * d20 - d01 * d21) / denom
        v = (d00 * d21 - d01 * d20) / denom

        inside = (u >= -tolerance) & (v >= -tolerance) & (u + v <= 1.0 + tolerance)
        return valid & (distance <= tolerance) & inside


def point_in_mesh(
    point: ArrayLike,
    soup: TriangleSoup,
    tolerance: float = 1e-6,
    direction: ArrayLike = RAY_DIRECTION,
) -> bool:
    """
    Odd-crossing test of ``point`` against a closed surface.

    Hits on several triangles of the same source face count once, so a ray
    through a polygon's internal diagonal is not counted twice. Non-finite
    points and empty soups are reported as outside.
    """
    point = np.asarray(point, dtype=np.float64)
    if len(soup) == 0 or not np.all(np.isfinite(point)):
        return False
    hit, _ = soup.intersect(point, direction, tolerance)
    crossings = len(np.unique(soup.face_ids[hit]))
    return crossings % 2 == 1


def point_on_surface(point: ArrayLike, soup: TriangleSoup, tolerance: float = 1e-6) -> bool:
    """Whether ``point`` lies on any triangle of ``soup`` within ``tolerance``."""
    point = np.asarray(point, dtype=np.float64)
    if len(soup) == 0 or not np.all(np.isfinite(point)):
        return False
    return bool(np.any(soup.touching(point, tolerance)))
