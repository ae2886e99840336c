"""
Vector helpers shared by the triangulator, the operators and the CSG engine.

All functions take plain numpy arrays so they can be used without a Mesh.
"""

from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

EPSILON = 1e-12


def normalize(vector: ArrayLike, epsilon: float = EPSILON) -> NDArray[np.float64]:
    """Unit vector along ``vector``; the zero vector if its length is below epsilon."""
    v = np.asarray(vector, dtype=np.float64)
    length = np.linalg.norm(v)
    if length < epsilon:
        return np.zeros_like(v)
    return v / length


def newell_normal(points: ArrayLike) -> NDArray[np.float64]:
    """
    Unnormalized polygon normal by Newell's method.

    Its length is twice the polygon area, and its direction follows the
    winding by the right-hand rule. Robust on concave loops.
    """
    pts = np.asarray(points, dtype=np.float64)
    nxt = np.roll(pts, -1, axis=0)
    return np.array([
        np.sum((pts[:, 1] - nxt[:, 1]) * (pts[:, 2] + nxt[:, 2])),
        np.sum((pts[:, 2] - nxt[:, 2]) * (pts[:, 0] + nxt[:, 0])),
        np.sum((pts[:, 0] - nxt[:, 0]) * (pts[:, 1] + nxt[:, 1])),
    ])


def face_normal(points: ArrayLike, epsilon: float = EPSILON) -> Optional[NDArray[np.float64]]:
    """
    Unit normal of a polygon loop, or None if the loop is degenerate.

    Uses Newell's method and falls back to the first non-collinear
    corner triple.
    """
    pts = np.asarray(points, dtype=np.float64)
    if len(pts) < 3:
        return None
    n = newell_normal(pts)
    length = np.linalg.norm(n)
    if length > epsilon:
        return n / length

    for i in range(len(pts) - 2):
        cross = np.cross(pts[i + 1] - pts[i], pts[i + 2] - pts[i])
        length = np.linalg.norm(cross)
        if length > epsilon:
            return cross / length
    return None


def centroid(points: ArrayLike) -> NDArray[np.float64]:
    """Arithmetic mean of the corner positions."""
    return np.asarray(points, dtype=np.float64).mean(axis=0)


def polygon_area(points: ArrayLike) -> float:
    """Area of a planar polygon loop."""
    return float(np.linalg.norm(newell_normal(points)) / 2.0)


def triangle_area(a: ArrayLike, b: ArrayLike, c: ArrayLike) -> float:
    a = np.asarray(a, dtype=np.float64)
    return float(np.linalg.norm(np.cross(np.asarray(b) - a, np.asarray(c) - a)) / 2.0)


def barycentric(
    p: ArrayLike, a: ArrayLike, b: ArrayLike, c: ArrayLike
) -> Optional[tuple[float, float, float]]:
    """
    Barycentric coordinates of ``p`` in triangle ``abc``.

    Works for 2D and 3D points (3D points are projected onto the triangle
    plane). Returns None for a degenerate triangle.
    """
    a = np.asarray(a, dtype=np.float64)
    v0 = np.asarray(c, dtype=np.float64) - a
    v1 = np.asarray(b, dtype=np.float64) - a
    v2 = np.asarray(p, dtype=np.float64) - a

    dot00 = v0 @ v0
    dot01 = v0 @ v1
    dot02 = v0 @ v2
    dot11 = v1 @ v1
    dot12 = v1 @ v2

    denom = dot00 * dot11 - dot01 * dot01
    if abs(denom) < EPSILON:
        return None
    u = (dot11 * dot02 - dot01 * dot12) / denom
    v = (dot00 * dot12 - dot01 * dot02) / denom
    return (float(1.0 - u - v), float(v), float(u))


def point_in_triangle(
    p: ArrayLike, a: ArrayLike, b: ArrayLike, c: ArrayLike, epsilon: float = 1e-10
) -> bool:
    """True if ``p`` lies inside or on the border of triangle ``abc``."""
    coords = barycentric(p, a, b, c)
    if coords is None:
        return False
    return all(w >= -epsilon for w in coords)


def plane_basis(normal: ArrayLike) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Orthonormal ``(u, v)`` spanning the plane with the given normal.

    ``u x v`` points along ``normal``, so projecting a counter-clockwise
    loop (seen from the normal side) keeps it counter-clockwise in 2D.
    """
    n = normalize(normal)
    helper = np.array([1.0, 0.0, 0.0]) if abs(n[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
    u = normalize(np.cross(helper, n))
    v = np.cross(n, u)
    return u, v


def project_to_plane(points: ArrayLike, normal: ArrayLike) -> NDArray[np.float64]:
    """Project 3D points to 2D coordinates on the plane of ``normal``."""
    u, v = plane_basis(normal)
    pts = np.asarray(points, dtype=np.float64)
    return np.column_stack((pts @ u, pts @ v))


def cross_2d(o: ArrayLike, a: ArrayLike, b: ArrayLike) -> float:
    """z component of ``(a - o) x (b - o)``; positive for a left turn."""
    return float((a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0]))


def angle_between(a: ArrayLike, b: ArrayLike) -> float:
    """Unsigned angle in radians between two vectors (0 for zero vectors)."""
    na = normalize(a)
    nb = normalize(b)
    if not na.any() or not nb.any():
        return 0.0
    return float(np.arccos(np.clip(na @ nb, -1.0, 1.0)))
