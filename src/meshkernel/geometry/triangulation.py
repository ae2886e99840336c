"""
Ear-clipping triangulation of polygon faces.

The polygon is projected onto the plane of its Newell normal, then ears are
clipped one at a time. Among the ears that are convex, non-degenerate and
contain no other loop vertex, the one with the largest interior angle is
clipped first, which keeps slivers out of the result for fan-like polygons.
A loop of ``n`` vertices always yields exactly ``n - 2`` triangles.
"""

from typing import Union

import numpy as np
from numpy.typing import NDArray

from meshkernel.core.logging import get_logger
from meshkernel.core.mesh import Face, Mesh
from meshkernel.geometry.vectors import (
    angle_between,
    cross_2d,
    face_normal,
    point_in_triangle,
    project_to_plane,
    triangle_area,
)

logger = get_logger(__name__)

AREA_EPSILON = 1e-10


def triangulate(mesh: Mesh, face: Union[int, Face], epsilon: float = AREA_EPSILON) -> list[Face]:
    """
    Split a face into triangles.

    Faces with three or fewer vertices are returned as a single clone.
    Every triangle inherits the face's material index, explicit normal,
    metadata and the matching per-corner UVs. Triangles keep the winding of
    the source loop.

    Args:
        mesh: Mesh owning the face's vertices.
        face: Face or face index.
        epsilon: Minimum ear area (and 2D turn) to count as non-degenerate.

    Returns:
        ``len(face) - 2`` triangles (one clone for triangles).
    """
    if isinstance(face, int):
        face = mesh.faces[face]
    if len(face.vertices) <= 3:
        return [face.clone()]

    return [_corner_face(face, tri) for tri in ear_clip(mesh.face_positions(face), epsilon)]


def ear_clip(points: NDArray[np.float64], epsilon: float = AREA_EPSILON) -> list[tuple[int, int, int]]:
    """Triangulate a 3D polygon loop, returning corner-index triples."""
    n = len(points)
    if n < 3:
        return []
    normal = face_normal(points)
    if normal is None:
        normal = np.array([0.0, 0.0, 1.0])
    flat = project_to_plane(points, normal)

    remaining = list(range(n))
    triangles: list[tuple[int, int, int]] = []
    while len(remaining) > 3:
        ear = _pick_ear(points, flat, remaining, epsilon)
        m = len(remaining)
        triangles.append((remaining[(ear - 1) % m], remaining[ear], remaining[(ear + 1) % m]))
        del remaining[ear]
    triangles.append((remaining[0], remaining[1], remaining[2]))
    return triangles


def _pick_ear(
    points: NDArray[np.float64],
    flat: NDArray[np.float64],
    remaining: list[int],
    epsilon: float,
) -> int:
    m = len(remaining)
    best = -1
    best_angle = -1.0
    first_valid = -1

    for i in range(m):
        prev, cur, nxt = remaining[(i - 1) % m], remaining[i], remaining[(i + 1) % m]
        if cross_2d(flat[prev], flat[cur], flat[nxt]) <= epsilon:
            continue  # reflex or collinear
        if triangle_area(points[prev], points[cur], points[nxt]) <= epsilon:
            continue
        if first_valid < 0:
            first_valid = i

        blocked = False
        for other in remaining:
            if other in (prev, cur, nxt):
                continue
            if point_in_triangle(flat[other], flat[prev], flat[cur], flat[nxt]):
                blocked = True
                break
        if blocked:
            continue

        angle = angle_between(flat[prev] - flat[cur], flat[nxt] - flat[cur])
        if angle > best_angle:
            best_angle = angle
            best = i

    if best >= 0:
        return best
    return first_valid if first_valid >= 0 else 0


def _corner_face(face: Face, corners: tuple[int, int, int]) -> Face:
    loop = [face.vertices[c] for c in corners]
    overrides = {}
    if face.normal is not None:
        overrides["normal"] = face.normal.copy()
    if face.uvs is not None:
        overrides["uvs"] = [face.uvs[c].copy() for c in corners]
    return face.derive(loop, **overrides)


def triangulate_mesh(mesh: Mesh) -> Mesh:
    """
    New mesh with every face of ``mesh`` triangulated.

    Vertices are copied unchanged, so vertex indices are preserved.
    """
    result = Mesh(name=mesh.name, metadata=dict(mesh.metadata))
    for vertex in mesh.vertices:
        result.add_vertex(vertex.clone())

    skipped = 0
    for face in mesh.faces:
        for tri in triangulate(mesh, face):
            if len(set(tri.vertices)) < 3:
                skipped += 1
                continue
            result.append_face(tri)

    logger.debug(
        "triangulate_mesh",
        faces=len(mesh.faces),
        triangles=len(result.faces),
        skipped=skipped,
    )
    return result


def triangle_array(mesh: Mesh) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """
    Triangulated connectivity as arrays.

    Returns:
        ``(triangles, face_ids)``: a (T, 3) array of vertex indices and a
        (T,) array giving the source face index of each triangle.
    """
    triangles: list[list[int]] = []
    face_ids: list[int] = []
    for index, face in enumerate(mesh.faces):
        for tri in triangulate(mesh, face):
            triangles.append(tri.vertices)
            face_ids.append(index)
    if not triangles:
        return np.zeros((0, 3), dtype=np.int64), np.zeros(0, dtype=np.int64)
    return np.array(triangles, dtype=np.int64), np.array(face_ids, dtype=np.int64)
