"""
Loop cuts across rings of quads.

Starting from a seed edge, the ring is found by stepping from each quad to
its neighbour across the edge opposite the one it was entered by. Every quad
in the ring is split into ``cuts + 1`` strips parallel to the seed's
crossing edges. Cut points are shared between neighbouring strips and
threaded into the loops of faces outside the ring, so no T-junctions remain.
"""

from typing import Optional

import numpy as np

from meshkernel.core.config import LoopCutOptions
from meshkernel.core.exceptions import InvalidSelectionError
from meshkernel.core.logging import get_logger, log_duration
from meshkernel.core.mesh import EdgeKey, Face, Mesh, Vertex, edge_key
from meshkernel.core.selection import EdgeSelection, resolve_edges
from meshkernel.operators.common import EditRecorder
from meshkernel.operators.results import OperationResult

logger = get_logger(__name__)


def _lerp_vertex(start: Vertex, end: Vertex, t: float) -> Vertex:
    vertex = start.moved_to(start.position + (end.position - start.position) * t)
    if start.normal is not None and end.normal is not None:
        normal = start.normal + (end.normal - start.normal) * t
        norm = np.linalg.norm(normal)
        vertex.normal = normal / norm if norm > 0 else None
    else:
        vertex.normal = None
    if start.uv is not None and end.uv is not None:
        vertex.uv = start.uv + (end.uv - start.uv) * t
    else:
        vertex.uv = None
    return vertex


def _edge_faces(mesh: Mesh) -> dict[EdgeKey, list[int]]:
    users: dict[EdgeKey, list[int]] = {}
    for index, face in enumerate(mesh.faces):
        for key in face.edge_keys():
            users.setdefault(key, []).append(index)
    return users


def _opposite(face: Face, key: EdgeKey) -> EdgeKey:
    keys = face.edge_keys()
    return keys[(keys.index(key) + 2) % 4]


def _edge_ring(mesh: Mesh, start: EdgeKey) -> list[tuple[int, EdgeKey]]:
    """
    Quads crossed by the loop through ``start``, each with the edge it is entered by.

    The walk goes both ways from the seed and stops at a non-quad, at an
    edge without exactly two faces, or when it comes back to the seed.

    Raises:
        InvalidSelectionError: If the seed has more than two faces or no quad.
    """
    users = _edge_faces(mesh)
    seeds = users.get(start, [])
    if len(seeds) > 2:
        raise InvalidSelectionError(f"Edge {start} is non-manifold", indices=[start])

    ring: list[tuple[int, EdgeKey]] = []
    visited: set[int] = set()
    closed = False
    for first in seeds:
        if closed:
            break
        index, key = first, start
        while index not in visited and len(mesh.faces[index]) == 4:
            visited.add(index)
            ring.append((index, key))
            key = _opposite(mesh.faces[index], key)
            if key == start:
                closed = True
                break
            if len(users[key]) != 2:
                break
            index = next(f for f in users[key] if f != index)

    if not ring:
        raise InvalidSelectionError(f"No quad ring runs through edge {start}", indices=[start])
    return ring


class _CutPoints:
    """Cut vertices per edge key, shared by every face using the edge."""

    def __init__(self, mesh: Mesh, cuts: int) -> None:
        self.mesh = mesh
        self.cuts = cuts
        self.points: dict[EdgeKey, list[int]] = {}

    def get(self, a: int, b: int) -> list[int]:
        """Cut vertices on ``(a, b)`` ordered from ``a`` to ``b``, created if needed."""
        key = edge_key(a, b)
        if key not in self.points:
            lo, hi = self.mesh.vertices[min(a, b)], self.mesh.vertices[max(a, b)]
            self.points[key] = [
                self.mesh.add_vertex(_lerp_vertex(lo, hi, k / (self.cuts + 1)))
                for k in range(1, self.cuts + 1)
            ]
        return self.find(a, b)

    def find(self, a: int, b: int) -> Optional[list[int]]:
        points = self.points.get(edge_key(a, b))
        if points is None:
            return None
        return list(points) if a < b else list(reversed(points))


def _uv_steps(start: np.ndarray, end: np.ndarray, cuts: int) -> list[np.ndarray]:
    return [start + (end - start) * (k / (cuts + 1)) for k in range(cuts + 2)]


def _split_quad(recorder: EditRecorder, points: _CutPoints, index: int, entry: EdgeKey) -> list[int]:
    face = recorder.mesh.faces[index]
    shift = face.edge_keys().index(entry)
    q0, q1, q2, q3 = face.vertices[shift:] + face.vertices[:shift]
    side_a = [q0] + points.get(q0, q1) + [q1]
    side_b = [q3] + points.get(q3, q2) + [q2]

    uvs_a = uvs_b = None
    if face.uvs is not None:
        uv = face.uvs[shift:] + face.uvs[:shift]
        uvs_a = _uv_steps(uv[0], uv[1], points.cuts)
        uvs_b = _uv_steps(uv[3], uv[2], points.cuts)

    produced = []
    for k in range(points.cuts + 1):
        uvs = None
        if uvs_a is not None:
            uvs = [uvs_a[k], uvs_a[k + 1], uvs_b[k + 1], uvs_b[k]]
        strip = face.derive([side_a[k], side_a[k + 1], side_b[k + 1], side_b[k]], uvs=uvs)
        if k == 0:
            recorder.replace_face(index, strip)
            produced.append(index)
        else:
            produced.append(recorder.add_face(strip))
    return produced


def _thread_points(face: Face, points: _CutPoints) -> None:
    """Insert cut vertices between the corners of a face outside the ring."""
    loop = face.vertices
    n = len(loop)
    new_loop: list[int] = []
    new_uvs: list[np.ndarray] = []
    changed = False
    for i in range(n):
        a, b = loop[i], loop[(i + 1) % n]
        new_loop.append(a)
        if face.uvs is not None:
            new_uvs.append(face.uvs[i])
        between = points.find(a, b)
        if between is None:
            continue
        changed = True
        new_loop.extend(between)
        if face.uvs is not None:
            new_uvs.extend(_uv_steps(face.uvs[i], face.uvs[(i + 1) % n], points.cuts)[1:-1])
    if changed:
        face.vertices = new_loop
        if face.uvs is not None:
            face.uvs = new_uvs


def loop_cut(
    mesh: Mesh,
    edges: EdgeSelection,
    options: LoopCutOptions = LoopCutOptions(),
) -> OperationResult:
    """
    Cut the quad ring through each seed edge into ``options.cuts + 1`` strips.

    The first strip of every quad takes over the quad's index. Every seed is
    checked before the mesh is touched. A seed already split by an earlier
    ring in the same call is skipped.

    Raises:
        InvalidSelectionError: If the selection is empty or malformed, or a
            seed edge has no quad ring or more than two faces.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    pairs = resolve_edges(mesh, edges)
    for a, b in pairs:
        _edge_ring(mesh, edge_key(a, b))

    recorder = EditRecorder(mesh)
    rings = 0

    with log_duration(logger, "loop_cut", edges=len(pairs), cuts=options.cuts) as extra:
        for a, b in pairs:
            if mesh.find_edge(a, b) is None:
                continue
            wire = mesh.wire_edges()
            points = _CutPoints(mesh, options.cuts)
            produced: set[int] = set()
            for index, entry in _edge_ring(mesh, edge_key(a, b)):
                produced.update(_split_quad(recorder, points, index, entry))
            for index, face in enumerate(mesh.faces):
                if index not in produced:
                    _thread_points(face, points)
            mesh.rebuild_edges(wire)
            rings += 1

        result = recorder.result()
        extra["rings"] = rings
        extra.update(result.summary())

    return result
