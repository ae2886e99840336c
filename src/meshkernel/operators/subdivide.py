"""
Face and surface subdivision.

``subdivide_faces`` edits a mesh in place and keeps it crack-free by
threading the new edge midpoints into the loops of neighbouring faces.
``subdivide_surface`` builds a new, uniformly refined mesh.
"""

from typing import Optional

import numpy as np

from meshkernel.core.config import SmoothingOptions, SubdivisionOptions
from meshkernel.core.logging import get_logger, log_duration, mesh_fields
from meshkernel.core.mesh import Face, Mesh, Vertex, edge_key
from meshkernel.core.selection import FaceSelection, resolve_faces
from meshkernel.geometry.triangulation import triangulate
from meshkernel.operators.results import OperationResult
from meshkernel.operators.smoothing import smooth_vertices

logger = get_logger(__name__)


def _blend(vertices: list[Vertex], position: np.ndarray) -> Vertex:
    """New vertex at ``position`` averaging the normals and UVs of ``vertices``."""
    blended = vertices[0].moved_to(position)
    normals = [v.normal for v in vertices if v.normal is not None]
    if len(normals) == len(vertices):
        average = np.mean(normals, axis=0)
        norm = np.linalg.norm(average)
        blended.normal = average / norm if norm > 0 else None
    else:
        blended.normal = None
    uvs = [v.uv for v in vertices if v.uv is not None]
    blended.uv = np.mean(uvs, axis=0) if len(uvs) == len(vertices) else None
    return blended


class _MidpointCache:
    """Creates each edge midpoint once and shares it between faces."""

    def __init__(self, mesh: Mesh) -> None:
        self.mesh = mesh
        self.points: dict[str, int] = {}

    def get(self, a: int, b: int) -> int:
        key = edge_key(a, b)
        if key not in self.points:
            va, vb = self.mesh.vertices[a], self.mesh.vertices[b]
            self.points[key] = self.mesh.add_vertex(
                _blend([va, vb], (va.position + vb.position) / 2.0)
            )
        return self.points[key]

    def find(self, a: int, b: int) -> Optional[int]:
        return self.points.get(edge_key(a, b))


def _quadrangulate(face: Face, center: int, mids: list[int]) -> list[Face]:
    """Quads ``(v_i, m_i, c, m_i-1)`` around a face center."""
    loop = face.vertices
    n = len(loop)
    quads = []
    for i in range(n):
        uvs = None
        if face.uvs is not None:
            uv = face.uvs
            uvs = [
                uv[i],
                (uv[i] + uv[(i + 1) % n]) / 2.0,
                np.mean(uv, axis=0),
                (uv[i - 1] + uv[i]) / 2.0,
            ]
        quads.append(face.derive([loop[i], mids[i], center, mids[i - 1]], uvs=uvs))
    return quads


def subdivide_faces(
    mesh: Mesh,
    faces: FaceSelection,
    options: SubdivisionOptions = SubdivisionOptions(),
) -> OperationResult:
    """
    Split each selected face into quads around a new center vertex, in place.

    Edge midpoints are shared between selected faces and inserted into the
    loops of unselected neighbours, so no T-junctions remain. The first quad
    of each face takes over the face's index. ``options.levels`` repeats the
    split on the resulting quads.

    Raises:
        InvalidSelectionError: If the selection is empty or out of range.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    selected = resolve_faces(mesh, faces)
    first_vertex = len(mesh.vertices)
    known_edges = {edge.key for edge in mesh.edges}
    wire = mesh.wire_edges()
    new_faces: list[int] = []

    with log_duration(logger, "subdivide_faces", faces=len(selected), levels=options.levels) as extra:
        current = selected
        for _ in range(options.levels):
            current = _split_once(mesh, current)
            new_faces.extend(current)

        mesh.rebuild_edges(wire)

        result = OperationResult(
            new_vertices=list(range(first_vertex, len(mesh.vertices))),
            new_edges=[i for i, e in enumerate(mesh.edges) if e.key not in known_edges],
            new_faces=sorted(set(new_faces)),
        )
        extra.update(result.summary())

    return result


def _split_once(mesh: Mesh, selected: list[int]) -> list[int]:
    midpoints = _MidpointCache(mesh)
    produced: list[int] = []
    chosen = set(selected)

    for index in selected:
        face = mesh.faces[index]
        loop = face.vertices
        n = len(loop)
        center = mesh.add_vertex(
            _blend([mesh.vertices[v] for v in loop], mesh.face_positions(face).mean(axis=0))
        )
        mids = [midpoints.get(loop[i], loop[(i + 1) % n]) for i in range(n)]
        quads = _quadrangulate(face, center, mids)
        mesh.faces[index] = quads[0]
        produced.append(index)
        for quad in quads[1:]:
            mesh.faces.append(quad)
            produced.append(len(mesh.faces) - 1)

    done = chosen.union(produced)
    for index, face in enumerate(mesh.faces):
        if index in done:
            continue
        _thread_midpoints(face, midpoints)
    return produced


def _thread_midpoints(face: Face, midpoints: _MidpointCache) -> None:
    """Insert shared midpoints between the corners of an unselected face."""
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
        mid = midpoints.find(a, b)
        if mid is not None:
            changed = True
            new_loop.append(mid)
            if face.uvs is not None:
                new_uvs.append((face.uvs[i] + face.uvs[(i + 1) % n]) / 2.0)
    if changed:
        face.vertices = new_loop
        if face.uvs is not None:
            face.uvs = new_uvs


def subdivide_surface(mesh: Mesh, options: SubdivisionOptions = SubdivisionOptions()) -> Mesh:
    """
    Uniformly subdivide a whole mesh into a new mesh.

    ``catmull_clark`` quadrangulates every face around its center;
    ``loop`` splits every triangle into four (other polygons are
    triangulated first). The split is repeated ``levels`` times, then
    ``iterations`` rounds of neighbour-average smoothing are applied.
    """
    step = _catmull_clark_step if options.scheme == "catmull_clark" else _loop_step
    result = mesh.clone()
    with log_duration(logger, "subdivide_surface", scheme=options.scheme, levels=options.levels) as extra:
        for _ in range(options.levels):
            result = step(result)
        if options.iterations > 0:
            result = smooth_vertices(
                result,
                SmoothingOptions(
                    iterations=options.iterations,
                    factor=options.factor,
                    preserve_boundaries=options.preserve_boundaries,
                ),
            )
        extra.update(mesh_fields(result))
    return result


def _fresh_copy(mesh: Mesh) -> tuple[Mesh, _MidpointCache]:
    refined = Mesh(name=mesh.name, metadata=dict(mesh.metadata))
    refined.id = mesh.id
    for vertex in mesh.vertices:
        refined.add_vertex(vertex.clone())
    return refined, _MidpointCache(refined)


def _catmull_clark_step(mesh: Mesh) -> Mesh:
    refined, midpoints = _fresh_copy(mesh)
    for face in mesh.faces:
        loop = face.vertices
        n = len(loop)
        center = refined.add_vertex(
            _blend([mesh.vertices[v] for v in loop], mesh.face_positions(face).mean(axis=0))
        )
        mids = [midpoints.get(loop[i], loop[(i + 1) % n]) for i in range(n)]
        for quad in _quadrangulate(face, center, mids):
            refined.append_face(quad)
    return refined


def _loop_step(mesh: Mesh) -> Mesh:
    refined, midpoints = _fresh_copy(mesh)
    for face in mesh.faces:
        for tri in triangulate(mesh, face):
            a, b, c = tri.vertices
            ab, bc, ca = midpoints.get(a, b), midpoints.get(b, c), midpoints.get(c, a)
            for loop in ([a, ab, ca], [ab, b, bc], [ca, bc, c], [ab, bc, ca]):
                refined.append_face(tri.derive(loop))
    return refined
