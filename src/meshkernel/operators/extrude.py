"""
Face, edge and vertex extrusion.

Each selected face is pushed along its normal independently: a ring of new
vertices is created at ``v + normal * distance`` (optionally scaled about the
offset centroid), the face is stitched to the ring with one quad per
boundary edge, and the ring becomes the cap.

Edges are extruded into quads, sharing the copy of a vertex between
selected edges that meet there. Vertices are extruded into wire edges.
"""

import numpy as np
from numpy.typing import NDArray

from meshkernel.core.config import EdgeExtrudeOptions, ExtrudeOptions, VertexExtrudeOptions
from meshkernel.core.logging import get_logger, log_duration
from meshkernel.core.mesh import Face, Mesh
from meshkernel.core.selection import (
    EdgeSelection,
    FaceSelection,
    VertexSelection,
    resolve_edges,
    resolve_faces,
    resolve_vertices,
)
from meshkernel.geometry.vectors import normalize
from meshkernel.operators.common import EditRecorder, face_frame
from meshkernel.operators.results import OperationResult

logger = get_logger(__name__)

# Corners sharper than this are not mitered further when edges meet
MITER_LIMIT = 2.0


def extrude_faces(
    mesh: Mesh,
    faces: FaceSelection,
    options: ExtrudeOptions = ExtrudeOptions(),
) -> OperationResult:
    """
    Extrude faces along their normals, in place.

    The cap keeps the original winding, so its normal equals the original
    face normal, and it takes over the original face's index. With
    ``keep_original`` the original face is kept as well, reversed, which
    closes the extruded prism.

    Faces whose normal cannot be computed are skipped with a warning.

    Args:
        mesh: Mesh to edit.
        faces: Face indices or a ``Selection``.
        options: Extrusion options.

    Returns:
        OperationResult listing the ring vertices, side quads and caps.

    Raises:
        InvalidSelectionError: If the selection is empty or out of range.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    selected = resolve_faces(mesh, faces)
    recorder = EditRecorder(mesh)

    with log_duration(logger, "extrude_faces", faces=len(selected)) as extra:
        skipped = []
        for index in selected:
            face = mesh.faces[index]
            normal, center = face_frame(mesh, face)
            if normal is None:
                skipped.append(index)
                continue

            offset = normal * options.distance
            new_center = center + offset
            loop = list(face.vertices)
            ring = []
            for v in loop:
                position = mesh.vertices[v].position + offset
                position = new_center + (position - new_center) * options.scale
                ring.append(mesh.add_vertex(mesh.vertices[v].moved_to(position)))

            material = (
                face.material_index if options.material_index is None else options.material_index
            )
            n = len(loop)
            for i in range(n):
                j = (i + 1) % n
                recorder.add_face(
                    face.derive([loop[i], loop[j], ring[j], ring[i]], material_index=material)
                )

            cap = face.clone()
            cap.vertices = ring
            recorder.replace_face(index, cap)
            if options.keep_original:
                recorder.add_face(face.reversed())

        if skipped:
            logger.warning("extrude_skipped_degenerate", faces=skipped)
        result = recorder.result()
        extra.update(result.summary())

    return result


def _edge_direction(mesh: Mesh, a: int, b: int, users: list[int]) -> NDArray[np.float64]:
    """
    Extrusion direction of edge ``(a, b)``.

    A boundary edge moves outward in the plane of its face. Other edges move
    perpendicular to the edge and the world up axis (+Z when the edge is
    nearly vertical). Zero for a zero-length edge.
    """
    pa, pb = mesh.vertices[a].position, mesh.vertices[b].position
    along = normalize(pb - pa)
    if len(users) == 1:
        normal, center = face_frame(mesh, mesh.faces[users[0]])
        if normal is not None:
            outward = normalize(np.cross(along, normal))
            if outward @ ((pa + pb) / 2.0 - center) < 0:
                outward = -outward
            return outward
    up = np.array([0.0, 1.0, 0.0])
    if abs(along @ up) > 0.9:
        up = np.array([0.0, 0.0, 1.0])
    return normalize(np.cross(along, up))


def _mitered(directions: list[NDArray[np.float64]]) -> NDArray[np.float64]:
    """Offset that keeps every incident edge ``1`` away along its own direction."""
    average = normalize(np.sum(directions, axis=0))
    if not average.any():
        return average
    closest = min(float(average @ d) for d in directions)
    return average / max(closest, 1.0 / MITER_LIMIT)


def extrude_edges(
    mesh: Mesh,
    edges: EdgeSelection,
    options: EdgeExtrudeOptions = EdgeExtrudeOptions(),
) -> OperationResult:
    """
    Extrude edges into quads, in place.

    Every selected edge ``(a, b)`` gets copies ``a'``, ``b'`` moved by
    ``distance`` and a quad joining the two. Selected edges that meet share
    the copy of their common vertex; its offset is mitered so each strip
    keeps its width. Against a single adjacent face the quad is wound to
    match that face; otherwise it follows ``(a, b, b', a')``.

    With ``direction`` every edge moves that way; otherwise see
    ``_edge_direction``. Zero-length edges are skipped with a warning.

    Raises:
        InvalidSelectionError: If the selection is empty, malformed or names
            an edge the mesh does not have.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    pairs = resolve_edges(mesh, edges)
    recorder = EditRecorder(mesh)
    fixed = normalize(options.direction) if options.direction is not None else None

    with log_duration(logger, "extrude_edges", edges=len(pairs)) as extra:
        users = {(a, b): mesh.faces_using_edge(a, b) for a, b in pairs}
        directions: dict[tuple[int, int], NDArray[np.float64]] = {}
        skipped = []
        for a, b in pairs:
            direction = fixed if fixed is not None else _edge_direction(mesh, a, b, users[(a, b)])
            if direction.any():
                directions[(a, b)] = direction
            else:
                skipped.append(f"{a}-{b}")

        incident: dict[int, list[NDArray[np.float64]]] = {}
        for (a, b), direction in directions.items():
            incident.setdefault(a, []).append(direction)
            incident.setdefault(b, []).append(direction)

        copies = {}
        for v, vectors in incident.items():
            offset = vectors[0] if fixed is not None else _mitered(vectors)
            vertex = mesh.vertices[v]
            copies[v] = mesh.add_vertex(vertex.moved_to(vertex.position + offset * options.distance))

        for a, b in directions:
            faces = users[(a, b)]
            material = options.material_index
            if material is None:
                material = mesh.faces[faces[0]].material_index if faces else 0
            if len(faces) == 1 and (a, b) in mesh.faces[faces[0]].edge_pairs():
                loop = [b, a, copies[a], copies[b]]
            else:
                loop = [a, b, copies[b], copies[a]]
            recorder.add_face(Face(loop, material_index=material))

        if skipped:
            logger.warning("extrude_skipped_edges", edges=skipped)
        result = recorder.result()
        extra.update(result.summary())

    return result


def _vertex_direction(mesh: Mesh, index: int) -> NDArray[np.float64]:
    """Average normal of the faces around a vertex, then its own normal, then +Y."""
    normals = [face_frame(mesh, mesh.faces[f])[0] for f in mesh.faces_using_vertex(index)]
    direction = normalize(sum((n for n in normals if n is not None), np.zeros(3)))
    if direction.any():
        return direction
    own = mesh.vertices[index].normal
    if own is not None and normalize(own).any():
        return normalize(own)
    return np.array([0.0, 1.0, 0.0])


def extrude_vertices(
    mesh: Mesh,
    vertices: VertexSelection,
    options: VertexExtrudeOptions = VertexExtrudeOptions(),
) -> OperationResult:
    """
    Pull a copy of each vertex out by ``distance``, joined by a wire edge.

    The copy moves along ``direction`` when given, else along
    ``_vertex_direction``. The original vertex and its faces are untouched,
    so the result has new vertices and edges but no new faces.

    Raises:
        InvalidSelectionError: If the selection is empty or out of range.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    selected = resolve_vertices(mesh, vertices)
    recorder = EditRecorder(mesh)
    fixed = normalize(options.direction) if options.direction is not None else None

    with log_duration(logger, "extrude_vertices", vertices=len(selected)) as extra:
        for index in selected:
            direction = fixed if fixed is not None else _vertex_direction(mesh, index)
            vertex = mesh.vertices[index]
            tip = mesh.add_vertex(vertex.moved_to(vertex.position + direction * options.distance))
            mesh.add_edge(index, tip)
        result = recorder.result()
        extra.update(result.summary())

    return result
