"""
Edge, vertex and face bevels.
"""

import numpy as np

from meshkernel.core.config import BevelOptions
from meshkernel.core.exceptions import InvalidSelectionError
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
from meshkernel.geometry.vectors import face_normal, normalize, plane_basis
from meshkernel.operators.common import EditRecorder, add_ring, face_frame
from meshkernel.operators.results import OperationResult

logger = get_logger(__name__)


def bevel_edges(
    mesh: Mesh,
    edges: EdgeSelection,
    options: BevelOptions = BevelOptions(),
) -> OperationResult:
    """
    Bevel edges by adding a ribbon of quads, in place.

    Each edge ``(a, b)`` is copied ``segments`` times, stepping
    ``distance / segments`` along the average normal of the faces that use
    it, and consecutive copies are joined by quads. Edges with no usable
    adjacent normal (wire edges, or faces whose normals cancel) are skipped
    with a warning.

    Raises:
        InvalidSelectionError: If the selection is empty, malformed or names
            an edge the mesh does not have.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    pairs = resolve_edges(mesh, edges)
    recorder = EditRecorder(mesh)

    with log_duration(logger, "bevel_edges", edges=len(pairs), segments=options.segments) as extra:
        skipped = []
        for a, b in pairs:
            users = mesh.faces_using_edge(a, b)
            normals = [face_frame(mesh, mesh.faces[f])[0] for f in users]
            direction = normalize(sum((n for n in normals if n is not None), np.zeros(3)))
            if not direction.any():
                skipped.append(f"{a}-{b}")
                continue

            material = options.material_index
            if material is None:
                material = mesh.faces[users[0]].material_index
            step = direction * (options.distance / options.segments)

            prev_a, prev_b = a, b
            for k in range(1, options.segments + 1):
                next_a = mesh.add_vertex(mesh.vertices[a].moved_to(mesh.vertices[a].position + step * k))
                next_b = mesh.add_vertex(mesh.vertices[b].moved_to(mesh.vertices[b].position + step * k))
                recorder.add_face(Face([prev_a, prev_b, next_b, next_a], material_index=material))
                prev_a, prev_b = next_a, next_b

        if skipped:
            logger.warning("bevel_skipped_edges", edges=skipped)
        result = recorder.result()
        extra.update(result.summary())

    return result


def bevel_vertices(
    mesh: Mesh,
    vertices: VertexSelection,
    options: BevelOptions = BevelOptions(),
) -> OperationResult:
    """
    Bevel vertices with a fan of triangles, in place.

    A ring vertex is placed ``distance`` along every incident edge. The ring
    is ordered counter-clockwise around the vertex normal (the explicit
    normal if set, else the average of the adjacent face normals) and joined
    back to the original vertex with triangles facing along that normal.

    Raises:
        InvalidSelectionError: If the selection is empty or out of range, or
            a vertex has fewer than two incident edges.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    selected = resolve_vertices(mesh, vertices)
    adjacency = mesh.adjacency()
    lonely = [v for v in selected if len(adjacency[v]) < 2]
    if lonely:
        raise InvalidSelectionError(
            f"Vertices need at least two incident edges to bevel: {lonely}", indices=lonely
        )
    recorder = EditRecorder(mesh)

    with log_duration(logger, "bevel_vertices", vertices=len(selected)) as extra:
        for v in selected:
            vertex = mesh.vertices[v]
            origin = vertex.position
            neighbors = sorted(adjacency[v])
            directions = [normalize(mesh.vertices[u].position - origin) for u in neighbors]
            ring_points = [origin + d * options.distance for d in directions]

            normal = _vertex_normal(mesh, v, ring_points)
            u_axis, v_axis = plane_basis(normal)
            angles = [np.arctan2(d @ v_axis, d @ u_axis) for d in directions]
            order = sorted(range(len(neighbors)), key=lambda i: angles[i])
            ring = [mesh.add_vertex(vertex.moved_to(ring_points[i])) for i in order]

            material = options.material_index
            if material is None:
                faces_using = mesh.faces_using_vertex(v)
                material = mesh.faces[faces_using[0]].material_index if faces_using else 0

            count = len(ring)
            # two neighbours span a single wedge, not a closed fan
            spans = 1 if count == 2 else count
            for i in range(spans):
                recorder.add_face(Face([v, ring[i], ring[(i + 1) % count]], material_index=material))

        result = recorder.result()
        extra.update(result.summary())

    return result


def _vertex_normal(mesh: Mesh, index: int, ring_points: list) -> np.ndarray:
    vertex = mesh.vertices[index]
    if vertex.normal is not None and np.linalg.norm(vertex.normal) > 0:
        return normalize(vertex.normal)
    normals = [face_frame(mesh, mesh.faces[f])[0] for f in mesh.faces_using_vertex(index)]
    average = normalize(sum((n for n in normals if n is not None), np.zeros(3)))
    if average.any():
        return average
    fallback = face_normal(ring_points) if len(ring_points) >= 3 else None
    return fallback if fallback is not None else np.array([0.0, 0.0, 1.0])


def bevel_faces(
    mesh: Mesh,
    faces: FaceSelection,
    options: BevelOptions = BevelOptions(),
) -> OperationResult:
    """
    Bevel faces, in place.

    Like an inset, but each corner moves ``distance`` along
    ``normalize(normalize(centroid - v) + normal)``, lifting the replacement
    polygon off the surface. Faces with a degenerate normal are skipped with
    a warning.

    Raises:
        InvalidSelectionError: If the selection is empty or out of range.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    selected = resolve_faces(mesh, faces)
    recorder = EditRecorder(mesh)

    with log_duration(logger, "bevel_faces", faces=len(selected)) as extra:
        skipped = []
        for index in selected:
            normal, center = face_frame(mesh, mesh.faces[index])
            if normal is None:
                skipped.append(index)
                continue
            points = mesh.face_positions(index)
            offsets = np.array([normalize(normalize(center - p) + normal) for p in points])
            add_ring(
                mesh,
                recorder,
                index,
                points + offsets * options.distance,
                material_index=options.material_index,
            )

        if skipped:
            logger.warning("bevel_skipped_degenerate", faces=skipped)
        result = recorder.result()
        extra.update(result.summary())

    return result
