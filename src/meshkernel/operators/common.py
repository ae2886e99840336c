"""
Helpers shared by the topology operators.
"""

from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from meshkernel.core.mesh import Face, Mesh
from meshkernel.geometry.vectors import face_normal
from meshkernel.operators.results import OperationResult


class EditRecorder:
    """
    Tracks what an operator adds so the result can report final indices.

    Vertices and faces are only appended during an edit, so new ones are
    everything past the counts taken at construction. New edges are found
    by key, since edge indices shift when unused edges are pruned.
    """

    def __init__(self, mesh: Mesh) -> None:
        self.mesh = mesh
        self._first_vertex = len(mesh.vertices)
        self._edge_keys = {edge.key for edge in mesh.edges}
        self.new_faces: list[int] = []

    def add_face(self, face: Face) -> int:
        index = self.mesh.append_face(face)
        self.new_faces.append(index)
        return index

    def replace_face(self, index: int, face: Face) -> None:
        """Swap the face at ``index`` for ``face``, keeping the index."""
        self.mesh.faces[index] = face
        for a, b in face.edge_pairs():
            self.mesh.add_edge(a, b)
        self.new_faces.append(index)

    def result(self, removed_faces: Sequence[int] = ()) -> OperationResult:
        remap = self.mesh.remove_faces(removed_faces) if removed_faces else None
        new_faces = list(dict.fromkeys(self.new_faces))
        if remap is not None:
            new_faces = [remap[i] for i in new_faces if i in remap]
        return OperationResult(
            new_vertices=list(range(self._first_vertex, len(self.mesh.vertices))),
            new_edges=[
                i for i, edge in enumerate(self.mesh.edges) if edge.key not in self._edge_keys
            ],
            new_faces=new_faces,
            removed_faces=sorted(removed_faces),
        )


def face_frame(mesh: Mesh, face: Face) -> tuple[Optional[NDArray[np.float64]], NDArray[np.float64]]:
    """``(normal, centroid)`` of a face; normal is None when degenerate."""
    points = mesh.face_positions(face)
    return face_normal(points), points.mean(axis=0)


def add_ring(
    mesh: Mesh,
    recorder: EditRecorder,
    face_index: int,
    positions: NDArray[np.float64],
    material_index: Optional[int] = None,
    uv_factor: Optional[float] = None,
) -> list[int]:
    """
    Replace a face by an inner copy of its loop plus a ring of side quads.

    A new vertex is created at each of ``positions`` (one per corner,
    copying the corner's attributes). The inner face takes over
    ``face_index``; one quad ``(v_i, v_i+1, w_i+1, w_i)`` is appended per
    boundary edge, so every face keeps the original winding.

    Args:
        uv_factor: When the face has per-corner UVs, move the inner UVs this
            fraction toward their centroid; None copies them unchanged.

    Returns:
        Indices of the inner ring vertices, in loop order.
    """
    face = mesh.faces[face_index]
    loop = face.vertices
    ring = [
        mesh.add_vertex(mesh.vertices[v].moved_to(p)) for v, p in zip(loop, positions)
    ]

    inner = face.clone()
    inner.vertices = list(ring)
    if inner.uvs is not None and uv_factor is not None:
        uv_center = np.mean(inner.uvs, axis=0)
        inner.uvs = [uv + (uv_center - uv) * uv_factor for uv in inner.uvs]
    recorder.replace_face(face_index, inner)

    material = face.material_index if material_index is None else material_index
    n = len(loop)
    for i in range(n):
        j = (i + 1) % n
        recorder.add_face(face.derive([loop[i], loop[j], ring[j], ring[i]], material_index=material))
    return ring
