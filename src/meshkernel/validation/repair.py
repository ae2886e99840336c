"""
Best-effort, in-place mesh repair.

Fixes what can be fixed without guessing: invalid face loops are dropped or
collapsed, coincident vertices are welded, unusable normals and UVs are
cleared, and the edge list is rebuilt from the faces. The returned report
says what was done; it does not claim the mesh is now valid, so callers
should run ``validate`` again.
"""

from dataclasses import asdict, dataclass

import numpy as np

from meshkernel.core.config import RepairOptions
from meshkernel.core.logging import get_logger, mesh_fields
from meshkernel.core.mesh import Mesh
from meshkernel.operators.merge import (
    merge_vertices,
    remove_degenerate_faces,
    remove_orphaned_vertices,
)

logger = get_logger(__name__)


@dataclass
class RepairReport:
    """Counts of each repair action taken."""

    original_vertices: int = 0
    original_faces: int = 0
    out_of_range_faces_removed: int = 0
    repeated_indices_collapsed: int = 0
    degenerate_faces_removed: int = 0
    vertices_welded: int = 0
    zero_area_faces_removed: int = 0
    orphaned_vertices_removed: int = 0
    normals_cleared: int = 0
    uvs_cleared: int = 0
    result_vertices: int = 0
    result_faces: int = 0

    @property
    def changed(self) -> bool:
        counts = asdict(self)
        for key in ("original_vertices", "original_faces", "result_vertices", "result_faces"):
            counts.pop(key)
        return any(counts.values())

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def _usable(vector: np.ndarray) -> bool:
    return bool(np.all(np.isfinite(vector)) and np.linalg.norm(vector) > 0.0)


def repair(mesh: Mesh, options: RepairOptions = RepairOptions()) -> RepairReport:
    """
    Repair ``mesh`` in place.

    Steps, in order: drop faces with out-of-range indices, collapse repeated
    consecutive indices, drop faces with fewer than 3 distinct vertices,
    weld vertices within ``weld_tolerance``, drop zero-area faces, clear
    non-finite or zero normals and non-finite UVs, remove orphaned vertices
    and rebuild the edge list.
    """
    report = RepairReport(original_vertices=len(mesh.vertices), original_faces=len(mesh.faces))
    count = len(mesh.vertices)
    wire = mesh.wire_edges()

    kept = []
    for face in mesh.faces:
        if not all(0 <= v < count for v in face.vertices):
            report.out_of_range_faces_removed += 1
            continue
        loop = [v for i, v in enumerate(face.vertices) if v != face.vertices[i - 1]]
        if len(loop) != len(face.vertices):
            report.repeated_indices_collapsed += len(face.vertices) - len(loop)
            face.vertices = loop
            face.uvs = None
        if len(set(loop)) < 3:
            report.degenerate_faces_removed += 1
            continue
        kept.append(face)
    mesh.faces = kept
    mesh.rebuild_edges(wire)

    if options.weld_tolerance > 0.0:
        merged = merge_vertices(mesh, options.weld_tolerance)
        report.vertices_welded = merged.removed_count
        report.degenerate_faces_removed += len(merged.dropped_faces)

    if options.remove_zero_area:
        report.zero_area_faces_removed = len(remove_degenerate_faces(mesh, options.area_epsilon))

    for vertex in mesh.vertices:
        if vertex.normal is not None and not _usable(vertex.normal):
            vertex.normal = None
            report.normals_cleared += 1
        if vertex.uv is not None and not np.all(np.isfinite(vertex.uv)):
            vertex.uv = None
            report.uvs_cleared += 1
    for face in mesh.faces:
        if face.normal is not None and not _usable(face.normal):
            face.normal = None
            report.normals_cleared += 1
        if face.uvs is not None and (
            len(face.uvs) != len(face.vertices)
            or not all(np.all(np.isfinite(uv)) for uv in face.uvs)
        ):
            face.uvs = None
            report.uvs_cleared += 1

    if options.remove_orphans:
        before = len(mesh.vertices)
        remove_orphaned_vertices(mesh)
        report.orphaned_vertices_removed = before - len(mesh.vertices)

    mesh.rebuild_edges()
    report.result_vertices = len(mesh.vertices)
    report.result_faces = len(mesh.faces)

    logger.info("mesh_repair", **mesh_fields(mesh), changed=report.changed)
    return report
