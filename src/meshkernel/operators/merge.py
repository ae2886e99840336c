"""
Vertex welding and cleanup of degenerate faces and orphaned vertices.
"""

from itertools import product
from typing import Optional, Union

import numpy as np

from meshkernel.core.config import MergeOptions
from meshkernel.core.logging import get_logger, log_duration
from meshkernel.core.mesh import Face, Mesh
from meshkernel.geometry.vectors import polygon_area
from meshkernel.operators.results import MergeResult

logger = get_logger(__name__)


def find_representatives(positions: np.ndarray, threshold: float) -> list[int]:
    """
    Representative vertex for every position.

    Vertex ``i`` maps to the lowest-index earlier representative within
    ``threshold`` (squared-distance compare), else to itself. Candidates
    come from a spatial hash grid with cell size ``threshold``, which gives
    the same answer as scanning every earlier representative.
    """
    count = len(positions)
    if threshold <= 0.0:
        exact: dict[tuple, int] = {}
        return [exact.setdefault(tuple(p), i) for i, p in enumerate(positions)]

    limit = threshold * threshold
    cells = np.floor(positions / threshold).astype(np.int64)
    grid: dict[tuple, list[int]] = {}
    representative = list(range(count))
    for i in range(count):
        cx, cy, cz = cells[i]
        best: Optional[int] = None
        for dx, dy, dz in product((-1, 0, 1), repeat=3):
            for r in grid.get((cx + dx, cy + dy, cz + dz), ()):
                if (best is None or r < best) and np.sum((positions[r] - positions[i]) ** 2) <= limit:
                    best = r
        if best is None:
            grid.setdefault((cx, cy, cz), []).append(i)
        else:
            representative[i] = best
    return representative


def _clean_loop(loop: list[int]) -> list[int]:
    """Drop consecutive repeats, including the wrap-around pair."""
    cleaned = [v for i, v in enumerate(loop) if v != loop[i - 1]] if len(loop) > 1 else list(loop)
    return cleaned if cleaned else loop[:1]


def merge_vertices(
    mesh: Mesh, threshold: Union[float, MergeOptions] = MergeOptions().threshold
) -> MergeResult:
    """
    Weld vertices closer than ``threshold``, in place.

    Every vertex is replaced by the first earlier vertex within the
    threshold. Faces are remapped, consecutive repeats are collapsed, faces
    left with fewer than 3 distinct vertices are dropped and the edge list
    is rebuilt. Surviving vertices keep their relative order.

    Returns:
        MergeResult with the old -> new vertex remap.
    """
    if isinstance(threshold, MergeOptions):
        threshold = threshold.threshold

    with log_duration(logger, "merge_vertices", threshold=threshold) as extra:
        representative = find_representatives(mesh.vertex_positions(), threshold)
        keep = [i for i, r in enumerate(representative) if r == i]
        compact = {old: new for new, old in enumerate(keep)}
        remap = {i: compact[r] for i, r in enumerate(representative)}

        wire = [(remap[a], remap[b]) for a, b in mesh.wire_edges() if a in remap and b in remap]

        survivors: list[Face] = []
        dropped: list[int] = []
        for index, face in enumerate(mesh.faces):
            original = [remap[v] for v in face.vertices]
            loop = _clean_loop(original)
            if len(set(loop)) < 3:
                dropped.append(index)
                continue
            if len(loop) != len(original):
                face.uvs = None
            face.vertices = loop
            survivors.append(face)

        mesh.vertices = [mesh.vertices[i] for i in keep]
        mesh.faces = survivors
        for edge in mesh.edges:
            edge.v1, edge.v2 = remap.get(edge.v1, -1), remap.get(edge.v2, -1)
        mesh.rebuild_edges(wire)

        result = MergeResult(
            remap=remap,
            removed_count=len(representative) - len(keep),
            dropped_faces=dropped,
        )
        extra.update(merged=result.removed_count, dropped_faces=len(dropped))

    return result


def remove_degenerate_faces(mesh: Mesh, area_epsilon: Optional[float] = None) -> list[int]:
    """
    Remove faces with fewer than 3 distinct vertices, in place.

    With ``area_epsilon`` faces whose area is at or below it are removed too.

    Returns:
        Indices (before removal) of the removed faces.
    """
    doomed = []
    for index, face in enumerate(mesh.faces):
        if len(set(face.vertices)) < 3:
            doomed.append(index)
        elif area_epsilon is not None and polygon_area(mesh.face_positions(face)) <= area_epsilon:
            doomed.append(index)
    if doomed:
        mesh.remove_faces(doomed)
        logger.debug("remove_degenerate_faces", removed=len(doomed))
    return doomed


def remove_orphaned_vertices(mesh: Mesh) -> dict[int, int]:
    """
    Remove vertices no face or edge references, in place.

    Returns:
        Old -> new index for every surviving vertex.
    """
    used = {v for face in mesh.faces for v in face.vertices}
    used.update(v for edge in mesh.edges for v in (edge.v1, edge.v2))
    keep = [i for i in range(len(mesh.vertices)) if i in used]
    remap = {old: new for new, old in enumerate(keep)}
    if len(keep) == len(mesh.vertices):
        return remap

    removed = len(mesh.vertices) - len(keep)
    mesh.vertices = [mesh.vertices[i] for i in keep]
    for face in mesh.faces:
        face.vertices = [remap[v] for v in face.vertices]
    for edge in mesh.edges:
        edge.v1, edge.v2 = remap[edge.v1], remap[edge.v2]
    mesh.rebuild_edges()
    logger.debug("remove_orphaned_vertices", removed=removed)
    return remap
