"""
Shape interpolation between meshes with matching vertex counts.
"""

from typing import Iterable, Optional

import numpy as np
from numpy.typing import ArrayLike

from meshkernel.core.exceptions import InvalidSelectionError, VertexCountMismatchError
from meshkernel.core.logging import get_logger
from meshkernel.core.mesh import Mesh
from meshkernel.core.selection import resolve_vertices

logger = get_logger(__name__)


def interpolate_shapes(source: Mesh, target: Mesh, factor: float) -> Mesh:
    """
    New mesh with positions ``lerp(source, target, factor)``.

    Topology, attributes and metadata come from ``source``. Normals are
    blended and renormalized where both meshes carry them.

    Raises:
        VertexCountMismatchError: If the vertex counts differ.
    """
    if len(source.vertices) != len(target.vertices):
        raise VertexCountMismatchError(
            "Cannot interpolate meshes with different vertex counts",
            expected=len(source.vertices),
            actual=len(target.vertices),
        )

    result = source.clone()
    for vertex, end in zip(result.vertices, target.vertices):
        vertex.position = vertex.position + (end.position - vertex.position) * factor
        if vertex.normal is not None and end.normal is not None:
            blended = vertex.normal + (end.normal - vertex.normal) * factor
            length = np.linalg.norm(blended)
            if length > 0:
                vertex.normal = blended / length
    logger.debug("interpolate_shapes", vertices=len(result.vertices), factor=factor)
    return result


def morph_vertices(
    mesh: Mesh,
    targets: ArrayLike,
    factor: float,
    vertices: Optional[Iterable[int]] = None,
) -> None:
    """
    Move vertices ``factor`` of the way toward target positions, in place.

    Args:
        mesh: Mesh to edit.
        targets: (N, 3) target positions, one per vertex, or one per entry
            of ``vertices`` when given.
        factor: Blend amount; 0 leaves the mesh unchanged, 1 snaps to targets.
        vertices: Optional subset of vertex indices to move.

    Raises:
        VertexCountMismatchError: If the number of targets does not match.
        InvalidSelectionError: If ``vertices`` is empty or out of range.
    """
    indices = resolve_vertices(mesh, vertices) if vertices is not None else list(range(len(mesh.vertices)))
    goals = np.asarray(targets, dtype=np.float64)
    if goals.size == 0:
        goals = goals.reshape(0, 3)
    if goals.ndim != 2 or goals.shape[1] != 3:
        raise InvalidSelectionError(
            "Morph targets must be an (N, 3) array", details={"shape": list(goals.shape)}
        )
    if len(goals) != len(indices):
        raise VertexCountMismatchError(
            "Number of morph targets does not match the vertices to move",
            expected=len(indices),
            actual=len(goals),
        )
    if not np.all(np.isfinite(goals)):
        raise InvalidSelectionError("Morph targets must be finite")

    for index, goal in zip(indices, goals):
        vertex = mesh.vertices[index]
        vertex.position = vertex.position + (goal - vertex.position) * factor
    logger.debug("morph_vertices", vertices=len(indices), factor=factor)
