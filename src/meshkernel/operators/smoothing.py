"""
Vertex smoothing. Both variants return a new mesh and leave the input alone.
"""

import numpy as np

from meshkernel.core.config import SmoothingOptions
from meshkernel.core.logging import get_logger, log_duration
from meshkernel.core.mesh import Mesh, parse_edge_key

logger = get_logger(__name__)


def boundary_vertices(mesh: Mesh) -> set[int]:
    """Vertices on an edge used by exactly one face."""
    pinned: set[int] = set()
    for key in mesh.boundary_edge_keys():
        pinned.update(parse_edge_key(key))
    return pinned


def _relax(mesh: Mesh, iterations: int, step: float, preserve_boundaries: bool) -> Mesh:
    result = mesh.clone()
    if not result.vertices:
        return result
    neighbors = {v: sorted(n) for v, n in result.adjacency().items() if n}
    pinned = boundary_vertices(result) if preserve_boundaries else set()
    movable = [v for v in neighbors if v not in pinned]

    positions = result.vertex_positions()
    for _ in range(iterations):
        updated = positions.copy()
        for v in movable:
            average = positions[neighbors[v]].mean(axis=0)
            updated[v] = positions[v] + (average - positions[v]) * step
        positions = updated

    for vertex, position in zip(result.vertices, positions):
        vertex.position = np.array(position)
    return result


def smooth_vertices(mesh: Mesh, options: SmoothingOptions = SmoothingOptions()) -> Mesh:
    """
    Move every vertex ``factor`` of the way toward its neighbour average.

    Isolated vertices do not move; with ``preserve_boundaries`` neither do
    boundary vertices.
    """
    with log_duration(logger, "smooth_vertices", iterations=options.iterations, factor=options.factor):
        return _relax(mesh, options.iterations, options.factor, options.preserve_boundaries)


def laplacian_smooth(mesh: Mesh, options: SmoothingOptions = SmoothingOptions()) -> Mesh:
    """Umbrella-operator smoothing with step ``laplacian_lambda * factor``."""
    step = options.laplacian_lambda * options.factor
    with log_duration(logger, "laplacian_smooth", iterations=options.iterations, step=step):
        return _relax(mesh, options.iterations, step, options.preserve_boundaries)
