"""
Bridging two edge loops with a band of faces.

Loops are given as edge selections and chained into ordered vertex chains
with networkx. The second chain is aligned to the first (nearest start
vertex, then the walking direction with the smaller total distance) before
the band is built.
"""

from typing import Optional

import networkx as nx
import numpy as np

from meshkernel.core.config import BridgeOptions
from meshkernel.core.exceptions import InvalidSelectionError, VertexCountMismatchError
from meshkernel.core.logging import get_logger, log_duration
from meshkernel.core.mesh import Face, Mesh
from meshkernel.core.selection import EdgeSelection, resolve_edges
from meshkernel.operators.common import EditRecorder
from meshkernel.operators.results import OperationResult

logger = get_logger(__name__)


def chain_edges(pairs: list[tuple[int, int]]) -> tuple[list[int], bool]:
    """
    Order a set of edges into a vertex chain.

    Returns:
        ``(chain, closed)``. Open chains start at their lowest-index end,
        closed chains at their lowest-index vertex.

    Raises:
        InvalidSelectionError: If the edges are not one simple path or cycle.
    """
    graph = nx.Graph()
    graph.add_edges_from(pairs)

    if not nx.is_connected(graph):
        raise InvalidSelectionError(
            "Edge loop is not connected",
            details={"components": nx.number_connected_components(graph)},
        )
    branching = sorted(v for v, degree in graph.degree() if degree > 2)
    if branching:
        raise InvalidSelectionError("Edge loop branches", indices=branching)

    ends = sorted(v for v, degree in graph.degree() if degree == 1)
    closed = not ends
    start = ends[0] if ends else min(graph.nodes)
    return list(nx.dfs_preorder_nodes(graph, start)), closed


def _correspondence(n: int, m: int, closed: bool) -> list[int]:
    """Index into a chain of length ``m`` matched to each of ``n`` positions."""
    if closed:
        return [int(round(i * m / n)) % m for i in range(n)]
    if n == 1:
        return [0]
    return [int(round(i * (m - 1) / (n - 1))) for i in range(n)]


def align_loops(mesh: Mesh, chain_a: list[int], chain_b: list[int], closed: bool) -> list[int]:
    """Rotate and/or reverse ``chain_b`` so it runs alongside ``chain_a``."""
    pa = np.array([mesh.vertices[v].position for v in chain_a])
    pb = np.array([mesh.vertices[v].position for v in chain_b])

    if closed:
        start = int(np.argmin(np.linalg.norm(pb - pa[0], axis=1)))
        forward = chain_b[start:] + chain_b[:start]
        backward = [forward[0]] + forward[1:][::-1]
    else:
        forward = list(chain_b)
        backward = forward[::-1]

    def total_distance(candidate: list[int]) -> float:
        match = _correspondence(len(chain_a), len(candidate), closed)
        positions = np.array([mesh.vertices[candidate[j]].position for j in match])
        return float(np.linalg.norm(positions - pa, axis=1).sum())

    return forward if total_distance(forward) <= total_distance(backward) else backward


def _existing_direction(mesh: Mesh, a: int, b: int) -> Optional[bool]:
    """True if a face already walks ``a -> b``, False if ``b -> a``, None if unused."""
    for index in mesh.faces_using_edge(a, b):
        for x, y in mesh.faces[index].edge_pairs():
            if (x, y) == (a, b):
                return True
            if (x, y) == (b, a):
                return False
    return None


def bridge_edge_loops(
    mesh: Mesh,
    loop_a: EdgeSelection,
    loop_b: EdgeSelection,
    options: BridgeOptions = BridgeOptions(),
) -> OperationResult:
    """
    Connect two disjoint edge loops with a band of faces, in place.

    Equal-length loops are joined by quads, with ``segments - 1``
    intermediate rings of new vertices. Loops of different length are
    joined by a triangle strip that greedily takes the shorter diagonal
    (``mismatch_policy="fan"``) or rejected (``mismatch_policy="error"``).
    The band is wound opposite to the faces already using loop A (or, when
    loop A is bare, loop B) so the result stays consistently oriented.

    Raises:
        InvalidSelectionError: If a loop is empty, not a simple chain, the
            loops share a vertex, or one is open and the other closed.
        VertexCountMismatchError: If the loop lengths differ and the
            mismatch policy is ``"error"``.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    chain_a, closed_a = chain_edges(resolve_edges(mesh, loop_a))
    chain_b, closed_b = chain_edges(resolve_edges(mesh, loop_b))

    shared = sorted(set(chain_a) & set(chain_b))
    if shared:
        raise InvalidSelectionError("Edge loops share vertices", indices=shared)
    if closed_a != closed_b:
        raise InvalidSelectionError(
            "Cannot bridge an open edge loop to a closed one",
            details={"loop_a_closed": closed_a, "loop_b_closed": closed_b},
        )
    closed = closed_a

    if len(chain_a) != len(chain_b) and options.mismatch_policy == "error":
        raise VertexCountMismatchError(
            "Edge loops have different vertex counts",
            expected=len(chain_a),
            actual=len(chain_b),
        )

    chain_b = align_loops(mesh, chain_a, chain_b, closed)
    material = options.material_index
    if material is None:
        users = mesh.faces_using_edge(chain_a[0], chain_a[1])
        material = mesh.faces[users[0]].material_index if users else 0

    # A new face walks chain A forwards and chain B backwards
    flip = _existing_direction(mesh, chain_a[0], chain_a[1])
    if flip is None:
        along_b = _existing_direction(mesh, chain_b[1], chain_b[0])
        flip = bool(along_b)

    recorder = EditRecorder(mesh)
    with log_duration(
        logger,
        "bridge_edge_loops",
        loop_a=len(chain_a),
        loop_b=len(chain_b),
        closed=closed,
    ) as extra:
        if len(chain_a) == len(chain_b):
            loops = _quad_band(mesh, chain_a, chain_b, closed, options.segments)
        else:
            loops = _triangle_strip(mesh, chain_a, chain_b, closed)
        for loop in loops:
            recorder.add_face(Face(loop[::-1] if flip else loop, material_index=material))
        result = recorder.result()
        extra.update(result.summary())

    return result


def _quad_band(
    mesh: Mesh, chain_a: list[int], chain_b: list[int], closed: bool, segments: int
) -> list[list[int]]:
    rows = [chain_a]
    for k in range(1, segments):
        t = k / segments
        row = []
        for a, b in zip(chain_a, chain_b):
            pa = mesh.vertices[a].position
            pb = mesh.vertices[b].position
            row.append(mesh.add_vertex(mesh.vertices[a].moved_to(pa + (pb - pa) * t)))
        rows.append(row)
    rows.append(chain_b)

    n = len(chain_a)
    spans = n if closed else n - 1
    loops = []
    for lower, upper in zip(rows, rows[1:]):
        for i in range(spans):
            j = (i + 1) % n
            loops.append([lower[i], lower[j], upper[j], upper[i]])
    return loops


def _triangle_strip(
    mesh: Mesh, chain_a: list[int], chain_b: list[int], closed: bool
) -> list[list[int]]:
    a = chain_a + [chain_a[0]] if closed else list(chain_a)
    b = chain_b + [chain_b[0]] if closed else list(chain_b)

    def distance(u: int, v: int) -> float:
        return float(np.linalg.norm(mesh.vertices[u].position - mesh.vertices[v].position))

    loops = []
    i = j = 0
    while i < len(a) - 1 or j < len(b) - 1:
        advance_a = j == len(b) - 1 or (
            i < len(a) - 1 and distance(a[i + 1], b[j]) <= distance(a[i], b[j + 1])
        )
        if advance_a:
            loops.append([a[i], a[i + 1], b[j]])
            i += 1
        else:
            loops.append([a[i], b[j + 1], b[j]])
            j += 1
    return loops
