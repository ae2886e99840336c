"""
Indexed polygon mesh store.

A ``Mesh`` owns dense lists of vertices, edges and faces. Faces are the
source of truth for connectivity: every face registers the edges of its loop
when it is added, and edges that no face uses any more are pruned when faces
are removed. Element indices are only stable until the next structural
removal; every such removal bumps ``Mesh.revision`` so stale selections can
be detected (see ``meshkernel.core.selection``).
"""

import copy
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence, Union
from uuid import uuid4

import numpy as np
from numpy.typing import NDArray

from meshkernel.core.exceptions import IndexInvalidatedError, InvalidSelectionError

EdgeKey = str


def edge_key(v1: int, v2: int) -> EdgeKey:
    """Canonical, order-independent key of the edge ``(v1, v2)``."""
    a, b = (v1, v2) if v1 <= v2 else (v2, v1)
    return f"{a}-{b}"


def parse_edge_key(key: Union[EdgeKey, Sequence[int]]) -> tuple[int, int]:
    """
    Return the ``(min, max)`` vertex pair of an edge key.

    Accepts either a canonical string key or a ``(v1, v2)`` pair.

    Raises:
        InvalidSelectionError: If the key is malformed.
    """
    if isinstance(key, str):
        parts = key.split("-")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise InvalidSelectionError(f"Malformed edge key: {key!r}", indices=[key])
        a, b = int(parts[0]), int(parts[1])
    else:
        try:
            a, b = (int(v) for v in key)
        except (TypeError, ValueError):
            raise InvalidSelectionError(f"Malformed edge key: {key!r}", indices=[key])
    return (a, b) if a <= b else (b, a)


def _vector(values: Any, sizes: tuple[int, ...], name: str) -> NDArray[np.float64]:
    arr = np.array(values, dtype=np.float64).reshape(-1)
    if arr.shape[0] not in sizes:
        raise ValueError(f"{name} must have {' or '.join(map(str, sizes))} components")
    return arr


@dataclass(eq=False)
class Vertex:
    """
    A mesh vertex.

    Attributes:
        position: (3,) position
        normal: Optional (3,) normal
        uv: Optional (2,) texture coordinate
        color: Optional RGB or RGBA color
        metadata: Free-form per-vertex data
    """

    position: NDArray[np.float64]
    normal: Optional[NDArray[np.float64]] = None
    uv: Optional[NDArray[np.float64]] = None
    color: Optional[NDArray[np.float64]] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.position = _vector(self.position, (3,), "position")
        if self.normal is not None:
            self.normal = _vector(self.normal, (3,), "normal")
        if self.uv is not None:
            self.uv = _vector(self.uv, (2,), "uv")
        if self.color is not None:
            self.color = _vector(self.color, (3, 4), "color")

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def z(self) -> float:
        return float(self.position[2])

    def clone(self) -> "Vertex":
        """Deep copy of this vertex."""
        return copy.deepcopy(self)

    def moved_to(self, position: Sequence[float]) -> "Vertex":
        """Copy of this vertex (attributes included) at a new position."""
        moved = self.clone()
        moved.position = _vector(position, (3,), "position")
        return moved


@dataclass
class Edge:
    """An edge between two vertex indices."""

    v1: int
    v2: int
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> EdgeKey:
        return edge_key(self.v1, self.v2)

    def has_vertex(self, index: int) -> bool:
        return self.v1 == index or self.v2 == index

    def other(self, index: int) -> int:
        """The opposite endpoint, or -1 if ``index`` is not on this edge."""
        if self.v1 == index:
            return self.v2
        if self.v2 == index:
            return self.v1
        return -1

    def clone(self) -> "Edge":
        return Edge(self.v1, self.v2, copy.deepcopy(self.metadata))


@dataclass(eq=False)
class Face:
    """
    A polygon face: an ordered loop of vertex indices.

    The winding of ``vertices`` defines the outward normal (right-hand rule).

    Attributes:
        vertices: Boundary loop (>= 3 vertex indices)
        material_index: Material slot
        normal: Optional explicit normal
        uvs: Optional per-corner UVs, one (2,) array per loop entry
        metadata: Free-form per-face data
    """

    vertices: list[int]
    material_index: int = 0
    normal: Optional[NDArray[np.float64]] = None
    uvs: Optional[list[NDArray[np.float64]]] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.vertices = [int(v) for v in self.vertices]
        if self.normal is not None:
            self.normal = _vector(self.normal, (3,), "normal")
        if self.uvs is not None:
            self.uvs = [_vector(uv, (2,), "uv") for uv in self.uvs]
            if len(self.uvs) != len(self.vertices):
                raise ValueError("uvs must have one entry per face corner")

    def __len__(self) -> int:
        return len(self.vertices)

    def has_vertex(self, index: int) -> bool:
        return index in self.vertices

    def edge_pairs(self) -> list[tuple[int, int]]:
        """Directed ``(v_i, v_i+1)`` pairs around the loop."""
        n = len(self.vertices)
        return [(self.vertices[i], self.vertices[(i + 1) % n]) for i in range(n)]

    def edge_keys(self) -> list[EdgeKey]:
        return [edge_key(a, b) for a, b in self.edge_pairs()]

    def derive(self, vertices: Sequence[int], **overrides: Any) -> "Face":
        """
        New face with a different loop, inheriting material and metadata.

        Per-corner UVs and the explicit normal are not inherited because they
        belong to the old loop; pass them through ``overrides`` if needed.
        """
        fields = {
            "material_index": self.material_index,
            "metadata": copy.deepcopy(self.metadata),
        }
        fields.update(overrides)
        return Face(list(vertices), **fields)

    def reversed(self) -> "Face":
        """Copy of this face with the opposite winding."""
        flipped = self.clone()
        flipped.vertices.reverse()
        if flipped.uvs is not None:
            flipped.uvs.reverse()
        if flipped.normal is not None:
            flipped.normal = -flipped.normal
        return flipped

    def clone(self) -> "Face":
        return copy.deepcopy(self)


@dataclass(eq=False, repr=False)
class Mesh:
    """
    Owning container of vertices, edges and faces.

    Example:
        >>> mesh = Mesh(name="quad")
        >>> for p in [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]:
        ...     _ = mesh.add_vertex(p)
        >>> mesh.add_face([0, 1, 2, 3])
        0
        >>> len(mesh.edges)
        4
    """

    vertices: list[Vertex] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    faces: list[Face] = field(default_factory=list)
    name: str = "Mesh"
    id: str = field(default_factory=lambda: str(uuid4()))
    metadata: dict[str, Any] = field(default_factory=dict)
    revision: int = 0
    _edge_lookup: dict[EdgeKey, int] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self._reindex_edges()

    def __repr__(self) -> str:
        return (
            f"Mesh(name={self.name!r}, vertices={len(self.vertices)}, "
            f"edges={len(self.edges)}, faces={len(self.faces)})"
        )

    @classmethod
    def from_vertices_and_faces(
        cls,
        vertices: Iterable[Sequence[float]],
        faces: Iterable[Sequence[int]],
        name: str = "Mesh",
    ) -> "Mesh":
        """Build a mesh from raw positions and index loops."""
        mesh = cls(name=name)
        for position in vertices:
            mesh.add_vertex(position)
        for loop in faces:
            mesh.add_face(loop)
        return mesh

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def add_vertex(self, vertex: Union[Vertex, Sequence[float]]) -> int:
        """Append a vertex (or a raw position) and return its index."""
        if not isinstance(vertex, Vertex):
            vertex = Vertex(vertex)
        self.vertices.append(vertex)
        return len(self.vertices) - 1

    def add_edge(self, v1: int, v2: int, metadata: dict[str, Any] | None = None) -> int:
        """
        Add the edge ``(v1, v2)`` and return its index.

        Returns the existing index if an edge with the same canonical key is
        already present.

        Raises:
            InvalidSelectionError: If an endpoint is out of range or v1 == v2.
        """
        self._check_vertices([v1, v2])
        if v1 == v2:
            raise InvalidSelectionError(
                f"Edge endpoints must be distinct: {v1}", indices=[v1, v2]
            )
        key = edge_key(v1, v2)
        existing = self._edge_lookup.get(key)
        if existing is not None:
            return existing
        self.edges.append(Edge(v1, v2, dict(metadata or {})))
        self._edge_lookup[key] = len(self.edges) - 1
        return len(self.edges) - 1

    def add_face(
        self,
        vertices: Sequence[int],
        material_index: int = 0,
        *,
        normal: Optional[Sequence[float]] = None,
        uvs: Optional[Sequence[Sequence[float]]] = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        """
        Add a face from a vertex loop and return its index.

        Raises:
            InvalidSelectionError: If the loop has fewer than 3 vertices,
                repeats a vertex, or references an out-of-range vertex.
        """
        face = Face(
            list(vertices),
            material_index=material_index,
            normal=normal,
            uvs=list(uvs) if uvs is not None else None,
            metadata=dict(metadata or {}),
        )
        return self.append_face(face)

    def append_face(self, face: Face) -> int:
        """Add an already constructed ``Face`` (see ``add_face``)."""
        loop = face.vertices
        if len(loop) < 3:
            raise InvalidSelectionError(
                f"A face needs at least 3 vertices, got {len(loop)}", indices=loop
            )
        if len(set(loop)) != len(loop):
            raise InvalidSelectionError(
                f"Face loop repeats a vertex: {loop}", indices=loop
            )
        self._check_vertices(loop)
        self.faces.append(face)
        for a, b in face.edge_pairs():
            self.add_edge(a, b)
        return len(self.faces) - 1

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_vertex(self, index: int) -> Optional[Vertex]:
        return self.vertices[index] if 0 <= index < len(self.vertices) else None

    def get_edge(self, index: int) -> Optional[Edge]:
        return self.edges[index] if 0 <= index < len(self.edges) else None

    def get_face(self, index: int) -> Optional[Face]:
        return self.faces[index] if 0 <= index < len(self.faces) else None

    def find_edge(self, v1: int, v2: int) -> Optional[int]:
        """Index of the edge joining ``v1`` and ``v2``, if any."""
        return self._edge_lookup.get(edge_key(v1, v2))

    def faces_using_vertex(self, index: int) -> list[int]:
        return [i for i, face in enumerate(self.faces) if index in face.vertices]

    def faces_using_edge(self, v1: int, v2: int) -> list[int]:
        """Faces whose loop contains ``v1`` and ``v2`` as consecutive corners."""
        key = edge_key(v1, v2)
        return [i for i, face in enumerate(self.faces) if key in face.edge_keys()]

    def edge_face_counts(self) -> Counter:
        """Number of faces using each edge key."""
        counts: Counter = Counter()
        for face in self.faces:
            counts.update(face.edge_keys())
        return counts

    def boundary_edge_keys(self) -> set[EdgeKey]:
        """Keys of edges used by exactly one face."""
        return {key for key, count in self.edge_face_counts().items() if count == 1}

    def boundary_edges(self) -> list[int]:
        """Indices of edges used by exactly one face."""
        keys = self.boundary_edge_keys()
        return [i for i, edge in enumerate(self.edges) if edge.key in keys]

    def adjacency(self) -> dict[int, set[int]]:
        """Vertex index -> neighbouring vertex indices (faces and wire edges)."""
        neighbors: dict[int, set[int]] = {i: set() for i in range(len(self.vertices))}
        for face in self.faces:
            for a, b in face.edge_pairs():
                neighbors[a].add(b)
                neighbors[b].add(a)
        for edge in self.edges:
            neighbors[edge.v1].add(edge.v2)
            neighbors[edge.v2].add(edge.v1)
        return neighbors

    def vertex_neighbors(self, index: int) -> list[int]:
        self._check_vertices([index])
        return sorted(self.adjacency()[index])

    def vertex_positions(self) -> NDArray[np.float64]:
        """(V, 3) array of vertex positions."""
        if not self.vertices:
            return np.zeros((0, 3))
        return np.array([v.position for v in self.vertices])

    def face_positions(self, face: Union[int, Face]) -> NDArray[np.float64]:
        """(n, 3) array of the corner positions of a face."""
        if isinstance(face, int):
            face = self.faces[face]
        return np.array([self.vertices[v].position for v in face.vertices])

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove_face(self, index: int) -> None:
        """Remove one face (see ``remove_faces``)."""
        self.remove_faces([index])

    def remove_faces(self, indices: Iterable[int]) -> dict[int, int]:
        """
        Remove faces and compact the face list.

        Edges that belonged only to the removed faces are pruned.

        Returns:
            Mapping of surviving old face index -> new face index.

        Raises:
            InvalidSelectionError: If an index is out of range.
        """
        doomed = set(indices)
        bad = sorted(i for i in doomed if not 0 <= i < len(self.faces))
        if bad:
            raise InvalidSelectionError(f"Face index out of range: {bad}", indices=bad)

        remap: dict[int, int] = {}
        survivors: list[Face] = []
        freed_keys: set[EdgeKey] = set()
        for i, face in enumerate(self.faces):
            if i in doomed:
                freed_keys.update(face.edge_keys())
            else:
                remap[i] = len(survivors)
                survivors.append(face)
        self.faces = survivors

        if freed_keys:
            still_used = {key for face in self.faces for key in face.edge_keys()}
            self._drop_edges(freed_keys - still_used)
        self.revision += 1
        return remap

    def remove_edge(self, index: int, cascade: bool = False) -> None:
        """
        Remove an edge.

        Raises:
            InvalidSelectionError: If the index is out of range.
            IndexInvalidatedError: If faces still use the edge and
                ``cascade`` is False. With ``cascade`` those faces are
                removed too.
        """
        edge = self.get_edge(index)
        if edge is None:
            raise InvalidSelectionError(f"Edge index out of range: {index}", indices=[index])
        users = self.faces_using_edge(edge.v1, edge.v2)
        if users and not cascade:
            raise IndexInvalidatedError(
                f"Edge {edge.key} is still used by faces",
                details={"faces": users},
            )
        if users:
            self.remove_faces(users)
        self._drop_edges({edge.key})
        self.revision += 1

    def remove_vertex(self, index: int, cascade: bool = False) -> None:
        """
        Remove a vertex and shift every higher vertex index down by one.

        Raises:
            InvalidSelectionError: If the index is out of range.
            IndexInvalidatedError: If faces or edges still reference the
                vertex and ``cascade`` is False. With ``cascade`` the
                referencing faces and edges are removed first.
        """
        self._check_vertices([index])
        face_refs = self.faces_using_vertex(index)
        edge_refs = [i for i, e in enumerate(self.edges) if e.has_vertex(index)]
        if (face_refs or edge_refs) and not cascade:
            raise IndexInvalidatedError(
                f"Vertex {index} is still referenced",
                details={"faces": face_refs, "edges": edge_refs},
            )
        if face_refs:
            self.remove_faces(face_refs)
        self.edges = [e for e in self.edges if not e.has_vertex(index)]

        del self.vertices[index]
        for face in self.faces:
            face.vertices = [v - 1 if v > index else v for v in face.vertices]
        for edge in self.edges:
            if edge.v1 > index:
                edge.v1 -= 1
            if edge.v2 > index:
                edge.v2 -= 1
        self._reindex_edges()
        self.revision += 1

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def wire_edges(self) -> list[tuple[int, int]]:
        """Endpoint pairs of edges no face uses."""
        used = {key for face in self.faces for key in face.edge_keys()}
        return [(e.v1, e.v2) for e in self.edges if e.key not in used]

    def rebuild_edges(self, wire: Optional[Iterable[tuple[int, int]]] = None) -> None:
        """
        Re-derive the edge list from the face loops.

        Metadata of surviving edges is preserved. ``wire`` lists the
        face-less edges to keep; by default the current wire edges are kept.
        Pass the result of ``wire_edges()`` taken before editing face loops,
        otherwise edges of removed faces would survive as wire edges.
        Wire pairs that are out of range or collapsed are dropped.
        """
        if wire is None:
            wire = self.wire_edges()
        previous = {edge.key: edge for edge in self.edges}
        rebuilt: list[Edge] = []
        seen: set[EdgeKey] = set()

        def keep(a: int, b: int) -> None:
            key = edge_key(a, b)
            if key in seen or a == b:
                return
            seen.add(key)
            old = previous.get(key)
            rebuilt.append(Edge(a, b, copy.deepcopy(old.metadata) if old else {}))

        for face in self.faces:
            for a, b in face.edge_pairs():
                keep(a, b)
        n = len(self.vertices)
        for a, b in wire:
            if 0 <= a < n and 0 <= b < n:
                keep(a, b)
        self.edges = rebuilt
        self._reindex_edges()
        self.revision += 1

    def clone(self) -> "Mesh":
        """Deep copy; the clone gets a fresh id."""
        duplicate = copy.deepcopy(self)
        duplicate.id = str(uuid4())
        return duplicate

    def touch(self) -> None:
        """Mark the mesh as structurally edited (invalidates selections)."""
        self.revision += 1

    def _drop_edges(self, keys: set[EdgeKey]) -> None:
        if not keys:
            return
        self.edges = [edge for edge in self.edges if edge.key not in keys]
        self._reindex_edges()

    def _reindex_edges(self) -> None:
        self._edge_lookup = {edge.key: i for i, edge in enumerate(self.edges)}

    def _check_vertices(self, indices: Iterable[int]) -> None:
        n = len(self.vertices)
        bad = [i for i in indices if not 0 <= i < n]
        if bad:
            raise InvalidSelectionError(
                f"Vertex index out of range: {bad}",
                indices=bad,
                details={"vertex_count": n},
            )
