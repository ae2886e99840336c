"""
Revision-stamped selections.

Operators remove and reindex elements, so a list of indices taken before a
structural edit may silently point at different elements afterwards. A
``Selection`` remembers the mesh it was taken from and the mesh revision at
that moment, and refuses to resolve once either no longer matches.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from meshkernel.core.exceptions import IndexInvalidatedError, InvalidSelectionError
from meshkernel.core.mesh import EdgeKey, Mesh, edge_key, parse_edge_key


@dataclass(frozen=True)
class Selection:
    """Indices of selected elements, valid for one mesh revision."""

    mesh_id: str
    revision: int
    vertices: tuple[int, ...] = ()
    faces: tuple[int, ...] = ()
    edges: tuple[EdgeKey, ...] = ()

    @classmethod
    def of(
        cls,
        mesh: Mesh,
        vertices: Iterable[int] = (),
        faces: Iterable[int] = (),
        edges: Iterable[Union[EdgeKey, Sequence[int]]] = (),
    ) -> "Selection":
        """Take a selection on ``mesh`` at its current revision."""
        keys = tuple(edge_key(*parse_edge_key(e)) for e in edges)
        return cls(
            mesh_id=mesh.id,
            revision=mesh.revision,
            vertices=tuple(int(v) for v in vertices),
            faces=tuple(int(f) for f in faces),
            edges=keys,
        )

    def is_stale(self, mesh: Mesh) -> bool:
        return self.mesh_id != mesh.id or self.revision != mesh.revision

    def check(self, mesh: Mesh) -> None:
        """
        Raises:
            IndexInvalidatedError: If the selection was taken on another mesh
                or before the last structural edit.
        """
        if self.mesh_id != mesh.id:
            raise IndexInvalidatedError(
                "Selection belongs to a different mesh",
                details={"selection_mesh": self.mesh_id, "mesh": mesh.id},
            )
        if self.revision != mesh.revision:
            raise IndexInvalidatedError(
                "Selection is stale: mesh was edited since it was taken",
                details={"selection_revision": self.revision, "mesh_revision": mesh.revision},
            )


FaceSelection = Union[Selection, Iterable[int]]
VertexSelection = Union[Selection, Iterable[int]]
EdgeSelection = Union[Selection, Iterable[Union[EdgeKey, Sequence[int]]]]


def resolve_faces(mesh: Mesh, selection: FaceSelection) -> list[int]:
    """
    Turn a face selection into a list of unique, in-range face indices.

    Order of first appearance is preserved.

    Raises:
        InvalidSelectionError: If the selection is empty or out of range.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    if isinstance(selection, Selection):
        selection.check(mesh)
        indices = list(selection.faces)
    else:
        indices = [int(i) for i in selection]
    return _unique_in_range(indices, len(mesh.faces), "face")


def resolve_vertices(mesh: Mesh, selection: VertexSelection) -> list[int]:
    """Vertex counterpart of ``resolve_faces``."""
    if isinstance(selection, Selection):
        selection.check(mesh)
        indices = list(selection.vertices)
    else:
        indices = [int(i) for i in selection]
    return _unique_in_range(indices, len(mesh.vertices), "vertex")


def resolve_edges(mesh: Mesh, selection: EdgeSelection) -> list[tuple[int, int]]:
    """
    Turn an edge selection into unique ``(v1, v2)`` pairs present in the mesh.

    Raises:
        InvalidSelectionError: If empty, malformed or naming a missing edge.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    if isinstance(selection, Selection):
        selection.check(mesh)
        raw = list(selection.edges)
    else:
        raw = list(selection)
    if not raw:
        raise InvalidSelectionError("Edge selection is empty")

    pairs: list[tuple[int, int]] = []
    seen: set[EdgeKey] = set()
    for item in raw:
        a, b = parse_edge_key(item)
        key = edge_key(a, b)
        if key in seen:
            continue
        if mesh.find_edge(a, b) is None:
            raise InvalidSelectionError(f"Edge not found: {key}", indices=[key])
        seen.add(key)
        pairs.append((a, b))
    return pairs


def _unique_in_range(indices: list[int], count: int, kind: str) -> list[int]:
    if not indices:
        raise InvalidSelectionError(f"{kind.capitalize()} selection is empty")
    bad = sorted({i for i in indices if not 0 <= i < count})
    if bad:
        raise InvalidSelectionError(
            f"{kind.capitalize()} index out of range: {bad}",
            indices=bad,
            details={f"{kind}_count": count},
        )
    return list(dict.fromkeys(indices))
