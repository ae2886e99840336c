"""
Result value types returned by the topology operators.
"""

from dataclasses import dataclass, field


@dataclass
class OperationResult:
    """
    Elements touched by a topology operator.

    All indices are final, i.e. valid on the mesh right after the call.
    ``removed_faces`` holds indices the removed faces had before the call.
    """

    new_vertices: list[int] = field(default_factory=list)
    new_edges: list[int] = field(default_factory=list)
    new_faces: list[int] = field(default_factory=list)
    removed_faces: list[int] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.new_vertices or self.new_edges or self.new_faces or self.removed_faces)

    def summary(self) -> dict[str, int]:
        """Counts, for logging."""
        return {
            "new_vertices": len(self.new_vertices),
            "new_edges": len(self.new_edges),
            "new_faces": len(self.new_faces),
            "removed_faces": len(self.removed_faces),
        }


@dataclass
class MergeResult:
    """
    Outcome of a vertex weld.

    Attributes:
        remap: Old vertex index -> new vertex index, for every old vertex
        removed_count: Number of vertices merged away
        dropped_faces: Old indices of faces that collapsed below 3 vertices
    """

    remap: dict[int, int] = field(default_factory=dict)
    removed_count: int = 0
    dropped_faces: list[int] = field(default_factory=list)
