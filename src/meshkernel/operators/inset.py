"""
Face inset.
"""

from meshkernel.core.config import InsetOptions
from meshkernel.core.logging import get_logger, log_duration
from meshkernel.core.mesh import Mesh
from meshkernel.core.selection import FaceSelection, resolve_faces
from meshkernel.operators.common import EditRecorder, add_ring
from meshkernel.operators.results import OperationResult

logger = get_logger(__name__)


def inset_faces(
    mesh: Mesh,
    faces: FaceSelection,
    options: InsetOptions = InsetOptions(),
) -> OperationResult:
    """
    Inset faces toward their centroids, in place.

    Each corner ``v`` gets an inner copy at ``lerp(v, centroid, factor)``.
    The inner polygon takes over the face's index and one quad per boundary
    edge joins it to the original loop. Insetting one quad of a cube gives
    12 vertices and 10 faces.

    Raises:
        InvalidSelectionError: If the selection is empty or out of range.
        IndexInvalidatedError: If a ``Selection`` is stale.
    """
    selected = resolve_faces(mesh, faces)
    recorder = EditRecorder(mesh)

    with log_duration(logger, "inset_faces", faces=len(selected), factor=options.factor) as extra:
        for index in selected:
            points = mesh.face_positions(index)
            center = points.mean(axis=0)
            inner = points + (center - points) * options.factor
            add_ring(
                mesh,
                recorder,
                index,
                inner,
                material_index=options.material_index,
                uv_factor=options.factor,
            )
        result = recorder.result()
        extra.update(result.summary())

    return result
