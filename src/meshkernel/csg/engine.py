"""
Tolerance-based boolean operations on closed meshes.

Faces are kept or dropped whole: each face is classified by casting a ray
from its centroid against the other operand, and the kept faces of both
operands are combined into a new mesh. Faces are never split along the
intersection curve, so results along the seam are approximate. A face whose
centroid lies on the other operand's surface (touching or coplanar faces)
has no meaningful ray parity and is classified OUTSIDE. Difference
therefore keeps such faces, and intersection drops them. Coincident
vertices are welded within the tolerance afterwards and degenerate faces
dropped. Input meshes are never modified.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from meshkernel.core.config import CSGOptions
from meshkernel.core.exceptions import CSGError, MeshKernelError
from meshkernel.core.logging import get_logger, mesh_fields
from meshkernel.core.mesh import Mesh
from meshkernel.csg.history import BooleanHistory
from meshkernel.csg.raycast import TriangleSoup, point_in_mesh, point_on_surface
from meshkernel.operators.merge import (
    merge_vertices,
    remove_degenerate_faces,
    remove_orphaned_vertices,
)
from meshkernel.validation.validator import ValidationReport, validate, validate_topology

logger = get_logger(__name__)

OPERATIONS = ("union", "intersection", "difference", "xor")


class Classification(str, Enum):
    """Position of a face relative to a closed mesh."""

    INSIDE = "inside"
    OUTSIDE = "outside"


@dataclass
class BooleanResult:
    """
    Outcome of ``boolean_operation``.

    Attributes:
        operation: Requested operation name
        mesh: Result mesh, None on failure
        success: Whether the operation produced a mesh
        error: Failure message, None on success
        validation: Validation report when ``validate_result`` was set
        duration_s: Wall-clock time of the operation
    """

    operation: str
    mesh: Optional[Mesh] = None
    success: bool = False
    error: Optional[str] = None
    validation: Optional[ValidationReport] = None
    duration_s: float = 0.0


def classify_faces(mesh: Mesh, other: Mesh, tolerance: float = 1e-6) -> list[Classification]:
    """
    Classify every face of ``mesh`` as inside or outside ``other``.

    A face takes the classification of its centroid. Faces whose centroid
    lies on the surface of ``other`` within ``tolerance``, faces whose
    centroid is not finite, and all faces when ``other`` has no faces, are
    OUTSIDE.
    """
    soup = TriangleSoup.from_mesh(other)
    if len(soup) == 0:
        logger.warning("classify_against_empty_mesh", faces=len(mesh.faces))
        return [Classification.OUTSIDE] * len(mesh.faces)

    positions = mesh.vertex_positions()
    labels = []
    unclassifiable = 0
    touching = 0
    for face in mesh.faces:
        center = positions[face.vertices].mean(axis=0)
        if not np.all(np.isfinite(center)):
            unclassifiable += 1
            labels.append(Classification.OUTSIDE)
        elif point_on_surface(center, soup, tolerance):
            touching += 1
            labels.append(Classification.OUTSIDE)
        elif point_in_mesh(center, soup, tolerance):
            labels.append(Classification.INSIDE)
        else:
            labels.append(Classification.OUTSIDE)
    if unclassifiable:
        logger.warning("classify_defaulted_outside", faces=unclassifiable)
    if touching:
        logger.debug("classify_on_surface", faces=touching)
    return labels


def _select(labels: list[Classification], wanted: Classification) -> list[int]:
    return [i for i, label in enumerate(labels) if label is wanted]


def _assemble(parts: list[tuple[Mesh, list[int], bool]], name: str) -> Mesh:
    """Copy chosen faces (and the vertices they use) of several meshes into one."""
    result = Mesh(name=name)
    for source, faces, flip in parts:
        remap: dict[int, int] = {}
        for index in faces:
            face = source.faces[index]
            for v in face.vertices:
                if v not in remap:
                    remap[v] = result.add_vertex(source.vertices[v].clone())
            duplicate = face.reversed() if flip else face.clone()
            duplicate.vertices = [remap[v] for v in duplicate.vertices]
            result.append_face(duplicate)
    return result


def _remove_duplicate_faces(mesh: Mesh) -> int:
    seen: set[frozenset] = set()
    doomed = []
    for index, face in enumerate(mesh.faces):
        key = frozenset(face.vertices)
        if key in seen:
            doomed.append(index)
        else:
            seen.add(key)
    if doomed:
        mesh.remove_faces(doomed)
    return len(doomed)


def _check_inputs(operation: str, a: Mesh, b: Mesh) -> None:
    if operation not in OPERATIONS:
        raise CSGError(
            f"Unknown boolean operation: {operation}",
            operation=operation,
            details={"supported": list(OPERATIONS)},
        )
    for label, mesh in (("a", a), ("b", b)):
        report = validate_topology(mesh)
        if not report.is_valid:
            raise CSGError(
                f"Boolean operand {label} is not a valid mesh",
                operation=operation,
                details={"errors": report.errors[:5]},
            )


def _finish(mesh: Mesh, options: CSGOptions, dedupe: bool = False) -> Mesh:
    if options.merge_vertices:
        merge_vertices(mesh, options.tolerance)
    remove_degenerate_faces(mesh)
    if dedupe:
        _remove_duplicate_faces(mesh)
    remove_orphaned_vertices(mesh)
    return mesh


def _combine(a: Mesh, b: Mesh, operation: str, options: CSGOptions) -> Mesh:
    _check_inputs(operation, a, b)
    tol = options.tolerance
    name = f"{a.name}_{operation}_{b.name}"

    if operation == "union":
        parts = [(a, list(range(len(a.faces))), False), (b, list(range(len(b.faces))), False)]
        return _finish(_assemble(parts, name), options, dedupe=True)

    labels_a = classify_faces(a, b, tol)
    if operation == "intersection":
        labels_b = classify_faces(b, a, tol)
        parts = [
            (a, _select(labels_a, Classification.INSIDE), False),
            (b, _select(labels_b, Classification.INSIDE), False),
        ]
        return _finish(_assemble(parts, name), options)

    if operation == "difference":
        parts = [(a, _select(labels_a, Classification.OUTSIDE), False)]
        if options.include_cutter_faces:
            labels_b = classify_faces(b, a, tol)
            parts.append((b, _select(labels_b, Classification.INSIDE), True))
        return _finish(_assemble(parts, name), options)

    # xor
    try:
        merged = _combine(a, b, "union", options)
        common = _combine(a, b, "intersection", options)
        result = _combine(merged, common, "difference", options)
    except Exception as e:
        logger.warning("xor_fallback", error=str(e), **mesh_fields(a))
        result = a.clone()
    result.name = name
    return result


def _run(a: Mesh, b: Mesh, operation: str, options: CSGOptions) -> Mesh:
    start = time.perf_counter()
    try:
        result = _combine(a, b, operation, options)
    except MeshKernelError:
        raise
    except Exception as e:
        raise CSGError(f"Boolean {operation} failed: {e}", operation=operation) from e
    logger.info(
        "boolean_complete",
        operation=operation,
        duration_s=round(time.perf_counter() - start, 6),
        **mesh_fields(a, "a_"),
        **mesh_fields(b, "b_"),
        **mesh_fields(result, "result_"),
    )
    return result


def union(a: Mesh, b: Mesh, options: CSGOptions = CSGOptions()) -> Mesh:
    """
    All faces of both meshes, welded, with duplicate faces removed.

    Raises:
        CSGError: If an operand is invalid or the operation fails.
    """
    return _run(a, b, "union", options)


def intersection(a: Mesh, b: Mesh, options: CSGOptions = CSGOptions()) -> Mesh:
    """
    Faces of ``a`` inside ``b`` plus faces of ``b`` inside ``a``.

    Raises:
        CSGError: If an operand is invalid or the operation fails.
    """
    return _run(a, b, "intersection", options)


def difference(a: Mesh, b: Mesh, options: CSGOptions = CSGOptions()) -> Mesh:
    """
    Faces of ``a`` outside ``b``.

    With ``include_cutter_faces`` the faces of ``b`` inside ``a`` are added
    with reversed winding, capping the cut.

    Raises:
        CSGError: If an operand is invalid or the operation fails.
    """
    return _run(a, b, "difference", options)


def xor(a: Mesh, b: Mesh, options: CSGOptions = CSGOptions()) -> Mesh:
    """
    ``difference(union(a, b), intersection(a, b))``.

    Falls back to a clone of ``a`` if any step fails.

    Raises:
        CSGError: If an operand is invalid.
    """
    return _run(a, b, "xor", options)


def boolean_operation(
    a: Mesh, b: Mesh, operation: str, options: CSGOptions = CSGOptions()
) -> BooleanResult:
    """
    Run a boolean operation and report the outcome instead of raising.

    Returns:
        BooleanResult; on failure ``success`` is False and ``error`` says why.
    """
    start = time.perf_counter()
    try:
        mesh = _run(a, b, operation, options)
    except MeshKernelError as e:
        logger.warning("boolean_failed", operation=operation, error=e.message)
        return BooleanResult(
            operation=operation,
            error=str(e),
            duration_s=time.perf_counter() - start,
        )

    report = validate(mesh) if options.validate_result else None
    return BooleanResult(
        operation=operation,
        mesh=mesh,
        success=True,
        validation=report,
        duration_s=time.perf_counter() - start,
    )


def apply_boolean(
    mesh: Mesh,
    modifier: Mesh,
    operation: str,
    options: CSGOptions = CSGOptions(),
    history: Optional[BooleanHistory] = None,
) -> Mesh:
    """
    Apply ``modifier`` to ``mesh`` and optionally record it for undo.

    Returns:
        The new mesh; ``mesh`` itself is left untouched.

    Raises:
        CSGError: If the operation fails.
    """
    result = _run(mesh, modifier, operation, options)
    if history is not None:
        history.add_entry(operation, mesh, result, options)
    return result
