"""
Mesh validation.

Four independent passes (topology, geometry, UVs, normals) each return a
``ValidationReport``; ``validate`` unions them. Errors are violations of the
structural invariants every operator must preserve. Warnings describe
legal-but-suspicious data (orphaned or duplicate vertices, zero-area faces,
zero-length edges, UVs outside the unit square, missing attributes) and
never fail validation. Validation never modifies the mesh.
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from meshkernel.core.config import ValidationOptions
from meshkernel.core.logging import get_logger, mesh_fields
from meshkernel.core.mesh import Mesh
from meshkernel.geometry.vectors import polygon_area

logger = get_logger(__name__)


@dataclass
class ValidationReport:
    """Errors and warnings found on a mesh."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationReport") -> "ValidationReport":
        return ValidationReport(self.errors + other.errors, self.warnings + other.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {"is_valid": self.is_valid, "errors": list(self.errors), "warnings": list(self.warnings)}


def _in_range(loop: list[int], count: int) -> bool:
    return all(0 <= v < count for v in loop)


def validate_topology(mesh: Mesh, options: ValidationOptions = ValidationOptions()) -> ValidationReport:
    """Index ranges, face sizes, repeated corners, edge endpoints, orphans."""
    report = ValidationReport()
    count = len(mesh.vertices)
    referenced: set[int] = set()

    for index, face in enumerate(mesh.faces):
        loop = face.vertices
        if len(loop) < 3:
            report.errors.append(f"Face {index} has {len(loop)} vertices (minimum 3)")
        bad = [v for v in loop if not 0 <= v < count]
        if bad:
            report.errors.append(f"Face {index} references out-of-range vertices {bad}")
        for i in range(len(loop)):
            if len(loop) > 1 and loop[i] == loop[i - 1]:
                report.errors.append(f"Face {index} repeats vertex {loop[i]} consecutively")
                break
        referenced.update(loop)

    for index, edge in enumerate(mesh.edges):
        if not (0 <= edge.v1 < count and 0 <= edge.v2 < count):
            report.errors.append(f"Edge {index} references out-of-range vertices ({edge.v1}, {edge.v2})")
        elif edge.v1 == edge.v2:
            report.errors.append(f"Edge {index} has identical endpoints ({edge.v1})")
        referenced.update((edge.v1, edge.v2))

    orphans = [i for i in range(count) if i not in referenced]
    if orphans:
        report.warnings.append(f"{len(orphans)} orphaned vertices: {orphans[:20]}")
    return report


def validate_geometry(mesh: Mesh, options: ValidationOptions = ValidationOptions()) -> ValidationReport:
    """Finite positions, duplicate positions, zero-area faces, zero-length edges."""
    report = ValidationReport()
    count = len(mesh.vertices)
    positions = mesh.vertex_positions()

    non_finite = [i for i in range(count) if not np.all(np.isfinite(positions[i]))]
    if non_finite:
        report.errors.append(f"Vertices with non-finite positions: {non_finite[:20]}")

    seen: dict[tuple, int] = {}
    duplicates = 0
    for i in range(count):
        key = tuple(np.round(positions[i], options.position_precision).tolist())
        if key in seen:
            duplicates += 1
        else:
            seen[key] = i
    if duplicates:
        report.warnings.append(f"{duplicates} vertices duplicate another vertex position")

    zero_area = []
    zero_length = 0
    for index, face in enumerate(mesh.faces):
        loop = face.vertices
        if len(loop) < 3 or not _in_range(loop, count):
            continue
        points = positions[loop]
        if polygon_area(points) <= options.area_epsilon:
            zero_area.append(index)
        lengths = np.linalg.norm(points - np.roll(points, -1, axis=0), axis=1)
        zero_length += int(np.sum(lengths <= options.area_epsilon))
    if zero_area:
        report.warnings.append(f"{len(zero_area)} zero-area faces: {zero_area[:20]}")
    if zero_length:
        report.warnings.append(f"{zero_length} zero-length face edges")
    return report


def validate_uvs(mesh: Mesh, options: ValidationOptions = ValidationOptions()) -> ValidationReport:
    """Finite UVs, per-corner UV counts, UVs outside [0, 1], missing UVs."""
    report = ValidationReport()
    has_uvs = False
    outside = 0

    for index, vertex in enumerate(mesh.vertices):
        if vertex.uv is None:
            continue
        has_uvs = True
        if not np.all(np.isfinite(vertex.uv)):
            report.errors.append(f"Vertex {index} has a non-finite UV")
        elif np.any(vertex.uv < 0.0) or np.any(vertex.uv > 1.0):
            outside += 1

    for index, face in enumerate(mesh.faces):
        if face.uvs is None:
            continue
        has_uvs = True
        if len(face.uvs) != len(face.vertices):
            report.errors.append(
                f"Face {index} has {len(face.uvs)} UVs for {len(face.vertices)} corners"
            )
        for uv in face.uvs:
            if not np.all(np.isfinite(uv)):
                report.errors.append(f"Face {index} has a non-finite UV")
                break
            if np.any(uv < 0.0) or np.any(uv > 1.0):
                outside += 1

    if outside:
        report.warnings.append(f"{outside} UV coordinates outside [0, 1]")
    if not has_uvs and mesh.vertices and options.warn_missing_attributes:
        report.warnings.append("Mesh has no UV coordinates")
    return report


def validate_normals(mesh: Mesh, options: ValidationOptions = ValidationOptions()) -> ValidationReport:
    """Explicit normals must be finite and non-zero."""
    report = ValidationReport()
    has_normals = False

    def check(normal: np.ndarray, label: str) -> None:
        if not np.all(np.isfinite(normal)):
            report.errors.append(f"{label} has a non-finite normal")
        elif np.linalg.norm(normal) <= options.normal_epsilon:
            report.errors.append(f"{label} has a zero-length normal")

    for index, vertex in enumerate(mesh.vertices):
        if vertex.normal is not None:
            has_normals = True
            check(vertex.normal, f"Vertex {index}")
    for index, face in enumerate(mesh.faces):
        if face.normal is not None:
            has_normals = True
            check(face.normal, f"Face {index}")

    if not has_normals and mesh.vertices and options.warn_missing_attributes:
        report.warnings.append("Mesh has no explicit normals")
    return report


def validate(mesh: Mesh, options: ValidationOptions = ValidationOptions()) -> ValidationReport:
    """
    Run every validation pass and combine the results.

    Deterministic and side-effect free.
    """
    report = ValidationReport()
    for check in (validate_topology, validate_geometry, validate_uvs, validate_normals):
        report = report.merge(check(mesh, options))
    logger.debug(
        "validate",
        **mesh_fields(mesh),
        errors=len(report.errors),
        warnings=len(report.warnings),
    )
    return report
