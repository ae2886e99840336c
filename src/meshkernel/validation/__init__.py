"""
Validation module — structural checks and best-effort repair.
"""

from meshkernel.validation.repair import RepairReport, repair
from meshkernel.validation.validator import (
    ValidationReport,
    validate,
    validate_geometry,
    validate_normals,
    validate_topology,
    validate_uvs,
)

__all__ = [
    "RepairReport",
    "repair",
    "ValidationReport",
    "validate",
    "validate_geometry",
    "validate_normals",
    "validate_topology",
    "validate_uvs",
]
