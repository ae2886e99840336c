"""
Mesh analysis for diagnostics and the command line.

Combines kernel-level topology counts (polygon sizes, boundary and
non-manifold edges) with the solid properties trimesh computes on the
triangulated mesh (watertightness, volume, area, centre of mass).
"""

from collections import Counter

from meshkernel.core.exceptions import GeometryError
from meshkernel.core.geometry import GeometryConverter
from meshkernel.core.logging import get_logger, mesh_fields
from meshkernel.core.mesh import Mesh

logger = get_logger(__name__)


def polygon_histogram(mesh: Mesh) -> dict[str, int]:
    """Count faces by size: triangles, quads and n-gons."""
    sizes = Counter(len(face.vertices) for face in mesh.faces)
    return {
        "triangles": sizes.get(3, 0),
        "quads": sizes.get(4, 0),
        "ngons": sum(count for size, count in sizes.items() if size > 4),
    }


def analyze_mesh(mesh: Mesh) -> dict:
    """
    Analyze mesh quality and return a diagnostic report.

    Returns dict with: vertex_count, face_count, edge_count, triangles,
    quads, ngons, boundary_edges, non_manifold_edges, is_watertight,
    is_volume, euler_number, bounds_min, bounds_max, size, volume,
    surface_area, center_mass.

    Raises:
        GeometryError: If the mesh is empty or trimesh analysis fails.
    """
    if not mesh.faces:
        raise GeometryError("Mesh analysis failed: mesh has no faces", details=mesh_fields(mesh))

    counts = mesh.edge_face_counts()
    try:
        tmesh = GeometryConverter.to_trimesh(mesh)
        bounds = tmesh.bounds.tolist()  # [[xmin,ymin,zmin],[xmax,ymax,zmax]]
        size = (tmesh.bounds[1] - tmesh.bounds[0]).tolist()

        report = {
            "vertex_count": len(mesh.vertices),
            "face_count": len(mesh.faces),
            "edge_count": len(mesh.edges),
            **polygon_histogram(mesh),
            "boundary_edges": sum(1 for c in counts.values() if c == 1),
            "non_manifold_edges": sum(1 for c in counts.values() if c > 2),
            "is_watertight": bool(tmesh.is_watertight),
            "is_volume": bool(tmesh.is_volume),
            "euler_number": int(tmesh.euler_number),
            "bounds_min": bounds[0],
            "bounds_max": bounds[1],
            "size": size,
            "volume": float(tmesh.volume) if tmesh.is_volume else None,
            "surface_area": float(tmesh.area),
            "center_mass": tmesh.center_mass.tolist() if tmesh.is_volume else None,
        }
    except GeometryError:
        raise
    except Exception as e:
        raise GeometryError(f"Mesh analysis failed: {e}") from e

    logger.debug("analyze_mesh", **mesh_fields(mesh), is_watertight=report["is_watertight"])
    return report
