"""
Tests for mesh analysis.
"""

import pytest

from meshkernel.core.exceptions import GeometryError
from meshkernel.core.mesh import Mesh
from meshkernel.geometry.analysis import analyze_mesh, polygon_histogram


class TestAnalyzeMesh:
    """Tests for analyze_mesh."""

    def test_closed_cube(self, unit_cube):
        report = analyze_mesh(unit_cube)

        assert report["vertex_count"] == 8
        assert report["face_count"] == 6
        assert report["edge_count"] == 12
        assert report["quads"] == 6
        assert report["boundary_edges"] == 0
        assert report["non_manifold_edges"] == 0
        assert report["is_watertight"] is True
        assert report["volume"] == pytest.approx(1.0)
        assert report["surface_area"] == pytest.approx(6.0)
        assert report["size"] == pytest.approx([1.0, 1.0, 1.0])

    def test_open_plane(self, square_plane):
        report = analyze_mesh(square_plane)
        assert report["boundary_edges"] == 4
        assert report["is_watertight"] is False
        assert report["volume"] is None

    def test_empty_mesh(self):
        with pytest.raises(GeometryError):
            analyze_mesh(Mesh())


def test_polygon_histogram(l_polygon, unit_cube):
    assert polygon_histogram(l_polygon) == {"triangles": 0, "quads": 0, "ngons": 1}
    assert polygon_histogram(unit_cube)["quads"] == 6
