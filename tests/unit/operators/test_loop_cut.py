"""
Tests for loop cuts.
"""

import numpy as np
import pytest

from meshkernel.core.config import LoopCutOptions
from meshkernel.core.exceptions import InvalidSelectionError
from meshkernel.core.mesh import Mesh
from meshkernel.geometry.vectors import face_normal
from meshkernel.operators.loop_cut import loop_cut
from meshkernel.validation.validator import validate_topology


@pytest.fixture
def quad_and_triangle():
    """Unit quad with a triangle hanging off its right edge."""
    return Mesh.from_vertices_and_faces(
        [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), (2, 0.5, 0)],
        [[0, 1, 2, 3], [1, 4, 2]],
    )


class TestLoopCut:
    """Tests for loop_cut."""

    def test_cut_cube(self, unit_cube):
        """Test one cut around a cube keeps it closed."""
        result = loop_cut(unit_cube, [(0, 1)])

        assert len(unit_cube.vertices) == 12
        assert len(unit_cube.faces) == 10
        assert len(unit_cube.edges) == 20
        assert result.new_vertices == [8, 9, 10, 11]
        assert sorted(result.new_faces) == [0, 1, 2, 4, 6, 7, 8, 9]
        assert len(result.new_edges) == 12
        assert unit_cube.boundary_edges() == []
        assert validate_topology(unit_cube).is_valid
        for index in result.new_vertices:
            assert unit_cube.vertices[index].x == pytest.approx(0.5)

    def test_strips_keep_winding(self, unit_cube):
        result = loop_cut(unit_cube, [(0, 1)])
        for index in result.new_faces:
            points = unit_cube.face_positions(index)
            outward = points.mean(axis=0) - np.array([0.5, 0.5, 0.5])
            assert face_normal(points) @ outward > 0

    def test_two_rings(self, unit_cube):
        """Test crossing rings on a cube."""
        result = loop_cut(unit_cube, [(0, 1), (1, 2)])

        assert len(unit_cube.faces) == 16
        assert len(unit_cube.vertices) == 18
        assert len(unit_cube.edges) == 32
        assert result.new_vertices == list(range(8, 18))
        assert unit_cube.boundary_edges() == []

    def test_seed_on_cut_ring_is_skipped(self, unit_cube):
        loop_cut(unit_cube, [(0, 1), (2, 3)])
        assert len(unit_cube.faces) == 10
        assert len(unit_cube.vertices) == 12

    def test_several_cuts(self, square_plane):
        result = loop_cut(square_plane, [(0, 1)], LoopCutOptions(cuts=2))

        assert len(square_plane.faces) == 3
        assert len(square_plane.vertices) == 8
        assert len(square_plane.boundary_edges()) == 8
        xs = sorted(round(square_plane.vertices[i].x, 6) for i in result.new_vertices)
        assert xs == pytest.approx([1 / 3, 1 / 3, 2 / 3, 2 / 3])

    def test_ring_stops_at_triangle(self, quad_and_triangle):
        """Test cut points are threaded into the neighbouring triangle."""
        mesh = quad_and_triangle
        result = loop_cut(mesh, [(1, 2)])

        assert result.new_vertices == [5, 6]
        np.testing.assert_allclose(mesh.vertices[5].position, [1, 0.5, 0])
        np.testing.assert_allclose(mesh.vertices[6].position, [0, 0.5, 0])
        assert sorted(result.new_faces) == [0, 2]
        assert mesh.faces[1].vertices == [1, 4, 2, 5]
        assert mesh.find_edge(1, 2) is None
        assert len(mesh.boundary_edges()) == 6
        assert validate_topology(mesh).is_valid

    def test_face_uvs_are_split(self, square_plane):
        square_plane.faces[0].uvs = [np.array(uv, dtype=float) for uv in [(0, 0), (1, 0), (1, 1), (0, 1)]]
        loop_cut(square_plane, [(0, 1)])
        np.testing.assert_allclose(square_plane.faces[0].uvs[1], [0.5, 0])
        np.testing.assert_allclose(square_plane.faces[1].uvs[2], [1, 1])

    def test_vertex_attributes_are_interpolated(self, square_plane):
        for index, uv in [(0, (0, 0)), (1, (1, 0))]:
            square_plane.vertices[index].uv = np.array(uv, dtype=float)
            square_plane.vertices[index].normal = np.array([0.0, 0.0, 1.0])
        result = loop_cut(square_plane, [(0, 1)])
        cut = square_plane.vertices[result.new_vertices[0]]
        np.testing.assert_allclose(cut.uv, [0.5, 0])
        np.testing.assert_allclose(cut.normal, [0, 0, 1])

    def test_wire_edge(self):
        mesh = Mesh.from_vertices_and_faces([(0, 0, 0), (1, 0, 0)], [])
        mesh.add_edge(0, 1)
        with pytest.raises(InvalidSelectionError):
            loop_cut(mesh, [(0, 1)])

    def test_triangle_edge(self):
        mesh = Mesh.from_vertices_and_faces([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [[0, 1, 2]])
        with pytest.raises(InvalidSelectionError):
            loop_cut(mesh, [(0, 1)])

    def test_non_manifold_edge(self):
        mesh = Mesh.from_vertices_and_faces(
            [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0),
             (0, -1, 0), (1, -1, 0), (1, 0, 1), (0, 0, 1)],
            [[0, 1, 2, 3], [1, 0, 4, 5], [0, 1, 6, 7]],
        )
        with pytest.raises(InvalidSelectionError):
            loop_cut(mesh, [(0, 1)])

    def test_bad_seed_leaves_mesh_untouched(self, quad_and_triangle):
        with pytest.raises(InvalidSelectionError):
            loop_cut(quad_and_triangle, [(1, 2), (1, 4)])
        assert len(quad_and_triangle.faces) == 2
        assert len(quad_and_triangle.vertices) == 5
