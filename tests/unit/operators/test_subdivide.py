"""
Tests for face and surface subdivision.
"""

import numpy as np

from meshkernel.core.config import SubdivisionOptions
from meshkernel.operators.subdivide import subdivide_faces, subdivide_surface
from meshkernel.validation.validator import validate_topology


class TestSubdivideFaces:
    """Tests for in-place subdivision of selected faces."""

    def test_one_cube_face(self, unit_cube):
        result = subdivide_faces(unit_cube, [1])

        assert len(unit_cube.vertices) == 13
        assert len(unit_cube.faces) == 9
        assert len(unit_cube.edges) == 20
        assert len(result.new_vertices) == 5
        assert result.new_faces == [1, 6, 7, 8]
        assert validate_topology(unit_cube).is_valid

    def test_neighbours_are_crack_free(self, unit_cube):
        """Test midpoints are threaded into the unselected neighbours."""
        subdivide_faces(unit_cube, [1])

        assert unit_cube.boundary_edge_keys() == set()
        front = unit_cube.faces[2]
        assert len(front) == 5
        mid = front.vertices[3]
        np.testing.assert_allclose(unit_cube.vertices[mid].position, [0.5, 0.0, 1.0])

    def test_two_levels(self, unit_cube):
        subdivide_faces(unit_cube, [1], SubdivisionOptions(levels=2))
        assert len(unit_cube.faces) == 21
        assert len(unit_cube.vertices) == 29
        assert unit_cube.boundary_edge_keys() == set()

    def test_shared_midpoints(self, unit_cube):
        """Test adjacent selected faces share their common midpoint."""
        subdivide_faces(unit_cube, [1, 2])
        assert len(unit_cube.vertices) == 8 + 2 + 7
        assert unit_cube.boundary_edge_keys() == set()

    def test_uvs_are_split(self, square_plane):
        square_plane.faces[0].uvs = [np.array(uv, dtype=float) for uv in [(0, 0), (1, 0), (1, 1), (0, 1)]]
        subdivide_faces(square_plane, [0])
        first = square_plane.faces[0]
        np.testing.assert_allclose(first.uvs[0], [0, 0])
        np.testing.assert_allclose(first.uvs[2], [0.5, 0.5])


class TestSubdivideSurface:
    """Tests for whole-mesh subdivision."""

    def test_catmull_clark_cube(self, unit_cube):
        result = subdivide_surface(unit_cube)

        assert len(result.vertices) == 26
        assert len(result.faces) == 24
        assert all(len(face) == 4 for face in result.faces)
        assert result.boundary_edges() == []
        assert len(unit_cube.faces) == 6
        assert result.id != unit_cube.id

    def test_loop_cube(self, unit_cube):
        result = subdivide_surface(unit_cube, SubdivisionOptions(scheme="loop"))

        assert len(result.faces) == 48
        assert len(result.vertices) == 26
        assert all(len(face) == 3 for face in result.faces)
        assert result.boundary_edges() == []

    def test_zero_levels(self, unit_cube):
        result = subdivide_surface(unit_cube, SubdivisionOptions(levels=0))
        assert len(result.faces) == 6
        assert result is not unit_cube

    def test_smoothing_pass(self, unit_cube):
        plain = subdivide_surface(unit_cube)
        smoothed = subdivide_surface(unit_cube, SubdivisionOptions(iterations=2))
        assert len(smoothed.vertices) == len(plain.vertices)
        # corners are pulled toward the centre
        corner = np.linalg.norm(smoothed.vertices[6].position - 0.5)
        assert corner < np.linalg.norm(plain.vertices[6].position - 0.5)

    def test_two_levels(self, unit_cube):
        result = subdivide_surface(unit_cube, SubdivisionOptions(levels=2))
        assert len(result.faces) == 96
        assert result.boundary_edges() == []
        np.testing.assert_allclose(result.vertices[0].position, [0, 0, 0])
