"""
Tests for vertex smoothing.
"""

import numpy as np

from meshkernel.core.config import SmoothingOptions
from meshkernel.operators.smoothing import boundary_vertices, laplacian_smooth, smooth_vertices


class TestSmoothVertices:
    """Tests for smooth_vertices."""

    def test_moves_toward_neighbour_average(self, unit_cube):
        result = smooth_vertices(unit_cube, SmoothingOptions(iterations=1, factor=0.5))
        # neighbours of (0, 0, 0) average to (1/3, 1/3, 1/3)
        np.testing.assert_allclose(result.vertices[0].position, [1 / 6] * 3)
        np.testing.assert_allclose(unit_cube.vertices[0].position, [0, 0, 0])

    def test_returns_new_mesh(self, unit_cube):
        result = smooth_vertices(unit_cube)
        assert result is not unit_cube
        assert result.id != unit_cube.id
        assert [f.vertices for f in result.faces] == [f.vertices for f in unit_cube.faces]

    def test_zero_iterations(self, unit_cube):
        result = smooth_vertices(unit_cube, SmoothingOptions(iterations=0))
        np.testing.assert_allclose(result.vertex_positions(), unit_cube.vertex_positions())

    def test_preserve_boundaries(self, square_plane):
        result = smooth_vertices(square_plane, SmoothingOptions(preserve_boundaries=True))
        np.testing.assert_allclose(result.vertex_positions(), square_plane.vertex_positions())

    def test_isolated_vertex_does_not_move(self, square_plane):
        square_plane.add_vertex([5, 5, 5])
        result = smooth_vertices(square_plane, SmoothingOptions(iterations=3))
        np.testing.assert_allclose(result.vertices[4].position, [5, 5, 5])

    def test_updates_are_simultaneous(self, unit_cube):
        """Test every vertex reads the previous iteration's positions."""
        result = smooth_vertices(unit_cube, SmoothingOptions(iterations=1, factor=1.0))
        np.testing.assert_allclose(result.vertices[6].position, [2 / 3] * 3)


class TestLaplacianSmooth:
    """Tests for laplacian_smooth."""

    def test_step_is_lambda_times_factor(self, unit_cube):
        options = SmoothingOptions(iterations=1, factor=0.5, laplacian_lambda=0.5)
        result = laplacian_smooth(unit_cube, options)
        np.testing.assert_allclose(result.vertices[0].position, [1 / 12] * 3)

    def test_boundary_vertices(self, square_plane, unit_cube):
        assert boundary_vertices(square_plane) == {0, 1, 2, 3}
        assert boundary_vertices(unit_cube) == set()
