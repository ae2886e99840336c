"""
Tests for face inset.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from meshkernel.core.config import InsetOptions
from meshkernel.core.selection import Selection
from meshkernel.geometry.vectors import face_normal
from meshkernel.operators.inset import inset_faces
from meshkernel.validation.validator import validate_topology


class TestInsetFaces:
    """Tests for inset_faces."""

    def test_inset_cube_face(self, unit_cube):
        """Test insetting one quad of a cube."""
        result = inset_faces(unit_cube, [1], InsetOptions(factor=0.2))

        assert len(unit_cube.vertices) == 12
        assert len(unit_cube.faces) == 10
        assert result.new_vertices == [8, 9, 10, 11]
        assert sorted(result.new_faces) == [1, 6, 7, 8, 9]
        assert unit_cube.boundary_edges() == []
        assert validate_topology(unit_cube).is_valid

        inner = unit_cube.face_positions(1)
        np.testing.assert_allclose(inner[0], [0.1, 0.1, 1.0])
        np.testing.assert_allclose(inner[2], [0.9, 0.9, 1.0])

    def test_inset_bottom_face_deep(self, unit_cube):
        """Test a large inset factor pulls the ring close to the centroid."""
        result = inset_faces(unit_cube, [0], InsetOptions(factor=0.85))

        assert len(unit_cube.vertices) == 12
        assert len(unit_cube.faces) == 10
        assert sorted(result.new_faces) == [0, 6, 7, 8, 9]
        assert result.removed_faces == []
        assert unit_cube.boundary_edges() == []

        inner = unit_cube.face_positions(0)
        np.testing.assert_allclose(inner[0], [0.425, 0.425, 0.0])
        np.testing.assert_allclose(inner[2], [0.575, 0.575, 0.0])
        np.testing.assert_allclose(face_normal(inner), [0, 0, -1])

    def test_winding_is_preserved(self, square_plane):
        result = inset_faces(square_plane, [0])
        for index in result.new_faces:
            np.testing.assert_allclose(face_normal(square_plane.face_positions(index)), [0, 0, 1])

    def test_inner_uvs_shrink(self, square_plane):
        square_plane.faces[0].uvs = [np.array(uv, dtype=float) for uv in [(0, 0), (1, 0), (1, 1), (0, 1)]]
        inset_faces(square_plane, [0], InsetOptions(factor=0.5))
        inner = square_plane.faces[0]
        np.testing.assert_allclose(inner.uvs[0], [0.25, 0.25])
        np.testing.assert_allclose(inner.uvs[2], [0.75, 0.75])

    def test_ring_copies_vertex_attributes(self, square_plane):
        square_plane.vertices[0].normal = np.array([0.0, 0.0, 1.0])
        result = inset_faces(square_plane, [0])
        np.testing.assert_allclose(square_plane.vertices[result.new_vertices[0]].normal, [0, 0, 1])

    def test_selection(self, unit_cube):
        result = inset_faces(unit_cube, Selection.of(unit_cube, faces=[0, 1]))
        assert len(result.new_vertices) == 8
        assert len(unit_cube.faces) == 14

    def test_factor_out_of_range(self):
        with pytest.raises(ValidationError):
            InsetOptions(factor=1.5)
