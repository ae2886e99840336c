"""
Tests for edge, vertex and face bevels.
"""

import numpy as np
import pytest

from meshkernel.core.config import BevelOptions
from meshkernel.core.exceptions import InvalidSelectionError
from meshkernel.core.mesh import Mesh
from meshkernel.geometry.vectors import face_normal
from meshkernel.operators.bevel import bevel_edges, bevel_faces, bevel_vertices


class TestBevelEdges:
    """Tests for bevel_edges."""

    def test_single_segment(self, unit_cube):
        result = bevel_edges(unit_cube, [(4, 5)], BevelOptions(distance=0.1))

        assert len(result.new_vertices) == 2
        assert len(result.new_faces) == 1
        assert len(unit_cube.faces) == 7

        # top (+z) and front (-y) normals average to (0, -1, 1) / sqrt(2)
        step = np.array([0.0, -1.0, 1.0]) / np.sqrt(2) * 0.1
        np.testing.assert_allclose(unit_cube.vertices[8].position, [0, 0, 1] + step)
        np.testing.assert_allclose(unit_cube.vertices[9].position, [1, 0, 1] + step)

    def test_segments(self, unit_cube):
        result = bevel_edges(unit_cube, ["4-5"], BevelOptions(distance=0.3, segments=3))
        assert len(result.new_vertices) == 6
        assert len(result.new_faces) == 3
        last = unit_cube.vertices[result.new_vertices[-1]].position
        assert np.linalg.norm(last - [1, 0, 1]) == pytest.approx(0.3)

    def test_wire_edge_skipped(self):
        mesh = Mesh()
        mesh.add_vertex([0, 0, 0])
        mesh.add_vertex([1, 0, 0])
        mesh.add_edge(0, 1)
        result = bevel_edges(mesh, [(0, 1)])
        assert result.is_empty

    def test_missing_edge(self, unit_cube):
        with pytest.raises(InvalidSelectionError):
            bevel_edges(unit_cube, [(0, 6)])

    def test_malformed_key(self, unit_cube):
        with pytest.raises(InvalidSelectionError):
            bevel_edges(unit_cube, ["x-y"])


class TestBevelVertices:
    """Tests for bevel_vertices."""

    def test_cube_corner(self, unit_cube):
        result = bevel_vertices(unit_cube, [6], BevelOptions(distance=0.1))

        assert len(result.new_vertices) == 3
        assert len(result.new_faces) == 3
        ring = {tuple(np.round(unit_cube.vertices[v].position, 6)) for v in result.new_vertices}
        assert ring == {(1.0, 1.0, 0.9), (1.0, 0.9, 1.0), (0.9, 1.0, 1.0)}

        outward = np.ones(3) / np.sqrt(3)
        for index in result.new_faces:
            assert unit_cube.faces[index].vertices[0] == 6
            assert face_normal(unit_cube.face_positions(index)) @ outward > 0

    def test_two_neighbours_make_one_wedge(self):
        mesh = Mesh()
        for p in [(0, 0, 0), (1, 0, 0), (0, 1, 0)]:
            mesh.add_vertex(p)
        mesh.add_edge(0, 1)
        mesh.add_edge(0, 2)
        result = bevel_vertices(mesh, [0])
        assert len(result.new_faces) == 1

    def test_needs_two_edges(self):
        mesh = Mesh()
        mesh.add_vertex([0, 0, 0])
        mesh.add_vertex([1, 0, 0])
        mesh.add_edge(0, 1)
        with pytest.raises(InvalidSelectionError):
            bevel_vertices(mesh, [0])
        assert len(mesh.vertices) == 2


class TestBevelFaces:
    """Tests for bevel_faces."""

    def test_cube_face(self, unit_cube):
        result = bevel_faces(unit_cube, [1], BevelOptions(distance=0.1))

        assert len(result.new_vertices) == 4
        assert len(unit_cube.faces) == 10
        assert unit_cube.boundary_edges() == []

        corner = unit_cube.face_positions(1)[0]
        expected = np.array([0.0, 0.0, 1.0]) + np.array([0.5, 0.5, np.sqrt(0.5)]) * 0.1
        np.testing.assert_allclose(corner, expected)

    def test_degenerate_face_skipped(self):
        mesh = Mesh.from_vertices_and_faces([(0, 0, 0), (1, 0, 0), (2, 0, 0)], [[0, 1, 2]])
        assert bevel_faces(mesh, [0]).is_empty
