"""
Tests for the indexed mesh store.
"""

import numpy as np
import pytest

from meshkernel.core.exceptions import IndexInvalidatedError, InvalidSelectionError
from meshkernel.core.mesh import Edge, Face, Mesh, Vertex, edge_key, parse_edge_key


class TestEdgeKeys:
    """Tests for canonical edge keys."""

    def test_key_is_order_independent(self):
        assert edge_key(3, 1) == "1-3"
        assert edge_key(1, 3) == "1-3"

    def test_parse_string_and_pair(self):
        assert parse_edge_key("4-2") == (2, 4)
        assert parse_edge_key((5, 0)) == (0, 5)

    @pytest.mark.parametrize("key", ["a-b", "1-2-3", "12", "-1-2"])
    def test_parse_malformed(self, key):
        """Test malformed keys are rejected."""
        with pytest.raises(InvalidSelectionError):
            parse_edge_key(key)


class TestElements:
    """Tests for Vertex, Edge and Face values."""

    def test_vertex_validates_shapes(self):
        vertex = Vertex([1, 2, 3], uv=[0.5, 0.5])
        assert vertex.x == 1.0 and vertex.z == 3.0
        with pytest.raises(ValueError):
            Vertex([1, 2])
        with pytest.raises(ValueError):
            Vertex([0, 0, 0], uv=[0, 0, 0])

    def test_vertex_moved_to_keeps_attributes(self):
        vertex = Vertex([0, 0, 0], normal=[0, 0, 1], metadata={"tag": "a"})
        moved = vertex.moved_to([1, 1, 1])
        np.testing.assert_allclose(moved.position, [1, 1, 1])
        np.testing.assert_allclose(moved.normal, [0, 0, 1])
        assert moved.metadata == {"tag": "a"}
        np.testing.assert_allclose(vertex.position, [0, 0, 0])

    def test_edge_other(self):
        edge = Edge(2, 7)
        assert edge.key == "2-7"
        assert edge.other(2) == 7
        assert edge.other(5) == -1

    def test_face_edge_pairs(self):
        face = Face([0, 1, 2])
        assert face.edge_pairs() == [(0, 1), (1, 2), (2, 0)]
        assert face.edge_keys() == ["0-1", "1-2", "0-2"]

    def test_face_reversed(self):
        face = Face([0, 1, 2], normal=[0, 0, 1], uvs=[[0, 0], [1, 0], [0, 1]])
        flipped = face.reversed()
        assert flipped.vertices == [2, 1, 0]
        np.testing.assert_allclose(flipped.normal, [0, 0, -1])
        np.testing.assert_allclose(flipped.uvs[0], [0, 1])
        assert face.vertices == [0, 1, 2]

    def test_face_derive_inherits_material(self):
        face = Face([0, 1, 2], material_index=3, metadata={"group": 1}, uvs=[[0, 0]] * 3)
        child = face.derive([0, 2, 5])
        assert child.material_index == 3
        assert child.metadata == {"group": 1}
        assert child.uvs is None

    def test_face_uv_count_must_match(self):
        with pytest.raises(ValueError):
            Face([0, 1, 2], uvs=[[0, 0], [1, 0]])


class TestMeshConstruction:
    """Tests for adding elements."""

    def test_add_face_registers_edges(self, square_plane):
        assert len(square_plane.edges) == 4
        assert square_plane.find_edge(3, 0) is not None
        assert square_plane.find_edge(0, 2) is None

    def test_shared_edges_are_not_duplicated(self, unit_cube):
        assert len(unit_cube.vertices) == 8
        assert len(unit_cube.faces) == 6
        assert len(unit_cube.edges) == 12

    def test_add_edge_deduplicates(self, square_plane):
        index = square_plane.add_edge(1, 0)
        assert index == square_plane.find_edge(0, 1)
        assert len(square_plane.edges) == 4

    def test_add_edge_rejects_loops(self, square_plane):
        with pytest.raises(InvalidSelectionError):
            square_plane.add_edge(1, 1)

    def test_add_face_too_small(self, square_plane):
        with pytest.raises(InvalidSelectionError):
            square_plane.add_face([0, 1])

    def test_add_face_repeated_vertex(self, square_plane):
        with pytest.raises(InvalidSelectionError):
            square_plane.add_face([0, 1, 1])

    def test_add_face_out_of_range(self, square_plane):
        with pytest.raises(InvalidSelectionError) as exc_info:
            square_plane.add_face([0, 1, 9])
        assert exc_info.value.indices == [9]

    def test_getters_return_none_out_of_range(self, square_plane):
        assert square_plane.get_vertex(10) is None
        assert square_plane.get_face(-1) is None
        assert square_plane.get_edge(0) is not None


class TestMeshQueries:
    """Tests for adjacency queries."""

    def test_boundary_edges(self, square_plane, unit_cube):
        assert len(square_plane.boundary_edges()) == 4
        assert unit_cube.boundary_edges() == []

    def test_faces_using_edge(self, unit_cube):
        assert sorted(unit_cube.faces_using_edge(4, 5)) == [1, 2]

    def test_vertex_neighbors(self, unit_cube):
        assert unit_cube.vertex_neighbors(0) == [1, 3, 4]

    def test_vertex_positions(self, unit_cube):
        positions = unit_cube.vertex_positions()
        assert positions.shape == (8, 3)
        np.testing.assert_allclose(positions[6], [1, 1, 1])
        assert Mesh().vertex_positions().shape == (0, 3)


class TestMeshRemoval:
    """Tests for removal and reindexing."""

    def test_remove_faces_prunes_edges(self, unit_cube):
        revision = unit_cube.revision
        remap = unit_cube.remove_faces([1])
        assert len(unit_cube.faces) == 5
        assert len(unit_cube.edges) == 12
        assert remap == {0: 0, 2: 1, 3: 2, 4: 3, 5: 4}
        assert unit_cube.revision == revision + 1

        unit_cube.remove_faces([0, 1])
        # edges 4-5 and 0-1 lost both users
        assert unit_cube.find_edge(0, 1) is None
        assert unit_cube.find_edge(4, 5) is None

    def test_remove_faces_out_of_range(self, unit_cube):
        with pytest.raises(InvalidSelectionError):
            unit_cube.remove_faces([6])

    def test_remove_referenced_vertex(self, unit_cube):
        with pytest.raises(IndexInvalidatedError):
            unit_cube.remove_vertex(0)

    def test_remove_vertex_cascade(self, unit_cube):
        unit_cube.remove_vertex(0, cascade=True)
        assert len(unit_cube.vertices) == 7
        assert len(unit_cube.faces) == 3
        for face in unit_cube.faces:
            assert all(0 <= v < 7 for v in face.vertices)
        for edge in unit_cube.edges:
            assert unit_cube.find_edge(edge.v1, edge.v2) is not None

    def test_remove_vertex_shifts_indices(self, square_plane):
        extra = square_plane.add_vertex([5, 5, 5])
        square_plane.add_vertex([6, 6, 6])
        square_plane.remove_vertex(extra)
        assert len(square_plane.vertices) == 5
        np.testing.assert_allclose(square_plane.vertices[4].position, [6, 6, 6])

    def test_remove_edge_in_use(self, square_plane):
        index = square_plane.find_edge(0, 1)
        with pytest.raises(IndexInvalidatedError):
            square_plane.remove_edge(index)
        square_plane.remove_edge(index, cascade=True)
        assert square_plane.faces == []
        assert square_plane.edges == []

    def test_wire_edge_survives_rebuild(self, square_plane):
        square_plane.add_vertex([2, 0, 0])
        square_plane.add_edge(1, 4)
        assert square_plane.wire_edges() == [(1, 4)]
        square_plane.rebuild_edges()
        assert square_plane.find_edge(1, 4) is not None
        assert len(square_plane.edges) == 5

    def test_rebuild_edges_keeps_metadata(self, square_plane):
        square_plane.edges[square_plane.find_edge(0, 1)].metadata["crease"] = 1.0
        square_plane.rebuild_edges()
        assert square_plane.edges[square_plane.find_edge(0, 1)].metadata == {"crease": 1.0}


class TestMeshClone:
    """Tests for deep copies."""

    def test_clone_is_independent(self, unit_cube):
        duplicate = unit_cube.clone()
        assert duplicate.id != unit_cube.id
        duplicate.vertices[0].position[0] = 42.0
        duplicate.faces[0].vertices.reverse()
        assert unit_cube.vertices[0].x == 0.0
        assert unit_cube.faces[0].vertices == [0, 3, 2, 1]

    def test_repr(self, unit_cube):
        assert repr(unit_cube) == "Mesh(name='cube', vertices=8, edges=12, faces=6)"
