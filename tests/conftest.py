"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest

from meshkernel.core.mesh import Mesh


def _box(lo, hi, name="Box"):
    """Axis-aligned box with outward-facing quads."""
    (x0, y0, z0), (x1, y1, z1) = lo, hi
    vertices = [
        (x0, y0, z0), (x1, y0, z0), (x1, y1, z0), (x0, y1, z0),
        (x0, y0, z1), (x1, y0, z1), (x1, y1, z1), (x0, y1, z1),
    ]
    faces = [
        [0, 3, 2, 1],  # bottom
        [4, 5, 6, 7],  # top
        [0, 1, 5, 4],  # front
        [1, 2, 6, 5],  # right
        [2, 3, 7, 6],  # back
        [3, 0, 4, 7],  # left
    ]
    return Mesh.from_vertices_and_faces(vertices, faces, name=name)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_box():
    """Factory for axis-aligned boxes: ``make_box(lo, hi, name)``."""
    return _box


@pytest.fixture
def unit_cube():
    """Closed unit cube [0, 1]^3 with six quads."""
    return _box((0, 0, 0), (1, 1, 1), name="cube")


@pytest.fixture
def square_plane():
    """Single counter-clockwise unit quad in the XY plane."""
    return Mesh.from_vertices_and_faces(
        [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)],
        [[0, 1, 2, 3]],
        name="plane",
    )


@pytest.fixture
def l_polygon():
    """Concave L-shaped hexagon (area 3) as a single face."""
    return Mesh.from_vertices_and_faces(
        [(0, 0, 0), (2, 0, 0), (2, 1, 0), (1, 1, 0), (1, 2, 0), (0, 2, 0)],
        [[0, 1, 2, 3, 4, 5]],
        name="L",
    )


@pytest.fixture
def split_quads():
    """Two adjacent quads whose shared edge is stored as duplicate vertices."""
    return Mesh.from_vertices_and_faces(
        [
            (0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0),
            (1, 0, 0), (2, 0, 0), (2, 1, 0), (1, 1, 0),
        ],
        [[0, 1, 2, 3], [4, 5, 6, 7]],
        name="split",
    )


@pytest.fixture
def sample_config_dir(temp_dir):
    """Create a sample configuration directory structure."""
    config_dir = temp_dir / "config"
    (config_dir / "profiles").mkdir(parents=True)

    kernel_config = """
csg:
  tolerance: 0.0001

inset:
  factor: 0.3
"""
    (config_dir / "kernel.yaml").write_text(kernel_config)

    precise_config = """
csg:
  tolerance: 1.0e-9
  validate_result: true

history:
  max_entries: 5
"""
    (config_dir / "profiles" / "precise.yaml").write_text(precise_config)

    return config_dir
