"""
Tests for the command-line interface.
"""

import pytest
from click.testing import CliRunner

from meshkernel import __version__
from meshkernel.cli import main
from meshkernel.core.geometry import GeometryLoader


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cube_file(unit_cube, temp_dir):
    path = temp_dir / "cube.ply"
    GeometryLoader.save(unit_cube, path)
    return path


@pytest.fixture
def cutter_file(make_box, temp_dir):
    path = temp_dir / "cutter.ply"
    GeometryLoader.save(make_box((0.25, -0.5, -0.5), (1.25, 1.5, 1.5)), path)
    return path


class TestCLI:
    """Tests for the meshkernel command group."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_info(self, runner, cube_file):
        result = runner.invoke(main, ["info", str(cube_file)])
        assert result.exit_code == 0
        assert "vertex_count" in result.output
        assert "is_watertight" in result.output

    def test_info_missing_file(self, runner, temp_dir):
        result = runner.invoke(main, ["info", str(temp_dir / "missing.ply")])
        assert result.exit_code == 2

    def test_validate(self, runner, cube_file):
        result = runner.invoke(main, ["validate", str(cube_file)])
        assert result.exit_code == 0
        assert "is valid" in result.output

    def test_validate_and_repair(self, runner, cube_file, temp_dir):
        output = temp_dir / "repaired.ply"
        result = runner.invoke(main, ["validate", str(cube_file), "--repair", "-o", str(output)])
        assert result.exit_code == 0
        assert "Repair" in result.output
        assert output.exists()

    def test_triangulate(self, runner, cube_file, temp_dir):
        output = temp_dir / "tris.stl"
        result = runner.invoke(main, ["triangulate", str(cube_file), str(output)])
        assert result.exit_code == 0
        assert output.exists()
        assert len(GeometryLoader.load(output).faces) == 12

    def test_boolean_difference(self, runner, cube_file, cutter_file, temp_dir):
        output = temp_dir / "cut.ply"
        result = runner.invoke(
            main,
            ["boolean", str(cube_file), str(cutter_file), "--op", "difference", "-o", str(output)],
        )
        assert result.exit_code == 0
        assert output.exists()

    def test_boolean_unknown_op(self, runner, cube_file, cutter_file, temp_dir):
        result = runner.invoke(
            main,
            ["boolean", str(cube_file), str(cutter_file), "--op", "merge", "-o", str(temp_dir / "x.ply")],
        )
        assert result.exit_code == 2

    def test_profiles(self, runner, sample_config_dir):
        result = runner.invoke(main, ["--config-dir", str(sample_config_dir), "profiles"])
        assert result.exit_code == 0
        assert "precise" in result.output

    def test_profile_requires_config_dir(self, runner, cube_file):
        result = runner.invoke(main, ["--profile", "precise", "validate", str(cube_file)])
        assert result.exit_code == 1
