"""
Tests for structured logging setup.
"""

import io
import json

import pytest

from meshkernel.core.logging import configure_logging, get_logger, log_duration, mesh_fields


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    yield stream
    configure_logging(level="WARNING")


def _events(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_events(self, log_stream):
        configure_logging(level="INFO", json_output=True, stream=log_stream)
        get_logger("meshkernel.tests").info("inset_faces", faces=1, new_vertices=4)

        events = _events(log_stream)
        assert len(events) == 1
        event = events[0]
        assert event["event"] == "inset_faces"
        assert event["faces"] == 1
        assert event["new_vertices"] == 4
        assert event["level"] == "info"
        assert event["logger"] == "meshkernel.tests"
        assert "timestamp" in event

    def test_level_filters_events(self, log_stream):
        configure_logging(level="WARNING", json_output=True, stream=log_stream)
        logger = get_logger("meshkernel.tests")
        logger.info("dropped")
        logger.warning("kept")
        assert [e["event"] for e in _events(log_stream)] == ["kept"]

    def test_unknown_level_falls_back_to_info(self, log_stream):
        configure_logging(level="chatty", json_output=True, stream=log_stream)
        get_logger("meshkernel.tests").info("shown")
        assert [e["event"] for e in _events(log_stream)] == ["shown"]

    def test_console_output(self, log_stream):
        configure_logging(level="INFO", stream=log_stream)
        get_logger("meshkernel.tests").info("extrude_faces", faces=2)
        output = log_stream.getvalue()
        assert "extrude_faces" in output
        assert "faces=2" in output


class TestHelpers:
    """Tests for log_duration and mesh_fields."""

    def test_log_duration_attaches_extra_fields(self, log_stream):
        configure_logging(level="DEBUG", json_output=True, stream=log_stream)
        with log_duration(get_logger("meshkernel.tests"), "bevel_edges", edges=3) as extra:
            extra["new_faces"] = 6

        event = _events(log_stream)[-1]
        assert event["event"] == "bevel_edges"
        assert event["edges"] == 3
        assert event["new_faces"] == 6
        assert event["duration_s"] >= 0.0

    def test_mesh_fields(self, unit_cube):
        assert mesh_fields(unit_cube, "a_") == {"a_vertices": 8, "a_faces": 6, "a_edges": 12}
