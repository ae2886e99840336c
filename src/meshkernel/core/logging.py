"""
Structured logging configuration for meshkernel.

Uses structlog (https://www.structlog.org/) so operators can emit events with
element counts attached as key/value pairs. Events render as JSON lines or as
colored console lines, always through the standard library root logger so a
host application's handlers see them too.

Usage::

    from meshkernel.core.logging import configure_logging, get_logger

    configure_logging(json_output=False)  # Call once at startup
    logger = get_logger(__name__)
    logger.info("inset_faces", faces=1, new_vertices=4)
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional, TextIO

import structlog

# Applied to structlog events before they reach the stdlib formatter
_EVENT_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
)


def _renderer(json_output: bool, stream: TextIO) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Route meshkernel events through structlog onto one stream handler.

    Call this once at startup; the CLI does so from its ``--log-level`` and
    ``--json-logs`` options. Calling it again replaces the previous setup.

    Args:
        level: Minimum log level name; unknown names fall back to INFO.
        json_output: Render one JSON object per line instead of console text.
        stream: Where to write, stderr by default.
    """
    stream = stream if stream is not None else sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=list(_EVENT_PROCESSORS),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output, stream),
            ],
        )
    )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    structlog.configure(
        processors=[*_EVENT_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger for the given module name.

    Args:
        name: Module name, typically ``__name__``.

    Returns:
        A bound structlog logger instance.
    """
    return structlog.get_logger(name)


def mesh_fields(mesh: Any, prefix: str = "") -> dict[str, Any]:
    """Key/value pairs describing a mesh, for binding onto log events."""
    return {
        f"{prefix}vertices": len(mesh.vertices),
        f"{prefix}faces": len(mesh.faces),
        f"{prefix}edges": len(mesh.edges),
    }


@contextmanager
def log_duration(
    logger: structlog.stdlib.BoundLogger, event: str, **fields: Any
) -> Iterator[dict[str, Any]]:
    """
    Log ``event`` with its wall-clock duration once the block finishes.

    The yielded dict can be filled with extra fields (e.g. result counts)
    inside the block; they are attached to the emitted event.
    """
    extra: dict[str, Any] = {}
    start = time.perf_counter()
    try:
        yield extra
    finally:
        logger.debug(
            event,
            duration_s=round(time.perf_counter() - start, 6),
            **fields,
            **extra,
        )
