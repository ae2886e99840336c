"""
Custom exceptions for meshkernel.

All meshkernel exceptions inherit from MeshKernelError for easy catching.
"""

from typing import Any


class MeshKernelError(Exception):
    """Base exception for all meshkernel errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(MeshKernelError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidSelectionError(MeshKernelError):
    """Raised when a selection is empty or references out-of-range elements."""

    def __init__(
        self,
        message: str,
        indices: list[Any] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.indices = list(indices or [])


class IndexInvalidatedError(MeshKernelError):
    """Raised when an index would dangle or a selection is stale."""

    pass


class VertexCountMismatchError(MeshKernelError):
    """Raised when an operation requires equal-length vertex inputs."""

    def __init__(
        self,
        message: str,
        expected: int | None = None,
        actual: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.expected = expected
        self.actual = actual


class CSGError(MeshKernelError):
    """Raised when a boolean operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation


class GeometryError(MeshKernelError):
    """Raised when converting, loading or saving geometry fails."""

    pass
