"""Custom exceptions for surface generation."""


class SeascapeError(Exception):
    """Base exception for surface generation errors."""

    pass


class InvalidParameterError(SeascapeError, ValueError):
    """Raised when a surface parameter is outside its valid domain."""

    pass


class ResourceError(SeascapeError):
    """Raised when a shared resource is released more often than acquired."""

    pass
