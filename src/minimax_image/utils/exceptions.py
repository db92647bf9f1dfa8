"""
Custom exceptions for minimax_image.

This module defines all custom exceptions used throughout the application,
plus ErrorInfo, the structured error value carried in tool results.
"""

from dataclasses import dataclass


class MinimaxImageError(Exception):
    """Base exception for all minimax_image errors."""

    pass


class ValidationError(MinimaxImageError):
    """Raised when caller input fails validation (before any remote call)."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class ConfigurationError(MinimaxImageError):
    """Raised when there is a configuration problem."""

    pass


class RemoteError(MinimaxImageError):
    """Raised when the remote inference API fails (auth, rate limit, server, transport)."""

    def __init__(self, message: str, status_code: int = 0, response: str = "") -> None:
        """
        Initialize remote error.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response: Raw API response (if available)
        """
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class NetworkError(RemoteError):
    """Raised when the remote API cannot be reached."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(RemoteError):
    """Raised when a remote call or a synchronous generation times out."""

    def __init__(self, message: str, job_id: str = "") -> None:
        self.job_id = job_id
        super().__init__(message)


class NotFoundError(RemoteError):
    """Raised when a job id is unknown to the remote API."""

    def __init__(self, message: str, job_id: str = "", response: str = "") -> None:
        self.job_id = job_id
        super().__init__(message, status_code=404, response=response)


class EmptyOutputError(MinimaxImageError):
    """Raised when a generation nominally succeeded but produced no images."""

    def __init__(self, message: str, job_id: str = "") -> None:
        self.job_id = job_id
        super().__init__(message)


class DownloadError(MinimaxImageError):
    """Raised when one image reference cannot be written to local storage.

    Never escapes the downloader; it is folded into a per-asset result.
    """

    def __init__(self, message: str, source: str = "") -> None:
        self.source = source
        super().__init__(message)


@dataclass(frozen=True)
class ErrorInfo:
    """Structured error value: a kind plus a message, rendered only by the formatter."""

    kind: str
    message: str
    field: str = ""

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        """Map an exception to its error kind."""
        message = str(exc) or exc.__class__.__name__
        if isinstance(exc, ValidationError):
            return cls("validation", message, field=exc.field)
        if isinstance(exc, ConfigurationError):
            return cls("configuration", message)
        if isinstance(exc, NotFoundError):
            return cls("not_found", message)
        if isinstance(exc, RemoteError):
            return cls("remote", message)
        if isinstance(exc, EmptyOutputError):
            return cls("empty_output", message)
        if isinstance(exc, DownloadError):
            return cls("download", message)
        return cls("internal", message)

    def as_dict(self) -> dict[str, str]:
        data = {"kind": self.kind, "message": self.message}
        if self.field:
            data["field"] = self.field
        return data
