"""Error kinds raised by the directory services.

Each kind maps to one HTTP status; the handler registered in ``app.main``
renders them into the ``{success, message, data}`` envelope.
"""
from typing import Any, Optional


class DirectoryError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, data: Optional[Any] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.data = data
        self.cause = cause


class ValidationError(DirectoryError):
    """Required input missing or malformed."""
    status_code = 400


class NotFoundError(DirectoryError):
    """Referenced member or team does not exist."""
    status_code = 404


class ConflictError(DirectoryError):
    """The write reached the store but modified nothing."""
    status_code = 409


class UpstreamError(DirectoryError):
    """The document store or the email provider failed."""
    status_code = 500
