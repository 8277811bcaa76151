"""Custom exception hierarchy for the file server."""

from __future__ import annotations


class FileServerError(Exception):
    """Base exception for all file server errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(FileServerError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(FileServerError):
    """Base class for validation errors."""
    pass


class InvalidParametersError(ValidationError):
    """Raised when an identifier, filename or expiry tag is malformed."""
    pass


class NotFoundError(FileServerError):
    """Raised when a stored file does not exist."""
    pass


class IdentifierNotFoundError(NotFoundError):
    """Raised when no files at all are stored under an identifier."""
    pass


class StorageError(FileServerError):
    """Raised when the storage medium fails (IO, permissions, transport)."""
    pass


class S3Error(StorageError):
    """Raised when S3 operations fail."""
    pass


__all__ = [
    "FileServerError",
    "ConfigurationError",
    "ValidationError",
    "InvalidParametersError",
    "NotFoundError",
    "IdentifierNotFoundError",
    "StorageError",
    "S3Error",
]
