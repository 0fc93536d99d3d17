"""Custom exception hierarchy for s3cli."""

from __future__ import annotations


class S3CliError(Exception):
    """Base exception for all s3cli-specific errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(S3CliError):
    """Raised when connection settings or arguments are invalid or missing."""
    pass


class StorageError(S3CliError):
    """Raised when storage operations fail."""
    pass


class ObjectNotFoundError(StorageError):
    """Raised when a remote object or local source does not exist."""
    pass


class TransferError(StorageError):
    """Raised when a list, upload, download or delete call fails."""
    pass


__all__ = [
    "S3CliError",
    "ConfigurationError",
    "StorageError",
    "ObjectNotFoundError",
    "TransferError",
]
