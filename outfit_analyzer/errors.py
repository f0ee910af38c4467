"""Error taxonomy for the outfit analysis pipeline."""

from __future__ import annotations

from fastapi import status

GENERIC_FAILURE_MESSAGE = "Failed to analyze outfit image"


class AnalysisError(RuntimeError):
    """Base class for failures that map onto an HTTP error body."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = GENERIC_FAILURE_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)


class MissingFileError(AnalysisError):
    """Raised when the request carries no ``image`` file."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "No file provided"


class PayloadTooLargeError(AnalysisError):
    """Raised when the uploaded file exceeds the size ceiling."""

    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    public_message = "File size limit exceeded (max 10MB)"


class ModelCallError(AnalysisError):
    """Raised when a model provider call fails (network, auth, quota)."""


class SchemaValidationError(AnalysisError):
    """Raised when classifier output cannot be coerced into the schema."""


class StorageError(AnalysisError):
    """Raised when uploading or signing an artifact fails."""


class ConfigurationError(AnalysisError):
    """Raised when a required provider setting is missing."""


class AnalysisFailedError(AnalysisError):
    """Generic failure surfaced to the client after logging the cause."""
