"""Artifact storage backends."""

from .backend import (
    LocalStorage,
    S3Storage,
    StorageBackend,
    build_storage,
    build_suggestion_key,
)

__all__ = [
    "LocalStorage",
    "S3Storage",
    "StorageBackend",
    "build_storage",
    "build_suggestion_key",
]
