"""Storage backends for generated suggestion images."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import time
from pathlib import Path
from typing import Protocol
from urllib.parse import quote, urlencode

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from outfit_analyzer.config.settings import Settings
from outfit_analyzer.errors import ConfigurationError, StorageError
from outfit_analyzer.services.categories import OutfitCategory

SUGGESTION_PREFIX = "outfit-suggestions"


def build_suggestion_key(category: OutfitCategory, timestamp_ms: int) -> str:
    """
    Derive the storage key for a suggestion image.

    Two requests for the same category within the same millisecond produce the
    same key and the later upload overwrites the earlier one.
    """

    return f"{SUGGESTION_PREFIX}/{timestamp_ms}-{category.value.lower()}.png"


class StorageBackend(Protocol):
    """Minimal interface the pipeline needs from an artifact store."""

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        ...

    async def signed_url(self, key: str) -> str:
        ...


class LocalStorage:
    """Stores artifacts on disk and issues HMAC-signed media URLs."""

    def __init__(
        self,
        root: Path,
        *,
        public_base_url: str,
        secret: str,
        ttl_seconds: int = 3600,
    ) -> None:
        if not secret:
            raise ConfigurationError("STORAGE_SIGNING_SECRET is not configured.")
        self._root = root.resolve()
        self._public_base_url = public_base_url.rstrip("/")
        self._secret = secret.encode("utf-8")
        self._ttl_seconds = ttl_seconds

    def resolve(self, key: str) -> Path:
        """Return the on-disk path for ``key``, refusing paths outside the root."""

        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root):
            raise StorageError(f"Storage key escapes media root: {key!r}")
        return path

    def _signature(self, key: str, expires: int) -> str:
        message = f"{key}:{expires}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def verify(self, key: str, expires: int, signature: str, *, now: float | None = None) -> bool:
        """Check a signature produced by :meth:`signed_url`."""

        current = time.time() if now is None else now
        if expires < current:
            return False
        return hmac.compare_digest(self._signature(key, expires), signature)

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        path = self.resolve(key)
        try:
            await asyncio.to_thread(self._write_file, path, data)
        except OSError as exc:
            raise StorageError(f"Failed to write {key}: {exc}") from exc

    @staticmethod
    def _write_file(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def signed_url(self, key: str) -> str:
        expires = int(time.time()) + self._ttl_seconds
        query = urlencode({"expires": expires, "signature": self._signature(key, expires)})
        return f"{self._public_base_url}/media/{quote(key)}?{query}"


class S3Storage:
    """Stores artifacts in an S3 bucket and returns presigned GET URLs."""

    def __init__(self, bucket: str, *, region: str, ttl_seconds: int = 3600, client=None) -> None:
        if not bucket:
            raise ConfigurationError("S3_BUCKET is not configured.")
        self._bucket = bucket
        self._ttl_seconds = ttl_seconds
        self._client = client or boto3.client("s3", region_name=region)

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload {key} to S3: {exc}") from exc

    async def signed_url(self, key: str) -> str:
        try:
            return await asyncio.to_thread(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=self._ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to sign URL for {key}: {exc}") from exc


def build_storage(settings: Settings) -> LocalStorage | S3Storage:
    """Instantiate the backend selected by ``STORAGE_BACKEND``."""

    if settings.storage_backend == "s3":
        return S3Storage(
            settings.s3_bucket,
            region=settings.aws_region,
            ttl_seconds=settings.signed_url_ttl,
        )
    if settings.storage_backend == "local":
        return LocalStorage(
            Path(settings.media_root),
            public_base_url=settings.public_base_url,
            secret=settings.storage_signing_secret,
            ttl_seconds=settings.signed_url_ttl,
        )
    raise ConfigurationError(f"Unknown STORAGE_BACKEND: {settings.storage_backend!r}")
