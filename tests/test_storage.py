"""Tests for suggestion key derivation and the storage backends."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pytest
import pytest_mock
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from outfit_analyzer.config.settings import get_settings
from outfit_analyzer.errors import ConfigurationError, StorageError
from outfit_analyzer.services.categories import OutfitCategory
from outfit_analyzer.storage.backend import (
    LocalStorage,
    S3Storage,
    build_storage,
    build_suggestion_key,
)


def test_suggestion_key_is_deterministic() -> None:
    first = build_suggestion_key(OutfitCategory.PROFESSIONAL, 1_700_000_000_123)
    second = build_suggestion_key(OutfitCategory.PROFESSIONAL, 1_700_000_000_123)

    assert first == second == "outfit-suggestions/1700000000123-professional.png"


def test_suggestion_key_varies_with_timestamp_and_category() -> None:
    keys = {
        build_suggestion_key(OutfitCategory.CHILL, 1),
        build_suggestion_key(OutfitCategory.CHILL, 2),
        build_suggestion_key(OutfitCategory.CASUAL, 1),
    }

    assert len(keys) == 3


def _local(tmp_path: Path, ttl: int = 60) -> LocalStorage:
    return LocalStorage(tmp_path, public_base_url="http://media.test/", secret="s3cret", ttl_seconds=ttl)


@pytest.mark.asyncio
async def test_local_upload_writes_file(tmp_path: Path) -> None:
    storage = _local(tmp_path)

    await storage.upload("outfit-suggestions/1-sport.png", b"png-bytes", "image/png")

    assert (tmp_path / "outfit-suggestions" / "1-sport.png").read_bytes() == b"png-bytes"


@pytest.mark.asyncio
async def test_local_signed_url_verifies_until_expiry(tmp_path: Path) -> None:
    storage = _local(tmp_path, ttl=60)
    key = "outfit-suggestions/1-sport.png"

    url = await storage.signed_url(key)

    parts = urlsplit(url)
    assert parts.netloc == "media.test"
    assert parts.path == f"/media/{key}"
    query = parse_qs(parts.query)
    expires = int(query["expires"][0])
    signature = query["signature"][0]
    assert storage.verify(key, expires, signature)
    assert not storage.verify(key, expires, "0" * len(signature))
    assert not storage.verify("outfit-suggestions/2-sport.png", expires, signature)
    assert not storage.verify(key, expires, signature, now=time.time() + 120)


@pytest.mark.asyncio
async def test_local_rejects_keys_outside_root(tmp_path: Path) -> None:
    storage = _local(tmp_path / "media")

    with pytest.raises(StorageError):
        await storage.upload("../escape.png", b"x", "image/png")


def test_local_requires_signing_secret(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        LocalStorage(tmp_path, public_base_url="http://media.test", secret="")


@pytest.mark.asyncio
async def test_s3_upload_and_presign(mocker: pytest_mock.MockerFixture) -> None:
    s3_client = mocker.MagicMock()
    s3_client.generate_presigned_url.return_value = "https://bucket.s3.test/key?X-Amz-Signature=abc"
    storage = S3Storage("outfits", region="eu-west-1", ttl_seconds=900, client=s3_client)

    await storage.upload("outfit-suggestions/5-casual.png", b"img", "image/png")
    url = await storage.signed_url("outfit-suggestions/5-casual.png")

    s3_client.put_object.assert_called_once_with(
        Bucket="outfits",
        Key="outfit-suggestions/5-casual.png",
        Body=b"img",
        ContentType="image/png",
    )
    s3_client.generate_presigned_url.assert_called_once_with(
        "get_object",
        Params={"Bucket": "outfits", "Key": "outfit-suggestions/5-casual.png"},
        ExpiresIn=900,
    )
    assert url.startswith("https://bucket.s3.test/")


@pytest.mark.asyncio
async def test_s3_client_errors_become_storage_errors(mocker: pytest_mock.MockerFixture) -> None:
    s3_client = mocker.MagicMock()
    s3_client.put_object.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}},
        "PutObject",
    )
    storage = S3Storage("outfits", region="eu-west-1", client=s3_client)

    with pytest.raises(StorageError):
        await storage.upload("k.png", b"img", "image/png")


def test_build_storage_rejects_unknown_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORAGE_BACKEND", "ftp")
    get_settings.cache_clear()

    with pytest.raises(ConfigurationError):
        build_storage(get_settings())


def test_media_route_serves_signed_files(client: TestClient) -> None:
    storage = build_storage(get_settings())
    key = "outfit-suggestions/42-chill.png"
    asyncio.run(storage.upload(key, b"\x89PNG-stored", "image/png"))
    url = asyncio.run(storage.signed_url(key))

    response = client.get(url)

    assert response.status_code == 200
    assert response.content == b"\x89PNG-stored"
    assert response.headers["content-type"] == "image/png"


def test_media_route_rejects_bad_signature(client: TestClient) -> None:
    expires = int(time.time()) + 60
    response = client.get(f"/media/outfit-suggestions/1-sport.png?expires={expires}&signature=forged")

    assert response.status_code == 403


def _analysis_failures() -> float:
    return REGISTRY.get_sample_value("outfit_analysis_total", {"outcome": "failure"}) or 0.0


def test_media_configuration_error_is_not_an_analysis_failure(
    client: TestClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("STORAGE_SIGNING_SECRET", "")
    get_settings.cache_clear()
    before = _analysis_failures()

    response = client.get("/media/outfit-suggestions/1-sport.png?expires=1&signature=abc")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to analyze outfit image"}
    assert _analysis_failures() == before
