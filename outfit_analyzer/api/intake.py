"""Upload intake: buffer the multipart ``image`` field with a size ceiling."""

from __future__ import annotations

import mimetypes
from typing import AsyncIterator

from fastapi import Request
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from outfit_analyzer.errors import MissingFileError, PayloadTooLargeError
from outfit_analyzer.services.schemas import UploadedImage

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
# Boundaries, part headers and small extra fields on top of the file itself.
MULTIPART_OVERHEAD_BYTES = 64 * 1024
MAX_BODY_BYTES = MAX_UPLOAD_BYTES + MULTIPART_OVERHEAD_BYTES
DEFAULT_CONTENT_TYPE = "image/jpeg"
IMAGE_FIELD = "image"
_CHUNK_SIZE = 1024 * 1024


class InMemoryMultiPartParser(MultiPartParser):
    """Multipart parser whose file parts never roll over to disk."""

    # The body stream is capped at MAX_BODY_BYTES, so no part can exceed this.
    spool_max_size = MAX_BODY_BYTES + 1


def guess_content_type(filename: str | None) -> str:
    """Best-effort image MIME type from the file extension."""

    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed and guessed.startswith("image/"):
            return guessed
    return DEFAULT_CONTENT_TYPE


def _declared_length(request: Request) -> int | None:
    raw = request.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def _capped_stream(request: Request, limit: int) -> AsyncIterator[bytes]:
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise PayloadTooLargeError(f"Request body exceeded {limit} bytes.")
        yield chunk


async def read_upload(upload: UploadFile | None, *, limit: int = MAX_UPLOAD_BYTES) -> UploadedImage:
    """Read the whole upload into memory, failing once it grows past ``limit``."""

    if upload is None or (not upload.filename and upload.size == 0):
        raise MissingFileError()

    buffer = bytearray()
    while chunk := await upload.read(_CHUNK_SIZE):
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise PayloadTooLargeError(f"Upload exceeded {limit} bytes.")

    filename = upload.filename or ""
    return UploadedImage(
        data=bytes(buffer),
        content_type=guess_content_type(filename),
        filename=filename,
    )


async def receive_image(request: Request) -> UploadedImage:
    """
    Parse the request body and return the ``image`` file part.

    Oversized bodies are refused from ``Content-Length`` before parsing, and
    the body stream itself is cut off past the ceiling when the header is
    absent or wrong. A missing, non-file or malformed ``image`` part is
    reported as a missing file.
    """

    content_type = request.headers.get("content-type", "")
    if content_type.split(";", 1)[0].strip().lower() != "multipart/form-data":
        raise MissingFileError()

    declared = _declared_length(request)
    if declared is not None and declared > MAX_BODY_BYTES:
        raise PayloadTooLargeError(f"Declared body of {declared} bytes exceeds the ceiling.")

    parser = InMemoryMultiPartParser(
        request.headers,
        _capped_stream(request, MAX_BODY_BYTES),
        max_files=1,
        max_fields=16,
    )
    try:
        form = await parser.parse()
    except MultiPartException as exc:
        raise MissingFileError(f"Malformed multipart body: {exc.message}") from exc

    try:
        upload = form.get(IMAGE_FIELD)
        if not isinstance(upload, UploadFile):
            raise MissingFileError()
        return await read_upload(upload)
    finally:
        await form.close()
