"""HTTP routes for outfit analysis and stored media."""

from __future__ import annotations

import logging
import mimetypes

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import FileResponse

from outfit_analyzer.api.dependencies import (
    get_analysis_service,
    get_local_storage,
    get_uploaded_image,
)
from outfit_analyzer.errors import AnalysisError, AnalysisFailedError
from outfit_analyzer.metrics.prometheus_exporter import outfit_analysis_total, render_latest
from outfit_analyzer.services.analysis import OutfitAnalysisService
from outfit_analyzer.services.schemas import AnalysisResponse, ErrorResponse, UploadedImage
from outfit_analyzer.storage.backend import LocalStorage

logger = logging.getLogger(__name__)

router = APIRouter()

ANALYZE_OUTFIT_PATH = "/api/analyze-outfit"

IMAGE_UPLOAD_BODY = {
    "required": True,
    "content": {
        "multipart/form-data": {
            "schema": {
                "type": "object",
                "properties": {"image": {"type": "string", "format": "binary"}},
                "required": ["image"],
            },
        },
    },
}


@router.post(
    ANALYZE_OUTFIT_PATH,
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
    tags=["outfit-analysis"],
    summary="Analyze an outfit image and categorize it",
    openapi_extra={"requestBody": IMAGE_UPLOAD_BODY},
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def analyze_outfit(
    image: UploadedImage = Depends(get_uploaded_image),
    service: OutfitAnalysisService = Depends(get_analysis_service),
) -> AnalysisResponse:
    try:
        result = await service.analyze(image)
    except Exception as exc:
        logger.exception("Error analyzing outfit (%s, %d bytes)", image.filename, len(image.data))
        raise AnalysisFailedError(str(exc)) from exc

    outfit_analysis_total.labels(outcome="success").inc()
    return result


@router.get("/media/{key:path}", include_in_schema=False)
async def get_media(
    key: str,
    expires: int = Query(...),
    signature: str = Query(...),
    storage: LocalStorage = Depends(get_local_storage),
) -> FileResponse:
    if not storage.verify(key, expires, signature):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired signature")
    try:
        path = storage.resolve(key)
    except AnalysisError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found") from exc
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    media_type, _ = mimetypes.guess_type(path.name)
    return FileResponse(path, media_type=media_type or "application/octet-stream")


@router.get("/metrics", tags=["system"], include_in_schema=False)
async def metrics() -> Response:
    payload, content_type = render_latest()
    return Response(content=payload, media_type=content_type)
