"""FastAPI entrypoint and HTTP routes."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from outfit_analyzer import __version__
from outfit_analyzer.api.routes import ANALYZE_OUTFIT_PATH, router
from outfit_analyzer.config.settings import get_settings
from outfit_analyzer.errors import AnalysisError, AnalysisFailedError
from outfit_analyzer.metrics.prometheus_exporter import outfit_analysis_total
from outfit_analyzer.monitoring.logging import configure_logging

logger = logging.getLogger(__name__)


async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    """Render pipeline errors as ``{"error": ...}`` without leaking internals."""

    if exc.status_code >= 500 and not isinstance(exc, AnalysisFailedError):
        logger.exception("Request to %s failed", request.url.path, exc_info=exc)
    if request.url.path == ANALYZE_OUTFIT_PATH:
        outcome = "client_error" if exc.status_code < 500 else "failure"
        outfit_analysis_total.labels(outcome=outcome).inc()
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


def create_app() -> FastAPI:
    """Initialise the FastAPI application."""

    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Outfit Analyzer API",
        version=__version__,
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
    )
    app.add_exception_handler(AnalysisError, analysis_error_handler)
    app.include_router(router)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Serve the API with Uvicorn."""

    import uvicorn

    uvicorn.run("outfit_analyzer.api.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
