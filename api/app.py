"""FastAPI application for the art audio study.

Endpoints:
  POST /v1/ssml/compile
  POST /v1/ssml/validate
  POST /v1/azure-tts
  GET  /v1/tone-bed
  GET  /v1/health
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from art_audio_study import __version__
from art_audio_study.exceptions import (
    ArtAudioStudyError,
    MarkError,
    OverlapError,
    RangeError,
    SynthesisConfigError,
    UpstreamSynthesisError,
)

from .config import get_settings
from .routes import ssml, synthesize

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="Art Audio Study API",
    description="SSML prosody editing and speech synthesis for artwork descriptions.",
    version=__version__,
    debug=settings.debug,
)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose Content-Length exceeds the configured maximum."""

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            return JSONResponse(
                status_code=413,
                content={
                    "error": "payload_too_large",
                    "detail": f"Request body exceeds {self.max_bytes} bytes.",
                },
            )
        return await call_next(request)


app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)

# CORS: only allow configured origins. Empty list → no cross-origin access.
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

app.include_router(ssml.router, prefix="/v1/ssml", tags=["ssml"])
app.include_router(synthesize.router, prefix="/v1", tags=["synthesize"])


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


def _error(status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": str(exc)})


@app.exception_handler(OverlapError)
async def overlap_error_handler(request: Request, exc: OverlapError) -> JSONResponse:
    return _error(409, "overlap_error", exc)


@app.exception_handler(RangeError)
async def range_error_handler(request: Request, exc: RangeError) -> JSONResponse:
    return _error(400, "range_error", exc)


@app.exception_handler(MarkError)
async def mark_error_handler(request: Request, exc: MarkError) -> JSONResponse:
    return _error(400, "mark_error", exc)


@app.exception_handler(UpstreamSynthesisError)
async def upstream_error_handler(request: Request, exc: UpstreamSynthesisError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={
            "error": "upstream_synthesis_error",
            "detail": exc.reason,
            "upstream_status": exc.status_code,
        },
    )


@app.exception_handler(SynthesisConfigError)
async def synthesis_config_error_handler(request: Request, exc: SynthesisConfigError) -> JSONResponse:
    logger.error("Speech synthesis is not configured: %s", exc)
    return _error(500, "synthesis_config_error", exc)


@app.exception_handler(ArtAudioStudyError)
async def art_audio_study_error_handler(request: Request, exc: ArtAudioStudyError) -> JSONResponse:
    return _error(400, "art_audio_study_error", exc)


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@app.get("/v1/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}
