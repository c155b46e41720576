"""
api.py — FastAPI REST API for yt-transcript-fallback.

Endpoints:
    GET /transcript                 — Fetch captions for a YouTube URL (?url=…).
    GET /transcript/{video_id}      — Same, addressed by video ID.
    GET /download/{video_id}        — Captions rendered as txt / srt / vtt / csv.
    GET /strategies                 — Configured strategy order.
    GET /health                     — Simple health-check for load balancers / monitoring.

Run with:
    uvicorn yt_transcript_fallback.api:app

The global exception handler catches any TranscriptError and converts it to
the appropriate HTTP response using the status code stored on the exception.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from yt_transcript_fallback import __version__
from yt_transcript_fallback.config import TranscriptSettings
from yt_transcript_fallback.errors import ConfigurationError, TranscriptError
from yt_transcript_fallback.extractor import get_transcript, render_format
from yt_transcript_fallback.logging import logger

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(
    title="YouTube Transcript Fallback API",
    description="Extract YouTube captions through an ordered chain of extraction "
                "strategies. Returns structured JSON or a rendered download.",
    version=__version__,
)


@lru_cache(maxsize=1)
def get_settings() -> TranscriptSettings:
    """
    Settings read once from the environment; override in tests via dependency_overrides.

    A malformed variable becomes a ConfigurationError so the client gets the
    structured error body.  Failures aren't cached, so a fixed environment
    takes effect on the next request.
    """
    try:
        return TranscriptSettings.from_env()
    except ValidationError as exc:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        logger.error(f"Invalid configuration: {errors}")
        raise ConfigurationError(errors) from exc


# ---------------------------------------------------------------------------
# Global error handler
# ---------------------------------------------------------------------------

@app.exception_handler(TranscriptError)
async def transcript_error_handler(request: Request, exc: TranscriptError) -> JSONResponse:
    """
    Translate any TranscriptError (or subclass) into an HTTP error response.

    The http_status on the exception drives the response code; the body is
    the structured ErrorResult: {"error", "code", "details"}.
    """
    result = exc.to_result()
    return JSONResponse(status_code=result.http_status, content=result.to_dict())


# ---------------------------------------------------------------------------
# Endpoints — transcript fetching
# ---------------------------------------------------------------------------

# Plain `def` so FastAPI runs the blocking upstream calls in its threadpool.
@app.get("/transcript")
def transcript_by_url(
    url: str = Query(
        default="",
        description="A YouTube watch / share / embed / shorts URL, or a bare video ID.",
    ),
    lang: str | None = Query(
        default=None,
        description="Preferred caption language code (e.g. 'en', 'de'). Defaults to the configured language.",
    ),
    settings: TranscriptSettings = Depends(get_settings),
) -> JSONResponse:
    """
    Fetch the captions for the video behind **url**.

    Returns the transcript entries (`text`, `offset`, `duration` in ms), the
    method that produced them, discovered languages, video metadata and the
    list of strategies attempted.
    """
    result = get_transcript(url, lang, settings=settings)
    return JSONResponse(content=result.to_dict())


@app.get("/transcript/{video_id}")
def transcript_by_id(
    video_id: str,
    lang: str | None = Query(default=None, description="Preferred caption language code."),
    settings: TranscriptSettings = Depends(get_settings),
) -> JSONResponse:
    """
    Fetch the captions for a single video.

    **video_id** is the 11-character YouTube video identifier
    (e.g. `dQw4w9WgXcQ`).
    """
    result = get_transcript(video_id, lang, settings=settings)
    return JSONResponse(content=result.to_dict())


@app.get("/download/{video_id}")
def download(
    video_id: str,
    format: str = Query(default="txt", description="Output format: txt, srt, vtt or csv."),
    lang: str | None = Query(default=None, description="Preferred caption language code."),
    settings: TranscriptSettings = Depends(get_settings),
) -> JSONResponse:
    """
    Render a video's captions as a downloadable document.

    The response carries the rendered `content` and a suggested `filename`
    derived from the video title.
    """
    # Reject an unknown format before going upstream.
    render_format([], format)

    result = get_transcript(video_id, lang, settings=settings)
    rendered = render_format(result.captions, format, title=result.metadata.title)
    return JSONResponse(content={
        "success": True,
        "content": rendered.content,
        "filename": rendered.filename,
    })


# ---------------------------------------------------------------------------
# Endpoints — introspection
# ---------------------------------------------------------------------------

@app.get("/strategies")
async def strategies(settings: TranscriptSettings = Depends(get_settings)) -> dict:
    """List the extraction strategies in the order they are tried."""
    return {"strategies": settings.strategy_order}


@app.get("/health")
async def health() -> dict:
    """
    Simple health-check endpoint.

    Returns a static OK response.  Useful for load balancers, container
    orchestrators (e.g. Kubernetes liveness probes), and uptime monitors.
    """
    return {"status": "ok"}
