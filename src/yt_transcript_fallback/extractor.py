"""
extractor.py — Public operations of yt-transcript-fallback.

    1. Parsing YouTube URLs / IDs  → parse_video_id()
    2. Running the fallback chain  → get_transcript()
    3. Rendering a download        → render_format() (from formats.py)
    4. One-call convenience        → extract()

Only single-video extraction is supported (no playlists).
"""

from __future__ import annotations

import re
from typing import Any

import httpx

from yt_transcript_fallback.config import TranscriptSettings
from yt_transcript_fallback.errors import (
    InvalidInputError,
    TranscriptError,
    UnexpectedFailureError,
)
from yt_transcript_fallback.formats import render_format
from yt_transcript_fallback.logging import logger
from yt_transcript_fallback.metadata import get_video_metadata
from yt_transcript_fallback.models import TranscriptResult, VideoMetadata
from yt_transcript_fallback.orchestrator import FallbackOrchestrator
from yt_transcript_fallback.strategies import default_strategies

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Regex patterns for the YouTube URL shapes we accept:
#   - https://www.youtube.com/watch?v=VIDEO_ID  (also m. and music. hosts)
#   - https://youtu.be/VIDEO_ID
#   - https://www.youtube.com/embed|shorts|v|live/VIDEO_ID
# Each pattern captures the 11-character video ID in group "id".
_HOST = r"(?:https?://)?(?:(?:www|m|music)\.)?youtube\.com"

_URL_PATTERNS: list[re.Pattern[str]] = [
    # Watch URL: the ID sits in the "v" query parameter
    re.compile(_HOST + r"/watch\?(?:.*&)?v=(?P<id>[A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"),
    # Short share URL: ID is the path segment right after the domain
    re.compile(r"(?:https?://)?youtu\.be/(?P<id>[A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"),
    # Embed / shorts / old "v/" / live URLs: ID follows the path prefix
    re.compile(_HOST + r"/(?:embed|shorts|v|live)/(?P<id>[A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"),
]

# A bare video ID is exactly 11 characters from the base64url alphabet.
_BARE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")


# ---------------------------------------------------------------------------
# URL / ID parsing
# ---------------------------------------------------------------------------

def parse_video_id(url_or_id: str | None) -> str:
    """
    Extract a YouTube video ID from a URL string, or validate a raw 11-char ID.

    Pure string matching, no network access.

    Args:
        url_or_id: A YouTube URL or a raw video ID.

    Returns:
        The 11-character video ID.

    Raises:
        InvalidInputError: If the input is empty or matches no known shape.
    """
    if not url_or_id or not url_or_id.strip():
        raise InvalidInputError("Please provide a YouTube URL", value=url_or_id)

    url_or_id = url_or_id.strip()

    for pattern in _URL_PATTERNS:
        match = pattern.match(url_or_id)
        if match:
            return match.group("id")

    if _BARE_ID_PATTERN.match(url_or_id):
        return url_or_id

    raise InvalidInputError(
        "Invalid YouTube URL. Please provide a valid YouTube video URL.",
        value=url_or_id,
    )


# ---------------------------------------------------------------------------
# Transcript fetching
# ---------------------------------------------------------------------------

def build_orchestrator(
    settings: TranscriptSettings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> FallbackOrchestrator:
    """Orchestrator over the default strategy set for these settings."""
    return FallbackOrchestrator(default_strategies(settings, transport))


def get_transcript(
    url_or_id: str,
    language: str | None = None,
    *,
    settings: TranscriptSettings | None = None,
    orchestrator: FallbackOrchestrator | None = None,
    with_metadata: bool = True,
) -> TranscriptResult:
    """
    Fetch captions for one video through the fallback chain.

    Validates the input first (no network call for a bad URL), runs the
    strategies in priority order, then decorates the winning result with
    video metadata.  A metadata failure only degrades the title.

    Args:
        url_or_id:     A YouTube URL or bare video ID.
        language:      Preferred caption language (default from settings).
        settings:      Runtime settings; defaults to TranscriptSettings().
        orchestrator:  Pre-built orchestrator (tests, custom strategy sets).
        with_metadata: Look up title/channel/publish date.

    Returns:
        TranscriptResult with captions, method used, languages and metadata.

    Raises:
        InvalidInputError:        The URL/ID is malformed.
        NoCaptionsAvailableError: Every strategy came back empty.
        UnexpectedFailureError:   Anything else went wrong.
    """
    settings = settings or TranscriptSettings()
    video_id = parse_video_id(url_or_id)
    language = language or settings.default_language

    logger.info(f"Fetching transcript for {video_id} ({language})")

    try:
        orchestrator = orchestrator or build_orchestrator(settings)
        outcome = orchestrator.run(video_id, language)

        if outcome.result.language is None:
            outcome.result.language = language

        metadata = get_video_metadata(video_id, settings) if with_metadata else VideoMetadata()
    except TranscriptError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception(f"Unexpected failure while extracting {video_id}")
        raise UnexpectedFailureError(f"{type(exc).__name__}: {exc}") from exc

    return TranscriptResult(
        video_id=video_id,
        extraction=outcome.result,
        metadata=metadata,
        attempts=outcome.attempts,
    )


# ---------------------------------------------------------------------------
# High-level convenience function
# ---------------------------------------------------------------------------

def extract(
    url_or_id: str,
    language: str | None = None,
    fmt: str = "txt",
    *,
    settings: TranscriptSettings | None = None,
) -> str | dict[str, Any]:
    """
    One-call interface: parse URL → run the chain → render output.

    Args:
        url_or_id: A YouTube URL or raw video ID.
        language:  Preferred caption language.
        fmt:       "txt", "srt", "vtt", "csv", or "json" for the full
                   TranscriptResult as a dict.
        settings:  Runtime settings.

    Returns:
        The rendered text, or a dict when fmt="json".

    Raises:
        InvalidInputError:       Bad URL or unknown format.
        TranscriptError:         (or subclass) on any extraction failure.
    """
    if fmt != "json":
        # Validate the format before spending any requests.
        render_format([], fmt)

    result = get_transcript(url_or_id, language, settings=settings)
    if fmt == "json":
        return result.to_dict()
    return render_format(result.captions, fmt, title=result.metadata.title).content
