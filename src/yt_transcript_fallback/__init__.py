"""
yt_transcript_fallback — Extract YouTube captions through a chain of fallbacks.

Public API:
    extract()               High-level one-call interface (URL → formatted output).
    get_transcript()        Run the strategy chain for one video.
    parse_video_id()        Parse a YouTube URL or validate a bare video ID.
    render_format()         Render caption entries as txt / srt / vtt / csv.
    get_video_metadata()    Best-effort title / channel / publish date lookup.
    FallbackOrchestrator    Runs strategies in order; first success wins.
    TranscriptSettings      pydantic settings model (see config.py).

Exception hierarchy (all importable from this package):
    TranscriptError                 Base exception for all transcript errors.
    ├── InvalidInputError           URL / ID / format can't be used.
    ├── NoCaptionsAvailableError    Every strategy came back empty.
    ├── UpstreamTransientError      Network / HTTP failure (strategy-internal).
    ├── MetadataFetchError          Metadata lookup failed (metadata-internal).
    ├── UnexpectedFailureError      Anything else; safe to retry.
    └── ConfigurationError          Environment settings failed validation.

Usage:
    from yt_transcript_fallback import extract
    srt = extract("https://www.youtube.com/watch?v=dQw4w9WgXcQ", fmt="srt")
"""

from yt_transcript_fallback.config import TranscriptSettings
from yt_transcript_fallback.errors import (
    ConfigurationError,
    InvalidInputError,
    MetadataFetchError,
    NoCaptionsAvailableError,
    TranscriptError,
    UnexpectedFailureError,
    UpstreamTransientError,
)
from yt_transcript_fallback.extractor import (
    build_orchestrator,
    extract,
    get_transcript,
    parse_video_id,
    render_format,
)
from yt_transcript_fallback.metadata import get_video_metadata
from yt_transcript_fallback.models import (
    CaptionEntry,
    CaptionTrack,
    ErrorResult,
    ExtractionResult,
    RenderedTranscript,
    StrategyAttempt,
    TranscriptResult,
    VideoMetadata,
)
from yt_transcript_fallback.orchestrator import FallbackOrchestrator

__version__ = "0.1.0"

__all__ = [
    "extract",
    "get_transcript",
    "parse_video_id",
    "render_format",
    "build_orchestrator",
    "get_video_metadata",
    "FallbackOrchestrator",
    "TranscriptSettings",
    "CaptionEntry",
    "CaptionTrack",
    "ErrorResult",
    "ExtractionResult",
    "RenderedTranscript",
    "StrategyAttempt",
    "TranscriptResult",
    "VideoMetadata",
    "TranscriptError",
    "InvalidInputError",
    "NoCaptionsAvailableError",
    "UpstreamTransientError",
    "MetadataFetchError",
    "UnexpectedFailureError",
    "ConfigurationError",
]
