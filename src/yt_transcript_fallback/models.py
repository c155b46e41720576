"""
models.py — Request-scoped data structures shared across the package.

Everything here is a plain dataclass: built for one request, serialised
into the response, then thrown away.  Nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Title used whenever the metadata lookup fails.
DEFAULT_TITLE = "YouTube Video"


@dataclass(frozen=True)
class CaptionEntry:
    """
    One timed line of a transcript.

    Attributes:
        text:        Caption text with entities already decoded.
        offset_ms:   Start of the line, in milliseconds from video start.
        duration_ms: How long the line stays on screen, in milliseconds.
    """
    text: str
    offset_ms: int
    duration_ms: int

    @property
    def end_ms(self) -> int:
        return self.offset_ms + self.duration_ms

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "offset": self.offset_ms, "duration": self.duration_ms}


@dataclass(frozen=True)
class CaptionTrack:
    """
    A selectable caption language found by a strategy.

    Only used to populate "available languages"; the list a strategy finds
    is neither guaranteed complete nor accurate.
    """
    language_code: str
    display_name: str
    source_url: str | None = None
    is_generated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "language_code": self.language_code,
            "name": self.display_name,
            "is_generated": self.is_generated,
        }


@dataclass
class ExtractionResult:
    """
    What a strategy hands back to the orchestrator.

    A result is successful iff `captions` is non-empty; an empty result is
    the normal way for a strategy to say "nothing here, try the next one".
    """
    captions: list[CaptionEntry] = field(default_factory=list)
    method_used: str = ""
    available_languages: list[CaptionTrack] = field(default_factory=list)
    language: str | None = None

    @property
    def succeeded(self) -> bool:
        return bool(self.captions)

    @classmethod
    def empty(cls, method_used: str, available_languages: list[CaptionTrack] | None = None) -> ExtractionResult:
        return cls(captions=[], method_used=method_used, available_languages=list(available_languages or []))


@dataclass(frozen=True)
class StrategyAttempt:
    """Diagnostic record of one strategy invocation."""
    strategy: str
    succeeded: bool
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"strategy": self.strategy, "succeeded": self.succeeded, "message": self.message}


@dataclass(frozen=True)
class VideoMetadata:
    """
    Display metadata for a video, fetched independently of captions.

    Attributes:
        title:         Video title; "YouTube Video" when the lookup failed.
        channel_title: Channel display name, if known.
        published_at:  Publication timestamp as returned upstream (ISO 8601
                       from the Data API, YYYY-MM-DD from yt-dlp).
    """
    title: str = DEFAULT_TITLE
    channel_title: str | None = None
    published_at: str | None = None


@dataclass
class TranscriptResult:
    """The merged response of get_transcript(): captions plus metadata."""
    video_id: str
    extraction: ExtractionResult
    metadata: VideoMetadata
    attempts: list[StrategyAttempt] = field(default_factory=list)

    @property
    def captions(self) -> list[CaptionEntry]:
        return self.extraction.captions

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "video_id": self.video_id,
            "video_title": self.metadata.title,
            "channel_title": self.metadata.channel_title,
            "published_at": self.metadata.published_at,
            "method": self.extraction.method_used,
            "language": self.extraction.language,
            "available_languages": [t.to_dict() for t in self.extraction.available_languages],
            "segment_count": len(self.extraction.captions),
            "transcript": [c.to_dict() for c in self.extraction.captions],
            "attempts": [a.to_dict() for a in self.attempts],
        }


@dataclass(frozen=True)
class RenderedTranscript:
    """A caption sequence rendered into a downloadable text format."""
    content: str
    filename: str
    media_type: str


@dataclass(frozen=True)
class ErrorResult:
    """Structured failure returned across the public boundary."""
    error: str
    code: str
    http_status: int
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error, "code": self.code, "details": self.details}
