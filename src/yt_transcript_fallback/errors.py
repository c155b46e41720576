"""
errors.py — Custom exception hierarchy for yt-transcript-fallback.

Every exception carries an `http_status` attribute so the FastAPI error
handler can translate library-level errors directly into the correct HTTP
response code without a separate mapping table, plus a stable `code` string
and a `details` dict that end up in the structured error body.

Hierarchy:
    TranscriptError (base, 500)
    ├── InvalidInputError (400)
    ├── NoCaptionsAvailableError (404)
    ├── UpstreamTransientError (502)   — never leaves a strategy
    ├── MetadataFetchError (502)       — never leaves the metadata lookup
    ├── UnexpectedFailureError (500)
    └── ConfigurationError (500)       — malformed YT_CAPTIONS_* environment
"""

from __future__ import annotations

from typing import Any

from yt_transcript_fallback.models import CaptionTrack, ErrorResult, StrategyAttempt


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class TranscriptError(Exception):
    """
    Root exception for all transcript-related errors.

    Attributes:
        message:     Human-readable description of what went wrong.
        http_status: Suggested HTTP status code for the API layer.
        code:        Machine-readable error identifier.
        details:     JSON-serialisable diagnostic payload.
    """

    code = "transcript_error"

    def __init__(
        self,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.details = details or {}

    def to_result(self) -> ErrorResult:
        """Build the structured error returned across the public boundary."""
        return ErrorResult(
            error=self.message,
            code=self.code,
            http_status=self.http_status,
            details=self.details,
        )


# ---------------------------------------------------------------------------
# Specific error cases
# ---------------------------------------------------------------------------

class InvalidInputError(TranscriptError):
    """
    Raised when the caller's input can't be used, before any network call.

    Covers malformed or missing video URLs/IDs and unknown output formats.
    Maps to HTTP 400 — it's a client-side validation problem.
    """

    code = "invalid_input"

    def __init__(self, message: str, value: str | None = None) -> None:
        super().__init__(
            message=message,
            http_status=400,
            details={"value": value} if value is not None else None,
        )
        self.value = value


class NoCaptionsAvailableError(TranscriptError):
    """
    Raised when every registered strategy ran and none produced captions.

    This is an expected outcome for videos without captions (or with
    captions YouTube refuses to serve programmatically).  The exception
    carries the per-strategy attempts and any language list discovered along
    the way so callers can show what was tried.  Maps to HTTP 404.
    """

    code = "no_captions_available"

    def __init__(
        self,
        video_id: str,
        attempts: list[StrategyAttempt] | None = None,
        available_languages: list[CaptionTrack] | None = None,
    ) -> None:
        self.video_id = video_id
        self.attempts = list(attempts or [])
        self.available_languages = list(available_languages or [])
        super().__init__(
            message=(
                "No captions available for this video. The video may not have "
                "captions, or they may be disabled by the content owner."
            ),
            http_status=404,
            details={
                "video_id": video_id,
                "methods_tried": [a.strategy for a in self.attempts],
                "attempts": [a.to_dict() for a in self.attempts],
                "available_languages": [t.to_dict() for t in self.available_languages],
            },
        )


class UpstreamTransientError(TranscriptError):
    """
    Raised by the HTTP session when a single upstream call fails.

    Timeouts, connection errors and non-2xx responses all land here.  It is
    always caught inside the strategy that made the call and turned into
    "this sub-approach produced nothing".  Maps to HTTP 502 should it ever
    surface.
    """

    code = "upstream_transient"

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        super().__init__(
            message=f"Upstream request failed for {url}: {reason}",
            http_status=502,
            details={"url": url, "status_code": status_code},
        )
        self.url = url
        self.reason = reason
        self.status_code = status_code


class MetadataFetchError(TranscriptError):
    """
    Raised when video metadata can't be retrieved.

    The public metadata lookup catches it and degrades to a default title;
    it only exists so the individual backends (Data API, yt-dlp) can report
    failures uniformly.  Maps to HTTP 502 because the failure is upstream.
    """

    code = "metadata_fetch_failed"

    def __init__(self, video_id: str, reason: str = "") -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(
            message=f"Failed to fetch metadata for video {video_id}{detail}",
            http_status=502,
        )
        self.video_id = video_id


class UnexpectedFailureError(TranscriptError):
    """
    Raised when something outside the strategy contracts blows up.

    The original exception is chained as __cause__; the message only carries
    a retry suggestion.  Maps to HTTP 500.
    """

    code = "unexpected_failure"

    def __init__(self, reason: str = "") -> None:
        super().__init__(
            message="Failed to extract transcript. Please try again or try a different video.",
            http_status=500,
            details={"reason": reason} if reason else None,
        )


class ConfigurationError(TranscriptError):
    """
    Raised when the environment holds settings that fail validation.

    `details["errors"]` lists each rejected field with pydantic's message.
    Maps to HTTP 500: the caller did nothing wrong.
    """

    code = "invalid_configuration"

    def __init__(self, errors: list[dict[str, str]]) -> None:
        super().__init__(
            message="The service is misconfigured. Please contact the operator.",
            http_status=500,
            details={"errors": errors},
        )
