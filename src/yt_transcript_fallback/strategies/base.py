"""
base.py — The strategy interface and the YouTube building blocks it shares.

A strategy is anything with a `name` and a `try_extract(video_id, language)`
method returning an ExtractionResult.  The orchestrator only relies on that
contract; everything else in this module is shared plumbing so each concrete
strategy reads as a short, ordered list of sub-approaches.

Contract:
    - try_extract() never raises.  Network errors, timeouts, non-2xx
      responses, unparsable payloads and missing fields all end up as an
      empty-captions result.
    - Sub-approaches run in a fixed order and the first one yielding a
      non-empty caption list wins.
"""

from __future__ import annotations

import base64
import json
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any

import httpx

from yt_transcript_fallback.config import TranscriptSettings
from yt_transcript_fallback.errors import TranscriptError
from yt_transcript_fallback.logging import logger
from yt_transcript_fallback.models import CaptionEntry, CaptionTrack, ExtractionResult
from yt_transcript_fallback.parsing import dig, parse_caption_xml, parse_transcript_cues, runs_text
from yt_transcript_fallback.session import UpstreamSession

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

YOUTUBE_ORIGIN = "https://www.youtube.com"
WATCH_URL = f"{YOUTUBE_ORIGIN}/watch"
TIMEDTEXT_URL = f"{YOUTUBE_ORIGIN}/api/timedtext"
INNERTUBE_PLAYER_URL = f"{YOUTUBE_ORIGIN}/youtubei/v1/player"
INNERTUBE_TRANSCRIPT_URL = f"{YOUTUBE_ORIGIN}/youtubei/v1/get_transcript"

# Timed-text responses shorter than this are empty documents.
_MIN_TIMEDTEXT_LENGTH = 10

# Errors a sub-approach may hit that mean "no result here": upstream
# failures, and payloads that don't have the shape we expected.
_SUB_APPROACH_ERRORS = (TranscriptError, KeyError, IndexError, TypeError, ValueError, AttributeError)


# ---------------------------------------------------------------------------
# Strategy interface
# ---------------------------------------------------------------------------

class CaptionStrategy(ABC):
    """
    One independent way of locating captions for a video.

    Subclasses set `name` and implement `_extract()`.  Configuration comes
    in through the constructor; strategies keep no per-request state on
    the instance, so one instance can serve any number of calls.

    Args:
        settings:  Shared runtime settings (keys, client version, timeouts).
        transport: Optional httpx transport, used by tests to intercept
                   every outbound request.
    """

    name: str = ""

    def __init__(
        self,
        settings: TranscriptSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or TranscriptSettings()
        self.transport = transport

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    def try_extract(self, video_id: str, language: str = "en") -> ExtractionResult:
        """Run every sub-approach in order; never raises."""
        try:
            result = self._extract(video_id, language or self.settings.default_language)
        except _SUB_APPROACH_ERRORS as exc:
            logger.debug(f"[{self.name}] gave up: {exc}")
            return ExtractionResult.empty(self.name)
        if not result.method_used:
            result.method_used = self.name
        return result

    @abstractmethod
    def _extract(self, video_id: str, language: str) -> ExtractionResult:
        """Strategy body; may raise, try_extract() turns that into no result."""

    # -- helpers for subclasses -------------------------------------------

    def open_session(self, headers: dict[str, str] | None = None) -> UpstreamSession:
        return UpstreamSession(
            headers=headers,
            timeout=self.settings.request_timeout,
            transport=self.transport,
        )

    def attempt(self, label: str, func: Callable[[], list[CaptionEntry]]) -> list[CaptionEntry]:
        """
        Run one sub-approach, swallowing the failures it is allowed to have.

        Returns the captions it produced, or an empty list when it failed or
        found nothing.
        """
        try:
            captions = func()
        except _SUB_APPROACH_ERRORS as exc:
            logger.debug(f"[{self.name}] {label}: failed ({exc})")
            return []
        if captions:
            logger.debug(f"[{self.name}] {label}: {len(captions)} caption entries")
        else:
            logger.debug(f"[{self.name}] {label}: nothing found")
        return captions

    def result(
        self,
        captions: list[CaptionEntry],
        method: str,
        tracks: list[CaptionTrack] | None = None,
        language: str | None = None,
    ) -> ExtractionResult:
        return ExtractionResult(
            captions=captions,
            method_used=f"{self.name}: {method}",
            available_languages=list(tracks or []),
            language=language,
        )


# ---------------------------------------------------------------------------
# Caption tracks advertised in player responses
# ---------------------------------------------------------------------------

def player_caption_tracks(player_response: Any) -> list[dict[str, Any]]:
    """The captionTracks list of a player response (page blob or innertube)."""
    tracks = dig(player_response, "captions", "playerCaptionsTracklistRenderer", "captionTracks")
    if not isinstance(tracks, list):
        return []
    return [t for t in tracks if isinstance(t, dict)]


def describe_tracks(raw_tracks: Iterable[dict[str, Any]]) -> list[CaptionTrack]:
    """Map raw captionTracks entries to CaptionTrack descriptors."""
    described = []
    for track in raw_tracks:
        code = track.get("languageCode")
        if not isinstance(code, str):
            continue
        described.append(
            CaptionTrack(
                language_code=code,
                display_name=runs_text(track.get("name")) or code,
                source_url=track.get("baseUrl"),
                is_generated=track.get("kind") == "asr",
            )
        )
    return described


def select_track(raw_tracks: list[dict[str, Any]], language: str) -> dict[str, Any] | None:
    """Exact language match if there is one, otherwise the first track."""
    for track in raw_tracks:
        if track.get("languageCode") == language:
            return track
    return raw_tracks[0] if raw_tracks else None


def fetch_track_captions(
    session: UpstreamSession,
    track: dict[str, Any] | None,
    headers: dict[str, str] | None = None,
) -> list[CaptionEntry]:
    """Download and parse the caption XML behind a track's baseUrl."""
    if not track or not track.get("baseUrl"):
        return []
    return parse_caption_xml(session.get_text(track["baseUrl"], headers=headers))


# ---------------------------------------------------------------------------
# Timed-text endpoint
# ---------------------------------------------------------------------------

def probe_languages(language: str) -> list[str]:
    """Requested language, then the English variants, then "" (default)."""
    ordered: list[str] = []
    for code in (language, "en", "en-US", "en-GB", ""):
        if code not in ordered:
            ordered.append(code)
    return ordered


def fetch_timedtext(
    session: UpstreamSession,
    video_id: str,
    lang: str,
    *,
    asr: bool,
    timeout: float,
    headers: dict[str, str] | None = None,
    extra_params: dict[str, str] | None = None,
    parser: Callable[[str], list[CaptionEntry]] = parse_caption_xml,
) -> list[CaptionEntry]:
    """
    Ask the timed-text endpoint directly for one language.

    Args:
        asr: Request the auto-generated (speech recognition) track.
    """
    params: dict[str, str] = {"v": video_id}
    if asr:
        params["asr"] = "1"
    params["lang"] = lang
    if extra_params:
        params.update(extra_params)

    body = session.get_text(TIMEDTEXT_URL, params=params, headers=headers, timeout=timeout)
    if len(body) <= _MIN_TIMEDTEXT_LENGTH:
        return []
    return parser(body)


# ---------------------------------------------------------------------------
# Innertube (youtubei) API
# ---------------------------------------------------------------------------

def web_client_context(client_version: str, **extra: Any) -> dict[str, Any]:
    """The `context` object for a WEB innertube request."""
    client: dict[str, Any] = {"clientName": "WEB", "clientVersion": client_version}
    client.update(extra)
    return {"client": client}


def transcript_params(video_id: str, **extra: str) -> str:
    """Base64 payload the get_transcript endpoint expects in `params`."""
    raw = json.dumps({"videoId": video_id, **extra}, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def transcript_cue_groups(response: Any) -> list[Any]:
    """cueGroups of a get_transcript response, or an empty list."""
    groups = dig(
        response,
        "actions", 0, "updateEngagementPanelAction", "content",
        "transcriptRenderer", "body", "transcriptBodyRenderer", "cueGroups",
    )
    return groups if isinstance(groups, list) else []


def fetch_innertube_transcript(
    session: UpstreamSession,
    api_key: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
    extra_params: dict[str, str] | None = None,
) -> list[CaptionEntry]:
    """POST to get_transcript and parse the returned cue groups."""
    params = {"key": api_key, **(extra_params or {})}
    response = session.post_json(INNERTUBE_TRANSCRIPT_URL, payload, params=params, headers=headers)
    return parse_transcript_cues(transcript_cue_groups(response))


def fetch_innertube_player(
    session: UpstreamSession,
    api_key: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
) -> Any:
    """POST to the innertube player endpoint and return its JSON."""
    return session.post_json(INNERTUBE_PLAYER_URL, payload, params={"key": api_key}, headers=headers)
