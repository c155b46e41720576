"""
library.py — Delegate to the youtube-transcript-api package.

youtube-transcript-api keeps its own up-to-date scraping of the watch page
and caption endpoints, which makes it a useful middle rung: cheaper than
full session emulation, and maintained independently of our own adapters.
"""

from __future__ import annotations

from functools import partial

import requests
from youtube_transcript_api import YouTubeTranscriptApi
import youtube_transcript_api as yta_errors  # exception classes live here

from yt_transcript_fallback.logging import logger
from yt_transcript_fallback.models import CaptionEntry, CaptionTrack, ExtractionResult
from yt_transcript_fallback.parsing import seconds_to_ms
from yt_transcript_fallback.strategies.base import CaptionStrategy


def timed_session(timeout: float) -> requests.Session:
    """A requests.Session whose every request carries `timeout` seconds."""
    session = requests.Session()
    # Session.get/post all route through .request, so this covers them.
    session.request = partial(session.request, timeout=timeout)  # type: ignore[method-assign]
    return session


class TranscriptLibraryStrategy(CaptionStrategy):
    """List the video's transcripts and fetch the preferred one."""

    name = "transcript-library"

    def _extract(self, video_id: str, language: str) -> ExtractionResult:
        with timed_session(self.settings.request_timeout) as http_client:
            return self._extract_with(YouTubeTranscriptApi(http_client=http_client), video_id, language)

    def _extract_with(self, api: YouTubeTranscriptApi, video_id: str, language: str) -> ExtractionResult:
        try:
            transcript_list = api.list(video_id)
        except (yta_errors.CouldNotRetrieveTranscript, OSError) as exc:
            # requests' exceptions, Timeout included, derive from OSError.
            return self._no_result(video_id, exc)

        available = list(transcript_list)
        tracks = [
            CaptionTrack(
                language_code=t.language_code,
                display_name=t.language,
                is_generated=t.is_generated,
            )
            for t in available
        ]

        # Exact language match first, otherwise whatever is listed first.
        try:
            transcript = transcript_list.find_transcript([language])
        except yta_errors.NoTranscriptFound:
            if not available:
                return ExtractionResult.empty(self.name, tracks)
            transcript = available[0]

        try:
            fetched = transcript.fetch()
        except (yta_errors.CouldNotRetrieveTranscript, OSError) as exc:
            return self._no_result(video_id, exc, tracks)

        captions = [
            CaptionEntry(
                text=snippet.text,
                offset_ms=seconds_to_ms(snippet.start),
                duration_ms=seconds_to_ms(snippet.duration),
            )
            for snippet in fetched
        ]
        if not captions:
            return ExtractionResult.empty(self.name, tracks)

        kind = "auto" if transcript.is_generated else "manual"
        return self.result(captions, f"{kind}, {transcript.language_code}", tracks, transcript.language_code)

    def _no_result(
        self,
        video_id: str,
        exc: Exception,
        tracks: list[CaptionTrack] | None = None,
    ) -> ExtractionResult:
        # The library's messages are multi-paragraph; the first line is enough.
        reason = str(exc).strip().splitlines()[0] if str(exc).strip() else type(exc).__name__
        logger.debug(f"[{self.name}] {video_id}: {reason}")
        return ExtractionResult.empty(self.name, tracks)
