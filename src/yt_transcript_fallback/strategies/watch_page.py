"""
watch_page.py — Cheapest strategy: one watch-page fetch, then timed-text.

Sub-approaches, in order:
    1. ytInitialPlayerResponse caption tracks → selected track's XML
    2. timed-text endpoint, manual captions in the requested language
    3. timed-text endpoint, auto-generated captions in the requested language
"""

from __future__ import annotations

from yt_transcript_fallback.models import ExtractionResult
from yt_transcript_fallback.parsing import find_json_blob
from yt_transcript_fallback.strategies.base import (
    WATCH_URL,
    CaptionStrategy,
    describe_tracks,
    fetch_timedtext,
    fetch_track_captions,
    player_caption_tracks,
    select_track,
)


class WatchPageStrategy(CaptionStrategy):
    """Read the caption track list advertised on the public watch page."""

    name = "watch-page"

    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept-Language": "en-US,en;q=0.9",
        }

    def _extract(self, video_id: str, language: str) -> ExtractionResult:
        with self.open_session(self.headers()) as session:
            html = session.get_text(WATCH_URL, params={"v": video_id})
            player_response = find_json_blob(html, "ytInitialPlayerResponse")
            if player_response is None:
                # No player data means the page isn't what we expect at all.
                return ExtractionResult.empty(self.name)

            raw_tracks = player_caption_tracks(player_response)
            tracks = describe_tracks(raw_tracks)

            if raw_tracks:
                track = select_track(raw_tracks, language)
                captions = self.attempt(
                    "player caption tracks",
                    lambda: fetch_track_captions(session, track),
                )
                if captions:
                    return self.result(
                        captions, "caption track", tracks, track.get("languageCode") if track else None,
                    )

            for asr in (False, True):
                kind = "auto" if asr else "manual"
                captions = self.attempt(
                    f"timedtext ({kind}, {language})",
                    lambda asr=asr: fetch_timedtext(
                        session, video_id, language, asr=asr, timeout=self.settings.probe_timeout,
                    ),
                )
                if captions:
                    return self.result(captions, f"timedtext ({kind}, {language})", tracks, language)

            return ExtractionResult.empty(self.name, tracks)
