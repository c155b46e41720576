"""
browser.py — Fetch the watch page the way a desktop browser would.

Sub-approaches, in order:
    1. ytInitialPlayerResponse caption tracks → selected track's XML
    2. ytInitialData chapter markers, used as coarse captions
    3. timed-text endpoint over [lang, en, en-US, en-GB, default],
       auto-generated then manual for each
    4. innertube get_transcript
    5. innertube player → caption tracks → selected track's XML
"""

from __future__ import annotations

from typing import Any

from yt_transcript_fallback.models import CaptionEntry, CaptionTrack, ExtractionResult
from yt_transcript_fallback.parsing import dig, find_json_blob, runs_text
from yt_transcript_fallback.session import UpstreamSession
from yt_transcript_fallback.strategies.base import (
    WATCH_URL,
    YOUTUBE_ORIGIN,
    CaptionStrategy,
    describe_tracks,
    fetch_innertube_player,
    fetch_innertube_transcript,
    fetch_timedtext,
    fetch_track_captions,
    player_caption_tracks,
    probe_languages,
    select_track,
    transcript_params,
    web_client_context,
)


def chapter_captions(initial_data: Any) -> list[CaptionEntry]:
    """
    Turn the player bar's chapter markers into caption entries.

    A chapter without an explicit end runs until the next chapter starts.
    """
    chapters = dig(
        initial_data,
        "playerOverlays", "playerOverlayRenderer", "decoratedPlayerBarRenderer",
        "decoratedPlayerBarRenderer", "playerBar", "multiMarkersPlayerBarRenderer",
        "markersMap", 0, "value", "chapters",
    )
    if not isinstance(chapters, list):
        return []

    renderers = [c.get("chapterRenderer") for c in chapters if isinstance(c, dict)]
    renderers = [r for r in renderers if isinstance(r, dict)]

    entries = []
    for index, chapter in enumerate(renderers):
        start = int(chapter.get("timeRangeStartMillis") or 0)
        end = chapter.get("timeRangeEndMillis")
        if end is None and index + 1 < len(renderers):
            end = renderers[index + 1].get("timeRangeStartMillis")
        duration = max(int(end) - start, 0) if end is not None else 0
        entries.append(CaptionEntry(text=runs_text(chapter.get("title")), offset_ms=max(start, 0), duration_ms=duration))
    return entries


class BrowserStrategy(CaptionStrategy):
    """Browser-like headers plus the page's embedded data and innertube."""

    name = "browser"

    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept-Language": "en-US,en;q=0.9",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
            "Sec-Fetch-Site": "same-origin",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-User": "?1",
            "Sec-Fetch-Dest": "document",
            "Referer": f"{YOUTUBE_ORIGIN}/",
            "Upgrade-Insecure-Requests": "1",
            "Cache-Control": "max-age=0",
        }

    def _extract(self, video_id: str, language: str) -> ExtractionResult:
        with self.open_session(self.headers()) as session:
            html = session.get_text(WATCH_URL, params={"v": video_id})
            player_response = find_json_blob(html, "ytInitialPlayerResponse")
            raw_tracks = player_caption_tracks(player_response)
            tracks = describe_tracks(raw_tracks)

            # 1. Caption tracks from the player response.
            track = select_track(raw_tracks, language)
            captions = self.attempt("player caption tracks", lambda: fetch_track_captions(session, track))
            if captions:
                return self.result(captions, "playerCaptionsTracklistRenderer", tracks, track.get("languageCode"))

            # 2. Chapters from ytInitialData.
            captions = self.attempt(
                "ytInitialData chapters",
                lambda: chapter_captions(find_json_blob(html, "ytInitialData")),
            )
            if captions:
                return self.result(captions, "ytInitialData", tracks)

            # 3. Direct timed-text requests.
            for lang in probe_languages(language):
                for asr in (True, False):
                    kind = "auto" if asr else "manual"
                    label = f"transcript API ({kind}, {lang or 'default'})"
                    captions = self.attempt(
                        label,
                        lambda asr=asr: fetch_timedtext(
                            session, video_id, lang, asr=asr, timeout=self.settings.probe_timeout,
                        ),
                    )
                    if captions:
                        return self.result(captions, label, tracks, lang or None)

            json_headers = {"Content-Type": "application/json"}

            # 4. get_transcript.
            captions = self.attempt(
                "get_transcript",
                lambda: fetch_innertube_transcript(
                    session,
                    self.settings.innertube_api_key,
                    {
                        "context": web_client_context(self.settings.client_version),
                        "params": transcript_params(video_id),
                    },
                    headers=json_headers,
                ),
            )
            if captions:
                return self.result(captions, "transcript list API", tracks)

            # 5. Innertube player.
            innertube_tracks: list[CaptionTrack] = []

            def innertube_player() -> list[CaptionEntry]:
                response = fetch_innertube_player(
                    session,
                    self.settings.innertube_api_key,
                    {
                        "context": web_client_context(self.settings.client_version, hl="en", gl="US"),
                        "videoId": video_id,
                    },
                    headers=json_headers,
                )
                raw = player_caption_tracks(response)
                innertube_tracks.extend(describe_tracks(raw))
                return fetch_track_captions(session, select_track(raw, language))

            captions = self.attempt("innertube player", innertube_player)
            tracks = tracks or innertube_tracks
            if captions:
                return self.result(captions, "innertube API", tracks)

            return ExtractionResult.empty(self.name, tracks)
