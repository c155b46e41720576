"""
cookie_session.py — Cookie-carrying session with page-scraped innertube settings.

The watch page is fetched first; the cookies it sets stay on the session for
every follow-up call, and the page's own INNERTUBE_API_KEY / clientVersion
replace the configured defaults when present.

Sub-approaches, in order:
    1. ytInitialPlayerResponse caption tracks (with watch-page referer)
    2. timed-text endpoint over [lang, en, en-US, en-GB, default]
    3. innertube player → caption tracks
    4. ytInitialData engagement panel transcript
    5. innertube get_transcript
"""

from __future__ import annotations

from typing import Any

from yt_transcript_fallback.models import CaptionEntry, CaptionTrack, ExtractionResult
from yt_transcript_fallback.parsing import (
    dig,
    find_config_value,
    find_json_blob,
    parse_transcript_cues,
)
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

TRANSCRIPT_PANEL_ID = "engagement-panel-transcript"


def engagement_panel_captions(initial_data: Any) -> list[CaptionEntry]:
    """Cue groups of the transcript engagement panel embedded in ytInitialData."""
    panels = dig(initial_data, "engagementPanels")
    if not isinstance(panels, list):
        return []
    for panel in panels:
        renderer = dig(panel, "engagementPanelSectionListRenderer")
        if not isinstance(renderer, dict) or renderer.get("panelIdentifier") != TRANSCRIPT_PANEL_ID:
            continue
        return parse_transcript_cues(
            dig(renderer, "content", "transcriptRenderer", "body", "transcriptBodyRenderer", "cueGroups")
        )
    return []


def chrome_client_hints() -> dict[str, str]:
    return {
        "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
        "Sec-Ch-Ua-Mobile": "?0",
        "Sec-Ch-Ua-Platform": '"Windows"',
    }


class SessionStrategy(CaptionStrategy):
    """Emulate a returning browser session, reusing the page's cookies and keys."""

    name = "session"

    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept-Language": "en-US,en;q=0.9",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
            "Sec-Fetch-Site": "same-origin",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-User": "?1",
            "Sec-Fetch-Dest": "document",
            **chrome_client_hints(),
            "Referer": f"{YOUTUBE_ORIGIN}/",
            "Upgrade-Insecure-Requests": "1",
            "Cache-Control": "max-age=0",
        }

    def _extract(self, video_id: str, language: str) -> ExtractionResult:
        with self.open_session(self.headers()) as session:
            html = session.get_text(WATCH_URL, params={"v": video_id})

            api_key = find_config_value(html, "INNERTUBE_API_KEY") or self.settings.innertube_api_key
            client_version = find_config_value(html, "clientVersion") or self.settings.client_version

            player_response = find_json_blob(html, "ytInitialPlayerResponse")
            raw_tracks = player_caption_tracks(player_response)
            tracks = describe_tracks(raw_tracks)
            referer = {"Referer": f"{WATCH_URL}?v={video_id}"}

            # 1. Caption tracks from the player response.
            track = select_track(raw_tracks, language)
            captions = self.attempt(
                "player caption tracks",
                lambda: fetch_track_captions(session, track, headers=referer),
            )
            if captions:
                return self.result(captions, "playerCaptionsTracklistRenderer", tracks, track.get("languageCode"))

            # 2. Timed-text with the session's cookies.
            for lang in probe_languages(language):
                for asr in (True, False):
                    kind = "auto" if asr else "manual"
                    label = f"transcript API ({kind}, {lang or 'default'})"
                    captions = self.attempt(
                        label,
                        lambda asr=asr: fetch_timedtext(
                            session, video_id, lang, asr=asr,
                            timeout=self.settings.probe_timeout, headers=referer,
                        ),
                    )
                    if captions:
                        return self.result(captions, label, tracks, lang or None)

            json_headers = {"Content-Type": "application/json", **referer}

            # 3. Innertube player.
            innertube_tracks: list[CaptionTrack] = []
            selected: dict[str, Any] = {}

            def innertube_player() -> list[CaptionEntry]:
                response = fetch_innertube_player(
                    session,
                    api_key,
                    {
                        "context": web_client_context(client_version, hl="en", gl="US"),
                        "videoId": video_id,
                    },
                    headers=json_headers,
                )
                raw = player_caption_tracks(response)
                innertube_tracks.extend(describe_tracks(raw))
                chosen = select_track(raw, language)
                if chosen:
                    selected.update(chosen)
                return fetch_track_captions(session, chosen, headers=referer)

            captions = self.attempt("innertube player", innertube_player)
            if innertube_tracks:
                tracks = innertube_tracks
            if captions:
                return self.result(captions, "innertube API", tracks, selected.get("languageCode"))

            # 4. Engagement panel in ytInitialData.
            captions = self.attempt(
                "engagement panel",
                lambda: engagement_panel_captions(find_json_blob(html, "ytInitialData")),
            )
            if captions:
                return self.result(captions, "engagement panel", tracks)

            # 5. get_transcript.
            captions = self.attempt(
                "get_transcript",
                lambda: fetch_innertube_transcript(
                    session,
                    api_key,
                    {
                        "context": web_client_context(client_version, hl="en", gl="US"),
                        "params": transcript_params(video_id),
                    },
                    headers=json_headers,
                ),
            )
            if captions:
                return self.result(captions, "get_transcript endpoint", tracks)

            return ExtractionResult.empty(self.name, tracks)
