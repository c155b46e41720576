"""
headless.py — Last resort: emulate a full desktop browser session.

Everything the cheaper strategies do, but with a complete modern header set,
the watch page requested with captions forced on, the innertube client
context a real browser sends, and a SAPISIDHASH authorization header when
the session ends up holding a SAPISID cookie.

Sub-approaches, in order:
    1. ytInitialPlayerResponse caption tracks (with referer)
    2. srv3 timed-text with ASR capabilities, over the language list
    3. innertube get_transcript with full client context
    4. raw "captionTracks" array recovered from anywhere in the page
    5. innertube get_transcript with the transcript panel params token
"""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable
from typing import Any

from yt_transcript_fallback.models import CaptionEntry, ExtractionResult
from yt_transcript_fallback.parsing import (
    find_config_value,
    find_json_array,
    find_json_blob,
    parse_caption_xml,
    parse_srv3,
)
from yt_transcript_fallback.session import UpstreamSession
from yt_transcript_fallback.strategies.base import (
    WATCH_URL,
    YOUTUBE_ORIGIN,
    CaptionStrategy,
    describe_tracks,
    fetch_innertube_transcript,
    fetch_timedtext,
    fetch_track_captions,
    player_caption_tracks,
    probe_languages,
    select_track,
    transcript_params,
    web_client_context,
)
from yt_transcript_fallback.strategies.cookie_session import chrome_client_hints

# Opaque params token the web client sends when opening the transcript panel.
TRANSCRIPT_PANEL_PARAMS = "CA4aEAIaEAMaEAQaEAU%3D"

_ASR_LANGS = "de,en,es,fr,it,ja,ko,nl,pt,ru"


def sapisid_hash(sapisid: str, origin: str = YOUTUBE_ORIGIN, timestamp: int | None = None) -> str:
    """
    Compute the SAPISIDHASH value YouTube's web client sends.

    Format: "<unix seconds>_<sha1 hex of '<ts> <SAPISID> <origin>'>".
    """
    ts = int(time.time()) if timestamp is None else timestamp
    digest = hashlib.sha1(f"{ts} {sapisid} {origin}".encode("utf-8")).hexdigest()
    return f"{ts}_{digest}"


def parse_timedtext_any(body: str) -> list[CaptionEntry]:
    """Classic <text> markup first, srv3 <p> markup otherwise."""
    return parse_caption_xml(body) or parse_srv3(body)


class HeadlessStrategy(CaptionStrategy):
    """Full browser session emulation, tried only when everything else failed."""

    name = "headless"

    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept-Language": "en-US,en;q=0.9",
            "Accept": (
                "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
                "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
            ),
            "Sec-Fetch-Site": "none",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-User": "?1",
            "Sec-Fetch-Dest": "document",
            **chrome_client_hints(),
            "Upgrade-Insecure-Requests": "1",
            "Cache-Control": "max-age=0",
            "DNT": "1",
        }

    def client_context(self, video_id: str, client_version: str) -> dict[str, Any]:
        """The full innertube context a desktop browser sends."""
        context = web_client_context(
            client_version,
            hl="en",
            gl="US",
            userAgent=self.settings.user_agent,
            clientFormFactor="UNKNOWN_FORM_FACTOR",
            deviceMake="Google Inc.",
            deviceModel="",
            platform="DESKTOP",
            originalUrl=f"{WATCH_URL}?v={video_id}",
            mainAppWebInfo={
                "graftUrl": f"/watch?v={video_id}",
                "webDisplayMode": "WEB_DISPLAY_MODE_BROWSER",
                "isWebNativeShareAvailable": False,
            },
        )
        context["user"] = {"lockedSafetyMode": False}
        context["request"] = {"useSsl": True, "internalExperimentFlags": [], "consistencyTokenJars": []}
        return context

    def auth_headers(self, session: UpstreamSession, video_id: str) -> dict[str, str]:
        headers = {"Referer": f"{WATCH_URL}?v={video_id}"}
        sapisid = session.cookie("SAPISID")
        if sapisid:
            headers["Authorization"] = f"SAPISIDHASH {sapisid_hash(sapisid)}"
        return headers

    def _extract(self, video_id: str, language: str) -> ExtractionResult:
        with self.open_session(self.headers()) as session:
            html = session.get_text(WATCH_URL, params={"v": video_id, "cc_load_policy": "1", "hl": "en"})

            api_key = find_config_value(html, "INNERTUBE_API_KEY") or self.settings.innertube_api_key
            client_version = find_config_value(html, "clientVersion") or self.settings.client_version
            auth = self.auth_headers(session, video_id)

            player_response = find_json_blob(html, "ytInitialPlayerResponse")
            raw_tracks = player_caption_tracks(player_response)
            tracks = describe_tracks(raw_tracks)

            # 1. Caption tracks from the player response.
            track = select_track(raw_tracks, language)
            captions = self.attempt(
                "player caption tracks",
                lambda: fetch_track_captions(session, track, headers=auth),
            )
            if captions:
                return self.result(captions, "playerCaptionsTracklistRenderer", tracks, track.get("languageCode"))

            # 2. srv3 timed-text with ASR capabilities.
            srv3_params = {
                "fmt": "srv3",
                "xorb": "2",
                "xobt": "3",
                "xovt": "3",
                "asr_langs": _ASR_LANGS,
                "caps": "asr",
                "hl": "en",
                "key": api_key,
            }
            for lang in probe_languages(language):
                label = f"special timedtext API ({lang or 'default'})"
                captions = self.attempt(
                    label,
                    lambda: fetch_timedtext(
                        session, video_id, lang, asr=False,
                        timeout=self.settings.request_timeout, headers=auth,
                        extra_params=srv3_params, parser=parse_timedtext_any,
                    ),
                )
                if captions:
                    return self.result(captions, label, tracks, lang or None)

            innertube_headers = {
                **auth,
                "Content-Type": "application/json",
                "Origin": YOUTUBE_ORIGIN,
                "X-Youtube-Client-Name": "1",
                "X-Youtube-Client-Version": client_version,
            }

            def get_transcript(params: str, extra: dict[str, str] | None = None) -> Callable[[], list[CaptionEntry]]:
                return lambda: fetch_innertube_transcript(
                    session,
                    api_key,
                    {"context": self.client_context(video_id, client_version), "params": params},
                    headers=innertube_headers,
                    extra_params=extra,
                )

            # 3. get_transcript with the full client context.
            captions = self.attempt("get_transcript", get_transcript(transcript_params(video_id)))
            if captions:
                return self.result(captions, "innertube API with authentication", tracks)

            # 4. Raw captionTracks array anywhere in the page.
            page_tracks: list[dict[str, Any]] = []

            def page_caption_tracks() -> list[CaptionEntry]:
                raw = find_json_array(html, "captionTracks") or []
                page_tracks.extend(t for t in raw if isinstance(t, dict))
                return fetch_track_captions(session, select_track(page_tracks, language), headers=auth)

            captions = self.attempt("video player data", page_caption_tracks)
            if page_tracks:
                tracks = describe_tracks(page_tracks)
            if captions:
                return self.result(captions, "video player data", tracks)

            # 5. get_transcript with the panel params token.
            captions = self.attempt(
                "get_transcript (panel params)",
                get_transcript(
                    transcript_params(video_id, params=TRANSCRIPT_PANEL_PARAMS),
                    {"prettyPrint": "false"},
                ),
            )
            if captions:
                return self.result(captions, "transcript list with special parameters", tracks)

            return ExtractionResult.empty(self.name, tracks)
