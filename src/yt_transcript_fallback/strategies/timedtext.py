"""
timedtext.py — Enumerate languages from the watch page, then probe timed-text.

The watch page lists the languages captions can be translated into.  For
each one (requested language first) the timed-text endpoint is asked for
auto-generated captions, then for manual ones.  If the page can't be read
or lists nothing, English is probed on its own.
"""

from __future__ import annotations

from typing import Any

import httpx

from yt_transcript_fallback.config import TranscriptSettings
from yt_transcript_fallback.errors import TranscriptError
from yt_transcript_fallback.logging import logger
from yt_transcript_fallback.models import CaptionTrack, ExtractionResult
from yt_transcript_fallback.parsing import find_json_array, runs_text
from yt_transcript_fallback.session import UpstreamSession
from yt_transcript_fallback.strategies.base import WATCH_URL, CaptionStrategy, fetch_timedtext

_ENGLISH = CaptionTrack(language_code="en", display_name="English")


def translation_languages(entries: list[Any] | None) -> list[CaptionTrack]:
    """Map a page's translationLanguages array to CaptionTrack descriptors."""
    tracks = []
    for entry in entries or []:
        if not isinstance(entry, dict) or not isinstance(entry.get("languageCode"), str):
            continue
        code = entry["languageCode"]
        tracks.append(
            CaptionTrack(language_code=code, display_name=runs_text(entry.get("languageName")) or code)
        )
    return tracks


class TimedTextStrategy(CaptionStrategy):
    """
    Probe the timed-text endpoint language by language.

    Args:
        max_languages: Upper bound on how many languages are probed.  The
            translation list can hold 100+ entries and each probe costs up
            to two requests.
    """

    name = "timedtext"

    def __init__(
        self,
        settings: TranscriptSettings | None = None,
        transport: httpx.BaseTransport | None = None,
        max_languages: int = 5,
    ) -> None:
        super().__init__(settings, transport)
        self.max_languages = max_languages

    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept-Language": "en-US,en;q=0.9",
        }

    def _enumerate(self, session: UpstreamSession, video_id: str) -> list[CaptionTrack]:
        try:
            html = session.get_text(WATCH_URL, params={"v": video_id})
        except TranscriptError as exc:
            logger.debug(f"[{self.name}] watch page unavailable, defaulting to English ({exc})")
            return []
        tracks = translation_languages(find_json_array(html, "translationLanguages"))
        logger.debug(f"[{self.name}] found {len(tracks)} language options")
        return tracks

    def _probe_order(self, tracks: list[CaptionTrack], language: str) -> list[CaptionTrack]:
        preferred = [t for t in tracks if t.language_code == language]
        rest = [t for t in tracks if t.language_code != language]
        return (preferred + rest)[: self.max_languages]

    def _extract(self, video_id: str, language: str) -> ExtractionResult:
        with self.open_session(self.headers()) as session:
            tracks = self._enumerate(session, video_id) or [_ENGLISH]

            for track in self._probe_order(tracks, language):
                code = track.language_code
                for asr in (True, False):
                    kind = "auto" if asr else "manual"
                    captions = self.attempt(
                        f"timedtext ({kind}, {code})",
                        lambda asr=asr: fetch_timedtext(
                            session, video_id, code, asr=asr, timeout=self.settings.probe_timeout,
                        ),
                    )
                    if captions:
                        return self.result(captions, f"{kind}, {code}", tracks, code)

            return ExtractionResult.empty(self.name, tracks)
