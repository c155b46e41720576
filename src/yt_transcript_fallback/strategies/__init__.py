"""
strategies — The ordered set of caption-extraction strategies.

Each module wraps one route to YouTube's caption data behind the same
CaptionStrategy interface, so an upstream shape change only ever touches
one file.  Order runs from least request overhead to most elaborate
session emulation:

    watch-page          one page fetch, advertised caption tracks
    timedtext           language enumeration + direct timed-text probes
    transcript-library  youtube-transcript-api
    browser             browser headers, ytInitialData, innertube
    session             page cookies + page-scraped innertube key/version
    headless            full session emulation incl. SAPISIDHASH
"""

from __future__ import annotations

import httpx

from yt_transcript_fallback.config import TranscriptSettings
from yt_transcript_fallback.strategies.base import CaptionStrategy
from yt_transcript_fallback.strategies.browser import BrowserStrategy
from yt_transcript_fallback.strategies.cookie_session import SessionStrategy
from yt_transcript_fallback.strategies.headless import HeadlessStrategy
from yt_transcript_fallback.strategies.library import TranscriptLibraryStrategy
from yt_transcript_fallback.strategies.timedtext import TimedTextStrategy
from yt_transcript_fallback.strategies.watch_page import WatchPageStrategy

STRATEGY_CLASSES: dict[str, type[CaptionStrategy]] = {
    cls.name: cls
    for cls in (
        WatchPageStrategy,
        TimedTextStrategy,
        TranscriptLibraryStrategy,
        BrowserStrategy,
        SessionStrategy,
        HeadlessStrategy,
    )
}


def default_strategies(
    settings: TranscriptSettings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> list[CaptionStrategy]:
    """
    Instantiate the strategies named by `settings.strategy_order`.

    Args:
        settings:  Runtime settings; every strategy receives the same object.
        transport: Optional httpx transport shared by the HTTP strategies.

    Returns:
        Strategy instances in the order they should be tried.
    """
    settings = settings or TranscriptSettings()
    return [STRATEGY_CLASSES[name](settings, transport) for name in settings.strategy_order]


__all__ = [
    "CaptionStrategy",
    "STRATEGY_CLASSES",
    "default_strategies",
    "BrowserStrategy",
    "HeadlessStrategy",
    "SessionStrategy",
    "TimedTextStrategy",
    "TranscriptLibraryStrategy",
    "WatchPageStrategy",
]
