"""
metadata.py — Look up a video's title, channel and publish date.

Captions don't come with any display metadata, so it is fetched separately
and merged into the response.  Two backends, tried in this order:

    1. YouTube Data API v3 (videos?part=snippet) — only when an API key is
       configured.  Fast, one small JSON request.
    2. yt-dlp in metadata-only mode — no key needed, but slower.

A metadata failure must never fail transcript extraction, so the public
entry point get_video_metadata() always returns a VideoMetadata: when both
backends fail it returns the default "YouTube Video" title.
"""

from __future__ import annotations

import json

import httpx
import yt_dlp

from yt_transcript_fallback.config import TranscriptSettings
from yt_transcript_fallback.errors import MetadataFetchError, TranscriptError
from yt_transcript_fallback.logging import logger
from yt_transcript_fallback.models import DEFAULT_TITLE, VideoMetadata
from yt_transcript_fallback.session import UpstreamSession

DATA_API_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

def fetch_from_data_api(
    video_id: str,
    api_key: str,
    *,
    timeout: float = 5.0,
    transport: httpx.BaseTransport | None = None,
) -> VideoMetadata:
    """
    Fetch the snippet of one video from the YouTube Data API.

    Raises:
        MetadataFetchError: On network errors, non-2xx responses, or when the
            API returns no item for the ID.
    """
    with UpstreamSession(timeout=timeout, transport=transport) as session:
        try:
            body = session.get_text(
                DATA_API_VIDEOS_URL,
                params={"id": video_id, "key": api_key, "part": "snippet"},
            )
        except TranscriptError as exc:
            raise MetadataFetchError(video_id, reason=exc.message) from exc

    try:
        items = json.loads(body).get("items") or []
    except (ValueError, AttributeError) as exc:
        raise MetadataFetchError(video_id, reason="Data API returned malformed JSON") from exc

    if not isinstance(items, list):
        raise MetadataFetchError(video_id, reason="Data API returned an unexpected body")
    if not items:
        raise MetadataFetchError(video_id, reason="Video details not found")

    snippet = items[0].get("snippet") if isinstance(items[0], dict) else None
    if not isinstance(snippet, dict):
        snippet = {}
    return VideoMetadata(
        title=snippet.get("title") or DEFAULT_TITLE,
        channel_title=snippet.get("channelTitle"),
        published_at=snippet.get("publishedAt"),
    )


def fetch_with_ytdlp(video_id: str) -> VideoMetadata:
    """
    Fetch metadata with yt-dlp without downloading any media.

    Raises:
        MetadataFetchError: If yt-dlp can't retrieve the video info.
    """
    # skip_download avoids downloading media; quiet and no_warnings keep
    # yt-dlp from writing to the console.
    ydl_opts = {
        "skip_download": True,
        "quiet": True,
        "no_warnings": True,
    }

    url = f"https://www.youtube.com/watch?v={video_id}"

    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(url, download=False)
    except yt_dlp.utils.DownloadError as exc:
        raise MetadataFetchError(video_id, reason=str(exc)) from exc

    if info is None:
        raise MetadataFetchError(video_id, reason="yt-dlp returned no info")

    # yt-dlp reports upload_date as YYYYMMDD.
    raw_date = info.get("upload_date")
    published_at = None
    if raw_date and len(raw_date) == 8 and raw_date.isdigit():
        published_at = f"{raw_date[:4]}-{raw_date[4:6]}-{raw_date[6:8]}"

    return VideoMetadata(
        title=info.get("title") or DEFAULT_TITLE,
        channel_title=info.get("channel") or info.get("uploader"),
        published_at=published_at,
    )


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def get_video_metadata(
    video_id: str,
    settings: TranscriptSettings | None = None,
    *,
    use_ytdlp: bool = True,
    transport: httpx.BaseTransport | None = None,
) -> VideoMetadata:
    """
    Best-effort metadata lookup; never raises for upstream failures.

    Args:
        video_id:  The 11-character YouTube video ID.
        settings:  Supplies the Data API key and request timeout.
        use_ytdlp: Fall back to yt-dlp when the Data API is unavailable.
        transport: Optional httpx transport for the Data API call.

    Returns:
        The fetched VideoMetadata, or VideoMetadata() (title "YouTube Video")
        when every backend failed.
    """
    settings = settings or TranscriptSettings()

    if settings.youtube_api_key:
        try:
            return fetch_from_data_api(
                video_id,
                settings.youtube_api_key,
                timeout=settings.request_timeout,
                transport=transport,
            )
        except MetadataFetchError as exc:
            logger.debug(f"Data API lookup failed: {exc.message}")

    if use_ytdlp:
        try:
            return fetch_with_ytdlp(video_id)
        except MetadataFetchError as exc:
            logger.debug(f"yt-dlp lookup failed: {exc.message}")

    logger.info(f"Using default title for {video_id}")
    return VideoMetadata()
