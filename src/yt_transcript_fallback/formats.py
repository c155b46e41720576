"""
formats.py — Render caption sequences as downloadable text formats.

    txt   HH:MM:SS line, caption text, blank line between entries
    srt   SubRip: index, HH:MM:SS,mmm --> HH:MM:SS,mmm, text
    vtt   WebVTT: header, then HH:MM:SS.mmm --> HH:MM:SS.mmm, text
    csv   start,end,text with whole-second times and quoted text

Every emitter is a total function: any list of CaptionEntry, including an
empty one, renders without raising.  Times are computed from the integer
millisecond fields so there is no float rounding drift.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from yt_transcript_fallback.errors import InvalidInputError
from yt_transcript_fallback.models import CaptionEntry, RenderedTranscript

# Fallback download name when no (usable) title is known.
_DEFAULT_FILENAME = "youtube-transcript"

_NON_WORD = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------

def _hms(ms: int) -> str:
    """Whole-second HH:MM:SS (floored)."""
    total = max(ms, 0) // 1000
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _hms_millis(ms: int, separator: str) -> str:
    """HH:MM:SS plus a three-digit millisecond part, e.g. 00:01:02,345."""
    return f"{_hms(ms)}{separator}{max(ms, 0) % 1000:03d}"


# ---------------------------------------------------------------------------
# Emitters
# ---------------------------------------------------------------------------

def format_txt(captions: Sequence[CaptionEntry]) -> str:
    """Timestamp line followed by the caption text, entries blank-line separated."""
    return "\n".join(f"{_hms(c.offset_ms)}\n{c.text}\n" for c in captions)


def format_srt(captions: Sequence[CaptionEntry]) -> str:
    """
    SubRip output.

    >>> format_srt([CaptionEntry("Hello and welcome", 0, 3000)])
    '1\\n00:00:00,000 --> 00:00:03,000\\nHello and welcome\\n'
    """
    return "\n".join(
        f"{index}\n{_hms_millis(c.offset_ms, ',')} --> {_hms_millis(c.end_ms, ',')}\n{c.text}\n"
        for index, c in enumerate(captions, start=1)
    )


def format_vtt(captions: Sequence[CaptionEntry]) -> str:
    """WebVTT output; an empty sequence renders just the header."""
    cues = "\n\n".join(
        f"{_hms_millis(c.offset_ms, '.')} --> {_hms_millis(c.end_ms, '.')}\n{c.text}"
        for c in captions
    )
    return "WEBVTT\n\n" + cues


def _csv_field(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def format_csv(captions: Sequence[CaptionEntry]) -> str:
    """start,end,text rows; times are floored whole seconds."""
    rows = "\n".join(
        f"{c.offset_ms // 1000},{c.end_ms // 1000},{_csv_field(c.text)}"
        for c in captions
    )
    return "start,end,text\n" + rows


# Format name -> (emitter, file extension, media type)
FORMATS: dict[str, tuple[Callable[[Sequence[CaptionEntry]], str], str, str]] = {
    "txt": (format_txt, "txt", "text/plain"),
    "srt": (format_srt, "srt", "application/x-subrip"),
    "vtt": (format_vtt, "vtt", "text/vtt"),
    "csv": (format_csv, "csv", "text/csv"),
}


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def download_basename(title: str | None) -> str:
    """
    Turn a video title into a safe, lower-case download basename.

    Punctuation is dropped, whitespace runs become hyphens.  Titles that
    sanitise to nothing fall back to "youtube-transcript".
    """
    if not title:
        return _DEFAULT_FILENAME
    slug = _WHITESPACE.sub("-", _NON_WORD.sub("", title).strip()).lower()
    return slug or _DEFAULT_FILENAME


def render_format(
    captions: Sequence[CaptionEntry],
    fmt: str,
    title: str | None = None,
) -> RenderedTranscript:
    """
    Render captions in one of the supported formats.

    Args:
        captions: The caption sequence (may be empty).
        fmt:      One of "txt", "srt", "vtt", "csv" (case-insensitive).
        title:    Optional video title used to build the download filename.

    Returns:
        RenderedTranscript with the text content, a filename and a media type.

    Raises:
        InvalidInputError: If fmt isn't a supported format.
    """
    key = (fmt or "").strip().lower()
    if key not in FORMATS:
        raise InvalidInputError(
            f"Unknown format {fmt!r}; expected one of {', '.join(FORMATS)}",
            value=fmt,
        )

    emitter, extension, media_type = FORMATS[key]
    return RenderedTranscript(
        content=emitter(captions),
        filename=f"{download_basename(title)}.{extension}",
        media_type=media_type,
    )
