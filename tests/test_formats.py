"""
test_formats.py — Tests for the txt / srt / vtt / csv renderers.
"""

from __future__ import annotations

import pytest

from yt_transcript_fallback.errors import InvalidInputError
from yt_transcript_fallback.formats import (
    download_basename,
    format_csv,
    format_srt,
    format_txt,
    format_vtt,
    render_format,
)
from yt_transcript_fallback.models import CaptionEntry

_CAPTIONS = [
    CaptionEntry("Hello and welcome", 0, 3000),
    CaptionEntry('He said "hi"', 3723_456, 1544),
]


class TestEmitters:
    """Exact output of each format."""

    def test_srt_single_entry(self) -> None:
        assert format_srt([CaptionEntry("Hello and welcome", 0, 3000)]) == (
            "1\n00:00:00,000 --> 00:00:03,000\nHello and welcome\n"
        )

    def test_srt_multiple_entries(self) -> None:
        assert format_srt(_CAPTIONS) == (
            "1\n00:00:00,000 --> 00:00:03,000\nHello and welcome\n"
            "\n"
            '2\n01:02:03,456 --> 01:02:05,000\nHe said "hi"\n'
        )

    def test_txt(self) -> None:
        assert format_txt(_CAPTIONS) == (
            "00:00:00\nHello and welcome\n"
            "\n"
            '01:02:03\nHe said "hi"\n'
        )

    def test_vtt(self) -> None:
        assert format_vtt(_CAPTIONS) == (
            "WEBVTT\n\n"
            "00:00:00.000 --> 00:00:03.000\nHello and welcome"
            "\n\n"
            '01:02:03.456 --> 01:02:05.000\nHe said "hi"'
        )

    def test_csv_quotes_and_whole_seconds(self) -> None:
        assert format_csv(_CAPTIONS) == (
            "start,end,text\n"
            '0,3,"Hello and welcome"\n'
            '3723,3725,"He said ""hi"""'
        )


class TestRenderFormat:
    """Tests for the render_format() entry point."""

    @pytest.mark.parametrize("fmt", ["txt", "srt", "vtt", "csv"])
    def test_empty_captions_never_raise(self, fmt: str) -> None:
        rendered = render_format([], fmt)
        assert isinstance(rendered.content, str)

    def test_empty_vtt_is_header_only(self) -> None:
        assert render_format([], "vtt").content == "WEBVTT\n\n"

    def test_format_is_case_insensitive(self) -> None:
        assert render_format(_CAPTIONS, "SRT").content == format_srt(_CAPTIONS)

    def test_filename_and_media_type(self) -> None:
        rendered = render_format(_CAPTIONS, "srt", title="Rick Astley: Never Gonna Give You Up!")
        assert rendered.filename == "rick-astley-never-gonna-give-you-up.srt"
        assert rendered.media_type == "application/x-subrip"

    def test_default_filename(self) -> None:
        assert render_format(_CAPTIONS, "csv").filename == "youtube-transcript.csv"

    def test_unknown_format(self) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            render_format(_CAPTIONS, "docx")
        assert exc_info.value.http_status == 400


class TestDownloadBasename:
    """Tests for title → filename slugs."""

    def test_punctuation_only_title_falls_back(self) -> None:
        assert download_basename("!!!") == "youtube-transcript"

    def test_whitespace_runs_collapse(self) -> None:
        assert download_basename("  Two   Words ") == "two-words"
