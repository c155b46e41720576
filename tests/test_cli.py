"""
test_cli.py — Tests for the `yt-captions` command group.

get_transcript() and configure_logging() are mocked, so no network access
happens and no loguru handler outlives the CliRunner's captured streams.

Covers:
    - Output in each format, to stdout and to --output files
    - --strategy / --lang / --verbose plumbing into settings and logging
    - Error exits for invalid input and exhausted strategies
    - The `strategies` subcommand honouring YT_CAPTIONS_STRATEGIES
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from yt_transcript_fallback.cli import main
from yt_transcript_fallback.errors import InvalidInputError, NoCaptionsAvailableError
from yt_transcript_fallback.models import (
    CaptionEntry,
    ExtractionResult,
    StrategyAttempt,
    TranscriptResult,
    VideoMetadata,
)

_SRT = "1\n00:00:00,000 --> 00:00:03,000\nHello and welcome\n"


def _result() -> TranscriptResult:
    return TranscriptResult(
        video_id="dQw4w9WgXcQ",
        extraction=ExtractionResult([CaptionEntry("Hello and welcome", 0, 3000)], "timedtext: auto, en", language="en"),
        metadata=VideoMetadata("Never Gonna Give You Up"),
        attempts=[StrategyAttempt("watch-page", False), StrategyAttempt("timedtext", True)],
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings come from the environment; keep it predictable."""
    for name in ("YT_CAPTIONS_STRATEGIES", "YT_CAPTIONS_DEFAULT_LANGUAGE", "YOUTUBE_API_KEY"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------

@patch("yt_transcript_fallback.cli.configure_logging")
@patch("yt_transcript_fallback.cli.get_transcript")
class TestGetCommand:
    """Tests for `yt-captions get`."""

    def test_default_txt_to_stdout(self, mock_get: MagicMock, mock_logging: MagicMock) -> None:
        mock_get.return_value = _result()

        result = CliRunner().invoke(main, ["get", "dQw4w9WgXcQ"])

        assert result.exit_code == 0
        assert "00:00:00\nHello and welcome\n" in result.output
        args, kwargs = mock_get.call_args
        assert args == ("dQw4w9WgXcQ", None)
        assert kwargs["settings"].strategy_order[0] == "watch-page"
        mock_logging.assert_called_once_with(False)

    def test_srt_format(self, mock_get: MagicMock, mock_logging: MagicMock) -> None:
        mock_get.return_value = _result()

        result = CliRunner().invoke(main, ["get", "dQw4w9WgXcQ", "--format", "srt"])

        assert result.exit_code == 0
        assert _SRT in result.output

    def test_json_format(self, mock_get: MagicMock, mock_logging: MagicMock, tmp_path) -> None:
        mock_get.return_value = _result()
        target = tmp_path / "out.json"

        result = CliRunner().invoke(main, ["get", "dQw4w9WgXcQ", "-f", "json", "-o", str(target)])

        assert result.exit_code == 0
        body = json.loads(target.read_text(encoding="utf-8"))
        assert body["method"] == "timedtext: auto, en"
        assert [a["strategy"] for a in body["attempts"]] == ["watch-page", "timedtext"]

    def test_output_file(self, mock_get: MagicMock, mock_logging: MagicMock, tmp_path) -> None:
        mock_get.return_value = _result()
        target = tmp_path / "captions.srt"

        result = CliRunner().invoke(main, ["get", "dQw4w9WgXcQ", "--format", "srt", "--output", str(target)])

        assert result.exit_code == 0
        assert target.read_text(encoding="utf-8") == _SRT + "\n"
        assert f"Transcript written to {target}" in result.output

    def test_strategy_lang_and_verbose(self, mock_get: MagicMock, mock_logging: MagicMock) -> None:
        mock_get.return_value = _result()

        result = CliRunner().invoke(
            main,
            ["get", "dQw4w9WgXcQ", "-s", "headless", "-s", "timedtext", "--lang", "de", "-v"],
        )

        assert result.exit_code == 0
        args, kwargs = mock_get.call_args
        assert args == ("dQw4w9WgXcQ", "de")
        assert kwargs["settings"].strategy_order == ["headless", "timedtext"]
        mock_logging.assert_called_once_with(True)

    def test_unknown_strategy_rejected_by_click(self, mock_get: MagicMock, mock_logging: MagicMock) -> None:
        result = CliRunner().invoke(main, ["get", "dQw4w9WgXcQ", "--strategy", "selenium"])
        assert result.exit_code == 2
        mock_get.assert_not_called()

    def test_invalid_input_exits_1(self, mock_get: MagicMock, mock_logging: MagicMock) -> None:
        mock_get.side_effect = InvalidInputError("Invalid YouTube URL. Please provide a valid YouTube video URL.")

        result = CliRunner().invoke(main, ["get", "not-a-url"])

        assert result.exit_code == 1
        assert "Error: Invalid YouTube URL." in result.output

    def test_no_captions_lists_attempts(self, mock_get: MagicMock, mock_logging: MagicMock) -> None:
        mock_get.side_effect = NoCaptionsAvailableError(
            "dQw4w9WgXcQ",
            [StrategyAttempt("watch-page", False), StrategyAttempt("headless", False)],
        )

        result = CliRunner().invoke(main, ["get", "dQw4w9WgXcQ"])

        assert result.exit_code == 1
        assert "No captions available" in result.output
        assert "Tried: watch-page, headless" in result.output


# ---------------------------------------------------------------------------
# strategies
# ---------------------------------------------------------------------------

class TestStrategiesCommand:
    """Tests for `yt-captions strategies`."""

    def test_default_order(self) -> None:
        result = CliRunner().invoke(main, ["strategies"])
        assert result.exit_code == 0
        assert result.output.splitlines()[0] == "1. watch-page"
        assert result.output.splitlines()[-1] == "6. headless"

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YT_CAPTIONS_STRATEGIES", "session,browser")
        result = CliRunner().invoke(main, ["strategies"])
        assert result.output.splitlines() == ["1. session", "2. browser"]

    def test_bad_environment_exits_2(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YT_CAPTIONS_STRATEGIES", "selenium")
        result = CliRunner().invoke(main, ["strategies"])
        assert result.exit_code == 2
        assert "invalid configuration" in result.output
