"""
test_api.py — Tests for the FastAPI web API endpoints.

Uses FastAPI's TestClient (backed by httpx) so tests run in-process without
needing a live server.  get_transcript() is mocked so these tests are fast
and don't require network access.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from yt_transcript_fallback.api import app, get_settings
from yt_transcript_fallback.config import TranscriptSettings
from yt_transcript_fallback.errors import (
    InvalidInputError,
    NoCaptionsAvailableError,
    UnexpectedFailureError,
)
from yt_transcript_fallback.models import (
    CaptionEntry,
    ExtractionResult,
    StrategyAttempt,
    TranscriptResult,
    VideoMetadata,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_SETTINGS = TranscriptSettings(strategies=["watch-page", "headless"])


@pytest.fixture()
def client() -> TestClient:
    """A fresh TestClient with environment-independent settings."""
    app.dependency_overrides[get_settings] = lambda: _SETTINGS
    yield TestClient(app)
    app.dependency_overrides.clear()


def _result() -> TranscriptResult:
    """Sample result returned by mocked get_transcript() calls."""
    return TranscriptResult(
        video_id="dQw4w9WgXcQ",
        extraction=ExtractionResult(
            [CaptionEntry("Hello and welcome", 0, 3000)],
            "watch-page: caption track",
            language="en",
        ),
        metadata=VideoMetadata("Never Gonna Give You Up", "Rick Astley", "2009-10-25"),
        attempts=[StrategyAttempt("watch-page", True, "1 entries")],
    )


# ---------------------------------------------------------------------------
# Health / introspection
# ---------------------------------------------------------------------------

class TestHealth:
    """Tests for GET /health and GET /strategies."""

    def test_health_returns_ok(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_strategies(self, client: TestClient) -> None:
        resp = client.get("/strategies")
        assert resp.json() == {"strategies": ["watch-page", "headless"]}


# ---------------------------------------------------------------------------
# Transcript endpoints — success cases
# ---------------------------------------------------------------------------

class TestTranscriptEndpoints:
    """Tests for GET /transcript and GET /transcript/{video_id}."""

    @patch("yt_transcript_fallback.api.get_transcript")
    def test_by_url(self, mock_get: MagicMock, client: TestClient) -> None:
        mock_get.return_value = _result()

        resp = client.get("/transcript", params={"url": "https://youtu.be/dQw4w9WgXcQ", "lang": "en"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["video_title"] == "Never Gonna Give You Up"
        assert body["transcript"] == [{"text": "Hello and welcome", "offset": 0, "duration": 3000}]
        mock_get.assert_called_once_with("https://youtu.be/dQw4w9WgXcQ", "en", settings=_SETTINGS)

    @patch("yt_transcript_fallback.api.get_transcript")
    def test_by_id_without_lang(self, mock_get: MagicMock, client: TestClient) -> None:
        mock_get.return_value = _result()

        resp = client.get("/transcript/dQw4w9WgXcQ")

        assert resp.status_code == 200
        assert resp.json()["method"] == "watch-page: caption track"
        mock_get.assert_called_once_with("dQw4w9WgXcQ", None, settings=_SETTINGS)


# ---------------------------------------------------------------------------
# Download endpoint
# ---------------------------------------------------------------------------

class TestDownloadEndpoint:
    """Tests for GET /download/{video_id}."""

    @patch("yt_transcript_fallback.api.get_transcript")
    def test_srt_download(self, mock_get: MagicMock, client: TestClient) -> None:
        mock_get.return_value = _result()

        resp = client.get("/download/dQw4w9WgXcQ", params={"format": "srt"})

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "content": "1\n00:00:00,000 --> 00:00:03,000\nHello and welcome\n",
            "filename": "never-gonna-give-you-up.srt",
        }

    @patch("yt_transcript_fallback.api.get_transcript")
    def test_unknown_format_is_400_without_fetching(self, mock_get: MagicMock, client: TestClient) -> None:
        resp = client.get("/download/dQw4w9WgXcQ", params={"format": "pdf"})

        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_input"
        mock_get.assert_not_called()


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

class TestErrorHandling:
    """The exception handler maps each TranscriptError to its status and body."""

    @patch("yt_transcript_fallback.api.get_transcript")
    def test_invalid_input_is_400(self, mock_get: MagicMock, client: TestClient) -> None:
        mock_get.side_effect = InvalidInputError("Invalid YouTube URL.", value="nope")

        resp = client.get("/transcript", params={"url": "nope"})

        assert resp.status_code == 400
        assert resp.json() == {
            "error": "Invalid YouTube URL.",
            "code": "invalid_input",
            "details": {"value": "nope"},
        }

    def test_missing_url_is_400(self, client: TestClient) -> None:
        """No mock: validation fails before any network access."""
        resp = client.get("/transcript")
        assert resp.status_code == 400
        assert resp.json()["error"] == "Please provide a YouTube URL"

    @patch("yt_transcript_fallback.api.get_transcript")
    def test_no_captions_is_404_with_attempts(self, mock_get: MagicMock, client: TestClient) -> None:
        mock_get.side_effect = NoCaptionsAvailableError(
            "dQw4w9WgXcQ",
            [StrategyAttempt("watch-page", False, "no captions found")],
        )

        resp = client.get("/transcript/dQw4w9WgXcQ")

        assert resp.status_code == 404
        body = resp.json()
        assert body["code"] == "no_captions_available"
        assert body["details"]["methods_tried"] == ["watch-page"]

    @patch("yt_transcript_fallback.api.get_transcript")
    def test_unexpected_failure_is_500(self, mock_get: MagicMock, client: TestClient) -> None:
        mock_get.side_effect = UnexpectedFailureError("RuntimeError: boom")

        resp = client.get("/transcript/dQw4w9WgXcQ")

        assert resp.status_code == 500
        assert "try again" in resp.json()["error"]


class TestSettingsFromEnvironment:
    """get_settings() without dependency overrides, reading the real environment."""

    @pytest.fixture(autouse=True)
    def _fresh_settings(self) -> None:
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_malformed_environment_is_structured_500(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YT_CAPTIONS_STRATEGIES", "selenium")

        resp = TestClient(app).get("/strategies")

        assert resp.status_code == 500
        body = resp.json()
        assert body["code"] == "invalid_configuration"
        assert [e["field"] for e in body["details"]["errors"]] == ["strategies"]

    def test_valid_environment_is_used(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YT_CAPTIONS_STRATEGIES", "session,browser")

        resp = TestClient(app).get("/strategies")

        assert resp.json() == {"strategies": ["session", "browser"]}
