"""Tests for TranscriptSettings and environment loading."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from yt_transcript_fallback.config import (
    DEFAULT_CLIENT_VERSION,
    DEFAULT_INNERTUBE_API_KEY,
    STRATEGY_NAMES,
    TranscriptSettings,
)


class TestTranscriptSettings:
    """Tests for defaults and validation."""

    def test_defaults(self) -> None:
        settings = TranscriptSettings()
        assert settings.innertube_api_key == DEFAULT_INNERTUBE_API_KEY
        assert settings.client_version == DEFAULT_CLIENT_VERSION
        assert settings.request_timeout == 5.0
        assert settings.probe_timeout == 3.0
        assert settings.default_language == "en"
        assert settings.strategy_order == list(STRATEGY_NAMES)

    def test_explicit_strategy_order(self) -> None:
        settings = TranscriptSettings(strategies=["timedtext", "watch-page"])
        assert settings.strategy_order == ["timedtext", "watch-page"]

    @pytest.mark.parametrize("field", ["request_timeout", "probe_timeout"])
    def test_non_positive_timeout_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError, match="Timeouts must be positive"):
            TranscriptSettings(**{field: 0})

    def test_unknown_strategy_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unknown strategies: selenium"):
            TranscriptSettings(strategies=["watch-page", "selenium"])

    def test_duplicate_strategy_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not repeat"):
            TranscriptSettings(strategies=["headless", "headless"])


class TestFromEnv:
    """Tests for TranscriptSettings.from_env()."""

    def test_empty_environment_gives_defaults(self) -> None:
        assert TranscriptSettings.from_env({}) == TranscriptSettings()

    def test_variables_applied(self) -> None:
        settings = TranscriptSettings.from_env({
            "YOUTUBE_API_KEY": "data-key",
            "YT_CAPTIONS_CLIENT_VERSION": "2.20990101.00.00",
            "YT_CAPTIONS_REQUEST_TIMEOUT": "7.5",
            "YT_CAPTIONS_DEFAULT_LANGUAGE": "de",
            "YT_CAPTIONS_STRATEGIES": "headless, timedtext,",
        })
        assert settings.youtube_api_key == "data-key"
        assert settings.client_version == "2.20990101.00.00"
        assert settings.request_timeout == 7.5
        assert settings.default_language == "de"
        assert settings.strategies == ["headless", "timedtext"]

    def test_malformed_value_raises(self) -> None:
        with pytest.raises(ValidationError):
            TranscriptSettings.from_env({"YT_CAPTIONS_PROBE_TIMEOUT": "soon"})
