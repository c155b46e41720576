"""
conftest.py — A fake youtube.com for the HTTP-level strategy tests.

FakeYouTube is an httpx.MockTransport handler: tests register a handler per
(method, path), every request is recorded, and anything unregistered gets a
404 just like a missing upstream resource.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

VIDEO_ID = "dQw4w9WgXcQ"

CAPTION_XML = (
    '<?xml version="1.0" encoding="utf-8" ?><transcript>'
    '<text start="0" dur="1.5">Hello and welcome</text>'
    '<text start="1.5" dur="2.25">to the show &amp; more</text>'
    "</transcript>"
)

Handler = Callable[[httpx.Request], httpx.Response]


class FakeYouTube:
    """Routes requests by (method, path) and records every one of them."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def route(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture()
def youtube() -> FakeYouTube:
    return FakeYouTube()


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------

def caption_track(code: str, kind: str | None = None) -> dict[str, Any]:
    """A captionTracks entry whose baseUrl carries a signature param."""
    track: dict[str, Any] = {
        "baseUrl": f"https://www.youtube.com/api/timedtext?v={VIDEO_ID}&lang={code}&sig=abc",
        "languageCode": code,
        "name": {"simpleText": code.upper()},
    }
    if kind:
        track["kind"] = kind
    return track


def player_response(*tracks: dict[str, Any]) -> dict[str, Any]:
    return {"captions": {"playerCaptionsTracklistRenderer": {"captionTracks": list(tracks)}}}


def watch_page(
    player: dict[str, Any] | None = None,
    initial_data: dict[str, Any] | None = None,
    extra: str = "",
) -> str:
    """Minimal watch-page HTML embedding the given JSON blobs."""
    scripts = []
    if player is not None:
        scripts.append(f"var ytInitialPlayerResponse = {json.dumps(player)};")
    if initial_data is not None:
        scripts.append(f'window["ytInitialData"] = {json.dumps(initial_data)};')
    return "<html><body><script>" + "".join(scripts) + extra + "</script></body></html>"


def cue_group(text: str, start_ms: int, duration_ms: int) -> dict[str, Any]:
    return {
        "transcriptCueGroupRenderer": {
            "cues": [
                {
                    "transcriptCueRenderer": {
                        "cue": {"simpleText": text},
                        "startOffsetMs": str(start_ms),
                        "durationMs": str(duration_ms),
                    }
                }
            ]
        }
    }


def transcript_response(*groups: dict[str, Any]) -> dict[str, Any]:
    """A get_transcript response body holding the given cue groups."""
    return {
        "actions": [
            {
                "updateEngagementPanelAction": {
                    "content": {
                        "transcriptRenderer": {
                            "body": {"transcriptBodyRenderer": {"cueGroups": list(groups)}}
                        }
                    }
                }
            }
        ]
    }
