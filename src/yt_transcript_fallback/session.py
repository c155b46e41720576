"""
session.py — Thin httpx wrapper used by every strategy.

Each strategy call opens one UpstreamSession, makes its requests through it
strictly one at a time, and closes it on the way out.  Cookies YouTube sets
on the watch page therefore flow into the follow-up requests of the same
strategy call, and nowhere else.

All transport-level problems (timeouts, connection errors, non-2xx status,
undecodable JSON) are converted into UpstreamTransientError so strategies
only ever need to catch one exception type.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx

from yt_transcript_fallback.errors import UpstreamTransientError
from yt_transcript_fallback.logging import logger


class UpstreamSession:
    """
    A cookie-carrying HTTP session with a per-call timeout.

    Args:
        headers:   Default headers sent with every request.
        timeout:   Default per-request timeout in seconds.
        transport: Optional httpx transport; tests pass an httpx.MockTransport.
    """

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._client = httpx.Client(
            headers=headers or {},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    # -- context manager -------------------------------------------------

    def __enter__(self) -> UpstreamSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # -- cookies -----------------------------------------------------------

    def cookie(self, name: str) -> str | None:
        """Return a cookie harvested earlier in this session, if any."""
        for cookie in self._client.cookies.jar:
            if cookie.name == name:
                return cookie.value
        return None

    def cookie_header(self) -> str:
        """All cookies collected so far, formatted as a Cookie header value."""
        return "; ".join(f"{c.name}={c.value}" for c in self._client.cookies.jar)

    # -- requests ----------------------------------------------------------

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        try:
            response = self._client.request(
                method,
                url,
                params=params,
                headers=headers,
                json=json_body,
                timeout=timeout if timeout is not None else self.timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise UpstreamTransientError(url, "timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise UpstreamTransientError(
                url,
                f"HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamTransientError(url, f"{type(exc).__name__}: {exc}") from exc

        logger.debug(f"{method} {url} -> {response.status_code} ({len(response.content)} bytes)")
        return response

    def get_text(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> str:
        """GET a URL and return the decoded body."""
        return self._send("GET", url, params=params, headers=headers, timeout=timeout).text

    def post_json(
        self,
        url: str,
        payload: Any,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """POST a JSON payload and return the decoded JSON response."""
        response = self._send(
            "POST", url, params=params, headers=headers, json_body=payload, timeout=timeout,
        )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamTransientError(url, "response was not JSON") from exc
