"""
Bounded HTTP fetching for adapters and the link checker.

All requests go through ``Fetcher``, which:
1. validates every target (and every redirect hop) with the URL safety guard
2. sends browser-like headers with an Accept matching the expected payload
3. enforces the per-adapter deadline from the HttpProfile
4. follows redirects manually, up to HttpProfile.max_redirects
5. caps the number of body bytes read

No request is retried; a failed attempt is terminal for the call.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

import httpx

from ..config import FetchConfig, HttpProfile
from ..core.safety import ensure_external_url
from ..errors import FetchTimeout, NetworkError, ParseError, categorize_error
from ..logging_utils import get_logger, log_event


ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_JSON = "application/json"
ACCEPT_IMAGE = "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"
ACCEPT_LANGUAGE = "en-US,en;q=0.9"

logger = get_logger("fetch")


@dataclass
class FetchResult:
    """Result of an HTTP request.

    Attributes:
        url: The URL originally requested
        final_url: The URL that produced the response, after redirects
        status_code: HTTP status code of the final response
        headers: Response headers of the final response
        content: Response body (possibly truncated to max_body_bytes)
        encoding: Charset used to decode ``text``
        truncated: True when the body was cut at max_body_bytes
    """
    url: str
    final_url: str
    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""
    encoding: str = "utf-8"
    truncated: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding, errors="replace")

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except ValueError as exc:
            raise ParseError(f"Invalid JSON from {self.final_url}: {exc}") from exc

    def raise_for_status(self) -> "FetchResult":
        if not self.ok:
            raise NetworkError(
                self.final_url,
                f"HTTP {self.status_code} from {self.final_url}",
                status_code=self.status_code,
            )
        return self


def build_headers(profile: HttpProfile, accept: str) -> dict[str, str]:
    return {
        "User-Agent": profile.user_agent,
        "Accept": accept,
        "Accept-Language": ACCEPT_LANGUAGE,
    }


class Fetcher:
    """HTTP client wrapper shared by all adapters.

    Args:
        cfg: Fetch configuration (body cap, proxy handling)
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests
    """

    def __init__(self, cfg: FetchConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.cfg = cfg or FetchConfig()
        self._transport = transport

    def _client(self, profile: HttpProfile) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(profile.timeout_seconds),
            follow_redirects=False,
            trust_env=self.cfg.trust_env,
        )

    async def get(
        self,
        url: str,
        profile: HttpProfile,
        accept: str = ACCEPT_HTML,
        max_bytes: int | None = None,
    ) -> FetchResult:
        """GET ``url``, following up to ``profile.max_redirects`` redirects.

        Raises:
            ValidationError: if the URL or a redirect target is unsafe
            FetchTimeout: if the profile deadline expires
            NetworkError: on connection failure or too many redirects
        """
        limit = max_bytes if max_bytes is not None else self.cfg.max_body_bytes
        current = ensure_external_url(url)
        headers = build_headers(profile, accept)
        log_event(logger, "Fetch start", level=logging.DEBUG, event="fetch_start", url=url, method="GET")

        redirects = 0
        async with self._client(profile) as client:
            while True:
                result = await self._send(client, "GET", current, headers, limit, original=url)
                location = result.headers.get("location")
                # With max_redirects == 0 the 3xx response itself is returned.
                if not (result.is_redirect and location) or profile.max_redirects == 0:
                    return result
                if redirects >= profile.max_redirects:
                    break
                redirects += 1
                current = ensure_external_url(urljoin(current, location))

        exc = NetworkError(url, f"Too many redirects (>{profile.max_redirects}): {url}")
        log_event(logger, "Fetch failed", level=logging.WARNING, event="fetch_failed", url=url, error=str(exc),
                  error_category=categorize_error(exc))
        raise exc

    async def get_json(self, url: str, profile: HttpProfile) -> tuple[FetchResult, Any]:
        """GET a JSON endpoint. The decoded payload is None when the status is not 2xx.

        Raises:
            ParseError: if a 2xx body is not valid JSON
        """
        result = await self.get(url, profile, accept=ACCEPT_JSON)
        if not result.ok:
            return result, None
        return result, result.json()

    async def head(self, url: str, profile: HttpProfile) -> FetchResult:
        """HEAD ``url`` without following redirects."""
        target = ensure_external_url(url)
        headers = build_headers(profile, ACCEPT_HTML)
        async with self._client(profile) as client:
            return await self._send(client, "HEAD", target, headers, 0, original=url)

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        headers: dict[str, str],
        limit: int,
        original: str,
    ) -> FetchResult:
        try:
            async with client.stream(method, url, headers=headers) as resp:
                body, truncated = await _read_limited(resp, limit)
                return FetchResult(
                    url=original,
                    final_url=str(resp.url),
                    status_code=resp.status_code,
                    headers=resp.headers,
                    content=body,
                    encoding=resp.encoding or "utf-8",
                    truncated=truncated,
                )
        except httpx.TimeoutException as exc:
            timeout = client.timeout.read
            error = FetchTimeout(original, timeout)
            log_event(logger, "Fetch timed out", level=logging.WARNING, event="fetch_failed", url=original,
                      method=method, error=f"{type(exc).__name__}: {exc}", error_category="timeout")
            raise error from exc
        except httpx.HTTPError as exc:
            error = NetworkError(original, f"{type(exc).__name__}: {exc}")
            log_event(logger, "Fetch failed", level=logging.WARNING, event="fetch_failed", url=original,
                      method=method, error=str(error), error_category=categorize_error(error))
            raise error from exc


async def _read_limited(resp: httpx.Response, limit: int) -> tuple[bytes, bool]:
    if limit <= 0:
        return b"", False
    chunks: list[bytes] = []
    size = 0
    async for chunk in resp.aiter_bytes():
        chunks.append(chunk)
        size += len(chunk)
        if size >= limit:
            return b"".join(chunks)[:limit], True
    return b"".join(chunks), False
