"""
Exception taxonomy for the scraping engine.

- ValidationError: URL rejected before any network access (never retried)
- NetworkError: DNS failure, refused connection, or a non-2xx response
  where no adapter fallback applies
- FetchTimeout: a NetworkError raised when a deadline expires
- ParseError: malformed platform payload; adapters treat it as "field absent"
- MetadataNotFound: the platform answered but has no entry for the URL
"""

from __future__ import annotations

import asyncio


class LinkcardError(Exception):
    """Base class for all engine errors."""


class ValidationError(LinkcardError):
    """Raised when a URL is malformed, uses a disallowed scheme, or targets a private network."""

    def __init__(self, url: str, reason: str, detail: str | None = None):
        self.url = url
        self.reason = reason
        self.detail = detail
        message = f"{reason}: {url}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class NetworkError(LinkcardError):
    """Raised when an outbound request fails or returns an unusable status."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class FetchTimeout(NetworkError):
    """Raised when a request or an overall extraction deadline expires."""

    def __init__(self, url: str, timeout: float | None = None):
        self.timeout = timeout
        detail = f" after {timeout:g}s" if timeout is not None else ""
        super().__init__(url, f"Request timed out{detail}: {url}")


class ParseError(LinkcardError):
    """Raised when a platform payload cannot be decoded."""


class MetadataNotFound(LinkcardError):
    """Raised when a platform API has no entry for the requested item."""


def categorize_error(exc: BaseException) -> str:
    """Categorize an exception for structured logging.

    Timeouts and refused connections collapse to the same caller-visible
    failure, but they are logged under different categories.

    Returns:
        One of "timeout", "blocked", "network_failed", "invalid_url",
        "parse_error", "not_found", "unknown"
    """
    if isinstance(exc, (FetchTimeout, asyncio.TimeoutError)):
        return "timeout"
    if isinstance(exc, ValidationError):
        return "invalid_url"
    if isinstance(exc, NetworkError):
        if exc.status_code in (401, 403, 429):
            return "blocked"
        return "network_failed"
    if isinstance(exc, ParseError):
        return "parse_error"
    if isinstance(exc, MetadataNotFound):
        return "not_found"
    return "unknown"
