"""
Link health checking.

Social platforms reject server-side HEAD requests, so their URLs are judged
by structure alone. Everything else gets a single HEAD request without
redirect following. ``check_link`` never raises: every failure maps to a
LinkStatus.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable
from urllib.parse import parse_qs, urljoin, urlsplit

from .config import AppConfig
from .core.platforms import host_matches
from .core.safety import validate_external_url
from .core.types import LinkCheckResult, LinkStatus
from .errors import NetworkError, categorize_error
from .fetch.fetcher import Fetcher
from .logging_utils import get_logger, log_event


logger = get_logger("linkcheck")

_TWITTER_STATUS_RE = re.compile(r"/status/\d+")
_SUBREDDIT_RE = re.compile(r"/r/[a-zA-Z0-9_]+")
_REDDIT_POST_RE = re.compile(r"/comments/[a-z0-9]+", re.IGNORECASE)
_TIKTOK_VIDEO_RE = re.compile(r"/@[\w.]+/video/\d+")
_TIKTOK_SHORT_RE = re.compile(r"^/t/|/v/")
_TIKTOK_PROFILE_RE = re.compile(r"^/@[\w.]+/?$")
_INSTAGRAM_POST_RE = re.compile(r"^/(p|reel|tv|reels)/[\w-]+")
_INSTAGRAM_PROFILE_RE = re.compile(r"^/[\w.]+/?$")
_PINTEREST_PIN_RE = re.compile(r"/pin/[\w-]+")
_YOUTUBE_PATH_RE = re.compile(r"^/(watch|shorts|embed)")


def _is_pinterest(host: str) -> bool:
    labels = host.split(".")
    return "pinterest" in labels[:-1]


def structural_check(url: str) -> bool | None:
    """Judge a social media URL by its shape.

    Returns:
        True/False for a known social platform, None for any other URL
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    host = (parts.hostname or "").lower()
    path = parts.path

    if host_matches(host, "twitter.com") or host_matches(host, "x.com"):
        return bool(_TWITTER_STATUS_RE.search(path))

    if host_matches(host, "reddit.com") or host == "redd.it":
        short_link = host == "redd.it" and len(path) > 1
        return bool(_SUBREDDIT_RE.search(path) or _REDDIT_POST_RE.search(path) or short_link)

    if host_matches(host, "tiktok.com"):
        return bool(_TIKTOK_VIDEO_RE.search(path) or _TIKTOK_SHORT_RE.search(path) or _TIKTOK_PROFILE_RE.match(path))

    if host_matches(host, "instagram.com"):
        profile = path != "/" and bool(_INSTAGRAM_PROFILE_RE.match(path))
        return bool(_INSTAGRAM_POST_RE.match(path)) or profile

    if host_matches(host, "facebook.com") or host in ("fb.watch", "fb.com"):
        return len(path) > 1 or bool(parts.query)

    if _is_pinterest(host) or host == "pin.it":
        short_link = host == "pin.it" and len(path) > 1
        return bool(_PINTEREST_PIN_RE.search(path)) or short_link

    if host_matches(host, "youtube.com") or host == "youtu.be":
        return (
            "v" in parse_qs(parts.query)
            or bool(_YOUTUBE_PATH_RE.match(path))
            or (host == "youtu.be" and len(path) > 1)
        )

    return None


async def check_link(
    url: str,
    cfg: AppConfig | None = None,
    fetcher: Fetcher | None = None,
) -> LinkCheckResult:
    """Check whether ``url`` is still reachable.

    Returns:
        OK, BROKEN, REDIRECTED (with an absolute redirect_url) or ERROR
        for URLs rejected by the safety guard and unexpected failures
    """
    cfg = cfg or AppConfig()
    verdict = validate_external_url(url)
    if not verdict.allowed:
        log_event(logger, "Link rejected", event="link_checked", url=url, status=LinkStatus.ERROR.value,
                  reason=verdict.reason.value)
        return LinkCheckResult(LinkStatus.ERROR)

    valid = structural_check(url)
    if valid is not None:
        status = LinkStatus.OK if valid else LinkStatus.BROKEN
        log_event(logger, "Link checked by structure", event="link_checked", url=url, status=status.value)
        return LinkCheckResult(status)

    fetcher = fetcher or Fetcher(cfg.fetch)
    try:
        result = await fetcher.head(url, cfg.fetch.link_check)
    except NetworkError as exc:
        log_event(logger, "Link unreachable", event="link_checked", url=url, status=LinkStatus.BROKEN.value,
                  error=str(exc), error_category=categorize_error(exc))
        return LinkCheckResult(LinkStatus.BROKEN)
    except Exception as exc:
        log_event(logger, "Link check failed", level=logging.ERROR, event="link_checked", url=url,
                  status=LinkStatus.ERROR.value, error=f"{type(exc).__name__}: {exc}",
                  error_category=categorize_error(exc))
        return LinkCheckResult(LinkStatus.ERROR)

    location = result.headers.get("location")
    if result.is_redirect and location:
        check = LinkCheckResult(LinkStatus.REDIRECTED, redirect_url=urljoin(url, location))
    elif result.ok:
        check = LinkCheckResult(LinkStatus.OK)
    elif result.status_code >= 400:
        check = LinkCheckResult(LinkStatus.BROKEN)
    else:
        check = LinkCheckResult(LinkStatus.OK)

    log_event(logger, "Link checked", event="link_checked", url=url, status=check.status.value,
              status_code=result.status_code, redirect_url=check.redirect_url)
    return check


@dataclass
class SweepSummary:
    """Counters for one link sweep.

    Attributes:
        checked: Number of URLs checked
        broken: URLs reported BROKEN
        redirected: URLs reported REDIRECTED
        errors: URLs reported ERROR
        results: Per-URL results in input order
    """
    checked: int = 0
    broken: int = 0
    redirected: int = 0
    errors: int = 0
    results: list[tuple[str, LinkCheckResult]] = field(default_factory=list)

    def add(self, url: str, result: LinkCheckResult) -> None:
        self.checked += 1
        if result.status is LinkStatus.BROKEN:
            self.broken += 1
        elif result.status is LinkStatus.REDIRECTED:
            self.redirected += 1
        elif result.status is LinkStatus.ERROR:
            self.errors += 1
        self.results.append((url, result))


async def sweep_links(
    urls: Iterable[str],
    cfg: AppConfig | None = None,
    fetcher: Fetcher | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> SweepSummary:
    """Check ``urls`` one at a time with ``link_check.delay_seconds`` between checks."""
    cfg = cfg or AppConfig()
    fetcher = fetcher or Fetcher(cfg.fetch)
    summary = SweepSummary()

    for index, url in enumerate(urls):
        if index:
            await sleep(cfg.link_check.delay_seconds)
        summary.add(url, await check_link(url, cfg, fetcher))

    log_event(logger, "Link sweep complete", event="sweep_complete", checked=summary.checked,
              broken=summary.broken, redirected=summary.redirected, errors=summary.errors)
    return summary
