"""
Public scraping entry points.

Both operations validate the URL before any network access, route it to the
platform adapter from the registry and fall back to the generic adapter when
the platform adapter reports NOT_FOUND.
"""

from __future__ import annotations

import asyncio
import logging

from .config import AppConfig
from .context import ScrapeContext, build_context
from .core.platforms import hostname_of
from .core.safety import ensure_external_url
from .core.types import ArticleContent, Outcome, Platform, ScrapedMetadata
from .errors import FetchTimeout, categorize_error
from .fetch.fetcher import Fetcher
from .logging_utils import get_logger, log_event
from .registry import create_article_adapter, create_metadata_adapter, resolve_platform


logger = get_logger("scraper")


async def scrape_metadata(
    url: str,
    cfg: AppConfig | None = None,
    fetcher: Fetcher | None = None,
) -> ScrapedMetadata:
    """Scrape link preview metadata for ``url``.

    Args:
        url: User-supplied URL
        cfg: Application configuration (defaults apply when omitted)
        fetcher: HTTP fetcher; tests inject one backed by a mock transport

    Returns:
        ScrapedMetadata; degraded results carry ``raw["degradedReason"]``

    Raises:
        ValidationError: if the URL is malformed or targets a private network
        NetworkError: if the page cannot be fetched and no fallback applies
        MetadataNotFound: if a platform API has no entry for the URL
    """
    ensure_external_url(url)
    ctx = build_context(cfg, fetcher)
    platform = resolve_platform(url, ctx.cfg.platforms)

    outcome = await create_metadata_adapter(platform).scrape(url, ctx)
    if outcome.is_not_found and platform is not Platform.GENERIC:
        log_event(logger, "Falling back to generic metadata", event="adapter_fallback", url=url,
                  platform=platform.value, reason=outcome.reason)
        outcome = await create_metadata_adapter(Platform.GENERIC).scrape(url, ctx)

    if outcome.is_degraded and outcome.value is not None:
        outcome.value.raw.setdefault("degradedReason", outcome.reason)
        log_event(logger, "Metadata degraded", level=logging.WARNING, event="scrape_degraded", url=url,
                  platform=platform.value, reason=outcome.reason)
    return outcome.collapse(ScrapedMetadata(domain=hostname_of(url)))


async def _extract(url: str, platform: Platform, ctx: ScrapeContext) -> Outcome[ArticleContent]:
    outcome = await create_article_adapter(platform).extract(url, ctx)
    if outcome.is_not_found and platform is not Platform.GENERIC:
        outcome = await create_article_adapter(Platform.GENERIC).extract(url, ctx)
    return outcome


async def extract_article(
    url: str,
    cfg: AppConfig | None = None,
    fetcher: Fetcher | None = None,
) -> ArticleContent:
    """Extract the readable article body of ``url``.

    The whole extraction (network and parsing) runs under
    ``extract.deadline_seconds``. A page without any qualifying content
    yields an all-empty ArticleContent rather than an error.

    Raises:
        ValidationError: if the URL is malformed or targets a private network
        FetchTimeout: if the deadline expires
        NetworkError: if the page cannot be fetched
    """
    ensure_external_url(url)
    ctx = build_context(cfg, fetcher)
    platform = resolve_platform(url, ctx.cfg.platforms)
    deadline = ctx.cfg.extract.deadline_seconds

    try:
        outcome = await asyncio.wait_for(_extract(url, platform, ctx), timeout=deadline)
    except asyncio.TimeoutError as exc:
        error = FetchTimeout(url, deadline)
        log_event(logger, "Article extraction timed out", level=logging.WARNING, event="article_failed",
                  url=url, error=str(error), error_category=categorize_error(error))
        raise error from exc

    if outcome.is_not_found:
        log_event(logger, "No article content", event="article_not_found", url=url, reason=outcome.reason)
    return outcome.collapse(ArticleContent())
