"""NYTimes metadata via the public oEmbed endpoints."""

from __future__ import annotations

from urllib.parse import quote

from ..context import ScrapeContext
from ..core.types import Outcome, Platform, ScrapedMetadata
from ..errors import LinkcardError, NetworkError, ParseError
from ..fetch.fetcher import ACCEPT_HTML, ACCEPT_JSON
from ..logging_utils import get_logger, log_event
from .base import MetadataAdapter
from .meta_tags import first_img_src, resolve_url


logger = get_logger("metadata.nytimes")

OEMBED_JSON_URL = "https://www.nytimes.com/svc/oembed/json/?url={url}"
OEMBED_HTML_URL = "https://www.nytimes.com/svc/oembed/html/?url={url}"
FAVICON_URL = "https://www.nytimes.com/favicon.ico"


class NyTimesMetadataAdapter(MetadataAdapter):
    platform = Platform.NYTIMES

    async def scrape(self, url: str, ctx: ScrapeContext) -> Outcome[ScrapedMetadata]:
        profile = ctx.cfg.fetch.nytimes
        encoded = quote(url, safe="")
        result = await ctx.fetcher.get(OEMBED_JSON_URL.format(url=encoded), profile, accept=ACCEPT_JSON)
        result.raise_for_status()

        degraded_reason = None
        try:
            data = result.json()
        except ParseError as exc:
            data = None
            degraded_reason = str(exc)
        if not isinstance(data, dict):
            data = {}
            degraded_reason = degraded_reason or "unexpected oembed payload"
        status = data.get("status")
        if status and status != "ok":
            raise NetworkError(url, f"NYTimes oEmbed error: {status}")

        image = data.get("thumbnail_url") or None
        if not image:
            image = await self._image_from_html_embed(url, encoded, ctx)
        if image:
            image = resolve_url(image, url)

        metadata = ScrapedMetadata(
            title=data.get("title") or None,
            description=data.get("summary") or None,
            image=image,
            images=[image] if image else [],
            favicon=FAVICON_URL,
            domain="nytimes.com",
            raw={"nytimes": data, "source": "nytimes-oembed"},
        )
        if degraded_reason:
            return Outcome.degraded(metadata, degraded_reason)
        return Outcome.found(metadata)

    async def _image_from_html_embed(self, url: str, encoded: str, ctx: ScrapeContext) -> str | None:
        try:
            result = await ctx.fetcher.get(OEMBED_HTML_URL.format(url=encoded), ctx.cfg.fetch.nytimes, accept=ACCEPT_HTML)
        except LinkcardError as exc:
            log_event(logger, "NYTimes embed image lookup failed", event="image_lookup_failed", url=url, error=str(exc))
            return None
        if not result.ok:
            return None
        return first_img_src(result.text)
