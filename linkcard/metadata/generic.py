"""
Generic OpenGraph / Twitter card scraper.

Used for every URL without a dedicated adapter, and as the fallback when a
platform adapter cannot handle a URL.
"""

from __future__ import annotations

from ..context import ScrapeContext
from ..core.platforms import hostname_of, host_matches
from ..core.types import Outcome, Platform, ScrapedMetadata
from ..errors import LinkcardError
from ..fetch.fetcher import ACCEPT_HTML
from ..fetch.preprocess import MAX_HTML_CHARS, sanitize_html
from ..logging_utils import get_logger, log_event, truncate_text
from .base import MetadataAdapter
from .digg import extract_external_url
from .meta_tags import (
    DESCRIPTION_KEYS,
    IMAGE_KEYS,
    TITLE_KEYS,
    extract_favicon,
    extract_images,
    extract_meta_content,
    extract_og,
    resolve_url,
)


logger = get_logger("metadata.generic")


def parse_page_metadata(raw_html: str, page_url: str, max_images: int = 10, max_chars: int = MAX_HTML_CHARS) -> ScrapedMetadata:
    """Build preview metadata from a fetched page.

    Args:
        raw_html: Page HTML as fetched
        page_url: Final URL of the page; relative URLs resolve against it
        max_images: Cap on collected images
        max_chars: Truncation limit for the HTML preprocessor

    Returns:
        ScrapedMetadata with the original OpenGraph fields in ``raw``
    """
    html = sanitize_html(raw_html, max_chars)

    title = extract_meta_content(html, TITLE_KEYS)
    description = extract_meta_content(html, DESCRIPTION_KEYS)
    og_image = extract_meta_content(html, IMAGE_KEYS)
    images = extract_images(html, page_url, limit=max_images)

    image = resolve_url(og_image, page_url) if og_image else None
    if image is None and images:
        image = images[0]
    if image and image not in images and len(images) < max_images:
        images.insert(0, image)

    return ScrapedMetadata(
        title=title,
        description=description,
        image=image,
        images=images,
        favicon=extract_favicon(html, page_url),
        domain=hostname_of(page_url),
        raw={
            "ogTitle": extract_og(html, "title"),
            "ogDescription": extract_og(html, "description"),
            "ogImage": extract_og(html, "image"),
            "ogType": extract_og(html, "type"),
            "ogSiteName": extract_og(html, "site_name"),
        },
    )


class GenericMetadataAdapter(MetadataAdapter):
    platform = Platform.GENERIC

    async def scrape(self, url: str, ctx: ScrapeContext) -> Outcome[ScrapedMetadata]:
        profile = ctx.cfg.fetch.generic
        result = await ctx.fetcher.get(url, profile, accept=ACCEPT_HTML)
        result.raise_for_status()

        raw_html = result.text
        metadata = parse_page_metadata(
            raw_html,
            result.final_url,
            max_images=ctx.cfg.metadata.max_images,
            max_chars=ctx.cfg.extract.max_html_chars,
        )
        # Metadata describes the URL the caller saved, not a redirect target.
        metadata.domain = hostname_of(url) or metadata.domain

        if metadata.image is None and host_matches(hostname_of(url), "digg.com"):
            await _attach_digg_external_image(raw_html, metadata, ctx)

        log_event(
            logger,
            "Generic metadata scraped",
            event="scrape_complete",
            url=url,
            title=truncate_text(metadata.title or "", 50),
            image=truncate_text(metadata.image or "", 100),
            images_count=len(metadata.images),
        )
        return Outcome.found(metadata)


async def _attach_digg_external_image(raw_html: str, metadata: ScrapedMetadata, ctx: ScrapeContext) -> None:
    """Use the linked article's og:image for Digg link posts without an image."""
    external_url = extract_external_url(raw_html)
    if not external_url:
        return
    image = await fetch_external_og_image(external_url, ctx)
    if image:
        metadata.image = image
        if image not in metadata.images:
            metadata.images.insert(0, image)
            del metadata.images[ctx.cfg.metadata.max_images:]
        metadata.raw["externalUrl"] = external_url


async def fetch_external_og_image(url: str, ctx: ScrapeContext) -> str | None:
    """Return the absolute og:image / twitter:image of ``url``, or None on any failure."""
    try:
        result = await ctx.fetcher.get(url, ctx.cfg.fetch.generic, accept=ACCEPT_HTML)
    except LinkcardError as exc:
        log_event(logger, "External image fetch failed", event="external_image_failed", url=url, error=str(exc))
        return None
    if not result.ok:
        return None
    image = extract_meta_content(sanitize_html(result.text), IMAGE_KEYS)
    return resolve_url(image, result.final_url) if image else None
