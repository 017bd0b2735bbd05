"""
Digg support.

Digg post pages embed their data in a Next.js ``__NEXT_DATA__`` JSON blob.
The dedicated adapter reading it is registered but disabled by default
(``platforms.digg: false``); Digg URLs then go through the generic scraper,
which still uses ``extract_external_url`` to borrow the linked article's
image for link posts.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from ..context import ScrapeContext
from ..core.types import Outcome, Platform, ScrapedMetadata
from ..errors import ParseError
from ..fetch.fetcher import ACCEPT_HTML
from ..logging_utils import get_logger, log_event
from .base import MetadataAdapter
from .meta_tags import DESCRIPTION_KEYS, TITLE_KEYS, extract_meta_content


logger = get_logger("metadata.digg")

_NEXT_DATA_RE = re.compile(r'<script id="__NEXT_DATA__"[^>]*>([^<]+)</script>', re.IGNORECASE)
_EXTERNAL_URL_RE = re.compile(r'"url"\s*:\s*"(https?://(?!(?:www\.)?digg\.com)[^"]+)"')
_POST_IMAGE_RE = re.compile(r"https://digg-posts-prod[^\"'\s]+")


@dataclass
class DiggPost:
    """Fields read from a Digg ``__NEXT_DATA__`` blob."""
    title: str | None = None
    body: str | None = None
    author: str | None = None
    external_url: str | None = None
    images: list[str] = field(default_factory=list)


def load_next_data(html: str) -> dict[str, Any] | None:
    """Decode the ``__NEXT_DATA__`` blob.

    Raises:
        ParseError: if the blob is present but is not valid JSON
    """
    match = _NEXT_DATA_RE.search(html)
    if not match:
        return None
    try:
        data = json.loads(match.group(1))
    except ValueError as exc:
        raise ParseError(f"Invalid __NEXT_DATA__: {exc}") from exc
    return data if isinstance(data, dict) else None


def _add_image(images: list[str], url: Any, front: bool = False) -> None:
    if not isinstance(url, str) or not url or url in images:
        return
    if front:
        images.insert(0, url)
    else:
        images.append(url)


def parse_post(html: str) -> DiggPost:
    """Read title, body, author and images from a Digg page; missing data stays empty."""
    post = DiggPost()
    try:
        data = load_next_data(html)
    except ParseError as exc:
        log_event(logger, "Digg payload unreadable", event="parse_error", error=str(exc))
        data = None
    if not data:
        return post

    page_props = (data.get("props") or {}).get("pageProps") or {}
    item = page_props.get("post") or page_props.get("initialPost")
    if isinstance(item, dict):
        post.title = item.get("title") or None
        post.body = item.get("body") or item.get("text") or None
        author = item.get("author")
        post.author = (author.get("username") if isinstance(author, dict) else None) or item.get("authorUsername")
        external = item.get("url") or item.get("externalUrl") or item.get("link")
        if isinstance(external, str) and "digg.com" not in external:
            post.external_url = external
        for attachment in item.get("attachments") or []:
            if isinstance(attachment, dict):
                _add_image(post.images, attachment.get("url"))
        image = item.get("image")
        if isinstance(image, dict):
            _add_image(post.images, image.get("url"), front=True)
        _add_image(post.images, item.get("imageUrl"), front=True)

    # React Query cache fills whatever the page props did not carry.
    queries = (page_props.get("dehydratedState") or {}).get("queries") or []
    for query in queries:
        state_data = ((query or {}).get("state") or {}).get("data") or {}
        if not isinstance(state_data, dict):
            continue
        cached = state_data.get("post") or state_data.get("item")
        if not isinstance(cached, dict):
            continue
        post.title = post.title or cached.get("title") or None
        post.body = post.body or cached.get("body") or cached.get("text") or None
        if not post.author and isinstance(cached.get("author"), dict):
            post.author = cached["author"].get("username")
        for attachment in cached.get("attachments") or []:
            if isinstance(attachment, dict):
                _add_image(post.images, attachment.get("url"))
    return post


def extract_external_url(html: str) -> str | None:
    """URL of the external article a Digg link post points to, if any."""
    post = parse_post(html)
    if post.external_url:
        return post.external_url
    match = _NEXT_DATA_RE.search(html)
    if not match:
        return None
    url_match = _EXTERNAL_URL_RE.search(match.group(1))
    if url_match:
        return url_match.group(1).replace("\\u002F", "/")
    return None


class DiggMetadataAdapter(MetadataAdapter):
    platform = Platform.DIGG

    async def scrape(self, url: str, ctx: ScrapeContext) -> Outcome[ScrapedMetadata]:
        result = await ctx.fetcher.get(url, ctx.cfg.fetch.digg, accept=ACCEPT_HTML)
        result.raise_for_status()
        html = result.text
        limit = ctx.cfg.metadata.description_max_chars
        max_images = ctx.cfg.metadata.max_images

        post = parse_post(html)
        title = post.title or extract_meta_content(html, TITLE_KEYS)
        description = post.body
        if description and len(description) > limit:
            description = description[:limit] + "..."
        description = description or extract_meta_content(html, DESCRIPTION_KEYS)

        images = post.images[:max_images]
        if not images:
            for match in _POST_IMAGE_RE.finditer(html):
                candidate = match.group(0).replace("\\u002F", "/").replace("\\", "")
                if candidate not in images and len(images) < max_images:
                    images.append(candidate)

        metadata = ScrapedMetadata(
            title=title,
            description=description,
            image=images[0] if images else None,
            images=images,
            favicon="https://digg.com/favicon.ico",
            domain="digg.com",
            raw={"source": "digg-nextdata"},
        )
        return Outcome.found(metadata)
