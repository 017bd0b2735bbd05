"""
Reddit metadata from the public JSON endpoint.

Reddit frequently answers server-side requests with 403. Any failure to get
the post therefore yields a minimal record carrying only the post ID and a
``clientFetchRequired`` marker, so a client can fetch the preview itself.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

from ..context import ScrapeContext
from ..core.types import Outcome, Platform, ScrapedMetadata
from ..errors import LinkcardError
from ..logging_utils import get_logger, log_event
from .base import MetadataAdapter
from .meta_tags import decode_entities


logger = get_logger("metadata.reddit")

API_URL = "https://www.reddit.com/comments/{post_id}.json?raw_json=1"
FAVICON_URL = "https://www.reddit.com/favicon.ico"

_COMMENTS_RE = re.compile(r"/comments/([a-z0-9]+)/", re.IGNORECASE)


def extract_post_id(url: str) -> str | None:
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if (parsed.hostname or "").lower() == "redd.it":
        return parsed.path.lstrip("/").split("/")[0] or None
    match = _COMMENTS_RE.search(parsed.path)
    return match.group(1) if match else None


def _fallback(post_id: str) -> ScrapedMetadata:
    return ScrapedMetadata(
        favicon=FAVICON_URL,
        domain="reddit.com",
        raw={"redditPostId": post_id, "source": "reddit-fallback", "clientFetchRequired": True},
    )


def _first_post(payload: Any) -> dict[str, Any] | None:
    try:
        post = payload[0]["data"]["children"][0]["data"]
    except (KeyError, IndexError, TypeError):
        return None
    return post if isinstance(post, dict) else None


def _post_image(post: dict[str, Any]) -> str | None:
    try:
        preview = post["preview"]["images"][0]["source"]["url"]
    except (KeyError, IndexError, TypeError):
        preview = None
    if isinstance(preview, str) and preview:
        return decode_entities(preview)
    thumbnail = post.get("thumbnail")
    if isinstance(thumbnail, str) and thumbnail.startswith("http"):
        return thumbnail
    return None


class RedditMetadataAdapter(MetadataAdapter):
    platform = Platform.REDDIT

    async def scrape(self, url: str, ctx: ScrapeContext) -> Outcome[ScrapedMetadata]:
        post_id = extract_post_id(url)
        if not post_id:
            return Outcome.not_found("no post id")

        try:
            result, payload = await ctx.fetcher.get_json(API_URL.format(post_id=post_id), ctx.cfg.fetch.reddit)
        except LinkcardError as exc:
            return self._degraded(url, post_id, f"request failed: {exc}")
        if payload is None:
            return self._degraded(url, post_id, f"http {result.status_code}")

        post = _first_post(payload)
        if post is None:
            return self._degraded(url, post_id, "no post data")

        selftext = (post.get("selftext") or "").strip()
        limit = ctx.cfg.metadata.description_max_chars
        image = _post_image(post)
        metadata = ScrapedMetadata(
            title=post.get("title") or None,
            description=selftext[:limit] or None,
            image=image,
            images=[image] if image else [],
            favicon=FAVICON_URL,
            domain="reddit.com",
            raw={"reddit": post, "source": "reddit-json"},
        )
        return Outcome.found(metadata)

    def _degraded(self, url: str, post_id: str, reason: str) -> Outcome[ScrapedMetadata]:
        log_event(logger, "Reddit fallback metadata", event="scrape_degraded", url=url, reason=reason)
        return Outcome.degraded(_fallback(post_id), reason)
