"""IMDb metadata from the public title suggestion endpoint."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

from ..context import ScrapeContext
from ..core.types import Outcome, Platform, ScrapedMetadata
from ..errors import MetadataNotFound, ParseError
from ..fetch.fetcher import ACCEPT_JSON
from .base import MetadataAdapter


SUGGESTION_URL = "https://v2.sg.media-imdb.com/suggestion/{prefix}/{title_id}.json"
FAVICON_URL = "https://www.imdb.com/favicon.ico"

_TITLE_ID_RE = re.compile(r"/title/(tt\d{5,})", re.IGNORECASE)


def extract_title_id(url: str) -> str | None:
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    match = _TITLE_ID_RE.search(path)
    return match.group(1) if match else None


def find_entry(items: list[Any], title_id: str) -> dict[str, Any] | None:
    """First suggestion whose id is the title ID, its ``/title/`` path, or contains it."""
    exact = {title_id, f"/title/{title_id}/", f"/title/{title_id}"}
    for item in items:
        if not isinstance(item, dict):
            continue
        item_id = item.get("id")
        if isinstance(item_id, str) and (item_id in exact or title_id in item_id):
            return item
    return None


class ImdbMetadataAdapter(MetadataAdapter):
    platform = Platform.IMDB

    async def scrape(self, url: str, ctx: ScrapeContext) -> Outcome[ScrapedMetadata]:
        title_id = extract_title_id(url)
        if not title_id:
            return Outcome.not_found("no title id")

        api_url = SUGGESTION_URL.format(prefix=title_id[0], title_id=title_id)
        result = await ctx.fetcher.get(api_url, ctx.cfg.fetch.imdb, accept=ACCEPT_JSON)
        result.raise_for_status()
        try:
            data = result.json()
        except ParseError:
            data = None

        items = data.get("d") if isinstance(data, dict) else None
        entry = find_entry(items if isinstance(items, list) else [], title_id)
        if entry is None:
            raise MetadataNotFound(f"IMDb metadata not found for {title_id}")

        poster = entry.get("i")
        image = poster.get("imageUrl") if isinstance(poster, dict) else None
        parts = [str(entry[key]) for key in ("y", "q", "s") if entry.get(key)]
        metadata = ScrapedMetadata(
            title=entry.get("l") or f"IMDb {title_id}",
            description=" • ".join(parts) or None,
            image=image,
            images=[image] if image else [],
            favicon=FAVICON_URL,
            domain="imdb.com",
            raw={"imdb": entry, "source": "imdb-suggestion"},
        )
        return Outcome.found(metadata)
