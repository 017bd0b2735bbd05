"""YouTube metadata via oEmbed; the thumbnail is derived from the video ID."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, quote, urlparse

from ..context import ScrapeContext
from ..core.platforms import host_matches
from ..core.types import Outcome, Platform, ScrapedMetadata
from ..errors import LinkcardError
from ..logging_utils import get_logger, log_event
from .base import MetadataAdapter


logger = get_logger("metadata.youtube")

OEMBED_URL = "https://www.youtube.com/oembed?url={url}&format=json"
THUMBNAIL_URL = "https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"
FAVICON_URL = "https://www.youtube.com/favicon.ico"

_PATH_ID_RE = re.compile(r"^/(?:shorts|embed)/([A-Za-z0-9_-]+)")


def extract_video_id(url: str) -> str | None:
    """Video ID from ``watch?v=``, ``/shorts/``, ``/embed/`` or ``youtu.be/`` URLs."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    host = (parsed.hostname or "").lower()

    if host_matches(host, "youtube.com"):
        video_id = parse_qs(parsed.query).get("v", [""])[0]
        if video_id:
            return video_id
        match = _PATH_ID_RE.match(parsed.path)
        if match:
            return match.group(1)

    if host == "youtu.be":
        video_id = parsed.path.lstrip("/").split("/")[0]
        if video_id:
            return video_id
    return None


class YouTubeMetadataAdapter(MetadataAdapter):
    platform = Platform.YOUTUBE

    async def scrape(self, url: str, ctx: ScrapeContext) -> Outcome[ScrapedMetadata]:
        video_id = extract_video_id(url)
        if not video_id:
            return Outcome.not_found("no video id")

        title = author = None
        failure = None
        try:
            result, data = await ctx.fetcher.get_json(OEMBED_URL.format(url=quote(url, safe="")), ctx.cfg.fetch.youtube)
            if isinstance(data, dict):
                title = data.get("title") or None
                author = data.get("author_name") or None
            else:
                failure = f"oembed status {result.status_code}"
        except LinkcardError as exc:
            failure = str(exc)

        thumbnail = THUMBNAIL_URL.format(video_id=video_id)
        description = f"by {author}" if author else None
        metadata = ScrapedMetadata(
            title=title or f"YouTube Video - {video_id}",
            description=description,
            image=thumbnail,
            images=[thumbnail],
            favicon=FAVICON_URL,
            domain="youtube.com",
            raw={
                "ogTitle": title,
                "ogDescription": description,
                "ogImage": thumbnail,
                "ogType": "video",
                "ogSiteName": "YouTube",
            },
        )
        if failure:
            log_event(logger, "YouTube oEmbed unavailable", event="scrape_degraded", url=url, error=failure)
            return Outcome.degraded(metadata, f"oembed failed: {failure}")
        return Outcome.found(metadata)
