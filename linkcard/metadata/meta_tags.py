"""
Regex-based meta tag extraction.

Real-world markup is inconsistent about attribute order, so every meta
lookup is tried twice: ``<meta property=... content=...>`` first, then
``<meta content=... property=...>``.
"""

from __future__ import annotations

import html
import re
from typing import Iterable
from urllib.parse import unquote, urljoin


# (attribute, value) pairs; "title" stands for the <title> element.
MetaKey = tuple[str, str]

TITLE_KEYS: tuple[MetaKey, ...] = (
    ("property", "og:title"),
    ("name", "twitter:title"),
    ("title", "title"),
)
DESCRIPTION_KEYS: tuple[MetaKey, ...] = (
    ("property", "og:description"),
    ("name", "twitter:description"),
    ("name", "description"),
)
IMAGE_KEYS: tuple[MetaKey, ...] = (
    ("property", "og:image"),
    ("name", "twitter:image"),
    ("name", "twitter:image:src"),
)

_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_IMG_SRC_RE = re.compile(r"""<img[^>]*\ssrc=["']([^"']+)["']""", re.IGNORECASE)
_NEXT_IMAGE_RE = re.compile(r"_next/image\?url=([^&\"'\s]+)", re.IGNORECASE)
_IMGIX_RE = re.compile(r"https:\\?/\\?/[a-z0-9-]+\.imgix\.net(?:\\?/[^\"'\s\\]+)+", re.IGNORECASE)
_FAVICON_PATTERNS = (
    re.compile(r"""<link[^>]*rel=["'](?:icon|shortcut icon)["'][^>]*href=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""<link[^>]*href=["']([^"']+)["'][^>]*rel=["'](?:icon|shortcut icon)["']""", re.IGNORECASE),
    re.compile(r"""<link[^>]*rel=["']apple-touch-icon["'][^>]*href=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""<link[^>]*href=["']([^"']+)["'][^>]*rel=["']apple-touch-icon["']""", re.IGNORECASE),
)
_SKIPPED_PROXY_PATHS = ("/communities/", "/static/", "/icons/")


def decode_entities(text: str) -> str:
    """Decode HTML entities (``&amp;``, ``&#039;``, ``&#x2F;``, ``&nbsp;``, ...)."""
    return html.unescape(text).replace("\xa0", " ")


def resolve_url(url: str, base_url: str) -> str | None:
    """Resolve ``url`` against ``base_url``; None when the result is not http(s)."""
    try:
        resolved = urljoin(base_url, url.strip())
    except ValueError:
        return None
    if not resolved.lower().startswith(("http://", "https://")):
        return None
    return resolved


def _meta_patterns(attr: str, value: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    key = re.escape(value)
    attr_first = re.compile(
        rf"""<meta[^>]*{attr}=["']{key}["'][^>]*content=["']([^"']+)["']""",
        re.IGNORECASE,
    )
    content_first = re.compile(
        rf"""<meta[^>]*content=["']([^"']+)["'][^>]*{attr}=["']{key}["']""",
        re.IGNORECASE,
    )
    return attr_first, content_first


def extract_meta_content(html_text: str, keys: Iterable[MetaKey]) -> str | None:
    """Return the first non-empty value for ``keys``, in priority order."""
    for attr, value in keys:
        if attr == "title":
            match = _TITLE_RE.search(html_text)
            if match and match.group(1).strip():
                return decode_entities(match.group(1).strip())
            continue
        for pattern in _meta_patterns(attr, value):
            match = pattern.search(html_text)
            if match and match.group(1).strip():
                return decode_entities(match.group(1).strip())
    return None


def extract_og(html_text: str, name: str) -> str | None:
    return extract_meta_content(html_text, [("property", f"og:{name}")])


def extract_favicon(html_text: str, base_url: str) -> str | None:
    """Favicon from ``<link rel=icon|shortcut icon|apple-touch-icon>``, else ``/favicon.ico``."""
    for pattern in _FAVICON_PATTERNS:
        match = pattern.search(html_text)
        if match:
            resolved = resolve_url(decode_entities(match.group(1)), base_url)
            if resolved:
                return resolved
    return resolve_url("/favicon.ico", base_url)


def first_img_src(html_text: str) -> str | None:
    match = _IMG_SRC_RE.search(html_text)
    return decode_entities(match.group(1)) if match else None


def _unwrap_next_image(src: str) -> str | None:
    """Return the target of a Next.js image proxy URL, or ``src`` unchanged.

    None means the URL should be skipped (static assets and icons).
    """
    match = _NEXT_IMAGE_RE.search(src)
    if not match:
        return src
    target = unquote(match.group(1))
    if any(part in target for part in _SKIPPED_PROXY_PATHS):
        return None
    return target


class ImageCollector:
    """Ordered, deduplicated, capped set of absolute image URLs."""

    def __init__(self, base_url: str, limit: int):
        self.base_url = base_url
        self.limit = limit
        self.images: list[str] = []

    @property
    def full(self) -> bool:
        return len(self.images) >= self.limit

    def add(self, src: str | None) -> bool:
        if not src or self.full:
            return False
        src = src.strip()
        if not src or src.lower().startswith("data:"):
            return False
        resolved = resolve_url(src, self.base_url)
        if not resolved or resolved in self.images:
            return False
        self.images.append(resolved)
        return True


def extract_images(html_text: str, base_url: str, limit: int = 10) -> list[str]:
    """Collect up to ``limit`` image URLs: og:image first, then ``<img src>`` tags.

    Relative URLs are resolved against ``base_url``; ``data:`` URIs are skipped.
    When nothing is found, Next.js image proxies and imgix URLs embedded in
    inline JSON are scanned as a last resort.
    """
    collector = ImageCollector(base_url, limit)
    collector.add(extract_og(html_text, "image"))

    for match in _IMG_SRC_RE.finditer(html_text):
        if collector.full:
            break
        src = _unwrap_next_image(decode_entities(match.group(1)))
        if src:
            collector.add(src)

    if not collector.images:
        for match in _NEXT_IMAGE_RE.finditer(html_text):
            target = unquote(match.group(1))
            if "imgix.net" in target and not any(p in target for p in _SKIPPED_PROXY_PATHS):
                collector.add(target)
    if not collector.images:
        for match in _IMGIX_RE.finditer(html_text):
            target = match.group(0).replace("\\/", "/")
            if not any(p in target for p in _SKIPPED_PROXY_PATHS):
                collector.add(target)

    return collector.images
