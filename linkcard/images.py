"""Image persistence helpers: detect expiring image URLs and download them safely."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

from filetype import guess

from .config import AppConfig, ImageConfig
from .core.safety import ensure_external_url
from .errors import NetworkError, ParseError
from .fetch.fetcher import ACCEPT_IMAGE, Fetcher
from .logging_utils import get_logger, log_event


logger = get_logger("images")

STORED_IMAGE_HOSTS = ("convex.cloud", "convex.site")


@dataclass
class ImageData:
    """A downloaded image.

    Attributes:
        url: The image URL that was requested
        content: Raw image bytes
        mime_type: Verified image MIME type
        extension: Lower-case file extension ("jpg", "png", ...)
    """
    url: str
    content: bytes
    mime_type: str
    extension: str


def needs_persistence(image_url: str | None, cfg: ImageConfig | None = None) -> bool:
    """True when ``image_url`` is a signed or CDN URL that will expire."""
    if not image_url:
        return False
    cfg = cfg or ImageConfig()
    try:
        parts = urlsplit(image_url)
    except ValueError:
        return False
    host = (parts.hostname or "").lower()
    if not host or any(stored in host for stored in STORED_IMAGE_HOSTS):
        return False

    params = parse_qs(parts.query, keep_blank_values=True)
    if any(param in params for param in cfg.expiry_params):
        return True

    for domain in cfg.expiring_domains:
        domain = domain.lower()
        if host == domain or host.endswith("." + domain):
            return True
        # Regional shards such as p16-sign-sg.tiktokcdn-us.com
        if domain.endswith(".com") and domain[: -len(".com")] in host:
            return True
    return False


def detect_image_type(data: bytes, content_type: str | None = None) -> tuple[str, str] | None:
    """Return ``(mime_type, extension)`` from the file signature, else from Content-Type."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        return kind.mime, "jpg" if ext == "jpeg" else ext
    if not content_type:
        return None
    mime = content_type.split(";")[0].strip().lower()
    major, _, minor = mime.partition("/")
    if major == "image" and minor:
        ext = minor.split("+")[0]
        return mime, "jpg" if ext == "jpeg" else ext
    return None


async def fetch_image(url: str, cfg: AppConfig | None = None, fetcher: Fetcher | None = None) -> ImageData:
    """Download an image for persistence.

    Raises:
        ValidationError: if the URL fails the safety guard
        NetworkError: on fetch failure, non-2xx status or an oversized body
        ParseError: if the body is not an image
    """
    cfg = cfg or AppConfig()
    ensure_external_url(url)
    fetcher = fetcher or Fetcher(cfg.fetch)
    max_bytes = cfg.image.max_bytes

    result = await fetcher.get(url, cfg.fetch.image, accept=ACCEPT_IMAGE, max_bytes=max_bytes + 1)
    result.raise_for_status()
    if len(result.content) > max_bytes:
        raise NetworkError(url, f"Image exceeds {max_bytes} bytes: {url}")

    detected = detect_image_type(result.content, result.content_type)
    if detected is None:
        raise ParseError(f"Not an image ({result.content_type or 'unknown type'}): {url}")
    mime_type, extension = detected

    log_event(logger, "Image fetched", level=logging.DEBUG, event="image_fetched", url=url,
              bytes=len(result.content), mime_type=mime_type)
    return ImageData(url=url, content=result.content, mime_type=mime_type, extension=extension)
