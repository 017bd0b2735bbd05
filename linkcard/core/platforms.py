"""
Platform classification and the "is this an article" decision.

Both are pure functions of the URL's host and path.
"""

from __future__ import annotations

import re
from typing import Callable
from urllib.parse import urlsplit

from .types import Platform


def hostname_of(url: str) -> str:
    """Lower-cased hostname of ``url``, or "" when it cannot be parsed."""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def host_matches(hostname: str, domain: str) -> bool:
    """True when ``hostname`` is ``domain`` or one of its subdomains."""
    return hostname == domain or hostname.endswith("." + domain)


def _is_youtube(host: str) -> bool:
    return host_matches(host, "youtube.com") or host == "youtu.be"


def _is_reddit(host: str) -> bool:
    return host_matches(host, "reddit.com") or host == "redd.it"


def _is_nytimes(host: str) -> bool:
    return host_matches(host, "nytimes.com")


def _is_imdb(host: str) -> bool:
    return host_matches(host, "imdb.com")


def _is_wikipedia(host: str) -> bool:
    return host.endswith(".wikipedia.org")


def _is_digg(host: str) -> bool:
    return host_matches(host, "digg.com")


# Evaluated in order; the first match wins.
PLATFORM_RULES: tuple[tuple[Platform, Callable[[str], bool]], ...] = (
    (Platform.YOUTUBE, _is_youtube),
    (Platform.REDDIT, _is_reddit),
    (Platform.NYTIMES, _is_nytimes),
    (Platform.IMDB, _is_imdb),
    (Platform.WIKIPEDIA, _is_wikipedia),
    (Platform.DIGG, _is_digg),
)


def classify_platform(url: str) -> Platform:
    """Select the platform handling ``url``; unmatched URLs are GENERIC."""
    host = hostname_of(url)
    if not host:
        return Platform.GENERIC
    for platform, matches in PLATFORM_RULES:
        if matches(host):
            return platform
    return Platform.GENERIC


NON_ARTICLE_DOMAINS = (
    "twitter.com",
    "x.com",
    "instagram.com",
    "facebook.com",
    "tiktok.com",
    "reddit.com",
    "redd.it",
    "maps.google.com",
    "drive.google.com",
    "docs.google.com",
    "sheets.google.com",
    "calendar.google.com",
)

NON_ARTICLE_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".svg",
    ".ico",
    ".pdf",
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    ".mp3",
    ".mp4",
    ".wav",
    ".avi",
    ".mov",
    ".webm",
    ".zip",
    ".rar",
    ".tar",
    ".gz",
    ".js",
    ".css",
    ".json",
    ".xml",
)

NON_ARTICLE_PATH_PATTERNS = tuple(
    re.compile(pattern)
    for pattern in (
        r"^/api/",
        r"^/static/",
        r"^/assets/",
        r"^/cdn-cgi/",
        r"/feed/?$",
        r"/rss/?$",
        r"^/cart",
        r"^/checkout",
        r"^/account",
        r"^/login",
        r"^/signin",
        r"^/signup",
        r"^/search",
        r"^/s$",
        r"^/pl/",
        r"^/dp/",
        r"^/gp/",
        r"^/ip/",
    )
)


def should_extract_article(url: str) -> bool:
    """Return True when ``url`` is likely to carry readable article content."""
    try:
        parsed = urlsplit(url)
    except ValueError:
        return False
    host = (parsed.hostname or "").lower()
    path = parsed.path.lower()
    if not host:
        return False

    if _is_youtube(host) or _is_imdb(host):
        return False
    if any(host_matches(host, domain) for domain in NON_ARTICLE_DOMAINS):
        return False
    if path.endswith(NON_ARTICLE_EXTENSIONS):
        return False
    if any(pattern.search(path) for pattern in NON_ARTICLE_PATH_PATTERNS):
        return False
    return True
