"""
Core data types for the scraping engine.

This module defines the records produced by each public operation:
- ScrapedMetadata: Normalized link preview metadata
- ArticleContent: Readable article body extracted from a page
- LinkCheckResult: Outcome of a link health check
- Platform: Closed set of platforms with dedicated handling
- Outcome: Internal Found/Degraded/NotFound wrapper around adapter results
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar


WORDS_PER_MINUTE = 225

_WHITESPACE_RE = re.compile(r"\s+")


class Platform(str, Enum):
    YOUTUBE = "youtube"
    REDDIT = "reddit"
    NYTIMES = "nytimes"
    IMDB = "imdb"
    WIKIPEDIA = "wikipedia"
    DIGG = "digg"
    GENERIC = "generic"


class LinkStatus(str, Enum):
    OK = "ok"
    BROKEN = "broken"
    REDIRECTED = "redirected"
    ERROR = "error"


@dataclass
class ScrapedMetadata:
    """Normalized preview metadata for a URL.

    Attributes:
        title: Page or item title
        description: Short description or summary
        image: Primary preview image (absolute URL)
        images: Deduplicated absolute image URLs in discovery order
        favicon: Absolute favicon URL
        domain: Hostname the metadata describes
        raw: Adapter-specific diagnostic payload (original OpenGraph fields, API entries, markers)
    """
    title: str | None = None
    description: str | None = None
    image: str | None = None
    images: list[str] = field(default_factory=list)
    favicon: str | None = None
    domain: str = ""
    raw: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "images": list(self.images),
            "favicon": self.favicon,
            "domain": self.domain,
            "raw": self.raw,
        }


@dataclass
class ArticleContent:
    """Readable article content extracted from a page.

    word_count and reading_time are derived from text_content; build
    instances with ``ArticleContent.from_text`` to keep them consistent.

    Attributes:
        content: Sanitized HTML fragment of the extracted body
        text_content: Whitespace-normalized plain text
        title: Article title
        byline: Author line
        site_name: Publication name
        word_count: Number of whitespace-separated words in text_content
        reading_time: Estimated minutes to read at 225 words per minute
        published_time: Raw, unparsed date string from the source markup
    """
    content: str | None = None
    text_content: str | None = None
    title: str | None = None
    byline: str | None = None
    site_name: str | None = None
    word_count: int = 0
    reading_time: int = 0
    published_time: str | None = None

    @classmethod
    def from_text(
        cls,
        content: str | None,
        text_content: str | None,
        **fields: Any,
    ) -> "ArticleContent":
        text = normalize_whitespace(text_content) if text_content else None
        words = count_words(text)
        return cls(
            content=content if words else None,
            text_content=text if words else None,
            word_count=words,
            reading_time=reading_time(words),
            **fields,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "textContent": self.text_content,
            "title": self.title,
            "byline": self.byline,
            "siteName": self.site_name,
            "wordCount": self.word_count,
            "readingTime": self.reading_time,
            "publishedTime": self.published_time,
        }


@dataclass
class LinkCheckResult:
    """Result of a link health check.

    redirect_url is only set when status is REDIRECTED and is always absolute.
    """
    status: LinkStatus
    redirect_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"linkStatus": self.status.value, "redirectUrl": self.redirect_url}


class OutcomeKind(str, Enum):
    FOUND = "found"
    DEGRADED = "degraded"
    NOT_FOUND = "not_found"


T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Adapter result that keeps "incomplete" distinct from "failed".

    FOUND carries a complete value, DEGRADED a usable but partial value plus
    a reason, NOT_FOUND no value at all. ``collapse`` flattens it to the
    nullable shape returned to callers.
    """
    kind: OutcomeKind
    value: T | None = None
    reason: str | None = None

    @classmethod
    def found(cls, value: T) -> "Outcome[T]":
        return cls(OutcomeKind.FOUND, value)

    @classmethod
    def degraded(cls, value: T, reason: str) -> "Outcome[T]":
        return cls(OutcomeKind.DEGRADED, value, reason)

    @classmethod
    def not_found(cls, reason: str) -> "Outcome[T]":
        return cls(OutcomeKind.NOT_FOUND, None, reason)

    @property
    def is_found(self) -> bool:
        return self.kind is OutcomeKind.FOUND

    @property
    def is_degraded(self) -> bool:
        return self.kind is OutcomeKind.DEGRADED

    @property
    def is_not_found(self) -> bool:
        return self.kind is OutcomeKind.NOT_FOUND

    def collapse(self, default: T) -> T:
        if self.value is None:
            return default
        return self.value


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def count_words(text: str | None) -> int:
    if not text:
        return 0
    return len([w for w in text.split() if w])


def reading_time(word_count: int) -> int:
    if word_count <= 0:
        return 0
    return math.ceil(word_count / WORDS_PER_MINUTE)
