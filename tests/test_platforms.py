"""Tests for platform classification, the article decision and the adapter registry."""

from __future__ import annotations

import pytest

from linkcard.article import GenericArticleAdapter, WikipediaArticleAdapter
from linkcard.config import PlatformConfig
from linkcard.core.platforms import classify_platform, should_extract_article
from linkcard.core.types import Platform
from linkcard.metadata import DiggMetadataAdapter, GenericMetadataAdapter, YouTubeMetadataAdapter
from linkcard.registry import (
    available_platforms,
    create_article_adapter,
    create_metadata_adapter,
    resolve_platform,
)


@pytest.mark.parametrize(
    "url, platform",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", Platform.YOUTUBE),
        ("https://m.youtube.com/shorts/abc", Platform.YOUTUBE),
        ("https://youtu.be/dQw4w9WgXcQ", Platform.YOUTUBE),
        ("https://old.reddit.com/r/python/comments/abc123/title/", Platform.REDDIT),
        ("https://redd.it/abc123", Platform.REDDIT),
        ("https://www.nytimes.com/2024/01/01/world/story.html", Platform.NYTIMES),
        ("https://www.imdb.com/title/tt0111161/", Platform.IMDB),
        ("https://en.wikipedia.org/wiki/Python", Platform.WIKIPEDIA),
        ("https://digg.com/tech/abc", Platform.DIGG),
        ("https://example.com/post", Platform.GENERIC),
        ("https://notyoutube.com/watch?v=x", Platform.GENERIC),
        ("https://wikipedia.org.evil.com/wiki/X", Platform.GENERIC),
        ("not a url", Platform.GENERIC),
    ],
)
def test_classify_platform(url, platform):
    assert classify_platform(url) is platform


@pytest.mark.parametrize(
    "url",
    [
        "https://twitter.com/user/status/1",
        "https://www.instagram.com/p/abc/",
        "https://docs.google.com/document/d/1",
        "https://www.youtube.com/watch?v=x",
        "https://www.imdb.com/title/tt0111161/",
        "https://example.com/photo.JPG",
        "https://example.com/report.pdf",
        "https://example.com/api/v1/items",
        "https://example.com/blog/feed",
        "https://example.com/checkout/step-1",
        "https://example.com/login",
        "https://www.amazon.com/dp/B000123",
    ],
)
def test_non_articles_are_skipped(url):
    assert not should_extract_article(url)


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/blog/2024/my-post",
        "https://en.wikipedia.org/wiki/Python",
        "https://www.nytimes.com/2024/01/01/world/story.html",
    ],
)
def test_articles_are_extracted(url):
    assert should_extract_article(url)


def test_disabled_platform_resolves_to_generic():
    url = "https://digg.com/tech/abc"
    assert resolve_platform(url) is Platform.GENERIC
    assert resolve_platform(url, PlatformConfig(digg=True)) is Platform.DIGG
    assert resolve_platform("https://youtu.be/x", PlatformConfig(youtube=False)) is Platform.GENERIC


def test_registry_builds_adapters():
    assert "generic" in available_platforms()
    assert isinstance(create_metadata_adapter(Platform.YOUTUBE), YouTubeMetadataAdapter)
    assert isinstance(create_metadata_adapter(Platform.DIGG), DiggMetadataAdapter)
    assert isinstance(create_metadata_adapter(Platform.WIKIPEDIA), GenericMetadataAdapter)
    assert isinstance(create_article_adapter(Platform.WIKIPEDIA), WikipediaArticleAdapter)
    assert isinstance(create_article_adapter(Platform.REDDIT), GenericArticleAdapter)
