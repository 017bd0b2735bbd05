"""Platform registry: which adapters handle which platform."""

from __future__ import annotations

from dataclasses import dataclass

from .article import ArticleAdapter, DiggArticleAdapter, GenericArticleAdapter, WikipediaArticleAdapter
from .config import PlatformConfig
from .core.platforms import classify_platform
from .core.types import Platform
from .metadata import (
    DiggMetadataAdapter,
    GenericMetadataAdapter,
    ImdbMetadataAdapter,
    MetadataAdapter,
    NyTimesMetadataAdapter,
    RedditMetadataAdapter,
    YouTubeMetadataAdapter,
)


@dataclass(frozen=True)
class PlatformSpec:
    """Adapters registered for a platform; None means the generic adapter is used."""

    platform: Platform
    metadata: type[MetadataAdapter] | None = None
    article: type[ArticleAdapter] | None = None


_PLATFORM_REGISTRY: dict[Platform, PlatformSpec] = {
    Platform.YOUTUBE: PlatformSpec(Platform.YOUTUBE, metadata=YouTubeMetadataAdapter),
    Platform.REDDIT: PlatformSpec(Platform.REDDIT, metadata=RedditMetadataAdapter),
    Platform.NYTIMES: PlatformSpec(Platform.NYTIMES, metadata=NyTimesMetadataAdapter),
    Platform.IMDB: PlatformSpec(Platform.IMDB, metadata=ImdbMetadataAdapter),
    Platform.WIKIPEDIA: PlatformSpec(Platform.WIKIPEDIA, article=WikipediaArticleAdapter),
    Platform.DIGG: PlatformSpec(Platform.DIGG, metadata=DiggMetadataAdapter, article=DiggArticleAdapter),
    Platform.GENERIC: PlatformSpec(Platform.GENERIC, metadata=GenericMetadataAdapter, article=GenericArticleAdapter),
}


def available_platforms() -> list[str]:
    """Return the registered platform names."""
    return sorted(platform.value for platform in _PLATFORM_REGISTRY)


def resolve_platform(url: str, switches: PlatformConfig | None = None) -> Platform:
    """Classify ``url``; disabled platforms resolve to GENERIC."""
    platform = classify_platform(url)
    switches = switches or PlatformConfig()
    if platform is not Platform.GENERIC and not switches.is_enabled(platform.value):
        return Platform.GENERIC
    return platform


def create_metadata_adapter(platform: Platform) -> MetadataAdapter:
    spec = _PLATFORM_REGISTRY.get(platform)
    builder = spec.metadata if spec and spec.metadata else GenericMetadataAdapter
    return builder()


def create_article_adapter(platform: Platform) -> ArticleAdapter:
    spec = _PLATFORM_REGISTRY.get(platform)
    builder = spec.article if spec and spec.article else GenericArticleAdapter
    return builder()
