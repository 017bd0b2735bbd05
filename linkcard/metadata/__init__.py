"""
Preview metadata adapters.

One adapter per supported platform plus the generic OpenGraph scraper.
Routing between them lives in ``linkcard.registry``.
"""

from .base import MetadataAdapter
from .digg import DiggMetadataAdapter
from .generic import GenericMetadataAdapter, parse_page_metadata
from .imdb import ImdbMetadataAdapter
from .nytimes import NyTimesMetadataAdapter
from .reddit import RedditMetadataAdapter
from .youtube import YouTubeMetadataAdapter

__all__ = [
    "MetadataAdapter",
    "DiggMetadataAdapter",
    "GenericMetadataAdapter",
    "parse_page_metadata",
    "ImdbMetadataAdapter",
    "NyTimesMetadataAdapter",
    "RedditMetadataAdapter",
    "YouTubeMetadataAdapter",
]
