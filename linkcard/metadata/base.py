"""
Abstract base class for metadata adapters.

New platforms should inherit from MetadataAdapter, implement ``scrape``
and be added to the registry table in ``linkcard.registry``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..context import ScrapeContext
from ..core.types import Outcome, Platform, ScrapedMetadata


class MetadataAdapter(ABC):
    """Produces preview metadata for URLs of a single platform."""

    platform: Platform = Platform.GENERIC

    @abstractmethod
    async def scrape(self, url: str, ctx: ScrapeContext) -> Outcome[ScrapedMetadata]:
        """Scrape preview metadata for ``url``.

        Returns:
            FOUND with complete metadata, DEGRADED with partial metadata and a
            reason, or NOT_FOUND when this adapter cannot handle the URL (the
            caller then falls back to the generic adapter)

        Raises:
            NetworkError: on a hard fetch failure with no fallback
            MetadataNotFound: when the platform has no entry for the URL
        """
        raise NotImplementedError
