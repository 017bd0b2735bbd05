"""Abstract base class for readable article extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..context import ScrapeContext
from ..core.types import ArticleContent, Outcome, Platform


class ArticleAdapter(ABC):
    """Extracts the readable body of pages from a single platform."""

    platform: Platform = Platform.GENERIC

    @abstractmethod
    async def extract(self, url: str, ctx: ScrapeContext) -> Outcome[ArticleContent]:
        """Extract article content from ``url``.

        Returns:
            FOUND with the extracted article, or NOT_FOUND when no content
            could be located (the caller turns this into an empty record)

        Raises:
            NetworkError: if the page cannot be fetched
        """
        raise NotImplementedError
