"""
Readable article extraction.

Each extractor turns a page into an ArticleContent: Wikipedia through its
REST API, everything else through the text-density scorer.
"""

from .base import ArticleAdapter
from .density import extract_by_density
from .digg import DiggArticleAdapter
from .generic import GenericArticleAdapter
from .wikipedia import WikipediaArticleAdapter

__all__ = [
    "ArticleAdapter",
    "extract_by_density",
    "DiggArticleAdapter",
    "GenericArticleAdapter",
    "WikipediaArticleAdapter",
]
