"""
linkcard - link preview metadata, readable articles and link health checks.

Given an arbitrary user-supplied URL, linkcard produces normalized preview
metadata (title, description, images, favicon, domain) and, independently,
the readable article body. A separate checker re-verifies saved links.
Every outbound request passes an SSRF guard first.

Example:
    >>> import asyncio
    >>> from linkcard import scrape_metadata
    >>> meta = asyncio.run(scrape_metadata("https://example.com/post"))
"""

__all__ = [
    "__version__",
    "AppConfig",
    "load_config",
    "ArticleContent",
    "LinkCheckResult",
    "LinkStatus",
    "Platform",
    "ScrapedMetadata",
    "Verdict",
    "validate_external_url",
    "classify_platform",
    "should_extract_article",
    "scrape_metadata",
    "extract_article",
    "check_link",
    "sweep_links",
]
__version__ = "0.1.0"

from .config import AppConfig, load_config
from .core.platforms import classify_platform, should_extract_article
from .core.safety import Verdict, validate_external_url
from .core.types import ArticleContent, LinkCheckResult, LinkStatus, Platform, ScrapedMetadata
from .linkcheck import check_link, sweep_links
from .scraper import extract_article, scrape_metadata
