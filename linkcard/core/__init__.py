"""
Core domain models and URL classification.

This package contains data types and pure URL logic that is
independent of any network access.
"""

from .types import (
    ArticleContent,
    LinkCheckResult,
    LinkStatus,
    Outcome,
    OutcomeKind,
    Platform,
    ScrapedMetadata,
)
from .safety import ReasonCode, Verdict, ensure_external_url, validate_external_url
from .platforms import classify_platform, should_extract_article

__all__ = [
    "ArticleContent",
    "LinkCheckResult",
    "LinkStatus",
    "Outcome",
    "OutcomeKind",
    "Platform",
    "ScrapedMetadata",
    "ReasonCode",
    "Verdict",
    "ensure_external_url",
    "validate_external_url",
    "classify_platform",
    "should_extract_article",
]
