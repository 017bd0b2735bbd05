"""
Page fetching and HTML preparation.

This package handles bounded HTTP fetching, HTML sanitization and
the DOM interface used by the extraction heuristics.
"""

from .fetcher import ACCEPT_HTML, ACCEPT_IMAGE, ACCEPT_JSON, Fetcher, FetchResult
from .preprocess import MAX_HTML_CHARS, sanitize_html
from .dom import Dom

__all__ = [
    "ACCEPT_HTML",
    "ACCEPT_IMAGE",
    "ACCEPT_JSON",
    "Fetcher",
    "FetchResult",
    "MAX_HTML_CHARS",
    "sanitize_html",
    "Dom",
]
