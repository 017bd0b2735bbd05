"""
HTML preprocessing applied before any parsing.

Raw pages are truncated first and only then stripped of scripts, styles,
SVG, comments and noisy attributes, so the regex passes never see more than
MAX_HTML_CHARS characters.
"""

from __future__ import annotations

import re


MAX_HTML_CHARS = 2 * 1024 * 1024

# Element bodies are matched without crossing their own closing tag.
_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_NOSCRIPT_RE = re.compile(r"<noscript\b[^<]*(?:(?!</noscript>)<[^<]*)*</noscript>", re.IGNORECASE)
_SVG_RE = re.compile(r"<svg\b[^<]*(?:(?!</svg>)<[^<]*)*</svg>", re.IGNORECASE)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_EVENT_HANDLER_RE = re.compile(r"""\s+on[a-z]+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+)""", re.IGNORECASE)
_DATA_ATTR_RE = re.compile(r"""\s+data-[a-z0-9_-]+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+)""", re.IGNORECASE)

_STRIP_PATTERNS = (
    _SCRIPT_RE,
    _STYLE_RE,
    _NOSCRIPT_RE,
    _SVG_RE,
    _COMMENT_RE,
    _EVENT_HANDLER_RE,
    _DATA_ATTR_RE,
)


def truncate_html(html: str, max_chars: int = MAX_HTML_CHARS) -> str:
    if len(html) > max_chars:
        return html[:max_chars]
    return html


def sanitize_html(html: str, max_chars: int = MAX_HTML_CHARS) -> str:
    """Bound and strip raw HTML before it is parsed.

    Args:
        html: Raw page HTML
        max_chars: Truncation limit applied before any regex runs

    Returns:
        HTML without script/style/noscript/svg elements, comments,
        inline ``on*`` handlers or ``data-*`` attributes
    """
    if not html:
        return ""
    html = truncate_html(html, max_chars)
    for pattern in _STRIP_PATTERNS:
        html = pattern.sub("", html)
    return html
