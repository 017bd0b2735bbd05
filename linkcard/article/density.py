"""
Text-density content scoring.

Finds the element most likely to hold an article body:
1. page metadata (title, byline, site name, published time) is read first
2. navigation, chrome, forms and ad containers are removed
3. well-known content containers are scored as ``words + 50 * paragraphs``
4. if no container scores at least ``min_candidate_score``, every
   non-inline element with more than ``min_fallback_words`` words competes
5. share/social/related/recommend blocks are stripped from the winner
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.types import ArticleContent, count_words
from ..fetch.dom import Dom, Node


PARAGRAPH_WEIGHT = 50

NON_CONTENT_SELECTORS = (
    "script, style, noscript, iframe, svg, nav, header, footer, aside, form, button, input, select, textarea",
    '[role="navigation"], [role="banner"], [role="contentinfo"], [role="complementary"]',
    '[class*="nav"], [class*="menu"], [class*="sidebar"], [class*="footer"], [class*="header"], '
    '[class*="comment"], [class*="share"], [class*="social"], [class*="advertisement"], [class*="ad-"], '
    '[id*="nav"], [id*="menu"], [id*="sidebar"], [id*="footer"], [id*="header"], '
    '[id*="comment"], [id*="share"], [id*="social"], [id*="advertisement"], [id*="ad-"]',
)

# Priority order; on equal scores the earlier selector wins.
CONTENT_SELECTORS = (
    "article",
    '[role="main"]',
    "main",
    '[itemprop="articleBody"]',
    '[class*="article-body"]',
    '[class*="article-content"]',
    '[class*="post-content"]',
    '[class*="entry-content"]',
    '[class*="content-body"]',
    '[class*="story-body"]',
    ".post",
    ".article",
    ".content",
    "#content",
    "#main",
)

INLINE_TAGS = frozenset({"span", "a", "b", "i", "em", "strong", "small", "label"})

WINNER_CLEANUP_SELECTOR = '[class*="share"], [class*="social"], [class*="related"], [class*="recommend"]'

PUBLISHED_TIME_SELECTORS = (
    'meta[property="article:published_time"]',
    'meta[property="og:article:published_time"]',
    'meta[name="pubdate"]',
    'meta[name="publishdate"]',
    'meta[name="date"]',
    'meta[name="DC.date.issued"]',
    'meta[itemprop="datePublished"]',
    "time[datetime]",
    'time[itemprop="datePublished"]',
)


@dataclass
class PageInfo:
    title: str | None = None
    byline: str | None = None
    site_name: str | None = None
    published_time: str | None = None


def score(dom: Dom, node: Node) -> int:
    """``words + 50 * <p> descendants`` for ``node``."""
    return count_words(dom.text(node)) + PARAGRAPH_WEIGHT * len(dom.select("p", node))


def read_published_time(dom: Dom) -> str | None:
    for selector in PUBLISHED_TIME_SELECTORS:
        node = dom.select_one(selector)
        if node is None:
            continue
        value = dom.attr(node, "content") or dom.attr(node, "datetime")
        if value:
            return value
    return None


def read_page_info(dom: Dom) -> PageInfo:
    """Read title, byline, site name and published time before any cleanup."""
    title = (
        dom.first_attr('meta[property="og:title"]', "content")
        or dom.first_attr('meta[name="twitter:title"]', "content")
        or dom.first_text("title")
    )
    byline = (
        dom.first_attr('meta[name="author"]', "content")
        or dom.first_attr('meta[property="article:author"]', "content")
        or dom.first_text('[rel="author"]')
        or dom.first_text('[class*="author"]')
        or dom.first_text('[itemprop="author"]')
    )
    return PageInfo(
        title=title,
        byline=byline,
        site_name=dom.first_attr('meta[property="og:site_name"]', "content"),
        published_time=read_published_time(dom),
    )


def strip_non_content(dom: Dom) -> None:
    for selector in NON_CONTENT_SELECTORS:
        dom.remove_selector(selector)


def find_best_candidate(dom: Dom, min_score: int = 200, min_words: int = 100) -> Node | None:
    """Return the highest-scoring content element, or None."""
    best: Node | None = None
    best_score = 0

    for selector in CONTENT_SELECTORS:
        node = dom.select_one(selector)
        if node is None:
            continue
        node_score = score(dom, node)
        if node_score > best_score:
            best, best_score = node, node_score

    if best is None or best_score < min_score:
        root = dom.body or dom.soup
        for node in dom.descendants(root):
            if dom.tag_name(node) in INLINE_TAGS:
                continue
            words = count_words(dom.text(node))
            if words <= min_words:
                continue
            node_score = words + PARAGRAPH_WEIGHT * len(dom.select("p", node))
            if node_score > best_score:
                best, best_score = node, node_score

    return best


def extract_by_density(html: str, min_score: int = 200, min_words: int = 100) -> tuple[PageInfo, ArticleContent | None]:
    """Run the density heuristic over sanitized HTML.

    Args:
        html: Sanitized page HTML
        min_score: Candidate score below which the full-body scan runs
        min_words: Words an element needs to win the full-body scan

    Returns:
        Page metadata, and the article or None when no element qualified
    """
    dom = Dom(html)
    info = read_page_info(dom)
    strip_non_content(dom)

    best = find_best_candidate(dom, min_score=min_score, min_words=min_words)
    if best is None:
        return info, None

    dom.remove_selector(WINNER_CLEANUP_SELECTOR, best)
    article = ArticleContent.from_text(
        dom.inner_html(best),
        dom.text(best),
        title=info.title,
        byline=info.byline,
        site_name=info.site_name,
        published_time=info.published_time,
    )
    return info, article
