"""
Wikipedia article extraction via the REST page-HTML endpoint.

The rendered article HTML is sanitized, stripped of navigation and
reference apparatus, then accumulated child by child until the next child
would exceed ``wikipedia_max_chars``.
"""

from __future__ import annotations

import re
from urllib.parse import quote, unquote, urlsplit

from ..context import ScrapeContext
from ..core.types import ArticleContent, Outcome, Platform
from ..fetch.dom import Dom, Node
from ..fetch.fetcher import ACCEPT_HTML
from ..fetch.preprocess import MAX_HTML_CHARS, sanitize_html
from .base import ArticleAdapter


API_URL = "https://{host}/api/rest_v1/page/html/{title}"
SITE_NAME = "Wikipedia"

STRIP_SELECTORS = (
    "script, style, noscript, svg, nav, header, footer, aside",
    ".toc, .mw-editsection, .reflist, .reference, .navbox, .metadata, .ambox, .shortdescription",
    "sup.reference",
)

_WIKI_PATH_RE = re.compile(r"/wiki/(.+)", re.IGNORECASE)


def extract_wiki_target(url: str) -> tuple[str, str] | None:
    """Return ``(host, decoded title)`` for a ``/wiki/<title>`` URL."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    match = _WIKI_PATH_RE.search(parts.path)
    if not match or not parts.netloc:
        return None
    return parts.netloc, unquote(match.group(1))


def build_limited_html(dom: Dom, root: Node, max_chars: int) -> str:
    """Serialize children of ``root`` in order, stopping before ``max_chars`` is exceeded."""
    pieces: list[str] = []
    total = 0
    for child in dom.children(root):
        html = dom.outer_html(child)
        if not html:
            continue
        if total + len(html) > max_chars:
            break
        pieces.append(html)
        total += len(html)
    return "".join(pieces)


def parse_wikipedia_html(raw_html: str, max_chars: int = 650_000, max_html_chars: int = MAX_HTML_CHARS) -> ArticleContent:
    html = sanitize_html(raw_html, max_html_chars)
    dom = Dom(html)

    title = dom.first_text("title") or dom.first_attr('meta[property="og:title"]', "content")
    published_time = dom.first_attr('meta[property="dc:modified"]', "content")

    body = dom.body
    if body is None:
        return ArticleContent(title=title, site_name=SITE_NAME, published_time=published_time)

    for selector in STRIP_SELECTORS:
        dom.remove_selector(selector, body)

    content = build_limited_html(dom, body, max_chars)
    text = Dom.text(Dom(f"<div>{content}</div>").soup)
    return ArticleContent.from_text(
        content,
        text,
        title=title,
        site_name=SITE_NAME,
        published_time=published_time,
    )


class WikipediaArticleAdapter(ArticleAdapter):
    platform = Platform.WIKIPEDIA

    async def extract(self, url: str, ctx: ScrapeContext) -> Outcome[ArticleContent]:
        target = extract_wiki_target(url)
        if target is None:
            return Outcome.not_found("not a /wiki/ page")
        host, title = target

        api_url = API_URL.format(host=host, title=quote(title, safe=""))
        result = await ctx.fetcher.get(api_url, ctx.cfg.fetch.wikipedia, accept=ACCEPT_HTML)
        result.raise_for_status()

        article = parse_wikipedia_html(
            result.text,
            max_chars=ctx.cfg.extract.wikipedia_max_chars,
            max_html_chars=ctx.cfg.extract.max_html_chars,
        )
        if not article.word_count:
            return Outcome.degraded(article, "empty article body")
        return Outcome.found(article)
