from __future__ import annotations

import html as html_lib
import re

from ..context import ScrapeContext
from ..core.types import ArticleContent, Outcome, Platform
from ..fetch.fetcher import ACCEPT_HTML
from ..metadata.digg import parse_post
from ..metadata.meta_tags import extract_og
from .base import ArticleAdapter


_PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")


def render_post_html(images: list[str], body: str | None) -> str:
    """Images first, then the body split into paragraphs on blank lines."""
    parts = [f'<img src="{html_lib.escape(url)}" alt="" />' for url in images]
    for paragraph in _PARAGRAPH_SPLIT_RE.split(body or ""):
        if paragraph.strip():
            parts.append(f"<p>{html_lib.escape(paragraph).replace(chr(10), '<br/>')}</p>")
    return "\n".join(parts)


class DiggArticleAdapter(ArticleAdapter):
    """Reads Digg post bodies from ``__NEXT_DATA__``. Disabled unless ``platforms.digg`` is set."""

    platform = Platform.DIGG

    async def extract(self, url: str, ctx: ScrapeContext) -> Outcome[ArticleContent]:
        result = await ctx.fetcher.get(url, ctx.cfg.fetch.digg, accept=ACCEPT_HTML)
        result.raise_for_status()
        page = result.text

        post = parse_post(page)
        if not post.body and not post.images:
            return Outcome.not_found("no post in __NEXT_DATA__")

        content = render_post_html(post.images, post.body)
        article = ArticleContent.from_text(
            content,
            post.body,
            title=post.title or extract_og(page, "title"),
            byline=post.author,
            site_name="Digg",
        )
        # Image-only posts have no words but still render.
        if article.content is None:
            article.content = content
        return Outcome.found(article)
