from __future__ import annotations

from ..context import ScrapeContext
from ..core.types import ArticleContent, Outcome, Platform
from ..fetch.fetcher import ACCEPT_HTML
from ..fetch.preprocess import sanitize_html
from ..logging_utils import get_logger, log_event
from .base import ArticleAdapter
from .density import extract_by_density


logger = get_logger("article.generic")


class GenericArticleAdapter(ArticleAdapter):
    """Density-scoring extractor used for every site without a dedicated one."""

    platform = Platform.GENERIC

    async def extract(self, url: str, ctx: ScrapeContext) -> Outcome[ArticleContent]:
        result = await ctx.fetcher.get(url, ctx.cfg.fetch.article, accept=ACCEPT_HTML)
        result.raise_for_status()

        extract_cfg = ctx.cfg.extract
        html = sanitize_html(result.text, extract_cfg.max_html_chars)
        info, article = extract_by_density(
            html,
            min_score=extract_cfg.min_candidate_score,
            min_words=extract_cfg.min_fallback_words,
        )
        if article is None:
            log_event(logger, "No article body found", event="article_not_found", url=url, title=info.title)
            return Outcome.not_found("no content candidate")

        log_event(
            logger,
            "Article extracted",
            event="article_extracted",
            url=url,
            word_count=article.word_count,
            reading_time=article.reading_time,
        )
        return Outcome.found(article)
