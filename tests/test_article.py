"""Tests for readable article extraction."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from linkcard.article.density import extract_by_density, score
from linkcard.article.digg import render_post_html
from linkcard.article.wikipedia import extract_wiki_target
from linkcard.config import AppConfig
from linkcard.core.types import ArticleContent
from linkcard.errors import FetchTimeout, NetworkError, ValidationError
from linkcard.fetch.dom import Dom
from linkcard.scraper import extract_article


def _words(prefix: str, count: int) -> str:
    return " ".join(f"{prefix}{i}" for i in range(count))


def _article_page() -> str:
    paragraphs = "".join(f"<p>{_words(f'p{n}w', 75)}</p>" for n in range(4))
    return (
        "<html><head>"
        '<meta property="og:title" content="Story Title">'
        '<meta name="author" content="Jane Doe">'
        '<meta property="og:site_name" content="Example News">'
        '<meta property="article:published_time" content="2024-03-05T10:00:00Z">'
        "</head><body>"
        '<nav class="top">Home About Contact</nav>'
        f"<article>{paragraphs}<div class=\"related-links\">Related stories here</div></article>"
        f'<div class="plain">{"filler " * 500}</div>'
        "</body></html>"
    )


def test_density_picks_article_over_longer_plain_block(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html=_article_page())

    article = asyncio.run(extract_article("https://example.com/blog/post", fetcher=make_fetcher(handler)))
    assert article.word_count == 300
    assert article.reading_time == 2
    assert article.text_content.startswith("p0w0 p0w1")
    assert "filler" not in article.text_content
    assert "Related stories" not in article.text_content
    assert article.content.count("<p>") == 4
    assert article.title == "Story Title"
    assert article.byline == "Jane Doe"
    assert article.site_name == "Example News"
    assert article.published_time == "2024-03-05T10:00:00Z"


def test_equal_scores_prefer_earlier_selector():
    body = "".join(f"<p>{_words('w', 60)}</p>" for _ in range(3))
    html = f"<html><body><main><article>{body}</article></main></body></html>"
    _, article = extract_by_density(html)
    assert article is not None
    assert "<article" not in article.content
    assert article.word_count == 180


def test_full_body_scan_when_no_candidate_qualifies():
    html = f'<html><body><div><div class="x">{_words("t", 150)}</div></div><div>short</div></body></html>'
    info, article = extract_by_density(html)
    assert article is not None
    assert article.word_count == 150
    assert article.text_content.startswith("t0 t1 t2")
    assert info.title is None


def test_score_counts_words_and_paragraphs():
    dom = Dom("<div><p>one two</p><p>three</p></div>")
    assert score(dom, dom.select_one("div")) == 3 + 2 * 50


def test_inline_markup_does_not_split_words():
    sentence = 'See <a href="/more">this link</a>, it <b>works</b>.'
    paragraphs = "".join(f"<p>{' '.join([sentence] * 20)}</p>" for _ in range(5))
    _, article = extract_by_density(f"<html><body><article>{paragraphs}</article></body></html>")
    assert article is not None
    assert article.word_count == 500
    assert article.reading_time == 3
    assert "See this link, it works. See" in article.text_content


def test_page_without_content_yields_empty_article(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html="<html><body><p>Just a few words.</p></body></html>")

    article = asyncio.run(extract_article("https://example.com/blog/short", fetcher=make_fetcher(handler)))
    assert article == ArticleContent()


def test_article_http_error_raises(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    with pytest.raises(NetworkError):
        asyncio.run(extract_article("https://example.com/blog/post", fetcher=make_fetcher(handler)))


def test_extraction_deadline(make_fetcher):
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, html=_article_page())

    cfg = AppConfig()
    cfg.extract.deadline_seconds = 0.05
    with pytest.raises(FetchTimeout):
        asyncio.run(extract_article("https://example.com/blog/slow", cfg, fetcher=make_fetcher(handler)))


def test_unsafe_url_rejected(offline_fetcher):
    with pytest.raises(ValidationError):
        asyncio.run(extract_article("http://10.0.0.1/blog/post", fetcher=offline_fetcher))


def test_wiki_target_is_decoded():
    assert extract_wiki_target("https://en.wikipedia.org/wiki/Caf%C3%A9") == ("en.wikipedia.org", "Café")
    assert extract_wiki_target("https://en.wikipedia.org/w/index.php?title=X") is None


def test_wikipedia_body_is_stripped_and_capped(make_fetcher):
    first = f'<section><p>intro<sup class="reference">[1]</sup> {"alpha " * 390}</p><span class="mw-editsection">edit</span></section>'
    second = f"<section><p>{'beta ' * 390}</p></section>"
    third = f"<section><p>{'tail ' * 390}</p></section>"
    page = (
        "<html><head><title>Python</title>"
        '<meta property="dc:modified" content="2024-05-01T00:00:00Z"></head>'
        f"<body>{first}{second}{third}</body></html>"
    )

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "en.wikipedia.org"
        assert request.url.path == "/api/rest_v1/page/html/Python"
        return httpx.Response(200, html=page)

    cfg = AppConfig()
    cfg.extract.wikipedia_max_chars = 5000
    article = asyncio.run(extract_article("https://en.wikipedia.org/wiki/Python", cfg, fetcher=make_fetcher(handler)))

    assert len(article.content) <= 5000
    assert article.content.count("<section>") == 2
    assert "[1]" not in article.text_content
    assert "mw-editsection" not in article.content
    assert "tail" not in article.text_content
    assert article.word_count == 1 + 390 + 390
    assert article.title == "Python"
    assert article.site_name == "Wikipedia"
    assert article.published_time == "2024-05-01T00:00:00Z"


def test_wikipedia_non_article_path_uses_generic(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/w/index.php"
        return httpx.Response(200, html=_article_page())

    article = asyncio.run(
        extract_article("https://en.wikipedia.org/w/index.php?title=X", fetcher=make_fetcher(handler))
    )
    assert article.word_count == 300


def test_render_post_html():
    out = render_post_html(["https://img.example.com/a.jpg?a=1&b=2"], "First line\nsecond\n\n\nNext <para>")
    assert out == (
        '<img src="https://img.example.com/a.jpg?a=1&amp;b=2" alt="" />\n'
        "<p>First line<br/>second</p>\n"
        "<p>Next &lt;para&gt;</p>"
    )
    assert render_post_html([], None) == ""


def test_digg_article_when_enabled(make_fetcher):
    data = json.dumps({"props": {"pageProps": {"post": {
        "title": "Native post",
        "body": "Para one.\n\nPara two.",
        "author": {"username": "alice"},
    }}}})
    page = f'<html><body><script id="__NEXT_DATA__" type="application/json">{data}</script></body></html>'

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html=page)

    cfg = AppConfig()
    cfg.platforms.digg = True
    article = asyncio.run(extract_article("https://digg.com/tech/abc", cfg, fetcher=make_fetcher(handler)))
    assert article.content == "<p>Para one.</p>\n<p>Para two.</p>"
    assert article.word_count == 4
    assert article.title == "Native post"
    assert article.byline == "alice"
    assert article.site_name == "Digg"


def test_digg_image_only_post_keeps_content(make_fetcher):
    data = json.dumps({"props": {"pageProps": {"post": {
        "title": "Just a picture",
        "imageUrl": "https://img.digg.com/photo.jpg",
    }}}})
    page = f'<html><body><script id="__NEXT_DATA__" type="application/json">{data}</script></body></html>'

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html=page)

    cfg = AppConfig()
    cfg.platforms.digg = True
    article = asyncio.run(extract_article("https://digg.com/pics/xyz", cfg, fetcher=make_fetcher(handler)))
    assert article.content == '<img src="https://img.digg.com/photo.jpg" alt="" />'
    assert article.text_content is None
    assert article.word_count == 0
    assert article.title == "Just a picture"
