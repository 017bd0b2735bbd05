"""Tests for HTML preprocessing and the DOM helpers."""

from __future__ import annotations

from linkcard.fetch.dom import Dom
from linkcard.fetch.preprocess import MAX_HTML_CHARS, sanitize_html


def test_strips_scripts_styles_and_noise():
    html = (
        "<html><head><style>body{color:red}</style>"
        "<script type='text/javascript'>var a = '<p>';</script></head>"
        "<body><!-- tracking --><noscript><img src='pixel.gif'></noscript>"
        '<svg viewBox="0 0 10 10"><path d="M0"/></svg>'
        '<p onclick="steal()" data-track="1" class="lead">Hello</p>'
        "<a href='/x' onmouseover='x()' data-id='7'>link</a></body></html>"
    )
    out = sanitize_html(html)
    assert "<script" not in out
    assert "<style" not in out
    assert "<noscript" not in out
    assert "<svg" not in out
    assert "tracking" not in out
    assert "onclick" not in out
    assert "onmouseover" not in out
    assert "data-track" not in out
    assert "data-id" not in out
    assert '<p class="lead">Hello</p>' in out
    assert "<a href='/x'>link</a>" in out


def test_strips_unquoted_handler_and_data_attributes():
    out = sanitize_html("<p onclick=doIt() data-x=1 class=lead>Hi</p><img src=a.png onerror=alert(1)>")
    assert out == "<p class=lead>Hi</p><img src=a.png>"


def test_truncates_before_stripping():
    padding = "a" * (MAX_HTML_CHARS - 10)
    html = padding + "<script>evil()</script>"
    out = sanitize_html(html)
    # The script's closing tag lies beyond the cut, so the fragment cannot match.
    assert len(out) == MAX_HTML_CHARS
    assert out.endswith("<script>ev")


def test_large_document_is_bounded():
    html = "<p>" + "x" * (5 * 1024 * 1024) + "</p>"
    assert len(sanitize_html(html)) <= MAX_HTML_CHARS


def test_empty_input():
    assert sanitize_html("") == ""


def test_dom_text_attr_and_remove():
    dom = Dom('<div class="a b"><p>One  two</p><p>three</p><span class="ad-box">ad</span></div>')
    div = dom.select_one("div")
    assert Dom.attr(div, "class") == "a b"
    assert Dom.text(div) == "One two three ad"
    assert dom.remove_selector('[class*="ad-"]') == 1
    assert Dom.text(div) == "One two three"
    assert len(dom.children(div)) == 2


def test_dom_remove_skips_nodes_inside_removed_parents():
    dom = Dom('<div class="nav"><ul class="menu"><li>x</li></ul></div><p>keep</p>')
    removed = dom.remove(dom.select('[class*="nav"], [class*="menu"]'))
    assert removed == 1
    assert dom.first_text("p") == "keep"


def test_dom_text_joins_inline_and_separates_blocks():
    dom = Dom(
        "<div><h2>Title</h2><p>Read <a href='/a'>the docs</a>, then <em>try</em>it.</p>"
        "<ul><li>one</li><li>two</li></ul>second<br>line<script>var x;</script><!-- note --></div>"
    )
    assert Dom.text(dom.select_one("div")) == "Title Read the docs, then tryit. one two second line"
