"""
Small DOM interface over BeautifulSoup.

Extraction heuristics are written against ``Dom`` rather than against the
bs4 API directly: select nodes with CSS selectors, read flattened text and
attributes, serialize, and remove subtrees.
"""

from __future__ import annotations

from typing import Iterable

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from ..core.types import normalize_whitespace


Node = Tag

# Elements that start a new line when rendered; inline tags join their text.
_BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
        "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
        "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section", "table",
        "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
    }
)
_SKIPPED_TAGS = frozenset({"script", "style", "template"})


class Dom:
    """Parsed HTML document."""

    def __init__(self, html: str):
        self.soup = BeautifulSoup(html or "", "html.parser")

    @property
    def body(self) -> Node | None:
        body = self.soup.body
        return body if isinstance(body, Tag) else None

    def select(self, selector: str, root: Node | None = None) -> list[Node]:
        scope = root if root is not None else self.soup
        return [node for node in scope.select(selector) if isinstance(node, Tag)]

    def select_one(self, selector: str, root: Node | None = None) -> Node | None:
        scope = root if root is not None else self.soup
        node = scope.select_one(selector)
        return node if isinstance(node, Tag) else None

    def descendants(self, root: Node) -> list[Node]:
        """All element descendants of ``root`` in document order."""
        return [node for node in root.find_all(True)]

    def children(self, root: Node) -> list[Node]:
        return [node for node in root.children if isinstance(node, Tag)]

    @staticmethod
    def tag_name(node: Node) -> str:
        return (node.name or "").lower()

    @staticmethod
    def text(node: Node) -> str:
        """Flattened, whitespace-normalized text of ``node``.

        Text of inline elements is joined as written, so ``<a>link</a>,``
        stays one word; block elements are separated by a space.
        """
        parts: list[str] = []
        _collect_text(node, parts)
        return normalize_whitespace("".join(parts))

    @staticmethod
    def attr(node: Node, name: str) -> str | None:
        value = node.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            value = " ".join(value)
        value = value.strip()
        return value or None

    def first_attr(self, selector: str, name: str) -> str | None:
        """Attribute ``name`` of the first node matching ``selector``."""
        node = self.select_one(selector)
        return self.attr(node, name) if node is not None else None

    def first_text(self, selector: str) -> str | None:
        node = self.select_one(selector)
        if node is None:
            return None
        return self.text(node) or None

    @staticmethod
    def inner_html(node: Node) -> str:
        return node.decode_contents()

    @staticmethod
    def outer_html(node: Node) -> str:
        return str(node)

    @staticmethod
    def remove(nodes: Iterable[Node]) -> int:
        """Detach and destroy ``nodes``; already-removed nodes are skipped."""
        removed = 0
        for node in list(nodes):
            if node.decomposed:
                continue
            node.decompose()
            removed += 1
        return removed

    def remove_selector(self, selector: str, root: Node | None = None) -> int:
        return self.remove(self.select(selector, root))


def _collect_text(node: Node, parts: list[str]) -> None:
    for child in node.children:
        if isinstance(child, Tag):
            name = (child.name or "").lower()
            if name in _SKIPPED_TAGS:
                continue
            block = name in _BLOCK_TAGS
            if block:
                parts.append(" ")
            _collect_text(child, parts)
            if block:
                parts.append(" ")
        elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
            parts.append(str(child))
