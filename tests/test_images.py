"""Tests for expiring image detection and image downloads."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from linkcard.config import AppConfig
from linkcard.errors import NetworkError, ParseError, ValidationError
from linkcard.images import detect_image_type, fetch_image, needs_persistence


PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 17


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://p16-sign-va.tiktokcdn-us.com/obj/cover.jpeg", True),
        ("https://p16-sign.tiktokcdn.com/obj/cover.jpeg", True),
        ("https://pbs.twimg.com/media/abc.jpg", True),
        ("https://cdn.discordapp.com/attachments/1/2/a.png", True),
        ("https://images.example.com/a.jpg?x-expires=1700000000&sig=abc", True),
        ("https://images.example.com/a.jpg?Expires=1700000000", True),
        ("https://images.example.com/a.jpg", False),
        ("https://happy-otter-123.convex.cloud/api/storage/abc?expires=1", False),
        ("", False),
        (None, False),
    ],
)
def test_needs_persistence(url, expected):
    assert needs_persistence(url) is expected


def test_detect_image_type():
    assert detect_image_type(PNG_BYTES) == ("image/png", "png")
    assert detect_image_type(b"\xff\xd8\xff\xe0" + b"\x00" * 16) == ("image/jpeg", "jpg")
    assert detect_image_type(b"plain bytes", "image/jpeg; charset=binary") == ("image/jpeg", "jpg")
    assert detect_image_type(b"plain bytes", "text/html") is None
    assert detect_image_type(b"plain bytes") is None


def test_fetch_image_sniffs_signature(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["accept"].startswith("image/")
        return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "application/octet-stream"})

    image = asyncio.run(fetch_image("https://cdn.example.com/a", fetcher=make_fetcher(handler)))
    assert image.mime_type == "image/png"
    assert image.extension == "png"
    assert image.content == PNG_BYTES
    assert image.url == "https://cdn.example.com/a"


def test_fetch_image_rejects_non_image(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html="<html><body>login</body></html>")

    with pytest.raises(ParseError):
        asyncio.run(fetch_image("https://cdn.example.com/a.jpg", fetcher=make_fetcher(handler)))


def test_fetch_image_rejects_oversized_body(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=PNG_BYTES + b"\x00" * 100)

    cfg = AppConfig()
    cfg.image.max_bytes = 10
    with pytest.raises(NetworkError):
        asyncio.run(fetch_image("https://cdn.example.com/big.png", cfg, fetcher=make_fetcher(handler)))


def test_fetch_image_http_error(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    with pytest.raises(NetworkError):
        asyncio.run(fetch_image("https://cdn.example.com/missing.png", fetcher=make_fetcher(handler)))


def test_fetch_image_blocks_private_hosts(offline_fetcher):
    with pytest.raises(ValidationError):
        asyncio.run(fetch_image("http://127.0.0.1/a.png", fetcher=offline_fetcher))
