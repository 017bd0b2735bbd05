from __future__ import annotations

import httpx
import pytest

from linkcard.config import FetchConfig
from linkcard.fetch.fetcher import Fetcher


@pytest.fixture
def make_fetcher():
    """Build a Fetcher whose requests are answered by ``handler``."""

    def _make(handler, cfg: FetchConfig | None = None) -> Fetcher:
        return Fetcher(cfg or FetchConfig(), transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def offline_fetcher(make_fetcher):
    """A Fetcher that fails the test if any request is attempted."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request to {request.url}")

    return make_fetcher(handler)
