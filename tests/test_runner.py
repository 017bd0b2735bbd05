"""Tests for record orchestration: scraping, article storage and link sweeps."""

from __future__ import annotations

import asyncio
import json

import httpx

from linkcard.config import AppConfig
from linkcard.runner import (
    DAY_MS,
    JsonRecordStore,
    RecordStatus,
    check_record_link,
    extract_record_article,
    scrape_record,
    scrape_records,
    select_due_records,
    sweep_records,
)


NOW = 1_700_000_000_000
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 17


class MemoryStore:
    def __init__(self, records):
        self._records = {record["id"]: dict(record) for record in records}
        self.updates = []

    def get(self, record_id):
        return self._records.get(record_id)

    def update(self, record_id, fields):
        self.updates.append((record_id, fields))
        self._records[record_id].update(fields)

    def records(self):
        return list(self._records.values())


def _article_html(title: str = "Story") -> str:
    paragraphs = "".join(f"<p>{' '.join(f'w{n}x{i}' for i in range(75))}</p>" for n in range(4))
    return (
        f'<html><head><meta property="og:title" content="{title}"></head>'
        f'<body><article>{paragraphs}</article><img src="/lead.jpg"></body></html>'
    )


def test_scrape_record_marks_ready(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html=_article_html())

    store = MemoryStore([{"id": "r1", "url": "https://example.com/blog/story", "status": "PENDING"}])
    status = asyncio.run(scrape_record(store, "r1", fetcher=make_fetcher(handler)))

    assert status is RecordStatus.READY
    record = store.get("r1")
    assert record["status"] == "READY"
    assert record["title"] == "Story"
    assert record["image"] == "https://example.com/lead.jpg"
    assert record["domain"] == "example.com"
    assert record["metadata"]["ogTitle"] == "Story"
    assert "description" not in record


def _expiring_image_handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "pbs.twimg.com":
        return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})
    return httpx.Response(
        200,
        html='<html><head><meta property="og:title" content="Pic">'
        '<meta property="og:image" content="https://pbs.twimg.com/media/a.png"></head></html>',
    )


class ImageMemoryStore(MemoryStore):
    def __init__(self, records):
        super().__init__(records)
        self.images = []

    def save_image(self, record_id, image):
        self.images.append((record_id, image))
        return f"https://files.example.net/{record_id}.{image.extension}"


def test_scrape_record_persists_expiring_image(make_fetcher):
    store = ImageMemoryStore([{"id": "r1", "url": "https://example.com/pic"}])
    status = asyncio.run(scrape_record(store, "r1", fetcher=make_fetcher(_expiring_image_handler)))

    assert status is RecordStatus.READY
    assert store.get("r1")["image"] == "https://files.example.net/r1.png"
    [(record_id, image)] = store.images
    assert record_id == "r1"
    assert image.url == "https://pbs.twimg.com/media/a.png"
    assert image.mime_type == "image/png"
    assert image.content == PNG_BYTES


def test_scrape_record_keeps_image_url_without_image_storage(make_fetcher):
    store = MemoryStore([{"id": "r1", "url": "https://example.com/pic"}])
    asyncio.run(scrape_record(store, "r1", fetcher=make_fetcher(_expiring_image_handler)))
    assert store.get("r1")["image"] == "https://pbs.twimg.com/media/a.png"


def test_scrape_record_keeps_image_url_when_download_fails(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "pbs.twimg.com":
            return httpx.Response(403)
        return _expiring_image_handler(request)

    store = ImageMemoryStore([{"id": "r1", "url": "https://example.com/pic"}])
    assert asyncio.run(scrape_record(store, "r1", fetcher=make_fetcher(handler))) is RecordStatus.READY
    assert store.get("r1")["image"] == "https://pbs.twimg.com/media/a.png"
    assert store.images == []


def test_scrape_record_marks_error(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    store = MemoryStore([{"id": "r1", "url": "https://example.com/blog/story", "status": "PENDING"}])
    assert asyncio.run(scrape_record(store, "r1", fetcher=make_fetcher(handler))) is RecordStatus.ERROR
    assert store.updates == [("r1", {"status": "ERROR"})]


def test_scrape_record_unsafe_url_marks_error(offline_fetcher):
    store = MemoryStore([{"id": "r1", "url": "http://localhost/admin"}])
    assert asyncio.run(scrape_record(store, "r1", fetcher=offline_fetcher)) is RecordStatus.ERROR


def test_scrape_record_skips_missing(offline_fetcher):
    store = MemoryStore([{"id": "note", "type": "note"}])
    assert asyncio.run(scrape_record(store, "missing", fetcher=offline_fetcher)) is None
    assert asyncio.run(scrape_record(store, "note", fetcher=offline_fetcher)) is None
    assert store.updates == []


def test_extract_record_article_stores_content(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html=_article_html())

    store = MemoryStore([{"id": "r1", "url": "https://example.com/blog/story"}])
    assert asyncio.run(extract_record_article(store, "r1", fetcher=make_fetcher(handler)))
    record = store.get("r1")
    assert record["wordCount"] == 300
    assert record["readingTime"] == 2
    assert record["articleContent"].count("<p>") == 4


def test_extract_record_article_skip_rules(offline_fetcher):
    store = MemoryStore(
        [
            {"id": "social", "url": "https://twitter.com/user/status/1"},
            {"id": "edited", "url": "https://example.com/blog/a", "articleContentEdited": "<p>mine</p>"},
            {"id": "existing", "url": "https://example.com/blog/b", "articleContent": "<p>old</p>"},
        ]
    )
    for record_id in ("social", "edited", "existing"):
        assert not asyncio.run(extract_record_article(store, record_id, fetcher=offline_fetcher))
    assert store.updates == []


def test_extract_record_article_failure_is_skipped(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused")

    store = MemoryStore([{"id": "r1", "url": "https://example.com/blog/story"}])
    assert not asyncio.run(extract_record_article(store, "r1", fetcher=make_fetcher(handler)))
    assert store.updates == []


def test_check_record_link(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(301, headers={"location": "https://example.com/new"})

    store = MemoryStore([{"id": "r1", "url": "https://example.com/old"}])
    result = asyncio.run(check_record_link(store, "r1", fetcher=make_fetcher(handler), now_ms=NOW))
    assert result.redirect_url == "https://example.com/new"
    assert store.get("r1")["linkStatus"] == "redirected"
    assert store.get("r1")["lastLinkCheck"] == NOW
    assert store.get("r1")["redirectUrl"] == "https://example.com/new"


def test_select_due_records():
    records = [
        {"id": "never", "url": "https://example.com/a"},
        {"id": "stale", "url": "https://example.com/b", "lastLinkCheck": NOW - 8 * DAY_MS},
        {"id": "fresh", "url": "https://example.com/c", "lastLinkCheck": NOW - DAY_MS},
        {"id": "note", "type": "note", "url": "https://example.com/d"},
        {"id": "deleted", "url": "https://example.com/e", "deleted": True},
        {"id": "nourl"},
    ]
    due = select_due_records(records, 7, NOW)
    assert [record["id"] for record in due] == ["never", "stale"]


def test_sweep_records_updates_due_records(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404 if request.url.path == "/b" else 200)

    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    store = MemoryStore(
        [
            {"id": "never", "url": "https://example.com/a"},
            {"id": "stale", "url": "https://example.com/b", "lastLinkCheck": NOW - 8 * DAY_MS},
            {"id": "fresh", "url": "https://example.com/c", "lastLinkCheck": NOW - DAY_MS},
        ]
    )
    stats = asyncio.run(
        sweep_records(store, AppConfig(), fetcher=make_fetcher(handler), sleep=fake_sleep, now_ms=NOW)
    )

    assert stats.checked == 2
    assert stats.broken == 1
    assert delays == [0.5]
    assert store.get("never")["linkStatus"] == "ok"
    assert store.get("stale")["linkStatus"] == "broken"
    assert store.get("stale")["lastLinkCheck"] == NOW
    assert "linkStatus" not in store.get("fresh")


def test_scrape_records_limits_concurrency(tmp_path, make_fetcher):
    path = tmp_path / "records.json"
    records = [{"url": f"https://example.com/blog/post-{i}", "status": "PENDING"} for i in range(5)]
    path.write_text(json.dumps({"records": records}), encoding="utf-8")

    in_flight = 0
    peak = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return httpx.Response(200, html=_article_html(request.url.path))

    cfg = AppConfig()
    cfg.runner.concurrency = 2
    store = JsonRecordStore(path)
    stats = asyncio.run(scrape_records(store, [str(i) for i in range(5)], cfg, fetcher=make_fetcher(handler)))

    assert stats.total == 5
    assert stats.ready == 5
    assert stats.errors == 0
    assert stats.articles == 5
    assert peak <= 2

    saved = json.loads(path.read_text(encoding="utf-8"))["records"]
    assert [record["id"] for record in saved] == ["0", "1", "2", "3", "4"]
    assert all(record["status"] == "READY" for record in saved)
    assert saved[3]["title"] == "/blog/post-3"
    assert saved[3]["wordCount"] == 300


def test_json_record_store_accepts_plain_list(tmp_path):
    path = tmp_path / "records.json"
    path.write_text(json.dumps([{"id": "a", "url": "https://example.com/"}, "junk"]), encoding="utf-8")
    store = JsonRecordStore(path)
    store.update("a", {"linkStatus": "ok"})
    assert json.loads(path.read_text(encoding="utf-8")) == [
        {"id": "a", "url": "https://example.com/", "linkStatus": "ok"}
    ]
