"""
Record orchestration around the scraping engine.

The engine owns no storage. This module drives it against any record store
that implements ``RecordStore`` and maps results onto record fields:
1. metadata scraping sets the record status to READY, or ERROR on failure
2. article extraction only fills article fields; failures are logged and skipped
3. link checks record the status, the check time and any redirect target
4. expiring images are copied into stores that implement ``save_image``
5. sweeps re-check records whose last check is older than ``recheck_after_days``

Records are plain dicts using the camelCase field names of the store.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Protocol, runtime_checkable

from .config import AppConfig
from .core.platforms import should_extract_article
from .core.types import LinkCheckResult, LinkStatus
from .errors import LinkcardError, categorize_error
from .fetch.fetcher import Fetcher
from .images import ImageData, fetch_image, needs_persistence
from .linkcheck import check_link
from .logging_utils import get_logger, log_event
from .scraper import extract_article, scrape_metadata


Record = dict[str, Any]

DAY_MS = 24 * 60 * 60 * 1000

logger = get_logger("runner")


class RecordStatus(str, Enum):
    PENDING = "PENDING"
    READY = "READY"
    ERROR = "ERROR"


class RecordStore(Protocol):
    """Storage collaborator. ``records`` lists every record for sweeps."""

    def get(self, record_id: str) -> Record | None: ...

    def update(self, record_id: str, fields: dict[str, Any]) -> None: ...

    def records(self) -> list[Record]: ...


@runtime_checkable
class ImageStore(Protocol):
    """Optional store capability: keep a copy of an expiring image and return its lasting URL."""

    def save_image(self, record_id: str, image: ImageData) -> str | None: ...


@dataclass
class BatchStats:
    """Statistics collected during a batch run.

    Attributes:
        total: Records processed
        ready: Records whose metadata was scraped
        errors: Records marked ERROR
        articles: Records that received article content
    """
    total: int = 0
    ready: int = 0
    errors: int = 0
    articles: int = 0


def _now_ms() -> int:
    return int(time.time() * 1000)


async def scrape_record(
    store: RecordStore,
    record_id: str,
    cfg: AppConfig | None = None,
    fetcher: Fetcher | None = None,
) -> RecordStatus | None:
    """Scrape metadata for a record and store it. Returns the new status, or None if skipped."""
    record = store.get(record_id)
    if not record or not record.get("url"):
        return None
    url = record["url"]

    try:
        metadata = await scrape_metadata(url, cfg, fetcher)
    except Exception as exc:
        log_event(logger, "Metadata scrape failed", level=logging.WARNING, event="scrape_failed",
                  record_id=record_id, url=url, error=f"{type(exc).__name__}: {exc}",
                  error_category=categorize_error(exc))
        store.update(record_id, {"status": RecordStatus.ERROR.value})
        return RecordStatus.ERROR

    fields: dict[str, Any] = {"status": RecordStatus.READY.value, "domain": metadata.domain}
    for key in ("title", "description", "image", "favicon"):
        value = getattr(metadata, key)
        if value:
            fields[key] = value
    if metadata.images:
        fields["images"] = list(metadata.images)
    if metadata.raw:
        fields["metadata"] = metadata.raw
    if metadata.image:
        stored = await _persist_image(store, record_id, metadata.image, cfg or AppConfig(), fetcher)
        if stored:
            fields["image"] = stored
    store.update(record_id, fields)
    return RecordStatus.READY


async def _persist_image(
    store: RecordStore,
    record_id: str,
    image_url: str,
    cfg: AppConfig,
    fetcher: Fetcher | None,
) -> str | None:
    """Copy an expiring image into stores that support it. Returns the stored URL, or None."""
    if not isinstance(store, ImageStore) or not needs_persistence(image_url, cfg.image):
        return None
    try:
        image = await fetch_image(image_url, cfg, fetcher)
    except LinkcardError as exc:
        log_event(logger, "Image persistence failed", level=logging.WARNING, event="image_persist_failed",
                  record_id=record_id, url=image_url, error=str(exc), error_category=categorize_error(exc))
        return None
    return store.save_image(record_id, image)


async def extract_record_article(
    store: RecordStore,
    record_id: str,
    cfg: AppConfig | None = None,
    fetcher: Fetcher | None = None,
) -> bool:
    """Extract and store article content for a record. Returns True if content was stored.

    Records whose URL is not an article, or which already hold (possibly
    user-edited) article content, are left untouched.
    """
    record = store.get(record_id)
    if not record or not record.get("url"):
        return False
    url = record["url"]
    if not should_extract_article(url):
        return False
    if record.get("articleContent") or record.get("articleContentEdited"):
        return False

    try:
        article = await extract_article(url, cfg, fetcher)
    except LinkcardError as exc:
        log_event(logger, "Article extraction failed", level=logging.WARNING, event="article_failed",
                  record_id=record_id, url=url, error=str(exc), error_category=categorize_error(exc))
        return False

    if not article.content:
        return False
    store.update(record_id, {
        "articleContent": article.content,
        "wordCount": article.word_count,
        "readingTime": article.reading_time,
    })
    return True


def _link_fields(result: LinkCheckResult, checked_at: int) -> dict[str, Any]:
    return {
        "linkStatus": result.status.value,
        "lastLinkCheck": checked_at,
        "redirectUrl": result.redirect_url,
    }


async def check_record_link(
    store: RecordStore,
    record_id: str,
    cfg: AppConfig | None = None,
    fetcher: Fetcher | None = None,
    now_ms: int | None = None,
) -> LinkCheckResult | None:
    record = store.get(record_id)
    if not record or not record.get("url"):
        return None
    result = await check_link(record["url"], cfg, fetcher)
    store.update(record_id, _link_fields(result, now_ms if now_ms is not None else _now_ms()))
    return result


def select_due_records(records: Iterable[Record], recheck_after_days: int, now_ms: int) -> list[Record]:
    """URL records never checked, or last checked before the cutoff."""
    cutoff = now_ms - recheck_after_days * DAY_MS
    due = []
    for record in records:
        if record.get("type", "url") != "url" or not record.get("url") or record.get("deleted"):
            continue
        last = record.get("lastLinkCheck")
        if not last or last < cutoff:
            due.append(record)
    return due


@dataclass
class SweepStats:
    checked: int = 0
    broken: int = 0
    redirected: int = 0


async def sweep_records(
    store: RecordStore,
    cfg: AppConfig | None = None,
    fetcher: Fetcher | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    now_ms: int | None = None,
) -> SweepStats:
    """Re-check every due record, one at a time, pausing between checks."""
    cfg = cfg or AppConfig()
    fetcher = fetcher or Fetcher(cfg.fetch)
    now = now_ms if now_ms is not None else _now_ms()
    due = select_due_records(store.records(), cfg.link_check.recheck_after_days, now)
    log_event(logger, "Link sweep start", event="sweep_start", due=len(due))

    stats = SweepStats()
    for index, record in enumerate(due):
        if index:
            await sleep(cfg.link_check.delay_seconds)
        result = await check_link(record["url"], cfg, fetcher)
        store.update(record["id"], _link_fields(result, now))
        stats.checked += 1
        if result.status is LinkStatus.BROKEN:
            stats.broken += 1
        elif result.status is LinkStatus.REDIRECTED:
            stats.redirected += 1

    log_event(logger, "Link sweep complete", event="sweep_complete", checked=stats.checked,
              broken=stats.broken, redirected=stats.redirected)
    return stats


async def scrape_records(
    store: RecordStore,
    record_ids: Iterable[str],
    cfg: AppConfig | None = None,
    fetcher: Fetcher | None = None,
    with_articles: bool = True,
) -> BatchStats:
    """Scrape metadata (and optionally articles) for many records concurrently.

    At most ``runner.concurrency`` records are in flight at once.
    """
    cfg = cfg or AppConfig()
    fetcher = fetcher or Fetcher(cfg.fetch)
    semaphore = asyncio.Semaphore(max(1, cfg.runner.concurrency))
    stats = BatchStats()

    async def _process(record_id: str) -> None:
        async with semaphore:
            status = await scrape_record(store, record_id, cfg, fetcher)
            if status is None:
                return
            stats.total += 1
            if status is RecordStatus.ERROR:
                stats.errors += 1
                return
            stats.ready += 1
            if with_articles and await extract_record_article(store, record_id, cfg, fetcher):
                stats.articles += 1

    tasks = [asyncio.create_task(_process(record_id)) for record_id in record_ids]
    await asyncio.gather(*tasks)
    log_event(logger, "Batch complete", event="batch_complete", total=stats.total, ready=stats.ready,
              errors=stats.errors, articles=stats.articles)
    return stats


class JsonRecordStore:
    """RecordStore backed by a JSON file holding a list of records (or ``{"records": [...]}``).

    Every update is written back to disk immediately.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        self._wrapped = isinstance(data, dict)
        items = data.get("records", []) if isinstance(data, dict) else data
        self._records: list[Record] = [item for item in items if isinstance(item, dict)]
        for index, record in enumerate(self._records):
            record.setdefault("id", str(index))

    def get(self, record_id: str) -> Record | None:
        for record in self._records:
            if str(record.get("id")) == str(record_id):
                return record
        return None

    def update(self, record_id: str, fields: dict[str, Any]) -> None:
        record = self.get(record_id)
        if record is None:
            raise KeyError(record_id)
        record.update(fields)
        self.save()

    def records(self) -> list[Record]:
        return list(self._records)

    def save(self) -> None:
        payload: Any = {"records": self._records} if self._wrapped else self._records
        self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
