from __future__ import annotations

from dataclasses import dataclass, field

from .config import AppConfig
from .fetch.fetcher import Fetcher


@dataclass
class ScrapeContext:
    """Configuration and HTTP client handed to every adapter call."""

    cfg: AppConfig = field(default_factory=AppConfig)
    fetcher: Fetcher | None = None

    def __post_init__(self) -> None:
        if self.fetcher is None:
            self.fetcher = Fetcher(self.cfg.fetch)


def build_context(cfg: AppConfig | None = None, fetcher: Fetcher | None = None) -> ScrapeContext:
    return ScrapeContext(cfg=cfg or AppConfig(), fetcher=fetcher)
