"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: HTTP client settings, one HttpProfile per adapter
- ExtractConfig: Article extraction limits and scoring thresholds
- MetadataConfig: Preview metadata limits
- PlatformConfig: Per-platform adapter on/off switches
- LinkCheckConfig: Link health sweep pacing
- ImageConfig: Image persistence settings
- RunnerConfig: Batch processing settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

import yaml


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class HttpProfile:
    """Per-adapter HTTP settings.

    Attributes:
        timeout_seconds: Deadline for a single request (connect + read)
        user_agent: User-Agent header string
        max_redirects: Redirect hops followed manually; 0 disables following
    """

    timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    max_redirects: int = 5


@dataclass
class FetchConfig:
    """Configuration for outbound HTTP fetching.

    Attributes:
        trust_env: Whether to respect system proxy settings
        max_body_bytes: Response bodies are cut off after this many bytes
        generic: Profile for generic page scraping
        youtube: Profile for the YouTube oEmbed call
        reddit: Profile for the Reddit JSON endpoint
        nytimes: Profile for the NYTimes oEmbed endpoints
        imdb: Profile for the IMDb suggestion API
        digg: Profile for Digg pages
        wikipedia: Profile for the Wikipedia REST API
        article: Profile for generic article fetches
        link_check: Profile for HEAD link checks (redirects are never followed)
        image: Profile for image persistence downloads
    """

    trust_env: bool = True
    max_body_bytes: int = 5 * 1024 * 1024
    generic: HttpProfile = field(default_factory=lambda: HttpProfile(timeout_seconds=10.0))
    youtube: HttpProfile = field(default_factory=lambda: HttpProfile(timeout_seconds=5.0))
    reddit: HttpProfile = field(default_factory=lambda: HttpProfile(timeout_seconds=8.0))
    nytimes: HttpProfile = field(default_factory=lambda: HttpProfile(timeout_seconds=8.0))
    imdb: HttpProfile = field(default_factory=lambda: HttpProfile(timeout_seconds=8.0))
    digg: HttpProfile = field(default_factory=lambda: HttpProfile(timeout_seconds=10.0))
    wikipedia: HttpProfile = field(default_factory=lambda: HttpProfile(timeout_seconds=15.0))
    article: HttpProfile = field(default_factory=lambda: HttpProfile(timeout_seconds=15.0))
    link_check: HttpProfile = field(
        default_factory=lambda: HttpProfile(timeout_seconds=10.0, max_redirects=0)
    )
    image: HttpProfile = field(default_factory=lambda: HttpProfile(timeout_seconds=10.0))


@dataclass
class ExtractConfig:
    """Configuration for readable article extraction.

    Attributes:
        deadline_seconds: Overall deadline (network + parse) for one extraction
        max_html_chars: Raw HTML is truncated to this size before sanitizing
        wikipedia_max_chars: Cap on retained Wikipedia body HTML
        min_candidate_score: Below this, the full-body scan is used
        min_fallback_words: Minimum words for a full-body scan winner
    """

    deadline_seconds: float = 15.0
    max_html_chars: int = 2 * 1024 * 1024
    wikipedia_max_chars: int = 650_000
    min_candidate_score: int = 200
    min_fallback_words: int = 100


@dataclass
class MetadataConfig:
    """Configuration for preview metadata scraping.

    Attributes:
        max_images: Maximum number of images collected per page
        description_max_chars: Cap for descriptions built from post bodies
    """

    max_images: int = 10
    description_max_chars: int = 300


@dataclass
class PlatformConfig:
    """Per-platform adapter switches.

    A disabled platform is routed through the generic adapters. Digg is off
    by default: its pages are handled by the generic scraper.
    """

    youtube: bool = True
    reddit: bool = True
    nytimes: bool = True
    imdb: bool = True
    wikipedia: bool = True
    digg: bool = False

    def is_enabled(self, name: str) -> bool:
        return bool(getattr(self, name, False))


@dataclass
class LinkCheckConfig:
    """Configuration for link health sweeps.

    Attributes:
        delay_seconds: Fixed pause between two consecutive checks in a sweep
        recheck_after_days: Records checked more recently than this are skipped
    """

    delay_seconds: float = 0.5
    recheck_after_days: int = 7


@dataclass
class ImageConfig:
    """Configuration for image persistence.

    Attributes:
        max_bytes: Largest image that will be downloaded
        expiring_domains: Hosts known to serve signed, expiring image URLs
        expiry_params: Query parameters that mark a URL as expiring
    """

    max_bytes: int = 10 * 1024 * 1024
    expiring_domains: list[str] = field(
        default_factory=lambda: [
            "tiktokcdn.com",
            "scontent.cdninstagram.com",
            "cdn.discordapp.com",
            "pbs.twimg.com",
        ]
    )
    expiry_params: list[str] = field(default_factory=lambda: ["x-expires", "expires", "Expires"])


@dataclass
class RunnerConfig:
    """Configuration for batch runs.

    Attributes:
        concurrency: Maximum in-flight scrapes for metadata/article batches
    """

    concurrency: int = 4


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "linkcard.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
    platforms: PlatformConfig = field(default_factory=PlatformConfig)
    link_check: LinkCheckConfig = field(default_factory=LinkCheckConfig)
    image: ImageConfig = field(default_factory=ImageConfig)
    runner: RunnerConfig = field(default_factory=RunnerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_PROFILE_NAMES = (
    "generic",
    "youtube",
    "reddit",
    "nytimes",
    "imdb",
    "digg",
    "wikipedia",
    "article",
    "link_check",
    "image",
)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    _deep_update(data, raw)
    return _fromdict(data)


def _deep_update(target: dict[str, Any], updates: dict[str, Any]) -> None:
    """Recursively update known keys; unknown keys are ignored."""
    for key, value in updates.items():
        if key not in target:
            continue
        if isinstance(value, dict) and isinstance(target[key], dict):
            _deep_update(target[key], value)
        else:
            target[key] = value


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    fetch = dict(data["fetch"])
    for name in _PROFILE_NAMES:
        fetch[name] = HttpProfile(**fetch[name])
    return AppConfig(
        fetch=FetchConfig(**fetch),
        extract=ExtractConfig(**data["extract"]),
        metadata=MetadataConfig(**data["metadata"]),
        platforms=PlatformConfig(**data["platforms"]),
        link_check=LinkCheckConfig(**data["link_check"]),
        image=ImageConfig(**data["image"]),
        runner=RunnerConfig(**data["runner"]),
        logging=LoggingConfig(**data["logging"]),
    )
