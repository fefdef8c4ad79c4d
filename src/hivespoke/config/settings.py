"""Runtime settings for hub operations.

Values come from the defaults module, then an optional ``hub:`` section in
``.hive/config.yaml``, then environment variables (highest precedence).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from hivespoke.config.defaults import (
    DEFAULT_CONCURRENCY,
    FETCH_CONNECT_TIMEOUT_SECONDS,
    FETCH_READ_TIMEOUT_SECONDS,
    FETCH_TOTAL_TIMEOUT_SECONDS,
    GITHUB_API_URL,
    HUB_CONFIG_PATH,
    MAX_CONCURRENCY,
    MIN_CONCURRENCY,
    STALE_THRESHOLD_DAYS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HubSettings:
    """Settings for aggregation and remote retrieval."""

    stale_days: float = STALE_THRESHOLD_DAYS
    concurrency: int = DEFAULT_CONCURRENCY

    # Timeouts in seconds
    connect_timeout: float = FETCH_CONNECT_TIMEOUT_SECONDS
    read_timeout: float = FETCH_READ_TIMEOUT_SECONDS
    fetch_timeout: float = FETCH_TOTAL_TIMEOUT_SECONDS

    github_api_url: str = GITHUB_API_URL
    github_token: Optional[str] = None

    def __post_init__(self):
        if self.stale_days <= 0:
            raise ValueError(f"stale_days must be positive, got {self.stale_days}")
        if not MIN_CONCURRENCY <= self.concurrency <= MAX_CONCURRENCY:
            raise ValueError(
                f"concurrency must be between {MIN_CONCURRENCY} and "
                f"{MAX_CONCURRENCY}, got {self.concurrency}"
            )

    @property
    def stale_threshold(self) -> timedelta:
        return timedelta(days=self.stale_days)

    @classmethod
    def from_env(cls, base: Optional["HubSettings"] = None) -> "HubSettings":
        """Create settings from environment variables, falling back to ``base``."""
        base = base or cls()
        return cls(
            stale_days=float(os.environ.get("HIVE_STALE_DAYS", base.stale_days)),
            concurrency=int(os.environ.get("HIVE_CONCURRENCY", base.concurrency)),
            connect_timeout=float(
                os.environ.get("HIVE_CONNECT_TIMEOUT", base.connect_timeout)
            ),
            read_timeout=float(os.environ.get("HIVE_READ_TIMEOUT", base.read_timeout)),
            fetch_timeout=float(
                os.environ.get("HIVE_FETCH_TIMEOUT", base.fetch_timeout)
            ),
            github_api_url=os.environ.get("GITHUB_API_URL", base.github_api_url),
            github_token=os.environ.get("GITHUB_TOKEN") or base.github_token,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HubSettings":
        """Create settings from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown hub settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def with_overrides(self, **overrides: Any) -> "HubSettings":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_settings(root: Optional[Path] = None) -> HubSettings:
    """Load settings for a hub checkout rooted at ``root``."""
    root = root or Path.cwd()
    base = HubSettings()

    config_path = root / HUB_CONFIG_PATH
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if isinstance(data, dict) and isinstance(data.get("hub"), dict):
            base = HubSettings.from_dict(data["hub"])
            logger.debug(f"Loaded hub settings from {config_path}")

    return HubSettings.from_env(base)


# Global settings instance
_settings: Optional[HubSettings] = None


def get_settings() -> HubSettings:
    """Get global settings."""
    global _settings
    if _settings is None:
        _settings = HubSettings.from_env()
    return _settings


def set_settings(settings: HubSettings) -> None:
    """Set global settings."""
    global _settings
    _settings = settings
