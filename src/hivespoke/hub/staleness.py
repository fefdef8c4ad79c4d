"""
Status freshness.

A status is stale once it is strictly older than the threshold (default
7 days). A spoke with no usable status is always stale.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from hivespoke.config.defaults import STALE_THRESHOLD_DAYS
from hivespoke.schemas.fields import parse_instant
from hivespoke.schemas.status import SpokeStatus

DEFAULT_STALE_THRESHOLD = timedelta(days=STALE_THRESHOLD_DAYS)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_stale(
    generated_at: Union[datetime, str],
    now: Optional[datetime] = None,
    threshold: timedelta = DEFAULT_STALE_THRESHOLD,
) -> bool:
    """True when ``now - generated_at`` exceeds ``threshold``."""
    generated = parse_instant(generated_at)
    if generated is None:
        return True
    now = parse_instant(now) if now is not None else utc_now()
    return (now - generated) > threshold


def status_is_stale(
    status: Optional[SpokeStatus],
    now: Optional[datetime] = None,
    threshold: timedelta = DEFAULT_STALE_THRESHOLD,
) -> bool:
    if status is None:
        return True
    return is_stale(status.generated_at, now, threshold)


def age_in_days(generated_at: Union[datetime, str], now: Optional[datetime] = None) -> int:
    """Whole days elapsed since ``generated_at`` (0 if unparseable)."""
    generated = parse_instant(generated_at)
    if generated is None:
        return 0
    now = parse_instant(now) if now is not None else utc_now()
    return int((now - generated) / timedelta(days=1))
