"""
Reusable constrained field types for the declaration schemas.

Each constraint raises ``ValueError`` with the message a spoke maintainer
sees in the compliance report.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Annotated, Any, Callable, Iterable, Optional

from pydantic import AfterValidator, BeforeValidator, Field, StrictInt, StrictStr

from hivespoke.config.defaults import ED25519_PREFIX

HUB_PATTERN = re.compile(r"^[\w-]+/[\w.-]+$")
HANDLE_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")
FINGERPRINT_PATTERN = re.compile(r"^SHA256:[A-Za-z0-9+/=]+$")


def parse_instant(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware datetime, or None.

    Naive values are taken as UTC. A trailing ``Z`` is accepted.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _yaml_timestamp_to_str(value: Any) -> Any:
    # PyYAML decodes unquoted timestamps into datetime/date objects
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _non_empty(message: str) -> Callable[[str], str]:
    def check(value: str) -> str:
        if not value:
            raise ValueError(message)
        return value

    return check


def _matches(pattern: re.Pattern, message: str) -> Callable[[str], str]:
    def check(value: str) -> str:
        if not pattern.match(value):
            raise ValueError(message)
        return value

    return check


def _starts_with(prefix: str, message: str) -> Callable[[str], str]:
    def check(value: str) -> str:
        if not value.startswith(prefix):
            raise ValueError(message)
        return value

    return check


def _one_of(allowed: Iterable[str], label: str) -> Callable[[str], str]:
    allowed = tuple(allowed)

    def check(value: str) -> str:
        if value not in allowed:
            raise ValueError(f"{label} must be one of: {', '.join(allowed)}")
        return value

    return check


def _parseable_date(message: str) -> Callable[[str], str]:
    def check(value: str) -> str:
        if parse_instant(value) is None:
            raise ValueError(message)
        return value

    return check


def required_text(message: str = "Must not be empty") -> Any:
    return Annotated[StrictStr, AfterValidator(_non_empty(message))]


def pattern_text(pattern: re.Pattern, message: str) -> Any:
    return Annotated[StrictStr, AfterValidator(_matches(pattern, message))]


def choice(allowed: Iterable[str], label: str) -> Any:
    return Annotated[StrictStr, AfterValidator(_one_of(allowed, label))]


def timestamp(message: str = "Must be valid ISO 8601") -> Any:
    return Annotated[
        StrictStr,
        BeforeValidator(_yaml_timestamp_to_str),
        AfterValidator(_parseable_date(message)),
    ]


def ed25519_key(message: str) -> Any:
    return Annotated[StrictStr, AfterValidator(_starts_with(ED25519_PREFIX, message))]


Fingerprint = pattern_text(FINGERPRINT_PATTERN, "Fingerprint must be SHA256 format")
NonNegativeCount = Annotated[StrictInt, Field(ge=0)]
NonEmptyText = required_text()
