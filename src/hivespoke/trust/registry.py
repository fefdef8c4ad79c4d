"""
Allowed-signers registry: the hub's trust anchors.

File format, one signer per line::

    <registry-key> <key-type> <key-data...>

Blank lines and ``#`` comments are skipped. Lines with fewer than three
fields are dropped without error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Dict, Iterator, List

from hivespoke.errors import PreconditionError

from .models import AllowedSignerEntry

logger = logging.getLogger(__name__)


class SignerRegistry(Mapping):
    """Read-only ``email -> AllowedSignerEntry`` mapping in file order."""

    def __init__(self, entries: Dict[str, AllowedSignerEntry]):
        self._entries = dict(entries)

    def __getitem__(self, email: str) -> AllowedSignerEntry:
        return self._entries[email]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SignerRegistry({list(self._entries)})"

    def ambiguous_keys(self) -> Dict[str, List[str]]:
        """Key material registered under more than one email."""
        by_key: Dict[str, List[str]] = {}
        for email, entry in self._entries.items():
            material = " ".join(entry.public_key.split()[:2])
            by_key.setdefault(material, []).append(email)
        return {key: emails for key, emails in by_key.items() if len(emails) > 1}


def parse_registry(text: str) -> SignerRegistry:
    """Parse allowed-signers text into a registry."""
    entries: Dict[str, AllowedSignerEntry] = {}
    dropped = 0

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        parts = stripped.split()
        if len(parts) < 3:
            dropped += 1
            continue

        email, key_type, *key_data = parts
        # A repeated email replaces the entry but keeps its first position
        entries[email] = AllowedSignerEntry(
            email=email,
            key_type=key_type,
            public_key=f"{key_type} {' '.join(key_data)}",
        )

    if dropped:
        logger.debug(f"Dropped {dropped} malformed allowed-signers line(s)")
    return SignerRegistry(entries)


def load_registry(path: Path) -> SignerRegistry:
    """Load the allowed-signers file; its absence is a precondition failure."""
    path = Path(path)
    if not path.is_file():
        raise PreconditionError(
            f"allowed-signers file not found at {path}. "
            "Use --allowed-signers to specify path."
        )
    registry = parse_registry(path.read_text(encoding="utf-8"))
    logger.info(f"Loaded {len(registry)} signer(s) from {path}")
    return registry
