"""
Issue texts reported by trust verification.
"""

from __future__ import annotations

ISSUE_NOT_REGISTERED = "public key not in allowed-signers — operator not registered on hub"
ISSUE_NO_FINGERPRINT = "no fingerprint — cannot verify key binding"
ISSUE_INVALID_MANIFEST = "invalid manifest.yaml"

MATCH_TIER_PREFIX = "prefix"
MATCH_TIER_KEY_DATA = "key-data"
UNKNOWN_HANDLE = "unknown"
