"""
Hub trust subsystem.

- registry: parse the allowed-signers trust anchors
- verifier: match spoke signing keys against them
"""

from __future__ import annotations

from .models import AllowedSignerEntry, KeyMatch, VerificationSummary, VerifyResult
from .registry import SignerRegistry, load_registry, parse_registry
from .verifier import SpokeVerifier, match_key, verify_manifest

__all__ = [
    "AllowedSignerEntry",
    "KeyMatch",
    "VerificationSummary",
    "VerifyResult",
    "SignerRegistry",
    "load_registry",
    "parse_registry",
    "SpokeVerifier",
    "match_key",
    "verify_manifest",
]
