"""
Shared dataclasses for the trust subsystem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class AllowedSignerEntry:
    """One trust anchor from the hub's allowed-signers file."""
    email: str
    key_type: str
    public_key: str  # "<key_type> <key data...>"


@dataclass(frozen=True)
class KeyMatch:
    matched: bool
    email: Optional[str] = None
    tier: Optional[str] = None  # "prefix" or "key-data"


@dataclass
class VerifyResult:
    project: str
    repo: Optional[str]
    handle: str
    fingerprint: Optional[str]
    in_allowed_signers: bool
    key_match: bool
    issues: List[str] = field(default_factory=list)
    matched_signer: Optional[str] = None
    manifest_valid: bool = True

    @property
    def verified(self) -> bool:
        return not self.issues

    def to_dict(self) -> dict:
        return {
            "project": self.project,
            "repo": self.repo,
            "handle": self.handle,
            "fingerprint": self.fingerprint,
            "inAllowedSigners": self.in_allowed_signers,
            "keyMatch": self.key_match,
            "matchedSigner": self.matched_signer,
            "issues": list(self.issues),
        }


@dataclass
class VerificationSummary:
    results: List[VerifyResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    unreachable: List[str] = field(default_factory=list)
    ambiguous_keys: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def verified(self) -> int:
        return sum(1 for r in self.results if r.verified)

    @property
    def unverified(self) -> int:
        return self.total - self.verified

    @property
    def invalid(self) -> int:
        return sum(1 for r in self.results if not r.manifest_valid)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "verified": self.verified,
            "unverified": self.unverified,
            "skipped": list(self.skipped),
            "missing": list(self.missing),
            "unreachable": list(self.unreachable),
            "ambiguousKeys": {k: list(v) for k, v in self.ambiguous_keys.items()},
            "results": [r.to_dict() for r in self.results],
        }
