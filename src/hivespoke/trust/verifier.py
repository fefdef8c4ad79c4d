"""
SpokeVerifier - match spoke signing keys against the allowed-signers registry.

Only public key material is compared, textually. No signature over any
content is checked here.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from hivespoke.config.defaults import DEFAULT_CONCURRENCY, FETCH_TOTAL_TIMEOUT_SECONDS
from hivespoke.documents import MANIFEST_PATH, decode_yaml
from hivespoke.errors import DocumentUnparseableError
from hivespoke.hub.sources import DocumentNotFound, DocumentSource, RetrievalError, SpokeRef
from hivespoke.schemas.manifest import Manifest
from hivespoke.schemas.validation import parse_document

from .constants import (
    ISSUE_INVALID_MANIFEST,
    ISSUE_NO_FINGERPRINT,
    ISSUE_NOT_REGISTERED,
    MATCH_TIER_KEY_DATA,
    MATCH_TIER_PREFIX,
    UNKNOWN_HANDLE,
)
from .models import KeyMatch, VerificationSummary, VerifyResult
from .registry import SignerRegistry

logger = logging.getLogger(__name__)


def _key_tokens(key: str) -> Optional[Tuple[str, str]]:
    parts = key.split()
    if len(parts) < 2:
        return None
    return parts[0], parts[1]


def match_key(spoke_key: str, registry: SignerRegistry) -> KeyMatch:
    """
    Find the first registry entry matching ``spoke_key``.

    An entry matches when the spoke key starts with the entry's full key
    string, or when key type and key data (first two tokens) are identical.
    """
    spoke_tokens = _key_tokens(spoke_key)

    for email, entry in registry.items():
        if spoke_key.startswith(entry.public_key):
            return KeyMatch(matched=True, email=email, tier=MATCH_TIER_PREFIX)
        if spoke_tokens is not None and spoke_tokens == _key_tokens(entry.public_key):
            return KeyMatch(matched=True, email=email, tier=MATCH_TIER_KEY_DATA)

    return KeyMatch(matched=False)


def verify_manifest(
    manifest: Manifest,
    registry: SignerRegistry,
    project: str = "",
    repo: Optional[str] = None,
) -> VerifyResult:
    """Check one spoke's declared identity against the registry."""
    match = match_key(manifest.identity.public_key, registry)
    fingerprint = manifest.identity.fingerprint

    issues: List[str] = []
    if not match.matched:
        issues.append(ISSUE_NOT_REGISTERED)
    if not fingerprint:
        issues.append(ISSUE_NO_FINGERPRINT)

    return VerifyResult(
        project=project or manifest.project,
        repo=repo,
        handle=manifest.identity.handle,
        fingerprint=fingerprint,
        in_allowed_signers=match.matched,
        key_match=match.matched,
        issues=issues,
        matched_signer=match.email,
    )


def _invalid_result(spoke: SpokeRef, details: Sequence[str]) -> VerifyResult:
    return VerifyResult(
        project=spoke.name,
        repo=spoke.repo,
        handle=UNKNOWN_HANDLE,
        fingerprint=None,
        in_allowed_signers=False,
        key_match=False,
        issues=[ISSUE_INVALID_MANIFEST, *details],
        manifest_valid=False,
    )


class SpokeVerifier:
    """
    Verify many spokes' identity claims.

    Each spoke is fetched, validated and matched on its own; a failure in one
    never affects another.
    """

    def __init__(
        self,
        source: DocumentSource,
        registry: SignerRegistry,
        concurrency: int = DEFAULT_CONCURRENCY,
        fetch_timeout: float = FETCH_TOTAL_TIMEOUT_SECONDS,
    ):
        self.source = source
        self.registry = registry
        self.concurrency = concurrency
        self.fetch_timeout = fetch_timeout

    async def verify(self, spoke: SpokeRef) -> VerifyResult:
        """
        Verify a single spoke.

        Raises:
            DocumentNotFound: The spoke publishes no manifest.
            RetrievalError: The spoke could not be reached.
        """
        try:
            text = await asyncio.wait_for(
                self.source.fetch(spoke, MANIFEST_PATH), timeout=self.fetch_timeout
            )
        except asyncio.TimeoutError:
            raise RetrievalError(spoke.name, f"timed out after {self.fetch_timeout}s")
        except DocumentUnparseableError as e:
            return _invalid_result(spoke, [e.message])

        try:
            manifest = parse_document(Manifest, decode_yaml(text, MANIFEST_PATH))
        except DocumentUnparseableError as e:
            details = [str(v) for v in e.violations] or [e.message]
            return _invalid_result(spoke, details)

        return verify_manifest(manifest, self.registry, project=spoke.name, repo=spoke.repo)

    async def verify_batch(self, spokes: Sequence[SpokeRef]) -> VerificationSummary:
        """Verify spokes with bounded parallelism; results sorted by project."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(spoke: SpokeRef) -> VerifyResult:
            async with semaphore:
                return await self.verify(spoke)

        outcomes = await asyncio.gather(
            *(bounded(s) for s in spokes), return_exceptions=True
        )

        summary = VerificationSummary(ambiguous_keys=self.registry.ambiguous_keys())
        for spoke, outcome in zip(spokes, outcomes):
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome
            elif isinstance(outcome, DocumentNotFound):
                logger.info(f"{spoke.name}: no manifest published")
                summary.missing.append(spoke.name)
            elif isinstance(outcome, RetrievalError):
                logger.warning(f"{spoke.name}: unreachable ({outcome.message})")
                summary.unreachable.append(spoke.name)
            elif isinstance(outcome, Exception):
                logger.error(f"Verification error for {spoke.name}: {outcome}")
                summary.results.append(
                    VerifyResult(
                        project=spoke.name,
                        repo=spoke.repo,
                        handle=UNKNOWN_HANDLE,
                        fingerprint=None,
                        in_allowed_signers=False,
                        key_match=False,
                        issues=[f"verification error: {outcome}"],
                        manifest_valid=False,
                    )
                )
            else:
                summary.results.append(outcome)

        summary.results.sort(key=lambda r: r.project)
        summary.missing.sort()
        summary.unreachable.sort()
        return summary
