"""
Operator: a cross-hive identity profile.

Tier 1 (public) and Tier 2 (hive-scoped) are independent field groups merged
into one document. An operator with no Tier 2 data is complete.
"""

from __future__ import annotations

from typing import Literal, Optional, Tuple

from pydantic import StrictBool, StrictStr

from hivespoke.schemas.base import DocumentModel, EntryModel
from hivespoke.schemas.fields import (
    HUB_PATTERN,
    Fingerprint,
    NonEmptyText,
    NonNegativeCount,
    choice,
    ed25519_key,
    pattern_text,
    required_text,
    timestamp,
)

AVAILABILITY = ("open", "busy", "offline")
HIVE_ROLES = ("contributor", "reviewer", "maintainer")
TRUST_ZONES = ("untrusted", "trusted", "maintainer")

Handle = required_text("Handle is required")
SigningKey = ed25519_key("Must be an Ed25519 SSH key")
HiveRef = pattern_text(HUB_PATTERN, "Hive must be in org/repo format")
Availability = choice(AVAILABILITY, "Availability")
Role = choice(HIVE_ROLES, "Role")
TrustZone = choice(TRUST_ZONES, "Trust zone")
Iso8601 = timestamp("Must be valid ISO 8601")


class IdentityEntry(EntryModel):
    provider: NonEmptyText
    id: NonEmptyText
    verified: StrictBool
    verified_at: Optional[Iso8601] = None


class HiveEntry(EntryModel):
    hive: HiveRef
    role: Optional[Role] = None
    trust_zone: Optional[TrustZone] = None
    identity_provider: Optional[StrictStr] = None
    joined: Optional[Iso8601] = None
    contributions: Optional[NonNegativeCount] = None
    reviews: Optional[NonNegativeCount] = None
    swarms: Optional[NonNegativeCount] = None


class Signing(DocumentModel):
    public_key: SigningKey
    fingerprint: Optional[Fingerprint] = None


class Operator(DocumentModel):
    """Validated ``.collab/operator.yaml`` (Tier 1 + Tier 2)."""

    # Tier 1: public identity, visible to all hives
    schema_version: Literal["1.0"]
    handle: Handle
    name: Optional[StrictStr] = None
    signing: Signing
    identities: Tuple[IdentityEntry, ...] = ()
    skills: Tuple[StrictStr, ...] = ()
    availability: Availability = "open"

    # Tier 2: hive-scoped
    hives: Tuple[HiveEntry, ...] = ()
