"""
Manifest: a spoke's identity, license and security self-declaration.

Reflex flags are self-attested (Layer 3: Attested) and never independently
verified; they default to false.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, StrictBool

from hivespoke.config.defaults import ACCEPTED_LICENSES
from hivespoke.schemas.base import DocumentModel
from hivespoke.schemas.fields import (
    HANDLE_PATTERN,
    HUB_PATTERN,
    Fingerprint,
    choice,
    ed25519_key,
    pattern_text,
    required_text,
)

ProjectName = required_text("Project name is required")
ProjectId = required_text("Project identifier is required")
HubRef = pattern_text(HUB_PATTERN, "Hub must be in org/repo format")
MaintainerHandle = pattern_text(HANDLE_PATTERN, "Maintainer must be a valid GitHub handle")
License = choice(ACCEPTED_LICENSES, "License")
IdentityHandle = required_text("Identity handle is required")
SigningKey = ed25519_key("Public key must be an Ed25519 SSH key")
Command = required_text("Command must not be empty")


class Identity(DocumentModel):
    handle: IdentityHandle
    public_key: SigningKey
    fingerprint: Optional[Fingerprint] = None


class Reflexes(DocumentModel):
    signing: StrictBool = False
    secret_scanning: StrictBool = False
    sandbox_enforcer: StrictBool = False
    content_filter: StrictBool = False

    def claims(self):
        """(published name, active) pairs in declaration order."""
        return [
            ("signing", self.signing),
            ("secretScanning", self.secret_scanning),
            ("sandboxEnforcer", self.sandbox_enforcer),
            ("contentFilter", self.content_filter),
        ]


class Security(DocumentModel):
    reflexes: Reflexes = Field(default_factory=Reflexes)


class StatusCommands(DocumentModel):
    test: Optional[Command] = None
    health_check: Optional[Command] = None


class Manifest(DocumentModel):
    """Validated ``.collab/manifest.yaml``."""

    schema_version: Literal["1.0"]
    name: ProjectName
    hub: HubRef
    project: ProjectId
    maintainer: MaintainerHandle
    license: License
    identity: Identity
    security: Security = Field(default_factory=Security)
    status: Optional[StatusCommands] = None
