"""
Declaration schemas: Manifest, Status and Operator.

Documents are frozen pydantic models; the validators return either a typed
document or the complete list of violations.
"""

from __future__ import annotations

from .manifest import Identity, Manifest, Reflexes, Security, StatusCommands
from .operator import HiveEntry, IdentityEntry, Operator, Signing
from .status import GitSnapshot, SpokeStatus, SuiteCounts
from .validation import (
    SchemaResult,
    Violation,
    parse_document,
    validate_document,
    validate_manifest,
    validate_operator,
    validate_status,
)

__all__ = [
    "Identity",
    "Manifest",
    "Reflexes",
    "Security",
    "StatusCommands",
    "HiveEntry",
    "IdentityEntry",
    "Operator",
    "Signing",
    "GitSnapshot",
    "SpokeStatus",
    "SuiteCounts",
    "SchemaResult",
    "Violation",
    "parse_document",
    "validate_document",
    "validate_manifest",
    "validate_operator",
    "validate_status",
]
