"""
Cross-file consistency between a spoke's manifest and operator profile.

The handle is the join key between the two documents and the public key is
the identity claim, so disagreement on either is always an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from hivespoke.schemas.manifest import Manifest
from hivespoke.schemas.operator import Operator


@dataclass(frozen=True)
class ConsistencyIssue:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "message": self.message,
            "severity": "error",
        }


def check_consistency(
    manifest: Optional[Manifest], operator: Optional[Operator]
) -> List[ConsistencyIssue]:
    """Compare identity fields; skipped when either document is absent."""
    if manifest is None or operator is None:
        return []

    issues: List[ConsistencyIssue] = []

    if manifest.identity.handle != operator.handle:
        issues.append(
            ConsistencyIssue(
                field="handle",
                message=(
                    f'Handle mismatch: manifest "{manifest.identity.handle}" '
                    f'vs operator "{operator.handle}"'
                ),
            )
        )

    if manifest.identity.public_key != operator.signing.public_key:
        issues.append(
            ConsistencyIssue(
                field="publicKey",
                message="Public key mismatch between manifest.yaml and operator.yaml",
            )
        )

    return issues
