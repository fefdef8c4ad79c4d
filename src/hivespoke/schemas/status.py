"""Status: a spoke's generated build/test/git snapshot."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import StrictBool

from hivespoke.config.defaults import LIFECYCLE_PHASES
from hivespoke.schemas.base import DocumentModel
from hivespoke.schemas.fields import (
    NonNegativeCount,
    choice,
    parse_instant,
    required_text,
    timestamp,
)

GeneratedAt = timestamp("generatedAt must be a valid ISO 8601 timestamp")
GeneratedBy = required_text("generatedBy is required")
Phase = choice(LIFECYCLE_PHASES, "Phase")
BranchName = required_text("Branch name is required")
CommitDate = timestamp("lastCommit must be a valid date")


class SuiteCounts(DocumentModel):
    passing: NonNegativeCount
    failing: NonNegativeCount


class GitSnapshot(DocumentModel):
    branch: BranchName
    last_commit: CommitDate
    dirty: StrictBool
    behind_remote: NonNegativeCount


class SpokeStatus(DocumentModel):
    """Validated ``.collab/status.yaml``."""

    schema_version: Literal["1.0"]
    generated_at: GeneratedAt
    generated_by: GeneratedBy
    phase: Phase
    tests: SuiteCounts
    git: GitSnapshot

    @property
    def generated_instant(self) -> datetime:
        # generated_at passed the parseability check during validation
        return parse_instant(self.generated_at)
