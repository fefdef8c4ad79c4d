"""
Aggregation results. Built once per pull run and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from hivespoke.schemas.manifest import Manifest
from hivespoke.schemas.status import SpokeStatus
from hivespoke.schemas.validation import Violation


class SpokeState(str, Enum):
    """Terminal state of one spoke in an aggregation run."""
    NO_DECLARATION = "no_declaration"
    UNREACHABLE = "unreachable"
    UNPARSEABLE = "unparseable"
    FRESH = "fresh"
    STALE = "stale"


@dataclass(frozen=True)
class SpokeEntry:
    spoke: str
    project: str
    maintainer: str
    phase: str
    passing: int
    failing: int
    dirty: bool
    behind_remote: int
    last_commit: str
    generated_at: str
    license: str
    reflexes: Tuple[Tuple[str, bool], ...]
    stale: bool

    @classmethod
    def from_documents(
        cls,
        spoke: str,
        manifest: Manifest,
        status: Optional[SpokeStatus],
        stale: bool,
    ) -> "SpokeEntry":
        return cls(
            spoke=spoke,
            project=manifest.project,
            maintainer=manifest.maintainer,
            phase=status.phase if status else "unknown",
            passing=status.tests.passing if status else 0,
            failing=status.tests.failing if status else 0,
            dirty=status.git.dirty if status else False,
            behind_remote=status.git.behind_remote if status else 0,
            last_commit=status.git.last_commit if status else "unknown",
            generated_at=status.generated_at if status else "never",
            license=manifest.license,
            reflexes=tuple(manifest.security.reflexes.claims()),
            stale=stale,
        )

    @property
    def has_status(self) -> bool:
        return self.generated_at != "never"

    def to_dict(self) -> dict:
        return {
            "spoke": self.spoke,
            "project": self.project,
            "maintainer": self.maintainer,
            "phase": self.phase,
            "tests": {"passing": self.passing, "failing": self.failing},
            "dirty": self.dirty,
            "behindRemote": self.behind_remote,
            "lastCommit": self.last_commit,
            "generatedAt": self.generated_at,
            "license": self.license,
            "reflexes": dict(self.reflexes),
            "stale": self.stale,
        }


@dataclass(frozen=True)
class SpokeFailure:
    project: str
    reason: str
    violations: Tuple[Violation, ...] = ()

    def to_dict(self) -> dict:
        return {
            "project": self.project,
            "reason": self.reason,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass(frozen=True)
class SpokeOutcome:
    """Result of processing one spoke, merged into the report afterwards."""
    spoke: str
    state: SpokeState
    entry: Optional[SpokeEntry] = None
    failure: Optional[SpokeFailure] = None


@dataclass
class FleetReport:
    entries: List[SpokeEntry] = field(default_factory=list)
    failures: List[SpokeFailure] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    unreachable: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: List[SpokeOutcome]) -> "FleetReport":
        report = cls()
        for outcome in sorted(outcomes, key=lambda o: o.spoke):
            if outcome.state is SpokeState.NO_DECLARATION:
                report.missing.append(outcome.spoke)
            elif outcome.state is SpokeState.UNREACHABLE:
                report.unreachable.append(outcome.spoke)
            elif outcome.state is SpokeState.UNPARSEABLE:
                report.failures.append(outcome.failure)
            else:
                report.entries.append(outcome.entry)
        return report

    @property
    def with_collab(self) -> int:
        return len(self.entries) + len(self.failures)

    @property
    def without_collab(self) -> int:
        return len(self.missing) + len(self.unreachable) + len(self.skipped)

    @property
    def stale_count(self) -> int:
        return sum(1 for e in self.entries if e.stale)

    @property
    def failing_count(self) -> int:
        return sum(1 for e in self.entries if e.failing > 0)

    def states(self) -> Dict[str, SpokeState]:
        states = {name: SpokeState.NO_DECLARATION for name in self.missing}
        states.update({name: SpokeState.UNREACHABLE for name in self.unreachable})
        states.update({f.project: SpokeState.UNPARSEABLE for f in self.failures})
        states.update(
            {e.spoke: SpokeState.STALE if e.stale else SpokeState.FRESH for e in self.entries}
        )
        return states

    def to_dict(self) -> dict:
        return {
            "spokes": [e.to_dict() for e in self.entries],
            "failures": [f.to_dict() for f in self.failures],
            "withCollab": self.with_collab,
            "withoutCollab": self.without_collab,
            "missing": list(self.missing),
            "unreachable": list(self.unreachable),
            "skipped": list(self.skipped),
            "staleCount": self.stale_count,
            "failingCount": self.failing_count,
        }
