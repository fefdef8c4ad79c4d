"""
Spoke compliance validation.

Runs every check over a spoke's ``.collab/`` directory and returns a
structured report: schema validity of each document (Layer 4: Structural),
the git signing setup (Layer 1: Provable), the claimed security reflexes
(Layer 3: Attested) and cross-file consistency. Nothing is printed here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from hivespoke.config.defaults import (
    MANIFEST_FILENAME,
    OPERATOR_FILENAME,
    PLACEHOLDER_MARKER,
    STATUS_FILENAME,
)
from hivespoke.consistency import check_consistency
from hivespoke.documents import load_yaml
from hivespoke.errors import DocumentUnparseableError
from hivespoke.git import SigningConfig
from hivespoke.hub.staleness import DEFAULT_STALE_THRESHOLD, age_in_days, is_stale, utc_now
from hivespoke.schemas.manifest import Manifest
from hivespoke.schemas.operator import Operator
from hivespoke.schemas.status import SpokeStatus
from hivespoke.schemas.validation import validate_document

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class Outcome(str, Enum):
    CLEAN = "clean"
    WARNINGS = "warnings"
    ERRORS = "errors"


class CheckLevel(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


@dataclass(frozen=True)
class Check:
    level: CheckLevel
    message: str
    # Text counted in the report's errors/warnings; None means display only
    record: Optional[str] = None


@dataclass
class Section:
    title: str
    checks: List[Check] = field(default_factory=list)

    def passed(self, message: str) -> None:
        self.checks.append(Check(CheckLevel.PASS, message))

    def warn(self, message: str, record: Optional[str] = None) -> None:
        self.checks.append(Check(CheckLevel.WARN, message, record))

    def fail(self, message: str, record: Optional[str] = None) -> None:
        self.checks.append(Check(CheckLevel.FAIL, message, record or message))


@dataclass
class ComplianceReport:
    sections: List[Section] = field(default_factory=list)

    def section(self, title: str) -> Section:
        section = Section(title)
        self.sections.append(section)
        return section

    def _records(self, level: CheckLevel) -> List[str]:
        return [
            c.record
            for s in self.sections
            for c in s.checks
            if c.level is level and c.record is not None
        ]

    @property
    def errors(self) -> List[str]:
        return self._records(CheckLevel.FAIL)

    @property
    def warnings(self) -> List[str]:
        return self._records(CheckLevel.WARN)

    @property
    def outcome(self) -> Outcome:
        if self.errors:
            return Outcome.ERRORS
        if self.warnings:
            return Outcome.WARNINGS
        return Outcome.CLEAN

    def exit_code(self, strict: bool = False) -> int:
        """0 compliant, 1 errors, 2 warnings under ``strict``."""
        outcome = self.outcome
        if outcome is Outcome.ERRORS:
            return 1
        if outcome is Outcome.WARNINGS and strict:
            return 2
        return 0

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "errors": self.errors,
            "warnings": self.warnings,
            "sections": [
                {
                    "title": s.title,
                    "checks": [
                        {"level": c.level.value, "message": c.message} for c in s.checks
                    ],
                }
                for s in self.sections
            ],
        }


@dataclass
class SpokeValidation:
    report: ComplianceReport
    manifest: Optional[Manifest] = None
    status: Optional[SpokeStatus] = None
    operator: Optional[Operator] = None


def _load(
    path: Path,
    model: Type[T],
    section: Section,
    valid_message: str = "Schema valid",
) -> Tuple[Optional[T], bool]:
    """Validate one document into ``section``. Returns (document, exists)."""
    name = path.name
    if not path.exists():
        return None, False

    try:
        raw = load_yaml(path)
    except DocumentUnparseableError as e:
        section.fail(f"{name}: {e.message}")
        return None, True

    result = validate_document(model, raw)
    if not result.ok:
        for violation in result.violations:
            section.fail(f"{name}: {violation}")
        return None, True

    section.passed(valid_message)
    return result.document, True


def _check_manifest(collab_dir: Path, report: ComplianceReport) -> Optional[Manifest]:
    section = report.section(f".collab/{MANIFEST_FILENAME}")
    manifest, exists = _load(collab_dir / MANIFEST_FILENAME, Manifest, section)
    if not exists:
        section.fail("File not found", record=f"{MANIFEST_FILENAME} not found")
        return None
    if manifest is None:
        return None

    section.passed(f"Name: {manifest.name}")
    section.passed(f"Hub: {manifest.hub}")
    section.passed(f"License: {manifest.license}")
    section.passed(f"Identity: {manifest.identity.handle}")

    if PLACEHOLDER_MARKER in manifest.identity.public_key:
        section.warn(
            "publicKey is a placeholder, update with your Ed25519 key",
            record=f"{MANIFEST_FILENAME}: publicKey is still a placeholder",
        )
    return manifest


def _check_status(
    collab_dir: Path,
    report: ComplianceReport,
    now: datetime,
    threshold: timedelta,
) -> Optional[SpokeStatus]:
    section = report.section(f".collab/{STATUS_FILENAME}")
    status, exists = _load(collab_dir / STATUS_FILENAME, SpokeStatus, section)
    if not exists:
        section.warn(
            "File not found, run 'hive-spoke status' to generate",
            record=f"{STATUS_FILENAME} not found, run 'hive-spoke status' to generate",
        )
        return None
    if status is None:
        return None

    section.passed(f"Phase: {status.phase}")
    section.passed(
        f"Tests: {status.tests.passing} passing, {status.tests.failing} failing"
    )
    section.passed(f"Git: {status.git.branch}, dirty={str(status.git.dirty).lower()}")

    if is_stale(status.generated_at, now, threshold):
        days = age_in_days(status.generated_at, now)
        section.warn(
            f"Generated {days} days ago, run 'hive-spoke status' to refresh",
            record=f"{STATUS_FILENAME}: generated {days} days ago, consider regenerating",
        )
    return status


def _check_operator(collab_dir: Path, report: ComplianceReport) -> Optional[Operator]:
    section = report.section(f".collab/{OPERATOR_FILENAME}")
    operator, exists = _load(
        collab_dir / OPERATOR_FILENAME,
        Operator,
        section,
        valid_message="Schema valid (Tier 1 + Tier 2)",
    )
    if not exists:
        section.warn(
            "File not found, optional but recommended",
            record=f"{OPERATOR_FILENAME} not found",
        )
        return None
    if operator is None:
        return None

    section.passed(f"Handle: {operator.handle}")
    skills = ", ".join(operator.skills) if operator.skills else "none declared"
    section.passed(f"Skills: {skills}")
    section.passed(f"Hives: {len(operator.hives)}")
    return operator


def _check_signing(
    signing: SigningConfig, manifest: Optional[Manifest], report: ComplianceReport
) -> None:
    section = report.section("Signing (Layer 1: Provable)")

    if signing.format == "ssh":
        section.passed("gpg.format = ssh")
    else:
        section.warn(
            f"gpg.format = {signing.format or 'not set'}",
            record="gpg.format is not 'ssh', commit signing may not work",
        )

    if signing.gpg_sign:
        section.passed("commit.gpgSign = true")
    else:
        section.warn(
            "commit.gpgSign is not true",
            record="commit.gpgSign is not true, commits won't be signed automatically",
        )

    if signing.signing_key:
        section.passed(f"Signing key configured: {signing.signing_key}")
    else:
        section.warn("No signing key configured", record="No signing key configured")

    if not signing.fingerprint:
        return
    section.passed(f"Fingerprint: {signing.fingerprint}")

    declared = manifest.identity.fingerprint if manifest else None
    if not declared:
        return
    if signing.fingerprint == declared:
        section.passed(f"Fingerprint matches {MANIFEST_FILENAME}")
    else:
        section.warn(
            f"Mismatch: git key {signing.fingerprint} vs manifest {declared}",
            record=(
                "Signing key fingerprint does not match "
                f"{MANIFEST_FILENAME} identity.fingerprint"
            ),
        )


def _check_reflexes(manifest: Manifest, report: ComplianceReport) -> None:
    section = report.section("Security reflexes (Layer 3: Attested)")
    for name, active in manifest.security.reflexes.claims():
        if active:
            section.passed(f"{name}: claimed active")
        else:
            section.warn(f"{name}: not active")


def _check_cross_file(
    manifest: Optional[Manifest],
    operator: Optional[Operator],
    report: ComplianceReport,
) -> None:
    section = report.section("Cross-file consistency")
    if manifest is None:
        section.warn(f"Skipped, {MANIFEST_FILENAME} not available")
        return
    if operator is None:
        section.warn(f"Skipped, {OPERATOR_FILENAME} not available")
        return

    issues = check_consistency(manifest, operator)
    for issue in issues:
        section.fail(issue.message)

    failed = {issue.field for issue in issues}
    if "handle" not in failed:
        section.passed(
            "Handle matches: manifest.identity.handle = operator.handle = "
            f'"{operator.handle}"'
        )
    if "publicKey" not in failed:
        section.passed("Public key matches between manifest and operator")


def validate_spoke(
    collab_dir: Path,
    signing: Optional[SigningConfig] = None,
    now: Optional[datetime] = None,
    threshold: timedelta = DEFAULT_STALE_THRESHOLD,
) -> SpokeValidation:
    """
    Validate a spoke's declarations.

    Args:
        collab_dir: The spoke's ``.collab/`` directory.
        signing: Local git signing setup; the signing section is omitted
            when not given.
        now: Reference instant for the freshness check.
        threshold: Age after which status.yaml counts as stale.
    """
    collab_dir = Path(collab_dir)
    now = now or utc_now()
    report = ComplianceReport()

    manifest = _check_manifest(collab_dir, report)
    status = _check_status(collab_dir, report, now, threshold)
    operator = _check_operator(collab_dir, report)

    if signing is not None:
        _check_signing(signing, manifest, report)
    if manifest is not None:
        _check_reflexes(manifest, report)
    _check_cross_file(manifest, operator, report)

    logger.info(
        f"Validated {collab_dir}: {len(report.errors)} error(s), "
        f"{len(report.warnings)} warning(s)"
    )
    return SpokeValidation(
        report=report, manifest=manifest, status=status, operator=operator
    )
