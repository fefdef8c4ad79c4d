"""
Validate command - check a spoke's .collab/ declarations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from hivespoke.cli.formatting.output import Reporter
from hivespoke.compliance import CheckLevel, Outcome, validate_spoke
from hivespoke.config.defaults import COLLAB_DIR
from hivespoke.config.settings import HubSettings, get_settings
from hivespoke.git import GitInspector


def run(
    reporter: Reporter,
    cwd: Path,
    strict: bool = False,
    inspector: Optional[GitInspector] = None,
    settings: Optional[HubSettings] = None,
) -> int:
    """Run the validate command."""
    cwd = Path(cwd)
    inspector = inspector or GitInspector(cwd)
    settings = settings or get_settings()

    signing = inspector.signing_config() if inspector.is_repo() else None
    validation = validate_spoke(
        cwd / COLLAB_DIR, signing=signing, threshold=settings.stale_threshold
    )
    report = validation.report

    render = {
        CheckLevel.PASS: reporter.success,
        CheckLevel.WARN: reporter.warning,
        CheckLevel.FAIL: reporter.fail,
    }
    for section in report.sections:
        reporter.header(section.title)
        for check in section.checks:
            render[check.level](check.message)

    reporter.print()
    if report.outcome is Outcome.ERRORS:
        reporter.print(
            f"[error]✗ {len(report.errors)} error(s), "
            f"{len(report.warnings)} warning(s)[/error]"
        )
    elif report.outcome is Outcome.WARNINGS:
        reporter.print(f"[warning]⚠ Valid with {len(report.warnings)} warning(s)[/warning]")
    else:
        reporter.print("[success]✓ All checks passed[/success]")

    exit_code = report.exit_code(strict)
    reporter.result(exit_code == 0, report.to_dict())
    return exit_code
