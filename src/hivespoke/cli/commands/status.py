"""
Status command - regenerate .collab/status.yaml.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from hivespoke.cli.formatting.output import Reporter
from hivespoke.git import GitInspector
from hivespoke.scaffold import TestRunner, generate_status, run_test_command


def run(
    reporter: Reporter,
    cwd: Path,
    phase: Optional[str] = None,
    skip_tests: bool = False,
    inspector: Optional[GitInspector] = None,
    runner: TestRunner = run_test_command,
) -> int:
    """Run the status command."""
    status = generate_status(
        cwd,
        phase=phase,
        inspector=inspector,
        runner=runner,
        run_tests=not skip_tests,
    )

    reporter.header("Status updated")
    reporter.success(f"Phase: {status.phase}")
    tests_line = f"Tests: {status.tests.passing} passing, {status.tests.failing} failing"
    if status.tests.failing:
        reporter.warning(tests_line)
    else:
        reporter.success(tests_line)
    git_line = f"Git: {status.git.branch}, dirty={str(status.git.dirty).lower()}"
    if status.git.behind_remote:
        git_line += f", {status.git.behind_remote} behind"
    reporter.success(git_line)

    reporter.result(True, {"status": status.to_yaml_dict()})
    return 0
