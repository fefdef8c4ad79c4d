"""
Pull command - aggregate spoke declarations across the hub's projects.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich.table import Table

from hivespoke.cli.formatting.output import Reporter
from hivespoke.config.defaults import PROJECTS_DIR
from hivespoke.config.settings import HubSettings, get_settings
from hivespoke.hub import Aggregator, FleetReport, GitHubSource, LocalSource
from hivespoke.hub.sources import DocumentSource, discover_remote_spokes


def _exit_code(report: FleetReport) -> int:
    if report.failures:
        return 1
    if report.stale_count or report.failing_count or report.unreachable:
        return 2
    return 0


def _render(reporter: Reporter, report: FleetReport, remote: bool) -> None:
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Spoke", style="cyan")
    table.add_column("Maintainer")
    table.add_column("Phase")
    table.add_column("Tests", justify="right")
    table.add_column("Git")
    table.add_column("Generated")

    for entry in report.entries:
        tests = f"{entry.passing}/{entry.passing + entry.failing}"
        if entry.failing:
            tests = f"[error]{tests}[/error]"
        git = "dirty" if entry.dirty else "clean"
        if entry.behind_remote:
            git += f", {entry.behind_remote} behind"
        generated = entry.generated_at
        if entry.stale:
            generated = f"[warning]{generated} (stale)[/warning]"
        table.add_row(entry.spoke, entry.maintainer, entry.phase, tests, git, generated)

    reporter.header(f"Spoke status ({'remote' if remote else 'local'})")
    if report.entries:
        reporter.table(table)

    for failure in report.failures:
        reporter.fail(f"{failure.project}: {failure.reason}")
        for violation in failure.violations:
            reporter.dim(f"      {violation}")
    for name in report.unreachable:
        reporter.warning(f"{name}: unreachable")

    reporter.print()
    reporter.print(
        f"{report.with_collab} with .collab/, {report.without_collab} without"
    )
    if remote:
        reporter.dim(
            f"  missing: {len(report.missing)}, unreachable: {len(report.unreachable)}, "
            f"skipped (no PROJECT.yaml source): {len(report.skipped)}"
        )
    if report.stale_count:
        reporter.warning(f"{report.stale_count} stale (status older than threshold or absent)")
    if report.failing_count:
        reporter.warning(f"{report.failing_count} with failing tests")


async def run(
    reporter: Reporter,
    root: Path,
    remote: bool = False,
    concurrency: Optional[int] = None,
    settings: Optional[HubSettings] = None,
    source: Optional[DocumentSource] = None,
) -> int:
    """Run the pull command from the hub repo root."""
    settings = (settings or get_settings()).with_overrides(concurrency=concurrency)
    projects_dir = Path(root) / PROJECTS_DIR

    skipped = []
    owned = None
    if remote:
        spokes, skipped = discover_remote_spokes(projects_dir)
        if source is None:
            owned = source = GitHubSource(
                token=settings.github_token,
                api_url=settings.github_api_url,
                connect_timeout=settings.connect_timeout,
                read_timeout=settings.read_timeout,
            )
    else:
        local = LocalSource(projects_dir)
        spokes = local.discover()
        source = source or local

    aggregator = Aggregator(
        source,
        threshold=settings.stale_threshold,
        concurrency=settings.concurrency,
        fetch_timeout=settings.fetch_timeout,
    )
    try:
        report = await aggregator.aggregate(spokes)
    finally:
        if owned is not None:
            await owned.aclose()
    report.skipped.extend(skipped)

    _render(reporter, report, remote)
    exit_code = _exit_code(report)
    reporter.result(exit_code == 0, report.to_dict())
    return exit_code
