"""
Verify command - check spoke signing keys against the hub's allowed-signers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from hivespoke.cli.formatting.output import Reporter
from hivespoke.config.defaults import ALLOWED_SIGNERS_PATH, PROJECTS_DIR
from hivespoke.config.settings import HubSettings, get_settings
from hivespoke.hub.sources import DocumentSource, GitHubSource, discover_remote_spokes
from hivespoke.trust import SpokeVerifier, VerificationSummary, load_registry


def _exit_code(summary: VerificationSummary) -> int:
    if summary.invalid:
        return 1
    if summary.unverified or summary.unreachable:
        return 2
    return 0


def _render(reporter: Reporter, summary: VerificationSummary) -> None:
    reporter.header("Spoke verification")

    for result in summary.results:
        label = f"{result.project} ({result.handle})"
        if result.verified:
            signer = f" -> {result.matched_signer}" if result.matched_signer else ""
            reporter.success(f"{label}{signer}")
        else:
            reporter.fail(label)
            for issue in result.issues:
                reporter.dim(f"      {issue}")

    for name in summary.unreachable:
        reporter.warning(f"{name}: unreachable")
    for name in summary.missing:
        reporter.dim(f"  {name}: no manifest published")
    for key, emails in summary.ambiguous_keys.items():
        reporter.warning(
            f"allowed-signers key {key[:40]}... registered for {', '.join(emails)}"
        )

    reporter.print()
    reporter.print(
        f"{summary.verified}/{summary.total} verified, "
        f"{len(summary.skipped) + len(summary.missing)} skipped, "
        f"{len(summary.unreachable)} unreachable"
    )


async def run(
    reporter: Reporter,
    root: Path,
    allowed_signers: Optional[Path] = None,
    concurrency: Optional[int] = None,
    settings: Optional[HubSettings] = None,
    source: Optional[DocumentSource] = None,
) -> int:
    """Run the verify command from the hub repo root."""
    root = Path(root)
    settings = (settings or get_settings()).with_overrides(concurrency=concurrency)

    registry = load_registry(allowed_signers or root / ALLOWED_SIGNERS_PATH)
    spokes, skipped = discover_remote_spokes(root / PROJECTS_DIR)

    owned = None
    if source is None:
        owned = source = GitHubSource(
            token=settings.github_token,
            api_url=settings.github_api_url,
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
        )
    verifier = SpokeVerifier(
        source,
        registry,
        concurrency=settings.concurrency,
        fetch_timeout=settings.fetch_timeout,
    )
    try:
        summary = await verifier.verify_batch(spokes)
    finally:
        if owned is not None:
            await owned.aclose()
    summary.skipped.extend(skipped)

    _render(reporter, summary)
    exit_code = _exit_code(summary)
    reporter.result(exit_code == 0, summary.to_dict())
    return exit_code
