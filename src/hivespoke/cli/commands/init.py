"""
Init command - scaffold .collab/ in a spoke repository.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from hivespoke.cli.formatting.output import Reporter
from hivespoke.git import GitInspector
from hivespoke.scaffold import init_spoke


def run(
    reporter: Reporter,
    cwd: Path,
    hub: str,
    project: Optional[str] = None,
    name: Optional[str] = None,
    overwrite: bool = False,
    inspector: Optional[GitInspector] = None,
) -> int:
    """Run the init command."""
    result = init_spoke(
        cwd,
        hub,
        project=project,
        name=name,
        overwrite=overwrite,
        inspector=inspector,
    )

    reporter.header("Initialized .collab/")
    for path in result.written:
        reporter.success(str(path.relative_to(Path(cwd))))
    if result.github_detected:
        reporter.success(f"GitHub handle: {result.handle}")
    else:
        reporter.warning(f"GitHub CLI not available, using handle: {result.handle}")
    if result.has_signing_key:
        reporter.success(f"Signing key: {result.signing.fingerprint or result.signing.signing_key}")
    else:
        reporter.warning("No SSH signing key found, publicKey is a placeholder")
        reporter.dim("  Configure: git config gpg.format ssh && git config user.signingKey <path>")
    reporter.dim("\nNext: hive-spoke status && hive-spoke validate")

    reporter.result(
        True,
        {
            "collabDir": str(result.collab_dir),
            "handle": result.handle,
            "files": [str(p) for p in result.written],
            "signingKey": result.has_signing_key,
        },
    )
    return 0
