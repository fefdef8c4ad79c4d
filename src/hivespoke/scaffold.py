"""
Spoke-side document generation: ``init`` scaffolding and ``status`` snapshots.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from hivespoke import __version__
from hivespoke.config.defaults import (
    COLLAB_DIR,
    LIFECYCLE_PHASES,
    MANIFEST_FILENAME,
    OPERATOR_FILENAME,
    PLACEHOLDER_PUBLIC_KEY,
    SCHEMA_VERSION,
    STATUS_FILENAME,
    TEST_COMMAND_TIMEOUT_SECONDS,
)
from hivespoke.documents import load_yaml, write_yaml
from hivespoke.errors import HiveError, PreconditionError
from hivespoke.git import GitInspector, GitState, SigningConfig
from hivespoke.hub.staleness import utc_now
from hivespoke.schemas.fields import HUB_PATTERN
from hivespoke.schemas.manifest import Manifest
from hivespoke.schemas.status import SpokeStatus
from hivespoke.schemas.validation import parse_document, validate_document

logger = logging.getLogger(__name__)

MANIFEST_HEADER = (
    "# Spoke manifest: identity, security reflexes, hub projection\n"
    "# See: spoke-protocol.md"
)
STATUS_HEADER = (
    "# Spoke status snapshot: auto-generated, do not edit manually\n"
    "# Regenerate with: hive-spoke status"
)
OPERATOR_HEADER = (
    "# Operator profile: Tier 1 (public) + Tier 2 (hive-scoped)\n"
    "# Tier 3 (private) stays in local blackboard only\n"
    "# See: operator-identity.md"
)

DEFAULT_TEST_COMMAND = "pytest"

_PASS_RE = re.compile(r"(\d+)\s+pass(?:ed|ing)?\b", re.IGNORECASE)
_FAIL_RE = re.compile(r"(\d+)\s+(?:fail(?:ed|ing|ures?)?|errors?)\b", re.IGNORECASE)

# (command, cwd) -> (exit code, combined output)
TestRunner = Callable[[str, Path], Tuple[int, str]]


def generated_by() -> str:
    return f"hive-spoke {__version__}"


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


# =============================================================================
# init
# =============================================================================


@dataclass
class InitResult:
    collab_dir: Path
    handle: str
    github_detected: bool
    signing: SigningConfig
    written: List[Path] = field(default_factory=list)

    @property
    def has_signing_key(self) -> bool:
        return self.signing.public_key is not None


def resolve_handle(
    github: Optional[str], git_name: Optional[str], git_email: Optional[str]
) -> str:
    """GitHub login, then git user name, then email local part, then 'operator'."""
    if github:
        return github
    if git_name:
        return git_name
    if git_email and git_email.split("@")[0]:
        return git_email.split("@")[0]
    return "operator"


def build_manifest(
    project: str, hub: str, handle: str, signing: SigningConfig
) -> dict:
    identity = {"handle": handle, "publicKey": signing.public_key or PLACEHOLDER_PUBLIC_KEY}
    if signing.fingerprint:
        identity["fingerprint"] = signing.fingerprint

    return {
        "schemaVersion": SCHEMA_VERSION,
        "name": project,
        "hub": hub,
        "project": project,
        "maintainer": handle,
        "license": "MIT",
        "identity": identity,
        "security": {
            "reflexes": {
                "signing": signing.gpg_sign,
                "secretScanning": False,
                "sandboxEnforcer": False,
                "contentFilter": False,
            }
        },
        "status": {"test": DEFAULT_TEST_COMMAND},
    }


def build_status(
    now: datetime,
    phase: str = LIFECYCLE_PHASES[0],
    passing: int = 0,
    failing: int = 0,
    git: Optional[GitState] = None,
) -> dict:
    git = git or GitState(branch="main", last_commit=_iso(now), dirty=False, behind_remote=0)
    return {
        "schemaVersion": SCHEMA_VERSION,
        "generatedAt": _iso(now),
        "generatedBy": generated_by(),
        "phase": phase,
        "tests": {"passing": passing, "failing": failing},
        "git": {
            "branch": git.branch,
            "lastCommit": git.last_commit or _iso(now),
            "dirty": git.dirty,
            "behindRemote": git.behind_remote,
        },
    }


def build_operator(
    handle: str,
    display_name: str,
    hub: str,
    signing: SigningConfig,
    github: Optional[str],
    now: datetime,
) -> dict:
    signing_block = {"publicKey": signing.public_key or PLACEHOLDER_PUBLIC_KEY}
    if signing.fingerprint:
        signing_block["fingerprint"] = signing.fingerprint

    identities = []
    if github:
        identities.append(
            {"provider": "github", "id": github, "verified": True, "verified_at": _iso(now)}
        )

    return {
        "schemaVersion": SCHEMA_VERSION,
        "handle": handle,
        "name": display_name,
        "signing": signing_block,
        "identities": identities,
        "skills": [],
        "availability": "open",
        "hives": [
            {
                "hive": hub,
                "role": "contributor",
                "trust_zone": "untrusted",
                "identity_provider": "github",
                "joined": _iso(now),
                "contributions": 0,
                "reviews": 0,
                "swarms": 0,
            }
        ],
    }


def init_spoke(
    cwd: Path,
    hub: str,
    project: Optional[str] = None,
    name: Optional[str] = None,
    overwrite: bool = False,
    inspector: Optional[GitInspector] = None,
    now: Optional[datetime] = None,
) -> InitResult:
    """Scaffold ``.collab/`` with a manifest, status and operator profile."""
    cwd = Path(cwd)
    inspector = inspector or GitInspector(cwd)
    now = now or utc_now()
    collab_dir = cwd / COLLAB_DIR

    if not inspector.is_repo():
        raise PreconditionError("Not a git repository. Run 'git init' first.")
    if not HUB_PATTERN.match(hub):
        raise PreconditionError(
            f'Invalid hub format: "{hub}". Must be org/repo (e.g., mellanon/pai-collab).'
        )
    if collab_dir.exists() and not overwrite:
        raise PreconditionError(".collab/ already exists. Use --overwrite to replace.")

    project = project or cwd.resolve().name
    git_name = inspector.user_name()
    github = inspector.github_handle()
    handle = resolve_handle(github, git_name, inspector.user_email())
    signing = inspector.signing_config()

    result = InitResult(
        collab_dir=collab_dir,
        handle=handle,
        github_detected=github is not None,
        signing=signing,
    )

    documents = [
        (MANIFEST_FILENAME, build_manifest(project, hub, handle, signing), MANIFEST_HEADER),
        (STATUS_FILENAME, build_status(now), STATUS_HEADER),
        (
            OPERATOR_FILENAME,
            build_operator(handle, name or git_name or "operator", hub, signing, github, now),
            OPERATOR_HEADER,
        ),
    ]
    for filename, data, header in documents:
        path = collab_dir / filename
        write_yaml(path, data, header)
        result.written.append(path)

    logger.info(f"Initialized spoke {project} for {hub} as {handle}")
    return result


# =============================================================================
# status
# =============================================================================


def parse_test_counts(output: str, exit_code: int = 0) -> Tuple[int, int]:
    """
    Extract (passing, failing) from test runner output.

    Understands pytest ("3 passed, 1 failed") and bun/jest ("3 pass",
    "1 fail") summaries; the last reported count wins. A failing exit code
    with no parseable counts is reported as one failure.
    """
    passing = [int(m) for m in _PASS_RE.findall(output)]
    failing = [int(m) for m in _FAIL_RE.findall(output)]

    pass_count = passing[-1] if passing else 0
    fail_count = failing[-1] if failing else 0
    if exit_code != 0 and not passing and not failing:
        fail_count = 1
    return pass_count, fail_count


def run_test_command(command: str, cwd: Path) -> Tuple[int, str]:
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            shell=True,
            capture_output=True,
            text=True,
            timeout=TEST_COMMAND_TIMEOUT_SECONDS,
        )
    except subprocess.TimeoutExpired as e:
        logger.warning(f"Test command timed out after {e.timeout}s: {command}")
        return 1, ""
    return completed.returncode, f"{completed.stdout}\n{completed.stderr}"


def _previous_phase(status_path: Path) -> Optional[str]:
    if not status_path.exists():
        return None
    try:
        result = validate_document(SpokeStatus, load_yaml(status_path))
    except HiveError:
        return None
    return result.document.phase if result.ok else None


def generate_status(
    cwd: Path,
    phase: Optional[str] = None,
    inspector: Optional[GitInspector] = None,
    runner: TestRunner = run_test_command,
    now: Optional[datetime] = None,
    run_tests: bool = True,
) -> SpokeStatus:
    """
    Regenerate ``.collab/status.yaml`` from the working tree.

    The phase is kept from the previous snapshot unless ``phase`` is given.
    The result is validated before it is written.
    """
    cwd = Path(cwd)
    inspector = inspector or GitInspector(cwd)
    now = now or utc_now()
    collab_dir = cwd / COLLAB_DIR
    manifest_path = collab_dir / MANIFEST_FILENAME
    status_path = collab_dir / STATUS_FILENAME

    if not inspector.is_repo():
        raise PreconditionError("Not a git repository. Run 'git init' first.")
    if not manifest_path.exists():
        raise PreconditionError(
            f"{COLLAB_DIR}/{MANIFEST_FILENAME} not found. Run 'hive-spoke init' first."
        )

    manifest = parse_document(Manifest, load_yaml(manifest_path))
    phase = phase or _previous_phase(status_path) or LIFECYCLE_PHASES[0]

    passing = failing = 0
    command = manifest.status.test if manifest.status else None
    if run_tests and command:
        logger.info(f"Running tests: {command}")
        exit_code, output = runner(command, cwd)
        passing, failing = parse_test_counts(output, exit_code)

    data = build_status(now, phase, passing, failing, inspector.state())
    status = parse_document(SpokeStatus, data)
    write_yaml(status_path, status.to_yaml_dict(), STATUS_HEADER)
    return status
