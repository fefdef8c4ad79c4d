"""
Git and identity probing for the spoke side.

Everything here shells out (git, gh, ssh-keygen) through one subprocess
wrapper. Probes that fail return None or a safe default; the callers decide
whether that is worth a warning.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from hivespoke.config.defaults import GIT_COMMAND_TIMEOUT_SECONDS, GIT_FETCH_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

FINGERPRINT_RE = re.compile(r"(SHA256:[A-Za-z0-9+/=]+)")


@dataclass(frozen=True)
class GitState:
    branch: str
    last_commit: str
    dirty: bool
    behind_remote: int


@dataclass(frozen=True)
class SigningConfig:
    format: Optional[str] = None
    signing_key: Optional[str] = None
    gpg_sign: bool = False
    public_key: Optional[str] = None
    fingerprint: Optional[str] = None


def _run_command(
    cmd: List[str],
    cwd: Optional[Path] = None,
    timeout: int = GIT_COMMAND_TIMEOUT_SECONDS,
) -> Optional[str]:
    """Run a command, returning stripped stdout or None on any failure."""
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=os.environ.copy(),
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"{cmd[0]} failed: {e}")
        return None
    if result.returncode != 0:
        logger.debug(f"{' '.join(cmd)} exited {result.returncode}: {result.stderr.strip()}")
        return None
    return result.stdout.strip()


class GitInspector:
    """Reads repository state and signing identity for one working tree."""

    def __init__(self, cwd: Optional[Path] = None):
        self.cwd = Path(cwd or Path.cwd())

    def _git(self, *args: str, timeout: int = GIT_COMMAND_TIMEOUT_SECONDS) -> Optional[str]:
        return _run_command(["git", *args], cwd=self.cwd, timeout=timeout)

    def is_repo(self) -> bool:
        return self._git("rev-parse", "--is-inside-work-tree") == "true"

    def state(self) -> GitState:
        branch = self._git("rev-parse", "--abbrev-ref", "HEAD") or "unknown"
        last_commit = self._git("log", "-1", "--format=%aI") or ""
        porcelain = self._git("status", "--porcelain")
        return GitState(
            branch=branch,
            last_commit=last_commit,
            dirty=bool(porcelain),
            behind_remote=self.behind_remote(),
        )

    def behind_remote(self) -> int:
        """Commits on the upstream not yet in HEAD; 0 without an upstream."""
        upstream = self._git("rev-parse", "--abbrev-ref", "@{upstream}")
        if not upstream:
            return 0
        self._git("fetch", "--quiet", timeout=GIT_FETCH_TIMEOUT_SECONDS)
        count = self._git("rev-list", "--count", "HEAD..@{upstream}")
        try:
            return int(count) if count else 0
        except ValueError:
            return 0

    def config(self, key: str) -> Optional[str]:
        return self._git("config", key) or None

    def user_name(self) -> Optional[str]:
        return self.config("user.name")

    def user_email(self) -> Optional[str]:
        return self.config("user.email")

    def github_handle(self) -> Optional[str]:
        return _run_command(["gh", "api", "user", "--jq", ".login"], cwd=self.cwd) or None

    def signing_config(self) -> SigningConfig:
        fmt = self.config("gpg.format")
        signing_key = self.config("user.signingKey")
        gpg_sign = self.config("commit.gpgSign") == "true"

        public_key = None
        fingerprint = None
        if signing_key:
            key_path = Path(os.path.expanduser(signing_key))
            try:
                public_key = key_path.read_text(encoding="utf-8").strip() or None
            except OSError:
                logger.debug(f"Signing key file not readable: {key_path}")

            output = _run_command(["ssh-keygen", "-l", "-f", str(key_path)])
            match = FINGERPRINT_RE.search(output or "")
            if match:
                fingerprint = match.group(1)

        return SigningConfig(
            format=fmt,
            signing_key=signing_key,
            gpg_sign=gpg_sign,
            public_key=public_key,
            fingerprint=fingerprint,
        )
