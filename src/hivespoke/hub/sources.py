"""
Document retrieval for spokes: the hub's local ``projects/`` tree or the
spoke's own repository on GitHub.

Both sources raise ``DocumentNotFound`` when the document does not exist,
``RetrievalError`` when the location could not be reached, and
``DocumentUnparseableError`` when the document was read but is not text.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Tuple

import aiofiles
import httpx

from hivespoke.config.defaults import (
    DEFAULT_BRANCH,
    FETCH_CONNECT_TIMEOUT_SECONDS,
    FETCH_READ_TIMEOUT_SECONDS,
    GITHUB_API_URL,
    PROJECT_FILENAME,
)
from hivespoke.documents import load_yaml
from hivespoke.errors import DocumentUnparseableError, HiveError, PreconditionError

logger = logging.getLogger(__name__)


class DocumentNotFound(HiveError):
    """The location was reachable but holds no such document."""

    def __init__(self, spoke: str, path: str):
        super().__init__(f"{spoke}: {path} not found", code="NOT_FOUND")
        self.spoke = spoke
        self.path = path


class RetrievalError(HiveError):
    """The location could not be reached (network, API or I/O failure)."""

    def __init__(self, spoke: str, message: str):
        super().__init__(f"{spoke}: {message}", code="RETRIEVAL_FAILED")
        self.spoke = spoke


@dataclass(frozen=True)
class SpokeRef:
    """A spoke known to the hub."""

    name: str
    repo: Optional[str] = None
    ref: str = DEFAULT_BRANCH


class DocumentSource(Protocol):
    async def fetch(self, spoke: SpokeRef, path: str) -> str:
        """Return the raw text of ``path`` for ``spoke``."""
        ...


def _require_dir(projects_dir: Path) -> Path:
    projects_dir = Path(projects_dir)
    if not projects_dir.is_dir():
        raise PreconditionError(
            "No projects/ directory found. Run this from the hub repo root."
        )
    return projects_dir


def list_projects(projects_dir: Path) -> List[str]:
    """Project directory names under ``projects_dir``, sorted."""
    projects_dir = _require_dir(projects_dir)
    return sorted(p.name for p in projects_dir.iterdir() if p.is_dir())


class LocalSource:
    """Reads declarations copied into ``projects/<name>/``."""

    def __init__(self, projects_dir: Path):
        self.projects_dir = _require_dir(projects_dir)

    def discover(self) -> List[SpokeRef]:
        return [SpokeRef(name=name) for name in list_projects(self.projects_dir)]

    async def fetch(self, spoke: SpokeRef, path: str) -> str:
        file_path = self.projects_dir / spoke.name / path
        if not file_path.is_file():
            raise DocumentNotFound(spoke.name, path)
        try:
            async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
                return await f.read()
        except UnicodeDecodeError as e:
            raise DocumentUnparseableError(
                f"{spoke.name}: {path} is not valid UTF-8 ({e.reason})"
            ) from e
        except OSError as e:
            raise RetrievalError(spoke.name, f"cannot read {path}: {e}") from e


def discover_remote_spokes(projects_dir: Path) -> Tuple[List[SpokeRef], List[str]]:
    """
    Read each project's PROJECT.yaml for its source repository.

    Returns:
        (spokes with a ``source.repo``, project names skipped)
    """
    spokes: List[SpokeRef] = []
    skipped: List[str] = []

    for name in list_projects(projects_dir):
        project_file = Path(projects_dir) / name / PROJECT_FILENAME
        if not project_file.exists():
            skipped.append(name)
            continue
        try:
            data = load_yaml(project_file) or {}
        except HiveError as e:
            logger.warning(f"Skipping {name}: {e}")
            skipped.append(name)
            continue

        source = data.get("source") if isinstance(data, dict) else None
        repo = source.get("repo") if isinstance(source, dict) else None
        if not repo:
            skipped.append(name)
            continue

        ref = source.get("branch") or DEFAULT_BRANCH
        spokes.append(SpokeRef(name=name, repo=str(repo), ref=str(ref)))

    return spokes, skipped


class GitHubSource:
    """
    Fetches declarations through the GitHub contents API.

    An ``httpx.AsyncClient`` may be injected (tests use ``MockTransport``);
    otherwise one is created per source and closed by ``aclose()``.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        token: Optional[str] = None,
        api_url: str = GITHUB_API_URL,
        connect_timeout: float = FETCH_CONNECT_TIMEOUT_SECONDS,
        read_timeout: float = FETCH_READ_TIMEOUT_SECONDS,
    ):
        headers = {"Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=api_url,
            headers=headers,
            timeout=httpx.Timeout(connect_timeout, read=read_timeout),
        )

    async def fetch(self, spoke: SpokeRef, path: str) -> str:
        if not spoke.repo:
            raise RetrievalError(spoke.name, "no source repository configured")

        url = f"/repos/{spoke.repo}/contents/{path}"
        try:
            response = await self.client.get(url, params={"ref": spoke.ref})
        except httpx.HTTPError as e:
            raise RetrievalError(spoke.name, f"request failed: {e}") from e

        if response.status_code == 404:
            raise DocumentNotFound(spoke.name, path)
        if response.status_code >= 400:
            raise RetrievalError(
                spoke.name, f"GitHub API returned {response.status_code} for {path}"
            )

        try:
            content = response.json()["content"]
        except (ValueError, KeyError, TypeError) as e:
            raise RetrievalError(spoke.name, f"unexpected API payload for {path}") from e

        # Reachable but undecodable content is unparseable, never unreachable
        try:
            text = base64.b64decode(content).decode("utf-8")
        except (ValueError, TypeError) as e:
            raise DocumentUnparseableError(
                f"{spoke.name}: {path} content could not be decoded ({e})"
            ) from e

        if not text.strip():
            raise DocumentNotFound(spoke.name, path)
        return text

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "GitHubSource":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
