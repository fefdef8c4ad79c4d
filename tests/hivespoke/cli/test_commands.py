"""Tests for the individual CLI commands."""

import io
import json
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from hivespoke.cli.commands import init, pull, status, validate, verify
from hivespoke.cli.formatting.output import Reporter, custom_theme
from hivespoke.config import HubSettings
from hivespoke.documents import MANIFEST_PATH, STATUS_PATH, write_yaml
from hivespoke.git import GitInspector, GitState, SigningConfig
from hivespoke.hub.sources import RetrievalError


def _reporter(json_output=False):
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, theme=custom_theme)
    return Reporter(json_output=json_output, console=console, stream=buffer), buffer


def _inspector():
    inspector = MagicMock(spec=GitInspector)
    inspector.is_repo.return_value = True
    inspector.github_handle.return_value = "alice"
    inspector.user_name.return_value = "Alice"
    inspector.user_email.return_value = "alice@example.com"
    inspector.signing_config.return_value = SigningConfig()
    inspector.state.return_value = GitState("main", "2026-10-18T10:00:00Z", False, 0)
    return inspector


@pytest.fixture
def hub_root(tmp_path, manifest_data):
    (tmp_path / ".hive").mkdir()
    (tmp_path / ".hive" / "allowed-signers").write_text(
        "# trust anchors\n"
        "alice@example.com ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIAAAA123\n"
    )
    for name in ("signal", "beacon", "ghost", "local-only"):
        (tmp_path / "projects" / name).mkdir(parents=True)
    for name in ("signal", "beacon", "ghost"):
        (tmp_path / "projects" / name / "PROJECT.yaml").write_text(
            f"source:\n  repo: org/{name}\n"
        )
    return tmp_path


class TestReporter:
    def test_human_mode_ignores_result(self):
        reporter, buffer = _reporter()

        reporter.success("done")
        reporter.result(True, {"a": 1})

        assert "✓ done" in buffer.getvalue()
        assert "{" not in buffer.getvalue()

    def test_json_mode_emits_only_envelope(self):
        reporter, buffer = _reporter(json_output=True)

        reporter.warning("ignored")
        reporter.result(False, {"count": 2})

        envelope = json.loads(buffer.getvalue())
        assert envelope["ok"] is False
        assert envelope["count"] == 2
        assert "timestamp" in envelope

    def test_json_error(self):
        reporter, buffer = _reporter(json_output=True)

        reporter.error("boom")

        assert json.loads(buffer.getvalue())["error"] == "boom"


class TestInitAndStatus:
    def test_init_then_status(self, tmp_path):
        reporter, buffer = _reporter()

        assert init.run(reporter, tmp_path, hub="org/hub", inspector=_inspector()) == 0
        assert ".collab/manifest.yaml" in buffer.getvalue()
        assert "publicKey is a placeholder" in buffer.getvalue()

        runner = MagicMock(return_value=(0, "3 passed"))
        assert status.run(reporter, tmp_path, phase="build", inspector=_inspector(), runner=runner) == 0
        assert "Tests: 3 passing, 0 failing" in buffer.getvalue()


class TestValidate:
    def test_clean_spoke(self, tmp_path, manifest_data, status_data, operator_data):
        status_data["generatedAt"] = "2999-01-01T00:00:00Z"
        write_yaml(tmp_path / ".collab" / "manifest.yaml", manifest_data)
        write_yaml(tmp_path / ".collab" / "status.yaml", status_data)
        write_yaml(tmp_path / ".collab" / "operator.yaml", operator_data)
        inspector = _inspector()
        inspector.signing_config.return_value = SigningConfig(
            format="ssh", signing_key="k", gpg_sign=True
        )
        reporter, buffer = _reporter()

        assert validate.run(reporter, tmp_path, strict=True, inspector=inspector) == 0
        assert "All checks passed" in buffer.getvalue()

    def test_errors_exit_one(self, tmp_path, manifest_data):
        write_yaml(tmp_path / ".collab" / "manifest.yaml", dict(manifest_data, license="none"))
        reporter, buffer = _reporter()

        assert validate.run(reporter, tmp_path, inspector=_inspector()) == 1
        assert "error(s)" in buffer.getvalue()


class TestVerify:
    @pytest.mark.asyncio
    async def test_verify_summary_and_exit_code(self, hub_root, source, manifest_data):
        source.put("signal", MANIFEST_PATH, manifest_data)
        source.put("beacon", MANIFEST_PATH, dict(manifest_data, hub="nope"))
        source.put("ghost", MANIFEST_PATH, RetrievalError("ghost", "timeout"))
        reporter, buffer = _reporter(json_output=True)

        exit_code = await verify.run(reporter, hub_root, settings=HubSettings(), source=source)

        envelope = json.loads(buffer.getvalue())
        assert exit_code == 1
        assert envelope["total"] == 2
        assert envelope["verified"] == 1
        assert envelope["skipped"] == ["local-only"]
        assert envelope["unreachable"] == ["ghost"]
        assert [r["project"] for r in envelope["results"]] == ["beacon", "signal"]

    @pytest.mark.asyncio
    async def test_all_verified_exits_zero(self, hub_root, source, manifest_data):
        for name in ("signal", "beacon", "ghost"):
            source.put(name, MANIFEST_PATH, manifest_data)
        reporter, buffer = _reporter()

        exit_code = await verify.run(reporter, hub_root, settings=HubSettings(), source=source)

        assert exit_code == 0
        assert "3/3 verified" in buffer.getvalue()

    @pytest.mark.asyncio
    async def test_unverified_exits_two(self, hub_root, source, manifest_data):
        del manifest_data["identity"]["fingerprint"]
        source.put("signal", MANIFEST_PATH, manifest_data)
        reporter, buffer = _reporter()

        exit_code = await verify.run(reporter, hub_root, settings=HubSettings(), source=source)

        assert exit_code == 2
        assert "no fingerprint" in buffer.getvalue()


class TestPullRemote:
    @pytest.mark.asyncio
    async def test_remote_pull_counts(self, hub_root, source, manifest_data, status_data):
        status_data["generatedAt"] = "2999-01-01T00:00:00Z"
        source.put("signal", MANIFEST_PATH, manifest_data)
        source.put("signal", STATUS_PATH, status_data)
        source.put("ghost", MANIFEST_PATH, RetrievalError("ghost", "HTTP 500"))
        reporter, buffer = _reporter(json_output=True)

        exit_code = await pull.run(
            reporter, hub_root, remote=True, settings=HubSettings(), source=source
        )

        envelope = json.loads(buffer.getvalue())
        assert envelope["withCollab"] == 1
        assert envelope["missing"] == ["beacon"]
        assert envelope["unreachable"] == ["ghost"]
        assert envelope["skipped"] == ["local-only"]
        assert envelope["withoutCollab"] == 3
        assert exit_code == 2
