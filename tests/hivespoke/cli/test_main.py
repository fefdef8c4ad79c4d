"""Tests for the hive-spoke entry point."""

import json
from unittest.mock import MagicMock, patch

import pytest

from hivespoke.cli.main import build_parser, main
from hivespoke.config import get_settings, set_settings
from hivespoke.documents import MANIFEST_PATH, write_yaml
from hivespoke.git import GitInspector


@pytest.fixture(autouse=True)
def restore_settings():
    original = get_settings()
    yield
    set_settings(original)


@pytest.fixture
def hub(tmp_path, monkeypatch, manifest_data, status_data):
    """A hub checkout with one declared and one bare local project."""
    status_data["generatedAt"] = "2020-01-01T00:00:00Z"
    write_yaml(tmp_path / "projects" / "signal" / ".collab" / "manifest.yaml", manifest_data)
    write_yaml(tmp_path / "projects" / "signal" / ".collab" / "status.yaml", status_data)
    (tmp_path / "projects" / "bare").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("HIVE_CONCURRENCY", raising=False)
    return tmp_path


def test_parser_subcommands():
    args = build_parser().parse_args(["--json", "pull", "--remote", "--concurrency", "4"])

    assert args.json
    assert args.command == "pull"
    assert args.remote
    assert args.concurrency == 4


def test_status_rejects_unknown_phase():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["status", "--phase", "finished"])


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "hive-spoke" in capsys.readouterr().out


def test_pull_json_envelope(hub, capsys):
    exit_code = main(["--json", "pull"])

    envelope = json.loads(capsys.readouterr().out)
    assert envelope["withCollab"] == 1
    assert envelope["withoutCollab"] == 1
    assert envelope["missing"] == ["bare"]
    assert envelope["spokes"][0]["spoke"] == "signal"
    assert "timestamp" in envelope
    assert envelope["staleCount"] == 1
    assert exit_code == 2
    assert envelope["ok"] is False


def test_pull_human_output(hub, capsys):
    main(["pull"])

    out = capsys.readouterr().out
    assert "signal" in out
    assert "1 with .collab/, 1 without" in out


def test_remote_pull_survives_non_utf8_project_file(
    tmp_path, monkeypatch, capsys, source, manifest_data
):
    projects = tmp_path / "projects"
    (projects / "good").mkdir(parents=True)
    (projects / "good" / "PROJECT.yaml").write_text("source:\n  repo: o/good\n")
    (projects / "bad").mkdir()
    (projects / "bad" / "PROJECT.yaml").write_bytes(b"source:\n  repo: o/\xff\xfe\n")
    source.put("good", MANIFEST_PATH, manifest_data)
    monkeypatch.chdir(tmp_path)

    with patch("hivespoke.cli.commands.pull.GitHubSource", return_value=source):
        exit_code = main(["--json", "pull", "--remote"])

    envelope = json.loads(capsys.readouterr().out)
    assert envelope["withCollab"] == 1
    assert envelope["spokes"][0]["spoke"] == "good"
    assert envelope["skipped"] == ["bad"]
    assert exit_code == 2
    assert source.closed


def test_missing_projects_dir_is_error(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    assert main(["pull"]) == 1
    assert "No projects/ directory found" in capsys.readouterr().err


def test_missing_allowed_signers_is_error(hub, capsys):
    assert main(["--json", "verify"]) == 1

    envelope = json.loads(capsys.readouterr().out)
    assert envelope["ok"] is False
    assert "allowed-signers file not found" in envelope["error"]


def test_invalid_concurrency_is_error(hub, capsys):
    assert main(["pull", "--concurrency", "0"]) == 1
    assert "concurrency" in capsys.readouterr().err


def test_validate_strict_exit_code(tmp_path, monkeypatch, manifest_data, capsys):
    write_yaml(tmp_path / ".collab" / "manifest.yaml", manifest_data)
    monkeypatch.chdir(tmp_path)
    inspector = MagicMock(spec=GitInspector)
    inspector.is_repo.return_value = False

    with patch("hivespoke.cli.commands.validate.GitInspector", return_value=inspector):
        assert main(["validate"]) == 0
        capsys.readouterr()
        assert main(["--json", "validate", "--strict"]) == 2

    envelope = json.loads(capsys.readouterr().out)
    assert envelope["outcome"] == "warnings"
    assert "operator.yaml not found" in envelope["warnings"]
