"""Pytest configuration for hive-spoke tests."""
import sys
from pathlib import Path

import pytest

# Add src to path for the tests - conftest is in tests/, so parent.parent is project root
project_root = Path(__file__).resolve().parent.parent
src_path = project_root / "src"

# Insert at the very beginning to override any other paths
sys.path.insert(0, str(src_path))

ED25519_KEY = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIAAAA123 alice@example.com"
FINGERPRINT = "SHA256:abcDEF123+/="


@pytest.fixture
def manifest_data():
    """A valid manifest as decoded from YAML."""
    return {
        "schemaVersion": "1.0",
        "name": "signal",
        "hub": "mellanon/pai-collab",
        "project": "signal",
        "maintainer": "alice",
        "license": "MIT",
        "identity": {
            "handle": "alice",
            "publicKey": ED25519_KEY,
            "fingerprint": FINGERPRINT,
        },
        "security": {
            "reflexes": {
                "signing": True,
                "secretScanning": True,
                "sandboxEnforcer": False,
                "contentFilter": False,
            }
        },
        "status": {"test": "pytest -q"},
    }


@pytest.fixture
def status_data():
    """A valid status snapshot as decoded from YAML."""
    return {
        "schemaVersion": "1.0",
        "generatedAt": "2026-10-18T12:00:00Z",
        "generatedBy": "hive-spoke 0.2.0",
        "phase": "build",
        "tests": {"passing": 42, "failing": 0},
        "git": {
            "branch": "main",
            "lastCommit": "2026-10-18T11:00:00Z",
            "dirty": False,
            "behindRemote": 0,
        },
    }


@pytest.fixture
def operator_data():
    """A valid Tier 1 + Tier 2 operator profile as decoded from YAML."""
    return {
        "schemaVersion": "1.0",
        "handle": "alice",
        "name": "Alice",
        "signing": {"publicKey": ED25519_KEY, "fingerprint": FINGERPRINT},
        "identities": [
            {"provider": "github", "id": "alice", "verified": True},
        ],
        "skills": ["python", "security"],
        "availability": "open",
        "hives": [
            {
                "hive": "mellanon/pai-collab",
                "role": "contributor",
                "trust_zone": "untrusted",
                "joined": "2026-01-01T00:00:00Z",
                "contributions": 3,
            }
        ],
    }
