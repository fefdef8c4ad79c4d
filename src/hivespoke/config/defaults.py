"""Default configuration values for hive-spoke.

This module centralizes the hard-coded values (paths, thresholds, timeouts,
concurrency) into a single location. All modules should import these
constants instead of hard-coding values.

Usage:
    from hivespoke.config.defaults import (
        STALE_THRESHOLD_DAYS,
        COLLAB_DIR,
        DEFAULT_CONCURRENCY,
    )
"""

from __future__ import annotations

# =============================================================================
# Protocol
# =============================================================================

SCHEMA_VERSION = "1.0"

ACCEPTED_LICENSES = (
    "MIT",
    "Apache-2.0",
    "BSD-2-Clause",
    "BSD-3-Clause",
    "CC-BY-4.0",
    "AGPL-3.0",
)

LIFECYCLE_PHASES = (
    "specify",
    "build",
    "harden",
    "contrib-prep",
    "review",
    "shipped",
    "evolving",
)

ED25519_PREFIX = "ssh-ed25519 "
PLACEHOLDER_PUBLIC_KEY = "ssh-ed25519 <your-public-key-here>"
PLACEHOLDER_MARKER = "<your-public-key-here>"


# =============================================================================
# Layout
# =============================================================================

# Spoke side
COLLAB_DIR = ".collab"
MANIFEST_FILENAME = "manifest.yaml"
STATUS_FILENAME = "status.yaml"
OPERATOR_FILENAME = "operator.yaml"

# Hub side
PROJECTS_DIR = "projects"
PROJECT_FILENAME = "PROJECT.yaml"
ALLOWED_SIGNERS_PATH = ".hive/allowed-signers"
HUB_CONFIG_PATH = ".hive/config.yaml"

DEFAULT_BRANCH = "main"


# =============================================================================
# Staleness
# =============================================================================

# Comparison is strictly greater-than
STALE_THRESHOLD_DAYS = 7


# =============================================================================
# Aggregation / Remote fetch
# =============================================================================

DEFAULT_CONCURRENCY = 8
MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 64

GITHUB_API_URL = "https://api.github.com"
FETCH_CONNECT_TIMEOUT_SECONDS = 10.0
FETCH_READ_TIMEOUT_SECONDS = 30.0
# Upper bound for one document fetch, enforced by the aggregator itself
FETCH_TOTAL_TIMEOUT_SECONDS = 45.0


# =============================================================================
# Subprocess probing
# =============================================================================

GIT_COMMAND_TIMEOUT_SECONDS = 30
GIT_FETCH_TIMEOUT_SECONDS = 60
TEST_COMMAND_TIMEOUT_SECONDS = 900
