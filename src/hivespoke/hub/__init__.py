"""
Hub-side aggregation of spoke declarations.
"""

from __future__ import annotations

from .aggregator import Aggregator
from .models import FleetReport, SpokeEntry, SpokeFailure, SpokeOutcome, SpokeState
from .sources import (
    DocumentNotFound,
    GitHubSource,
    LocalSource,
    RetrievalError,
    SpokeRef,
    discover_remote_spokes,
    list_projects,
)
from .staleness import DEFAULT_STALE_THRESHOLD, is_stale, status_is_stale

__all__ = [
    "Aggregator",
    "FleetReport",
    "SpokeEntry",
    "SpokeFailure",
    "SpokeOutcome",
    "SpokeState",
    "DocumentNotFound",
    "GitHubSource",
    "LocalSource",
    "RetrievalError",
    "SpokeRef",
    "discover_remote_spokes",
    "list_projects",
    "DEFAULT_STALE_THRESHOLD",
    "is_stale",
    "status_is_stale",
]
