"""Configuration for hive-spoke."""

from __future__ import annotations

from hivespoke.config.defaults import *  # noqa: F401,F403
from hivespoke.config.settings import HubSettings, get_settings, set_settings

__all__ = ["HubSettings", "get_settings", "set_settings"]
