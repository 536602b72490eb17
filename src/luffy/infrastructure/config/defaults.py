"""Hardcoded default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from luffy.infrastructure.common.http import DEFAULT_USER_AGENT

DEFAULT_CONFIG_PATH = Path("~/.config/luffy/config.yaml")

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "luffy",
    "environment": "dev",
    "provider": {
        "name": "flixhq",
        "max_results": 10,
    },
    "http": {
        "timeout_seconds": 15.0,
        "follow_redirects": True,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
