"""Layered configuration loading: defaults < YAML < environment < CLI.

Every layer is first reshaped into the sectioned form of ``config.yaml``
and deep-merged onto the previous one; ``AppConfig`` validates the result
exactly once.  Loading reads files but never creates them.
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from .schema import AppConfig, EnvOverrides

_SECTIONS: tuple[str, ...] = ("provider", "http", "logging")
_TOP_LEVEL_KEYS: tuple[str, ...] = ("app_name", "environment")

# flat key -> (section, key inside section)
_FLAT_TO_SECTION: dict[str, tuple[str, str]] = {
    "provider_name": ("provider", "name"),
    "max_results": ("provider", "max_results"),
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
}


def _merge_into(target: dict[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *layer* onto *target* in place; nested mappings merge key by key."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = value
    return target


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Reshape one layer into ``{app_name, environment, provider, http, logging}``.

    Accepts sectioned keys, flat keys (``http_timeout_seconds``) and a bare
    string under ``provider`` as shorthand for ``provider.name``.
    """
    shaped: dict[str, Any] = {
        key: layer[key] for key in _TOP_LEVEL_KEYS if key in layer
    }

    for section in _SECTIONS:
        value = layer.get(section)
        if isinstance(value, Mapping):
            shaped[section] = dict(value)

    provider = layer.get("provider")
    if isinstance(provider, str):
        shaped.setdefault("provider", {})["name"] = provider

    for flat_key, (section, key) in _FLAT_TO_SECTION.items():
        if flat_key in layer:
            shaped.setdefault(section, {})[key] = layer[flat_key]

    return shaped


def _read_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def default_config_path() -> Path | None:
    """``~/.config/luffy/config.yaml`` when that file exists, else None."""
    path = DEFAULT_CONFIG_PATH.expanduser()
    return path if path.is_file() else None


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the final ``AppConfig``.

    A ``.env`` file joins the environment layer without overriding
    variables that are already set.  Missing explicit files raise
    ``FileNotFoundError``.
    """
    if dotenv_path is not None:
        if not dotenv_path.is_file():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = [deepcopy(DEFAULT_CONFIG)]
    if config_path is not None:
        if not config_path.is_file():
            raise FileNotFoundError(config_path)
        layers.append(_read_yaml(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged: dict[str, Any] = {}
    for layer in layers:
        _merge_into(merged, _sectioned(layer))

    return AppConfig.model_validate(merged)
