from __future__ import annotations

from .load import default_config_path, load_config
from .schema import AppConfig, EnvOverrides

__all__ = ["AppConfig", "EnvOverrides", "default_config_path", "load_config"]
