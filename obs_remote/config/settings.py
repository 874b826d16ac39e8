"""
config/settings.py — Central configuration via env vars + YAML override.

Priority: ENV > config.yaml > defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _without_env(data: dict, prefix: str) -> dict:
    return {k: v for k, v in data.items() if f"{prefix}{k}".upper() not in os.environ}


class OBSSettings(BaseSettings):
    host: str = Field("localhost", description="OBS websocket host")
    port: int = Field(4444, description="OBS websocket port")
    password: str = Field("", description="OBS websocket password")
    debug: bool = Field(False, description="Log every decoded inbound frame")

    model_config = SettingsConfigDict(env_prefix="OBS_")


class Settings(BaseSettings):
    obs: OBSSettings = Field(default_factory=OBSSettings)
    log_level: str = Field("info", description="Log level")

    model_config = SettingsConfigDict(env_prefix="REMOTE_")

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings, merging YAML file if present."""
        path = config_path or Path(os.environ.get("REMOTE_CONFIG_FILE", "config.yaml"))
        yaml_data: dict = {}

        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

        # init kwargs beat env in pydantic-settings, so drop YAML keys the env already sets
        obs = OBSSettings(**_without_env(yaml_data.get("obs", {}), "OBS_"))
        extra = _without_env({k: v for k, v in yaml_data.items() if k == "log_level"}, "REMOTE_")

        return cls(obs=obs, **extra)

    def to_yaml(self, path: Path) -> None:
        """Save current settings to YAML."""
        data = {
            "obs": self.obs.model_dump(),
            "log_level": self.log_level,
        }
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

