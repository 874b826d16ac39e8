"""config — Settings, env loading, YAML config."""
from .settings import OBSSettings, Settings

__all__ = ["OBSSettings", "Settings"]
