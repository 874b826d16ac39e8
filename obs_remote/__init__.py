"""
obs-remote — Async client for the OBS websocket remote-control protocol.

Modules:
  core/     — transport, request correlation, event routing, OBSRemote facade
  config/   — Settings, env loading, YAML config
  main.py   — obs-remote command line
"""

from obs_remote.core import OBSRemote

__version__ = "1.0.0"

__all__ = ["OBSRemote", "__version__"]
