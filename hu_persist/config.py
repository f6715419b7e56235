"""Configuration loading for persistence services and their media."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import PersistenceConfigError
from .persistence.mediums import FileMedium, InMemoryMedium, get_persist_home, get_session_medium

_CONFIG_CACHE: Dict[str, Dict[str, Any]] = {}


def _default_config_path() -> Path:
    """Resolve the default config path (supports HU_PERSIST_CONFIG_PATH override)."""
    env_path = os.getenv("HU_PERSIST_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return get_persist_home() / "config.yaml"


def clear_config_cache() -> None:
    """Clear cached config (primarily for tests)."""
    _CONFIG_CACHE.clear()


def load_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Load YAML configuration with caching.

    Args:
        path: Optional custom path. Defaults to HU_PERSIST_CONFIG_PATH or
            HU_PERSIST_HOME/config.yaml. An explicit path must exist; a
            missing default file yields an empty config.
    """
    resolved = Path(path).expanduser() if path else _default_config_path()
    if not path and not resolved.exists():
        return {}
    key = str(resolved.resolve())
    if key not in _CONFIG_CACHE:
        with open(resolved, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise PersistenceConfigError(f"Config file {resolved} must contain a mapping")
        _CONFIG_CACHE[key] = data
    return _CONFIG_CACHE[key]


def _section(data: Dict[str, Any], section_path: str) -> Dict[str, Any]:
    """Return nested section by dotted path (e.g. ``persistence.local``)."""
    section: Any = data
    for key in section_path.split("."):
        if not isinstance(section, dict):
            return {}
        section = section.get(key)
        if section is None:
            return {}
    return section if isinstance(section, dict) else {}


def get_persistence_settings(path: str | Path | None = None) -> Dict[str, Any]:
    """Return the ``persistence`` section of the config."""
    return _section(load_config(path), "persistence")


def _quota(settings: Dict[str, Any], name: str) -> Optional[int]:
    value = settings.get(name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise PersistenceConfigError(f"'{name}' must be a non-negative integer, got {value!r}")
    return value


def resolve_home(settings: Dict[str, Any]) -> Path:
    home = settings.get("home")
    return Path(home).expanduser() if home else get_persist_home()


def build_session_medium(settings: Dict[str, Any]) -> InMemoryMedium:
    """
    Session medium from settings: shared process medium unless ``shared: false``.

    For the shared medium, ``quota_bytes`` only takes effect if this call
    creates it; an existing process medium keeps its quota.
    """
    session = _section(settings, "session")
    quota = _quota(session, "quota_bytes")
    if session.get("shared", True):
        return get_session_medium(quota=quota)
    return InMemoryMedium(quota=quota)


def build_local_medium(settings: Dict[str, Any]) -> FileMedium:
    """Durable file medium from settings."""
    local = _section(settings, "local")
    base_dir = local.get("base_dir")
    base = Path(base_dir).expanduser() if base_dir else resolve_home(settings) / "local"
    return FileMedium(base, quota_bytes=_quota(local, "quota_bytes"))
