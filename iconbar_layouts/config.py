"""Configuration loading for iconbar-layouts (YAML file merged over defaults)."""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

LOG = logging.getLogger("iconbar.config")

DEFAULT_CONFIG_PATH = Path("iconbar.yaml")

_DEFAULT_CONFIG: Dict[str, Any] = {
    "remote": {
        "base_url": "http://127.0.0.1:8080",
        "page": "iconbar.php",
        "timeout_sec": 30,
        "cookie": "",
        "user_agent": "iconbar-layouts/0.1 Python-urllib",
    },
    "presets": {"path": "~/.iconbar_layouts/presets.json"},
    "preview": {"cell_size": 96},
    "logging": {"level": "INFO"},
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(_DEFAULT_CONFIG)


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load a YAML configuration file if it exists, otherwise return defaults."""

    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        LOG.warning("config not found at %s; using defaults", cfg_path)
        return default_config()
    with cfg_path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, Mapping):
        LOG.warning("config at %s is not a mapping; using defaults", cfg_path)
        return default_config()
    return merge_dicts(_DEFAULT_CONFIG, loaded)


def merge_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of *base* with *override* laid over it, section by section."""

    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        section = merged.get(key)
        if isinstance(value, Mapping) and isinstance(section, Mapping):
            merged[key] = merge_dicts(section, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def apply_cli_overrides(cfg: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Lay ``section.key`` flag values over a copy of *cfg*."""

    nested: Dict[str, Any] = {}
    for dotted_key, value in overrides.items():
        *sections, leaf = dotted_key.split(".")
        cursor = nested
        for section in sections:
            cursor = cursor.setdefault(section, {})
        cursor[leaf] = value
    return merge_dicts(cfg, nested)


def prepare_config(raw_cfg: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Validate and normalise configuration:

    * Merge with defaults.
    * Clamp the timeout and preview cell size.
    * Expand ``~`` and environment variables in the preset path.
    * Fall back to INFO for unknown log levels.
    """

    cfg = merge_dicts(_DEFAULT_CONFIG, raw_cfg or {})

    remote = cfg.setdefault("remote", {})
    remote["base_url"] = str(remote.get("base_url") or "").strip()
    remote["page"] = str(remote.get("page") or "iconbar.php").strip()
    try:
        timeout = float(remote.get("timeout_sec", 30))
    except (TypeError, ValueError):
        LOG.warning("config[remote.timeout_sec]=%r invalid; using 30", remote.get("timeout_sec"))
        timeout = 30.0
    remote["timeout_sec"] = max(1.0, timeout)
    remote["cookie"] = str(remote.get("cookie") or "")

    presets = cfg.setdefault("presets", {})
    presets["path"] = os.path.expanduser(os.path.expandvars(str(presets.get("path") or "presets.json")))

    preview = cfg.setdefault("preview", {})
    preview["cell_size"] = max(32, int(preview.get("cell_size", 96)))

    logging_cfg = cfg.setdefault("logging", {})
    level = str(logging_cfg.get("level", "INFO")).upper()
    if level not in _LOG_LEVELS:
        LOG.warning("config[logging.level]=%r unknown; using INFO", level)
        level = "INFO"
    logging_cfg["level"] = level

    return cfg
