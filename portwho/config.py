from __future__ import annotations
from typing import Any, Dict
from pathlib import Path
import logging

import yaml

from .formatter import FORMATS
from .project import PROJECT_MARKERS
from .tools import BACKENDS

log = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "backend": "auto",
    "bind_host": "",
    "format": "table",
    "project": "project",
    "project_markers": list(PROJECT_MARKERS),
    "log_level": "WARNING",
    "api_host": "127.0.0.1",
    "api_port": 5000,
    "api_secret": None,
    "token_hours": 24,
}


def _reset(cfg: Dict[str, Any], key: str, reason: str) -> None:
    log.warning("Ignoring config %s=%r (%s); using %r", key, cfg[key], reason, DEFAULT_CONFIG[key])
    cfg[key] = DEFAULT_CONFIG[key]
    if key == "project_markers":
        cfg[key] = list(DEFAULT_CONFIG[key])


def _check_values(cfg: Dict[str, Any]) -> None:
    if cfg["backend"] not in ("auto", *BACKENDS):
        _reset(cfg, "backend", "expected auto, " + ", ".join(BACKENDS))
    if cfg["format"] not in FORMATS:
        _reset(cfg, "format", "expected " + ", ".join(FORMATS))
    markers = cfg["project_markers"]
    if not isinstance(markers, list) or not all(isinstance(m, str) and m for m in markers):
        _reset(cfg, "project_markers", "expected a list of file names")
    if not isinstance(cfg["bind_host"], str):
        _reset(cfg, "bind_host", "expected a string")


def load_config(path: str | None) -> Dict[str, Any]:
    cfg = DEFAULT_CONFIG.copy()
    cfg["project_markers"] = list(DEFAULT_CONFIG["project_markers"])
    if not path:
        return cfg
    try:
        data = yaml.safe_load(Path(path).read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError("top level must be a mapping")
        cfg.update(data)
        log.info("Loaded config from %s", path)
        _check_values(cfg)
    except (OSError, yaml.YAMLError, ValueError) as e:
        log.warning("Could not load config %s: %s", path, e)
    return cfg
