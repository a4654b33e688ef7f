from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = "config/params.yaml"

DEFAULTS: Dict[str, Any] = {
    "streetview": {
        "host": "http://cbk0.google.com",
        "timeout_s": 10.0,
        "fetch_workers": 8,
    },
    "render": {
        "width": 800,
        "height": 800,
        "zoom": 2.0,
        "fetch_zoom": 2,
        "interpolation": "bilinear",
        "edge_mode": "clamp",
        "workers": 4,
        "jpeg_quality": 75,
    },
    "store": {"root": "data/planets"},
    "logging": {"level": "INFO"},
}


def _merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in over.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load YAML config and merge it over DEFAULTS.

    Path precedence: explicit arg, env PLANET_CONFIG, config/params.yaml.
    A missing file yields the defaults.
    """
    path = path or os.environ.get("PLANET_CONFIG") or DEFAULT_CONFIG_PATH
    cfg = copy.deepcopy(DEFAULTS)
    if not Path(path).exists():
        return cfg
    with open(path, "r") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return _merge(cfg, loaded)
