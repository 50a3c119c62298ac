"""
Named analysis settings shipped in spectro_paint/data/analysis_presets.json.

Each preset is checked and converted to analyze() keyword arguments when the
file is first read, so a bad entry fails on load instead of inside analyze().
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional


PRESETS_PATH = Path(__file__).resolve().parent / "data" / "analysis_presets.json"

# Key -> type the value is coerced to
PARAM_TYPES = {
    "win_size": int,
    "hop_size": int,
    "max_freq_hz": float,
    "db_range_db": float,
}

_PRESETS_CACHE: Optional[Dict[str, Dict[str, Any]]] = None


def _parse_preset(name: str, raw: Any) -> Dict[str, Any]:
    """
    Turn one JSON entry into typed analyze() kwargs.

    Unknown keys (descriptions and the like) are ignored. Booleans are rejected
    even though Python treats them as ints.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Preset '{name}' must be an object, got {type(raw).__name__}")

    missing = set(PARAM_TYPES) - set(raw)
    if missing:
        raise ValueError(f"Preset '{name}' is missing required keys: {sorted(missing)}")

    params: Dict[str, Any] = {}
    for key, kind in PARAM_TYPES.items():
        value = raw[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Preset '{name}': {key} must be a number, got {value!r}")
        if kind is int and float(value) != int(value):
            raise ValueError(f"Preset '{name}': {key} must be a whole number, got {value!r}")
        params[key] = kind(value)
    return params


def _load_presets(path: Path = PRESETS_PATH) -> Dict[str, Dict[str, Any]]:
    global _PRESETS_CACHE
    if _PRESETS_CACHE is not None:
        return _PRESETS_CACHE

    if not path.exists():
        raise FileNotFoundError(f"Presets file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError("Presets JSON must map preset names to objects")

    _PRESETS_CACHE = {name: _parse_preset(name, raw) for name, raw in data.items()}
    return _PRESETS_CACHE


def list_presets() -> List[str]:
    return sorted(_load_presets())


def get_preset(name: str) -> Dict[str, Any]:
    """
    Typed analysis settings for ``name``; raises KeyError if there is no such preset.
    """
    presets = _load_presets()
    if name not in presets:
        raise KeyError(f"Preset not found: {name}")
    return dict(presets[name])


def analysis_params(name: str) -> Dict[str, Any]:
    """
    Preset values keyed as analyze() keyword arguments.
    """
    return get_preset(name)
