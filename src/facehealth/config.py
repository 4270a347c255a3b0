from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict, Sequence, Tuple

import yaml


class ConfigError(ValueError):
    pass


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p.resolve()}")

    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level config must be a mapping: {p}")
    return data


def section(cfg: Dict[str, Any] | None, *keys: str) -> Dict[str, Any]:
    """
    Walk nested sections, treating any missing level as empty.
    section(cfg, "calibration", "eye") == cfg["calibration"]["eye"] or {}.
    """
    node: Any = cfg or {}
    for depth, key in enumerate(keys, start=1):
        node = node.get(key)
        if node is None:
            node = {}
        if not isinstance(node, dict):
            raise ConfigError(f"Config section {'.'.join(keys[:depth])} must be a mapping")
    return node


def read_window(
    values: Dict[str, Any], key: str, default: Tuple[float, float]
) -> Tuple[float, float]:
    raw: Sequence[Any] = values.get(key, default)
    try:
        lower, upper = (float(v) for v in raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a [lower, upper] pair, got {raw!r}") from None
    if not math.isfinite(lower) or not math.isfinite(upper):
        raise ConfigError(f"{key} bounds must be finite, got [{lower}, {upper}]")
    if not lower < upper:
        raise ConfigError(f"{key} must satisfy lower < upper, got [{lower}, {upper}]")
    return lower, upper


def read_positive(values: Dict[str, Any], key: str, default: float) -> float:
    try:
        value = float(values.get(key, default))
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a number") from None
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{key} must be a finite number > 0, got {value}")
    return value
