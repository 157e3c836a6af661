from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from contracts.types import Region
from .schema import DEFAULT_REGION, WalkerConfig


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_ROOT / "walker.yaml"

# key -> minimum accepted value
_INT_OPTIONS: Dict[str, int] = {
    "max_drop": 1,
    "iteration_cap": 1,
    "inter_target_delay_ms": 0,
    "per_step_timeout_ms": 0,
    "step_delay_ms": 0,
    "scan_timeout_ms": 0,
}


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML config file."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _select_profile(
    cfg: Dict[str, Any],
    override: Optional[str],
) -> Tuple[str, Dict[str, Any]]:
    """Return (active_profile_name, active_profile_mapping)."""
    profile_name = override or cfg.get("profile")
    if not profile_name:
        raise ValueError("walker.yaml must define a 'profile' key.")
    profiles = cfg.get("profiles")
    if not isinstance(profiles, dict):
        raise ValueError("walker.yaml must define a 'profiles' mapping.")
    if profile_name not in profiles:
        raise KeyError(f"Profile '{profile_name}' not found in walker.yaml profiles.")
    return profile_name, profiles[profile_name] or {}


def _parse_region(raw: Any) -> Region:
    if raw is None:
        return DEFAULT_REGION
    if not isinstance(raw, Mapping) or "min" not in raw or "max" not in raw:
        raise ValueError(f"region must be a mapping with 'min' and 'max', got {raw!r}")
    return Region.from_corners(raw["min"], raw["max"])


def _parse_int(key: str, value: Any) -> int:
    # bool is an int subclass; "true" is never a sensible tick count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    minimum = _INT_OPTIONS[key]
    if value < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {value}")
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def config_from_mapping(raw: Mapping[str, Any], name: str = "default") -> WalkerConfig:
    """Build a validated WalkerConfig from a plain mapping."""
    unknown = set(raw) - set(_INT_OPTIONS) - {"region", "start_token"}
    if unknown:
        raise ValueError(f"Unrecognized walker options: {sorted(unknown)}")

    kwargs: Dict[str, Any] = {"name": name, "region": _parse_region(raw.get("region"))}

    token = raw.get("start_token", ".start")
    if not isinstance(token, str) or not token.strip():
        raise ValueError(f"start_token must be a non-empty string, got {token!r}")
    kwargs["start_token"] = token.strip()

    for key in _INT_OPTIONS:
        if key in raw:
            kwargs[key] = _parse_int(key, raw[key])

    return WalkerConfig(**kwargs)


def load_walker_config(
    path: Optional[Path] = None,
    profile: Optional[str] = None,
) -> WalkerConfig:
    """Main entry point: returns the WalkerConfig for the active profile."""
    cfg = _load_yaml(Path(path) if path is not None else DEFAULT_CONFIG_PATH)
    active_name, active = _select_profile(cfg, profile)
    return config_from_mapping(active, name=active_name)
