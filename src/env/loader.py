from __future__ import annotations

import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import yaml

from batching.controller import BatchingConfig
from capture.build_recorder import BuildRecorderConfig
from commands.executors.move_to import MovementConfig
from transport.http_client import ApiConfig
from world_state.tracker import GameStateConfig

from .schema import BridgeConfig

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG = CONFIG_ROOT / "bridge.yaml"

# Overrides the `profile` key of bridge.yaml when set.
PROFILE_ENV_VAR = "BRIDGE_PROFILE"


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping from `path`."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _select_profile(cfg: Dict[str, Any], override: Optional[str]) -> Tuple[str, Dict[str, Any]]:
    """Return (active_profile_name, active_profile_mapping)."""
    profile_name = override or os.getenv(PROFILE_ENV_VAR) or cfg.get("profile")
    if not profile_name:
        raise ValueError("bridge.yaml must define a 'profile' key.")
    profiles = cfg.get("profiles")
    if not isinstance(profiles, dict):
        raise ValueError("bridge.yaml must define a 'profiles' mapping.")
    if profile_name not in profiles:
        raise KeyError(f"Profile '{profile_name}' not found in bridge.yaml profiles.")
    return profile_name, profiles[profile_name] or {}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Section-wise merge: profile sections override top-level defaults key by key."""
    out = {k: (dict(v) if isinstance(v, dict) else v) for k, v in base.items()}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key].update(value)
        else:
            out[key] = value
    return out


def _build(cls: Type[T], raw: Any, section: str) -> T:
    """Construct a config dataclass, rejecting unknown keys."""
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ValueError(f"Section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{section}': {sorted(unknown)}")
    return cls(**raw)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_bridge_config(path: Optional[Path] = None, profile: Optional[str] = None) -> BridgeConfig:
    """Main entry point: returns a fully resolved BridgeConfig."""
    raw = _load_yaml(Path(path) if path is not None else DEFAULT_CONFIG)
    name, active = _select_profile(raw, profile)

    defaults = {k: v for k, v in raw.items() if k not in ("profile", "profiles")}
    merged = _merge(defaults, active)

    config = BridgeConfig(
        profile=name,
        api=_build(ApiConfig, merged.get("api"), "api"),
        batching=_build(BatchingConfig, merged.get("batching"), "batching"),
        game_state=_build(GameStateConfig, merged.get("game_state"), "game_state"),
        movement=_build(MovementConfig, merged.get("movement"), "movement"),
        build_recorder=_build(BuildRecorderConfig, merged.get("build_recorder"), "build_recorder"),
        http_workers=int(merged.get("http_workers", 0) or 0),
        monitoring_log=str(merged.get("monitoring_log", "") or ""),
    )
    _validate_config(config)
    return config


def _validate_config(config: BridgeConfig) -> None:
    """Minimal sanity checks for the configuration."""
    if not config.api.base_url.startswith(("http://", "https://")):
        raise ValueError(f"api.base_url must be an http(s) URL, got {config.api.base_url!r}")
    if config.api.timeout_s <= 0:
        raise ValueError("api.timeout_s must be positive")
    if config.batching.send_interval_s < 1:
        raise ValueError("batching.send_interval_s must be >= 1")
    if config.batching.max_events_per_batch < 1 or config.batching.min_events_for_perception < 1:
        raise ValueError("batching event thresholds must be >= 1")
    if config.movement.speed <= 0 or config.movement.tolerance <= 0:
        raise ValueError("movement.speed and movement.tolerance must be positive")
    if config.http_workers < 0:
        raise ValueError("http_workers must be >= 0")
