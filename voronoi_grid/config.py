"""
Layout Parameters and JSON Configuration
========================================

All tunables of the simulation live on one ``LayoutParams`` dataclass.
Values can be overridden from a JSON file whose sections mirror the
physical meaning of the constants:

    {
        "bounds":   {"width": 1200.0, "height": 800.0},
        "radius":   {"base": 60.0, "max": 180.0, "smoothing": 0.1},
        "dynamics": {"friction": 0.9, "centering_gain": 0.001,
                     "stiffness": 0.05, "overlap_allow": 0.8,
                     "collision_passes": 1},
        "timing":   {"tick_interval_s": 0.016666},
        "seed": null
    }

Missing keys fall back to the defaults below.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .errors import ConfigError


# =============================================================================
# PARAMETERS
# =============================================================================

@dataclass(frozen=True)
class LayoutParams:
    # ── Working rectangle ──
    width: float = 1200.0
    height: float = 800.0

    # ── Radius range ──
    base_radius: float = 60.0        # radius of an irrelevant item
    max_radius: float = 180.0        # radius of a perfect match
    radius_smoothing: float = 0.1    # alpha, fraction of the gap closed per tick

    # ── Dynamics ──
    friction: float = 0.9            # velocity multiplier per tick
    centering_gain: float = 0.001    # k_center, pull toward the rectangle midpoint
    stiffness: float = 0.05          # collision push per unit of overlap
    overlap_allow: float = 0.8       # fraction of r1 + r2 that counts as contact
    collision_passes: int = 1        # relaxation sweeps per tick

    # ── Scheduling ──
    tick_interval: float = 1.0 / 60.0  # seconds between ticks (real clock only)
    seed: Optional[int] = None

    @property
    def center(self):
        return self.width / 2.0, self.height / 2.0

    @property
    def radius_span(self) -> float:
        return self.max_radius - self.base_radius

    def validate(self) -> "LayoutParams":
        """Raise ConfigError on the first invalid value; return self otherwise."""
        for name in ("width", "height", "base_radius", "max_radius",
                     "radius_smoothing", "friction", "centering_gain",
                     "stiffness", "overlap_allow", "tick_interval"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigError(f"{name} must be a finite number, got {value!r}")

        if self.width <= 0 or self.height <= 0:
            raise ConfigError(
                f"bounds must be positive, got {self.width} x {self.height}")
        if self.base_radius <= 0:
            raise ConfigError(f"base_radius must be positive, got {self.base_radius}")
        if self.max_radius < self.base_radius:
            raise ConfigError(
                f"max_radius ({self.max_radius}) is smaller than "
                f"base_radius ({self.base_radius})")
        if not 0 < self.radius_smoothing <= 1:
            raise ConfigError(
                f"radius_smoothing must be in (0, 1], got {self.radius_smoothing}")
        if not 0 <= self.friction <= 1:
            raise ConfigError(f"friction must be in [0, 1], got {self.friction}")
        if self.centering_gain < 0:
            raise ConfigError(
                f"centering_gain must be non-negative, got {self.centering_gain}")
        if self.stiffness < 0:
            raise ConfigError(f"stiffness must be non-negative, got {self.stiffness}")
        if self.overlap_allow <= 0:
            raise ConfigError(
                f"overlap_allow must be positive, got {self.overlap_allow}")
        if not isinstance(self.collision_passes, int) or self.collision_passes < 1:
            raise ConfigError(
                f"collision_passes must be an integer >= 1, got {self.collision_passes!r}")
        if self.tick_interval <= 0:
            raise ConfigError(
                f"tick_interval must be positive, got {self.tick_interval}")
        if self.seed is not None and not isinstance(self.seed, int):
            raise ConfigError(f"seed must be an integer or null, got {self.seed!r}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# CONFIGURATION LOADER
# =============================================================================

DEFAULT_CONFIG: Dict[str, Any] = {
    "bounds": {"width": 1200.0, "height": 800.0},
    "radius": {"base": 60.0, "max": 180.0, "smoothing": 0.1},
    "dynamics": {
        "friction": 0.9, "centering_gain": 0.001,
        "stiffness": 0.05, "overlap_allow": 0.8, "collision_passes": 1,
    },
    "timing": {"tick_interval_s": 1.0 / 60.0},
    "seed": None,
}


def merge_defaults(cfg: Dict[str, Any], defs: Dict[str, Any]) -> Dict[str, Any]:
    """Fill missing keys of ``cfg`` from ``defs`` recursively, in place."""
    for key, value in defs.items():
        if key not in cfg:
            cfg[key] = json.loads(json.dumps(value))
        elif isinstance(value, dict) and isinstance(cfg[key], dict):
            merge_defaults(cfg[key], value)
    return cfg


def params_from_config(config: Dict[str, Any]) -> LayoutParams:
    """Build validated LayoutParams from a (possibly partial) nested config."""
    if not isinstance(config, dict):
        raise ConfigError(f"config must be a JSON object, got {type(config).__name__}")
    config = merge_defaults(dict(config), DEFAULT_CONFIG)

    try:
        bounds, radius = config["bounds"], config["radius"]
        dynamics, timing = config["dynamics"], config["timing"]
        params = LayoutParams(
            width=float(bounds["width"]),
            height=float(bounds["height"]),
            base_radius=float(radius["base"]),
            max_radius=float(radius["max"]),
            radius_smoothing=float(radius["smoothing"]),
            friction=float(dynamics["friction"]),
            centering_gain=float(dynamics["centering_gain"]),
            stiffness=float(dynamics["stiffness"]),
            overlap_allow=float(dynamics["overlap_allow"]),
            collision_passes=dynamics["collision_passes"],
            tick_interval=float(timing["tick_interval_s"]),
            seed=config["seed"],
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"malformed configuration: {exc}") from exc
    return params.validate()


def load_config(filepath: str) -> LayoutParams:
    """Load LayoutParams from a JSON file."""
    try:
        with open(filepath) as f:
            config = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{filepath}: invalid JSON ({exc})") from exc
    return params_from_config(config)
