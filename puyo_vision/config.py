"""
Configuration – Immutable Tuning Tables
=======================================

Every empirical threshold of the recognition pipeline lives here as a
field on a frozen dataclass.  The defaults are calibrated against the
Puyo Puyo Quest portrait layout captured at a 1080 px wide reference
resolution; all geometry offsets are expressed in those reference
pixels and scaled at runtime.

Sections:
  • ``ClassifierConfig`` – colour targets, distance weights, rejection
  • ``SamplerConfig``    – 3×3 vote grid and quorum
  • ``MatcherConfig``    – anchor scales and confidence thresholds
  • ``LayoutConfig``     – anchor offset tables and queue geometry
  • ``HeuristicConfig``  – pixel-scan fallback parameters

``load_config`` applies per-section overrides from a JSON file.
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple, Tuple


class HSV(NamedTuple):
    """OpenCV-convention HSV triple (H 0–179, S/V 0–255)."""
    h: float
    s: float
    v: float


# ── Colour targets (base categories only; "+" variants are derived) ───

COLOR_TARGETS: Mapping[str, HSV] = MappingProxyType({
    "red":    HSV(0, 210, 235),
    "yellow": HSV(27, 200, 240),
    "green":  HSV(60, 190, 200),
    "blue":   HSV(112, 200, 230),
    "purple": HSV(145, 170, 210),
    "heart":  HSV(165, 120, 250),
})


@dataclass(frozen=True)
class ClassifierConfig:
    """Nearest-target colour classification."""
    targets: Mapping[str, HSV] = field(default_factory=lambda: COLOR_TARGETS)
    saturation_floor: float = 25.0     # below → always "none"
    hue_weight: float = 4.0
    sat_weight: float = 0.2
    value_weight: float = 0.2
    reject_distance: float = 60.0      # min distance above this → "none"
    hue_range: float = 180.0           # OpenCV hue wraps at 180
    plus_min_value: float = 245.0      # glossy "+" signature: bright …
    plus_max_saturation: float = 150.0  # … and washed out

    def __post_init__(self) -> None:
        if not self.targets:
            raise ValueError("Colour target table is empty")
        if self.hue_range <= 0:
            raise ValueError(f"hue_range must be positive, got {self.hue_range}")
        if min(self.hue_weight, self.sat_weight, self.value_weight) < 0:
            raise ValueError("Distance weights must be non-negative")
        unknown = sorted(set(self.targets) - set(COLOR_TARGETS))
        if unknown:
            raise ValueError(f"Targets must be base colours, got {unknown}")
        # Freeze whatever mapping the caller handed in
        frozen = MappingProxyType({k: HSV(*v) for k, v in self.targets.items()})
        object.__setattr__(self, "targets", frozen)


@dataclass(frozen=True)
class SamplerConfig:
    """Multi-point voting around each cell centre."""
    grid: Tuple[float, ...] = (-1.5, 0.0, 1.5)   # scaled by radius / 1.5
    quorum: int = 3

    def __post_init__(self) -> None:
        if self.quorum < 1:
            raise ValueError(f"quorum must be >= 1, got {self.quorum}")
        if self.quorum > len(self.grid) ** 2:
            raise ValueError(
                f"quorum {self.quorum} exceeds {len(self.grid) ** 2} samples"
            )


@dataclass(frozen=True)
class MatcherConfig:
    """Multi-scale anchor search."""
    # Nearest-first so the early stop usually fires on the first scale
    scales: Tuple[float, ...] = (1.0, 0.95, 1.05, 0.9, 1.1, 0.85, 1.15, 0.8, 1.2)
    accept_confidence: float = 0.6
    early_stop_confidence: float = 0.99
    min_template_px: int = 8

    def __post_init__(self) -> None:
        if not self.scales or any(s <= 0 for s in self.scales):
            raise ValueError(f"scales must be positive, got {self.scales}")
        if not -1.0 <= self.accept_confidence <= 1.0:
            raise ValueError("accept_confidence must lie in [-1, 1]")


@dataclass(frozen=True)
class OffsetTable:
    """Board edges relative to an anchor's top-left, in reference pixels."""
    top: float
    bottom: float
    left: float
    right: float


@dataclass(frozen=True)
class LayoutConfig:
    """Board / queue geometry at the reference resolution."""
    baseline_width: int = 1080
    rows: int = 6
    cols: int = 8
    # Primary anchor (menu button) sits at (24, 40); board spans
    # x 28–1052, y 1120–1888 at the reference resolution.
    primary_offsets: OffsetTable = OffsetTable(top=1080, bottom=1848, left=4, right=1028)
    # Queue-bar control sits at (860, 985)
    secondary_offsets: OffsetTable = OffsetTable(top=135, bottom=903, left=-832, right=192)
    reference_board_height: float = 768.0
    queue_cells: int = 8
    queue_height_ratio: float = 0.55
    queue_gap_ratio: float = 0.05
    sample_radius_ratio: float = 0.2
    max_scale: float = 10.0
    min_cell_px: float = 4.0

    def __post_init__(self) -> None:
        if self.rows < 1 or self.cols < 1:
            raise ValueError("rows and cols must be positive")
        if self.baseline_width <= 0:
            raise ValueError("baseline_width must be positive")


@dataclass(frozen=True)
class HeuristicConfig:
    """Pixel-scan fallback used when no anchor is available."""
    scan_start: float = 0.2
    scan_end: float = 0.8
    scan_columns: Tuple[float, ...] = (0.1, 0.3, 0.5, 0.7, 0.9)
    status_hue: Tuple[float, float] = (8.0, 22.0)
    status_min_saturation: float = 150.0
    status_value: Tuple[float, float] = (120.0, 230.0)
    status_bar_offset_ratio: float = 180.0 / 1080.0  # band top → board top
    left_ratio: float = 28.0 / 1080.0
    right_ratio: float = 1052.0 / 1080.0
    bottom_brightness: float = 70.0
    height_tolerance: float = 0.2
    min_scale_ratio: float = 0.3
    max_scale_ratio: float = 5.0


@dataclass(frozen=True)
class PipelineConfig:
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    matcher: MatcherConfig = field(default_factory=MatcherConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    heuristic: HeuristicConfig = field(default_factory=HeuristicConfig)


DEFAULT_CONFIG = PipelineConfig()


# ── Overrides ──────────────────────────────────────────────────────────

def _coerce(current: Any, value: Any) -> Any:
    """Convert JSON values back into the field's native shape."""
    if isinstance(current, OffsetTable):
        return OffsetTable(**value)
    if isinstance(current, tuple):
        return tuple(value)
    if isinstance(current, Mapping):
        return {name: HSV(*hsv) for name, hsv in value.items()}
    return value


def apply_overrides(
    config: PipelineConfig,
    overrides: Mapping[str, Mapping[str, Any]],
) -> PipelineConfig:
    """Return a copy of *config* with per-section fields replaced.

    Parameters
    ----------
    config : PipelineConfig
        Base configuration.
    overrides : mapping
        ``{"classifier": {"reject_distance": 80}, ...}``.

    Raises
    ------
    ValueError
        Unknown section or field name.
    """
    sections: Dict[str, Any] = {}
    section_names = {f.name for f in dataclasses.fields(config)}
    for section_name, values in overrides.items():
        if section_name not in section_names:
            raise ValueError(f"Unknown config section: {section_name!r}")
        if not isinstance(values, Mapping):
            raise ValueError(f"Config section {section_name!r} must be an object")
        section = getattr(config, section_name)
        known = {f.name for f in dataclasses.fields(section)}
        changes = {}
        for key, value in values.items():
            if key not in known:
                raise ValueError(f"Unknown field {section_name}.{key}")
            changes[key] = _coerce(getattr(section, key), value)
        sections[section_name] = dataclasses.replace(section, **changes)
    return dataclasses.replace(config, **sections)


def load_config(path: str | Path, base: PipelineConfig = DEFAULT_CONFIG) -> PipelineConfig:
    """Load a JSON override file on top of *base*."""
    with open(path, "r", encoding="utf-8") as fh:
        overrides = json.load(fh)
    if not isinstance(overrides, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return apply_overrides(base, overrides)
