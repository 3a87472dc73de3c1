"""
Colour Classifier – Nearest HSV Target
======================================

Maps a single HSV sample onto a ``CellSymbol``.

Rules, in order:
  1. Saturation below ``saturation_floor`` is background → ``none``.
  2. Weighted distance to every base target; hue is circular and
     dominates (default 20:1 against saturation / value).
  3. Minimum distance above ``reject_distance`` → ``none``.
  4. Bright, washed-out samples of a non-heart colour are the glossy
     "+" variant of that colour.

The classifier never raises on ambiguous input – the worst case is an
honest ``none``.
"""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from puyo_vision.config import HSV, ClassifierConfig
from puyo_vision.models.symbols import CellSymbol


class ColorClassifier:
    """Nearest-target lookup over a fixed colour table.

    Parameters
    ----------
    config : ClassifierConfig
        Targets, weights and thresholds.  Defaults are calibrated for
        OpenCV HSV (hue 0–179).
    """

    def __init__(self, config: ClassifierConfig | None = None) -> None:
        self.config = config or ClassifierConfig()
        self._targets: Tuple[Tuple[CellSymbol, HSV], ...] = tuple(
            (CellSymbol(name), target) for name, target in self.config.targets.items()
        )

    def hue_distance(self, h1: float, h2: float) -> float:
        """Circular hue difference over ``hue_range``."""
        diff = abs(h1 - h2) % self.config.hue_range
        return min(diff, self.config.hue_range - diff)

    def distance(self, sample: Sequence[float], target: Sequence[float]) -> float:
        cfg = self.config
        h, s, v = sample
        th, ts, tv = target
        return (
            self.hue_distance(h, th) * cfg.hue_weight
            + abs(s - ts) * cfg.sat_weight
            + abs(v - tv) * cfg.value_weight
        )

    def distances(self, sample: Sequence[float]) -> Dict[CellSymbol, float]:
        """Weighted distance from *sample* to every base target."""
        return {symbol: self.distance(sample, target) for symbol, target in self._targets}

    def classify(self, sample: Sequence[float]) -> CellSymbol:
        """Classify one ``(h, s, v)`` sample."""
        cfg = self.config
        h, s, v = sample

        if s < cfg.saturation_floor:
            return CellSymbol.NONE

        best = CellSymbol.NONE
        best_dist = float("inf")
        for symbol, target in self._targets:
            dist = self.distance(sample, target)
            if dist < best_dist:  # first target wins ties
                best, best_dist = symbol, dist

        if best_dist > cfg.reject_distance:
            return CellSymbol.NONE

        if (
            best is not CellSymbol.HEART
            and v >= cfg.plus_min_value
            and s <= cfg.plus_max_saturation
        ):
            return best.plus_variant()

        return best
