"""
Cell Sampler – 3×3 Majority Vote
================================

A single pixel is a poor witness: anti-aliased edges, glossy highlights
and JPEG ringing all produce stray colours.  The sampler classifies a
fixed 3×3 grid of points around each cell centre and keeps the most
frequent non-empty category, provided it reaches the quorum.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from puyo_vision.config import SamplerConfig
from puyo_vision.errors import SampleOutOfBoundsError
from puyo_vision.models.color_classifier import ColorClassifier
from puyo_vision.models.raster import Raster
from puyo_vision.models.symbols import CellSymbol

log = logging.getLogger(__name__)

Point = Tuple[float, float]


class CellSampler:
    """Noise-tolerant cell classification built on ``ColorClassifier``."""

    def __init__(
        self,
        classifier: Optional[ColorClassifier] = None,
        config: Optional[SamplerConfig] = None,
    ) -> None:
        self.classifier = classifier or ColorClassifier()
        self.config = config or SamplerConfig()

    def sample_points(self, center: Point, radius: float) -> List[Tuple[int, int]]:
        """Pixel coordinates of the vote grid, row by row."""
        cx, cy = center
        step = radius / 1.5
        return [
            (int(round(cx + dx * step)), int(round(cy + dy * step)))
            for dy in self.config.grid
            for dx in self.config.grid
        ]

    def sample(self, raster: Raster, center: Point, radius: float) -> CellSymbol:
        """Classify the cell centred on *center*.

        Points that fall outside the raster are dropped from the tally;
        the quorum itself is absolute, not a fraction of the points that
        survived.
        """
        votes: Counter = Counter()
        for x, y in self.sample_points(center, radius):
            try:
                hsv = raster.hsv_at(x, y)
            except SampleOutOfBoundsError as exc:
                log.debug("Skipping sample: %s", exc)
                continue
            symbol = self.classifier.classify(hsv)
            if symbol is not CellSymbol.NONE:
                votes[symbol] += 1

        if not votes:
            return CellSymbol.NONE

        # most_common keeps first-seen order among equal counts
        winner, count = votes.most_common(1)[0]
        if count < self.config.quorum:
            return CellSymbol.NONE
        return winner

    def sample_many(
        self, raster: Raster, centers: Sequence[Point], radius: float,
    ) -> List[CellSymbol]:
        return [self.sample(raster, c, radius) for c in centers]
