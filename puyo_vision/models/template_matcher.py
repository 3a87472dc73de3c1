"""
Template Matcher – Multi-Scale Anchor Search
============================================

Finds a small reference image (an "anchor": the menu button, the queue
bar tab) inside a screenshot of unknown resolution.

Strategy:
  • The reference was cut from a screenshot ``baseline_width`` pixels
    wide, so the expected size at runtime is
    ``scale × image_width / baseline_width``.  A handful of relative
    ``scale`` candidates absorb device-specific UI scaling.
  • Each candidate is matched with ``cv2.TM_CCOEFF_NORMED`` inside an
    optional search region (given as image fractions).
  • The best candidate is replaced only by a *strictly* greater score,
    so ties resolve to the first scale tried.  Scanning stops once a
    near-perfect score is seen.
  • A best score below ``accept_confidence`` means "not found".
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import cv2
import numpy as np

from puyo_vision.config import MatcherConfig
from puyo_vision.models.raster import Raster

log = logging.getLogger(__name__)

# Fractions of the image: (top, bottom, left, right)
Region = Tuple[float, float, float, float]


# ── Data classes ───────────────────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class AnchorTemplate:
    """A reference image plus where and how to look for it."""
    name: str
    image: np.ndarray              # BGR reference crop
    baseline_width: int = 1080     # width of the screenshot it was cut from
    region: Optional[Region] = None

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])


@dataclass(frozen=True)
class Anchor:
    """Best match of one template."""
    name: str
    location: Tuple[int, int]      # top-left (x, y) in absolute pixels
    confidence: float              # TM_CCOEFF_NORMED score in [-1, 1]
    scale: float                   # pixels per reference pixel
    size: Tuple[int, int] = (0, 0)  # matched (width, height)
    found: bool = False

    @property
    def x(self) -> int:
        return self.location[0]

    @property
    def y(self) -> int:
        return self.location[1]


# ── Helpers ────────────────────────────────────────────────────────────

def resize_template(template: np.ndarray, factor: float) -> np.ndarray:
    """Resize *template* by *factor* using the interpolation OpenCV
    recommends for the direction (area for shrinking)."""
    h, w = template.shape[:2]
    new_w = max(1, int(round(w * factor)))
    new_h = max(1, int(round(h * factor)))
    if (new_w, new_h) == (w, h):
        return template
    interp = cv2.INTER_AREA if factor < 1.0 else cv2.INTER_LINEAR
    return cv2.resize(template, (new_w, new_h), interpolation=interp)


def region_bounds(
    region: Optional[Region], width: int, height: int,
) -> Tuple[int, int, int, int]:
    """Convert a fractional region into clamped ``(y1, y2, x1, x2)``."""
    if region is None:
        return 0, height, 0, width
    top, bottom, left, right = region
    y1 = max(0, int(np.floor(top * height)))
    y2 = min(height, int(np.ceil(bottom * height)))
    x1 = max(0, int(np.floor(left * width)))
    x2 = min(width, int(np.ceil(right * width)))
    return y1, y2, x1, x2


# ── Matcher ────────────────────────────────────────────────────────────

class TemplateMatcher:
    """Multi-scale, region-restricted normalised cross-correlation."""

    def __init__(self, config: Optional[MatcherConfig] = None) -> None:
        self.config = config or MatcherConfig()
        log.debug(
            "TemplateMatcher initialized: accept=%.2f scales=%s",
            self.config.accept_confidence, self.config.scales,
        )

    def find(
        self,
        raster: Raster,
        template: AnchorTemplate,
        region: Optional[Region] = None,
        scales: Optional[Iterable[float]] = None,
    ) -> Anchor:
        """Return the best match of *template* in *raster*.

        Parameters
        ----------
        raster : Raster
            Full screenshot.
        template : AnchorTemplate
            Reference image; its own ``region`` is used when *region*
            is not given.
        region : tuple, optional
            ``(top, bottom, left, right)`` image fractions to search.
        scales : iterable of float, optional
            Relative scale candidates; defaults to the configured list.

        Returns
        -------
        Anchor
            ``found`` is False when the best score is below
            ``accept_confidence`` (or no scale fitted the region).
        """
        cfg = self.config
        region = region if region is not None else template.region
        y1, y2, x1, x2 = region_bounds(region, raster.width, raster.height)
        search = raster.bgr[y1:y2, x1:x2]
        base_factor = raster.width / float(template.baseline_width)

        best = Anchor(
            name=template.name, location=(0, 0), confidence=-1.0,
            scale=base_factor, found=False,
        )

        for scale in (scales if scales is not None else cfg.scales):
            factor = scale * base_factor
            scaled = resize_template(template.image, factor)
            th, tw = scaled.shape[:2]

            if min(tw, th) < cfg.min_template_px:
                log.debug("%s: scale %.3f too small (%dx%d)", template.name, scale, tw, th)
                continue
            if th > search.shape[0] or tw > search.shape[1]:
                log.debug("%s: scale %.3f exceeds search region", template.name, scale)
                continue

            result = cv2.matchTemplate(search, scaled, cv2.TM_CCOEFF_NORMED)
            # Flat windows can produce non-finite scores
            result = np.nan_to_num(result, nan=-1.0, posinf=-1.0, neginf=-1.0)
            _, max_val, _, max_loc = cv2.minMaxLoc(result)
            max_val = float(max_val)

            log.debug("%s: scale %.3f → conf %.4f at %s", template.name, scale, max_val, max_loc)

            if max_val > best.confidence:
                best = Anchor(
                    name=template.name,
                    location=(int(max_loc[0]) + x1, int(max_loc[1]) + y1),
                    confidence=max_val,
                    scale=factor,
                    size=(tw, th),
                )

            if best.confidence >= cfg.early_stop_confidence:
                break

        found = best.confidence >= cfg.accept_confidence
        best = dataclasses.replace(best, found=found)

        if found:
            log.info(
                "Anchor '%s' found at %s  conf=%.3f  scale=%.3f",
                best.name, best.location, best.confidence, best.scale,
            )
        else:
            log.info("Anchor '%s' not found (best conf=%.3f)", best.name, best.confidence)
        return best

    def match_all(
        self, raster: Raster, templates: Iterable[AnchorTemplate],
    ) -> Dict[str, Anchor]:
        """Resolve several templates, each within its own region."""
        return {t.name: self.find(raster, t) for t in templates}
