"""
Board Locator – Anchor Offsets primary + Pixel-Scan fallback
============================================================

Strategy (first plausible rectangle wins):

  • **Both anchors** – the menu button fixes the horizontal edges, the
    queue-bar tab (which sits just above the board) fixes the vertical
    ones.  Each edge is the anchor's pixel location plus a reference-
    pixel offset multiplied by the anchor's scale.
  • **Primary anchor only** – a separate offset table calibrated against
    the menu button alone gives all four edges.
  • **Pixel heuristic** – walk a few vertical scan-lines down the middle
    of the screen until one hits the orange status bar; the board top
    sits a fixed fraction of the image width below it.  The bottom is
    the last bright row found scanning upward along the centre line.
    Implausible heights are clamped to the width-derived 8:6 aspect.

Design notes:
  • ``locate`` is the single public entry point and dispatches
    automatically; it either returns a ``BoardGeometry`` or raises.
  • Scales outside ``(0, max_scale]`` are replaced by the image-width
    ratio instead of rejecting an otherwise good rectangle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from puyo_vision.config import HeuristicConfig, LayoutConfig, OffsetTable
from puyo_vision.errors import LocateError, TemplateNotFoundError
from puyo_vision.models.raster import Raster
from puyo_vision.models.template_matcher import Anchor, Region

log = logging.getLogger(__name__)

PRIMARY_ANCHOR = "menu"
SECONDARY_ANCHOR = "queue_bar"

# Where each anchor is searched for: (top, bottom, left, right) fractions
ANCHOR_REGIONS: Dict[str, Region] = {
    PRIMARY_ANCHOR: (0.0, 0.15, 0.0, 1.0),
    SECONDARY_ANCHOR: (0.4, 0.65, 0.0, 1.0),
}

Point = Tuple[float, float]


# ── Data classes ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class BoardRegion:
    """Board rectangle in absolute pixels plus the layout scale."""
    top: float
    bottom: float
    left: float
    right: float
    scale: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass(frozen=True)
class BoardGeometry:
    """Everything the sampler needs to read one screenshot."""
    region: BoardRegion
    cell_centers: List[Point]      # 48 centres, row-major
    cell_radius: float
    queue_centers: List[Point]     # left → right
    queue_radius: float
    method: str                    # "anchors" | "primary-anchor" | "heuristic"


# ── Locator ────────────────────────────────────────────────────────────

class BoardLocator:
    """Derive board and queue geometry from anchors or pixel evidence."""

    def __init__(
        self,
        layout: Optional[LayoutConfig] = None,
        heuristic: Optional[HeuristicConfig] = None,
    ) -> None:
        self.layout = layout or LayoutConfig()
        self.heuristic = heuristic or HeuristicConfig()

    # ── Public API ─────────────────────────────────────────────────────

    def locate(
        self,
        raster: Raster,
        anchors: Optional[Mapping[str, Anchor]] = None,
    ) -> BoardGeometry:
        """Locate the board in *raster*.

        Parameters
        ----------
        raster : Raster
            Full screenshot.
        anchors : mapping, optional
            Matcher output keyed by template name.  ``None`` (or empty)
            means no templates were supplied.

        Raises
        ------
        TemplateNotFoundError
            Templates were supplied but neither they nor the heuristic
            produced a plausible rectangle.
        LocateError
            No templates and the heuristic failed.
        """
        anchors = anchors or {}
        primary = anchors.get(PRIMARY_ANCHOR)
        secondary = anchors.get(SECONDARY_ANCHOR)

        if primary is not None and primary.found:
            if secondary is not None and secondary.found:
                region = self._from_both(raster, primary, secondary)
                if self._plausible(region, raster):
                    return self._geometry(region, "anchors")
                log.warning("Two-anchor rectangle implausible: %s", region)

            region = self._from_primary(raster, primary)
            if self._plausible(region, raster):
                return self._geometry(region, "primary-anchor")
            log.warning("Primary-anchor rectangle implausible: %s", region)

        region = self._from_heuristic(raster)
        if region is not None and self._plausible(region, raster):
            log.info("Board located via pixel heuristic")
            return self._geometry(region, "heuristic")

        if anchors:
            raise TemplateNotFoundError(
                "No anchor matched and the pixel heuristic found no board "
                f"in {raster.width}x{raster.height} image"
            )
        raise LocateError(
            f"Pixel heuristic found no board in {raster.width}x{raster.height} image"
        )

    # ── Anchor strategies ─────────────────────────────────────────────

    def _from_primary(self, raster: Raster, primary: Anchor) -> BoardRegion:
        off = self.layout.primary_offsets
        s = primary.scale
        return self._region(
            top=primary.y + off.top * s,
            bottom=primary.y + off.bottom * s,
            left=primary.x + off.left * s,
            right=primary.x + off.right * s,
            scale=s,
            image_width=raster.width,
        )

    def _from_both(
        self, raster: Raster, primary: Anchor, secondary: Anchor,
    ) -> BoardRegion:
        p_off: OffsetTable = self.layout.primary_offsets
        s_off: OffsetTable = self.layout.secondary_offsets
        return self._region(
            top=secondary.y + s_off.top * secondary.scale,
            bottom=secondary.y + s_off.bottom * secondary.scale,
            left=primary.x + p_off.left * primary.scale,
            right=primary.x + p_off.right * primary.scale,
            scale=(primary.scale + secondary.scale) / 2.0,
            image_width=raster.width,
        )

    # ── Pixel heuristic ───────────────────────────────────────────────

    def _from_heuristic(self, raster: Raster) -> Optional[BoardRegion]:
        cfg = self.heuristic
        w = raster.width

        band_row = self._find_status_band(raster)
        if band_row is None:
            log.info("Heuristic: no status bar found between %.0f%% and %.0f%%",
                     cfg.scan_start * 100, cfg.scan_end * 100)
            return None

        top = band_row + cfg.status_bar_offset_ratio * w
        left = cfg.left_ratio * w
        right = cfg.right_ratio * w

        bottom_row = self._find_bottom(raster, start_row=int(top))
        if bottom_row is None:
            log.info("Heuristic: no bright row below y=%d", int(top))
            return None
        bottom = float(bottom_row + 1)

        expected = (right - left) * self.layout.rows / self.layout.cols
        height = bottom - top
        if expected > 0 and abs(height - expected) / expected > cfg.height_tolerance:
            log.info("Heuristic: height %.1f clamped to expected %.1f", height, expected)
            bottom = top + expected
            height = expected

        scale = height / self.layout.reference_board_height
        if not cfg.min_scale_ratio <= scale <= cfg.max_scale_ratio:
            log.info("Heuristic: scale %.3f out of range, using width ratio", scale)
            scale = w / float(self.layout.baseline_width)

        return self._region(top, bottom, left, right, scale, image_width=w)

    def _find_status_band(self, raster: Raster) -> Optional[int]:
        """First row (top-down) where any scan-line hits the status bar."""
        cfg = self.heuristic
        w, h = raster.width, raster.height
        y1 = int(h * cfg.scan_start)
        y2 = int(h * cfg.scan_end)
        if y2 <= y1:
            return None

        cols = sorted({min(w - 1, int(w * f)) for f in cfg.scan_columns})
        strip = raster.hsv[y1:y2, cols].astype(np.int32)   # (rows, n_cols, 3)
        hue, sat, val = strip[..., 0], strip[..., 1], strip[..., 2]
        hit = (
            (hue >= cfg.status_hue[0]) & (hue <= cfg.status_hue[1])
            & (sat >= cfg.status_min_saturation)
            & (val >= cfg.status_value[0]) & (val <= cfg.status_value[1])
        )
        rows = np.where(hit.any(axis=1))[0]
        if len(rows) == 0:
            return None
        return y1 + int(rows[0])

    def _find_bottom(self, raster: Raster, start_row: int) -> Optional[int]:
        """Last bright row on the centre line, scanning up from the bottom."""
        cx = raster.width // 2
        column = raster.hsv[:, cx, 2]
        bright = np.where(column > self.heuristic.bottom_brightness)[0]
        bright = bright[bright > start_row]
        if len(bright) == 0:
            return None
        return int(bright[-1])

    # ── Geometry helpers ──────────────────────────────────────────────

    def _region(
        self,
        top: float,
        bottom: float,
        left: float,
        right: float,
        scale: float,
        image_width: int,
    ) -> BoardRegion:
        if not 0 < scale <= self.layout.max_scale:
            fallback = image_width / float(self.layout.baseline_width)
            log.info("Scale %.3f rejected, re-derived from width: %.3f", scale, fallback)
            scale = fallback
        return BoardRegion(top=top, bottom=bottom, left=left, right=right, scale=scale)

    def _plausible(self, region: BoardRegion, raster: Raster) -> bool:
        layout = self.layout
        if region.right <= region.left or region.bottom <= region.top:
            return False
        cell_w = region.width / layout.cols
        cell_h = region.height / layout.rows
        if cell_w < layout.min_cell_px or cell_h < layout.min_cell_px:
            return False
        # Allow one cell of overshoot on each side
        return (
            region.left >= -cell_w
            and region.top >= -cell_h
            and region.right <= raster.width + cell_w
            and region.bottom <= raster.height + cell_h
        )

    def _geometry(self, region: BoardRegion, method: str) -> BoardGeometry:
        layout = self.layout
        cell_w = region.width / layout.cols
        cell_h = region.height / layout.rows

        centers: List[Point] = [
            (region.left + (col + 0.5) * cell_w, region.top + (row + 0.5) * cell_h)
            for row in range(layout.rows)
            for col in range(layout.cols)
        ]

        queue_h = cell_h * layout.queue_height_ratio
        queue_cy = region.top - cell_h * layout.queue_gap_ratio - queue_h / 2.0
        queue_w = region.width / layout.queue_cells
        queue_centers: List[Point] = [
            (region.left + (i + 0.5) * queue_w, queue_cy)
            for i in range(layout.queue_cells)
        ]

        log.info(
            "Board via %s: top=%.1f bottom=%.1f left=%.1f right=%.1f scale=%.3f",
            method, region.top, region.bottom, region.left, region.right, region.scale,
        )
        return BoardGeometry(
            region=region,
            cell_centers=centers,
            cell_radius=cell_w * layout.sample_radius_ratio,
            queue_centers=queue_centers,
            queue_radius=min(queue_w, queue_h) * layout.sample_radius_ratio,
            method=method,
        )
