"""
Inference Pipeline – Screenshot → puyosim URL
=============================================

This is the single-call entry point for recognition.

Pipeline stages:
  1. Raster validation     – channel order, dtype, non-empty
  2. Anchor search         – multi-scale template matching (optional)
  3. Board location        – anchor offsets or pixel-scan fallback
  4. Cell classification   – 3×3 vote per board / queue cell
  5. Encoding              – 48-char board, 8-char queue, simulator URL

The pipeline keeps no per-request state, so a single instance can serve
concurrent calls.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from puyo_vision.config import DEFAULT_CONFIG, PipelineConfig
from puyo_vision.inference.encoding import (
    DEFAULT_OPTIONS,
    PUYOSIM_BASE_URL,
    ResultEncoder,
    build_url,
)
from puyo_vision.inference.runtime import AnchorLibrary
from puyo_vision.models.board_locator import BoardGeometry, BoardLocator
from puyo_vision.models.cell_sampler import CellSampler
from puyo_vision.models.color_classifier import ColorClassifier
from puyo_vision.models.raster import Raster
from puyo_vision.models.symbols import CellSymbol
from puyo_vision.models.template_matcher import Anchor, AnchorTemplate, TemplateMatcher

log = logging.getLogger(__name__)


# ── Result dataclass ──────────────────────────────────────────────────

@dataclass
class RecognitionResult:
    """Full output of the recognition pipeline."""
    board: str                                     # 48 chars, row-major
    queue: str                                     # 8 chars, left → right
    url: str                                       # puyosim link
    board_symbols: List[CellSymbol]
    queue_symbols: List[CellSymbol]
    geometry: BoardGeometry
    anchors: Dict[str, Anchor] = field(default_factory=dict)
    elapsed: float = 0.0                           # seconds

    @property
    def detection_method(self) -> str:
        return self.geometry.method


# ── Pipeline class ─────────────────────────────────────────────────────

class PuyoRecognitionPipeline:
    """End-to-end screenshot → board / queue strings.

    Parameters
    ----------
    templates : sequence of AnchorTemplate, optional
        Anchor references.  Without any, the pixel heuristic is used.
    config : PipelineConfig
        All thresholds and layout tables.
    library : AnchorLibrary, optional
        Background-loaded templates; waited on (bounded by
        *ready_timeout*) the first time they are needed.
    ready_timeout : float
        Seconds to wait for *library*.
    base_url, options : str
        URL prefix and option suffix for the simulator link.
    """

    def __init__(
        self,
        templates: Optional[Sequence[AnchorTemplate]] = None,
        config: PipelineConfig = DEFAULT_CONFIG,
        library: Optional[AnchorLibrary] = None,
        ready_timeout: float = 10.0,
        base_url: str = PUYOSIM_BASE_URL,
        options: str = DEFAULT_OPTIONS,
    ) -> None:
        if templates is not None and library is not None:
            raise ValueError("Pass either templates or library, not both")
        self.config = config
        self.library = library if library is not None else AnchorLibrary.from_templates(
            list(templates or []),
        )
        self.ready_timeout = ready_timeout
        self.base_url = base_url
        self.options = options

        self.matcher = TemplateMatcher(config.matcher)
        self.locator = BoardLocator(config.layout, config.heuristic)
        self.sampler = CellSampler(ColorClassifier(config.classifier), config.sampler)
        self.encoder = ResultEncoder()

        log.info(
            "Pipeline ready  anchors=%s  quorum=%d  accept=%.2f",
            "preloaded" if library is None else "async",
            config.sampler.quorum,
            config.matcher.accept_confidence,
        )

    # ── Public API ─────────────────────────────────────────────────────

    def recognize(self, image: Raster | np.ndarray) -> RecognitionResult:
        """Run the full pipeline on a screenshot.

        Parameters
        ----------
        image : Raster or np.ndarray
            ``Raster``, or a BGR / BGRA ``uint8`` array (OpenCV
            convention).

        Raises
        ------
        InvalidRasterError
            Malformed input, before any geometry work.
        TemplateNotFoundError / LocateError
            No plausible board rectangle.
        RuntimeNotReadyError
            Background template loading missed its deadline.
        """
        start = time.perf_counter()
        raster = Raster.coerce(image)

        # 1. Anchors
        templates = self.library.wait_ready(self.ready_timeout)
        anchors = self.matcher.match_all(raster, templates) if templates else {}

        # 2. Geometry
        geometry = self.locator.locate(raster, anchors)

        # 3. Classification
        board_symbols = self.sampler.sample_many(
            raster, geometry.cell_centers, geometry.cell_radius,
        )
        queue_symbols = self.sampler.sample_many(
            raster, geometry.queue_centers, geometry.queue_radius,
        )

        # 4. Encoding
        board = self.encoder.encode_board(board_symbols)
        queue = self.encoder.encode_queue(queue_symbols)
        url = build_url(queue, board, base_url=self.base_url, options=self.options)

        elapsed = time.perf_counter() - start
        log.info("Recognized %s via %s in %.3fs", raster, geometry.method, elapsed)

        return RecognitionResult(
            board=board,
            queue=queue,
            url=url,
            board_symbols=board_symbols,
            queue_symbols=queue_symbols,
            geometry=geometry,
            anchors=anchors,
            elapsed=elapsed,
        )
