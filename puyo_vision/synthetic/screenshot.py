"""
Synthetic Screenshots – Reference-Layout Compositor
===================================================

Design philosophy:
  Real screenshots vary in resolution, but the game lays its UI out
  proportionally.  This module paints that layout at the 1080×1920
  reference resolution, scaled by any factor, from an encoded board and
  queue string:

    1. **Background** – near-neutral navy (classifies as empty).
    2. **Menu button** and **queue-bar tab** – the two anchors, pasted
       from deterministic procedurally-generated templates.
    3. **Status bar** – the orange band the pixel heuristic looks for.
    4. **Queue row** and **6×8 board** – one filled circle per cell on a
       grey frame.
    5. **JPEG round-trip** (optional) – compression artifacts via Pillow.

  Because every coordinate is derived from the reference layout, a
  screenshot rendered at scale 0.5 and one at 0.75 must decode to the
  same strings.
"""

from __future__ import annotations

import io
from typing import Iterable, List, Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from puyo_vision.config import COLOR_TARGETS, HSV
from puyo_vision.inference.encoding import decode_cells
from puyo_vision.models.board_locator import ANCHOR_REGIONS, PRIMARY_ANCHOR, SECONDARY_ANCHOR
from puyo_vision.models.symbols import BOARD_CELLS, QUEUE_LENGTH, CellSymbol
from puyo_vision.models.template_matcher import AnchorTemplate, resize_template

# ── Reference layout (1080 × 1920) ────────────────────────────────────

REFERENCE_SIZE: Tuple[int, int] = (1080, 1920)          # (width, height)
MENU_POS: Tuple[int, int] = (24, 40)
QUEUE_BAR_POS: Tuple[int, int] = (860, 985)
STATUS_BAR_ROWS: Tuple[int, int] = (940, 980)
BOARD_RECT: Tuple[int, int, int, int] = (28, 1120, 1052, 1888)  # x1, y1, x2, y2
CELL_SIZE: float = 128.0
QUEUE_HEIGHT_RATIO: float = 0.55
QUEUE_GAP_RATIO: float = 0.05
PIECE_RADIUS_RATIO: float = 0.42

BACKGROUND_BGR = (32, 30, 30)
FRAME_BGR = (96, 96, 96)
STATUS_BAR_HSV = HSV(15, 200, 180)

# Glossy "+" pieces: same hue, washed out and at full brightness
PLUS_SATURATION = 90
PLUS_VALUE = 255


# ── Anchor templates ──────────────────────────────────────────────────

def _block_noise(shape: Tuple[int, int], block: int, seed: int) -> np.ndarray:
    """Deterministic blocky texture so anchors survive downscaling."""
    rng = np.random.default_rng(seed)
    h, w = shape
    small = rng.integers(-45, 46, size=(h // block + 1, w // block + 1, 3))
    big = np.kron(small, np.ones((block, block, 1), dtype=small.dtype))
    return big[:h, :w].astype(np.int16)


def make_menu_template() -> np.ndarray:
    """The menu button: a framed brown tile with three white bars."""
    h, w = 60, 120
    base = np.full((h, w, 3), (40, 70, 110), dtype=np.int16)
    img = np.clip(base + _block_noise((h, w), 6, seed=7), 0, 255).astype(np.uint8)
    cv2.rectangle(img, (2, 2), (w - 3, h - 3), (235, 235, 235), 3)
    for y in (18, 30, 42):
        cv2.line(img, (30, y), (90, y), (250, 250, 250), 5)
    return img


def make_queue_bar_template() -> np.ndarray:
    """The queue-bar tab: a green gradient tile labelled NEXT."""
    h, w = 48, 160
    ramp = np.linspace(60, 160, w, dtype=np.float32)
    img = np.zeros((h, w, 3), dtype=np.int16)
    img[..., 1] = ramp.astype(np.int16)
    img[..., 0] = 40
    img[..., 2] = 30
    img = np.clip(img + _block_noise((h, w), 8, seed=11), 0, 255).astype(np.uint8)
    cv2.putText(img, "NEXT", (22, 36), cv2.FONT_HERSHEY_SIMPLEX, 1.1, (255, 255, 255), 3)
    return img


def default_templates(baseline_width: int = REFERENCE_SIZE[0]) -> List[AnchorTemplate]:
    """Both anchors, ready for ``TemplateMatcher``."""
    return [
        AnchorTemplate(PRIMARY_ANCHOR, make_menu_template(), baseline_width,
                       ANCHOR_REGIONS[PRIMARY_ANCHOR]),
        AnchorTemplate(SECONDARY_ANCHOR, make_queue_bar_template(), baseline_width,
                       ANCHOR_REGIONS[SECONDARY_ANCHOR]),
    ]


# ── Colours ───────────────────────────────────────────────────────────

def symbol_hsv(symbol: CellSymbol) -> Optional[HSV]:
    """Representative HSV for a symbol, or None for an empty cell."""
    if symbol is CellSymbol.NONE:
        return None
    if symbol.is_plus:
        base = COLOR_TARGETS[symbol.value[: -len("_plus")]]
        return HSV(base.h, PLUS_SATURATION, PLUS_VALUE)
    return COLOR_TARGETS[symbol.value]


def hsv_to_bgr(hsv: Iterable[float]) -> Tuple[int, int, int]:
    pixel = np.array([[list(hsv)]], dtype=np.uint8)
    b, g, r = cv2.cvtColor(pixel, cv2.COLOR_HSV2BGR)[0, 0]
    return int(b), int(g), int(r)


# ── Rendering ─────────────────────────────────────────────────────────

def _paste(canvas: np.ndarray, patch: np.ndarray, x: int, y: int) -> None:
    h, w = patch.shape[:2]
    canvas[y:y + h, x:x + w] = patch


def _piece(canvas: np.ndarray, symbol: CellSymbol, cx: float, cy: float, radius: float) -> None:
    hsv = symbol_hsv(symbol)
    if hsv is None:
        return
    cv2.circle(
        canvas, (int(round(cx)), int(round(cy))), int(round(radius)),
        hsv_to_bgr(hsv), thickness=-1, lineType=cv2.LINE_AA,
    )


def jpeg_roundtrip(image: np.ndarray, quality: int) -> np.ndarray:
    """Simulate lossy JPEG compression at *quality*."""
    rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    buffer = io.BytesIO()
    Image.fromarray(rgb).save(buffer, format="JPEG", quality=quality)
    buffer.seek(0)
    decoded = np.asarray(Image.open(buffer).convert("RGB"))
    return cv2.cvtColor(decoded, cv2.COLOR_RGB2BGR)


def render_screenshot(
    board: str,
    queue: str = "A" * QUEUE_LENGTH,
    scale: float = 1.0,
    anchors: Iterable[str] = (PRIMARY_ANCHOR, SECONDARY_ANCHOR),
    status_bar: bool = True,
    jpeg_quality: Optional[int] = None,
) -> np.ndarray:
    """Render a BGR screenshot of *board* / *queue* at *scale*.

    Parameters
    ----------
    board : str
        48 encoded cells, row-major.
    queue : str
        Up to 8 encoded queue cells.
    scale : float
        Output size relative to 1080×1920.
    anchors : iterable of str
        Which anchors to paint (``"menu"``, ``"queue_bar"``).
    status_bar : bool
        Paint the orange band the heuristic keys on.
    jpeg_quality : int, optional
        Round-trip through JPEG at this quality.
    """
    board_symbols = decode_cells(board)
    queue_symbols = decode_cells(queue)
    if len(board_symbols) != BOARD_CELLS:
        raise ValueError(f"Expected {BOARD_CELLS} board cells, got {len(board_symbols)}")
    if len(queue_symbols) > QUEUE_LENGTH:
        raise ValueError(f"Expected at most {QUEUE_LENGTH} queue cells, got {len(queue_symbols)}")

    def px(v: float) -> int:
        return int(round(v * scale))

    width, height = px(REFERENCE_SIZE[0]), px(REFERENCE_SIZE[1])
    canvas = np.empty((height, width, 3), dtype=np.uint8)
    canvas[:] = BACKGROUND_BGR

    anchors = set(anchors)
    if PRIMARY_ANCHOR in anchors:
        _paste(canvas, resize_template(make_menu_template(), scale), px(MENU_POS[0]), px(MENU_POS[1]))
    if SECONDARY_ANCHOR in anchors:
        _paste(canvas, resize_template(make_queue_bar_template(), scale),
               px(QUEUE_BAR_POS[0]), px(QUEUE_BAR_POS[1]))
    if status_bar:
        canvas[px(STATUS_BAR_ROWS[0]):px(STATUS_BAR_ROWS[1]), :] = hsv_to_bgr(STATUS_BAR_HSV)

    x1, y1, x2, y2 = (v * scale for v in BOARD_RECT)
    cell = CELL_SIZE * scale
    canvas[px(BOARD_RECT[1]):px(BOARD_RECT[3]), px(BOARD_RECT[0]):px(BOARD_RECT[2])] = FRAME_BGR

    for index, symbol in enumerate(board_symbols):
        row, col = divmod(index, 8)
        _piece(canvas, symbol, x1 + (col + 0.5) * cell, y1 + (row + 0.5) * cell,
               cell * PIECE_RADIUS_RATIO)

    queue_h = cell * QUEUE_HEIGHT_RATIO
    queue_cy = y1 - cell * QUEUE_GAP_RATIO - queue_h / 2.0
    queue_w = (x2 - x1) / QUEUE_LENGTH
    for i, symbol in enumerate(queue_symbols):
        _piece(canvas, symbol, x1 + (i + 0.5) * queue_w, queue_cy,
               min(queue_w, queue_h) * PIECE_RADIUS_RATIO)

    if jpeg_quality is not None:
        canvas = jpeg_roundtrip(canvas, jpeg_quality)
    return canvas
