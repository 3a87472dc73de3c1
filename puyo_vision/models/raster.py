"""
Raster – Read-Only Screenshot Buffer
====================================

Wraps a decoded screenshot in a read-only BGR array (OpenCV convention)
plus its HSV conversion, computed once.  Input validation happens here
so that every later stage can assume a well-formed 3-channel ``uint8``
image.
"""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from puyo_vision.config import HSV
from puyo_vision.errors import InvalidRasterError, SampleOutOfBoundsError

_TO_BGR = {
    "bgr": None,
    "rgb": cv2.COLOR_RGB2BGR,
    "bgra": cv2.COLOR_BGRA2BGR,
    "rgba": cv2.COLOR_RGBA2BGR,
}


class Raster:
    """Immutable screenshot with a precomputed HSV copy.

    Parameters
    ----------
    pixels : np.ndarray
        ``(H, W, 3)`` or ``(H, W, 4)`` ``uint8`` array.
    channel_order : str
        One of ``"bgr"``, ``"rgb"``, ``"bgra"``, ``"rgba"``.
    """

    def __init__(self, pixels: np.ndarray, channel_order: str = "bgr") -> None:
        order = channel_order.lower()
        if order not in _TO_BGR:
            raise InvalidRasterError(f"Unknown channel order: {channel_order!r}")
        _validate(pixels, channels=len(order))

        code = _TO_BGR[order]
        bgr = pixels.copy() if code is None else cv2.cvtColor(pixels, code)
        hsv = cv2.cvtColor(bgr, cv2.COLOR_BGR2HSV)
        bgr.setflags(write=False)
        hsv.setflags(write=False)

        self._bgr = bgr
        self._hsv = hsv

    @classmethod
    def coerce(cls, image: "Raster | np.ndarray") -> "Raster":
        """Accept a Raster as-is, or wrap a BGR / BGRA array."""
        if isinstance(image, Raster):
            return image
        if not isinstance(image, np.ndarray):
            raise InvalidRasterError(f"Expected ndarray, got {type(image).__name__}")
        order = "bgra" if image.ndim == 3 and image.shape[2] == 4 else "bgr"
        return cls(image, channel_order=order)

    @property
    def bgr(self) -> np.ndarray:
        return self._bgr

    @property
    def hsv(self) -> np.ndarray:
        return self._hsv

    @property
    def width(self) -> int:
        return int(self._bgr.shape[1])

    @property
    def height(self) -> int:
        return int(self._bgr.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def hsv_at(self, x: int, y: int) -> HSV:
        """HSV triple at pixel ``(x, y)``."""
        if not self.contains(x, y):
            raise SampleOutOfBoundsError(
                f"Sample ({x}, {y}) outside {self.width}x{self.height} raster"
            )
        h, s, v = self._hsv[y, x]
        return HSV(int(h), int(s), int(v))

    def __repr__(self) -> str:
        return f"Raster({self.width}x{self.height})"


def _validate(pixels: np.ndarray, channels: int) -> None:
    if not isinstance(pixels, np.ndarray):
        raise InvalidRasterError(f"Expected ndarray, got {type(pixels).__name__}")
    if pixels.dtype != np.uint8:
        raise InvalidRasterError(f"Expected uint8 pixels, got {pixels.dtype}")
    if pixels.ndim != 3 or pixels.shape[2] != channels:
        raise InvalidRasterError(
            f"Expected {channels} channels, got shape {pixels.shape}"
        )
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise InvalidRasterError(f"Raster has zero dimensions: {pixels.shape}")
