"""
Unit tests for raster validation and pixel access.
"""

import cv2
import numpy as np
import pytest

from puyo_vision.errors import InvalidRasterError, SampleOutOfBoundsError
from puyo_vision.models.raster import Raster


def _image():
    image = np.zeros((4, 6, 3), dtype=np.uint8)
    image[1, 2] = (0, 0, 255)  # red in BGR
    return image


def test_hsv_is_precomputed():
    raster = Raster(_image())
    assert raster.shape == (4, 6)
    assert (raster.width, raster.height) == (6, 4)
    assert raster.hsv_at(2, 1) == (0, 255, 255)
    assert raster.hsv_at(0, 0) == (0, 0, 0)


def test_arrays_are_read_only_copies():
    image = _image()
    raster = Raster(image)
    image[1, 2] = 0
    assert raster.hsv_at(2, 1).v == 255
    with pytest.raises(ValueError):
        raster.bgr[0, 0] = 1


def test_out_of_bounds_access_raises():
    raster = Raster(_image())
    assert not raster.contains(6, 0)
    with pytest.raises(SampleOutOfBoundsError):
        raster.hsv_at(6, 0)
    with pytest.raises(IndexError):
        raster.hsv_at(0, -1)


def test_channel_orders():
    rgb = cv2.cvtColor(_image(), cv2.COLOR_BGR2RGB)
    assert Raster(rgb, "rgb").hsv_at(2, 1) == (0, 255, 255)
    bgra = cv2.cvtColor(_image(), cv2.COLOR_BGR2BGRA)
    assert Raster.coerce(bgra).hsv_at(2, 1) == (0, 255, 255)


def test_coerce_passes_rasters_through():
    raster = Raster(_image())
    assert Raster.coerce(raster) is raster
    with pytest.raises(InvalidRasterError):
        Raster.coerce([[0, 0, 0]])


@pytest.mark.parametrize("pixels, order", [
    (np.zeros((4, 6, 3), dtype=np.uint8), "hsv"),
    (np.zeros((4, 6, 3), dtype=np.uint8), "rgba"),
    (np.zeros((4, 0, 3), dtype=np.uint8), "bgr"),
    (np.zeros((4, 6), dtype=np.uint8), "bgr"),
    (np.zeros((4, 6, 3), dtype=np.uint16), "bgr"),
])
def test_invalid_input_is_rejected(pixels, order):
    with pytest.raises(InvalidRasterError):
        Raster(pixels, order)
