"""Shared fixtures: synthetic screenshots, uniform colour patches, layouts."""

import cv2
import numpy as np
import pytest

from puyo_vision.models.color_classifier import ColorClassifier
from puyo_vision.models.raster import Raster
from puyo_vision.synthetic.screenshot import default_templates, render_screenshot

# Every symbol appears at least once; row 0 is empty, the rest mixed.
BOARD_LAYOUT = (
    "AAAAAAAA"
    "ABCDEFGA"
    "RSTUVAAB"
    "BBCCDDEE"
    "FFGGRRSS"
    "TTUUVVBC"
)
QUEUE_LAYOUT = "BCDEFGRS"


def uniform_hsv(hsv, size=(24, 24)):
    """BGR image filled with a single OpenCV HSV colour."""
    h, w = size
    patch = np.empty((h, w, 3), dtype=np.uint8)
    patch[:] = hsv
    return cv2.cvtColor(patch, cv2.COLOR_HSV2BGR)


@pytest.fixture
def board_layout():
    return BOARD_LAYOUT


@pytest.fixture
def queue_layout():
    return QUEUE_LAYOUT


@pytest.fixture
def classifier():
    return ColorClassifier()


@pytest.fixture(scope="session")
def templates():
    return default_templates()


@pytest.fixture(scope="session")
def screenshot_half():
    """Reference layout rendered at 540×960."""
    return render_screenshot(BOARD_LAYOUT, QUEUE_LAYOUT, scale=0.5)


@pytest.fixture(scope="session")
def raster_half(screenshot_half):
    return Raster(screenshot_half)


@pytest.fixture
def blank_raster():
    """Featureless navy screen: no anchors, no status bar, no board."""
    image = np.empty((960, 540, 3), dtype=np.uint8)
    image[:] = (32, 30, 30)
    return Raster(image)
