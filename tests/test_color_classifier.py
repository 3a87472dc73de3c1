"""
Unit tests for the HSV colour classifier.

- exact targets classify as themselves (distance 0)
- grey / low saturation is always empty
- hue distance wraps around the hue range
- glossy "+" promotion and rejection of far-off colours
"""

import numpy as np
import pytest

from puyo_vision.config import COLOR_TARGETS, ClassifierConfig
from puyo_vision.models.color_classifier import ColorClassifier
from puyo_vision.models.raster import Raster
from puyo_vision.models.symbols import CellSymbol

from conftest import uniform_hsv


@pytest.mark.parametrize("name", list(COLOR_TARGETS))
def test_exact_target_has_zero_distance(classifier, name):
    target = COLOR_TARGETS[name]
    assert classifier.distances(target)[CellSymbol(name)] == 0
    assert classifier.classify(target) is CellSymbol(name)


@pytest.mark.parametrize("name", list(COLOR_TARGETS))
def test_uniform_raster_of_target_classifies_everywhere(classifier, name):
    raster = Raster(uniform_hsv(COLOR_TARGETS[name]))
    for y in range(2, 22, 5):
        for x in range(2, 22, 5):
            assert classifier.classify(raster.hsv_at(x, y)) is CellSymbol(name)


@pytest.mark.parametrize("value", [0, 40, 128, 200, 255])
def test_grey_raster_is_none(classifier, value):
    image = np.full((16, 16, 3), value, dtype=np.uint8)
    raster = Raster(image)
    assert classifier.classify(raster.hsv_at(8, 8)) is CellSymbol.NONE


def test_low_saturation_is_none_regardless_of_hue(classifier):
    for hue in (0, 27, 60, 112, 145, 165):
        assert classifier.classify((hue, 24, 235)) is CellSymbol.NONE


def test_hue_wraparound_is_symmetric(classifier):
    assert classifier.hue_distance(2, 0) == classifier.hue_distance(178, 0) == 2
    assert classifier.hue_distance(0, 178) == classifier.hue_distance(0, 2)
    near = classifier.distance((2, 200, 200), (0, 200, 200))
    far = classifier.distance((178, 200, 200), (0, 200, 200))
    assert near == far


def test_red_near_wraparound_is_red(classifier):
    assert classifier.classify((178, 210, 235)) is CellSymbol.RED
    assert classifier.classify((2, 210, 235)) is CellSymbol.RED


@pytest.mark.parametrize("name", ["red", "blue", "yellow", "green", "purple"])
def test_bright_washed_out_sample_is_plus_variant(classifier, name):
    hue = COLOR_TARGETS[name].h
    assert classifier.classify((hue, 90, 255)) is CellSymbol(f"{name}_plus")


def test_heart_is_never_promoted(classifier):
    assert classifier.classify((165, 100, 255)) is CellSymbol.HEART


def test_far_from_every_target_is_rejected(classifier):
    # Cyan sits between green (60) and blue (112)
    assert classifier.classify((88, 200, 220)) is CellSymbol.NONE


def test_reject_distance_is_configurable():
    lenient = ColorClassifier(ClassifierConfig(reject_distance=500))
    assert lenient.classify((88, 200, 220)) in (CellSymbol.GREEN, CellSymbol.BLUE)


def test_alternate_target_table():
    classifier = ColorClassifier(ClassifierConfig(targets={"red": (0, 200, 200)}))
    assert classifier.classify((0, 200, 200)) is CellSymbol.RED
    assert classifier.classify((60, 200, 200)) is CellSymbol.NONE


def test_empty_target_table_is_rejected():
    with pytest.raises(ValueError):
        ClassifierConfig(targets={})


def test_non_base_targets_are_rejected():
    # A "none" or "+" entry could be promoted, and promotion has no variant for them
    with pytest.raises(ValueError):
        ClassifierConfig(targets={**COLOR_TARGETS, "none": (0, 100, 250)})
    with pytest.raises(ValueError):
        ClassifierConfig(targets={"blue_plus": (112, 100, 250)})


def test_bright_samples_never_raise(classifier):
    for h in range(0, 180, 5):
        assert isinstance(classifier.classify((h, 100, 255)), CellSymbol)
