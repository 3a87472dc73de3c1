"""
Unit tests for multi-scale anchor matching.
"""

import logging

import pytest

from puyo_vision.config import MatcherConfig
from puyo_vision.models.template_matcher import (
    AnchorTemplate,
    TemplateMatcher,
    region_bounds,
    resize_template,
)
from puyo_vision.synthetic.screenshot import MENU_POS, QUEUE_BAR_POS


def _expected(pos, scale):
    return int(round(pos[0] * scale)), int(round(pos[1] * scale))


def _by_name(templates, name):
    return next(t for t in templates if t.name == name)


def test_menu_anchor_found_at_known_offset(raster_half, templates):
    anchor = TemplateMatcher().find(raster_half, _by_name(templates, "menu"))
    assert anchor.found
    assert anchor.location == _expected(MENU_POS, 0.5)
    assert anchor.scale == pytest.approx(0.5)
    assert anchor.confidence >= 0.99
    assert anchor.size == (60, 30)


def test_region_search_reports_absolute_coordinates(raster_half, templates):
    anchor = TemplateMatcher().find(raster_half, _by_name(templates, "queue_bar"))
    assert anchor.found
    assert anchor.location == _expected(QUEUE_BAR_POS, 0.5)


def test_match_is_deterministic(raster_half, templates):
    matcher = TemplateMatcher(MatcherConfig(early_stop_confidence=1.5))
    first = matcher.match_all(raster_half, templates)
    second = matcher.match_all(raster_half, templates)
    assert first == second


def test_best_scale_wins_when_scanning_everything(raster_half, templates):
    matcher = TemplateMatcher(MatcherConfig(early_stop_confidence=1.5))
    anchor = matcher.find(raster_half, _by_name(templates, "menu"), scales=(0.9, 1.1, 1.0))
    assert anchor.scale == pytest.approx(0.5)
    assert anchor.location == _expected(MENU_POS, 0.5)


def test_equal_confidence_keeps_first_scale(raster_half, templates):
    # Both candidates resize to the same pixels, so their scores tie
    menu = _by_name(templates, "menu")
    matcher = TemplateMatcher(MatcherConfig(early_stop_confidence=1.5))
    forward = matcher.find(raster_half, menu, scales=(1.0, 1.0 + 1e-9))
    backward = matcher.find(raster_half, menu, scales=(1.0 + 1e-9, 1.0))
    assert forward.confidence == backward.confidence
    assert forward.scale == 0.5
    assert backward.scale == 0.5 * (1.0 + 1e-9)


def test_missing_anchor_is_not_found(blank_raster, templates):
    anchor = TemplateMatcher().find(blank_raster, _by_name(templates, "menu"))
    assert not anchor.found
    assert anchor.confidence < MatcherConfig().accept_confidence


def test_template_larger_than_region_is_skipped(raster_half, templates):
    menu = _by_name(templates, "menu")
    anchor = TemplateMatcher().find(raster_half, menu, region=(0.0, 0.01, 0.0, 0.05))
    assert not anchor.found
    assert anchor.confidence == -1.0


def test_tiny_templates_are_skipped(raster_half, templates):
    menu = _by_name(templates, "menu")
    tiny = AnchorTemplate("menu", menu.image, baseline_width=100_000)
    anchor = TemplateMatcher().find(raster_half, tiny)
    assert not anchor.found


def test_region_bounds_clamps_to_image():
    assert region_bounds(None, 100, 200) == (0, 200, 0, 100)
    assert region_bounds((0.5, 1.2, -0.1, 0.25), 100, 200) == (100, 200, 0, 25)


def test_resize_template_identity_and_shrink(templates):
    image = _by_name(templates, "menu").image
    assert resize_template(image, 1.0) is image
    assert resize_template(image, 0.5).shape[:2] == (30, 60)


def test_invalid_scales_are_rejected():
    with pytest.raises(ValueError):
        MatcherConfig(scales=(1.0, 0.0))


def _scored_scales(caplog):
    return [r for r in caplog.records if "→ conf" in r.getMessage()]


def test_early_stop_after_confident_match(raster_half, templates, caplog):
    menu = _by_name(templates, "menu")
    with caplog.at_level(logging.DEBUG, logger="puyo_vision.models.template_matcher"):
        anchor = TemplateMatcher().find(raster_half, menu)
    assert anchor.confidence >= MatcherConfig().early_stop_confidence
    assert len(_scored_scales(caplog)) == 1


def test_every_scale_scored_without_early_stop(raster_half, templates, caplog):
    menu = _by_name(templates, "menu")
    matcher = TemplateMatcher(MatcherConfig(early_stop_confidence=1.5))
    with caplog.at_level(logging.DEBUG, logger="puyo_vision.models.template_matcher"):
        anchor = matcher.find(raster_half, menu)
    assert len(_scored_scales(caplog)) == len(MatcherConfig().scales)
    assert anchor.scale == pytest.approx(0.5)
