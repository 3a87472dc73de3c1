"""
Unit tests for configuration defaults and JSON overrides.
"""

import dataclasses
import json

import pytest

from puyo_vision.config import (
    DEFAULT_CONFIG,
    HSV,
    OffsetTable,
    SamplerConfig,
    apply_overrides,
    load_config,
)


def test_defaults_are_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.sampler.quorum = 5
    with pytest.raises(TypeError):
        DEFAULT_CONFIG.classifier.targets["red"] = HSV(1, 1, 1)


def test_overrides_return_a_copy():
    config = apply_overrides(DEFAULT_CONFIG, {"sampler": {"quorum": 5}})
    assert config.sampler.quorum == 5
    assert DEFAULT_CONFIG.sampler.quorum == 3
    assert config.classifier is DEFAULT_CONFIG.classifier


@pytest.mark.parametrize("overrides", [
    {"camera": {"fps": 30}},
    {"sampler": {"votes": 5}},
])
def test_unknown_names_are_rejected(overrides):
    with pytest.raises(ValueError):
        apply_overrides(DEFAULT_CONFIG, overrides)


def test_invalid_values_are_rejected():
    with pytest.raises(ValueError):
        apply_overrides(DEFAULT_CONFIG, {"sampler": {"quorum": 0}})
    with pytest.raises(ValueError):
        SamplerConfig(quorum=10)


@pytest.mark.parametrize("name", ["none", "red_plus", "cyan"])
def test_targets_must_be_base_colours(name):
    with pytest.raises(ValueError):
        apply_overrides(DEFAULT_CONFIG, {"classifier": {"targets": {"red": [0, 210, 235], name: [0, 100, 250]}}})


def test_section_must_be_an_object():
    with pytest.raises(ValueError):
        apply_overrides(DEFAULT_CONFIG, {"sampler": 3})
    with pytest.raises(ValueError):
        apply_overrides(DEFAULT_CONFIG, {"__class__": {}})


def test_load_config_restores_native_types(tmp_path):
    path = tmp_path / "tuning.json"
    path.write_text(json.dumps({
        "classifier": {"reject_distance": 80, "targets": {"red": [2, 200, 230]}},
        "matcher": {"scales": [1.0, 0.9]},
        "layout": {"primary_offsets": {"top": 1000, "bottom": 1768, "left": 4, "right": 1028}},
    }))
    config = load_config(path)
    assert config.classifier.reject_distance == 80
    assert dict(config.classifier.targets) == {"red": HSV(2, 200, 230)}
    assert config.matcher.scales == (1.0, 0.9)
    assert config.layout.primary_offsets == OffsetTable(1000, 1768, 4, 1028)


def test_load_config_requires_an_object(tmp_path):
    path = tmp_path / "tuning.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(path)
