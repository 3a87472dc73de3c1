"""
Unit tests for background anchor loading.
"""

import threading

import cv2
import pytest

from puyo_vision.errors import RuntimeNotReadyError
from puyo_vision.inference.runtime import AnchorLibrary, load_templates
from puyo_vision.models.board_locator import ANCHOR_REGIONS
from puyo_vision.synthetic.screenshot import make_menu_template


def test_prebuilt_library_is_ready(templates):
    library = AnchorLibrary.from_templates(templates)
    assert library.started and library.is_ready()
    assert [t.name for t in library.wait_ready(0.1)] == [t.name for t in templates]


def test_wait_before_start_raises():
    library = AnchorLibrary()
    assert not library.started
    with pytest.raises(RuntimeNotReadyError):
        library.wait_ready(0.1)


def test_wait_times_out_then_recovers(templates):
    release = threading.Event()

    def slow_loader(paths, baseline_width):
        release.wait(5.0)
        return list(templates)

    library = AnchorLibrary()
    library.load_async({"menu": "unused.png"}, loader=slow_loader)
    with pytest.raises(RuntimeNotReadyError):
        library.wait_ready(timeout=0.05)
    assert not library.is_ready()

    release.set()
    assert len(library.wait_ready(timeout=5.0)) == len(templates)


def test_loading_starts_only_once():
    calls = []

    def loader(paths, baseline_width):
        calls.append(paths)
        return []

    library = AnchorLibrary()
    first = library.load_async({}, loader=loader)
    second = library.load_async({"menu": "other.png"}, loader=loader)
    assert first is second
    library.wait_ready(5.0)
    assert calls == [{}]


def test_load_templates_from_disk(tmp_path):
    path = tmp_path / "menu.png"
    cv2.imwrite(str(path), make_menu_template())
    (template,) = load_templates({"menu": path}, baseline_width=720)
    assert template.name == "menu"
    assert template.baseline_width == 720
    assert template.region == ANCHOR_REGIONS["menu"]
    assert template.image.shape == make_menu_template().shape


def test_loader_error_surfaces_from_wait(tmp_path):
    library = AnchorLibrary()
    library.load_async({"menu": tmp_path / "missing.png"})
    with pytest.raises(FileNotFoundError):
        library.wait_ready(5.0)
