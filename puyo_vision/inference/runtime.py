"""
Anchor Runtime – Load Templates Once, Wait with a Deadline
==========================================================

Anchor reference images are read from disk on a background thread.
Every caller shares the same ``Future``; ``wait_ready`` blocks for at
most *timeout* seconds and either returns the templates, re-raises the
loader's own error, or raises ``RuntimeNotReadyError``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Callable, List, Mapping, Optional

import cv2

from puyo_vision.errors import RuntimeNotReadyError
from puyo_vision.models.board_locator import ANCHOR_REGIONS
from puyo_vision.models.template_matcher import AnchorTemplate

log = logging.getLogger(__name__)

Loader = Callable[[Mapping[str, Path], int], List[AnchorTemplate]]


def load_templates(
    paths: Mapping[str, str | Path],
    baseline_width: int = 1080,
) -> List[AnchorTemplate]:
    """Read anchor images from disk.

    Parameters
    ----------
    paths : mapping
        Anchor name (``"menu"``, ``"queue_bar"``) → image path.
    baseline_width : int
        Width of the screenshot the crops were cut from.

    Raises
    ------
    FileNotFoundError
        A path is missing or not a readable image.
    """
    templates: List[AnchorTemplate] = []
    for name, path in paths.items():
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None:
            raise FileNotFoundError(f"Could not read anchor image: {path}")
        log.debug("Loaded anchor '%s' from %s (%s)", name, path, image.shape)
        templates.append(AnchorTemplate(
            name=name,
            image=image,
            baseline_width=baseline_width,
            region=ANCHOR_REGIONS.get(name),
        ))
    return templates


class AnchorLibrary:
    """Single-shot asynchronous template loader."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._future: Optional[Future] = None

    @classmethod
    def from_templates(cls, templates: List[AnchorTemplate]) -> "AnchorLibrary":
        """A library that is ready immediately."""
        library = cls()
        future: Future = Future()
        future.set_result(list(templates))
        library._future = future
        return library

    def load_async(
        self,
        paths: Mapping[str, str | Path],
        baseline_width: int = 1080,
        loader: Loader = load_templates,
    ) -> Future:
        """Start loading once; later calls return the same future."""
        with self._lock:
            if self._future is None:
                executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="anchor-loader")
                self._future = executor.submit(loader, dict(paths), baseline_width)
                executor.shutdown(wait=False)
                log.info("Loading %d anchor template(s) in background", len(paths))
            return self._future

    @property
    def started(self) -> bool:
        return self._future is not None

    def is_ready(self) -> bool:
        return self._future is not None and self._future.done()

    def wait_ready(self, timeout: float = 10.0) -> List[AnchorTemplate]:
        """Block until the templates are loaded.

        Raises
        ------
        RuntimeNotReadyError
            Loading was never started or did not finish within *timeout*.
        """
        future = self._future
        if future is None:
            raise RuntimeNotReadyError("Anchor loading was never started")
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            raise RuntimeNotReadyError(
                f"Anchor templates not ready after {timeout:.1f}s"
            ) from exc
