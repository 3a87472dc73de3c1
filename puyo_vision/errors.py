"""Exceptions raised by the recognition pipeline."""


class PuyoVisionError(Exception):
    """Base error for the recognition pipeline."""


class InvalidRasterError(PuyoVisionError, ValueError):
    """Raster has zero dimensions, the wrong dtype or channel count."""


class LocateError(PuyoVisionError):
    """No plausible board rectangle could be derived."""


class TemplateNotFoundError(LocateError):
    """Anchors scored below acceptance and the pixel heuristic failed too."""


class SampleOutOfBoundsError(PuyoVisionError, IndexError):
    """A sample point fell outside the raster (non-fatal, vote is skipped)."""


class RuntimeNotReadyError(PuyoVisionError, TimeoutError):
    """Anchor templates did not finish loading within the timeout."""
