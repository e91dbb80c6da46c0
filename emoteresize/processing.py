"""
Per-frame processing for animated output.

For each decoded frame:
    1. Materialize its pixels on a source canvas of the frame's own size
    2. Allocate a fully transparent target_size x target_size canvas
    3. Resample alpha-aware, with sharpening disabled
    4. Outline pass: force near-black pixels to a fixed dark grey

Resampling blends thin dark outlines into their lighter neighbours; the
outline pass pulls those pixels back to a solid near-black.  The
replacement value is 5 rather than 0 so encoders that key transparency
on pure black leave outlines alone.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

import numpy as np

from emoteresize.resample import ResampleFilter, ResizeOptions, check_buffer, resize
from emoteresize.types import Frame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutlineConfig:
    enabled: bool = True
    darkness_threshold: int = 10
    replacement_value: int = 5


def preserve_outlines(pixels, width, height, darkness_threshold=10, replacement_value=5):
    """Return a copy of an RGBA buffer with every pixel whose R, G and B
    are all below *darkness_threshold* set to *replacement_value*.

    Alpha is left untouched.
    """
    check_buffer(pixels, width, height)
    arr = np.frombuffer(pixels, dtype=np.uint8).reshape(height, width, 4).copy()
    dark = (arr[..., :3] < darkness_threshold).all(axis=2)
    arr[dark, :3] = replacement_value
    return arr.tobytes()


class FrameProcessor:
    """Resize single animation frames to square targets."""

    def __init__(self, outline: OutlineConfig = OutlineConfig(),
                 filter: ResampleFilter = ResampleFilter.LANCZOS) -> None:
        self.outline = outline
        self.options = ResizeOptions(
            filter=filter,
            alpha=True,
            unsharp_amount=0,
            unsharp_threshold=0,
        )

    def process(self, frame: Frame, target_size: int) -> bytes:
        """Return *frame* resized to an RGBA buffer of target_size x target_size."""
        check_buffer(frame.pixels, frame.width, frame.height)

        canvas = np.zeros((target_size, target_size, 4), dtype=np.uint8)
        resized = resize(
            frame.pixels, frame.width, frame.height,
            target_size, target_size, self.options,
        )
        canvas[...] = np.frombuffer(resized, dtype=np.uint8).reshape(
            target_size, target_size, 4)

        out = canvas.tobytes()
        if self.outline.enabled:
            out = preserve_outlines(
                out, target_size, target_size,
                darkness_threshold=self.outline.darkness_threshold,
                replacement_value=self.outline.replacement_value,
            )
        return out

    def process_frame(self, frame: Frame, target_size: int) -> Frame:
        """Like ``process`` but returns a new Frame keeping timing and disposal."""
        return dataclasses.replace(
            frame,
            pixels=self.process(frame, target_size),
            width=target_size,
            height=target_size,
            x_offset=0,
            y_offset=0,
        )

    def process_all(self, frames, target_size):
        processed = [self.process_frame(f, target_size) for f in frames]
        logger.debug("Processed %d frames at %dpx", len(processed), target_size)
        return processed
