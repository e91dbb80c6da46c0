"""
Tests for per-frame processing and the outline pass.
"""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from emoteresize.exceptions import UnsupportedFormatError
from emoteresize.processing import FrameProcessor, OutlineConfig, preserve_outlines
from emoteresize.types import DisposalMethod, Frame


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _as_array(buf: bytes, size: int) -> np.ndarray:
    return np.frombuffer(buf, dtype=np.uint8).reshape(size, size, 4)


def _outlined_frame(size: int = 64) -> Frame:
    """Opaque white frame with a thick black bar down the middle."""
    img = Image.new("RGBA", (size, size), (255, 255, 255, 255))
    for x in range(size // 2 - 8, size // 2 + 8):
        for y in range(size):
            img.putpixel((x, y), (0, 0, 0, 255))
    return Frame(pixels=img.tobytes(), width=size, height=size, delay_cs=4)


def _thin_ring_frame(size: int = 64, width: int = 2) -> Frame:
    """Opaque white frame with a *width*-px black square outline."""
    img = Image.new("RGBA", (size, size), (255, 255, 255, 255))
    lo, hi = 16, size - 16
    for x in range(lo, hi):
        for y in range(lo, hi):
            if x < lo + width or x >= hi - width or y < lo + width or y >= hi - width:
                img.putpixel((x, y), (0, 0, 0, 255))
    return Frame(pixels=img.tobytes(), width=size, height=size)


def _outline_mask(out: np.ndarray) -> np.ndarray:
    return (
        (out[..., 0] == out[..., 1])
        & (out[..., 1] == out[..., 2])
        & (out[..., 0] <= 5)
        & (out[..., 3] == 255)
    )


# ---------------------------------------------------------------------------
# preserve_outlines
# ---------------------------------------------------------------------------

class TestPreserveOutlines:
    def test_near_black_becomes_replacement(self):
        buf = bytes([3, 7, 9, 200])
        assert preserve_outlines(buf, 1, 1) == bytes([5, 5, 5, 200])

    def test_threshold_is_exclusive(self):
        # One channel at exactly 10 keeps the pixel out of the pass.
        buf = bytes([10, 0, 0, 255])
        assert preserve_outlines(buf, 1, 1) == buf

    def test_pure_black_is_lifted(self):
        assert preserve_outlines(bytes([0, 0, 0, 255]), 1, 1) == bytes([5, 5, 5, 255])

    def test_bright_pixels_untouched(self):
        buf = bytes([120, 40, 200, 255, 255, 255, 255, 0])
        assert preserve_outlines(buf, 2, 1) == buf

    def test_custom_values(self):
        out = preserve_outlines(bytes([20, 20, 20, 255]), 1, 1,
                                darkness_threshold=30, replacement_value=1)
        assert out == bytes([1, 1, 1, 255])

    def test_bad_buffer(self):
        with pytest.raises(UnsupportedFormatError):
            preserve_outlines(b"\0" * 7, 1, 2)


# ---------------------------------------------------------------------------
# FrameProcessor
# ---------------------------------------------------------------------------

class TestFrameProcessor:
    @pytest.mark.parametrize("target", [1, 18, 28, 32, 112, 128])
    def test_output_size(self, sample_rgba_frame, target):
        out = FrameProcessor().process(sample_rgba_frame, target)
        assert len(out) == target * target * 4

    def test_outline_survives_downscale(self):
        out = _as_array(FrameProcessor().process(_outlined_frame(), 28), 28)
        assert _outline_mask(out).any()

    @pytest.mark.parametrize("target", [112, 128])
    def test_thin_outline_survives_upscale(self, target):
        out = _as_array(FrameProcessor().process(_thin_ring_frame(), target), target)
        mask = _outline_mask(out)
        assert mask.any()
        # Every side of the ring keeps a solid dark run along its middle.
        mid = target // 2
        assert mask[mid, : target // 2].any()
        assert mask[mid, target // 2:].any()
        assert mask[: target // 2, mid].any()
        assert mask[target // 2:, mid].any()

    def test_no_pixel_left_below_threshold(self):
        out = _as_array(FrameProcessor().process(_outlined_frame(), 28), 28)
        rgb = out[..., :3]
        dark = (rgb < 10).all(axis=2)
        assert dark.any()
        assert (rgb[dark] == 5).all()

    def test_outline_pass_can_be_disabled(self, sample_rgba_frame):
        processor = FrameProcessor(OutlineConfig(enabled=False))
        out = _as_array(processor.process(sample_rgba_frame, 64), 64)
        assert tuple(out[32, 32]) == (0, 0, 0, 255)

    def test_transparent_input_stays_transparent(self):
        frame = Frame(pixels=bytes(40 * 40 * 4), width=40, height=40)
        out = _as_array(FrameProcessor().process(frame, 18), 18)
        assert (out[..., 3] == 0).all()

    def test_mismatched_buffer_raises(self):
        frame = Frame(pixels=bytes(10), width=4, height=4)
        with pytest.raises(UnsupportedFormatError):
            FrameProcessor().process(frame, 28)

    def test_process_frame_keeps_timing(self, sample_rgba_frame):
        out = FrameProcessor().process_frame(sample_rgba_frame, 32)
        assert out.size == (32, 32)
        assert out.delay_cs == 8
        assert out.disposal == DisposalMethod.NONE
        assert (out.x_offset, out.y_offset) == (0, 0)

    def test_process_all_keeps_order(self, sample_frame_sequence):
        out = FrameProcessor().process_all(sample_frame_sequence, 20)
        assert len(out) == len(sample_frame_sequence)
        assert [f.delay_cs for f in out] == [5, 6, 7, 8, 9, 10]
        assert all(f.size == (20, 20) for f in out)
