"""
Shared fixtures for the emoteresize test suite.
"""

from __future__ import annotations

import io

import pytest
from PIL import Image

from emoteresize.types import DisposalMethod, Frame, SourceImage


@pytest.fixture
def opaque_png_bytes() -> bytes:
    """A 64x64 opaque PNG with a black outline around a red fill."""
    img = Image.new("RGB", (64, 64), (0, 0, 0))
    for x in range(4, 60):
        for y in range(4, 60):
            img.putpixel((x, y), (220, 40, 40))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def opaque_png(opaque_png_bytes) -> SourceImage:
    return SourceImage(data=opaque_png_bytes, mime_type="image/png", name="kappa.png")


@pytest.fixture
def sample_rgba_frame() -> Frame:
    """A 64x64 white frame with a 16x16 pure black square in the middle."""
    img = Image.new("RGBA", (64, 64), (255, 255, 255, 255))
    for x in range(24, 40):
        for y in range(24, 40):
            img.putpixel((x, y), (0, 0, 0, 255))
    return Frame(pixels=img.tobytes(), width=64, height=64, delay_cs=8,
                 disposal=DisposalMethod.NONE)


@pytest.fixture
def sample_frame_sequence() -> list[Frame]:
    """Six 40x40 frames: a dot moving across a transparent background."""
    frames = []
    for i in range(6):
        img = Image.new("RGBA", (40, 40), (0, 0, 0, 0))
        cx = 5 + i * 5
        for x in range(cx, cx + 6):
            for y in range(17, 23):
                img.putpixel((x, y), (30, 120, 220, 255))
        frames.append(Frame(pixels=img.tobytes(), width=40, height=40,
                            delay_cs=5 + i, disposal=DisposalMethod.RESTORE_BACKGROUND))
    return frames


@pytest.fixture
def animated_gif_bytes() -> bytes:
    """A 32x32, 3-frame GIF with a transparent background.

    A red square moves diagonally; delays are 5, 10 and 20 centiseconds.
    """
    palette = [255, 0, 255,   255, 255, 255,   0, 0, 0,   255, 0, 0]
    frames = []
    for i in range(3):
        img = Image.new("P", (32, 32), 0)
        img.putpalette(palette)
        start = 4 + i * 8
        for x in range(start, start + 8):
            for y in range(start, start + 8):
                img.putpixel((x, y), 3)
        frames.append(img)
    buf = io.BytesIO()
    frames[0].save(
        buf,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=[50, 100, 200],
        loop=0,
        transparency=0,
        disposal=2,
    )
    return buf.getvalue()


@pytest.fixture
def animated_gif(animated_gif_bytes) -> SourceImage:
    return SourceImage(data=animated_gif_bytes, mime_type="image/gif", name="dance.gif")
