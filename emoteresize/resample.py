"""
High-quality resize of raw RGBA pixel buffers.

Buffers are plain ``bytes`` in row-major RGBA order.  Scaling is done
independently in each axis, so the output always has exactly the
requested dimensions regardless of the source aspect ratio.

In alpha-aware mode Pillow resamples RGBA through premultiplied ``RGBa``,
so fully transparent pixels contribute no colour to their neighbours.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from PIL import Image, ImageFilter

from emoteresize.exceptions import UnsupportedFormatError

logger = logging.getLogger(__name__)


class ResampleFilter(enum.Enum):
    """Resampling kernels, fastest to sharpest."""
    BOX = "box"
    HAMMING = "hamming"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    LANCZOS = "lanczos"


_PIL_FILTERS = {
    ResampleFilter.BOX: Image.Resampling.BOX,
    ResampleFilter.HAMMING: Image.Resampling.HAMMING,
    ResampleFilter.BILINEAR: Image.Resampling.BILINEAR,
    ResampleFilter.BICUBIC: Image.Resampling.BICUBIC,
    ResampleFilter.LANCZOS: Image.Resampling.LANCZOS,
}


@dataclass(frozen=True)
class ResizeOptions:
    filter: ResampleFilter = ResampleFilter.LANCZOS
    alpha: bool = False            # Resample the alpha channel (premultiplied)
    unsharp_amount: int = 0        # Percent; 0 disables sharpening
    unsharp_radius: float = 0.6
    unsharp_threshold: int = 0


def check_buffer(pixels: bytes, width: int, height: int) -> None:
    """Raise UnsupportedFormatError unless *pixels* is a w x h RGBA buffer."""
    if width <= 0 or height <= 0:
        raise UnsupportedFormatError(
            f"Dimensions must be positive, got {width}x{height}"
        )
    expected = width * height * 4
    if len(pixels) != expected:
        raise UnsupportedFormatError(
            f"Pixel buffer holds {len(pixels)} bytes, "
            f"expected {expected} for {width}x{height} RGBA"
        )


def _sharpen(img: Image.Image, options: ResizeOptions) -> Image.Image:
    unsharp = ImageFilter.UnsharpMask(
        radius=options.unsharp_radius,
        percent=options.unsharp_amount,
        threshold=options.unsharp_threshold,
    )
    alpha = img.getchannel("A")
    sharpened = img.convert("RGB").filter(unsharp)
    sharpened.putalpha(alpha)
    return sharpened


def resize_image(
    img: Image.Image,
    target_width: int,
    target_height: int,
    options: ResizeOptions = ResizeOptions(),
) -> Image.Image:
    """Resize an RGBA Pillow image; always returns RGBA."""
    if target_width <= 0 or target_height <= 0:
        raise UnsupportedFormatError(
            f"Target dimensions must be positive, got {target_width}x{target_height}"
        )
    resample = _PIL_FILTERS[options.filter]
    if options.alpha:
        out = img.convert("RGBA").resize((target_width, target_height), resample)
    else:
        out = img.convert("RGB").resize((target_width, target_height), resample)
        out = out.convert("RGBA")
    if options.unsharp_amount > 0:
        out = _sharpen(out, options)
    return out


def resize(
    pixels: bytes,
    source_width: int,
    source_height: int,
    target_width: int,
    target_height: int,
    options: ResizeOptions = ResizeOptions(),
) -> bytes:
    """Resize an RGBA buffer to ``target_width x target_height``.

    Raises UnsupportedFormatError if the buffer does not match the
    declared source dimensions.
    """
    check_buffer(pixels, source_width, source_height)
    src = Image.frombytes("RGBA", (source_width, source_height), bytes(pixels))
    out = resize_image(src, target_width, target_height, options)
    logger.debug(
        "Resized %dx%d -> %dx%d (filter=%s, alpha=%s)",
        source_width, source_height, target_width, target_height,
        options.filter.value, options.alpha,
    )
    return out.tobytes()
