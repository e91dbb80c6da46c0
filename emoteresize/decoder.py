"""
Animated GIF decoding.

Turns a GIF byte stream into an ordered list of fully decoded RGBA
frames.  Pillow composites every frame onto the logical screen while
iterating, honouring the previous frame's disposal, so each ``Frame``
covers the whole canvas.  The frame's original sub-rectangle origin is
kept in ``x_offset`` / ``y_offset`` for reference.
"""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageSequence

from emoteresize.exceptions import MalformedAnimationError
from emoteresize.types import DisposalMethod, Frame

logger = logging.getLogger(__name__)

_DECODE_ERRORS = (OSError, EOFError, SyntaxError, ValueError, Image.DecompressionBombError)


def _disposal_of(frame: Image.Image) -> DisposalMethod:
    value = getattr(frame, "disposal_method", 0)
    try:
        return DisposalMethod(value)
    except ValueError:
        # Values 4-7 are reserved by GIF89a; treat them as unspecified.
        return DisposalMethod.UNSPECIFIED


def _offset_of(frame: Image.Image) -> tuple[int, int]:
    extent = getattr(frame, "dispose_extent", None)
    if extent is None:
        return (0, 0)
    return (extent[0], extent[1])


class AnimationDecoder:
    """Decode GIF bytes into ``Frame`` objects."""

    def decode(self, data: bytes) -> list[Frame]:
        """Parse *data* and return every frame in display order.

        Raises MalformedAnimationError if the stream is not a readable GIF.
        """
        try:
            with Image.open(io.BytesIO(data)) as im:
                if im.format != "GIF":
                    raise MalformedAnimationError(
                        f"Expected a GIF stream, got {im.format or 'unknown'}"
                    )
                frames = [self._decode_frame(f) for f in ImageSequence.Iterator(im)]
        except MalformedAnimationError:
            raise
        except _DECODE_ERRORS as exc:
            raise MalformedAnimationError(f"Cannot decode GIF: {exc}") from exc

        if not frames:
            raise MalformedAnimationError("GIF contains no frames")
        logger.debug(
            "Decoded %d frames at %dx%d", len(frames), frames[0].width, frames[0].height
        )
        return frames

    @staticmethod
    def _decode_frame(frame: Image.Image) -> Frame:
        x, y = _offset_of(frame)
        duration_ms = frame.info.get("duration", 0) or 0
        # convert() forces a full load of this frame's raster.
        rgba = frame.convert("RGBA")
        return Frame(
            pixels=rgba.tobytes(),
            width=rgba.width,
            height=rgba.height,
            x_offset=x,
            y_offset=y,
            delay_cs=max(0, round(duration_ms / 10)),
            disposal=_disposal_of(frame),
        )


def decode(data: bytes) -> list[Frame]:
    """Module-level convenience wrapper around ``AnimationDecoder.decode``."""
    return AnimationDecoder().decode(data)
