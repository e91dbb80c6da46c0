"""
Animated GIF encoding.

Serializes a sequence of equally sized RGBA frames into a GIF89a byte
stream with a single global colour table.  Every frame is written
exactly as given: frame count, per-frame delay and disposal method are
preserved, and identical consecutive frames are *not* merged.

Palette generation is two-pass:

**Pass 1 -- Sampling:**
    Collect every ``quality``-th opaque pixel across all frames and
    median-cut the sample down to at most 255 colours.

**Pass 2 -- Remapping:**
    Map every frame onto that palette.  Pixels with alpha below
    ``alpha_threshold`` take the reserved transparent index.

Pillow does the quantization and the LZW compression; the block layout
(header, one graphic control extension and image descriptor per frame,
trailer) is assembled here so no frame is optimized away.
"""

from __future__ import annotations

import asyncio
import enum
import io
import logging
import math
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from PIL import GifImagePlugin, Image

from emoteresize.exceptions import EmoteResizeError, EncodingFailedError
from emoteresize.resample import check_buffer
from emoteresize.types import Frame

logger = logging.getLogger(__name__)

MAX_PALETTE_COLORS = 255        # One of the 256 slots is the transparent key.
MAX_DELAY_CS = 0xFFFF
_SAMPLE_STRIP_WIDTH = 1024


class DitherAlgorithm(enum.Enum):
    """Dithering used when remapping frames onto the global palette."""
    FLOYD_STEINBERG = "floyd_steinberg"
    NONE = "none"


_PIL_DITHER = {
    DitherAlgorithm.FLOYD_STEINBERG: Image.Dither.FLOYDSTEINBERG,
    DitherAlgorithm.NONE: Image.Dither.NONE,
}


@dataclass
class GifConfig:
    """GIF encoding options."""
    quality: int = 10               # Palette sample interval; 1 = every pixel
    loop: int = 0                   # 0 = infinite loop
    alpha_threshold: int = 128      # Alpha below this becomes transparent
    dither: DitherAlgorithm = DitherAlgorithm.NONE
    workers: int = 1                # Threads for per-frame remapping
    verify: bool = True             # Re-open the output and count frames


# ---------------------------------------------------------------------------
# Global palette
# ---------------------------------------------------------------------------

def generate_global_palette(
    frames: list[np.ndarray],
    quality: int = 10,
    alpha_threshold: int = 128,
) -> np.ndarray:
    """Build one palette shared by all *frames* (H x W x 4 uint8 arrays).

    Returns an ``(n, 3)`` uint8 array with ``1 <= n <= 255``.
    """
    opaque = np.concatenate(
        [f[..., :3][f[..., 3] >= alpha_threshold] for f in frames]
    )
    sample = opaque[::max(1, quality)]
    if len(sample) == 0:
        # Nothing visible anywhere; any single colour will do.
        return np.zeros((1, 3), dtype=np.uint8)

    # quantize() works on an image, so lay the sample out as a strip.
    width = min(len(sample), _SAMPLE_STRIP_WIDTH)
    height = math.ceil(len(sample) / width)
    strip = np.resize(sample, (height * width, 3)).reshape(height, width, 3)

    quantized = Image.fromarray(strip).quantize(
        colors=MAX_PALETTE_COLORS,
        method=Image.Quantize.MEDIANCUT,
        dither=Image.Dither.NONE,
    )
    used = int(np.asarray(quantized).max()) + 1
    flat = quantized.getpalette()[: used * 3]
    return np.array(flat, dtype=np.uint8).reshape(used, 3)


def _padded_palette(colors: np.ndarray, key_index: int | None = None) -> list[int]:
    """Expand *colors* to 256 entries.

    Spare slots repeat colour 0; the slot at *key_index* (if given) is
    the transparent key.
    """
    entries = [tuple(int(c) for c in row) for row in colors]
    filler = entries[0]
    while len(entries) < 256:
        entries.append(filler)
    if key_index is not None:
        entries[key_index] = (0, 0, 0)
    return [channel for entry in entries for channel in entry]


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------

class AnimationEncoder:
    """Encode processed frames into an animated GIF.

    ``encode`` is a coroutine: the blocking work runs in *executor*
    (the event loop's default executor when None) and the caller awaits
    a single result.
    """

    def __init__(self, config: GifConfig | None = None,
                 executor: Executor | None = None) -> None:
        self.config = config or GifConfig()
        self._executor = executor

    async def encode(self, frames: Sequence[Frame]) -> bytes:
        """Encode *frames* and return the GIF bytes.

        Raises EncodingFailedError on any failure.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.encode_blocking, list(frames))

    def encode_blocking(self, frames: Sequence[Frame]) -> bytes:
        """Synchronous core of ``encode``."""
        try:
            data = self._encode(list(frames))
        except EncodingFailedError:
            raise
        except (EmoteResizeError, OSError, ValueError) as exc:
            raise EncodingFailedError(f"GIF encoding failed: {exc}") from exc
        except Exception as exc:
            raise EncodingFailedError(f"Unexpected encoder fault: {exc!r}") from exc
        return data

    # -- internals ---------------------------------------------------------

    def _encode(self, frames: list[Frame]) -> bytes:
        cfg = self.config
        if not frames:
            raise EncodingFailedError("No frames to encode")

        size = frames[0].size
        for i, frame in enumerate(frames):
            if frame.size != size:
                raise EncodingFailedError(
                    f"Frame {i} is {frame.width}x{frame.height}, "
                    f"expected {size[0]}x{size[1]}"
                )
            check_buffer(frame.pixels, frame.width, frame.height)

        arrays = [
            np.frombuffer(f.pixels, dtype=np.uint8).reshape(f.height, f.width, 4)
            for f in frames
        ]

        colors = generate_global_palette(arrays, cfg.quality, cfg.alpha_threshold)
        n_colors = len(colors)
        key = n_colors                       # First free slot.
        remap_palette = Image.new("P", (1, 1))
        remap_palette.putpalette(_padded_palette(colors))
        final_palette = _padded_palette(colors, key_index=key)

        def remap(arr: np.ndarray) -> np.ndarray:
            rgb = Image.fromarray(np.ascontiguousarray(arr[..., :3]))
            q = rgb.quantize(palette=remap_palette, dither=_PIL_DITHER[cfg.dither])
            idx = np.array(q, dtype=np.uint8)
            idx[idx >= n_colors] = 0         # Filler slots all hold colour 0.
            idx[arr[..., 3] < cfg.alpha_threshold] = key
            return idx

        use_parallel = cfg.workers > 1 and len(arrays) > 4
        if use_parallel:
            with ThreadPoolExecutor(max_workers=cfg.workers) as pool:
                indexed = list(pool.map(remap, arrays))
        else:
            indexed = [remap(a) for a in arrays]

        data = self._serialize(indexed, frames, final_palette, key)

        if cfg.verify:
            self._verify(data, len(frames))
        logger.debug(
            "Encoded %d frames at %dx%d with %d palette colours (%d bytes)",
            len(frames), size[0], size[1], n_colors, len(data),
        )
        return data

    def _serialize(
        self,
        indexed: list[np.ndarray],
        frames: list[Frame],
        palette: list[int],
        key: int,
    ) -> bytes:
        width, height = frames[0].size
        images = []
        for idx in indexed:
            im = Image.frombytes("P", (width, height), idx.tobytes())
            im.putpalette(palette)
            images.append(im)

        info = {
            "loop": max(0, min(self.config.loop, 0xFFFF)),
            "background": key,
            "transparency": key,
            "optimize": False,
        }
        header, _ = GifImagePlugin.getheader(images[0], info=info)
        chunks: list[bytes] = list(header)
        for im, frame in zip(images, frames):
            delay_cs = min(frame.delay_cs, MAX_DELAY_CS)
            chunks.extend(GifImagePlugin.getdata(
                im,
                offset=(0, 0),
                duration=delay_cs * 10,      # Written back as centiseconds.
                disposal=int(frame.disposal),
                transparency=key,
            ))
        chunks.append(b";")                  # GIF trailer
        return b"".join(chunks)

    @staticmethod
    def _verify(data: bytes, expected_frames: int) -> None:
        with Image.open(io.BytesIO(data)) as im:
            count = getattr(im, "n_frames", 1)
        if count != expected_frames:
            raise EncodingFailedError(
                f"Encoded GIF has {count} frames, expected {expected_frames}"
            )
