"""
Batch resize pipeline.

Architecture
------------
``BatchPipeline.run`` resolves the platform profile once, classifies
every source once as static or animated, and launches one unit per
(source, size spec) pair:

    static:    decode --> resample --> re-encode in the source format
    animated:  decode (once per source) --> process each frame --> encode GIF

Units run concurrently on a ``ThreadPoolExecutor`` created for the
batch; Pillow and numpy release the GIL for the heavy work.  Units share
no mutable state: decoded frames are immutable and every unit allocates
its own buffers.

Error handling
--------------
There is no partial result.  The pipeline waits for every unit, then
raises the failure of the first failing unit in input order, tagged with
the source file name.  Nothing is retried.
"""

from __future__ import annotations

import asyncio
import dataclasses
import io
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Sequence

from PIL import Image

from emoteresize.config import PipelineConfig, resolve_worker_count
from emoteresize.decoder import AnimationDecoder
from emoteresize.encoder import AnimationEncoder
from emoteresize.exceptions import EmoteResizeError, UnsupportedFormatError
from emoteresize.processing import FrameProcessor
from emoteresize.profiles import resolve
from emoteresize.progress import ProgressReporter
from emoteresize.resample import resize
from emoteresize.types import (
    ANIMATED_MIME_TYPE,
    AnimatedImage,
    ClassifiedImage,
    DisposalMethod,
    Frame,
    ProcessedFile,
    ResultGroup,
    Role,
    SizeSpec,
    SourceImage,
    StaticImage,
    classify,
)

logger = logging.getLogger(__name__)

# MIME type -> Pillow format for the static path.
STATIC_FORMATS: dict[str, str] = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/webp": "WEBP",
    "image/bmp": "BMP",
    "image/tiff": "TIFF",
}

_LOSSY_FORMATS = {"JPEG", "WEBP"}
_OPAQUE_FORMATS = {"JPEG"}
_ALPHA_MODES = {"RGBA", "RGBa", "LA", "La", "PA"}


def output_name(source: SourceImage, size: int, extension: str) -> str:
    """``<base>_<W>x<H>.<ext>`` for a square output of *size* pixels."""
    return f"{source.base_name}_{size}x{size}.{extension}"


def _extension_for(mime_type: str) -> str:
    return mime_type.split("/")[-1].lower()


def _has_alpha(im: Image.Image) -> bool:
    return im.mode in _ALPHA_MODES or "transparency" in im.info


class BatchPipeline:
    """Resize a batch of images for one platform."""

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = config or PipelineConfig()
        self.decoder = AnimationDecoder()
        self.processor = FrameProcessor(self.config.outline)

    async def run(self, sources: Sequence[SourceImage], platform_id: str) -> list[ResultGroup]:
        """Resize every source to every size of *platform_id*.

        Returns one ResultGroup per role, emote first, files ordered by
        input then size.  Raises the first unit failure in input order.
        """
        profile = resolve(platform_id)
        classified = [classify(s) for s in sources]
        if not classified:
            return []

        roles = [role for role in Role if profile.specs_for(role)]
        units = [
            (i, role, spec)
            for i in range(len(classified))
            for role in roles
            for spec in profile.specs_for(role)
        ]
        workers = resolve_worker_count(self.config)
        logger.info(
            "Resizing %d image(s) for %s: %d unit(s) on %d worker(s).",
            len(classified), profile.platform_id, len(units), workers,
        )

        loop = asyncio.get_running_loop()
        progress = ProgressReporter(
            len(units), "Resizing", enabled=self.config.show_progress)
        executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="emoteresize")
        try:
            encoder = AnimationEncoder(self.config.gif, executor=executor)
            decoded = {
                i: loop.run_in_executor(executor, self.decoder.decode, item.source.data)
                for i, item in enumerate(classified)
                if isinstance(item, AnimatedImage)
            }
            outcomes = await asyncio.gather(
                *(
                    self._run_unit(classified[i], spec, decoded.get(i),
                                   encoder, executor, progress)
                    for i, _role, spec in units
                ),
                return_exceptions=True,
            )
        finally:
            executor.shutdown(wait=True)
            progress.close()

        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        groups = [
            ResultGroup(
                role=role,
                files=tuple(
                    result for (_, unit_role, _), result in zip(units, outcomes)
                    if unit_role is role
                ),
            )
            for role in roles
        ]
        logger.info(
            "Batch finished: %s.",
            ", ".join(f"{len(g.files)} {g.role.value}(s)" for g in groups),
        )
        return groups

    # -- units -------------------------------------------------------------

    async def _run_unit(
        self,
        item: ClassifiedImage,
        spec: SizeSpec,
        decoded: asyncio.Future | None,
        encoder: AnimationEncoder,
        executor: Executor,
        progress: ProgressReporter,
    ) -> ProcessedFile:
        source = item.source
        size = spec.target_size
        loop = asyncio.get_running_loop()
        try:
            if isinstance(item, StaticImage):
                result = await loop.run_in_executor(
                    executor, self.resize_static, source, size)
            else:
                frames = await decoded
                processed = await loop.run_in_executor(
                    executor, self.process_frames, frames, size)
                data = await encoder.encode(processed)
                result = ProcessedFile(
                    name=output_name(source, size, "gif"),
                    mime_type=ANIMATED_MIME_TYPE,
                    data=data,
                    width=size,
                    height=size,
                )
        except EmoteResizeError as exc:
            if exc.file_name is None:
                exc.file_name = source.name
            logger.warning("%s at %dpx failed: %s", source.name, size, exc.message)
            raise
        progress.update(suffix=f"{source.name} {size}px")
        return result

    def process_frames(self, frames: Sequence[Frame], size: int) -> list[Frame]:
        """Resize every frame; each output frame fully replaces the last.

        Decoded frames are full-canvas composites, so every processed
        frame is declared RESTORE_BACKGROUND and nothing from the
        previous frame shows through its transparent pixels.
        """
        return [
            dataclasses.replace(f, disposal=DisposalMethod.RESTORE_BACKGROUND)
            for f in self.processor.process_all(frames, size)
        ]

    def resize_static(self, source: SourceImage, size: int) -> ProcessedFile:
        """Resize a still image and re-encode it in its own format.

        Filter and sharpening come from ``config.static_resize``; its
        ``alpha`` field is ignored and taken from the source instead, so
        transparent images keep their alpha and opaque ones stay opaque.
        """
        fmt = STATIC_FORMATS.get(source.mime_type.lower())
        if fmt is None:
            raise UnsupportedFormatError(
                f"No static encoder for MIME type {source.mime_type!r}")

        try:
            with Image.open(io.BytesIO(source.data)) as im:
                im.load()
                has_alpha = _has_alpha(im)
                rgba = im.convert("RGBA")
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
            raise UnsupportedFormatError(
                f"Cannot decode {source.mime_type} image: {exc}") from exc

        options = dataclasses.replace(self.config.static_resize, alpha=has_alpha)
        pixels = resize(rgba.tobytes(), rgba.width, rgba.height, size, size, options)
        out = Image.frombytes("RGBA", (size, size), pixels)
        if fmt in _OPAQUE_FORMATS or not has_alpha:
            out = out.convert("RGB")

        save_kwargs = {"quality": self.config.static_quality} if fmt in _LOSSY_FORMATS else {}
        buf = io.BytesIO()
        try:
            out.save(buf, format=fmt, **save_kwargs)
        except (OSError, ValueError, KeyError) as exc:
            raise UnsupportedFormatError(f"Cannot encode {fmt}: {exc}") from exc

        return ProcessedFile(
            name=output_name(source, size, _extension_for(source.mime_type)),
            mime_type=source.mime_type,
            data=buf.getvalue(),
            width=size,
            height=size,
        )


def run_batch(
    sources: Sequence[SourceImage],
    platform_id: str,
    config: PipelineConfig | None = None,
) -> list[ResultGroup]:
    """Blocking wrapper around ``BatchPipeline.run``."""
    return asyncio.run(BatchPipeline(config).run(sources, platform_id))
