"""
Tests for the core data types and the error taxonomy.
"""

from __future__ import annotations

import dataclasses

import pytest

from emoteresize.exceptions import (
    EmoteResizeError,
    EncodingFailedError,
    MalformedAnimationError,
    UnknownPlatformError,
    UnsupportedFormatError,
)
from emoteresize.types import (
    AnimatedImage,
    DisposalMethod,
    Frame,
    ProcessedFile,
    SizeSpec,
    SourceImage,
    StaticImage,
    classify,
)


class TestSourceImage:
    def test_base_name_stops_at_first_dot(self):
        src = SourceImage(data=b"", mime_type="image/png", name="cat.v2.png")
        assert src.base_name == "cat"

    def test_base_name_without_extension(self):
        assert SourceImage(b"", "image/png", "README").base_name == "README"

    def test_from_path_guesses_mime(self, tmp_path, opaque_png_bytes):
        path = tmp_path / "pog.png"
        path.write_bytes(opaque_png_bytes)
        src = SourceImage.from_path(path)
        assert src.mime_type == "image/png"
        assert src.name == "pog.png"
        assert src.data == opaque_png_bytes

    def test_from_path_unknown_extension(self, tmp_path):
        path = tmp_path / "blob.zzz-unknown"
        path.write_bytes(b"xx")
        assert SourceImage.from_path(path).mime_type == "application/octet-stream"

    def test_from_path_explicit_mime(self, tmp_path):
        path = tmp_path / "noext"
        path.write_bytes(b"xx")
        assert SourceImage.from_path(path, mime_type="image/gif").is_animated


class TestClassify:
    def test_gif_is_animated(self, animated_gif):
        assert isinstance(classify(animated_gif), AnimatedImage)

    def test_png_is_static(self, opaque_png):
        item = classify(opaque_png)
        assert isinstance(item, StaticImage)
        assert item.source is opaque_png

    def test_mime_case_insensitive(self):
        assert isinstance(classify(SourceImage(b"", "IMAGE/GIF", "a.gif")), AnimatedImage)


class TestValueTypes:
    def test_size_spec_must_be_positive(self):
        with pytest.raises(ValueError):
            SizeSpec(target_size=0, max_allowed_size=10)

    def test_frame_rejects_negative_delay(self):
        with pytest.raises(ValueError):
            Frame(pixels=b"", width=1, height=1, delay_cs=-1)

    def test_frame_is_immutable(self, sample_rgba_frame):
        with pytest.raises(dataclasses.FrozenInstanceError):
            sample_rgba_frame.delay_cs = 3

    def test_disposal_values(self):
        assert [int(d) for d in DisposalMethod] == [0, 1, 2, 3]

    def test_processed_file_labels(self):
        f = ProcessedFile(name="a_28x28.png", mime_type="image/png",
                          data=b"\0" * 1536, width=28, height=28)
        assert f.size_bytes == 1536
        assert f.size_label == "28x28px"
        assert f.size_kb == "1.50 KB"


class TestExceptions:
    @pytest.mark.parametrize("cls, kind", [
        (UnsupportedFormatError, "UnsupportedFormat"),
        (MalformedAnimationError, "MalformedAnimation"),
        (EncodingFailedError, "EncodingFailed"),
        (UnknownPlatformError, "UnknownPlatform"),
    ])
    def test_kinds(self, cls, kind):
        exc = cls("boom")
        assert isinstance(exc, EmoteResizeError)
        assert exc.kind == kind
        assert str(exc) == f"{kind}: boom"

    def test_file_name_in_message(self):
        exc = MalformedAnimationError("bad header", file_name="bad.gif")
        assert str(exc) == "MalformedAnimation in bad.gif: bad header"
        assert exc.message == "bad header"
