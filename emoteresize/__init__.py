"""
emoteresize -- resize images into platform emote and badge sizes.

Static images are resampled and re-encoded in their own format; animated
GIFs are decoded frame by frame, resized with outline preservation, and
re-encoded with a shared palette and the original timing.
"""

__version__ = "0.1.0"

from emoteresize.exceptions import (
    EmoteResizeError,
    EncodingFailedError,
    MalformedAnimationError,
    UnknownPlatformError,
    UnsupportedFormatError,
)
from emoteresize.types import (
    DisposalMethod,
    Frame,
    PlatformProfile,
    ProcessedFile,
    ResultGroup,
    Role,
    SizeSpec,
    SourceImage,
)

__all__ = [
    "DisposalMethod",
    "EmoteResizeError",
    "EncodingFailedError",
    "Frame",
    "MalformedAnimationError",
    "PlatformProfile",
    "ProcessedFile",
    "ResultGroup",
    "Role",
    "SizeSpec",
    "SourceImage",
    "UnknownPlatformError",
    "UnsupportedFormatError",
]
