"""
Custom exception hierarchy for emoteresize.

All emoteresize exceptions inherit from EmoteResizeError so callers can
catch the entire family with a single except clause.  Each class carries
a ``kind`` naming its place in the error taxonomy, and the batch pipeline
attaches the name of the source file that failed.
"""

from __future__ import annotations


class EmoteResizeError(Exception):
    """Base exception for all emoteresize errors."""

    kind = "EmoteResizeError"

    def __init__(self, message: str, file_name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.file_name = file_name

    def __str__(self) -> str:
        if self.file_name:
            return f"{self.kind} in {self.file_name}: {self.message}"
        return f"{self.kind}: {self.message}"


class UnsupportedFormatError(EmoteResizeError):
    """Raised when a pixel buffer does not match its declared dimensions,
    or a static image cannot be decoded or re-encoded in its format."""

    kind = "UnsupportedFormat"


class MalformedAnimationError(EmoteResizeError):
    """Raised when an animated byte stream cannot be parsed as a GIF."""

    kind = "MalformedAnimation"


class EncodingFailedError(EmoteResizeError):
    """Raised when re-encoding an animation fails."""

    kind = "EncodingFailed"


class UnknownPlatformError(EmoteResizeError):
    """Raised for a platform identifier outside the known set.

    This is a programming error: the CLI only offers known platforms.
    """

    kind = "UnknownPlatform"
