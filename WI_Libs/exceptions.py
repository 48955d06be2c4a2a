"""
Exception types raised by Watimage.

Normalization errors (colors, geometry, formats) subclass ValueError so they
can be caught the same way as the plain ValueErrors raised elsewhere.
Decode and encode failures subclass OSError and carry the filename involved.
"""

from typing import Any, Optional


class WatimageError(Exception):
    """Base class for every error raised by Watimage."""


class InvalidArgumentError(WatimageError, ValueError):
    """An argument could not be normalized.

    Attributes:
        value: The raw input that was rejected
    """

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value


class InvalidColorError(InvalidArgumentError):
    """A color value matched none of the recognized shapes."""


class InvalidGeometryError(InvalidArgumentError):
    """A rectangle, position, margin or size could not be resolved."""


class UnsupportedFormatError(InvalidArgumentError):
    """An extension, mime type or source format is not supported."""


class ImageIOError(WatimageError, OSError):
    """Base class for decode/encode failures tagged with a filename."""

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.filename = filename


class DecodeError(ImageIOError):
    """The image library could not decode the source."""


class EncodeError(ImageIOError):
    """The image library could not encode the canvas."""


class FileNotExistError(WatimageError, FileNotFoundError):
    """The image file to load does not exist."""

    def __init__(self, filename: str):
        super().__init__(f"File does not exist: {filename}")
        self.filename = filename


class ResourceMissingError(WatimageError, RuntimeError):
    """An operation was requested on a session with no loaded canvas."""


class ExtensionNotLoadedError(WatimageError, ImportError):
    """A required image codec is not available in the installed Pillow."""

    def __init__(self, extension: str):
        super().__init__(f"Required image extension is not available: {extension}")
        self.extension = extension
