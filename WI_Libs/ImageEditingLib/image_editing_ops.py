"""
Core image editing operations for Watimage.

This module wraps the low-level Pillow primitives the rest of the library
builds on: range clamping, decoding, pixel access, resizing, rotating,
flipping, cropping and clipped alpha compositing.

Functions:
    fit_in_range: Clamp a value to optional lower/upper bounds
    ensure_rgba: Return an RGBA version of an image
    decode_image: Decode a file path or byte buffer into an RGBA image
    get_pixel: Read a pixel as a Color
    set_pixel: Write a Color to a pixel
    resize_image: Resample an image to an exact size
    rotate_image: Rotate clockwise, expanding the canvas
    flip_image: Mirror an image along one or both axes
    crop_image: Cut a Rect out of an image
    alpha_composite_at: Blend an overlay onto an image at an offset, clipping
"""

import io
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from WI_Libs.ImageEditingLib.image_models import (
    CanvasMetadata,
    Color,
    FlipAxis,
    Rect,
    Size,
)
from WI_Libs.constants import MAX_ALPHA_VALUE, MAX_CHANNEL_VALUE, MIME_FORMATS
from WI_Libs.exceptions import DecodeError, UnsupportedFormatError
from WI_Libs.pillow_compat import Image

SUPPORTED_SOURCE_FORMATS = set(MIME_FORMATS.values())


def fit_in_range(value, minimum=None, maximum=None):
    """
    Clamp a value between optional bounds.

    Args:
        value: Value to be checked
        minimum: Lower bound, or None to leave the lower side open
        maximum: Upper bound, or None to leave the upper side open

    Returns:
        The value itself, or the bound it crossed
    """
    if minimum is not None and value < minimum:
        value = minimum

    if maximum is not None and value > maximum:
        value = maximum

    return value


def ensure_rgba(image: Any) -> Any:
    if image.mode != "RGBA":
        return image.convert("RGBA")
    return image


def decode_image(
    source: Union[str, Path, bytes],
    filename: Optional[str] = None,
) -> Tuple[Any, CanvasMetadata]:
    """
    Decode an image and collect its metadata.

    Args:
        source: Path to an image file or the encoded bytes
        filename: Name used to tag errors (defaults to the path)

    Returns:
        Tuple of (RGBA PIL Image, CanvasMetadata)

    Raises:
        UnsupportedFormatError: If the source is not PNG, JPEG or GIF
        DecodeError: If Pillow cannot read the source
    """
    if isinstance(source, (bytes, bytearray)):
        stream = io.BytesIO(source)
        label = filename or "<bytes>"
    else:
        stream = source
        label = filename or str(source)

    try:
        with Image.open(stream) as opened:
            source_format = opened.format
            if source_format not in SUPPORTED_SOURCE_FORMATS:
                raise UnsupportedFormatError(
                    f"Unsupported source format '{source_format}' in {label}",
                    value=source_format,
                )
            opened.load()
            exif = dict(opened.getexif()) if source_format == "JPEG" else None
            image = opened.convert("RGBA")
    except UnsupportedFormatError:
        raise
    except (OSError, SyntaxError, ValueError) as e:
        raise DecodeError(f"Failed to decode image {label}: {str(e)}", filename=label) from e

    metadata = CanvasMetadata(
        width=image.width,
        height=image.height,
        mime=Image.MIME.get(source_format, ""),
        format=source_format.lower(),
        exif=exif,
    )
    return image, metadata


def get_pixel(image: Any, x: int, y: int) -> Color:
    red, green, blue, opacity = ensure_rgba(image).getpixel((x, y))
    alpha = round((MAX_CHANNEL_VALUE - opacity) * MAX_ALPHA_VALUE / MAX_CHANNEL_VALUE)
    return Color(red, green, blue, alpha)


def set_pixel(image: Any, x: int, y: int, color: Color) -> None:
    image.putpixel((x, y), color.to_rgba())


def resize_image(image: Any, size: Size) -> Any:
    if image.size == tuple(size):
        return image.copy()
    return image.resize(tuple(size), Image.Resampling.LANCZOS)


def rotate_image(image: Any, degrees: float, background: Color) -> Any:
    """
    Rotate an image clockwise.

    The canvas grows to hold the rotated image; uncovered areas are filled
    with the background color.
    """
    return image.rotate(
        -degrees,
        resample=Image.Resampling.BICUBIC,
        expand=True,
        fillcolor=background.to_rgba(),
    )


def flip_image(image: Any, axis: FlipAxis) -> Any:
    if axis == FlipAxis.HORIZONTAL:
        return image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    if axis == FlipAxis.VERTICAL:
        return image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    return image.transpose(Image.Transpose.ROTATE_180)


def crop_image(image: Any, rect: Rect) -> Any:
    return image.crop(rect.box)


def alpha_composite_at(base: Any, overlay: Any, x: int, y: int) -> bool:
    """
    Alpha-blend an overlay onto a base image in place.

    Parts of the overlay falling outside the base are clipped, so negative
    offsets and overlays larger than the base are allowed.

    Args:
        base: RGBA PIL Image receiving the overlay
        overlay: RGBA PIL Image to blend
        x: Horizontal offset of the overlay's top-left corner
        y: Vertical offset of the overlay's top-left corner

    Returns:
        False if the overlay lies completely outside the base
    """
    left = max(x, 0)
    top = max(y, 0)
    right = min(x + overlay.width, base.width)
    bottom = min(y + overlay.height, base.height)

    if right <= left or bottom <= top:
        return False

    source = (left - x, top - y, right - x, bottom - y)
    base.alpha_composite(ensure_rgba(overlay), dest=(left, top), source=source)
    return True
