"""
Image editing data models for Watimage.

This module defines core data structures used throughout the image editing system.

Classes:
    Color: Four-channel color with GD-style alpha (0 opaque, 127 transparent)
    Rect: Pixel rectangle used for crops and resize targets
    Position: Horizontal/vertical anchor pair (keyword or pixel offset)
    Margin: Signed pixel offset applied after position resolution
    WatermarkSpec: Watermark image with its position, margin and size
    CanvasMetadata: Size and source format of the loaded image
    FlipAxis, BlurType, ResizeType, OutputMime: Closed option sets

Type Aliases:
    Size: A (width, height) tuple
    RgbaColor: A tuple of 4 integers representing Pillow RGBA values (0-255)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from WI_Libs.constants import (
    DEFAULT_WATERMARK_POSITION,
    MAX_ALPHA_VALUE,
    MAX_CHANNEL_VALUE,
    MIME_GIF,
    MIME_JPEG,
    MIME_PNG,
)
from WI_Libs.pillow_compat import Image

Size = Tuple[int, int]
RgbaColor = Tuple[int, int, int, int]


@dataclass(frozen=True)
class Color:
    red: int
    green: int
    blue: int
    alpha: int = 0

    def to_rgba(self) -> RgbaColor:
        """Convert to Pillow RGBA, where alpha 255 is opaque."""
        opacity = round((MAX_ALPHA_VALUE - self.alpha) * MAX_CHANNEL_VALUE / MAX_ALPHA_VALUE)
        return self.red, self.green, self.blue, opacity


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """Pillow crop box (left, upper, right, lower)."""
        return self.x, self.y, self.x + self.width, self.y + self.height


@dataclass(frozen=True)
class Position:
    horizontal: Union[str, int] = "center"
    vertical: Union[str, int] = "center"


@dataclass(frozen=True)
class Margin:
    x: int = 0
    y: int = 0


@dataclass
class WatermarkSpec:
    """Watermark to be composited onto a canvas.

    Attributes:
        image: RGBA PIL Image used as watermark
        position: Keyword string, {x, y} offsets or Position
        margin: Margin, {x, y} mapping, pair or single integer
        size: 'full', a percentage (0-100], {width, height} or None for native size
    """
    image: Any
    position: Any = DEFAULT_WATERMARK_POSITION
    margin: Any = field(default_factory=Margin)
    size: Any = None


@dataclass
class CanvasMetadata:
    width: int
    height: int
    mime: str
    format: str
    exif: Optional[Dict[int, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "mime": self.mime,
            "format": self.format,
            "exif": self.exif,
        }


class FlipAxis(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"


class BlurType(str, Enum):
    GAUSSIAN = "gaussian"
    SELECTIVE = "selective"


class ResizeType(str, Enum):
    RESIZE = "resize"
    RESIZECROP = "resizecrop"
    RESIZEMIN = "resizemin"
    CROP = "crop"
    REDUCE = "reduce"


class OutputMime(str, Enum):
    PNG = MIME_PNG
    JPEG = MIME_JPEG
    GIF = MIME_GIF


def is_pil_image(value: Any) -> bool:
    return isinstance(value, Image.Image)
