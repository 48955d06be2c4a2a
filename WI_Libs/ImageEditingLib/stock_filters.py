"""
Stock filter catalog for Watimage.

Provides the fixed set of pixel filters a session exposes. Each filter works
on an RGBA PIL Image and writes its result back into that same image.

Filters:
- gaussian-blur / selective-blur: Light 3x3 blurs
- brightness: Add a level (-255..255) to every color channel
- colorize: Add a Color to every pixel, alpha included
- contrast: Raise or lower contrast (-100..100, negative is more contrast)
- edge-detect / emboss / mean-removal / smooth: 3x3 convolutions
- grayscale / negate: Per-pixel color transforms
- pixelate: Block pixelation, basic or averaged

Example:
    >>> img = Image.new("RGBA", (100, 100), (200, 100, 50, 255))
    >>> apply_stock_filter(img, StockFilter.BRIGHTNESS, 20)
    >>> apply_stock_filter(img, "grayscale")
"""

from enum import Enum
from typing import Any, Callable, Dict

import numpy as np

from WI_Libs.ImageEditingLib.color_parser import parse_color
from WI_Libs.ImageEditingLib.image_editing_ops import fit_in_range
from WI_Libs.constants import (
    BRIGHTNESS_RANGE,
    CONTRAST_RANGE,
    MAX_ALPHA_VALUE,
    MAX_CHANNEL_VALUE,
    SMOOTH_RANGE,
)
from WI_Libs.pillow_compat import Image, ImageFilter


class StockFilter(str, Enum):
    GAUSSIAN_BLUR = "gaussian-blur"
    SELECTIVE_BLUR = "selective-blur"
    BRIGHTNESS = "brightness"
    COLORIZE = "colorize"
    CONTRAST = "contrast"
    EDGE_DETECT = "edge-detect"
    EMBOSS = "emboss"
    GRAYSCALE = "grayscale"
    MEAN_REMOVAL = "mean-removal"
    NEGATE = "negate"
    PIXELATE = "pixelate"
    SMOOTH = "smooth"


GAUSSIAN_KERNEL = ImageFilter.Kernel((3, 3), [1, 2, 1, 2, 4, 2, 1, 2, 1], scale=16)
EDGE_DETECT_KERNEL = ImageFilter.Kernel((3, 3), [-1, 0, -1, 0, 4, 0, -1, 0, -1], scale=1, offset=127)
EMBOSS_KERNEL = ImageFilter.Kernel((3, 3), [1.5, 0, 0, 0, 0, 0, 0, 0, -1.5], scale=1, offset=127)
MEAN_REMOVAL_KERNEL = ImageFilter.Kernel((3, 3), [-1, -1, -1, -1, 9, -1, -1, -1, -1], scale=1)


# ============================================================================
# Helpers
# ============================================================================

def _check_image(image: Any) -> None:
    if not hasattr(image, "mode") or image.mode != "RGBA":
        raise TypeError(f"Expected RGBA PIL Image, got {type(image)}")


def _write_back(image: Any, pixels: Any) -> Any:
    image.paste(Image.fromarray(np.clip(pixels, 0, MAX_CHANNEL_VALUE).astype(np.uint8)))
    return image


def _convolve_rgb(image: Any, image_filter: Any) -> Any:
    """Run a filter over the color channels, keeping alpha as it was."""
    alpha = image.getchannel("A")
    filtered = image.convert("RGB").filter(image_filter).convert("RGBA")
    filtered.putalpha(alpha)
    image.paste(filtered)
    return image


# ============================================================================
# Filters
# ============================================================================

def gaussian_blur(image: Any) -> Any:
    _check_image(image)
    return _convolve_rgb(image, GAUSSIAN_KERNEL)


def selective_blur(image: Any) -> Any:
    _check_image(image)
    return _convolve_rgb(image, ImageFilter.MedianFilter(size=3))


def brightness(image: Any, level: int) -> Any:
    _check_image(image)
    level = fit_in_range(level, *BRIGHTNESS_RANGE)

    pixels = np.asarray(image, dtype=np.int32).copy()
    pixels[:, :, :3] += int(level)
    return _write_back(image, pixels)


def colorize(image: Any, color: Any) -> Any:
    """
    Add a color to every pixel.

    Args:
        image: RGBA PIL Image, modified in place
        color: Anything accepted by parse_color; its alpha (0-127) is added
               to each pixel's transparency
    """
    _check_image(image)
    color = parse_color(color)

    pixels = np.asarray(image, dtype=np.int32).copy()
    pixels[:, :, 0] += color.red
    pixels[:, :, 1] += color.green
    pixels[:, :, 2] += color.blue

    if color.alpha:
        transparency = np.rint((MAX_CHANNEL_VALUE - pixels[:, :, 3]) * MAX_ALPHA_VALUE / MAX_CHANNEL_VALUE)
        transparency = np.clip(transparency + color.alpha, 0, MAX_ALPHA_VALUE)
        pixels[:, :, 3] = np.rint((MAX_ALPHA_VALUE - transparency) * MAX_CHANNEL_VALUE / MAX_ALPHA_VALUE)

    return _write_back(image, pixels)


def contrast(image: Any, level: int) -> Any:
    _check_image(image)
    level = fit_in_range(level, *CONTRAST_RANGE)
    factor = ((100.0 - level) / 100.0) ** 2

    pixels = np.asarray(image, dtype=np.float64).copy()
    pixels[:, :, :3] = ((pixels[:, :, :3] / 255.0 - 0.5) * factor + 0.5) * 255.0
    return _write_back(image, np.rint(pixels))


def edge_detect(image: Any) -> Any:
    _check_image(image)
    return _convolve_rgb(image, EDGE_DETECT_KERNEL)


def emboss(image: Any) -> Any:
    _check_image(image)
    return _convolve_rgb(image, EMBOSS_KERNEL)


def grayscale(image: Any) -> Any:
    _check_image(image)

    pixels = np.asarray(image, dtype=np.int32).copy()
    gray = (pixels[:, :, 0] * 299 + pixels[:, :, 1] * 587 + pixels[:, :, 2] * 114) // 1000
    for channel in range(3):
        pixels[:, :, channel] = gray
    return _write_back(image, pixels)


def mean_removal(image: Any) -> Any:
    _check_image(image)
    return _convolve_rgb(image, MEAN_REMOVAL_KERNEL)


def negate(image: Any) -> Any:
    _check_image(image)

    pixels = np.asarray(image, dtype=np.int32).copy()
    pixels[:, :, :3] = MAX_CHANNEL_VALUE - pixels[:, :, :3]
    return _write_back(image, pixels)


def pixelate(image: Any, block_size: int = 3, advanced: bool = False) -> Any:
    """
    Pixelate an image in blocks.

    Args:
        image: RGBA PIL Image, modified in place
        block_size: Block edge in pixels (at least 1)
        advanced: Use the block average instead of its top-left pixel
    """
    _check_image(image)
    block = int(fit_in_range(block_size, 1))
    if block == 1:
        return image

    pixels = np.asarray(image, dtype=np.float64)
    height, width = pixels.shape[:2]
    result = pixels.copy()

    for top in range(0, height, block):
        for left in range(0, width, block):
            region = pixels[top:top + block, left:left + block]
            if advanced:
                value = region.reshape(-1, 4).mean(axis=0)
            else:
                value = region[0, 0]
            result[top:top + block, left:left + block] = value

    return _write_back(image, np.rint(result))


def smooth(image: Any, level: float) -> Any:
    _check_image(image)
    weight = float(fit_in_range(level, *SMOOTH_RANGE))
    scale = weight + 8 or 1
    kernel = ImageFilter.Kernel((3, 3), [1, 1, 1, 1, weight, 1, 1, 1, 1], scale=scale)
    return _convolve_rgb(image, kernel)


FILTERS: Dict[StockFilter, Callable[..., Any]] = {
    StockFilter.GAUSSIAN_BLUR: gaussian_blur,
    StockFilter.SELECTIVE_BLUR: selective_blur,
    StockFilter.BRIGHTNESS: brightness,
    StockFilter.COLORIZE: colorize,
    StockFilter.CONTRAST: contrast,
    StockFilter.EDGE_DETECT: edge_detect,
    StockFilter.EMBOSS: emboss,
    StockFilter.GRAYSCALE: grayscale,
    StockFilter.MEAN_REMOVAL: mean_removal,
    StockFilter.NEGATE: negate,
    StockFilter.PIXELATE: pixelate,
    StockFilter.SMOOTH: smooth,
}


def apply_stock_filter(image: Any, kind: Any, *params: Any) -> Any:
    """
    Apply a catalog filter by name.

    Args:
        image: RGBA PIL Image, modified in place
        kind: StockFilter or its string value (e.g. 'edge-detect')
        *params: Filter-specific parameters

    Returns:
        The same PIL Image

    Raises:
        ValueError: If the filter name is unknown
    """
    try:
        stock_filter = StockFilter(kind)
    except ValueError:
        valid = ", ".join(f.value for f in StockFilter)
        raise ValueError(f"Unknown filter: {kind}. Valid filters: {valid}")

    return FILTERS[stock_filter](image, *params)
