"""
Vignette filter for Watimage.

Darkens an image radially towards its borders. For every pixel (x, y) of a
W x H image:

    l  = (sin(pi * x / W) * sin(pi * y / H)) ** sharpness
    l' = 1 - intensity * (1 - l)

and the red, green and blue channels are multiplied by l'. Alpha is left
untouched. Corners and borders, where the sine terms approach 0, receive the
strongest darkening.

Example:
    >>> img = Image.new("RGBA", (200, 100), (200, 150, 100, 255))
    >>> apply_vignette(img, sharpness=0.7, intensity=0.8)
"""

import math
from typing import Any

import numpy as np

from WI_Libs.ImageEditingLib.image_editing_ops import fit_in_range
from WI_Libs.constants import (
    DEFAULT_VIGNETTE_LEVEL,
    DEFAULT_VIGNETTE_SIZE,
    VIGNETTE_LEVEL_RANGE,
    VIGNETTE_SIZE_RANGE,
)
from WI_Libs.pillow_compat import Image


def vignette_factors(width: int, height: int, sharpness: float, intensity: float) -> Any:
    """
    Compute the per-pixel brightness factor l' for a width x height image.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        sharpness: Exponent applied to the sine product (0-10, low is sharper)
        intensity: How much of the darkening is applied (0-1)

    Returns:
        numpy array of shape (height, width) with values in [0, 1]
    """
    sharpness = fit_in_range(sharpness, *VIGNETTE_SIZE_RANGE)
    intensity = fit_in_range(intensity, *VIGNETTE_LEVEL_RANGE)

    columns = np.sin(math.pi * np.arange(width) / width)
    rows = np.sin(math.pi * np.arange(height) / height)
    light = np.power(np.outer(rows, columns), sharpness)

    return 1.0 - intensity * (1.0 - light)


def apply_vignette(
    image: Any,
    sharpness: float = DEFAULT_VIGNETTE_SIZE,
    intensity: float = DEFAULT_VIGNETTE_LEVEL,
) -> Any:
    """
    Apply the vignette effect in place.

    Args:
        image: RGBA PIL Image, modified in place
        sharpness: Size of the vignette, clamped to 0-10. Low is sharper.
        intensity: Vignette strength, clamped to 0-1

    Returns:
        The same PIL Image

    Raises:
        TypeError: If image is not an RGBA PIL Image
    """
    if not hasattr(image, "mode") or image.mode != "RGBA":
        raise TypeError(f"Expected RGBA PIL Image, got {type(image)}")

    width, height = image.size
    if width == 0 or height == 0:
        return image

    factors = vignette_factors(width, height, sharpness, intensity)

    pixels = np.asarray(image, dtype=np.float64).copy()
    pixels[:, :, :3] *= factors[:, :, np.newaxis]

    shaded = Image.fromarray(pixels.astype(np.uint8))
    image.paste(shaded)
    return image
