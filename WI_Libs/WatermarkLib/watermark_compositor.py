"""
Watermark Compositor.

Places a watermark image onto a canvas. The watermark is scaled with
resolve_size, positioned with resolve_position (CSS-like keywords or pixel
offsets, plus an optional margin) and alpha-blended onto the canvas. Parts
that fall outside the canvas are clipped.

Example:
    >>> canvas = Image.new("RGBA", (400, 300), "white")
    >>> logo = Image.new("RGBA", (100, 50), (255, 0, 0, 128))
    >>> spec = build_watermark_spec({
    ...     "image": logo,
    ...     "position": "bottom right",
    ...     "margin": {"x": -10, "y": -10},
    ...     "size": 50,
    ... })
    >>> WatermarkCompositor.composite(canvas, spec)
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Tuple

from WI_Libs.ImageEditingLib.geometry import (
    normalize_margin,
    normalize_position,
    resolve_position,
    resolve_size,
)
from WI_Libs.ImageEditingLib.image_editing_ops import (
    alpha_composite_at,
    decode_image,
    ensure_rgba,
    resize_image,
)
from WI_Libs.ImageEditingLib.image_models import Size, WatermarkSpec, is_pil_image
from WI_Libs.constants import (
    DEFAULT_WATERMARK_POSITION,
    FIELD_FILE,
    FIELD_IMAGE,
    FIELD_MARGIN,
    FIELD_POSITION,
    FIELD_SIZE,
)
from WI_Libs.exceptions import FileNotExistError, InvalidArgumentError

logger = logging.getLogger(__name__)


def build_watermark_spec(options: Any) -> WatermarkSpec:
    """
    Build a WatermarkSpec from loose user input.

    Args:
        options: A WatermarkSpec, a path to the watermark file, a PIL Image,
                 or a mapping with 'file' or 'image' plus optional
                 'position', 'margin' and 'size'

    Returns:
        WatermarkSpec with a loaded RGBA image and validated position/margin

    Raises:
        InvalidArgumentError: If no watermark image is given
        FileNotExistError: If the watermark file does not exist
        InvalidGeometryError: If position or margin are invalid
    """
    if isinstance(options, WatermarkSpec):
        spec = options
    elif isinstance(options, Mapping):
        source = options.get(FIELD_IMAGE)
        if source is None:
            source = options.get(FIELD_FILE)
        spec = WatermarkSpec(
            image=source,
            position=options.get(FIELD_POSITION) or DEFAULT_WATERMARK_POSITION,
            margin=options.get(FIELD_MARGIN),
            size=options.get(FIELD_SIZE),
        )
    else:
        spec = WatermarkSpec(image=options)

    return WatermarkSpec(
        image=_load_watermark_image(spec.image),
        position=normalize_position(spec.position),
        margin=normalize_margin(spec.margin),
        size=spec.size,
    )


def _load_watermark_image(source: Any) -> Any:
    if is_pil_image(source):
        return ensure_rgba(source)

    if isinstance(source, (str, Path)) and str(source):
        if not Path(source).is_file():
            raise FileNotExistError(str(source))
        image, _ = decode_image(source)
        return image

    raise InvalidArgumentError("Watermark image has not been set.", value=source)


class WatermarkCompositor:
    """Handles watermark placement onto a canvas."""

    @staticmethod
    def resolve_placement(canvas_size: Size, spec: WatermarkSpec) -> Tuple[Size, Tuple[int, int]]:
        """
        Work out watermark size and offset without touching any pixels.

        Args:
            canvas_size: (width, height) of the canvas
            spec: WatermarkSpec to place

        Returns:
            Tuple of ((width, height), (x, y))

        Raises:
            InvalidGeometryError: If size, position or margin cannot be resolved
        """
        size = resolve_size(spec.size, canvas_size, spec.image.size)
        offset = resolve_position(spec.position, canvas_size, size, spec.margin)
        return size, offset

    @staticmethod
    def composite(canvas: Any, spec: WatermarkSpec) -> Any:
        """
        Alpha-blend a watermark onto the canvas in place.

        Args:
            canvas: RGBA PIL Image receiving the watermark
            spec: WatermarkSpec (see build_watermark_spec)

        Returns:
            The same canvas

        Raises:
            TypeError: If canvas or watermark are not PIL Images
            InvalidGeometryError: If the placement cannot be resolved
        """
        if not is_pil_image(canvas):
            raise TypeError(f"Expected PIL Image for canvas, got {type(canvas)}")
        if not is_pil_image(spec.image):
            raise TypeError(f"Expected PIL Image for watermark, got {type(spec.image)}")

        size, (x, y) = WatermarkCompositor.resolve_placement(canvas.size, spec)

        watermark = ensure_rgba(spec.image)
        if watermark.size != size:
            watermark = resize_image(watermark, size)

        if alpha_composite_at(canvas, watermark, x, y):
            logger.debug(f"Watermark {size[0]}x{size[1]} placed at ({x}, {y})")
        else:
            logger.warning(
                f"Watermark at ({x}, {y}) lies outside the {canvas.width}x{canvas.height} canvas"
            )

        return canvas
