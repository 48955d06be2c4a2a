"""
Image Session for Watimage.

ImageSession owns one canvas (an RGBA PIL Image plus its metadata) and
exposes chainable operations on it. Every mutating call returns the session,
and operations apply strictly in call order.

Arguments are always normalized before the canvas is touched, so a call
that fails leaves the canvas exactly as it was.

Example:
    >>> session = ImageSession("photo.jpg")
    >>> (session
    ...     .set_quality(70)
    ...     .resize("resizecrop", (400, 200))
    ...     .flip("horizontal")
    ...     .vignette()
    ...     .apply_watermark({"file": "logo.png", "position": "top right"})
    ...     .generate("photo_out.jpg"))
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional, Union

from WI_Libs.ImageEditingLib.color_parser import parse_color
from WI_Libs.ImageEditingLib.geometry import (
    compute_resize,
    normalize_rect_arguments,
    normalize_target_size,
    resolve_rect,
)
from WI_Libs.ImageEditingLib.image_editing_ops import (
    crop_image,
    decode_image,
    ensure_rgba,
    fit_in_range,
    flip_image,
    resize_image,
    rotate_image,
)
from WI_Libs.ImageEditingLib.image_models import (
    BlurType,
    CanvasMetadata,
    FlipAxis,
    OutputMime,
    ResizeType,
    is_pil_image,
)
from WI_Libs.ImageEditingLib import stock_filters
from WI_Libs.ImageEditingLib.vignette_filter import apply_vignette
from WI_Libs.SessionLib.output_encoder import (
    OutputEncoder,
    get_mime_from_extension,
    normalize_mime,
)
from WI_Libs.WatermarkLib.watermark_compositor import (
    WatermarkCompositor,
    build_watermark_spec,
)
from WI_Libs.constants import (
    COLOR_TRANSPARENT,
    DEFAULT_COMPRESSION,
    DEFAULT_QUALITY,
    DEFAULT_VIGNETTE_LEVEL,
    DEFAULT_VIGNETTE_SIZE,
    FIELD_FILE,
    FIELD_QUALITY,
    FIELD_SIZE,
    FIELD_TYPE,
    REQUIRED_CODECS,
    SEPIA_ALPHA_RANGE,
    SEPIA_BRIGHTNESS,
    SEPIA_CONTRAST,
    SEPIA_TINT,
)
from WI_Libs.exceptions import (
    ExtensionNotLoadedError,
    FileNotExistError,
    InvalidArgumentError,
    ResourceMissingError,
    UnsupportedFormatError,
)
from WI_Libs.pillow_compat import check_codec

logger = logging.getLogger(__name__)

FLIP_ALIASES: Dict[str, FlipAxis] = {
    "x": FlipAxis.HORIZONTAL,
    "h": FlipAxis.HORIZONTAL,
    "horizontal": FlipAxis.HORIZONTAL,
    "y": FlipAxis.VERTICAL,
    "v": FlipAxis.VERTICAL,
    "vertical": FlipAxis.VERTICAL,
    "b": FlipAxis.BOTH,
    "xy": FlipAxis.BOTH,
    "yx": FlipAxis.BOTH,
    "both": FlipAxis.BOTH,
}

BLUR_FILTERS = {
    BlurType.GAUSSIAN: stock_filters.StockFilter.GAUSSIAN_BLUR,
    BlurType.SELECTIVE: stock_filters.StockFilter.SELECTIVE_BLUR,
}


def normalize_flip_axis(axis: Any) -> FlipAxis:
    """
    Normalize a flip axis from any of the accepted aliases.

    Accepts:
        x, h, horizontal -> FlipAxis.HORIZONTAL
        y, v, vertical -> FlipAxis.VERTICAL
        b, xy, yx, both -> FlipAxis.BOTH

    Raises:
        InvalidArgumentError: If the axis is not recognized
    """
    if isinstance(axis, FlipAxis):
        return axis
    flip_axis = FLIP_ALIASES.get(str(axis).lower()) if isinstance(axis, str) else None
    if flip_axis is None:
        raise InvalidArgumentError(f"Incorrect flip type \"{axis}\"", value=axis)
    return flip_axis


def normalize_blur_type(blur_type: Any) -> BlurType:
    if blur_type is None:
        return BlurType.GAUSSIAN
    try:
        return BlurType(str(blur_type).lower())
    except ValueError:
        raise InvalidArgumentError(f"Incorrect blur type \"{blur_type}\"", value=blur_type)


def normalize_resize_type(resize_type: Any) -> ResizeType:
    try:
        return ResizeType(str(resize_type).lower())
    except ValueError:
        valid = ", ".join(t.value for t in ResizeType)
        raise InvalidArgumentError(
            f"Incorrect resize type \"{resize_type}\". Valid types: {valid}",
            value=resize_type,
        )


class ImageSession:
    """
    Chainable editing session over a single image.

    Attributes:
        filename: Path the canvas was loaded from, if any
        quality: Export quality for JPEG/GIF output (0-100)
        compression: Export compression for PNG output (0-9)
    """

    def __init__(self, file: Any = None):
        """
        Create a session, optionally loading an image straight away.

        Args:
            file: Anything accepted by load(), or None

        Raises:
            ExtensionNotLoadedError: If Pillow lacks a required codec
        """
        for codec in REQUIRED_CODECS:
            if not check_codec(codec):
                raise ExtensionNotLoadedError(codec)

        self.filename: Optional[str] = None
        self.quality: int = DEFAULT_QUALITY
        self.compression: int = DEFAULT_COMPRESSION
        self._image: Any = None
        self._metadata: Optional[CanvasMetadata] = None
        self._watermark = None

        if file:
            self.load(file)

    def __enter__(self) -> "ImageSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    # ------------------------------------------------------------------
    # Canvas lifecycle
    # ------------------------------------------------------------------

    def load(self, file: Any) -> "ImageSession":
        """
        Load an image, replacing the current canvas.

        Args:
            file: Path to a PNG/JPEG/GIF file, or a mapping with 'file' and
                  optionally 'quality'

        Raises:
            InvalidArgumentError: If no filename is given
            FileNotExistError: If the file does not exist
            UnsupportedFormatError: If the file is not PNG, JPEG or GIF
            DecodeError: If the file cannot be decoded
        """
        quality = None
        if isinstance(file, Mapping):
            quality = file.get(FIELD_QUALITY)
            file = file.get(FIELD_FILE)

        if not file:
            raise InvalidArgumentError("Image file has not been set.", value=file)

        if not Path(file).is_file():
            raise FileNotExistError(str(file))

        image, metadata = decode_image(file)

        if quality is not None:
            self.set_quality(quality)
        self.destroy()
        self.filename = str(file)
        self._replace_image(image)
        self._metadata = metadata
        logger.debug(f"Loaded {self.filename} ({metadata.mime}, {metadata.width}x{metadata.height})")
        return self

    def load_bytes(self, data: bytes, filename: Optional[str] = None) -> "ImageSession":
        """Load an image from an encoded byte buffer."""
        image, metadata = decode_image(data, filename=filename)

        self.destroy()
        self.filename = filename
        self._replace_image(image)
        self._metadata = metadata
        logger.debug(f"Loaded {len(data)} bytes ({metadata.mime}, {metadata.width}x{metadata.height})")
        return self

    def destroy(self) -> None:
        """Release the canvas and forget everything about it."""
        if self._image is not None:
            self._image.close()
        self._image = None
        self._metadata = None
        self._watermark = None
        self.filename = None

    def set_image(self, image: Any) -> "ImageSession":
        """
        Replace the canvas with an existing PIL Image.

        Raises:
            TypeError: If image is not a PIL Image
        """
        if not is_pil_image(image):
            raise TypeError(f"Expected PIL Image, got {type(image)}")

        rgba = ensure_rgba(image)
        if self._metadata is None:
            self._metadata = CanvasMetadata(
                width=rgba.width,
                height=rgba.height,
                mime=OutputMime.PNG.value,
                format="png",
            )
        self._replace_image(rgba)
        return self

    def get_image(self) -> Any:
        return self._require_image()

    def get_metadata(self) -> Dict[str, Any]:
        if self._metadata is None:
            return {}
        return self._metadata.to_dict()

    @property
    def width(self) -> Optional[int]:
        return None if self._image is None else self._image.width

    @property
    def height(self) -> Optional[int]:
        return None if self._image is None else self._image.height

    def set_quality(self, quality: int) -> "ImageSession":
        """Set export quality for JPEG/GIF files, 0 (worst) to 100 (best)."""
        self.quality = quality
        return self

    def set_compression(self, compression: int) -> "ImageSession":
        """Set compression for PNG files, 0 (none) to 9 (max)."""
        self.compression = compression
        return self

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def resize(self, resize_type: Any, size: Any = None) -> "ImageSession":
        """
        Resize the canvas with one of the resize policies.

        Args:
            resize_type: 'resize', 'resizecrop', 'resizemin', 'crop' or
                         'reduce', or a mapping with 'type' and 'size'
            size: Integer (square target), (width, height) pair or mapping

        Raises:
            InvalidArgumentError: If the resize type is unknown
            InvalidGeometryError: If the size cannot be resolved
        """
        if isinstance(resize_type, Mapping):
            size = resize_type.get(FIELD_SIZE)
            resize_type = resize_type.get(FIELD_TYPE)

        policy = normalize_resize_type(resize_type)
        target = normalize_target_size(size)
        image = self._require_image()

        scaled_size, crop_rect = compute_resize(policy, image.size, target)
        result = resize_image(image, scaled_size)
        if crop_rect is not None:
            result = crop_image(result, crop_rect)

        self._replace_image(result)
        logger.debug(f"Resized ({policy.value}) to {result.width}x{result.height}")
        return self

    def crop(self, x: Any, y: Any = None, width: Any = None, height: Any = None) -> "ImageSession":
        """
        Crop the canvas.

        Arguments can be passed one by one or as a single mapping/sequence
        (x/y/width/height, x/y/w/h or positional keys).

        Raises:
            InvalidGeometryError: If the rectangle is invalid or leaves the canvas
        """
        image = self._require_image()
        rect = resolve_rect(normalize_rect_arguments(x, y, width, height), image.size)

        self._replace_image(crop_image(image, rect))
        logger.debug(f"Cropped to {rect}")
        return self

    def rotate(self, degrees: float, bgcolor: Any = None) -> "ImageSession":
        """
        Rotate the canvas clockwise.

        Args:
            degrees: Rotation angle in degrees
            bgcolor: Color for uncovered areas (default: transparent)
        """
        color = parse_color(COLOR_TRANSPARENT if bgcolor is None else bgcolor)
        image = self._require_image()

        self._replace_image(rotate_image(image, degrees, color))
        logger.debug(f"Rotated {degrees} degrees")
        return self

    def flip(self, axis: Any = "horizontal") -> "ImageSession":
        """
        Flip the canvas.

        Args:
            axis: horizontal (x, h), vertical (y, v) or both (b, xy, yx);
                  'both' is the same as a 180 degree rotation
        """
        flip_axis = normalize_flip_axis(axis)
        image = self._require_image()

        self._replace_image(flip_image(image, flip_axis))
        logger.debug(f"Flipped {flip_axis.value}")
        return self

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def blur(self, blur_type: Any = None, passes: int = 1) -> "ImageSession":
        """
        Blur the canvas.

        Args:
            blur_type: 'gaussian' (default) or 'selective'
            passes: Number of times to apply the filter (at least 1)
        """
        kind = BLUR_FILTERS[normalize_blur_type(blur_type)]
        for _ in range(int(fit_in_range(passes, 1))):
            self._filter(kind)
        return self

    def brightness(self, level: int) -> "ImageSession":
        """Change brightness; level is clamped to -255..255."""
        return self._filter(stock_filters.StockFilter.BRIGHTNESS, level)

    def colorize(self, color: Any) -> "ImageSession":
        """Like grayscale, except you can specify the color."""
        return self._filter(stock_filters.StockFilter.COLORIZE, parse_color(color))

    def contrast(self, level: int) -> "ImageSession":
        """Change contrast; level is clamped to -100..100."""
        return self._filter(stock_filters.StockFilter.CONTRAST, level)

    def edge_detection(self) -> "ImageSession":
        return self._filter(stock_filters.StockFilter.EDGE_DETECT)

    def emboss(self) -> "ImageSession":
        return self._filter(stock_filters.StockFilter.EMBOSS)

    def grayscale(self) -> "ImageSession":
        return self._filter(stock_filters.StockFilter.GRAYSCALE)

    def mean_remove(self) -> "ImageSession":
        """Use mean removal to achieve a sketchy effect."""
        return self._filter(stock_filters.StockFilter.MEAN_REMOVAL)

    def negate(self) -> "ImageSession":
        return self._filter(stock_filters.StockFilter.NEGATE)

    def pixelate(self, block_size: int = 3, advanced: bool = False) -> "ImageSession":
        return self._filter(stock_filters.StockFilter.PIXELATE, block_size, advanced)

    def sepia(self, alpha: int = 0) -> "ImageSession":
        """
        Combine grayscale, contrast, brightness and colorize into a sepia tone.

        Args:
            alpha: Transparency of the tint, clamped to 0..100
        """
        tint = dict(SEPIA_TINT, a=fit_in_range(alpha, *SEPIA_ALPHA_RANGE))
        return (
            self.grayscale()
            .contrast(SEPIA_CONTRAST)
            .brightness(SEPIA_BRIGHTNESS)
            .colorize(tint)
        )

    def smooth(self, level: float) -> "ImageSession":
        """Make the canvas smoother; level is clamped to -15..15."""
        return self._filter(stock_filters.StockFilter.SMOOTH, level)

    def vignette(
        self,
        size: float = DEFAULT_VIGNETTE_SIZE,
        level: float = DEFAULT_VIGNETTE_LEVEL,
    ) -> "ImageSession":
        """
        Darken the canvas towards its borders.

        Args:
            size: Size of the vignette, 0-10. Low is sharper.
            level: Vignette strength, 0-1
        """
        apply_vignette(self._require_image(), size, level)
        logger.debug(f"Applied vignette (size={size}, level={level})")
        return self

    # ------------------------------------------------------------------
    # Watermarks
    # ------------------------------------------------------------------

    def set_watermark(self, options: Any) -> "ImageSession":
        """
        Store a watermark to be applied later with apply_watermark().

        Args:
            options: Path, PIL Image or mapping with 'file'/'image',
                     'position', 'margin' and 'size'
        """
        self._watermark = build_watermark_spec(options)
        return self

    def apply_watermark(self, options: Any = None) -> "ImageSession":
        """
        Composite a watermark onto the canvas.

        Args:
            options: Watermark options; defaults to the one stored with
                     set_watermark()

        Raises:
            InvalidArgumentError: If no watermark has been set
            InvalidGeometryError: If the watermark cannot be placed
        """
        spec = build_watermark_spec(options) if options is not None else self._watermark
        if spec is None:
            raise InvalidArgumentError("Watermark has not been set.")

        WatermarkCompositor.composite(self._require_image(), spec)
        self._sync_size()
        return self

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def generate(
        self,
        filename: Optional[Union[str, Path]] = None,
        mime: Optional[str] = None,
    ) -> bytes:
        """
        Encode the canvas, writing it to filename when given.

        With a filename the output format comes from its extension, and an
        explicit mime must agree with it. Without a filename the explicit
        mime is used, otherwise the source image's format.

        Args:
            filename: Output path (optional)
            mime: 'image/png', 'image/jpeg' or 'image/gif' (optional)

        Returns:
            The encoded bytes

        Raises:
            ResourceMissingError: If no image is loaded
            UnsupportedFormatError: If the extension or mime is not supported,
                                    or they name different formats
            EncodeError: If encoding or writing fails
        """
        image = self._require_image()

        if filename:
            output = get_mime_from_extension(filename)
            if mime is not None and normalize_mime(mime) != output:
                raise UnsupportedFormatError(
                    f"Output format \"{mime}\" does not match the extension of {filename}",
                    value=mime,
                )
        elif mime is not None:
            output = normalize_mime(mime)
        else:
            output = normalize_mime(self._metadata.mime)

        encoder = OutputEncoder(mime=output, quality=self.quality, compression=self.compression)
        return encoder.encode(image, filename)

    def save(self, filename: Optional[Union[str, Path]] = None) -> "ImageSession":
        """Like generate(), but an empty filename overwrites the source file."""
        target = filename or self.filename
        if not target:
            raise InvalidArgumentError("No filename to save to.", value=filename)
        self.generate(target)
        return self

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_image(self) -> Any:
        if self._image is None:
            raise ResourceMissingError("No image loaded. Call load() first.")
        return self._image

    def _replace_image(self, image: Any) -> None:
        if self._image is not None and self._image is not image:
            self._image.close()
        self._image = image
        self._sync_size()

    def _sync_size(self) -> None:
        if self._metadata is not None and self._image is not None:
            self._metadata.width = self._image.width
            self._metadata.height = self._image.height

    def _filter(self, kind: stock_filters.StockFilter, *params: Any) -> "ImageSession":
        stock_filters.apply_stock_filter(self._require_image(), kind, *params)
        logger.debug(f"Applied filter {kind.value}")
        return self
