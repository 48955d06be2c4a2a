"""
Geometry normalization for Watimage.

Parses the flexible crop, resize, position, margin and size specifications
accepted by the session API into canonical pixel values.

Every parser tries an ordered list of recognized shapes. A shape that does
not match falls through to the next one; a shape that matches but carries an
invalid value raises InvalidGeometryError immediately.

Functions:
    normalize_rect_arguments: Positional values or a container -> Rect
    fit_rect_to_canvas: Validate a Rect against canvas bounds
    resolve_rect: normalize_rect_arguments + fit_rect_to_canvas
    normalize_position: Keyword string, mapping or pair -> Position
    resolve_position: Position + sizes + margin -> (x, y) offset
    normalize_margin: Integer, mapping or pair -> Margin
    resolve_size: Watermark size spec -> (width, height)
    normalize_target_size: Resize target spec -> (width, height)
    compute_resize: Resize policy -> (scaled size, optional crop Rect)
"""

import math
from collections.abc import Mapping, Sequence
from numbers import Real
from typing import Any, Optional, Tuple

from WI_Libs.ImageEditingLib.image_editing_ops import fit_in_range
from WI_Libs.ImageEditingLib.image_models import Margin, Position, Rect, ResizeType, Size
from WI_Libs.constants import WATERMARK_SIZE_FULL
from WI_Libs.exceptions import InvalidGeometryError

RECT_KEY_SETS: Tuple[Tuple[Any, Any, Any, Any], ...] = (
    ("x", "y", "width", "height"),
    ("x", "y", "w", "h"),
    (0, 1, 2, 3),
)

SIZE_KEY_SETS: Tuple[Tuple[Any, Any], ...] = (
    ("width", "height"),
    ("w", "h"),
    (0, 1),
)

POINT_KEY_SETS: Tuple[Tuple[Any, Any], ...] = (
    ("x", "y"),
    (0, 1),
)

HORIZONTAL_KEYWORDS = {"left", "right"}
VERTICAL_KEYWORDS = {"top", "bottom"}
CENTER_KEYWORD = "center"


# ============================================================================
# Shape helpers
# ============================================================================

def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, Sequence)) and not isinstance(value, (str, bytes, bytearray))


def _lookup(container: Any, key: Any) -> Optional[Any]:
    if isinstance(container, Mapping):
        return container.get(key)
    if isinstance(key, int) and key < len(container):
        return container[key]
    return None


def _match_keys(container: Any, key_sets) -> Optional[Tuple[Any, ...]]:
    """Return the values of the first key-set fully present in container."""
    for keys in key_sets:
        values = tuple(_lookup(container, key) for key in keys)
        if all(value is not None for value in values):
            return values
    return None


def _as_int(value: Any, name: str, raw: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidGeometryError(f"{name} must be a number, got {value!r}", value=raw)
    if value != int(value):
        raise InvalidGeometryError(f"{name} must be a whole number, got {value!r}", value=raw)
    return int(value)


def _as_dimension(value: Any, name: str, raw: Any) -> int:
    dimension = _as_int(value, name, raw)
    if dimension <= 0:
        raise InvalidGeometryError(f"{name} must be greater than 0, got {dimension}", value=raw)
    return dimension


# ============================================================================
# Rectangles
# ============================================================================

def normalize_rect_arguments(x: Any, y: Any = None, width: Any = None, height: Any = None) -> Rect:
    """
    Normalize crop arguments into a Rect.

    Arguments may be passed one by one, or as a single container keyed by
    x/y/width/height, x/y/w/h or 0/1/2/3 (tried in that order).

    Raises:
        InvalidGeometryError: If any field is missing or invalid
    """
    raw = (x, y, width, height)
    if y is None and width is None and height is None and _is_container(x):
        raw = x
        values = _match_keys(x, RECT_KEY_SETS)
        if values is None:
            raise InvalidGeometryError(f"Invalid options for crop {x!r}", value=x)
        x, y, width, height = values

    if x is None or y is None or width is None or height is None:
        raise InvalidGeometryError(f"Invalid options for crop {raw!r}", value=raw)

    return Rect(
        x=_as_int(x, "x", raw),
        y=_as_int(y, "y", raw),
        width=_as_dimension(width, "width", raw),
        height=_as_dimension(height, "height", raw),
    )


def fit_rect_to_canvas(rect: Rect, canvas_size: Size) -> Rect:
    """
    Check that a Rect lies fully inside the canvas.

    Rectangles reaching past the canvas are rejected rather than clamped.

    Raises:
        InvalidGeometryError: If the rectangle is not inside the canvas
    """
    canvas_width, canvas_height = canvas_size
    if (
        rect.x < 0
        or rect.y < 0
        or rect.x + rect.width > canvas_width
        or rect.y + rect.height > canvas_height
    ):
        raise InvalidGeometryError(
            f"Rectangle {rect} exceeds canvas bounds {canvas_width}x{canvas_height}",
            value=rect,
        )
    return rect


def resolve_rect(spec: Any, canvas_size: Size) -> Rect:
    rect = spec if isinstance(spec, Rect) else normalize_rect_arguments(spec)
    return fit_rect_to_canvas(rect, canvas_size)


# ============================================================================
# Positions and margins
# ============================================================================

def normalize_position(spec: Any) -> Position:
    """
    Normalize a watermark position.

    Accepts a Position, an {x, y} mapping or (x, y) pair of pixel offsets, or
    a CSS-like keyword string such as 'top right', 'center center' or
    'bottom'. Keyword order does not matter; a single keyword leaves the
    other axis centered.

    Raises:
        InvalidGeometryError: If the spec is not a recognized position
    """
    if isinstance(spec, Position):
        return spec

    if isinstance(spec, str):
        return _parse_position_keywords(spec)

    if _is_container(spec):
        values = _match_keys(spec, POINT_KEY_SETS)
        if values is not None and len(spec) == 2:
            return Position(
                horizontal=_as_int(values[0], "x", spec),
                vertical=_as_int(values[1], "y", spec),
            )

    raise InvalidGeometryError(f"Invalid position {spec!r}", value=spec)


def _parse_position_keywords(spec: str) -> Position:
    tokens = spec.lower().split()
    known = HORIZONTAL_KEYWORDS | VERTICAL_KEYWORDS | {CENTER_KEYWORD}

    if not 1 <= len(tokens) <= 2 or any(token not in known for token in tokens):
        raise InvalidGeometryError(f"Invalid position \"{spec}\"", value=spec)

    horizontal = [token for token in tokens if token in HORIZONTAL_KEYWORDS]
    vertical = [token for token in tokens if token in VERTICAL_KEYWORDS]

    if len(horizontal) > 1 or len(vertical) > 1:
        raise InvalidGeometryError(
            f"Position \"{spec}\" sets the same axis twice",
            value=spec,
        )

    return Position(
        horizontal=horizontal[0] if horizontal else CENTER_KEYWORD,
        vertical=vertical[0] if vertical else CENTER_KEYWORD,
    )


def normalize_margin(spec: Any) -> Margin:
    if spec is None:
        return Margin()

    if isinstance(spec, Margin):
        return spec

    if isinstance(spec, Real) and not isinstance(spec, bool):
        offset = _as_int(spec, "margin", spec)
        return Margin(offset, offset)

    if _is_container(spec):
        values = _match_keys(spec, POINT_KEY_SETS)
        if values is not None:
            return Margin(_as_int(values[0], "margin x", spec), _as_int(values[1], "margin y", spec))

    raise InvalidGeometryError(f"Invalid margin {spec!r}", value=spec)


def _axis_offset(anchor: Any, outer: int, inner: int) -> int:
    if isinstance(anchor, int):
        return anchor
    if anchor in ("left", "top"):
        return 0
    if anchor in ("right", "bottom"):
        return outer - inner
    return (outer - inner) // 2


def resolve_position(
    spec: Any,
    outer_size: Size,
    inner_size: Size,
    margin: Any = None,
) -> Tuple[int, int]:
    """
    Resolve where an inner box goes inside an outer box.

    Args:
        spec: Anything accepted by normalize_position
        outer_size: (width, height) of the canvas
        inner_size: (width, height) of the placed image
        margin: Anything accepted by normalize_margin

    Returns:
        (x, y) offset of the inner box; may be negative or past the canvas
    """
    position = normalize_position(spec)
    offset = normalize_margin(margin)

    x = _axis_offset(position.horizontal, outer_size[0], inner_size[0])
    y = _axis_offset(position.vertical, outer_size[1], inner_size[1])
    return x + offset.x, y + offset.y


# ============================================================================
# Sizes
# ============================================================================

def _parse_percentage(spec: Any) -> Optional[float]:
    if isinstance(spec, str):
        text = spec.strip()
        if not text.endswith("%"):
            return None
        try:
            return float(text[:-1])
        except ValueError:
            raise InvalidGeometryError(f"Invalid size percentage \"{spec}\"", value=spec)

    if isinstance(spec, Real) and not isinstance(spec, bool):
        return float(spec)

    return None


def resolve_size(size_spec: Any, canvas_size: Size, source_size: Size) -> Size:
    """
    Resolve the size a watermark is drawn at.

    Args:
        size_spec: 'full' to stretch over the whole canvas, a percentage in
                   (0, 100] (number or 'NN%') of the source size, an explicit
                   {width, height} mapping or pair, or None for native size
        canvas_size: (width, height) of the canvas
        source_size: (width, height) of the watermark

    Returns:
        (width, height) in pixels

    Raises:
        InvalidGeometryError: If the spec is not recognized or out of range
    """
    if size_spec is None:
        return tuple(source_size)

    if isinstance(size_spec, str) and size_spec.strip().lower() == WATERMARK_SIZE_FULL:
        return tuple(canvas_size)

    percentage = _parse_percentage(size_spec)
    if percentage is not None:
        if not 0 < percentage <= 100:
            raise InvalidGeometryError(
                f"Size percentage must be 0 < p <= 100, got {percentage}",
                value=size_spec,
            )
        width = max(1, int(source_size[0] * percentage / 100))
        height = max(1, int(source_size[1] * percentage / 100))
        return width, height

    if _is_container(size_spec):
        values = _match_keys(size_spec, SIZE_KEY_SETS)
        if values is not None:
            return (
                _as_dimension(values[0], "width", size_spec),
                _as_dimension(values[1], "height", size_spec),
            )

    raise InvalidGeometryError(f"Invalid size {size_spec!r}", value=size_spec)


def normalize_target_size(spec: Any) -> Size:
    if isinstance(spec, Real) and not isinstance(spec, bool):
        side = _as_dimension(spec, "size", spec)
        return side, side

    if _is_container(spec):
        values = _match_keys(spec, SIZE_KEY_SETS)
        if values is not None:
            return _as_dimension(values[0], "width", spec), _as_dimension(values[1], "height", spec)

    raise InvalidGeometryError(f"Invalid resize target {spec!r}", value=spec)


# ============================================================================
# Resize policies
# ============================================================================

def _centered_crop(size: Size, target: Size) -> Rect:
    width = fit_in_range(target[0], 1, size[0])
    height = fit_in_range(target[1], 1, size[1])
    return Rect((size[0] - width) // 2, (size[1] - height) // 2, width, height)


def _scale(size: Size, ratio: float) -> Size:
    return max(1, int(round(size[0] * ratio))), max(1, int(round(size[1] * ratio)))


def compute_resize(resize_type: ResizeType, source_size: Size, target_size: Size) -> Tuple[Size, Optional[Rect]]:
    """
    Work out how a resize policy changes an image.

    Args:
        resize_type: One of the ResizeType policies
        source_size: (width, height) of the current image
        target_size: (width, height) requested

    Returns:
        Tuple of (scaled size, crop Rect applied after scaling or None)
    """
    source_width, source_height = source_size
    target_width, target_height = target_size

    if resize_type == ResizeType.RESIZE:
        return (target_width, target_height), None

    if resize_type == ResizeType.CROP:
        return tuple(source_size), _centered_crop(source_size, target_size)

    if resize_type == ResizeType.REDUCE:
        if source_width <= target_width and source_height <= target_height:
            return tuple(source_size), None
        ratio = min(target_width / source_width, target_height / source_height)
        return _scale(source_size, ratio), None

    # resizemin and resizecrop both cover the target box
    ratio = max(target_width / source_width, target_height / source_height)
    covered = (
        max(target_width, int(math.ceil(source_width * ratio - 1e-9))),
        max(target_height, int(math.ceil(source_height * ratio - 1e-9))),
    )

    if resize_type == ResizeType.RESIZEMIN:
        return covered, None

    return covered, _centered_crop(covered, target_size)
