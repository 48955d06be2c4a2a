"""
ImageEditingLib - Core image editing functionality

This module provides color and geometry normalization, the stock filter
catalog, the vignette filter and the data models shared by the rest of
Watimage.
"""

from WI_Libs.ImageEditingLib.image_models import (
    BlurType,
    CanvasMetadata,
    Color,
    FlipAxis,
    Margin,
    OutputMime,
    Position,
    Rect,
    ResizeType,
    RgbaColor,
    WatermarkSpec,
)
from WI_Libs.ImageEditingLib.image_editing_ops import fit_in_range
from WI_Libs.ImageEditingLib.color_parser import parse_color
from WI_Libs.ImageEditingLib.geometry import (
    compute_resize,
    normalize_margin,
    normalize_position,
    normalize_rect_arguments,
    resolve_position,
    resolve_rect,
    resolve_size,
)
from WI_Libs.ImageEditingLib.stock_filters import StockFilter, apply_stock_filter
from WI_Libs.ImageEditingLib.vignette_filter import apply_vignette

__all__ = [
    "BlurType",
    "CanvasMetadata",
    "Color",
    "FlipAxis",
    "Margin",
    "OutputMime",
    "Position",
    "Rect",
    "ResizeType",
    "RgbaColor",
    "WatermarkSpec",
    "fit_in_range",
    "parse_color",
    "compute_resize",
    "normalize_margin",
    "normalize_position",
    "normalize_rect_arguments",
    "resolve_position",
    "resolve_rect",
    "resolve_size",
    "StockFilter",
    "apply_stock_filter",
    "apply_vignette",
]
