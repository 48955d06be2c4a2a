"""
WatermarkLib - Watermark placement

Modules:
    watermark_compositor: Builds watermark specs and blends them onto a canvas
"""

from WI_Libs.WatermarkLib.watermark_compositor import (
    WatermarkCompositor,
    build_watermark_spec,
)

__all__ = [
    "WatermarkCompositor",
    "build_watermark_spec",
]
