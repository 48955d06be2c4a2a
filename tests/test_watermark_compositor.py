"""
Tests for the Watermark Compositor.

Tests cover:
- Building watermark specs from loose input
- Placement by keyword, offset and margin
- Size resolution (full, percentage, explicit)
- Clipping at canvas borders
- Error handling without partial mutation
"""

import unittest

import pytest
from PIL import Image

from WI_Libs.ImageEditingLib.image_models import Margin, Position, WatermarkSpec
from WI_Libs.WatermarkLib.watermark_compositor import (
    WatermarkCompositor,
    build_watermark_spec,
)
from WI_Libs.exceptions import (
    FileNotExistError,
    InvalidArgumentError,
    InvalidGeometryError,
)

RED = (255, 0, 0, 255)
WHITE = (255, 255, 255, 255)


class TestBuildWatermarkSpec(unittest.TestCase):
    """Test WatermarkSpec construction."""

    def setUp(self):
        self.logo = Image.new("RGBA", (100, 50), RED)

    def test_from_mapping(self):
        spec = build_watermark_spec({
            "image": self.logo,
            "position": "top right",
            "margin": {"x": -20, "y": 10},
            "size": "full",
        })

        self.assertEqual(spec.position, Position("right", "top"))
        self.assertEqual(spec.margin, Margin(-20, 10))
        self.assertEqual(spec.size, "full")

    def test_defaults(self):
        spec = build_watermark_spec(self.logo)

        self.assertEqual(spec.position, Position("center", "center"))
        self.assertEqual(spec.margin, Margin(0, 0))
        self.assertIsNone(spec.size)

    def test_converts_to_rgba(self):
        spec = build_watermark_spec(Image.new("RGB", (10, 10), "blue"))
        self.assertEqual(spec.image.mode, "RGBA")

    def test_missing_image(self):
        with self.assertRaises(InvalidArgumentError):
            build_watermark_spec({"position": "top left"})

    def test_missing_file(self):
        with self.assertRaises(FileNotExistError):
            build_watermark_spec({"file": "/nonexistent/watermark.png"})

    def test_invalid_position(self):
        with self.assertRaises(InvalidGeometryError):
            build_watermark_spec({"image": self.logo, "position": "left right"})


def test_build_from_file(tmp_path):
    """Watermarks can be loaded from disk."""
    path = tmp_path / "watermark.png"
    Image.new("RGBA", (30, 20), RED).save(path)

    spec = build_watermark_spec({"file": str(path), "position": "bottom left"})

    assert spec.image.size == (30, 20)
    assert spec.position == Position("left", "bottom")


class TestComposite:
    """Test compositing onto a canvas."""

    def test_top_right(self, opaque_canvas, red_watermark):
        spec = build_watermark_spec({"image": red_watermark, "position": "top right"})

        WatermarkCompositor.composite(opaque_canvas, spec)

        assert opaque_canvas.getpixel((300, 0)) == RED
        assert opaque_canvas.getpixel((399, 49)) == RED
        assert opaque_canvas.getpixel((299, 0)) == WHITE
        assert opaque_canvas.getpixel((300, 50)) == WHITE

    def test_center_with_margin(self, opaque_canvas, red_watermark):
        spec = build_watermark_spec({
            "image": red_watermark,
            "position": "center center",
            "margin": {"x": -20, "y": 10},
        })

        size, offset = WatermarkCompositor.resolve_placement(opaque_canvas.size, spec)
        WatermarkCompositor.composite(opaque_canvas, spec)

        assert size == (100, 50)
        assert offset == (130, 135)
        assert opaque_canvas.getpixel((130, 135)) == RED
        assert opaque_canvas.getpixel((129, 135)) == WHITE

    def test_full_size(self, opaque_canvas, red_watermark):
        spec = build_watermark_spec({"image": red_watermark, "size": "full"})

        WatermarkCompositor.composite(opaque_canvas, spec)

        assert opaque_canvas.getpixel((0, 0)) == RED
        assert opaque_canvas.getpixel((399, 299)) == RED

    def test_percentage_size(self, opaque_canvas, red_watermark):
        spec = build_watermark_spec({"image": red_watermark, "position": "top left", "size": 50})

        WatermarkCompositor.composite(opaque_canvas, spec)

        assert opaque_canvas.getpixel((49, 24)) == RED
        assert opaque_canvas.getpixel((50, 24)) == WHITE
        assert opaque_canvas.getpixel((49, 25)) == WHITE

    def test_clips_negative_margin(self, opaque_canvas, red_watermark):
        spec = build_watermark_spec({
            "image": red_watermark,
            "position": "top left",
            "margin": {"x": -50, "y": -25},
        })

        WatermarkCompositor.composite(opaque_canvas, spec)

        assert opaque_canvas.getpixel((0, 0)) == RED
        assert opaque_canvas.getpixel((49, 24)) == RED
        assert opaque_canvas.getpixel((50, 0)) == WHITE

    def test_outside_canvas_is_noop(self, opaque_canvas, red_watermark):
        spec = build_watermark_spec({"image": red_watermark, "position": {"x": 500, "y": 0}})
        before = opaque_canvas.copy()

        WatermarkCompositor.composite(opaque_canvas, spec)

        assert opaque_canvas.tobytes() == before.tobytes()

    def test_translucent_watermark_blends(self, opaque_canvas):
        logo = Image.new("RGBA", (10, 10), (0, 0, 0, 128))
        spec = build_watermark_spec({"image": logo, "position": "top left"})

        WatermarkCompositor.composite(opaque_canvas, spec)

        red, green, blue, alpha = opaque_canvas.getpixel((0, 0))
        assert 120 <= red <= 135
        assert alpha == 255

    def test_invalid_size_leaves_canvas(self, opaque_canvas, red_watermark):
        spec = WatermarkSpec(image=red_watermark, size=150)
        before = opaque_canvas.copy()

        with pytest.raises(InvalidGeometryError):
            WatermarkCompositor.composite(opaque_canvas, spec)

        assert opaque_canvas.tobytes() == before.tobytes()

    def test_rejects_non_images(self, red_watermark):
        with pytest.raises(TypeError):
            WatermarkCompositor.composite("canvas", WatermarkSpec(image=red_watermark))
