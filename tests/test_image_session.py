"""
Tests for ImageSession.

Tests cover:
- Loading and lifecycle
- Operations on an empty session
- Geometry (resize, crop, rotate, flip)
- Filters through the fluent API
- Watermarks
- Output format selection and saving
"""

import io
import unittest
from unittest import mock

import pytest
from PIL import Image

from WI_Libs.SessionLib.image_session import (
    ImageSession,
    normalize_blur_type,
    normalize_flip_axis,
    normalize_resize_type,
)
from WI_Libs.ImageEditingLib.image_models import BlurType, FlipAxis, ResizeType
from WI_Libs.exceptions import (
    DecodeError,
    ExtensionNotLoadedError,
    FileNotExistError,
    InvalidArgumentError,
    InvalidGeometryError,
    ResourceMissingError,
    UnsupportedFormatError,
)


class TestNormalizers(unittest.TestCase):
    """Test the argument normalizers used by the session."""

    def test_flip_aliases(self):
        for alias in ("x", "h", "horizontal", "H"):
            self.assertEqual(normalize_flip_axis(alias), FlipAxis.HORIZONTAL)
        for alias in ("y", "v", "vertical"):
            self.assertEqual(normalize_flip_axis(alias), FlipAxis.VERTICAL)
        for alias in ("b", "xy", "yx", "both"):
            self.assertEqual(normalize_flip_axis(alias), FlipAxis.BOTH)

    def test_invalid_flip_axis(self):
        for axis in ("diagonal", 1, None):
            with self.subTest(axis=axis):
                with self.assertRaises(InvalidArgumentError):
                    normalize_flip_axis(axis)

    def test_blur_type(self):
        self.assertEqual(normalize_blur_type(None), BlurType.GAUSSIAN)
        self.assertEqual(normalize_blur_type("Selective"), BlurType.SELECTIVE)

        with self.assertRaises(InvalidArgumentError):
            normalize_blur_type("motion")

    def test_resize_type(self):
        self.assertEqual(normalize_resize_type("ResizeCrop"), ResizeType.RESIZECROP)

        with self.assertRaises(InvalidArgumentError):
            normalize_resize_type("stretch")


class TestEmptySession(unittest.TestCase):
    """Operations on a session without a canvas."""

    def setUp(self):
        self.session = ImageSession()

    def test_operations_require_image(self):
        operations = [
            lambda: self.session.get_image(),
            lambda: self.session.resize("resize", 10),
            lambda: self.session.crop(0, 0, 1, 1),
            lambda: self.session.rotate(90),
            lambda: self.session.flip("x"),
            lambda: self.session.blur(),
            lambda: self.session.negate(),
            lambda: self.session.vignette(),
            lambda: self.session.generate(mime="image/png"),
            lambda: self.session.generate(),
            lambda: self.session.generate("out.png"),
        ]
        for operation in operations:
            with self.assertRaises(ResourceMissingError):
                operation()

    def test_empty_metadata(self):
        self.assertEqual(self.session.get_metadata(), {})
        self.assertIsNone(self.session.width)

    def test_load_requires_filename(self):
        with self.assertRaises(InvalidArgumentError):
            self.session.load("")

        with self.assertRaises(InvalidArgumentError):
            self.session.load({"quality": 50})

    def test_load_missing_file(self):
        with self.assertRaises(FileNotExistError):
            self.session.load("/nonexistent/photo.jpg")

    def test_apply_watermark_without_watermark(self):
        self.session.set_image(Image.new("RGBA", (10, 10)))

        with self.assertRaises(InvalidArgumentError):
            self.session.apply_watermark()

    def test_save_without_filename(self):
        self.session.set_image(Image.new("RGBA", (10, 10)))

        with self.assertRaises(InvalidArgumentError):
            self.session.save()


class TestMissingCodec(unittest.TestCase):
    """Test the codec availability check."""

    @mock.patch("WI_Libs.SessionLib.image_session.check_codec", return_value=False)
    def test_missing_codec_raises(self, mock_check):
        with self.assertRaises(ExtensionNotLoadedError) as context:
            ImageSession()

        self.assertEqual(context.exception.extension, "jpg")


class TestLoading:
    """Test loading images from disk and bytes."""

    def test_load_png(self, sample_png):
        session = ImageSession(str(sample_png))

        assert (session.width, session.height) == (500, 500)
        assert session.filename == str(sample_png)
        assert session.get_metadata()["mime"] == "image/png"
        assert session.get_image().mode == "RGBA"

    def test_load_mapping_sets_quality(self, sample_jpeg):
        session = ImageSession({"file": str(sample_jpeg), "quality": 50})

        assert session.quality == 50
        assert session.get_metadata()["mime"] == "image/jpeg"

    def test_load_unsupported_format(self, tmp_path):
        path = tmp_path / "picture.bmp"
        Image.new("RGB", (5, 5)).save(path, format="BMP")

        with pytest.raises(UnsupportedFormatError):
            ImageSession(str(path))

    def test_failed_load_keeps_canvas(self, sample_png):
        session = ImageSession(str(sample_png))

        with pytest.raises(FileNotExistError):
            session.load("/nonexistent/photo.png")

        assert session.width == 500

    def test_failed_load_keeps_quality(self, tmp_path):
        garbage = tmp_path / "broken.png"
        garbage.write_bytes(b"not an image")
        session = ImageSession()

        with pytest.raises(FileNotExistError):
            session.load({"file": "/nonexistent/photo.png", "quality": 5})
        with pytest.raises(DecodeError):
            session.load({"file": str(garbage), "quality": 5})

        assert session.quality == 80

    def test_load_bytes(self, sample_jpeg):
        session = ImageSession().load_bytes(sample_jpeg.read_bytes(), filename="upload.jpg")

        assert (session.width, session.height) == (120, 80)
        assert session.filename == "upload.jpg"

    def test_context_manager_destroys(self, sample_png):
        with ImageSession(str(sample_png)) as session:
            assert session.width == 500

        assert session.width is None
        assert session.filename is None
        with pytest.raises(ResourceMissingError):
            session.get_image()


class TestGeometry:
    """Test geometry operations through the session."""

    def test_crop(self, sample_png):
        session = ImageSession(str(sample_png)).crop({"x": 50, "y": 80, "width": 100, "height": 60})

        assert (session.width, session.height) == (100, 60)
        assert session.get_metadata()["width"] == 100

    def test_crop_out_of_bounds_keeps_canvas(self, sample_png):
        session = ImageSession(str(sample_png))

        with pytest.raises(InvalidGeometryError):
            session.crop(50, 80, 500, 500)

        assert (session.width, session.height) == (500, 500)

    def test_resize_policies(self, sample_png):
        session = ImageSession(str(sample_png))

        session.resize("resizecrop", (400, 200))
        assert (session.width, session.height) == (400, 200)

        session.resize({"type": "reduce", "size": (100, 100)})
        assert (session.width, session.height) == (100, 50)

        session.resize("resize", 30)
        assert (session.width, session.height) == (30, 30)

    def test_invalid_resize_keeps_canvas(self, sample_png):
        session = ImageSession(str(sample_png))

        with pytest.raises(InvalidArgumentError):
            session.resize("stretch", 100)
        with pytest.raises(InvalidGeometryError):
            session.resize("resize", 0)

        assert session.width == 500

    def test_rotate_defaults_to_transparent(self):
        session = ImageSession().set_image(Image.new("RGBA", (40, 20), (0, 0, 255, 255)))

        session.rotate(45)

        assert session.width > 40
        assert session.get_image().getpixel((0, 0))[3] == 0

    def test_rotate_with_background(self):
        session = ImageSession().set_image(Image.new("RGBA", (40, 20), (0, 0, 255, 255)))

        session.rotate(30, "#00ff00")

        assert session.get_image().getpixel((0, 0)) == (0, 255, 0, 255)

    def test_flip_both_is_half_turn(self):
        image = Image.new("RGBA", (6, 4), (0, 0, 0, 255))
        image.putpixel((1, 0), (255, 0, 0, 255))
        flipped = ImageSession().set_image(image.copy()).flip("both").get_image()
        rotated = ImageSession().set_image(image.copy()).rotate(180).get_image()

        assert flipped.tobytes() == rotated.tobytes()

    def test_invalid_flip_keeps_canvas(self):
        image = Image.new("RGBA", (6, 4), (0, 0, 0, 255))
        image.putpixel((0, 0), (255, 0, 0, 255))
        session = ImageSession().set_image(image)

        with pytest.raises(InvalidArgumentError):
            session.flip("diagonal")

        assert session.get_image().getpixel((0, 0)) == (255, 0, 0, 255)


class TestFilters:
    """Test the filter methods chain and keep the canvas shape."""

    def test_chain_returns_session(self, sample_png):
        session = ImageSession(str(sample_png))

        result = (
            session
            .blur()
            .blur("selective", passes=2)
            .brightness(10)
            .contrast(-5)
            .colorize("#102030")
            .edge_detection()
            .emboss()
            .mean_remove()
            .smooth(4)
            .pixelate(5, advanced=True)
            .grayscale()
            .negate()
        )

        assert result is session
        assert (session.width, session.height) == (500, 500)
        assert session.get_image().mode == "RGBA"

    def test_sepia_keeps_opacity(self):
        session = ImageSession().set_image(Image.new("RGBA", (4, 4), (120, 120, 120, 255)))

        session.sepia()

        red, green, blue, alpha = session.get_image().getpixel((0, 0))
        assert red > green > blue
        assert alpha == 255

    def test_sepia_alpha_adds_transparency(self):
        session = ImageSession().set_image(Image.new("RGBA", (4, 4), (120, 120, 120, 255)))

        session.sepia(alpha=100)

        assert session.get_image().getpixel((0, 0))[3] < 255

    def test_vignette_zero_level_is_noop(self, sample_png):
        session = ImageSession(str(sample_png))
        before = session.get_image().tobytes()

        session.vignette(size=0.7, level=0)

        assert session.get_image().tobytes() == before

    def test_vignette_darkens_corners(self, sample_png):
        session = ImageSession(str(sample_png)).vignette()

        red, green, blue, alpha = session.get_image().getpixel((0, 0))
        assert 5 <= red <= 6
        assert 23 <= green <= 24
        assert 39 <= blue <= 40
        assert alpha == 255
        assert session.get_image().getpixel((250, 250)) == (30, 120, 200, 255)

    def test_invalid_blur_type(self, sample_png):
        with pytest.raises(InvalidArgumentError):
            ImageSession(str(sample_png)).blur("motion")


class TestWatermark:
    """Test set_watermark and apply_watermark."""

    def test_set_then_apply(self, opaque_canvas, red_watermark):
        session = ImageSession().set_image(opaque_canvas)

        session.set_watermark({"image": red_watermark, "position": "bottom right"}).apply_watermark()

        assert session.get_image().getpixel((399, 299)) == (255, 0, 0, 255)
        assert session.get_image().getpixel((299, 249)) == (255, 255, 255, 255)

    def test_apply_with_options(self, opaque_canvas, red_watermark):
        session = ImageSession().set_image(opaque_canvas)

        session.apply_watermark({"image": red_watermark, "position": "top left", "margin": 10})

        assert session.get_image().getpixel((10, 10)) == (255, 0, 0, 255)
        assert session.get_image().getpixel((9, 9)) == (255, 255, 255, 255)

    def test_watermark_from_file(self, sample_png, tmp_path):
        logo = tmp_path / "logo.png"
        Image.new("RGBA", (20, 20), (0, 255, 0, 255)).save(logo)
        session = ImageSession(str(sample_png))

        session.apply_watermark({"file": str(logo), "position": "center center"})

        assert session.get_image().getpixel((250, 250)) == (0, 255, 0, 255)


class TestOutput:
    """Test generate() and save()."""

    def test_generate_uses_source_format(self, sample_jpeg):
        data = ImageSession(str(sample_jpeg)).generate()
        assert data.startswith(b"\xff\xd8")

    def test_generate_png_round_trip(self, sample_png, temp_output_dir):
        target = temp_output_dir / "out.png"

        data = ImageSession(str(sample_png)).resize("resize", (64, 32)).generate(str(target))

        assert data.startswith(b"\x89PNG")
        with Image.open(target) as reloaded:
            assert reloaded.size == (64, 32)

    def test_generate_jpeg_from_png(self, sample_png, temp_output_dir):
        target = temp_output_dir / "out.jpg"

        ImageSession(str(sample_png)).generate(str(target))

        with Image.open(target) as reloaded:
            assert reloaded.format == "JPEG"
            assert reloaded.size == (500, 500)

    def test_mime_without_filename(self, sample_png):
        data = ImageSession(str(sample_png)).generate(mime="image/gif")
        assert data.startswith(b"GIF8")

    def test_mime_matching_extension(self, sample_png, temp_output_dir):
        target = temp_output_dir / "out.jpg"

        ImageSession(str(sample_png)).generate(str(target), mime="image/jpeg")

        with Image.open(target) as reloaded:
            assert reloaded.format == "JPEG"

    def test_mime_disagreeing_with_extension(self, sample_png, temp_output_dir):
        target = temp_output_dir / "out.png"

        with pytest.raises(UnsupportedFormatError):
            ImageSession(str(sample_png)).generate(str(target), mime="image/gif")

        assert not target.exists()

    def test_unsupported_extension_with_mime(self, sample_png, temp_output_dir):
        target = temp_output_dir / "out.bmp"

        with pytest.raises(UnsupportedFormatError):
            ImageSession(str(sample_png)).generate(str(target), mime="image/png")

        assert not target.exists()

    def test_unsupported_extension(self, sample_png, temp_output_dir):
        with pytest.raises(UnsupportedFormatError):
            ImageSession(str(sample_png)).generate(str(temp_output_dir / "out.bmp"))

    def test_save_overwrites_source(self, sample_png):
        ImageSession(str(sample_png)).crop(0, 0, 10, 10).save()

        with Image.open(sample_png) as reloaded:
            assert reloaded.size == (10, 10)

    def test_quality_changes_jpeg_size(self):
        noisy = Image.effect_noise((64, 64), 80).convert("RGBA")
        low = ImageSession().set_image(noisy.copy()).set_quality(10).generate(mime="image/jpeg")
        high = ImageSession().set_image(noisy.copy()).set_quality(95).generate(mime="image/jpeg")

        assert len(low) < len(high)

    def test_generate_from_bytes(self, sample_png):
        data = ImageSession(str(sample_png)).generate(mime="image/png")

        with Image.open(io.BytesIO(data)) as reloaded:
            assert reloaded.size == (500, 500)


if __name__ == "__main__":
    unittest.main()
