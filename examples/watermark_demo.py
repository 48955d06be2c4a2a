"""
Demonstration of the ImageSession API.

Generates a sample image and a watermark, then writes one output file per
feature: watermarking, resizing, rotating, converting, flipping, cropping
and a chain of filters.

Run from the repository root:
    python examples/watermark_demo.py [output_dir]
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
from PIL import Image, ImageDraw

from WI_Libs.SessionLib.image_session import ImageSession
from WI_Libs.exceptions import WatimageError


def create_samples(output_dir):
    """Create a gradient test image and a translucent watermark."""
    source = output_dir / "test.png"
    watermark = output_dir / "watermark.png"

    image = Image.new("RGBA", (600, 500))
    draw = ImageDraw.Draw(image)
    for y in range(500):
        shade = int(255 * y / 500)
        draw.line([(0, y), (599, y)], fill=(shade, 120, 255 - shade, 255))
    image.save(source)

    mark = Image.new("RGBA", (160, 60), (0, 0, 0, 0))
    ImageDraw.Draw(mark).rectangle([0, 0, 159, 59], fill=(255, 255, 255, 160), outline=(0, 0, 0, 255))
    mark.save(watermark)

    return source, watermark


def run_demo(output_dir):
    source, watermark = create_samples(output_dir)
    print(f"Sample image: {source}")
    print("-" * 60)

    # Apply watermarks
    session = ImageSession({"file": str(source), "quality": 70})
    session.set_watermark({"file": str(watermark), "position": "top right"})
    session.apply_watermark().generate(str(output_dir / "test1.png"))
    print("  test1.png: watermark top right")

    # Resize images (resize, resizecrop, resizemin, crop, reduce)
    ImageSession(str(source)).resize("resizecrop", (400, 200)).generate(str(output_dir / "test2.png"))
    print("  test2.png: resizecrop to 400x200")

    # Rotate images
    ImageSession(str(source)).rotate(90).generate(str(output_dir / "test3.png"))
    print("  test3.png: rotated 90 degrees")

    # Export to another format
    ImageSession(str(source)).generate(str(output_dir / "test4.jpg"), "image/jpeg")
    print("  test4.jpg: exported as JPEG")

    # Flip images
    ImageSession(str(source)).flip("vertical").generate(str(output_dir / "test5.png"))
    print("  test5.png: flipped vertically")

    # Crop images, e.g. with values from a client-side cropper
    try:
        ImageSession(str(source)).crop({"width": 500, "height": 500, "x": 50, "y": 80})
    except WatimageError as e:
        print(f"  crop 500x500 at (50, 80) rejected: {e}")
    ImageSession(str(source)).crop({"width": 400, "height": 300, "x": 50, "y": 80}).generate(
        str(output_dir / "test6.png")
    )
    print("  test6.png: cropped 400x300 at (50, 80)")

    # Chain everything together
    with ImageSession(str(source)) as session:
        (session
            .set_quality(80)
            .resize("reduce", 400)
            .sepia()
            .vignette()
            .apply_watermark({"file": str(watermark), "position": "bottom right", "margin": -10, "size": 50})
            .generate(str(output_dir / "test7.jpg")))
    print("  test7.jpg: reduce, sepia, vignette and watermark")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    output_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("demo_output")
    output_dir.mkdir(parents=True, exist_ok=True)

    print("=" * 60)
    print("Watimage Demo")
    print("=" * 60)

    run_demo(output_dir)

    print("\n" + "=" * 60)
    print(f"Done. Results written to {output_dir.resolve()}")
    print("=" * 60)
