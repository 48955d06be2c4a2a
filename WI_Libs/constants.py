"""
Constants and configuration values for Watimage.

This module centralizes all constant values, magic numbers, and
default settings used throughout the library.
"""

# Color constants
COLOR_TRANSPARENT = -1
MAX_CHANNEL_VALUE = 255
MAX_ALPHA_VALUE = 127  # GD-style alpha: 0 opaque, 127 fully transparent

# Export defaults
DEFAULT_QUALITY = 80
DEFAULT_COMPRESSION = 9
MIN_QUALITY = 0
MAX_QUALITY = 100
MIN_COMPRESSION = 0
MAX_COMPRESSION = 9

# Mime types
MIME_PNG = "image/png"
MIME_JPEG = "image/jpeg"
MIME_GIF = "image/gif"

# Output extension -> mime
EXTENSION_MIMES = {
    "jpg": MIME_JPEG,
    "jpeg": MIME_JPEG,
    "png": MIME_PNG,
    "gif": MIME_GIF,
}

# Mime -> Pillow format name
MIME_FORMATS = {
    MIME_PNG: "PNG",
    MIME_JPEG: "JPEG",
    MIME_GIF: "GIF",
}

# Pillow codecs that must be available at session construction
REQUIRED_CODECS = ("jpg", "zlib")

# Filter ranges
BRIGHTNESS_RANGE = (-255, 255)
CONTRAST_RANGE = (-100, 100)
SMOOTH_RANGE = (-15, 15)
SEPIA_ALPHA_RANGE = (0, 100)

# Vignette defaults and ranges
DEFAULT_VIGNETTE_SIZE = 0.7
DEFAULT_VIGNETTE_LEVEL = 0.8
VIGNETTE_SIZE_RANGE = (0, 10)
VIGNETTE_LEVEL_RANGE = (0, 1)

# Sepia colorize tint
SEPIA_TINT = {"r": 100, "g": 70, "b": 50}
SEPIA_CONTRAST = -3
SEPIA_BRIGHTNESS = -15

# Watermark defaults
DEFAULT_WATERMARK_POSITION = "center center"
WATERMARK_SIZE_FULL = "full"

# Option field names
FIELD_FILE = "file"
FIELD_QUALITY = "quality"
FIELD_TYPE = "type"
FIELD_SIZE = "size"
FIELD_POSITION = "position"
FIELD_MARGIN = "margin"
FIELD_IMAGE = "image"
