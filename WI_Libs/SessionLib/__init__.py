"""
SessionLib - Chainable image sessions

Modules:
    image_session: ImageSession, the fluent editing API
    output_encoder: PNG/JPEG/GIF encoding
"""

from WI_Libs.SessionLib.output_encoder import (
    OutputEncoder,
    get_mime_from_extension,
    normalize_mime,
)
from WI_Libs.SessionLib.image_session import (
    ImageSession,
    normalize_blur_type,
    normalize_flip_axis,
    normalize_resize_type,
)

__all__ = [
    "OutputEncoder",
    "get_mime_from_extension",
    "normalize_mime",
    "ImageSession",
    "normalize_blur_type",
    "normalize_flip_axis",
    "normalize_resize_type",
]
