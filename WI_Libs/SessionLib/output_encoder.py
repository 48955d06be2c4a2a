"""
Output encoding for Watimage.

Turns a canvas into PNG, JPEG or GIF bytes and optionally writes them to
disk. The output mime is chosen from an explicit override or from the target
filename's extension.

Classes:
    OutputEncoder: Encoding configuration and Pillow save logic

Functions:
    get_mime_from_extension: Map a filename to its output mime
    normalize_mime: Validate a mime override
"""

import io
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from WI_Libs.ImageEditingLib.image_editing_ops import fit_in_range
from WI_Libs.ImageEditingLib.image_models import OutputMime
from WI_Libs.constants import (
    DEFAULT_COMPRESSION,
    DEFAULT_QUALITY,
    EXTENSION_MIMES,
    MAX_COMPRESSION,
    MAX_QUALITY,
    MIME_FORMATS,
    MIN_COMPRESSION,
    MIN_QUALITY,
)
from WI_Libs.exceptions import EncodeError, UnsupportedFormatError

logger = logging.getLogger(__name__)


def get_mime_from_extension(filename: Union[str, Path]) -> OutputMime:
    """
    Get the output mime for a filename from its extension.

    Raises:
        UnsupportedFormatError: If the extension is not jpg, jpeg, png or gif
    """
    extension = Path(filename).suffix.lstrip(".").lower()
    mime = EXTENSION_MIMES.get(extension)
    if mime is None:
        raise UnsupportedFormatError(f"Invalid extension \"{extension}\"", value=extension)
    return OutputMime(mime)


def normalize_mime(mime: Any) -> OutputMime:
    try:
        return OutputMime(mime)
    except ValueError:
        raise UnsupportedFormatError(f"Invalid output format \"{mime}\"", value=mime)


@dataclass
class OutputEncoder:
    """Configuration for encoding a canvas.

    Attributes:
        mime: Output mime type
        quality: JPEG quality 0-100 (default: 80)
        compression: PNG compression level 0-9 (default: 9)
    """
    mime: OutputMime = OutputMime.PNG
    quality: int = DEFAULT_QUALITY
    compression: int = DEFAULT_COMPRESSION

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mime"] = self.mime.value
        return data

    def get_save_kwargs(self) -> Dict[str, Any]:
        """Get PIL Image.save() kwargs based on format."""
        save_format = MIME_FORMATS[self.mime.value]
        kwargs: Dict[str, Any] = {"format": save_format}

        if save_format == "JPEG":
            kwargs["quality"] = int(fit_in_range(self.quality, MIN_QUALITY, MAX_QUALITY))
            kwargs["progressive"] = True
        elif save_format == "PNG":
            kwargs["compress_level"] = int(fit_in_range(self.compression, MIN_COMPRESSION, MAX_COMPRESSION))

        return kwargs

    def prepare(self, image: Any) -> Any:
        """Convert the canvas to a mode the output format can store."""
        if self.mime == OutputMime.JPEG and image.mode != "RGB":
            return image.convert("RGB")
        return image

    def encode(self, image: Any, filename: Optional[Union[str, Path]] = None) -> bytes:
        """
        Encode an image, writing it to filename when given.

        Args:
            image: PIL Image to encode
            filename: Optional output path

        Returns:
            The encoded bytes

        Raises:
            EncodeError: If Pillow fails to encode or the file cannot be written
        """
        if not hasattr(image, "save"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")

        label = str(filename) if filename else "<bytes>"
        buffer = io.BytesIO()
        try:
            self.prepare(image).save(buffer, **self.get_save_kwargs())
            data = buffer.getvalue()
            if filename:
                Path(filename).write_bytes(data)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Failed to save image to {label}: {str(e)}", filename=label) from e

        logger.debug(f"Encoded {self.mime.value} ({len(data)} bytes) to {label}")
        return data
