"""
Compatibility wrapper to import Pillow (which provides the `PIL` namespace)
and expose the modules Watimage needs from a single place.

This module loads the Pillow-provided modules via importlib and re-exports
`Image` and `ImageFilter`. It also offers `check_codec`, used
when a session is constructed to fail fast if the installed Pillow was built
without a codec Watimage depends on.
"""
from importlib import import_module
from types import ModuleType
from typing import Optional


def _import(name: str) -> Optional[ModuleType]:
    try:
        return import_module(name)
    except ImportError:
        return None


_pil_image = _import("PIL.Image")
_pil_imagefilter = _import("PIL.ImageFilter")
_pil_features = _import("PIL.features")

if _pil_image is None or _pil_imagefilter is None:
    raise ImportError("pillow (PIL) is required: install with 'pip install Pillow'")

Image = _pil_image
ImageFilter = _pil_imagefilter


def check_codec(codec: str) -> bool:
    """
    Check whether the installed Pillow supports a codec.

    Args:
        codec: Pillow feature name (e.g. 'jpg', 'zlib')

    Returns:
        True if the codec is available, or if Pillow cannot report features
    """
    if _pil_features is None:
        return True
    return bool(_pil_features.check(codec))
