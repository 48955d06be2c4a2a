"""
Color normalization for Watimage.

Converts any supported color representation into a canonical Color:

- The transparent sentinel (COLOR_TRANSPARENT) -> Color(0, 0, 0, 127)
- A 3 or 4 element mapping or sequence keyed by red/green/blue/alpha,
  r/g/b/a or 0/1/2/3 (first complete key-set wins, alpha defaults to 0)
- A hexadecimal string of 3, 4, 6 or 8 digits, with or without a leading '#'

Example:
    >>> parse_color("#f0a")
    Color(red=255, green=0, blue=170, alpha=0)
    >>> parse_color({"r": 300, "g": 20, "b": 10, "a": 200})
    Color(red=255, green=20, blue=10, alpha=127)
"""

from collections.abc import Mapping, Sequence
from numbers import Real
from typing import Any, Optional, Tuple

from WI_Libs.ImageEditingLib.image_editing_ops import fit_in_range
from WI_Libs.ImageEditingLib.image_models import Color
from WI_Libs.constants import COLOR_TRANSPARENT, MAX_ALPHA_VALUE, MAX_CHANNEL_VALUE
from WI_Libs.exceptions import InvalidColorError

COLOR_KEY_SETS: Tuple[Tuple[Any, Any, Any, Any], ...] = (
    ("red", "green", "blue", "alpha"),
    ("r", "g", "b", "a"),
    (0, 1, 2, 3),
)

HEX_DIGITS = set("0123456789abcdefABCDEF")


def parse_color(value: Any) -> Color:
    """
    Return the canonical Color for any accepted color representation.

    Args:
        value: Sentinel, Color, mapping, sequence or hexadecimal string

    Returns:
        Color with red/green/blue clamped to 0-255 and alpha to 0-127

    Raises:
        InvalidColorError: If the value matches none of the accepted shapes
    """
    if isinstance(value, Color):
        return value

    if _is_transparent_sentinel(value):
        return Color(0, 0, 0, MAX_ALPHA_VALUE)

    if isinstance(value, str):
        return _parse_hex(value)

    if isinstance(value, (Mapping, Sequence)) and not isinstance(value, (bytes, bytearray)):
        return _parse_container(value)

    raise InvalidColorError(f"Invalid color value {value!r}", value=value)


def _is_transparent_sentinel(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and value == COLOR_TRANSPARENT
    )


def _parse_container(value: Any) -> Color:
    if len(value) not in (3, 4):
        raise InvalidColorError(
            f"Color containers need 3 or 4 channels, got {len(value)}: {value!r}",
            value=value,
        )

    for red_key, green_key, blue_key, alpha_key in COLOR_KEY_SETS:
        red = _lookup(value, red_key)
        green = _lookup(value, green_key)
        blue = _lookup(value, blue_key)
        if red is None or green is None or blue is None:
            continue

        alpha = _lookup(value, alpha_key)
        channels = [red, green, blue, 0 if alpha is None else alpha]
        for channel in channels:
            if isinstance(channel, bool) or not isinstance(channel, Real):
                raise InvalidColorError(
                    f"Color channels must be numeric, got {channel!r} in {value!r}",
                    value=value,
                )

        return Color(
            int(fit_in_range(channels[0], 0, MAX_CHANNEL_VALUE)),
            int(fit_in_range(channels[1], 0, MAX_CHANNEL_VALUE)),
            int(fit_in_range(channels[2], 0, MAX_CHANNEL_VALUE)),
            int(fit_in_range(channels[3], 0, MAX_ALPHA_VALUE)),
        )

    raise InvalidColorError(f"Invalid array color value {value!r}", value=value)


def _lookup(container: Any, key: Any) -> Optional[Any]:
    if isinstance(container, Mapping):
        return container.get(key)
    if isinstance(key, int) and key < len(container):
        return container[key]
    return None


def _parse_hex(value: str) -> Color:
    digits = value.lstrip("#")

    if not digits or not set(digits) <= HEX_DIGITS:
        raise InvalidColorError(f"Invalid hexadecimal color value \"{value}\"", value=value)

    if len(digits) in (3, 4):
        pairs = [digit * 2 for digit in digits]
    elif len(digits) in (6, 8):
        pairs = [digits[i:i + 2] for i in range(0, len(digits), 2)]
    else:
        raise InvalidColorError(f"Invalid hexadecimal color value \"{value}\"", value=value)

    red, green, blue = (int(pair, 16) for pair in pairs[:3])
    # alpha is read on the 0-127 scale as given, never rescaled from 0-255
    alpha = int(pairs[3], 16) if len(pairs) == 4 else 0
    return Color(red, green, blue, fit_in_range(alpha, 0, MAX_ALPHA_VALUE))
