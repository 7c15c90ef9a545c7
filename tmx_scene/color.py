"""
Map background colour parsing.

Tiled writes colours as "#RRGGBB" or, when an alpha channel is set, as
"#AARRGGBB" (alpha FIRST). Pillow's ImageColor reads "#RRGGBBAA" (alpha
last), so the 8-digit form is reordered before it is handed over.
"""

import logging
from typing import NamedTuple, Optional

from PIL import ImageColor

logger = logging.getLogger(__name__)

HEX_DIGITS = set("0123456789abcdefABCDEF")


class Color(NamedTuple):
    """RGBA colour with each channel normalized to 0.0 - 1.0."""
    r: float
    g: float
    b: float
    a: float = 1.0


def parse_background_color(value: Optional[str]) -> Optional[Color]:
    """
    Parse a Tiled hex colour string.

    Returns None (and logs) for anything that is not '#' followed by
    exactly 6 or 8 hex digits. A cosmetic attribute never fails the parse.
    """
    if not value or not value.startswith("#"):
        logger.debug("Ignoring background colour %r: missing '#'", value)
        return None

    digits = value[1:]
    if len(digits) not in (6, 8) or not set(digits) <= HEX_DIGITS:
        logger.warning("Ignoring malformed background colour %r", value)
        return None

    if len(digits) == 8:
        # AARRGGBB -> RRGGBBAA
        digits = digits[2:] + digits[:2]

    try:
        channels = ImageColor.getrgb("#" + digits)
    except ValueError:
        logger.warning("Ignoring malformed background colour %r", value)
        return None

    if len(channels) == 3:
        channels = (*channels, 255)
    return Color(*(c / 255.0 for c in channels))
