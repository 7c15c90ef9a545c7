"""
Parser options and logging setup.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Union


class ObjectAnchor(Enum):
    """
    Where an object's stored position sits on the object.

    BOTTOM_LEFT: position = (x, map_height - y - height). Matches how tiles
                 are placed, so objects and tiles line up without offsets.
    CENTER:      position = centre of the width/height as written, and tile
                 objects are raised by one tile height. A tile object with
                 no size is therefore anchored at (x, map_height - y +
                 tileheight). Kept for scenes built against the older
                 centre-anchored loader.
    """
    BOTTOM_LEFT = "bottom-left"
    CENTER = "center"


@dataclass
class ParserOptions:
    object_anchor: ObjectAnchor = ObjectAnchor.BOTTOM_LEFT
    default_extension: str = "tmx"                  # Added to names without a suffix
    search_paths: List[Union[str, Path]] = field(default_factory=list)
    chunk_size: int = 64 * 1024                     # Bytes per XMLParser.feed()

    def __post_init__(self):
        if isinstance(self.object_anchor, str):
            self.object_anchor = ObjectAnchor(self.object_anchor)
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")


class LogFormatter(logging.Formatter):
    """Compact console formatter, optionally coloured by level."""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = False):
        super().__init__("%(levelname)s %(name)s: %(message)s")
        self.use_color = use_color

    def format(self, record):
        message = super().format(record)
        if self.use_color and record.levelno in self.COLORS:
            return f"{self.COLORS[record.levelno]}{message}{self.RESET}"
        return message


def setup_logging(level=logging.WARNING, color_logs: bool = False):
    """Install a console handler on the tmx_scene logger (CLI use only)."""
    logger = logging.getLogger("tmx_scene")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler()
    handler.setFormatter(LogFormatter(use_color=color_logs))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
