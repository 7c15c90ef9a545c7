"""
tmx_scene - decode Tiled TMX maps into an engine-ready scene model

Requisitos:
    pip install numpy pillow
"""

from .codec import DecodedGID, decode_gid, encode_gid
from .color import Color, parse_background_color
from .config import ObjectAnchor, ParserOptions
from .errors import (
    TMXError,
    ResourceNotFoundError,
    MalformedDocumentError,
    UnsupportedEncodingError,
    StructuralViolationError,
    DataShapeMismatchError,
    FieldFormatError,
)
from .geometry import Rect, Path, parse_points, build_path
from .loader import FileLoader, MemoryLoader, load, parse_bytes, parse_string
from .model import (
    TiledMap, TileLayer, Tile, ObjectGroup, MapObject, ObjectKind,
    ImageLayer, Image,
)
from .parser import ParseContext, ElementType

__version__ = "1.0.0"
__all__ = [
    "load",
    "parse_bytes",
    "parse_string",
    "FileLoader",
    "MemoryLoader",
    "ParserOptions",
    "ObjectAnchor",
    "TiledMap",
    "TileLayer",
    "Tile",
    "ObjectGroup",
    "MapObject",
    "ObjectKind",
    "ImageLayer",
    "Image",
    "ParseContext",
    "ElementType",
    "DecodedGID",
    "decode_gid",
    "encode_gid",
    "Color",
    "parse_background_color",
    "Rect",
    "Path",
    "parse_points",
    "build_path",
    "TMXError",
    "ResourceNotFoundError",
    "MalformedDocumentError",
    "UnsupportedEncodingError",
    "StructuralViolationError",
    "DataShapeMismatchError",
    "FieldFormatError",
]
