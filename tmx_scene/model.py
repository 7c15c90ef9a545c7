"""
Scene model for decoded TMX (Tiled Map XML) maps.

=============================================================================
WHAT IS IN THE MODEL?
=============================================================================

The parser turns a TMX document into this tree of plain data holders:

    TiledMap
    ├── properties            {name: value}
    ├── tile_layers[]         TileLayer
    │   ├── properties
    │   └── tiles[col, row]   Tile or None
    ├── object_groups[]       ObjectGroup
    │   ├── properties
    │   └── objects[]         MapObject (+ points / path for shapes)
    └── image_layers[]        ImageLayer
        ├── properties
        └── image             Image or None

The map owns everything below it. Children refer back to their parent by
INDEX into the owning list (Tile.layer_index, MapObject.group_index), never
by object reference, so the tree has no cycles.

=============================================================================
COORDINATES
=============================================================================

All pixel positions are already converted to the engine convention:
origin at the bottom-left of the map, +y up. Row 0 of a tile layer is
still the TOPMOST row, as written in the TMX file.

    Tile (col=0, row=0) on a 2x2 map of 32px tiles:
        rect     = Rect(x=0, y=32, width=32, height=32)
        position = (16, 48)   # rect centre

Once load() returns, the model is not mutated again and can be shared
between readers freely.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict, Tuple, Union, Iterator

import numpy as np

from .color import Color
from .geometry import Rect, Path as ShapePath


# =============================================================================
# IMAGE CLASS
# =============================================================================

@dataclass
class Image:
    """
    Image reference used by image layers.

    source: Path to the image file, as written in the TMX (relative to it)
    width:  Image width in pixels (0 when the TMX does not say)
    height: Image height in pixels (0 when the TMX does not say)
    trans:  Transparent colour key in hex (e.g. "ff00ff"), if any
    """
    source: str
    width: int = 0
    height: int = 0
    trans: Optional[str] = None


# =============================================================================
# TILE CLASS
# =============================================================================

@dataclass
class Tile:
    """
    One grid cell of a decoded tile layer.

    gid has the three flip bits already removed. gid 0 means "no tile":
    the cell exists (it has a rect and a position) but nothing is drawn.

    The flip flags are independent; all three may be set at once. The
    diagonal flip swaps x and y and is applied before the axis flips.
    """
    gid: int                                        # Global tile ID (0 = empty)
    column: int                                     # 0-based, left to right
    row: int                                        # 0-based, top to bottom
    rect: Rect                                      # Pixel rect (engine coords)
    position: Tuple[float, float]                   # Rect centre
    flipped_horizontally: bool = False
    flipped_vertically: bool = False
    flipped_diagonally: bool = False
    layer_index: int = -1                           # Index into map.tile_layers

    @property
    def is_empty(self) -> bool:
        return self.gid == 0


# =============================================================================
# TILE LAYER CLASS
# =============================================================================

@dataclass
class TileLayer:
    """
    Tile layer - a grid of tile placements.

    ==========================================================================
    TILE ACCESS
    ==========================================================================

    The grid is a numpy object array indexed [column, row] and always sized
    exactly map.width x map.height. Cells hold None until the layer's CSV
    data is decoded; after that every cell holds a Tile, and empty cells
    are Tiles with gid 0.

        tile = layer.tile_at(5, 10)      # Tile, or None out of bounds
        gids = layer.gids()              # uint32 array, shape (height, width)

    ==========================================================================
    """
    name: str                                       # Layer name
    width: int                                      # Width in tiles
    height: int                                     # Height in tiles
    visible: bool = True                            # Is layer rendered?
    properties: Dict[str, str] = field(default_factory=dict)
    tiles: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self.tiles = np.empty((self.width, self.height), dtype=object)

    def tile_at(self, column: int, row: int) -> Optional[Tile]:
        """Get the cell at (column, row).

        Empty cells are gid-0 tiles. None only when (column, row) is out of
        bounds or the layer has no decoded data.
        """
        if 0 <= column < self.width and 0 <= row < self.height:
            return self.tiles[column, row]
        return None

    def set_tile(self, tile: Tile):
        self.tiles[tile.column, tile.row] = tile

    def iter_tiles(self, include_empty: bool = False) -> Iterator[Tile]:
        """Iterate cells in row-major order (as written in the TMX)."""
        for row in range(self.height):
            for column in range(self.width):
                tile = self.tiles[column, row]
                if tile is None:
                    continue
                if include_empty or not tile.is_empty:
                    yield tile

    @property
    def tile_count(self) -> int:
        """Number of cells with a tile placed (gid != 0)."""
        return sum(1 for _ in self.iter_tiles())

    def gids(self) -> np.ndarray:
        """
        Tile IDs as a (height, width) uint32 array, row 0 on top.

        Flip flags are not included; 0 marks an empty cell.
        """
        result = np.zeros((self.height, self.width), dtype=np.uint32)
        for tile in self.iter_tiles():
            result[tile.row, tile.column] = tile.gid
        return result


# =============================================================================
# MAP OBJECT CLASS
# =============================================================================

class ObjectKind(Enum):
    """Shape of a map object, as far as the parser could tell."""
    UNSET = 0
    RECTANGLE = 1
    POLYGON = 2
    POLYLINE = 3
    ELLIPSE = 4
    TILE = 5


@dataclass
class MapObject:
    """
    Object in an object group.

    ==========================================================================
    OBJECT KINDS
    ==========================================================================

    RECTANGLE: explicit width/height, no gid
    ELLIPSE:   rectangle bounds with an <ellipse/> child
    POLYGON:   closed point list (<polygon points="..."/>)
    POLYLINE:  open point list (<polyline points="..."/>)
    TILE:      references a tile by gid; size defaults to the map tile size
    UNSET:     anything else (e.g. point objects)

    points are relative to position, y already flipped to +y up. path is
    built from points: closed for polygons, open for polylines.

    rotation is kept in degrees, clockwise, exactly as in the TMX.

    ==========================================================================
    """
    id: int = -1                                    # Unique object ID (-1 if absent)
    kind: ObjectKind = ObjectKind.UNSET
    gid: Optional[int] = None                       # Tile GID (tile objects only)
    flipped_horizontally: bool = False
    flipped_vertically: bool = False
    flipped_diagonally: bool = False
    type: str = ""                                  # Free-form type/class string
    name: str = ""                                  # Object name
    position: Tuple[float, float] = (0.0, 0.0)      # Engine coords, see ObjectAnchor
    size: Tuple[float, float] = (0.0, 0.0)          # Width, height in pixels
    rotation: float = 0.0                           # Degrees, clockwise
    visible: bool = True
    points: Optional[np.ndarray] = field(default=None, compare=False)  # (N, 2)
    path: Optional[ShapePath] = field(default=None, compare=False)
    properties: Dict[str, str] = field(default_factory=dict)
    group_index: int = -1                           # Index into map.object_groups


# =============================================================================
# OBJECT GROUP CLASS
# =============================================================================

@dataclass
class ObjectGroup:
    """
    Object layer - an ordered list of vector objects.

    Used for non-tile data: collision shapes, spawn points, triggers.
    """
    name: str = ""
    visible: bool = True
    objects: List[MapObject] = field(default_factory=list)
    properties: Dict[str, str] = field(default_factory=dict)

    def get_object(self, name: str) -> Optional[MapObject]:
        """First object with this name, or None."""
        for obj in self.objects:
            if obj.name == name:
                return obj
        return None


# =============================================================================
# IMAGE LAYER CLASS
# =============================================================================

@dataclass
class ImageLayer:
    """Single background image with its own offset and opacity."""
    name: str = ""
    visible: bool = True
    offsetx: float = 0.0                            # X pixel offset
    offsety: float = 0.0                            # Y pixel offset
    opacity: float = 1.0                            # 0.0 - 1.0
    image: Optional[Image] = None
    properties: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# TILED MAP CLASS (Main Entry Point)
# =============================================================================

@dataclass
class TiledMap:
    """
    Complete decoded map - the root of the scene model.

    ==========================================================================
    USAGE
    ==========================================================================

    Loading:
        level = TiledMap.load("level1")          # ".tmx" is implied
        print(level)                             # one-line summary

    Accessing layers:
        ground = level.get_tile_layer("Ground")
        tile = ground.tile_at(5, 10)

        spawns = level.get_object_group("Spawns")
        player = spawns.get_object("player")

    ==========================================================================
    """
    width: int = 0                                  # Map width in tiles
    height: int = 0                                 # Map height in tiles
    tilewidth: int = 0                              # Tile width in pixels
    tileheight: int = 0                             # Tile height in pixels
    orientation: str = "orthogonal"
    background_color: Optional[Color] = None
    properties: Dict[str, str] = field(default_factory=dict)
    tile_layers: List[TileLayer] = field(default_factory=list)
    object_groups: List[ObjectGroup] = field(default_factory=list)
    image_layers: List[ImageLayer] = field(default_factory=list)

    @classmethod
    def load(cls, name: Union[str, Path], options=None, loader=None) -> 'TiledMap':
        """
        Load and decode a TMX resource.

        Parameters:
        -----------
        name : str or Path
            Resource name; the default file loader adds ".tmx" when the
            name has no extension.
        options : ParserOptions, optional
        loader : callable, optional
            name -> bytes, raising ResourceNotFoundError when missing.

        Raises:
        -------
        TMXError subclasses, see tmx_scene.errors
        """
        from .loader import load
        return load(name, options=options, loader=loader)

    @classmethod
    def from_bytes(cls, data: bytes, options=None) -> 'TiledMap':
        from .loader import parse_bytes
        return parse_bytes(data, options=options)

    @property
    def tile_size(self) -> Tuple[int, int]:
        return (self.tilewidth, self.tileheight)

    @property
    def map_size(self) -> Tuple[int, int]:
        """Map size in pixels."""
        return (self.width * self.tilewidth, self.height * self.tileheight)

    @property
    def pixel_height(self) -> int:
        return self.height * self.tileheight

    def tile_rect(self, column: int, row: int) -> Rect:
        """
        Pixel rect of grid cell (column, row) in engine coordinates.

        Row 0 is the top row, so it ends up at the top of the pixel space:
            y = map_pixel_height - (row + 1) * tileheight
        """
        return Rect(
            x=column * self.tilewidth,
            y=self.pixel_height - (row + 1) * self.tileheight,
            width=self.tilewidth,
            height=self.tileheight,
        )

    def get_tile_layer(self, name: str) -> Optional[TileLayer]:
        for layer in self.tile_layers:
            if layer.name == name:
                return layer
        return None

    def get_object_group(self, name: str) -> Optional[ObjectGroup]:
        for group in self.object_groups:
            if group.name == name:
                return group
        return None

    def get_image_layer(self, name: str) -> Optional[ImageLayer]:
        for layer in self.image_layers:
            if layer.name == name:
                return layer
        return None

    def describe(self) -> str:
        """One-line summary of the map."""
        return (
            f"Map size in tiles: {{{self.width}, {self.height}}} - "
            f"tile size: {{{self.tilewidth}, {self.tileheight}}}, "
            f"size: {{{self.map_size[0]}, {self.map_size[1]}}}, "
            f"# tile layers: {len(self.tile_layers)}, "
            f"# object groups: {len(self.object_groups)}, "
            f"# image layers: {len(self.image_layers)}"
        )

    def __str__(self) -> str:
        return self.describe()
