"""
Streaming TMX decoder - the event-driven state machine.

=============================================================================
HOW IT WORKS
=============================================================================

ParseContext is an ElementTree parser *target*: XMLParser calls

    start(tag, attrib)   for every opening tag
    data(text)           for character data
    end(tag)             for every closing tag
    close()              once the document is complete

and the context grows the TiledMap as the events arrive. Nothing is
buffered except the text of the <data> element currently being read.

=============================================================================
SCOPE AND "CURRENT" ITEMS
=============================================================================

Two values describe where the parser is:

    scope    the structural element that child elements attach to:
             MAP, LAYER, OBJECTGROUP, OBJECT, IMAGELAYER, GROUP, NONE
             or INVALID
    element  the last recognised element of any kind (DATA, PROPERTY, ...)

Leaf elements (data, property, polygon, polyline, image, ...) update
`element` only, so several <property> siblings all route to the same bag.

Closing a layer, map, object, objectgroup or imagelayer resets the scope
to NONE.

An unrecognised element (editorsettings, tileset, tile, text, ...) is
ISOLATED: the scope is saved, set to INVALID while the element is open,
and restored when it closes. Everything nested inside it (properties,
per-tile collision objectgroups, images, ...) is skipped, so nothing is
attached to the wrong owner, and the sibling that follows gets its owner
back:

    <map>
      <editorsettings>...</editorsettings>   scope MAP -> INVALID -> MAP
      <properties>...</properties>           map properties

A layer <group> only hides its own properties; the layers inside it are
decoded as ordinary map layers.

The "current" layer/group/object is always the LAST item of the owning
list:

    current tile layer    map.tile_layers[-1]
    current object group  map.object_groups[-1]
    current object        map.object_groups[-1].objects[-1]
    current image layer   map.image_layers[-1]

A child that needs one of these when it does not exist is a
StructuralViolationError.

=============================================================================
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from .codec import decode_gid, MAX_PACKED_GID
from .color import parse_background_color
from .config import ObjectAnchor, ParserOptions
from .errors import (
    DataShapeMismatchError,
    FieldFormatError,
    StructuralViolationError,
    UnsupportedEncodingError,
)
from .geometry import build_path, parse_points
from .model import (
    Image,
    ImageLayer,
    MapObject,
    ObjectGroup,
    ObjectKind,
    Tile,
    TiledMap,
    TileLayer,
)

logger = logging.getLogger(__name__)


class ElementType(Enum):
    NONE = "none"
    MAP = "map"
    LAYER = "layer"
    DATA = "data"
    OBJECTGROUP = "objectgroup"
    OBJECT = "object"
    POLYGON = "polygon"
    POLYLINE = "polyline"
    ELLIPSE = "ellipse"
    POINT = "point"
    PROPERTIES = "properties"
    PROPERTY = "property"
    IMAGELAYER = "imagelayer"
    IMAGE = "image"
    GROUP = "group"
    ANIMATION = "animation"
    FRAME = "frame"
    INVALID = "invalid"

    @classmethod
    def classify(cls, tag: str) -> 'ElementType':
        """Map a tag name to its element type; unknown tags are INVALID."""
        try:
            element = cls(tag.lower())
        except ValueError:
            return cls.INVALID
        if element in (cls.NONE, cls.INVALID):
            return cls.INVALID
        return element


# Elements whose start opens a scope that children attach to
SCOPE_ELEMENTS = frozenset({
    ElementType.MAP,
    ElementType.LAYER,
    ElementType.OBJECTGROUP,
    ElementType.OBJECT,
    ElementType.IMAGELAYER,
})

# Recognised, but neither modelled nor scope-changing
PASSTHROUGH_ELEMENTS = frozenset({
    ElementType.PROPERTIES,
    ElementType.ANIMATION,
    ElementType.FRAME,
})


# =============================================================================
# ATTRIBUTE HELPERS
# =============================================================================

def _int_attr(attrib: Dict[str, str], name: str, element: str,
              default: Optional[int] = None) -> Optional[int]:
    value = attrib.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise FieldFormatError(element, name, value, "expected an integer")


def _required_int_attr(attrib: Dict[str, str], name: str, element: str) -> int:
    if name not in attrib:
        raise FieldFormatError(element, name, None, "required attribute is missing")
    return _int_attr(attrib, name, element)


def _float_attr(attrib: Dict[str, str], name: str, element: str,
                default: float = 0.0) -> float:
    value = attrib.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise FieldFormatError(element, name, value, "expected a number")


def _visible_attr(attrib: Dict[str, str]) -> bool:
    # Absent means visible
    return attrib.get("visible", "1") != "0"


def _packed_gid(text: str, element: str, field: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise FieldFormatError(element, field, text, "expected an integer")
    if not 0 <= value <= MAX_PACKED_GID:
        raise FieldFormatError(element, field, text, "outside the 32-bit range")
    return value


# =============================================================================
# PARSE CONTEXT
# =============================================================================

class ParseContext:
    """
    Parser target that builds a TiledMap from XML events.

    One context serves exactly one parse; create a fresh one per document.
    """

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options or ParserOptions()
        self.map = TiledMap()
        self.scope = ElementType.NONE
        self.element = ElementType.NONE
        self.parsing_data = False
        self._data_chunks: List[str] = []
        self._map_seen = False
        # (bag, name) of a <property> whose value is its text content
        self._pending_property = None
        self._property_chunks: List[str] = []
        # Scopes saved by open unsupported elements and layer groups
        self._saved_scopes: List[ElementType] = []
        self._unsupported_depth = 0

        self._start_handlers = {
            ElementType.MAP: self._start_map,
            ElementType.LAYER: self._start_layer,
            ElementType.DATA: self._start_data,
            ElementType.OBJECTGROUP: self._start_objectgroup,
            ElementType.OBJECT: self._start_object,
            ElementType.POLYGON: self._start_polygon,
            ElementType.POLYLINE: self._start_polyline,
            ElementType.ELLIPSE: self._start_ellipse,
            ElementType.POINT: self._start_point,
            ElementType.PROPERTY: self._start_property,
            ElementType.IMAGELAYER: self._start_imagelayer,
            ElementType.IMAGE: self._start_image,
        }

    @property
    def data_buffer(self) -> str:
        return "".join(self._data_chunks)

    # -------------------------------------------------------------------------
    # XMLParser target protocol
    # -------------------------------------------------------------------------

    def start(self, tag: str, attrib: Dict[str, str]):
        element = ElementType.classify(tag)

        if element is ElementType.INVALID:
            logger.debug("Ignoring unsupported element <%s>", tag)
            self._saved_scopes.append(self.scope)
            self._unsupported_depth += 1
            self.scope = ElementType.INVALID
            self.element = ElementType.INVALID
            return

        if element in PASSTHROUGH_ELEMENTS:
            if element is not ElementType.PROPERTIES:
                logger.debug("<%s> is recognised but not modelled", tag)
            return

        if self._unsupported_depth:
            logger.debug("Ignoring <%s> inside an unsupported element", tag)
            return

        if element is ElementType.GROUP:
            self._saved_scopes.append(self.scope)
            self.scope = ElementType.GROUP
            self.element = ElementType.GROUP
            return

        self._start_handlers[element](attrib)
        self.element = element
        if element in SCOPE_ELEMENTS:
            self.scope = element

    def end(self, tag: str):
        element = ElementType.classify(tag)

        if element is ElementType.INVALID:
            self._unsupported_depth -= 1
            self.scope = self._saved_scopes.pop()
            return

        if self._unsupported_depth:
            return

        if element is ElementType.GROUP:
            self.scope = self._saved_scopes.pop()
        elif element is ElementType.DATA:
            if self.parsing_data:
                self._decode_csv_tile_data()
        elif element is ElementType.PROPERTY:
            self._finish_property()
        elif element in SCOPE_ELEMENTS:
            self.scope = ElementType.NONE

    def data(self, text: str):
        if self.parsing_data:
            self._data_chunks.append(text)
        elif self._pending_property is not None:
            self._property_chunks.append(text)

    def close(self) -> TiledMap:
        if not self._map_seen:
            raise StructuralViolationError("Document has no <map> element", element="map")
        return self.map

    # -------------------------------------------------------------------------
    # "Current" lookups
    # -------------------------------------------------------------------------

    def current_tile_layer(self, purpose: str) -> TileLayer:
        if not self.map.tile_layers:
            raise StructuralViolationError(
                f"Error parsing {purpose}. There are no tile layers "
                f"to associate the {purpose} with!",
                element="layer",
            )
        return self.map.tile_layers[-1]

    def current_object_group(self, purpose: str) -> ObjectGroup:
        if not self.map.object_groups:
            raise StructuralViolationError(
                f"Error parsing {purpose}. There are no object groups "
                f"to associate the {purpose} with!",
                element="objectgroup",
            )
        return self.map.object_groups[-1]

    def current_object(self, purpose: str) -> MapObject:
        group = self.map.object_groups[-1] if self.map.object_groups else None
        if group is None or not group.objects:
            raise StructuralViolationError(
                f"Error parsing {purpose}. There are no objects "
                f"to associate the {purpose} with!",
                element="object",
            )
        return group.objects[-1]

    def current_image_layer(self, purpose: str) -> ImageLayer:
        if not self.map.image_layers:
            raise StructuralViolationError(
                f"Error parsing {purpose}. There are no image layers "
                f"to associate the {purpose} with!",
                element="imagelayer",
            )
        return self.map.image_layers[-1]

    # -------------------------------------------------------------------------
    # Start handlers
    # -------------------------------------------------------------------------

    def _start_map(self, attrib: Dict[str, str]):
        tiled_map = self.map
        tiled_map.width = _required_int_attr(attrib, "width", "map")
        tiled_map.height = _required_int_attr(attrib, "height", "map")
        tiled_map.tilewidth = _required_int_attr(attrib, "tilewidth", "map")
        tiled_map.tileheight = _required_int_attr(attrib, "tileheight", "map")

        orientation = attrib.get("orientation", "orthogonal")
        tiled_map.orientation = orientation
        if orientation != "orthogonal":
            logger.warning("Map orientation '%s' is decoded as orthogonal", orientation)

        if "backgroundcolor" in attrib:
            tiled_map.background_color = parse_background_color(attrib["backgroundcolor"])

        self._map_seen = True

    def _start_layer(self, attrib: Dict[str, str]):
        layer = TileLayer(
            name=attrib.get("name", ""),
            width=self.map.width,
            height=self.map.height,
            visible=_visible_attr(attrib),
        )
        self.map.tile_layers.append(layer)

    def _start_data(self, attrib: Dict[str, str]):
        encoding = attrib.get("encoding")
        if encoding is None:
            logger.warning("Tile data without an encoding is not supported; layer stays empty")
            return
        if encoding != "csv":
            raise UnsupportedEncodingError(encoding)

        self.parsing_data = True
        self._data_chunks = []

    def _start_objectgroup(self, attrib: Dict[str, str]):
        group = ObjectGroup(
            name=attrib.get("name", ""),
            visible=_visible_attr(attrib),
        )
        self.map.object_groups.append(group)

    def _start_object(self, attrib: Dict[str, str]):
        group = self.current_object_group("object data")
        tiled_map = self.map

        obj = MapObject(
            id=_int_attr(attrib, "id", "object", default=-1),
            name=attrib.get("name", ""),
            # Tiled 1.9+ writes "class" instead of "type"
            type=attrib.get("type", attrib.get("class", "")),
            rotation=_float_attr(attrib, "rotation", "object"),
            visible=_visible_attr(attrib),
            group_index=len(tiled_map.object_groups) - 1,
        )

        has_size = "width" in attrib or "height" in attrib
        width = _float_attr(attrib, "width", "object")
        height = _float_attr(attrib, "height", "object")
        # Centred positions use the size as written, before tile objects
        # take the map tile size
        written_size = (width, height)

        if "gid" in attrib:
            decoded = decode_gid(_packed_gid(attrib["gid"], "object", "gid"))
            obj.gid = decoded.gid
            obj.flipped_horizontally = decoded.flipped_horizontally
            obj.flipped_vertically = decoded.flipped_vertically
            obj.flipped_diagonally = decoded.flipped_diagonally
            obj.kind = ObjectKind.TILE
            if not has_size:
                width, height = tiled_map.tilewidth, tiled_map.tileheight
        elif width or height:
            obj.kind = ObjectKind.RECTANGLE

        obj.size = (width, height)

        x = _float_attr(attrib, "x", "object")
        y = _float_attr(attrib, "y", "object")
        obj.position = self._object_position(x, y, obj.size, written_size, obj.kind)

        if obj.rotation:
            logger.debug("Object %d keeps rotation %s in degrees", obj.id, obj.rotation)

        group.objects.append(obj)

    def _object_position(self, x: float, y: float, size, written_size,
                         kind: ObjectKind):
        """Convert a Tiled top-left/+y-down position to engine coordinates."""
        map_height = self.map.pixel_height

        if self.options.object_anchor is ObjectAnchor.CENTER:
            width, height = written_size
            pos_y = map_height - (y + height * 0.5)
            if kind is ObjectKind.TILE:
                pos_y += self.map.tileheight
            return (x + width * 0.5, pos_y)

        width, height = size
        return (x, map_height - y - height)

    def _start_point_list(self, attrib: Dict[str, str], element: str,
                          kind: ObjectKind, closed: bool):
        obj = self.current_object(f"{element} data")
        points = parse_points(attrib.get("points"), element)
        obj.kind = kind
        obj.points = points
        obj.path = build_path(points, closed=closed)

    def _start_polygon(self, attrib: Dict[str, str]):
        self._start_point_list(attrib, "polygon", ObjectKind.POLYGON, closed=True)

    def _start_polyline(self, attrib: Dict[str, str]):
        self._start_point_list(attrib, "polyline", ObjectKind.POLYLINE, closed=False)

    def _start_ellipse(self, attrib: Dict[str, str]):
        if self.scope is not ElementType.OBJECT:
            logger.debug("Ignoring <ellipse> outside an object")
            return
        self.current_object("ellipse data").kind = ObjectKind.ELLIPSE

    def _start_point(self, attrib: Dict[str, str]):
        # Point objects keep kind UNSET and a zero size
        logger.debug("Point object")

    def _start_property(self, attrib: Dict[str, str]):
        bag = self._property_bag()
        if bag is None:
            return

        name = attrib.get("name")
        if name is None:
            logger.warning("Ignoring <property> without a name")
            return

        if "value" in attrib:
            bag[name] = attrib["value"]
        else:
            # Multi-line string values are written as element text
            self._pending_property = (bag, name)
            self._property_chunks = []

    def _finish_property(self):
        if self._pending_property is None:
            return
        bag, name = self._pending_property
        bag[name] = "".join(self._property_chunks)
        self._pending_property = None
        self._property_chunks = []

    def _property_bag(self) -> Optional[Dict[str, str]]:
        scope = self.scope
        if scope is ElementType.MAP:
            return self.map.properties
        if scope is ElementType.LAYER:
            return self.current_tile_layer("property data").properties
        if scope is ElementType.OBJECTGROUP:
            return self.current_object_group("object group property").properties
        if scope is ElementType.OBJECT:
            return self.current_object("object property").properties
        if scope is ElementType.IMAGELAYER:
            return self.current_image_layer("image layer property").properties
        if scope is ElementType.NONE:
            raise StructuralViolationError(
                "Error parsing property data. There is no map, layer, "
                "object group, object or image layer to associate it with!",
                element="property",
            )
        logger.debug("Dropping property of unmodelled <%s>", scope.value)
        return None

    def _start_imagelayer(self, attrib: Dict[str, str]):
        layer = ImageLayer(
            name=attrib.get("name", ""),
            visible=_visible_attr(attrib),
            offsetx=_float_attr(attrib, "offsetx", "imagelayer"),
            offsety=_float_attr(attrib, "offsety", "imagelayer"),
            opacity=_float_attr(attrib, "opacity", "imagelayer", default=1.0),
        )
        self.map.image_layers.append(layer)

    def _start_image(self, attrib: Dict[str, str]):
        image = Image(
            source=attrib.get("source", ""),
            width=_int_attr(attrib, "width", "image", default=0),
            height=_int_attr(attrib, "height", "image", default=0),
            trans=attrib.get("trans"),
        )
        if self.scope is not ElementType.IMAGELAYER:
            logger.debug("Ignoring <image source=%r> outside an image layer", image.source)
            return
        self.current_image_layer("image").image = image

    # -------------------------------------------------------------------------
    # CSV tile data
    # -------------------------------------------------------------------------

    def _decode_csv_tile_data(self):
        """
        Decode the accumulated CSV payload into the current tile layer.

        Every field is validated before the layer is touched, so a failed
        decode never leaves a half-filled grid behind.
        """
        text = self.data_buffer
        self.parsing_data = False
        self._data_chunks = []

        layer = self.current_tile_layer("tile data")
        tiled_map = self.map
        width = tiled_map.width

        fields = text.split(",")
        expected = width * tiled_map.height
        if len(fields) != expected:
            raise DataShapeMismatchError(expected, len(fields))

        packed = [_packed_gid(f.replace("\n", "").strip(), "data", "gid") for f in fields]

        layer_index = len(tiled_map.tile_layers) - 1
        for i, value in enumerate(packed):
            decoded = decode_gid(value)
            column = i % width
            row = i // width
            rect = tiled_map.tile_rect(column, row)
            layer.set_tile(Tile(
                gid=decoded.gid,
                column=column,
                row=row,
                rect=rect,
                position=rect.center,
                flipped_horizontally=decoded.flipped_horizontally,
                flipped_vertically=decoded.flipped_vertically,
                flipped_diagonally=decoded.flipped_diagonally,
                layer_index=layer_index,
            ))
