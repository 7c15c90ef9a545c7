"""
Exceptions raised while loading and decoding TMX maps.

Every failure is terminal for the parse that raised it: no partially built
map is ever handed back to the caller. Catch TMXError to handle them all.
"""

from typing import Optional, Any


class TMXError(Exception):
    """Base class for every error raised by tmx_scene."""

    def __init__(self, message: str, element: Optional[str] = None):
        super().__init__(message)
        self.element = element


class ResourceNotFoundError(TMXError, FileNotFoundError):
    """The named map resource could not be located or read."""

    def __init__(self, name: str, searched: Optional[list] = None):
        message = f"Unable to load TMX resource: {name}"
        if searched:
            message += " (searched: " + ", ".join(str(p) for p in searched) + ")"
        super().__init__(message)
        self.name = name
        self.searched = list(searched or [])


class MalformedDocumentError(TMXError):
    """The XML reader reported a syntax error."""

    def __init__(self, message: str, position: Optional[tuple] = None):
        super().__init__(message)
        self.position = position


class UnsupportedEncodingError(TMXError, ValueError):
    """Tile data uses an encoding other than CSV."""

    def __init__(self, encoding: str):
        super().__init__(
            f"Unsupported tile data encoding '{encoding}'; "
            "save the map with CSV layer format",
            element="data",
        )
        self.encoding = encoding


class StructuralViolationError(TMXError):
    """A child element appeared with no enclosing parent to attach to."""


class DataShapeMismatchError(TMXError, ValueError):
    """The CSV tile data does not hold exactly width * height entries."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Error parsing tile data: {expected} tiles were expected "
            f"but tile data contains {actual} tiles",
            element="data",
        )
        self.expected = expected
        self.actual = actual


class FieldFormatError(TMXError, ValueError):
    """A numeric attribute, CSV field or point list failed to parse."""

    def __init__(self, element: str, field: str, value: Any, reason: str = ""):
        message = f"Invalid value for '{field}' on <{element}>: {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message, element=element)
        self.field = field
        self.value = value
