"""
Resource loading and the XML reader bootstrap.

=============================================================================
LOADERS
=============================================================================

A loader is any callable that takes a resource name and returns the full
document as bytes, raising ResourceNotFoundError when it cannot:

    FileLoader    - files on disk, ".tmx" implied when the name has no suffix
    MemoryLoader  - a dict of name -> bytes (bundled maps, tests)

    level = load("maps/level1")                           # maps/level1.tmx
    level = load("level1", loader=MemoryLoader({"level1.tmx": data}))

=============================================================================
READER
=============================================================================

The bytes are fed in chunks to xml.etree.ElementTree.XMLParser with a
ParseContext as its target. XML syntax errors become MalformedDocumentError;
errors raised by the context itself pass through unchanged. Either way no
map is returned.

=============================================================================
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from .config import ParserOptions
from .errors import MalformedDocumentError, ResourceNotFoundError
from .model import TiledMap
from .parser import ParseContext

logger = logging.getLogger(__name__)

Loader = Callable[[str], bytes]


def _with_default_extension(name: Union[str, Path], extension: str) -> Path:
    path = Path(name)
    if not path.suffix and extension:
        path = path.with_name(f"{path.name}.{extension.lstrip('.')}")
    return path


class FileLoader:
    """Read map documents from the filesystem."""

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options or ParserOptions()

    def candidates(self, name: Union[str, Path]) -> List[Path]:
        path = _with_default_extension(name, self.options.default_extension)
        paths = [path]
        if not path.is_absolute():
            paths.extend(Path(base) / path for base in self.options.search_paths)
        return paths

    def __call__(self, name: Union[str, Path]) -> bytes:
        paths = self.candidates(name)
        for path in paths:
            if not path.is_file():
                continue
            try:
                data = path.read_bytes()
            except OSError as e:
                raise ResourceNotFoundError(str(name), [path]) from e
            logger.debug("Read %d bytes from %s", len(data), path)
            return data
        raise ResourceNotFoundError(str(name), paths)


class MemoryLoader:
    """Serve map documents from an in-memory mapping of name -> bytes."""

    def __init__(self, resources: Dict[str, bytes], default_extension: str = "tmx"):
        self.resources = dict(resources)
        self.default_extension = default_extension

    def __call__(self, name: Union[str, Path]) -> bytes:
        key = str(name)
        if key in self.resources:
            return self.resources[key]
        with_extension = str(_with_default_extension(key, self.default_extension))
        if with_extension in self.resources:
            return self.resources[with_extension]
        raise ResourceNotFoundError(key)


def _parse_chunks(chunks: Iterable[Union[bytes, str]],
                  options: ParserOptions) -> TiledMap:
    context = ParseContext(options)
    parser = ET.XMLParser(target=context)
    try:
        for chunk in chunks:
            parser.feed(chunk)
        return parser.close()
    except ET.ParseError as e:
        raise MalformedDocumentError(
            f"An error occurred while parsing data: {e}",
            getattr(e, "position", None),
        ) from e


def _split(data, size: int):
    for offset in range(0, len(data), size):
        yield data[offset:offset + size]


def parse_bytes(data: bytes, options: Optional[ParserOptions] = None) -> TiledMap:
    """Decode a complete TMX document held in memory."""
    options = options or ParserOptions()
    return _parse_chunks(_split(data, options.chunk_size), options)


def parse_string(text: str, options: Optional[ParserOptions] = None) -> TiledMap:
    options = options or ParserOptions()
    return _parse_chunks(_split(text, options.chunk_size), options)


def load(name: Union[str, Path], options: Optional[ParserOptions] = None,
         loader: Optional[Loader] = None) -> TiledMap:
    """
    Resolve a map resource and decode it.

    Parameters:
    -----------
    name : str or Path
        Resource name handed to the loader
    options : ParserOptions, optional
        Parser settings (object anchor, search paths, ...)
    loader : callable, optional
        Defaults to FileLoader(options)

    Raises:
    -------
    ResourceNotFoundError : before any parsing, if the loader cannot find it
    TMXError : any other decoding failure
    """
    options = options or ParserOptions()
    if loader is None:
        loader = FileLoader(options)

    data = loader(name)
    tiled_map = parse_bytes(data, options)
    logger.info("Loaded TMX %s: %s", name, tiled_map.describe())
    return tiled_map
