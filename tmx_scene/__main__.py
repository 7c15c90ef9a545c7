#!/usr/bin/env python3

"""
TMX Scene Inspector - decode a Tiled map and print what was found

Usage:
    python -m tmx_scene <map.tmx> [--anchor bottom-left|center] [-v]
"""

import argparse
import logging
import sys

from .config import ObjectAnchor, ParserOptions, setup_logging
from .errors import TMXError
from .loader import load


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmx_scene",
        description="Decode a Tiled TMX map and print its layers and objects.",
    )
    parser.add_argument("map", help="TMX file (the .tmx extension is optional)")
    parser.add_argument(
        "--anchor",
        choices=[anchor.value for anchor in ObjectAnchor],
        default=ObjectAnchor.BOTTOM_LEFT.value,
        help="where object positions are anchored (default: bottom-left)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--color", action="store_true", help="colour log output")
    return parser


def print_map(tiled_map):
    print(tiled_map.describe())

    if tiled_map.background_color:
        r, g, b, a = tiled_map.background_color
        print(f"Background: r={r:.3f} g={g:.3f} b={b:.3f} a={a:.3f}")

    for name, value in tiled_map.properties.items():
        print(f"  property {name} = {value}")

    for layer in tiled_map.tile_layers:
        hidden = "" if layer.visible else " (hidden)"
        print(f"Tile layer '{layer.name}'{hidden}: {layer.tile_count} tiles placed")

    for group in tiled_map.object_groups:
        hidden = "" if group.visible else " (hidden)"
        print(f"Object group '{group.name}'{hidden}: {len(group.objects)} objects")
        for obj in group.objects:
            x, y = obj.position
            w, h = obj.size
            print(f"  [{obj.id}] {obj.kind.name.lower()} '{obj.name}' "
                  f"at ({x:g}, {y:g}) size ({w:g}, {h:g})")

    for layer in tiled_map.image_layers:
        source = layer.image.source if layer.image else "-"
        print(f"Image layer '{layer.name}': {source} "
              f"offset ({layer.offsetx:g}, {layer.offsety:g}) opacity {layer.opacity:g}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.color)

    options = ParserOptions(object_anchor=ObjectAnchor(args.anchor))
    try:
        tiled_map = load(args.map, options=options)
    except TMXError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_map(tiled_map)
    return 0


if __name__ == "__main__":
    sys.exit(main())
