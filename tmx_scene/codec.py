"""
Global tile ID (GID) codec.

=============================================================================
PACKED GID LAYOUT
=============================================================================

Tiled stores each tile reference as an unsigned 32-bit integer. The three
highest bits carry orientation flags, the remaining 29 bits the tile ID:

    bit 31  30  29  28 ........................... 0
        H   V   D   |<-------- tile id ---------->|

    H = flipped horizontally
    V = flipped vertically
    D = flipped diagonally (x/y swapped, applied before H and V)

Any combination of the three flags is valid, so every 32-bit value decodes.

    decode_gid(0x80000005) -> DecodedGID(gid=5, flipped_horizontally=True, ...)

=============================================================================
"""

from typing import NamedTuple

# Tiled gid flags
FLIPPED_HORIZONTALLY_FLAG = 1 << 31
FLIPPED_VERTICALLY_FLAG = 1 << 30
FLIPPED_DIAGONALLY_FLAG = 1 << 29
FLIP_ALL = FLIPPED_HORIZONTALLY_FLAG | FLIPPED_VERTICALLY_FLAG | FLIPPED_DIAGONALLY_FLAG
GID_MASK = ~FLIP_ALL & 0xFFFFFFFF

MAX_PACKED_GID = 0xFFFFFFFF


class DecodedGID(NamedTuple):
    gid: int
    flipped_horizontally: bool
    flipped_vertically: bool
    flipped_diagonally: bool


def decode_gid(packed: int) -> DecodedGID:
    """Split a packed 32-bit value into the tile ID and its flip flags."""
    packed &= MAX_PACKED_GID
    return DecodedGID(
        packed & GID_MASK,
        bool(packed & FLIPPED_HORIZONTALLY_FLAG),
        bool(packed & FLIPPED_VERTICALLY_FLAG),
        bool(packed & FLIPPED_DIAGONALLY_FLAG),
    )


def encode_gid(gid: int, flipped_horizontally: bool = False,
               flipped_vertically: bool = False,
               flipped_diagonally: bool = False) -> int:
    """Pack a tile ID and flip flags back into the Tiled representation."""
    packed = gid & GID_MASK
    if flipped_horizontally:
        packed |= FLIPPED_HORIZONTALLY_FLAG
    if flipped_vertically:
        packed |= FLIPPED_VERTICALLY_FLAG
    if flipped_diagonally:
        packed |= FLIPPED_DIAGONALLY_FLAG
    return packed
