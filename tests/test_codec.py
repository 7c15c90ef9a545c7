from __future__ import annotations

import itertools

import pytest

from tmx_scene import decode_gid, encode_gid
from tmx_scene.codec import GID_MASK


def test_plain_gid_has_no_flags() -> None:
    decoded = decode_gid(5)

    assert decoded.gid == 5
    assert not decoded.flipped_horizontally
    assert not decoded.flipped_vertically
    assert not decoded.flipped_diagonally


@pytest.mark.parametrize(
    ("packed", "expected"),
    [
        (0x80000001, (1, True, False, False)),
        (0x40000002, (2, False, True, False)),
        (0x20000003, (3, False, False, True)),
        (0xE0000004, (4, True, True, True)),
        (0x80000000, (0, True, False, False)),
        (0xFFFFFFFF, (0x1FFFFFFF, True, True, True)),
    ],
)
def test_decode_known_values(packed: int, expected: tuple) -> None:
    assert tuple(decode_gid(packed)) == expected


@pytest.mark.parametrize(
    ("horizontal", "vertical", "diagonal"),
    list(itertools.product([False, True], repeat=3)),
)
def test_flags_are_independent(horizontal: bool, vertical: bool, diagonal: bool) -> None:
    packed = encode_gid(1234, horizontal, vertical, diagonal)

    decoded = decode_gid(packed)

    assert decoded.gid == packed & 0x1FFFFFFF == 1234
    assert decoded.flipped_horizontally is horizontal
    assert decoded.flipped_vertically is vertical
    assert decoded.flipped_diagonally is diagonal


def test_gid_mask_keeps_low_29_bits() -> None:
    assert GID_MASK == 0x1FFFFFFF
