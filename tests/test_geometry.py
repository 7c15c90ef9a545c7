from __future__ import annotations

import numpy as np
import pytest

from tmx_scene import FieldFormatError, Rect, build_path, parse_points


def test_parse_points_flips_y() -> None:
    points = parse_points("0,0 10,0 10,10")

    assert points.shape == (3, 2)
    np.testing.assert_array_equal(points, [[0, 0], [10, 0], [10, -10]])


def test_parse_points_accepts_floats_and_negative_values() -> None:
    points = parse_points("1.5,-2.5 -3,4.25")

    np.testing.assert_allclose(points, [[1.5, 2.5], [-3.0, -4.25]])


@pytest.mark.parametrize("text", ["", "   ", None, "0,0 10", "a,b", "0,0  1,1", "1,2,3"])
def test_parse_points_rejects_malformed_lists(text) -> None:
    with pytest.raises(FieldFormatError) as excinfo:
        parse_points(text, "polyline")

    assert excinfo.value.element == "polyline"
    assert excinfo.value.field == "points"


def test_closed_path_returns_to_first_point() -> None:
    path = build_path(parse_points("0,0 10,0 10,10"), closed=True)

    assert path.closed
    assert len(path) == 4
    assert path.segment_count == 3
    np.testing.assert_array_equal(path.vertices[-1], path.vertices[0])


def test_open_path_stops_at_last_point() -> None:
    path = build_path(parse_points("0,0 10,0 10,10"), closed=False)

    assert not path.closed
    assert len(path) == 3
    assert path.segment_count == 2
    assert list(path.segments()) == [((0.0, 0.0), (10.0, 0.0)), ((10.0, 0.0), (10.0, -10.0))]


def test_single_point_path() -> None:
    path = build_path(parse_points("5,5"), closed=False)

    assert len(path) == 1
    assert path.segment_count == 0


def test_rect_center() -> None:
    assert Rect(32, 0, 32, 16).center == (48.0, 8.0)
