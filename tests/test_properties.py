from __future__ import annotations

import pytest

import tmx_scene
from tmx_scene import StructuralViolationError
from tests._tmx_helpers import csv_layer, map_context, parse


def props(**values: str) -> str:
    rows = "".join(f'<property name="{key}" value="{value}"/>' for key, value in values.items())
    return f"<properties>{rows}</properties>"


def test_properties_route_to_their_owner() -> None:
    body = (
        props(music="town.ogg", weather="rain")
        + '<layer name="Ground">' + props(z="1") + '<data encoding="csv">1,0</data></layer>'
        + '<objectgroup name="Spawns">' + props(kind="spawn")
        + '<object id="1" name="player">' + props(hp="10", team="blue") + "</object>"
        + "</objectgroup>"
        + '<imagelayer name="Sky">' + props(parallax="0.5") + '<image source="sky.png"/></imagelayer>'
    )
    tiled_map = parse(body)

    assert tiled_map.properties == {"music": "town.ogg", "weather": "rain"}
    assert tiled_map.tile_layers[0].properties == {"z": "1"}
    assert tiled_map.object_groups[0].properties == {"kind": "spawn"}
    assert tiled_map.object_groups[0].objects[0].properties == {"hp": "10", "team": "blue"}
    assert tiled_map.image_layers[0].properties == {"parallax": "0.5"}


def test_duplicate_property_last_write_wins() -> None:
    body = '<properties><property name="a" value="1"/><property name="a" value="2"/></properties>'

    assert parse(body).properties == {"a": "2"}


def test_property_type_attribute_is_kept_as_string() -> None:
    body = '<properties><property name="solid" type="bool" value="true"/></properties>'

    assert parse(body).properties == {"solid": "true"}


def test_multiline_property_value_from_text() -> None:
    body = '<properties><property name="dialogue">Hello\nthere</property></properties>'

    assert parse(body).properties == {"dialogue": "Hello\nthere"}


def test_property_without_name_is_ignored() -> None:
    assert parse('<properties><property value="x"/></properties>').properties == {}


def test_property_before_map_is_fatal() -> None:
    with pytest.raises(StructuralViolationError):
        tmx_scene.parse_string('<property name="a" value="b"/>')


def test_property_with_no_context_is_fatal() -> None:
    context = tmx_scene.ParseContext()

    with pytest.raises(StructuralViolationError):
        context.start("property", {"name": "a", "value": "b"})


def test_property_after_a_closed_layer_has_no_owner() -> None:
    with pytest.raises(StructuralViolationError):
        parse(csv_layer("1,0") + props(late="yes"))


def test_properties_inside_unsupported_elements_are_dropped() -> None:
    body = (
        props(m="1")
        + '<tileset firstgid="1" name="terrain" tilewidth="32" tileheight="32">'
        + '<image source="terrain.png" width="64" height="64"/>'
        + '<tile id="0">' + props(solid="true")
        + '<animation><frame tileid="0" duration="100"/><frame tileid="1" duration="100"/></animation>'
        + "</tile></tileset>"
        + csv_layer("1,2")
    )
    tiled_map = parse(body)

    assert tiled_map.properties == {"m": "1"}
    assert tiled_map.tile_layers[0].properties == {}
    assert tiled_map.image_layers == []


def test_map_properties_after_editorsettings() -> None:
    body = (
        '<editorsettings><export target="m.lua" format="lua"/></editorsettings>'
        + props(music="town.ogg")
        + csv_layer("1,0")
    )

    assert parse(body).properties == {"music": "town.ogg"}


def test_map_properties_after_a_tileset() -> None:
    body = (
        '<tileset firstgid="1" name="terrain" tilewidth="32" tileheight="32">'
        + '<tile id="0">' + props(solid="true") + "</tile></tileset>"
        + props(music="town.ogg")
        + csv_layer("1,0")
    )

    assert parse(body).properties == {"music": "town.ogg"}


def test_tile_collision_objects_are_not_map_object_groups() -> None:
    body = (
        '<tileset firstgid="1" name="terrain" tilewidth="32" tileheight="32">'
        + '<tile id="0"><objectgroup draworder="index">'
        + '<object id="1" x="0" y="0" width="32" height="32">' + props(solid="true") + "</object>"
        + '<object id="2" x="0" y="0"><polygon points="0,0 8,0 8,8"/></object>'
        + "</objectgroup></tile></tileset>"
        + '<objectgroup name="Spawns"><object id="3" name="player"/></objectgroup>'
    )
    tiled_map = parse(body)

    assert [group.name for group in tiled_map.object_groups] == ["Spawns"]
    assert tiled_map.object_groups[0].objects[0].id == 3


def test_layers_inside_a_group_are_decoded() -> None:
    body = (
        '<group name="Scenery">' + props(tint="blue")
        + csv_layer("1,2", name="Back") + csv_layer("3,0", name="Front")
        + "</group>"
        + props(music="town.ogg")
    )
    tiled_map = parse(body)

    assert [layer.name for layer in tiled_map.tile_layers] == ["Back", "Front"]
    assert tiled_map.tile_layers[1].tile_at(0, 0).gid == 3
    assert tiled_map.properties == {"music": "town.ogg"}
    assert all(layer.properties == {} for layer in tiled_map.tile_layers)


def test_several_properties_share_the_same_scope() -> None:
    context = map_context()
    context.start("layer", {"name": "L"})
    context.start("properties", {})
    for name in ("a", "b", "c"):
        context.start("property", {"name": name, "value": name.upper()})
        context.end("property")
    context.end("properties")

    assert context.map.tile_layers[0].properties == {"a": "A", "b": "B", "c": "C"}
    assert context.scope is tmx_scene.ElementType.LAYER
    assert context.element is tmx_scene.ElementType.PROPERTY
