from __future__ import annotations

from pathlib import Path

import pytest

import tmx_scene
from tmx_scene import (
    FileLoader,
    MemoryLoader,
    ObjectAnchor,
    ParserOptions,
    ResourceNotFoundError,
    TiledMap,
)
from tests._tmx_helpers import csv_layer, tmx_document


def write_map(directory: Path, name: str = "level.tmx") -> Path:
    path = directory / name
    path.write_text(tmx_document(csv_layer("1,0")), encoding="utf-8")
    return path


def test_load_from_path(tmp_path: Path) -> None:
    path = write_map(tmp_path)

    tiled_map = tmx_scene.load(path)

    assert tiled_map.tile_layers[0].tile_at(0, 0).gid == 1


def test_default_extension_is_added(tmp_path: Path) -> None:
    write_map(tmp_path)

    tiled_map = TiledMap.load(str(tmp_path / "level"))

    assert tiled_map.width == 2


def test_search_paths(tmp_path: Path) -> None:
    maps = tmp_path / "maps"
    maps.mkdir()
    write_map(maps)
    options = ParserOptions(search_paths=[tmp_path / "other", maps])

    tiled_map = tmx_scene.load("level", options=options)

    assert tiled_map.tile_layers[0].name == "Ground"


def test_missing_resource(tmp_path: Path) -> None:
    with pytest.raises(ResourceNotFoundError) as excinfo:
        tmx_scene.load(tmp_path / "nowhere")

    assert isinstance(excinfo.value, FileNotFoundError)
    assert excinfo.value.name.endswith("nowhere")
    assert excinfo.value.searched == [tmp_path / "nowhere.tmx"]


def test_directory_is_not_a_resource(tmp_path: Path) -> None:
    (tmp_path / "dir.tmx").mkdir()

    with pytest.raises(ResourceNotFoundError):
        tmx_scene.load(tmp_path / "dir")


def test_file_loader_candidates(tmp_path: Path) -> None:
    loader = FileLoader(ParserOptions(search_paths=[tmp_path], default_extension=".tmx"))

    assert loader.candidates("a/b") == [Path("a/b.tmx"), tmp_path / "a" / "b.tmx"]
    assert loader.candidates(tmp_path / "c.xml") == [tmp_path / "c.xml"]


def test_memory_loader() -> None:
    data = tmx_document(csv_layer("0,7")).encode("utf-8")
    loader = MemoryLoader({"level1.tmx": data})

    tiled_map = tmx_scene.load("level1", loader=loader)

    assert tiled_map.tile_layers[0].tile_at(1, 0).gid == 7
    assert loader("level1.tmx") is data


def test_memory_loader_missing() -> None:
    with pytest.raises(ResourceNotFoundError):
        tmx_scene.load("level2", loader=MemoryLoader({}))


def test_custom_loader_callable() -> None:
    requested = []

    def loader(name):
        requested.append(name)
        return tmx_document().encode("utf-8")

    tmx_scene.load("bundle://level", loader=loader)

    assert requested == ["bundle://level"]


def test_options_accept_anchor_names() -> None:
    assert ParserOptions(object_anchor="center").object_anchor is ObjectAnchor.CENTER


def test_options_reject_bad_chunk_size() -> None:
    with pytest.raises(ValueError):
        ParserOptions(chunk_size=0)
