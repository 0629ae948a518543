import json
import os

import pytest

from region_select.config import DEFAULT_LOCALE_PATH
from region_select.shared.data_source import FileRegionSource, LocaleBundle, RegionSourceError
from region_select.shared.regions import RegionLookupError, World, resolve_parent

from conftest import DATA_DIR, LOCALE_DIR, OVERLAY_DIR


def _source(*paths, locale="en"):
    bundle = LocaleBundle([DEFAULT_LOCALE_PATH, str(LOCALE_DIR)], locale)
    return FileRegionSource([str(p) for p in paths], bundle)


def test_loads_countries_with_locale_names():
    world = _source(DATA_DIR).world()

    assert isinstance(world, World)
    assert sorted(world.subregions.codes()) == ["ES", "EU", "OC"]
    assert world.coded("OC").name == "Oceania"
    assert world.coded("oc").type == "country"


def test_nested_subregions():
    world = _source(DATA_DIR).world()

    airstrip_one = world.coded("OC").subregions.coded("AO")
    assert airstrip_one.name == "Airstrip One"
    assert airstrip_one.subregions.coded("LO").name == "London"
    assert not world.coded("ES").has_subregions


def test_world_is_cached_until_reload():
    source = _source(DATA_DIR)

    first = source.world()
    assert source.world() is first
    assert source.reload() is not first


def test_overlay_paths_merge_disable_and_add():
    world = _source(DATA_DIR, OVERLAY_DIR).world()

    assert world.coded("ES") is None
    assert world.coded("EU").type == "superstate"
    assert world.coded("EU").name == "Eurasia"
    assert world.coded("GI").name == "Gilead"
    assert world.coded("OC").subregions.coded("AO") is not None


def test_locale_fallback_to_default_locale():
    world = _source(DATA_DIR, locale="de").world()

    assert world.coded("OC").name == "Ozeanien"
    assert world.coded("EU").name == "Eurasia"


def test_name_falls_back_to_code(tmp_path):
    (tmp_path / "world.json").write_text(json.dumps([{"code": "XX"}]))

    world = FileRegionSource([str(tmp_path)]).world()

    assert world.coded("XX").name == "XX"


def test_prompt_text_translated():
    assert LocaleBundle([DEFAULT_LOCALE_PATH], "de").prompt_text() == "Bitte auswählen"
    assert LocaleBundle([DEFAULT_LOCALE_PATH], "xx").prompt_text() == "Please select"
    assert LocaleBundle([], "en").prompt_text() == "Please select"


def test_paths_may_be_a_pathsep_string():
    source = FileRegionSource(os.pathsep.join([str(DATA_DIR), str(OVERLAY_DIR)]))

    assert source.data_paths == [str(DATA_DIR), str(OVERLAY_DIR)]


def test_invalid_json_raises(tmp_path):
    (tmp_path / "world.json").write_text("[{")

    with pytest.raises(RegionSourceError, match="Invalid JSON"):
        FileRegionSource([str(tmp_path)]).world()


def test_non_list_file_raises(tmp_path):
    (tmp_path / "world.json").write_text(json.dumps({"code": "XX"}))

    with pytest.raises(RegionSourceError, match="must hold a list"):
        FileRegionSource([str(tmp_path)]).world()


def test_entry_without_code_raises(tmp_path):
    (tmp_path / "world.json").write_text(json.dumps([{"name": "Nowhere"}]))

    with pytest.raises(RegionSourceError, match="without a code"):
        FileRegionSource([str(tmp_path)]).world()


def test_load_is_logged(caplog):
    caplog.set_level("INFO", logger="region_select.data")

    _source(DATA_DIR).world()

    assert any("[REGION-DATA]" in message and "countries=3" in message for message in caplog.messages)


def test_resolve_parent_variants():
    world = _source(DATA_DIR).world()
    oceania = world.coded("OC")

    assert resolve_parent(world, "OC") is oceania
    assert resolve_parent(world, ["OC", "AO"]).code == "AO"
    assert resolve_parent(world, oceania) is oceania
    assert resolve_parent(world, []) is world


def test_resolve_parent_unknown_codes():
    world = _source(DATA_DIR).world()

    with pytest.raises(RegionLookupError):
        resolve_parent(world, "ZZ")
    with pytest.raises(RegionLookupError, match="OC/ZZ"):
        resolve_parent(world, ["OC", "ZZ"])
    with pytest.raises(RegionLookupError):
        resolve_parent(world, 42)
