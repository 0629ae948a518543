import pytest

from region_select.app import create_app, db, get_helpers
from region_select.models import RegionRow, SqlRegionSource, seed_regions
from region_select.shared.regions import Region, RegionCollection, World

from conftest import file_source_config


def test_seed_and_load_round_trip(app, world):
    count = seed_regions(db.session, world)

    assert count == 5
    assert RegionRow.query.count() == 5

    loaded = SqlRegionSource(db.session).world()
    assert sorted(loaded.subregions.codes()) == ["ES", "EU", "OC"]
    airstrip_one = loaded.coded("OC").subregions.coded("AO")
    assert airstrip_one.name == "Airstrip One"
    assert airstrip_one.type == "province"
    assert airstrip_one.subregions.coded("LO").name == "London"


def test_seed_replaces_existing_rows(app, world):
    seed_regions(db.session, world)
    smaller = World([Region("GI", "Gilead", "country")])

    count = seed_regions(db.session, smaller)

    assert count == 1
    assert [row.code for row in RegionRow.query.all()] == ["GI"]


def test_children_keep_source_order(app):
    seed_regions(
        db.session,
        World(
            [
                Region(
                    "OC",
                    "Oceania",
                    subregions=RegionCollection([Region("ZZ", "Zed"), Region("AA", "Aye")]),
                )
            ]
        ),
    )

    loaded = SqlRegionSource().world()

    assert loaded.coded("OC").subregions.codes() == ["ZZ", "AA"]


def test_database_source_backs_helpers():
    application = create_app(file_source_config(REGION_SOURCE="database"))
    with application.app_context():
        db.create_all()
        seed_regions(
            db.session,
            World([Region("OC", "Oceania"), Region("ES", "Eastasia")]),
        )
        helpers = get_helpers(application)

        html = helpers.country_select_tag("country", "OC")

        assert '<option value="OC" selected="selected">Oceania</option>' in html
        assert html.index("Eastasia") < html.index("Oceania")
        db.session.remove()


@pytest.mark.no_smoke
def test_seed_is_logged(app, world, caplog):
    caplog.set_level("INFO", logger="region_select.data")

    seed_regions(db.session, world)

    assert any("[REGION-SEED] rows=5" in message for message in caplog.messages)
