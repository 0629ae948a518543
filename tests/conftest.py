import os
import pathlib
import re
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from region_select.app import create_app, db, get_helpers
from region_select.config import DEFAULT_LOCALE_PATH

TESTS_DIR = pathlib.Path(__file__).resolve().parent
DATA_DIR = TESTS_DIR / "data"
OVERLAY_DIR = TESTS_DIR / "data_overlay"
LOCALE_DIR = TESTS_DIR / "locale"


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "slow" in item.keywords or "quarantine" in item.keywords:
            continue
        item.add_marker("full")
        if "no_smoke" in item.keywords:
            continue
        item.add_marker("smoke")


def file_source_config(**overrides):
    config = {
        "REGION_SOURCE": "files",
        "REGION_DATA_PATHS": [str(DATA_DIR)],
        "REGION_LOCALE_PATHS": [DEFAULT_LOCALE_PATH, str(LOCALE_DIR)],
        "REGION_LOCALE": "en",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    }
    config.update(overrides)
    return config


@pytest.fixture
def app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    application = create_app(file_source_config())
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def helpers(app):
    return get_helpers(app)


@pytest.fixture
def world(helpers):
    return helpers.world


def clean_markup(markup) -> str:
    text = re.sub(r"\s+", " ", str(markup))
    text = re.sub(r">\s", ">", text)
    text = re.sub(r"\s<", "<", text)
    text = re.sub(r"\s/>", "/>", text)
    text = text.strip()

    def _sort_attrs(match):
        return " " + " ".join(sorted(match.group(0).strip().split(" ")))

    return re.sub(r'( [a-zA-Z_]*="[^"]*")+', _sort_attrs, text)


@pytest.fixture
def assert_markup():
    """Compare markup ignoring whitespace between tags and attribute order."""

    def _assert(expected, actual):
        assert clean_markup(actual) == clean_markup(expected)

    return _assert
