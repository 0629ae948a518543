import os

from .forms.region_select import AssemblyPolicy, RegionSelectConfig
from .shared.data_source import FileRegionSource, LocaleBundle

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOCALE_PATH = os.path.join(PACKAGE_DIR, "locale")

REGION_SOURCES = ("iso", "files", "database")


def _flag(value, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _paths(value) -> list:
    if not value:
        return []
    if isinstance(value, str):
        return [p for p in value.split(os.pathsep) if p]
    return list(value)


def load_config(app, overrides=None):
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///:memory:")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["REGION_SOURCE"] = os.getenv("REGION_SOURCE", "iso")
    app.config["REGION_DATA_PATHS"] = _paths(os.getenv("REGION_DATA_PATHS"))
    # Bundled locale first so deployments can override individual keys
    app.config["REGION_LOCALE_PATHS"] = [DEFAULT_LOCALE_PATH] + _paths(
        os.getenv("REGION_LOCALE_PATHS")
    )
    app.config["REGION_LOCALE"] = os.getenv("REGION_LOCALE", "en")
    app.config["REGION_DEFAULT_LOCALE"] = os.getenv("REGION_DEFAULT_LOCALE", "en")
    app.config["REGION_SELECT_POLICY"] = os.getenv(
        "REGION_SELECT_POLICY", AssemblyPolicy.REQUIRED_FIELD_AWARE.value
    )
    app.config["REGION_SUPPRESS_DUPLICATE_SELECTION"] = _flag(
        os.getenv("REGION_SUPPRESS_DUPLICATE_SELECTION"), True
    )
    if overrides:
        app.config.update(overrides)


def build_region_config(config) -> RegionSelectConfig:
    """Construct the helper configuration from a Flask config mapping."""

    locale_bundle = LocaleBundle(
        _paths(config.get("REGION_LOCALE_PATHS")),
        config.get("REGION_LOCALE") or "en",
        config.get("REGION_DEFAULT_LOCALE") or "en",
    )
    source_name = (config.get("REGION_SOURCE") or "iso").strip().lower()
    if source_name == "files":
        data_paths = _paths(config.get("REGION_DATA_PATHS"))
        if not data_paths:
            raise ValueError("REGION_DATA_PATHS must be set when REGION_SOURCE=files")
        source = FileRegionSource(data_paths, locale_bundle)
    elif source_name == "database":
        from .models import SqlRegionSource  # local import to avoid circular import at module load

        source = SqlRegionSource()
    elif source_name == "iso":
        from .shared.iso_source import IsoRegionSource

        source = IsoRegionSource(locale_bundle)
    else:
        raise ValueError(
            f"Unknown REGION_SOURCE {source_name!r} (expected one of {', '.join(REGION_SOURCES)})"
        )
    return RegionSelectConfig(
        source=source,
        locale_bundle=locale_bundle,
        policy=AssemblyPolicy.parse(config.get("REGION_SELECT_POLICY")),
        suppress_duplicate_selection=_flag(
            config.get("REGION_SUPPRESS_DUPLICATE_SELECTION"), True
        ),
    )
