import logging
import os
from functools import wraps

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from jinja2 import pass_context

db = SQLAlchemy()

from .config import build_region_config, load_config
from .forms.region_select import RegionHelpers

logger = logging.getLogger("region_select.app")


def _with_template_object(helper):
    """Let ``country_select("user", "country")`` find ``user`` in the template context."""

    @pass_context
    @wraps(helper)
    def wrapper(context, object_name, method, *args, **kwargs):
        if "template_object" not in kwargs:
            kwargs["template_object"] = context.get(str(object_name))
        return helper(object_name, method, *args, **kwargs)

    return wrapper


def register_helpers(app: Flask, helpers: RegionHelpers) -> None:
    app.extensions["region_select"] = helpers
    app.jinja_env.globals["country_select"] = _with_template_object(helpers.country_select)
    app.jinja_env.globals["subregion_select"] = _with_template_object(helpers.subregion_select)
    app.jinja_env.globals["country_select_tag"] = helpers.country_select_tag
    app.jinja_env.globals["subregion_select_tag"] = helpers.subregion_select_tag
    app.jinja_env.globals["region_options_for_select"] = helpers.region_options_for_select
    app.jinja_env.globals["region_form_for"] = helpers.form_for


def get_helpers(app: Flask) -> RegionHelpers:
    return app.extensions["region_select"]


def create_app(config_overrides=None):
    app = Flask(__name__, template_folder="templates")
    app.secret_key = os.getenv("SECRET_KEY", "dev")
    load_config(app, config_overrides)

    db.init_app(app)

    region_config = build_region_config(app.config)
    register_helpers(app, RegionHelpers(region_config))
    logger.info(
        "[REGION-SELECT] source=%s policy=%s suppress_duplicate_selection=%s",
        app.config["REGION_SOURCE"],
        region_config.policy.value,
        region_config.suppress_duplicate_selection,
    )

    @app.get("/health")
    def health():  # pragma: no cover - simple healthcheck
        return "OK", 200

    from .routes.regions import bp as regions_bp

    app.register_blueprint(regions_bp)

    return app
