from flask import Blueprint, abort, current_app, request

from ..shared.regions import RegionLookupError

bp = Blueprint("regions", __name__, url_prefix="/regions")


def _priority_codes(raw: str | None) -> list[str]:
    return [code.strip() for code in (raw or "").split(",") if code.strip()]


@bp.get("/subregions")
@bp.get("/<path:codes>/subregions")
def subregion_select_fragment(codes: str = ""):
    """Return a ``<select>`` of subregions for a slash-separated parent path.

    Used by forms that refresh the state list when the country changes.
    ``/regions/subregions`` lists the top-level countries.
    """

    helpers = current_app.extensions["region_select"]
    path = [code for code in codes.split("/") if code]
    try:
        parent = helpers.resolve_parent(path)
    except RegionLookupError:
        abort(404)
    name = request.args.get("name") or "subregion_code"
    options = {"priority": _priority_codes(request.args.get("priority"))}
    prompt = request.args.get("prompt")
    if prompt:
        options["prompt"] = prompt
    html = helpers.subregion_select_tag(name, request.args.get("selected"), parent, options)
    return html, 200, {"Content-Type": "text/html; charset=utf-8"}
