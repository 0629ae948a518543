from region_select.app import create_app, db, get_helpers

import click
from flask import current_app
from flask.cli import FlaskGroup

from region_select.config import build_region_config
from region_select.shared.regions import RegionLookupError


def create_region_app():
    return create_app()


cli = FlaskGroup(create_app=create_region_app)


@cli.command("init-db")
def init_db():
    """Create the regions table."""
    from region_select.models import RegionRow  # noqa: F401

    db.create_all()
    click.echo("Database initialized")


@cli.command("seed-regions")
@click.option(
    "--from-source",
    "source_name",
    type=click.Choice(["iso", "files"]),
    default="iso",
    show_default=True,
    help="Region source to copy into the database",
)
def seed_regions_cmd(source_name: str):
    """Copy a region source into the regions table."""
    from region_select.models import RegionRow, seed_regions  # noqa: F401

    config = dict(current_app.config)
    config["REGION_SOURCE"] = source_name
    try:
        region_config = build_region_config(config)
    except ValueError as exc:
        raise click.ClickException(str(exc))
    db.create_all()
    count = seed_regions(db.session, region_config.world())
    helpers = get_helpers(current_app)
    reload = getattr(helpers.config.source, "reload", None)
    if reload is not None and current_app.config.get("REGION_SOURCE") == "database":
        reload()
    click.echo(f"Seeded {count} regions")


@cli.command("list-regions")
@click.argument("codes", nargs=-1)
def list_regions(codes):
    """Print code and name of the children of a region path (countries if empty)."""
    helpers = get_helpers(current_app)
    try:
        parent = helpers.resolve_parent(list(codes))
    except RegionLookupError as exc:
        raise click.ClickException(str(exc))
    for region in sorted(parent.subregions, key=lambda r: r.name):
        click.echo(f"{region.code}\t{region.name}")


if __name__ == "__main__":
    cli()
