# Copyright 2024 The Mapgrid Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json

import click

from mapgrid.config import get_settings, select_env

from ...classification import classify, legend
from ...filters import FilterOperator, FilterRule, apply_filters
from ...geometry import GeometryType, measure_area, measure_distance, parse_geometry
from ...layers import LayerConfig, MemorySurface, build_layer
from ...store import TableClient
from .. import version as version_module


@click.group(help="Map layer and attribute grid command-line interface")
@click.option(
    "--env", help="The environment to use", envvar="MAPGRID_ENV", default=None
)
@click.pass_context
def cli(ctx, env):
    if env:
        select_env(env)
    ctx.obj = get_settings()


@cli.command()
def version():
    """Print the version of the CLI"""
    click.echo(version_module.__version__)


@cli.command()
@click.pass_context
def env(ctx):
    """Print the selected environment"""
    click.echo(ctx.obj.env)


@cli.command()
@click.argument("text")
def wkt(text):
    """Parse WKT and print it as GeoJSON"""
    geometry = parse_geometry(text)

    if geometry is None:
        raise click.ClickException("Not a valid geometry: {}".format(text[:100]))

    click.echo(json.dumps(geometry.__geo_interface__))

    if geometry.type is GeometryType.LINESTRING:
        click.echo("Length: {}".format(measure_distance(geometry.coords)))
    elif geometry.type is GeometryType.POLYGON:
        click.echo("Area: {}".format(measure_area(geometry.exterior[:-1])))


def _parse_rule(text):
    try:
        field, operator, value = (text.split(":", 2) + [None])[:3]
        return FilterRule(field=field, operator=FilterOperator(operator), value=value)
    except ValueError:
        raise click.BadParameter(
            "Expected FIELD:OPERATOR[:VALUE] with an operator in {}, got {!r}".format(
                ", ".join(FilterOperator), text
            )
        ) from None


@cli.command()
@click.argument("table_id")
@click.option("--geometry-field", default="geometry", show_default=True)
@click.option("--field", help="Field to classify")
@click.option(
    "--mode",
    type=click.Choice(["graduated", "categorized"]),
    default="graduated",
    show_default=True,
)
@click.option("--classes", default=5, show_default=True, help="Graduated classes")
@click.option("--ramp", default=None, help="Graduated color ramp")
@click.option(
    "--filter",
    "filters",
    multiple=True,
    help="Filter rule FIELD:OPERATOR[:VALUE], may be repeated",
)
def layer(table_id, geometry_field, field, mode, classes, ramp, filters):
    """Build a layer from a table and summarize it"""
    rules = [_parse_rule(text) for text in filters]
    records = TableClient.get_default_client().list_records(table_id)
    config = LayerConfig(
        id=table_id, name=table_id, table_id=table_id, geometry_field=geometry_field
    )
    built = build_layer(records, config)

    click.echo("Records: {}".format(len(built.records)))
    click.echo("Features: {}".format(len(built.features)))

    if rules:
        visible = apply_filters(built, rules, MemorySurface())
        click.echo("Visible: {}".format(visible))

    bounds = built.bounds
    if bounds is not None:
        click.echo("Bounds: {:.6f} {:.6f} {:.6f} {:.6f}".format(*bounds))

    if field:
        params = {}
        if mode == "graduated":
            params = {"class_count": classes, "color_ramp": ramp}

        for label, color in legend(classify(built, mode, field, **params)):
            click.echo("{}  {}".format(color, label))
