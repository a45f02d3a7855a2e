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

"""Lenient Well-Known-Text reader and writer.

The reader accepts the WKT found in spreadsheet-like text fields: keywords in
any case, arbitrary whitespace around parentheses and commas, an optional
``SRID=<n>;`` prefix, open polygon rings, and both ``MULTIPOINT((1 2),(3 4))``
and ``MULTIPOINT(1 2, 3 4)``. Coordinate pairs outside longitude/latitude range
are dropped rather than failing the geometry. Anything that does not yield a
complete geometry parses to ``None``.
"""

import math
import re

from mapgrid.exceptions import GeometryParseError

from .primitives import (
    GeometryType,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    is_valid_latlng,
)

_srid_re = re.compile(r"^\s*SRID\s*=\s*\d+\s*;", re.IGNORECASE)
_keyword_re = re.compile(r"^([A-Za-z]+)\s*(.*)$", re.DOTALL)
_separator_re = re.compile(r"\s*([(),])\s*")
_multipoint_split_re = re.compile(r"\),\(|\),(?=[^(])|,(?=\()|,")


def parse_geometry(wkt):
    """Parse a WKT string into a geometry primitive.

    Parameters
    ----------
    wkt : str
        The geometry text, e.g. ``"POINT(4.47 52.11)"``. Coordinates are in
        ``lon lat`` order.

    Returns
    -------
    Geometry or None
        The parsed primitive with coordinates in ``(lat, lng)`` order, or
        ``None`` when the text is empty, malformed, of an unsupported type, or
        holds no valid coordinates. This function never raises.
    """
    if not isinstance(wkt, str):
        return None

    text = _srid_re.sub("", wkt).strip()
    match = _keyword_re.match(text)

    if match is None:
        return None

    keyword, body = match.group(1).upper(), match.group(2).strip()
    parser = _PARSERS.get(keyword)

    if parser is None or not _is_enclosed(body):
        return None

    # Normalize whitespace around separators so that splitting is exact
    body = _separator_re.sub(r"\1", body)[1:-1]

    try:
        return parser(body)
    except (ValueError, IndexError):
        return None


def parse_geometry_strict(wkt):
    """Parse a WKT string, raising instead of returning ``None``.

    Raises
    ------
    GeometryParseError
        If the text cannot be parsed into a geometry.
    """
    geometry = parse_geometry(wkt)

    if geometry is None:
        raise GeometryParseError(wkt)

    return geometry


def _is_enclosed(body):
    if len(body) < 2 or body[0] != "(" or body[-1] != ")":
        return False

    depth = 0
    for char in body:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False

    return depth == 0


def _parse_pair(token):
    """Parse ``"<lon> <lat>"`` into ``(lat, lng)`` or ``None``."""
    parts = token.strip("() ").split()

    if len(parts) < 2:
        return None

    try:
        lng, lat = float(parts[0]), float(parts[1])
    except ValueError:
        return None

    if not (math.isfinite(lng) and math.isfinite(lat)):
        return None

    if not is_valid_latlng(lat, lng):
        return None

    return (lat, lng)


def _parse_pairs(text):
    pairs = (_parse_pair(token) for token in text.strip("()").split(","))
    return [pair for pair in pairs if pair is not None]


def _parse_ring(text):
    coords = _parse_pairs(text)

    if len(coords) < 3:
        return None

    if coords[0] != coords[-1]:
        coords.append(coords[0])

    if len(coords) < 4:
        return None

    return tuple(coords)


def _parse_rings(text):
    rings = (_parse_ring(ring) for ring in text.split("),("))
    rings = tuple(ring for ring in rings if ring is not None)

    return Polygon(rings) if rings else None


def _parse_point(body):
    if "(" in body or "," in body:
        return None

    pair = _parse_pair(body)

    if pair is None:
        return None

    return Point(*pair)


def _parse_multipoint(body):
    pairs = (_parse_pair(token) for token in _multipoint_split_re.split(body))
    points = tuple(Point(*pair) for pair in pairs if pair is not None)

    return MultiPoint(points) if points else None


def _parse_linestring(body):
    if "(" in body:
        return None

    coords = _parse_pairs(body)

    return LineString(tuple(coords)) if len(coords) >= 2 else None


def _parse_multilinestring(body):
    lines = []

    for text in body.split("),("):
        coords = _parse_pairs(text)
        if len(coords) >= 2:
            lines.append(LineString(tuple(coords)))

    return MultiLineString(tuple(lines)) if lines else None


def _parse_polygon(body):
    if not body.startswith("("):
        return None

    return _parse_rings(body)


def _parse_multipolygon(body):
    if not body.startswith("(("):
        return None

    polygons = []

    for text in body.split(")),(("):
        polygon = _parse_rings(text.strip("()"))
        if polygon is not None:
            polygons.append(polygon)

    return MultiPolygon(tuple(polygons)) if polygons else None


_PARSERS = {
    "POINT": _parse_point,
    "MULTIPOINT": _parse_multipoint,
    "LINESTRING": _parse_linestring,
    "MULTILINESTRING": _parse_multilinestring,
    "POLYGON": _parse_polygon,
    "MULTIPOLYGON": _parse_multipolygon,
}


def _format_number(value):
    return "%.15g" % value


def _format_coords(coords):
    return ", ".join(
        "{} {}".format(_format_number(lng), _format_number(lat)) for lat, lng in coords
    )


def _format_rings(polygon):
    return ", ".join("({})".format(_format_coords(ring)) for ring in polygon.rings)


def to_wkt(geometry):
    """Render a geometry primitive as WKT in ``lon lat`` order.

    Raises
    ------
    TypeError
        If the given object is not a geometry primitive.
    """
    geometry_type = getattr(geometry, "type", None)

    if geometry_type == GeometryType.POINT:
        return "POINT ({})".format(_format_coords([geometry.coords]))
    elif geometry_type == GeometryType.MULTIPOINT:
        return "MULTIPOINT ({})".format(
            ", ".join(
                "({})".format(_format_coords([p.coords])) for p in geometry.points
            )
        )
    elif geometry_type == GeometryType.LINESTRING:
        return "LINESTRING ({})".format(_format_coords(geometry.coords))
    elif geometry_type == GeometryType.MULTILINESTRING:
        return "MULTILINESTRING ({})".format(
            ", ".join(
                "({})".format(_format_coords(line.coords)) for line in geometry.lines
            )
        )
    elif geometry_type == GeometryType.POLYGON:
        return "POLYGON ({})".format(_format_rings(geometry))
    elif geometry_type == GeometryType.MULTIPOLYGON:
        return "MULTIPOLYGON ({})".format(
            ", ".join("({})".format(_format_rings(p)) for p in geometry.polygons)
        )

    raise TypeError("Not a geometry primitive: {!r}".format(geometry))
