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

"""Conversions between geometry primitives, GeoJSON and Shapely shapes."""

from collections import abc

import geojson
import shapely.geometry
import shapely.geometry.base

# geojson rounds coordinates to 6 digits unless told otherwise
_FULL_PRECISION = 40


def geometry_like_to_shapely(geometry):
    """Turn anything geometry-like into a Shapely shape.

    Parameters
    ----------
    geometry : dict or object
        A Shapely shape, a GeoJSON mapping (Features and FeatureCollections
        included) or any object with a ``__geo_interface__``, like the
        geometry primitives and layer features.

    Returns
    -------
    shapely.geometry.base.BaseGeometry

    Raises
    ------
    TypeError
        If `geometry` is none of the above.
    ValueError
        If it is not valid GeoJSON or lies outside of longitude/latitude range.
    """
    if isinstance(geometry, shapely.geometry.base.BaseGeometry):
        return geometry

    if not isinstance(geometry, abc.Mapping):
        geometry = getattr(geometry, "__geo_interface__", None)

        if geometry is None:
            raise TypeError("Expected GeoJSON or a __geo_interface__ object")

    try:
        shape = shapely.geometry.shape(as_geojson_geometry(geometry))
    except (AttributeError, TypeError, KeyError) as e:
        raise ValueError("Not a Shapely geometry: {}".format(geometry)) from e

    if not shape.is_empty:
        check_wgs84_bounds(shape.bounds)

    return shape


def as_geojson_geometry(geojson_dict):
    """The geometry of a GeoJSON mapping as a ``geojson`` object.

    A Feature gives its geometry, a FeatureCollection the GeometryCollection
    of its feature geometries; Shapely handles neither.
    """
    geoj = _to_geojson(geojson_dict)

    if isinstance(geoj, geojson.Feature):
        return _to_geojson(geojson_dict["geometry"])

    if isinstance(geoj, geojson.FeatureCollection):
        geometries = []

        for feature in geojson_dict.get("features", []):
            if not isinstance(feature, abc.Mapping) or "geometry" not in feature:
                raise ValueError("Not a GeoJSON feature: {}".format(feature))

            geometries.append(_to_geojson(feature["geometry"]))

        return geojson.GeometryCollection(geometries)

    return geoj


def _to_geojson(geojson_dict):
    data = dict(geojson_dict, precision=_FULL_PRECISION)

    try:
        geoj = geojson.GeoJSON.to_instance(data, strict=True)
    except (TypeError, KeyError, ValueError) as e:
        raise ValueError("Not valid GeoJSON ({}): {}".format(e, geojson_dict)) from e

    if hasattr(geoj, "precision"):
        del geoj.precision

    return geoj


def check_valid_bounds(bounds):
    """Check that `bounds` is a ``(minx, miny, maxx, maxy)`` sequence.

    Degenerate bounds, like those of a single point, are fine.

    Raises
    ------
    TypeError
        If `bounds` is not a list or tuple.
    ValueError
        If it doesn't hold four values or a minimum exceeds its maximum.
    """
    if not isinstance(bounds, (list, tuple)):
        raise TypeError(
            "Bounds must be a (minx, miny, maxx, maxy) list or tuple, got {}".format(
                type(bounds).__name__
            )
        )

    if len(bounds) != 4:
        raise ValueError(
            "Bounds must be (minx, miny, maxx, maxy), got {} values".format(
                len(bounds)
            )
        )

    minx, miny, maxx, maxy = bounds

    if minx > maxx or miny > maxy:
        raise ValueError(
            "Bounds {} are not ordered as (minx, miny, maxx, maxy)".format(bounds)
        )


def check_wgs84_bounds(bounds):
    """Check that `bounds` are valid and within longitude/latitude range.

    Raises
    ------
    ValueError
        If they are not.
    """
    check_valid_bounds(bounds)
    minx, miny, maxx, maxy = bounds

    if minx < -180 or maxx > 180 or miny < -90 or maxy > 90:
        raise ValueError(
            "Bounds {} are outside the longitude/latitude range".format(bounds)
        )


def union_bounds(bounds_iter):
    """The bounds enclosing all of the given bounds.

    ``None`` entries are skipped; with nothing left the union is ``None``.
    """
    union = None

    for bounds in bounds_iter:
        if bounds is None:
            continue

        check_valid_bounds(bounds)

        if union is None:
            union = tuple(bounds)
        else:
            union = (
                min(union[0], bounds[0]),
                min(union[1], bounds[1]),
                max(union[2], bounds[2]),
                max(union[3], bounds[3]),
            )

    return union


__all__ = [
    "as_geojson_geometry",
    "check_valid_bounds",
    "check_wgs84_bounds",
    "geometry_like_to_shapely",
    "union_bounds",
]
