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

"""Geometry primitives in ``(lat, lng)`` coordinate order.

All primitives are immutable. Coordinates are stored as ``(lat, lng)`` tuples,
the order used by web map rendering surfaces, while ``__geo_interface__`` and
``bounds`` use the GeoJSON ``(lng, lat)`` order so that the primitives can be
handed to Shapely or any other library that understands the geo interface.
"""

from dataclasses import dataclass
from typing import Tuple

from strenum import StrEnum

from ..common.shapely_support import geometry_like_to_shapely

LatLng = Tuple[float, float]

MIN_LAT, MAX_LAT = -90.0, 90.0
MIN_LNG, MAX_LNG = -180.0, 180.0


class GeometryType(StrEnum):
    """The kind of a geometry primitive.

    The values are the GeoJSON type names.
    """

    POINT = "Point"
    MULTIPOINT = "MultiPoint"
    LINESTRING = "LineString"
    MULTILINESTRING = "MultiLineString"
    POLYGON = "Polygon"
    MULTIPOLYGON = "MultiPolygon"


def is_valid_latlng(lat, lng):
    """Whether a pair lies within latitude and longitude range."""
    return MIN_LAT <= lat <= MAX_LAT and MIN_LNG <= lng <= MAX_LNG


def _lnglat(coords):
    return [[lng, lat] for lat, lng in coords]


class Geometry(object):
    """Base class of all geometry primitives."""

    type: GeometryType = None

    @property
    def __geo_interface__(self):
        return {"type": str(self.type), "coordinates": self._geojson_coordinates()}

    def _geojson_coordinates(self):
        raise NotImplementedError

    @property
    def shape(self):
        """shapely.geometry.base.BaseGeometry: This geometry as a Shapely shape."""
        return geometry_like_to_shapely(self)

    @property
    def bounds(self):
        """tuple: ``(min_lng, min_lat, max_lng, max_lat)`` of this geometry."""
        return tuple(self.shape.bounds)

    def parts(self):
        """The renderable members of this geometry.

        Multi-geometries of points and polygons render one member per part;
        everything else renders as a whole.
        """
        return [self]


@dataclass(frozen=True)
class Point(Geometry):
    lat: float
    lng: float

    type = GeometryType.POINT

    @property
    def coords(self) -> LatLng:
        return (self.lat, self.lng)

    def _geojson_coordinates(self):
        return [self.lng, self.lat]

    @property
    def bounds(self):
        return (self.lng, self.lat, self.lng, self.lat)


@dataclass(frozen=True)
class MultiPoint(Geometry):
    points: Tuple[Point, ...]

    type = GeometryType.MULTIPOINT

    def _geojson_coordinates(self):
        return [point._geojson_coordinates() for point in self.points]

    def parts(self):
        return list(self.points)


@dataclass(frozen=True)
class LineString(Geometry):
    coords: Tuple[LatLng, ...]

    type = GeometryType.LINESTRING

    def _geojson_coordinates(self):
        return _lnglat(self.coords)


@dataclass(frozen=True)
class MultiLineString(Geometry):
    lines: Tuple[LineString, ...]

    type = GeometryType.MULTILINESTRING

    def _geojson_coordinates(self):
        return [line._geojson_coordinates() for line in self.lines]


@dataclass(frozen=True)
class Polygon(Geometry):
    """A polygon; the first ring is the outer ring, any others are holes.

    Every ring is closed and has at least 4 coordinates.
    """

    rings: Tuple[Tuple[LatLng, ...], ...]

    type = GeometryType.POLYGON

    @property
    def exterior(self):
        return self.rings[0]

    @property
    def holes(self):
        return self.rings[1:]

    def _geojson_coordinates(self):
        return [_lnglat(ring) for ring in self.rings]


@dataclass(frozen=True)
class MultiPolygon(Geometry):
    polygons: Tuple[Polygon, ...]

    type = GeometryType.MULTIPOLYGON

    def _geojson_coordinates(self):
        return [polygon._geojson_coordinates() for polygon in self.polygons]

    def parts(self):
        return list(self.polygons)
