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

"""Planar distance and area approximations for interactive measuring.

These are not geodesic computations; they are accurate enough for measuring
small features on a web map.
"""

import math

EARTH_RADIUS = 6371000.0  #: Mean earth radius in meters
METERS_PER_DEGREE = 111320.0  #: Length of one degree of latitude in meters


def _latlng(point):
    if hasattr(point, "lat"):
        return float(point.lat), float(point.lng)

    lat, lng = point
    return float(lat), float(lng)


def _round(value):
    # Half-up rounding, as users expect for displayed measurements
    return int(math.floor(value + 0.5))


def distance_meters(points):
    """Length in meters of the path through the given points.

    Each segment uses the equirectangular approximation.

    Parameters
    ----------
    points : list
        :py:class:`~mapgrid.core.geometry.primitives.Point` instances or
        ``(lat, lng)`` pairs.
    """
    coords = [_latlng(point) for point in points]
    total = 0.0

    for (lat1, lng1), (lat2, lng2) in zip(coords, coords[1:]):
        phi1, phi2 = math.radians(lat1), math.radians(lat2)
        x = math.radians(lng2 - lng1) * math.cos((phi1 + phi2) / 2)
        y = phi2 - phi1
        total += EARTH_RADIUS * math.hypot(x, y)

    return total


def area_square_meters(points):
    """Area in square meters of the polygon through the given points.

    Uses the shoelace formula on degrees, scaled by the length of a degree at
    the latitude of the first point. Fewer than 3 points have no area.
    """
    coords = [_latlng(point) for point in points]

    if len(coords) < 3:
        return 0.0

    area = 0.0
    for (lat1, lng1), (lat2, lng2) in zip(coords, coords[1:] + coords[:1]):
        area += lat1 * lng2 - lat2 * lng1

    area = abs(area) / 2
    return area * METERS_PER_DEGREE * METERS_PER_DEGREE * math.cos(
        math.radians(coords[0][0])
    )


def format_distance(meters):
    """Format a distance as ``"<n> m"`` below 1000 m or ``"<n.nn> km"``."""
    if meters < 1000:
        return "{} m".format(_round(meters))

    return "{:.2f} km".format(meters / 1000)


def format_area(square_meters):
    """Format an area as ``"<n> m²"`` below one hectare or ``"<n.nn> ha"``."""
    if square_meters < 10000:
        return "{} m²".format(_round(square_meters))

    return "{:.2f} ha".format(square_meters / 10000)


def measure_distance(points):
    """The formatted length of the path through the given points."""
    return format_distance(distance_meters(points))


def measure_area(points):
    """The formatted area of the polygon through the given points."""
    return format_area(area_square_meters(points))
