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

import unittest

from .. import Point, measure_area, measure_distance
from ..measure import area_square_meters, distance_meters, format_area


class TestMeasure(unittest.TestCase):
    def test_distance_short(self):
        # 0.001 degree of latitude is about 111 m
        assert measure_distance([(0, 0), (0.001, 0)]) == "111 m"

    def test_distance_long(self):
        assert measure_distance([Point(0, 0), Point(1, 0)]) == "111.19 km"

    def test_distance_path(self):
        one = distance_meters([(0, 0), (1, 0)])
        assert abs(distance_meters([(0, 0), (1, 0), (2, 0)]) - 2 * one) < 1e-6

    def test_distance_single_point(self):
        assert measure_distance([(0, 0)]) == "0 m"

    def test_area_too_few_points(self):
        assert measure_area([(0, 0), (1, 1)]) == "0 m²"

    def test_area_small(self):
        # 0.0001 x 0.0001 degree square at the equator
        points = [(0, 0), (0, 0.0001), (0.0001, 0.0001), (0.0001, 0)]
        assert measure_area(points) == "124 m²"

    def test_area_hectares(self):
        points = [(0, 0), (0, 0.01), (0.01, 0.01), (0.01, 0)]
        assert measure_area(points) == "123.92 ha"

    def test_area_orientation(self):
        points = [(0, 0), (0, 1), (1, 1)]
        reverse = [(0, 0), (1, 1), (0, 1)]
        assert area_square_meters(points) == area_square_meters(reverse)

    def test_format_area_rounds_half_up(self):
        assert format_area(0.5) == "1 m²"
