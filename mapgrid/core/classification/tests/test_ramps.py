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

import pytest

from ..ramps import RAMPS, category_colors, ramp_colors, ramp_names


def test_ramp_names():
    assert ramp_names() == ["blues", "greens", "oranges", "purples", "reds"]
    assert all(len(stops) == 9 for stops in RAMPS.values())


def test_sampling():
    blues = RAMPS["blues"]
    assert ramp_colors("blues", 9) == list(blues)
    assert ramp_colors("blues", 3) == [blues[0], blues[4], blues[8]]
    assert ramp_colors("blues", 1) == [blues[8]]


def test_more_classes_than_stops():
    colors = ramp_colors("greens", 12)
    assert len(colors) == 12
    assert colors[0] == RAMPS["greens"][0]
    assert colors[-1] == RAMPS["greens"][-1]
    assert set(colors) == set(RAMPS["greens"])


def test_unknown_ramp():
    assert ramp_colors("rainbow", 2) == ramp_colors("blues", 2)


def test_invalid_count():
    with pytest.raises(ValueError):
        ramp_colors("blues", 0)


def test_category_colors():
    assert category_colors(0) == []
    assert category_colors(1) == ["#d92626"]
    assert len(set(category_colors(10))) == 10
