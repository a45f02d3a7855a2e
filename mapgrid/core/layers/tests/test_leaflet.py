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

ipyleaflet = pytest.importorskip("ipyleaflet")

from ...store import Record  # noqa: E402
from ..layer import LayerConfig, build_layer  # noqa: E402
from ..leaflet import LeafletSurface  # noqa: E402
from ..properties import LabelConfig, Style  # noqa: E402


def make_feature():
    layer = build_layer(
        [Record("a", {"name": "A", "geometry": "POLYGON((0 0,2 0,2 2,0 0))"})],
        LayerConfig(id="l", name="L"),
    )
    return layer.features[0]


def test_show_hide():
    surface = LeafletSurface()
    feature = make_feature()

    surface.show(feature)
    assert surface.is_visible(feature)

    surface.hide(feature)
    assert not surface.is_visible(feature)


def test_style_and_popup():
    surface = LeafletSurface()
    feature = make_feature()

    surface.set_style(feature, Style(fill_color="#ff0000", border_color="#00ff00"))
    surface.set_popup(feature, "<b>A</b>")

    shape = surface._shapes[feature]
    assert shape.style["fillColor"] == "#ff0000"
    assert shape.popup.value == "<b>A</b>"


def test_label_follows_visibility():
    surface = LeafletSurface()
    feature = make_feature()
    labels = LabelConfig(enabled=True, field="name", position="top")

    surface.show(feature)
    surface.set_label(feature, "A", labels)
    marker = surface._labels[feature]
    assert marker in surface.map.layers

    surface.hide(feature)
    assert marker not in surface.map.layers

    surface.set_label(feature, None, labels)
    assert feature not in surface._labels
