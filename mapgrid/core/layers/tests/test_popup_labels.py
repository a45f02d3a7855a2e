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

from ...store import Record
from ..labels import label_direction, label_for
from ..layer import LayerConfig, build_layer
from ..popup import popup_fields, render_popup_html
from ..properties import LabelConfig, LabelPosition, PopupConfig


class TestLabels(unittest.TestCase):
    def setUp(self):
        layer = build_layer(
            [
                Record("a", {"name": "Well", "geometry": "POINT(1 1)"}),
                Record("b", {"name": "", "geometry": "POINT(2 2)"}),
            ],
            LayerConfig(id="l", name="L"),
        )
        self.feature_a, self.feature_b = layer.features

    def test_disabled(self):
        labels = LabelConfig(enabled=False, field="name")
        assert label_for(self.feature_a, labels) is None

    def test_enabled(self):
        labels = LabelConfig(enabled=True, field="name")
        assert label_for(self.feature_a, labels) == "Well"
        assert label_for(self.feature_b, labels) is None

    def test_no_field(self):
        assert label_for(self.feature_a, LabelConfig(enabled=True)) is None

    def test_directions(self):
        assert label_direction(LabelPosition.TOP) == ("top", (0, -10))
        assert label_direction("bottom") == ("bottom", (0, 10))
        assert label_direction("left") == ("left", (-10, 0))
        assert label_direction("right") == ("right", (10, 0))
        assert label_direction("center") == ("center", (0, 0))
        assert label_direction("auto") == ("center", (0, 0))


class TestPopup(unittest.TestCase):
    def setUp(self):
        self.record = Record(
            "a",
            {
                "name": "Well <1>",
                "depth": 0,
                "notes": "x" * 150,
                "owner": None,
                "geometry": "POINT(1 1)",
            },
        )
        self.layer = build_layer([self.record], LayerConfig(id="l", name="Wells"))

    def test_fields(self):
        pairs = popup_fields(self.record, self.layer)

        assert [name for name, _ in pairs] == ["name", "depth", "notes"]
        assert dict(pairs)["depth"] == 0
        assert dict(pairs)["notes"] == "x" * 100 + "..."

    def test_hidden_fields(self):
        pairs = popup_fields(self.record, self.layer, hidden=["depth"])
        assert [name for name, _ in pairs] == ["name", "notes"]

    def test_geometry_never_shown(self):
        self.layer.properties = self.layer.properties.replace(
            popup=PopupConfig(fields=("geometry", "name"))
        )
        assert popup_fields(self.record, self.layer) == [("name", "Well <1>")]

    def test_html(self):
        html = render_popup_html(self.record, self.layer)

        assert "max-width: 300px" in html
        assert "<h4>Wells</h4>" in html
        assert "<strong>name:</strong> Well &lt;1&gt;" in html

    def test_html_empty(self):
        self.layer.properties = self.layer.properties.replace(popup=PopupConfig())
        html = render_popup_html(self.record, self.layer)
        assert "No popup fields configured" in html
