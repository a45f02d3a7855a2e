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

import pydantic
import pytest

from ..properties import (
    CategorizedSymbology,
    Category,
    GraduatedSymbology,
    LabelConfig,
    LayerProperties,
    SingleSymbology,
    Style,
    fallback_style,
    single_symbology,
)


def graduated(**kwargs):
    params = dict(
        field="area",
        class_count=3,
        breaks=[1, 2, 3],
        colors=["#a", "#b", "#c"],
        min=0,
        max=3,
    )
    params.update(kwargs)
    return GraduatedSymbology(**params)


def test_single_style():
    symbology = single_symbology("#112233", fill_opacity=0.5, border_width=1)
    assert symbology.style == Style(
        fill_color="#112233", border_color="#112233", border_width=1, fill_opacity=0.5
    )
    assert symbology.style.to_leaflet() == {
        "fillColor": "#112233",
        "color": "#112233",
        "weight": 1,
        "fillOpacity": 0.5,
    }


def test_single_defaults_from_settings():
    symbology = single_symbology()
    assert symbology.fill_color == "#3388ff"
    assert symbology.fill_opacity == 0.7


def test_graduated_lengths_must_match():
    with pytest.raises(pydantic.ValidationError):
        graduated(colors=["#a", "#b"])

    with pytest.raises(pydantic.ValidationError):
        graduated(class_count=2)


def test_graduated_breaks_strictly_increasing():
    with pytest.raises(pydantic.ValidationError):
        graduated(breaks=[1, 1, 3])


def test_categorized_values_unique():
    with pytest.raises(pydantic.ValidationError):
        CategorizedSymbology(
            field="kind",
            categories=[
                Category(value="a", color="#1", label="a"),
                Category(value="a", color="#2", label="a"),
            ],
        )


def test_category_for():
    symbology = CategorizedSymbology(
        field="kind", categories=[Category(value="a", color="#1", label="a")]
    )
    assert symbology.category_for("a").color == "#1"
    assert symbology.category_for("b") is None


def test_properties_are_frozen():
    props = LayerProperties(symbology=single_symbology())

    with pytest.raises(pydantic.ValidationError):
        props.labels = LabelConfig(enabled=True)


def test_replace_validates():
    props = LayerProperties(symbology=single_symbology())
    replaced = props.replace(labels=LabelConfig(enabled=True, field="name"))

    assert replaced.labels.field == "name"
    assert props.labels.enabled is False

    with pytest.raises(pydantic.ValidationError):
        props.replace(labels={"position": "nowhere"})


def test_symbology_from_dict():
    props = LayerProperties(
        symbology={"type": "graduated", "field": "area", "class_count": 1,
                   "breaks": [3], "colors": ["#c"], "min": 0, "max": 3}
    )  # fmt: skip
    assert isinstance(props.symbology, GraduatedSymbology)

    props = LayerProperties(
        symbology={"type": "single", "fill_color": "#1", "border_color": "#2"}
    )
    assert isinstance(props.symbology, SingleSymbology)


def test_fallback_style():
    assert fallback_style().fill_color == "#999999"
