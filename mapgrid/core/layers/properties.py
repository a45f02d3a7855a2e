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

"""Immutable layer properties: symbology, labels and popup configuration.

Properties are never changed in place. Editors build a new
:py:class:`LayerProperties` (for example with :py:meth:`LayerProperties.replace`)
and apply it to a layer as a whole with
:py:func:`~mapgrid.core.layers.layer.update_layer_properties`.
"""

from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from strenum import StrEnum

from mapgrid.config import get_settings


class SymbologyType(StrEnum):
    """The classification applied to the features of a layer.

    Attributes
    ----------
    SINGLE : enum
        All features share one style.
    GRADUATED : enum
        Features are bucketed by numeric ranges of a field.
    CATEGORIZED : enum
        Features are styled by the distinct values of a field.
    """

    SINGLE = "single"
    GRADUATED = "graduated"
    CATEGORIZED = "categorized"


class LabelPosition(StrEnum):
    """Where a label is placed relative to its feature."""

    CENTER = "center"
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    AUTO = "auto"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Style(_Frozen):
    """The render style of a single feature."""

    fill_color: str
    border_color: str
    border_width: float = 2
    fill_opacity: float = 0.7

    def to_leaflet(self):
        """The style as Leaflet path options."""
        return {
            "fillColor": self.fill_color,
            "color": self.border_color,
            "weight": self.border_width,
            "fillOpacity": self.fill_opacity,
        }


class SingleSymbology(_Frozen):
    type: Literal["single"] = "single"
    fill_color: str
    border_color: str
    border_width: float = 2
    fill_opacity: float = Field(0.7, ge=0, le=1)

    @property
    def style(self):
        return Style(
            fill_color=self.fill_color,
            border_color=self.border_color,
            border_width=self.border_width,
            fill_opacity=self.fill_opacity,
        )


class GraduatedSymbology(_Frozen):
    """Numeric range classification.

    ``breaks[i]`` is the upper bound of class ``i``; the lower bound of the
    first class is ``min``.
    """

    type: Literal["graduated"] = "graduated"
    field: str
    class_count: int = Field(ge=1)
    breaks: Tuple[float, ...]
    colors: Tuple[str, ...]
    min: float
    max: float
    method: str = "equal"
    color_ramp: str = "blues"
    border_width: float = 2
    fill_opacity: float = Field(0.7, ge=0, le=1)

    @model_validator(mode="after")
    def _check_classes(self):
        if not len(self.breaks) == len(self.colors) == self.class_count:
            raise ValueError(
                "breaks ({}) and colors ({}) must both have class_count ({}) "
                "entries".format(len(self.breaks), len(self.colors), self.class_count)
            )

        if any(a >= b for a, b in zip(self.breaks, self.breaks[1:])):
            raise ValueError("breaks must be strictly increasing")

        return self


class Category(_Frozen):
    value: str
    color: str
    label: str
    count: int = 0


class CategorizedSymbology(_Frozen):
    type: Literal["categorized"] = "categorized"
    field: str
    categories: Tuple[Category, ...]
    border_width: float = 2
    fill_opacity: float = Field(0.7, ge=0, le=1)

    @model_validator(mode="after")
    def _check_unique(self):
        values = [category.value for category in self.categories]

        if len(set(values)) != len(values):
            raise ValueError("category values must be unique")

        return self

    def category_for(self, value):
        """The category of a stringified field value, or ``None``."""
        for category in self.categories:
            if category.value == value:
                return category

        return None


Symbology = Annotated[
    Union[SingleSymbology, GraduatedSymbology, CategorizedSymbology],
    Field(discriminator="type"),
]


class LabelConfig(_Frozen):
    enabled: bool = False
    field: Optional[str] = None
    font_size: int = 12
    color: str = "#333333"
    background: bool = True
    position: LabelPosition = LabelPosition.CENTER


class PopupConfig(_Frozen):
    enabled: bool = True
    fields: Tuple[str, ...] = ()
    max_width: int = 300


class LayerProperties(_Frozen):
    """The complete styling of a layer."""

    symbology: Symbology
    labels: LabelConfig = LabelConfig()
    popup: PopupConfig = PopupConfig()

    def replace(self, **changes):
        """A validated copy of these properties with the given members replaced.

        Examples
        --------
        >>> props = LayerProperties(symbology=single_symbology("#ff0000"))
        >>> props.replace(labels=LabelConfig(enabled=True, field="name")).labels.field
        'name'
        """
        data = dict(self)
        data.update(changes)
        return type(self)(**data)


def single_symbology(color=None, fill_opacity=None, border_width=None):
    """A :py:class:`SingleSymbology` filled and bordered with one color.

    Omitted values are taken from the ``default_color``,
    ``default_fill_opacity`` and ``default_border_width`` settings.
    """
    settings = get_settings()

    if color is None:
        color = settings.default_color
    if fill_opacity is None:
        fill_opacity = settings.default_fill_opacity
    if border_width is None:
        border_width = settings.default_border_width

    return SingleSymbology(
        fill_color=color,
        border_color=color,
        fill_opacity=fill_opacity,
        border_width=border_width,
    )


def fallback_style():
    """The neutral style of features a classification can't place."""
    color = get_settings().fallback_color
    return Style(fill_color=color, border_color=color)
