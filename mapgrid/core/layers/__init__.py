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

from .labels import label_direction, label_for
from .layer import (
    Feature,
    Layer,
    LayerConfig,
    build_layer,
    default_properties,
    features_for_record,
    update_layer_properties,
)
from .popup import popup_fields, render_popup_html
from .properties import (
    CategorizedSymbology,
    Category,
    GraduatedSymbology,
    LabelConfig,
    LabelPosition,
    LayerProperties,
    PopupConfig,
    SingleSymbology,
    Style,
    SymbologyType,
    fallback_style,
    single_symbology,
)
from .surface import MemorySurface, RenderSurface

# The layer manager depends on classification and filters, which in turn
# import the layer properties; import it from `mapgrid.core.layers.manager`.

__all__ = [
    "CategorizedSymbology",
    "Category",
    "Feature",
    "GraduatedSymbology",
    "LabelConfig",
    "LabelPosition",
    "Layer",
    "LayerConfig",
    "LayerProperties",
    "MemorySurface",
    "PopupConfig",
    "RenderSurface",
    "SingleSymbology",
    "Style",
    "SymbologyType",
    "build_layer",
    "default_properties",
    "fallback_style",
    "features_for_record",
    "label_direction",
    "label_for",
    "popup_fields",
    "render_popup_html",
    "single_symbology",
    "update_layer_properties",
]
