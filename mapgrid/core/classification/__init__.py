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

from .classify import (
    ClassificationMethod,
    bucket_index,
    category_value,
    classify,
    compute_categorized,
    compute_graduated,
    legend,
    numeric_values,
    style_for_record,
)
from .ramps import RAMPS, category_colors, ramp_colors, ramp_names

__all__ = [
    "ClassificationMethod",
    "RAMPS",
    "bucket_index",
    "category_colors",
    "category_value",
    "classify",
    "compute_categorized",
    "compute_graduated",
    "legend",
    "numeric_values",
    "ramp_colors",
    "ramp_names",
    "style_for_record",
]
