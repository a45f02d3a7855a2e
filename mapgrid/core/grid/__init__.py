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

from ..store import FieldSchema, FieldType
from .fieldtypes import (
    convert_value,
    detect_field_type,
    infer_field_type,
    infer_schema,
)
from .grid import (
    AttributeGrid,
    CommitFailure,
    CommitResult,
    GridState,
    PendingEdit,
)

__all__ = [
    "AttributeGrid",
    "CommitFailure",
    "CommitResult",
    "FieldSchema",
    "FieldType",
    "GridState",
    "PendingEdit",
    "convert_value",
    "detect_field_type",
    "infer_field_type",
    "infer_schema",
]
