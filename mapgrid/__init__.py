"""Map layers and attribute grids over tabular geometry records

.. code-block:: bash

    pip install mapgrid[visualization]

Turns records whose geometry is stored as Well-Known-Text into styled map
layers, and edits those records through a permission-aware attribute grid:

    * A forgiving **WKT parser** that drops invalid coordinates and rings
      instead of failing the whole layer
    * Single, graduated and categorized **classification** with generated colors
    * Per-field **permissions** from roles and explicit entries
    * **Batched editing** that writes one update per record and keeps
      failed edits for a retry
"""

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

from mapgrid import config
from mapgrid import exceptions
from mapgrid.core.client.version import __version__

from mapgrid.core.geometry import parse_geometry, to_wkt
from mapgrid.core.layers import LayerConfig, LayerProperties, build_layer
from mapgrid.core.layers.manager import LayerManager
from mapgrid.core.classification import classify
from mapgrid.core.permissions import PermissionResolver, User, resolve_permission
from mapgrid.core.grid import AttributeGrid
from mapgrid.core.filters import FilterRule, apply_filters
from mapgrid.core.store import MemoryStore, TableClient

select_env = config.select_env
get_settings = config.get_settings

__author__ = "The Mapgrid Authors"

__all__ = [
    "__version__",
    "AttributeGrid",
    "FilterRule",
    "LayerConfig",
    "LayerManager",
    "LayerProperties",
    "MemoryStore",
    "PermissionResolver",
    "TableClient",
    "User",
    "apply_filters",
    "build_layer",
    "classify",
    "config",
    "exceptions",
    "get_settings",
    "parse_geometry",
    "resolve_permission",
    "select_env",
    "to_wkt",
]
