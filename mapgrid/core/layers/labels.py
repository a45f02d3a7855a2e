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

from .properties import LabelPosition

_OFFSETS = {
    LabelPosition.TOP: (0, -10),
    LabelPosition.BOTTOM: (0, 10),
    LabelPosition.LEFT: (-10, 0),
    LabelPosition.RIGHT: (10, 0),
}


def label_direction(position):
    """The tooltip direction and ``(x, y)`` pixel offset of a label position."""
    position = LabelPosition(position)

    if position is LabelPosition.AUTO:
        return str(LabelPosition.CENTER), (0, 0)

    return str(position), _OFFSETS.get(position, (0, 0))


def label_for(feature, labels):
    """The label text of a feature, or ``None`` if it has no label."""
    if not labels.enabled or not labels.field:
        return None

    value = feature.record.get(labels.field)

    if value is None or value == "":
        return None

    return str(value)
