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

import html

from mapgrid.config import get_settings


def _truncate(value, max_length):
    if isinstance(value, str) and len(value) > max_length:
        return value[:max_length] + "..."

    return value


def popup_fields(record, layer, hidden=()):
    """The ``(field, value)`` pairs shown in the popup of a record.

    Parameters
    ----------
    record : Record
        The record.
    layer : Layer
        The layer the record belongs to.
    hidden : iterable(str), optional
        Fields the viewer is not permitted to see.

    Returns
    -------
    list(tuple(str, any))
        The configured popup fields in order, without the geometry field and
        without fields whose value is ``None``. Long text is truncated.
    """
    max_length = get_settings().popup_value_max_length
    hidden = set(hidden)
    hidden.add(layer.geometry_field)
    pairs = []

    for name in layer.properties.popup.fields:
        if name in hidden:
            continue

        value = record.get(name)
        if value is None:
            continue

        pairs.append((name, _truncate(value, max_length)))

    return pairs


def render_popup_html(record, layer, hidden=()):
    """The popup content of a record as an HTML fragment."""
    popup = layer.properties.popup
    pairs = popup_fields(record, layer, hidden=hidden)

    parts = [
        '<div class="feature-popup" style="max-width: {}px">'.format(popup.max_width)
    ]
    parts.append("<h4>{}</h4>".format(html.escape(layer.name)))

    if not pairs:
        parts.append('<p class="popup-empty">No popup fields configured</p>')
    else:
        for name, value in pairs:
            parts.append(
                '<div class="popup-field"><strong>{}:</strong> {}</div>'.format(
                    html.escape(name), html.escape(str(value))
                )
            )

    parts.append("</div>")
    return "".join(parts)
