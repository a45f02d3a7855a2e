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

"""A rendering surface on an ``ipyleaflet`` map, for use in Jupyter.

Requires the optional visualization dependencies::

    $ pip install --upgrade 'mapgrid[visualization]'
"""

import html

try:
    import ipyleaflet
    import ipywidgets
except ImportError as e:
    raise ImportError(
        "Optional dependencies needed for map visualization are missing.\n"
        "Please install `ipyleaflet`, or better:\n"
        "$ pip install --upgrade 'mapgrid[visualization]'\n"
        "Then restart Jupyter and re-run the notebook."
    ) from e

from ..common.shapely_support import geometry_like_to_shapely
from .labels import label_direction
from .surface import RenderSurface


def _label_html(text, labels):
    style = "font-size: {}px; color: {}; white-space: nowrap;".format(
        labels.font_size, labels.color
    )
    if labels.background:
        style += " background: rgba(255, 255, 255, 0.8); padding: 1px 4px;"

    return '<span style="{}">{}</span>'.format(style, html.escape(text))


class LeafletSurface(RenderSurface):
    """Draws features as ``ipyleaflet.GeoJSON`` layers on a map.

    Parameters
    ----------
    map : ipyleaflet.Map, optional
        The map to draw on. A new map is created if omitted.
    """

    def __init__(self, map=None):
        self.map = map if map is not None else ipyleaflet.Map(scroll_wheel_zoom=True)
        self._shapes = {}
        self._labels = {}

    def _shape(self, feature):
        shape = self._shapes.get(feature)

        if shape is None:
            shape = ipyleaflet.GeoJSON(data=feature.__geo_interface__, name=feature.id)
            self._shapes[feature] = shape

        return shape

    def _add(self, layer):
        if layer not in self.map.layers:
            self.map.add(layer)

    def _remove(self, layer):
        if layer is not None and layer in self.map.layers:
            self.map.remove(layer)

    def show(self, feature):
        self._add(self._shape(feature))

        label = self._labels.get(feature)
        if label is not None:
            self._add(label)

    def hide(self, feature):
        self._remove(self._shapes.get(feature))
        self._remove(self._labels.get(feature))

    def is_visible(self, feature):
        shape = self._shapes.get(feature)
        return shape is not None and shape in self.map.layers

    def set_style(self, feature, style):
        self._shape(feature).style = style.to_leaflet()

    def set_label(self, feature, text, labels):
        visible = self.is_visible(feature)
        self._remove(self._labels.pop(feature, None))

        if text is None:
            return

        point = geometry_like_to_shapely(feature).representative_point()
        _, (dx, dy) = label_direction(labels.position)
        marker = ipyleaflet.Marker(
            location=(point.y, point.x),
            draggable=False,
            icon=ipyleaflet.DivIcon(
                html=_label_html(text, labels), icon_anchor=(-dx, -dy)
            ),
        )
        self._labels[feature] = marker

        if visible:
            self._add(marker)

    def set_popup(self, feature, html):
        shape = self._shape(feature)

        if html is None:
            shape.popup = None
        else:
            shape.popup = ipywidgets.HTML(value=html)

    def discard(self, feature):
        self.hide(feature)
        self._shapes.pop(feature, None)
        self._labels.pop(feature, None)

    def fit_bounds(self, bounds):
        """Zoom the map to ``(min_lng, min_lat, max_lng, max_lat)`` bounds."""
        if bounds is None:
            return

        west, south, east, north = bounds
        self.map.fit_bounds([[south, west], [north, east]])
